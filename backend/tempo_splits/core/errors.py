"""Error taxonomy shared by the distribution engine and the services around it.

Every failure is a local validation failure reported synchronously to the
caller. Nothing here is retried.
"""


class SplitError(ValueError):
    code = "SplitError"


class InvalidShareCount(SplitError):
    code = "InvalidShareCount"


class InvalidShareValue(SplitError):
    code = "InvalidShareValue"


class SharesNotFullyAllocated(SplitError):
    code = "SharesNotFullyAllocated"


class InvalidAddress(SplitError):
    code = "InvalidAddress"


class Inactive(SplitError):
    code = "Inactive"


class ZeroAmount(SplitError):
    code = "ZeroAmount"


class Unauthorized(SplitError):
    code = "Unauthorized"


class InsufficientBalance(SplitError):
    code = "InsufficientBalance"


class TokenMismatch(SplitError):
    code = "TokenMismatch"


class SplitNotFound(SplitError):
    code = "SplitNotFound"


class DuplicatePayment(SplitError):
    code = "DuplicatePayment"


class PaymentNotFound(SplitError):
    code = "PaymentNotFound"


class PaymentLinkUnavailable(SplitError):
    code = "PaymentLinkUnavailable"


class InvalidSignature(SplitError):
    code = "InvalidSignature"
