from tempo_splits.models.split import Split, SplitRecipient
from tempo_splits.models.distribution import Distribution, DistributionPayout, DistributionTrigger
from tempo_splits.models.payment import Payment, PaymentLink, PaymentStatus

__all__ = [
    "Split", "SplitRecipient",
    "Distribution", "DistributionPayout", "DistributionTrigger",
    "Payment", "PaymentLink", "PaymentStatus",
]
