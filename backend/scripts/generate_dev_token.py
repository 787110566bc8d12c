"""Print a bearer token for a wallet address, signed with JWT_SECRET.

Usage: python -m scripts.generate_dev_token 0xYourWalletAddress [hours]
Run from the backend/ directory. For local development only; clients sign in
through POST /api/auth/wallet.
"""

import sys

from tempo_splits.core.auth import issue_wallet_token
from tempo_splits.utils.share_utils import is_valid_address


if __name__ == "__main__":
    if len(sys.argv) < 2 or not is_valid_address(sys.argv[1]):
        print(__doc__)
        sys.exit(1)
    hours = int(sys.argv[2]) if len(sys.argv) > 2 else 24
    print(issue_wallet_token(sys.argv[1], hours))
