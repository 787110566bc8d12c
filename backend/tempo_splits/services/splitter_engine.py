"""In-memory splitter: the payout rules of one split, independent of storage.

A ``Splitter`` mirrors the on-chain contract. It holds a configuration and a
cumulative distributed counter and only changes them through ``distribute``,
``update_shares``, ``activate`` and ``deactivate``. The database-backed
services build a ``Splitter`` from a locked row, run it and persist the result.
"""

import threading
from dataclasses import dataclass, field, replace
from typing import Sequence

from tempo_splits.core.errors import Inactive, Unauthorized, ZeroAmount
from tempo_splits.utils.share_utils import compute_payouts, validate_configuration


@dataclass(frozen=True)
class SplitConfiguration:
    """A validated, immutable recipient/share list.

    Attributes:
        recipients: Recipient addresses in payout order.
        shares: Basis points per recipient, same order.
        token: Payout token address.
        owner: Address allowed to change the configuration.
        active: Whether distributions are accepted.
    """

    recipients: tuple[str, ...]
    shares: tuple[int, ...]
    token: str
    owner: str
    active: bool = True

    @classmethod
    def create(
        cls,
        recipients: Sequence[str],
        shares: Sequence[int],
        token: str,
        owner: str,
        active: bool = True,
    ) -> "SplitConfiguration":
        validate_configuration(recipients, shares)
        return cls(
            recipients=tuple(r.lower() for r in recipients),
            shares=tuple(shares),
            token=token.lower(),
            owner=owner.lower(),
            active=active,
        )

    def is_owner(self, address: str) -> bool:
        return address.lower() == self.owner


@dataclass(frozen=True)
class DistributionEvent:
    recipient: str
    amount: int


def distribute(total_amount: int, config: SplitConfiguration) -> list[DistributionEvent]:
    """Compute the events of one distribution without touching any state."""
    if not config.active:
        raise Inactive("Splitter is not active")
    if total_amount <= 0:
        raise ZeroAmount("Amount must be greater than zero")
    payouts = compute_payouts(total_amount, config.shares)
    return [DistributionEvent(r, a) for r, a in zip(config.recipients, payouts)]


@dataclass
class Splitter:
    config: SplitConfiguration
    total_distributed: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def distribute(self, amount: int) -> list[DistributionEvent]:
        # Only one distribution per splitter at a time; others queue on the lock.
        with self._lock:
            events = distribute(amount, self.config)
            self.total_distributed += amount
            return events

    def update_shares(self, caller: str, recipients: Sequence[str], shares: Sequence[int]) -> SplitConfiguration:
        with self._lock:
            if not self.config.is_owner(caller):
                raise Unauthorized("Only owner")
            new_config = SplitConfiguration.create(
                recipients,
                shares,
                token=self.config.token,
                owner=self.config.owner,
                active=self.config.active,
            )
            self.config = new_config
            return new_config

    def _set_active(self, caller: str, active: bool) -> None:
        with self._lock:
            if not self.config.is_owner(caller):
                raise Unauthorized("Only owner")
            self.config = replace(self.config, active=active)

    def activate(self, caller: str) -> None:
        self._set_active(caller, True)

    def deactivate(self, caller: str) -> None:
        self._set_active(caller, False)
