import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, DateTime, Integer, Numeric, Boolean, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tempo_splits.core.database import Base
from tempo_splits.utils.share_utils import bps_to_percentage

# uint256 fits in 78 decimal digits
AMOUNT = Numeric(78, 0)


class Split(Base):
    __tablename__ = "splits"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    contract_address: Mapped[str] = mapped_column(String(42), unique=True, index=True, nullable=False)
    owner: Mapped[str] = mapped_column(String(42), index=True, nullable=False)
    token: Mapped[str] = mapped_column(String(42), nullable=False)
    token_symbol: Mapped[str | None] = mapped_column(String(16), nullable=True)
    token_decimals: Mapped[int] = mapped_column(Integer, default=6)

    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    auto_distribute: Mapped[bool] = mapped_column(Boolean, default=False)
    distribution_threshold: Mapped[Decimal] = mapped_column(AMOUNT, default=Decimal("0"))
    webhook_url: Mapped[str | None] = mapped_column(String, nullable=True)

    total_payments: Mapped[int] = mapped_column(Integer, default=0)
    total_received: Mapped[Decimal] = mapped_column(AMOUNT, default=Decimal("0"))
    total_distributed: Mapped[Decimal] = mapped_column(AMOUNT, default=Decimal("0"))

    created_tx: Mapped[str | None] = mapped_column(String(66), nullable=True)
    last_payment_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_distribution_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deactivated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    recipients: Mapped[list["SplitRecipient"]] = relationship(
        back_populates="split", lazy="selectin", order_by="SplitRecipient.position", cascade="all, delete-orphan"
    )

    @property
    def pending_balance(self) -> int:
        return int(self.total_received or 0) - int(self.total_distributed or 0)


class SplitRecipient(Base):
    __tablename__ = "split_recipients"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    split_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("splits.id"), index=True, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    address: Mapped[str] = mapped_column(String(42), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(50), default="")
    share_bps: Mapped[int] = mapped_column(Integer, nullable=False)

    split: Mapped["Split"] = relationship(back_populates="recipients")

    @property
    def percentage(self) -> Decimal:
        return bps_to_percentage(self.share_bps)
