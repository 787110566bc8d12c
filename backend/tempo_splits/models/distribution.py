import uuid
import enum
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, DateTime, Integer, ForeignKey, Enum as SAEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tempo_splits.core.database import Base
from tempo_splits.models.split import AMOUNT


class DistributionTrigger(str, enum.Enum):
    manual = "manual"
    auto = "auto"
    api = "api"


class Distribution(Base):
    __tablename__ = "distributions"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    split_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("splits.id"), index=True, nullable=False)
    amount: Mapped[Decimal] = mapped_column(AMOUNT, nullable=False)
    triggered_by: Mapped[DistributionTrigger] = mapped_column(
        SAEnum(DistributionTrigger), nullable=False, default=DistributionTrigger.manual
    )
    triggered_by_address: Mapped[str | None] = mapped_column(String(42), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    payouts: Mapped[list["DistributionPayout"]] = relationship(
        back_populates="distribution", lazy="selectin", order_by="DistributionPayout.position", cascade="all, delete-orphan"
    )


class DistributionPayout(Base):
    __tablename__ = "distribution_payouts"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    distribution_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("distributions.id"), index=True, nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    recipient: Mapped[str] = mapped_column(String(42), index=True, nullable=False)
    amount: Mapped[Decimal] = mapped_column(AMOUNT, nullable=False)

    distribution: Mapped["Distribution"] = relationship(back_populates="payouts")
