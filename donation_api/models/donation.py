"""Donation model."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from donation_api.database import Base


class Donation(Base):
    """A donation offered by a donor and optionally matched to a recipient."""

    __tablename__ = "donations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    category = Column(String(255), nullable=True)
    details = Column(Text, nullable=True)
    amount = Column(Integer, nullable=True)
    pickup_date = Column(DateTime(timezone=True), nullable=True)
    pickup_address = Column(String(512), nullable=True)
    donor = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # 0 until a recipient is assigned
    recipient = Column(Integer, default=0, nullable=False, index=True)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation of Donation."""
        return f"<Donation(id={self.id}, category={self.category}, donor={self.donor})>"
