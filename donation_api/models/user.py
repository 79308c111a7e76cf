"""User model."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import relationship

from donation_api.database import Base


class User(Base):
    """A donor, recipient or admin account."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    role = Column(String(50), default="donor", nullable=False)
    organization = Column(String(255), default="Individual Donor", nullable=False)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)
    address = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    city = Column(String(255), nullable=True)
    state = Column(String(50), nullable=True)
    zip = Column(Integer, nullable=True)
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    donation_type = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
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

    # Relationships
    donations = relationship(
        "Donation",
        primaryjoin="User.id == Donation.donor",
        viewonly=True,
        order_by="Donation.id",
    )
    # recipient 0 means unassigned, so there is no foreign key to join on
    received = relationship(
        "Donation",
        primaryjoin="User.id == foreign(Donation.recipient)",
        viewonly=True,
        order_by="Donation.id",
    )

    def __repr__(self) -> str:
        """String representation of User."""
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
