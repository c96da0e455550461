from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Date, DateTime, Text, JSON, Numeric
from sqlalchemy.orm import relationship
from agency.db.base import Base


class Client(Base):
    """
    Agency client with its pricing plan.

    Attributes:
        tiered_payments: JSON list of tier definitions applied in order from created_at
        final_services: JSON map service -> monthly rate once every tier has elapsed
        current_services / current_rate / current_tier_index: last resolved snapshot,
            written only by the tier resolver path (-1 means graduated)
    """
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=True)
    company = Column(String(255), nullable=True)
    company_address = Column(Text, nullable=True)
    gst_number = Column(String(50), nullable=True)
    poc_phone = Column(String(50), nullable=True)

    status = Column(String(20), nullable=False, default="active", index=True)  # active | inactive | pending
    payment_type = Column(String(20), nullable=False, default="monthly")  # monthly | weekly | per-post
    monthly_rate = Column(Numeric(12, 2), nullable=True)
    weekly_rate = Column(Numeric(12, 2), nullable=True)
    per_post_rates = Column(JSON, nullable=True, default=dict)
    next_payment = Column(Date, nullable=True, index=True)

    tiered_payments = Column(JSON, nullable=False, default=list)
    final_services = Column(JSON, nullable=False, default=dict)

    current_services = Column(JSON, nullable=True)
    current_rate = Column(Numeric(12, 2), nullable=True)
    current_tier_index = Column(Integer, nullable=True)

    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    payments = relationship("Payment", back_populates="client", passive_deletes=True)
    tasks = relationship("Task", back_populates="client", passive_deletes=True)

    def __repr__(self):
        return f"<Client(id={self.id}, name='{self.name}', tier={self.current_tier_index})>"
