from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, ForeignKey, Date, DateTime, Text, JSON, Numeric
from sqlalchemy.orm import relationship
from agency.db.base import Base


class Payment(Base):
    """
    Client payment entry.

    Completed payments count as revenue on their payment_date; pending and
    overdue ones are receivables.
    """
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_date = Column(Date, nullable=False, index=True)
    status = Column(String(20), nullable=False, default="completed", index=True)  # completed | pending | overdue
    type = Column(String(20), nullable=False, default="payment")  # payment | post | reminder
    description = Column(Text, nullable=True)
    post_count = Column(Integer, nullable=True)
    platform_breakdown = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    client = relationship("Client", back_populates="payments")

    def __repr__(self):
        return f"<Payment(id={self.id}, client_id={self.client_id}, amount={self.amount}, status='{self.status}')>"
