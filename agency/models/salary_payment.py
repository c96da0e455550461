from datetime import datetime, timezone
from sqlalchemy import Column, Integer, ForeignKey, Date, DateTime, Text, Numeric
from sqlalchemy.orm import relationship
from agency.db.base import Base


class SalaryPayment(Base):
    """Salary paid to a team member"""
    __tablename__ = "salary_payments"

    id = Column(Integer, primary_key=True, index=True)
    team_member_id = Column(Integer, ForeignKey("team_members.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_date = Column(Date, nullable=False, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    team_member = relationship("TeamMember", back_populates="salary_payments")

    def __repr__(self):
        return f"<SalaryPayment(id={self.id}, team_member_id={self.team_member_id}, amount={self.amount})>"
