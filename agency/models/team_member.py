from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Date, DateTime, Text, Numeric
from sqlalchemy.orm import relationship
from agency.db.base import Base


class TeamMember(Base):
    """
    Agency staff member on monthly payroll.

    payment_date holds the next salary due date and moves forward one
    month each time a salary payment is recorded.
    """
    __tablename__ = "team_members"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    role = Column(String(100), nullable=False)
    salary = Column(Numeric(12, 2), nullable=False)
    status = Column(String(20), nullable=False, default="active", index=True)  # active | inactive | on_leave
    payment_date = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    salary_payments = relationship("SalaryPayment", back_populates="team_member", passive_deletes=True)

    def __repr__(self):
        return f"<TeamMember(id={self.id}, name='{self.name}', role='{self.role}', status='{self.status}')>"
