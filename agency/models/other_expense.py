from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Date, DateTime, Text, Numeric
from agency.db.base import Base


class OtherExpense(Base):
    """Miscellaneous business expense (tools, ads, rent)"""
    __tablename__ = "other_expenses"

    id = Column(Integer, primary_key=True, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    expense_date = Column(Date, nullable=False, index=True)
    category = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<OtherExpense(id={self.id}, amount={self.amount}, date={self.expense_date})>"
