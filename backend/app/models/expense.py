from sqlalchemy import Column, String, Date, DateTime, Float, Enum as SQLEnum, Text, Index
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class ExpenseCategory(str, enum.Enum):
    """Kinds of running costs entered by admins"""
    PAPER = "paper"
    INK = "ink"
    ELECTRICITY = "electricity"
    MAINTENANCE = "maintenance"
    SALARY = "salary"
    RENT = "rent"
    OTHER = "other"


class DailyExpense(Base):
    """Ad hoc expense entered against a calendar day"""
    __tablename__ = "daily_expenses"

    __table_args__ = (
        Index('ix_daily_expenses_date', 'date'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    date = Column(Date, nullable=False)
    category = Column(SQLEnum(ExpenseCategory), nullable=False)
    amount = Column(Float, nullable=False)
    description = Column(Text, nullable=True)
    created_by = Column(String(255), nullable=True)  # admin email

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<DailyExpense {self.date} {self.category} {self.amount}>"
