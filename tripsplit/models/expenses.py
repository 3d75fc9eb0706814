import enum
import uuid
from sqlalchemy.sql import func
from sqlalchemy import Column, String, DateTime, Date, DECIMAL, Enum, ForeignKey, Text
from tripsplit.db.database import Base


class ExpenseCategory(str, enum.Enum):
    accommodation = "accommodation"
    transportation = "transportation"
    food = "food"
    shopping = "shopping"
    entertainment = "entertainment"
    tickets = "tickets"
    other = "other"


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), unique=True, nullable=False)
    trip_id = Column(String, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    payer_id = Column(String, nullable=False, index=True)  # TripMember.user_id
    amount = Column(DECIMAL(12, 2), nullable=False)  # In the trip's reference unit
    original_amount = Column(DECIMAL(12, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    exchange_rate = Column(DECIMAL(12, 6), nullable=False, default=1)
    description = Column(Text, nullable=False)
    category = Column(Enum(ExpenseCategory), nullable=False, default=ExpenseCategory.other)
    date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)


class ExpenseSplit(Base):
    __tablename__ = "expense_splits"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), unique=True, nullable=False)
    expense_id = Column(String, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)  # TripMember.user_id
    share_amount = Column(DECIMAL(12, 2), nullable=False)
