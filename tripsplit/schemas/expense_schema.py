from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import date as date_type, datetime
from decimal import Decimal
from enum import Enum
from tripsplit.models.expenses import ExpenseCategory


class Currency(str, Enum):
    TWD = "TWD"
    JPY = "JPY"
    USD = "USD"
    EUR = "EUR"
    HKD = "HKD"


class ExpenseBase(BaseModel):
    original_amount: Decimal = Field(..., gt=0, decimal_places=2)
    currency: Currency
    exchange_rate: Decimal = Field(Decimal("1"), gt=0)
    description: str = Field(..., min_length=1)
    category: ExpenseCategory = ExpenseCategory.other
    date: date_type


class ExpenseCreate(ExpenseBase):
    payer_id: str
    split_with: List[str] = Field(..., min_length=1)


class ExpenseUpdate(BaseModel):
    original_amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    currency: Optional[Currency] = None
    exchange_rate: Optional[Decimal] = Field(None, gt=0)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[ExpenseCategory] = None


class ExpenseSplitOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    display_name: Optional[str] = None
    share_amount: Decimal


class ExpenseOut(ExpenseBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    trip_id: str
    payer_id: str
    payer_name: Optional[str] = None
    amount: Decimal
    created_at: datetime


class ExpenseWithSplits(ExpenseOut):
    splits: List[ExpenseSplitOut] = []
