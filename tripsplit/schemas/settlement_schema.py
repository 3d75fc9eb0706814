from pydantic import BaseModel, Field, ConfigDict
from typing import List
from decimal import Decimal


class MemberBalance(BaseModel):
    """Net position of one trip member: positive is owed money, negative owes money."""
    member_id: str
    display_name: str
    total_paid: Decimal
    total_owed: Decimal
    balance: Decimal


class Transaction(BaseModel):
    """A single suggested transfer, serialized as {"from", "to", "amount"}."""
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(..., alias="from")
    to: str
    amount: Decimal = Field(..., gt=0)


class SettlementReport(BaseModel):
    balances: List[MemberBalance]
    transactions: List[Transaction]
    total_expenses: Decimal
