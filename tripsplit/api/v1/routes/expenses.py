from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
from tripsplit.db.database import get_db
from tripsplit.models.expenses import Expense, ExpenseSplit
from tripsplit.services.auth.dependencies import get_current_user_id
from tripsplit.services.expense_service import (
    create_expense, get_trip_expenses, get_expense_splits, update_expense, delete_expense
)
from tripsplit.services.trip_service import get_trip_for_member, get_trip_members
from tripsplit.schemas.expense_schema import (
    ExpenseCreate, ExpenseUpdate, ExpenseOut, ExpenseWithSplits, ExpenseSplitOut
)

router = APIRouter(prefix="/expenses", tags=["expenses"])


def _to_expense_out(expense: Expense, names: Dict[str, str], splits: Optional[List[ExpenseSplit]] = None):
    fields = dict(
        id=expense.id,
        trip_id=expense.trip_id,
        payer_id=expense.payer_id,
        payer_name=names.get(expense.payer_id),
        amount=expense.amount,
        original_amount=expense.original_amount,
        currency=expense.currency,
        exchange_rate=expense.exchange_rate,
        description=expense.description,
        category=expense.category,
        date=expense.date,
        created_at=expense.created_at,
    )
    if splits is None:
        return ExpenseOut(**fields)
    return ExpenseWithSplits(splits=[ExpenseSplitOut(
        user_id=split.user_id,
        display_name=names.get(split.user_id),
        share_amount=split.share_amount
    ) for split in splits], **fields)


@router.post("/trips/{trip_ref}", response_model=ExpenseOut)
def create_new_expense(
    trip_ref: str,
    expense_data: ExpenseCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Create a new expense split equally among split_with"""
    trip = get_trip_for_member(db, trip_ref, user_id)
    expense = create_expense(db, trip.id, expense_data, user_id)
    names = {member.user_id: member.display_name for member in get_trip_members(db, trip.id)}
    return _to_expense_out(expense, names)


@router.get("/trips/{trip_ref}", response_model=List[ExpenseWithSplits])
def get_trip_expenses_list(
    trip_ref: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get all expenses of a trip with their splits"""
    trip = get_trip_for_member(db, trip_ref, user_id)
    names = {member.user_id: member.display_name for member in get_trip_members(db, trip.id)}

    result = []
    for expense in get_trip_expenses(db, trip.id):
        result.append(_to_expense_out(expense, names, get_expense_splits(db, expense.id)))

    return result


@router.put("/{expense_id}", response_model=ExpenseOut)
def update_existing_expense(
    expense_id: str,
    update_data: ExpenseUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Update an expense"""
    expense = update_expense(db, expense_id, update_data, user_id)
    names = {member.user_id: member.display_name for member in get_trip_members(db, expense.trip_id)}
    return _to_expense_out(expense, names)


@router.delete("/{expense_id}")
def delete_existing_expense(
    expense_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Delete an expense"""
    delete_expense(db, expense_id, user_id)
    return {"message": "Expense deleted successfully"}
