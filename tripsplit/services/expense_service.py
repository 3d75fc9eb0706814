import logging
from sqlalchemy.orm import Session
from sqlalchemy import and_, func
from fastapi import HTTPException
from typing import List, Optional
from decimal import Decimal
from tripsplit.models.expenses import Expense, ExpenseSplit
from tripsplit.schemas.expense_schema import ExpenseCreate, ExpenseUpdate
from tripsplit.utils.splits import convert_to_reference, split_equally

logger = logging.getLogger(__name__)


def create_expense(db: Session, trip_id: str, expense_data: ExpenseCreate, user_id: str) -> Expense:
    """Create a new expense split equally among the chosen members"""
    from .trip_service import get_trip_members

    member_ids = {member.user_id for member in get_trip_members(db, trip_id)}

    if user_id not in member_ids:
        raise HTTPException(status_code=403, detail="Only trip members can create expenses")

    if expense_data.payer_id not in member_ids:
        raise HTTPException(status_code=400, detail="Payer is not a member of this trip")

    for beneficiary_id in expense_data.split_with:
        if beneficiary_id not in member_ids:
            raise HTTPException(status_code=400, detail=f"User {beneficiary_id} is not a member of this trip")

    amount = convert_to_reference(expense_data.original_amount, expense_data.exchange_rate)
    if amount <= 0:
        raise HTTPException(status_code=400, detail="Converted amount rounds to zero")

    try:
        shares = split_equally(amount, expense_data.split_with)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    expense = Expense(
        trip_id=trip_id,
        payer_id=expense_data.payer_id,
        amount=amount,
        original_amount=expense_data.original_amount,
        currency=expense_data.currency.value,
        exchange_rate=expense_data.exchange_rate,
        description=expense_data.description.strip(),
        category=expense_data.category.value,
        date=expense_data.date
    )
    db.add(expense)
    db.flush()

    for beneficiary_id, share_amount in shares.items():
        db.add(ExpenseSplit(
            expense_id=expense.id,
            user_id=beneficiary_id,
            share_amount=share_amount
        ))

    db.commit()
    db.refresh(expense)
    logger.info(f"Expense {expense.id} of {amount} created in trip {trip_id}, split {len(shares)} ways")
    return expense


def get_expense(db: Session, expense_id: str) -> Optional[Expense]:
    """Get an expense by ID"""
    return db.query(Expense).filter(Expense.id == expense_id).first()


def get_trip_expenses(db: Session, trip_id: str) -> List[Expense]:
    """Get all expenses for a trip, most recent first"""
    return db.query(Expense)\
        .filter(Expense.trip_id == trip_id)\
        .order_by(Expense.date.desc(), Expense.created_at.desc())\
        .all()


def get_expense_splits(db: Session, expense_id: str) -> List[ExpenseSplit]:
    """Get all splits for an expense"""
    return db.query(ExpenseSplit).filter(ExpenseSplit.expense_id == expense_id).all()


def get_expense_for_member(db: Session, expense_id: str, user_id: str) -> Expense:
    """Get an expense and check the user belongs to its trip"""
    from .trip_service import is_trip_member

    expense = get_expense(db, expense_id)
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")

    if not is_trip_member(db, expense.trip_id, user_id):
        raise HTTPException(status_code=403, detail="You are not a member of this trip")
    return expense


def update_expense(db: Session, expense_id: str, update_data: ExpenseUpdate, user_id: str) -> Expense:
    """
    Update an expense (any trip member).

    When the amount or the rate changes, the reference amount is recomputed
    and the existing splits are re-split equally among the same members.
    """
    expense = get_expense_for_member(db, expense_id, user_id)
    changes = update_data.model_dump(exclude_unset=True, exclude_none=True)

    amount_changed = "original_amount" in changes or "exchange_rate" in changes
    if amount_changed:
        original_amount = changes.get("original_amount", expense.original_amount)
        exchange_rate = changes.get("exchange_rate", expense.exchange_rate)
        amount = convert_to_reference(original_amount, exchange_rate)
        if amount <= 0:
            raise HTTPException(status_code=400, detail="Converted amount rounds to zero")

    if "description" in changes:
        expense.description = changes["description"].strip()
    if "category" in changes:
        expense.category = changes["category"].value
    if "currency" in changes:
        expense.currency = changes["currency"].value

    if amount_changed:
        expense.original_amount = original_amount
        expense.exchange_rate = exchange_rate
        expense.amount = amount

        splits = get_expense_splits(db, expense.id)
        if splits:
            shares = split_equally(amount, [split.user_id for split in splits])
            for split in splits:
                split.share_amount = shares[split.user_id]
        logger.info(f"Expense {expense.id} amount changed to {amount}, {len(splits)} splits updated")

    db.commit()
    db.refresh(expense)
    return expense


def delete_expense(db: Session, expense_id: str, user_id: str):
    """Delete an expense and its splits (any trip member)"""
    expense = get_expense_for_member(db, expense_id, user_id)

    db.query(ExpenseSplit).filter(ExpenseSplit.expense_id == expense.id).delete(synchronize_session=False)
    db.delete(expense)
    db.commit()
    logger.info(f"Expense {expense_id} deleted by {user_id}")


def sum_paid(db: Session, trip_id: str, user_id: str) -> Decimal:
    """Total amount a member paid for the trip's expenses"""
    return db.query(func.sum(Expense.amount))\
        .filter(and_(Expense.trip_id == trip_id, Expense.payer_id == user_id))\
        .scalar() or Decimal('0')


def sum_owed(db: Session, trip_id: str, user_id: str) -> Decimal:
    """Total of a member's shares across the trip's expenses"""
    return db.query(func.sum(ExpenseSplit.share_amount))\
        .select_from(ExpenseSplit)\
        .join(Expense, ExpenseSplit.expense_id == Expense.id)\
        .filter(
            and_(
                Expense.trip_id == trip_id,
                ExpenseSplit.user_id == user_id
            )
        ).scalar() or Decimal('0')


def get_total_expenses(db: Session, trip_id: str) -> Decimal:
    """Sum of all expense amounts of the trip"""
    return db.query(func.sum(Expense.amount))\
        .filter(Expense.trip_id == trip_id)\
        .scalar() or Decimal('0')
