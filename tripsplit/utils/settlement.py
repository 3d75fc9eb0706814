"""
Settlement Engine Module

This module turns a trip's expenses into a settlement plan:

1. Balance aggregation: for each member, total paid, total owed (their share of
   all expenses) and net balance = total_paid - total_owed
2. Settlement solving: creditors (balance > 0.01) and debtors (balance < -0.01)
   are matched greedily, largest first, with two cursors until either side is
   exhausted
3. Report assembly: the untouched balances, the transfers and the total spent

Time Complexity: O(n log n) for sorting + O(n) for the two-cursor walk
Space Complexity: O(n) for the working copy and the transfer list

The greedy match is not the theoretical minimum (that is a subset-partition
problem) but it never emits more than n - 1 transfers and is deterministic:
equal balances keep their input order.

Example Usage:
    from tripsplit.utils.settlement import balances_from_records, build_settlement_report

    members = [("u1", "Alice"), ("u2", "Bob"), ("u3", "Carol")]
    expenses = [
        {"payer": "u1", "amount": Decimal("90"),
         "splits": {"u1": Decimal("30"), "u2": Decimal("30"), "u3": Decimal("30")}},
    ]

    balances = balances_from_records(members, expenses)
    report = build_settlement_report(balances, total_expenses=Decimal("90"))

    # report.transactions: Bob -> Alice 30.00, Carol -> Alice 30.00
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

from tripsplit.schemas.settlement_schema import MemberBalance, SettlementReport, Transaction

logger = logging.getLogger(__name__)

MONEY_PRECISION = Decimal("0.01")

# Balances within this distance of zero are treated as settled
SETTLEMENT_TOLERANCE = Decimal("0.01")


class UnbalancedLedgerError(ValueError):
    """Raised in strict mode when balances do not sum to zero."""

    def __init__(self, total: Decimal, tolerance: Decimal):
        self.total = total
        self.tolerance = tolerance
        super().__init__(
            f"Balances not zero-sum: total={total}, tolerance={tolerance}. "
            f"This indicates unbalanced expense data."
        )


def to_decimal(value) -> Decimal:
    """Coerce ints, floats, strings and Decimals to Decimal without binary float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal, precision: Decimal = MONEY_PRECISION) -> Decimal:
    """
    Round a money value half away from zero.

    Example:
        >>> round_money(Decimal("100.005"))
        Decimal('100.01')
        >>> round_money(Decimal("-100.005"))
        Decimal('-100.01')
    """
    return to_decimal(value).quantize(precision, rounding=ROUND_HALF_UP)


def aggregate_balances(
    members: Iterable[Tuple[str, str]],
    sum_paid: Callable[[str], Decimal],
    sum_owed: Callable[[str], Decimal],
) -> List[MemberBalance]:
    """
    Compute the net balance of every member.

    Args:
        members: (member_id, display_name) pairs, in the order the result should follow
        sum_paid: Returns the total a member paid for the trip's expenses
        sum_owed: Returns the total of a member's shares across the trip's expenses

    Returns:
        One MemberBalance per member, same order as ``members``.
        Positive balance: the member is owed money. Negative: the member owes money.

    Errors raised by the accessors propagate unchanged.
    """
    balances = []
    for member_id, display_name in members:
        total_paid = to_decimal(sum_paid(member_id))
        total_owed = to_decimal(sum_owed(member_id))
        balances.append(MemberBalance(
            member_id=member_id,
            display_name=display_name,
            total_paid=total_paid,
            total_owed=total_owed,
            balance=total_paid - total_owed,
        ))
    return balances


def balances_from_records(
    members: Sequence[Tuple[str, str]],
    expenses: Iterable[Dict],
) -> List[MemberBalance]:
    """
    Aggregate balances from raw expense records held in memory.

    Args:
        members: (member_id, display_name) pairs
        expenses: Expense dictionaries with format:
            {
                "payer": str,                  # member_id of the payer
                "amount": Decimal,             # total amount in the reference unit
                "splits": Dict[str, Decimal],  # member_id -> share amount
            }

    Ids that are not in ``members`` accumulate nothing visible: they have no
    balance row, so their money is missing from the zero-sum total.
    """
    paid: Dict[str, Decimal] = {}
    owed: Dict[str, Decimal] = {}

    for expense in expenses:
        payer = expense["payer"]
        paid[payer] = paid.get(payer, Decimal("0")) + to_decimal(expense["amount"])

        for member_id, share in expense.get("splits", {}).items():
            owed[member_id] = owed.get(member_id, Decimal("0")) + to_decimal(share)

    return aggregate_balances(
        members,
        lambda member_id: paid.get(member_id, Decimal("0")),
        lambda member_id: owed.get(member_id, Decimal("0")),
    )


def validate_balance_sum(
    balances: Iterable[MemberBalance],
    tolerance: Decimal = SETTLEMENT_TOLERANCE,
) -> None:
    """
    Check that balances sum to zero within ``tolerance``.

    Raises:
        UnbalancedLedgerError: If the absolute sum exceeds the tolerance
    """
    total = sum((b.balance for b in balances), Decimal("0"))
    if abs(total) > tolerance:
        raise UnbalancedLedgerError(total, tolerance)


def calculate_settlement(
    balances: Iterable[MemberBalance],
    tolerance: Decimal = SETTLEMENT_TOLERANCE,
) -> List[Transaction]:
    """
    Produce the transfers that zero out every balance.

    Works on a private copy of the balances; the caller's records are never
    modified. Non-zero-sum input is not rejected: matching stops when either
    side runs out and the remainder is left unsettled.

    Args:
        balances: Member balances, each with display_name and signed balance
        tolerance: Balances and transfer amounts at or below this are ignored

    Returns:
        Transactions {from: debtor, to: creditor, amount} in matching order,
        amounts rounded to 2 places

    Example:
        A=+100, B=-60, C=-40  ->  B pays A 60.00, C pays A 40.00
    """
    creditors: List[List] = []
    debtors: List[List] = []
    for b in balances:
        amount = to_decimal(b.balance)
        if amount > tolerance:
            creditors.append([b.display_name, amount])
        elif amount < -tolerance:
            debtors.append([b.display_name, amount])

    # Stable sorts: ties keep their input order
    creditors.sort(key=lambda entry: entry[1], reverse=True)
    debtors.sort(key=lambda entry: entry[1])

    transactions: List[Transaction] = []
    i, j = 0, 0
    while i < len(creditors) and j < len(debtors):
        creditor = creditors[i]
        debtor = debtors[j]

        amount = min(creditor[1], abs(debtor[1]))

        if amount > tolerance:
            rounded = round_money(amount)
            transactions.append(Transaction(**{
                "from": debtor[0],
                "to": creditor[0],
                "amount": rounded,
            }))
            logger.debug(f"{debtor[0]} pays {creditor[0]} {rounded}")

        # Unrounded so rounding error does not compound across steps
        creditor[1] -= amount
        debtor[1] += amount

        if creditor[1] < tolerance:
            i += 1
        if abs(debtor[1]) < tolerance:
            j += 1

    unsettled = [name for name, amount in creditors[i:] + debtors[j:] if abs(amount) > tolerance]
    if unsettled:
        logger.warning(f"Partial settlement, unmatched balances remain for: {unsettled}")

    return transactions


def build_settlement_report(
    balances: List[MemberBalance],
    total_expenses: Decimal,
    strict: bool = False,
    tolerance: Decimal = SETTLEMENT_TOLERANCE,
) -> SettlementReport:
    """
    Combine balances, transfers and the total spent into one report.

    The solver runs over copies, so the balances in the report keep their
    computed sign and magnitude.

    Args:
        balances: Aggregated member balances
        total_expenses: Sum of all expense amounts of the trip
        strict: Reject non-zero-sum balances instead of settling partially

    Raises:
        UnbalancedLedgerError: Only when ``strict`` is set and balances do not sum to zero
    """
    if strict:
        validate_balance_sum(balances, tolerance)

    working_copy = [balance.model_copy() for balance in balances]
    transactions = calculate_settlement(working_copy, tolerance)

    logger.info(
        f"Settlement computed: {len(balances)} members, "
        f"{len(transactions)} transactions"
    )

    return SettlementReport(
        balances=balances,
        transactions=transactions,
        total_expenses=round_money(total_expenses),
    )
