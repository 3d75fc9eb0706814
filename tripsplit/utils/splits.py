"""
Helpers for turning an expense into per-member shares in the reference unit.
"""
from decimal import Decimal, ROUND_DOWN
from typing import Dict, Sequence

from tripsplit.utils.settlement import MONEY_PRECISION, round_money, to_decimal


def convert_to_reference(original_amount: Decimal, exchange_rate: Decimal) -> Decimal:
    """Convert an amount with the rate supplied by the caller, rounded to cents."""
    return round_money(to_decimal(original_amount) * to_decimal(exchange_rate))


def split_equally(amount: Decimal, beneficiary_ids: Sequence[str]) -> Dict[str, Decimal]:
    """
    Split an amount into 2-decimal shares that add up to exactly the amount.

    Every beneficiary gets the amount divided evenly and rounded down to the
    cent; the leftover cents go one each to the first beneficiaries in order.

    Example:
        >>> split_equally(Decimal("100"), ["A", "B", "C"])
        {'A': Decimal('33.34'), 'B': Decimal('33.33'), 'C': Decimal('33.33')}

    Raises:
        ValueError: If there are no beneficiaries or an id is repeated
    """
    if not beneficiary_ids:
        raise ValueError("At least one beneficiary is required")
    if len(set(beneficiary_ids)) != len(beneficiary_ids):
        raise ValueError("Beneficiaries must be unique")

    amount = round_money(amount)
    count = len(beneficiary_ids)
    base_share = (amount / count).quantize(MONEY_PRECISION, rounding=ROUND_DOWN)
    leftover_cents = int((amount - base_share * count) / MONEY_PRECISION)

    shares = {}
    for index, beneficiary_id in enumerate(beneficiary_ids):
        share = base_share + (MONEY_PRECISION if index < leftover_cents else Decimal("0"))
        shares[beneficiary_id] = share
    return shares
