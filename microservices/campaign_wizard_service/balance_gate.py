"""
Balance Gate

Decides whether a requested budget is covered by the available balance.
Only the finalize transition consults it; saving a draft never does.
"""

from decimal import Decimal
from typing import Union

from .models import BalanceCheck

Amount = Union[int, float, str, Decimal]


def to_decimal(value: Amount) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # Floats go through str() so 0.1 stays Decimal("0.1")
    return Decimal(str(value))


def is_sufficient(requested_budget: Amount, available_balance: Amount) -> bool:
    """requested_budget <= available_balance (balance may be negative)"""
    return to_decimal(requested_budget) <= to_decimal(available_balance)


def check_balance(requested_budget: Amount, available_balance: Amount) -> BalanceCheck:
    requested = to_decimal(requested_budget)
    available = to_decimal(available_balance)
    if requested < 0:
        raise ValueError("requested_budget must be >= 0")
    return BalanceCheck(
        available_balance=available,
        requested_budget=requested,
        sufficient=requested <= available,
    )


def insufficient_balance_message(check: BalanceCheck) -> str:
    """User-visible message pairing the block with the draft alternative"""
    return (
        f"Insufficient balance. Available balance: {check.available_balance:.2f}, "
        f"requested budget: {check.requested_budget:.2f}. "
        f"You can save the campaign as a draft and activate it once your balance is sufficient."
    )


__all__ = ["to_decimal", "is_sufficient", "check_balance", "insufficient_balance_message"]
