"""
CashToken Validator - Amount Arithmetic

Overflow-checked helpers for fungible token amounts. Python integers never
wrap, so overflow is defined against the configured amount ceiling.
"""

from typing import Iterable

from .exceptions import AmountOverflowError

MAX_AMOUNT = 2**63 - 1


def checked_add(a: int, b: int, maximum: int = MAX_AMOUNT) -> int:
    """
    Add two amounts, refusing results above the ceiling.
    
    Args:
        a: First amount
        b: Second amount
        maximum: Largest representable amount
        
    Returns:
        The sum
        
    Raises:
        AmountOverflowError: If the sum exceeds maximum
    """
    total = a + b
    if total > maximum:
        raise AmountOverflowError(total, maximum)
    return total


def sum_amounts(amounts: Iterable[int], maximum: int = MAX_AMOUNT) -> int:
    """Sum amounts with overflow checking after every step."""
    total = 0
    for amount in amounts:
        total = checked_add(total, amount, maximum)
    return total
