"""
CashToken Validator Rules Module

This module contains the per-category validation rules evaluated by the
ValidationEngine: NFT capability transitions and fungible supply conservation.
"""

from .capability import CapabilityTransitionRule
from .supply_conservation import SupplyConservationRule

__all__ = [
    "CapabilityTransitionRule",
    "SupplyConservationRule"
]
