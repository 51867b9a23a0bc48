"""
CashToken Validator Module

This module provides the transaction validation pipeline for CashTokens:
category resolution, NFT capability transitions, fungible supply
conservation, burn classification and verdict reporting.
"""

from .core import (
    ValidationEngine,
    ValidationContext,
    ValidationRule,
    ValidationError,
    create_default_validator,
    validate_transaction
)

from .categories import (
    Authority,
    CategoryState,
    resolve_categories,
    unknown_category_violations
)

from .report import VerdictReport, BurnRecord
from .burns import compute_burns

from .rules import (
    CapabilityTransitionRule,
    SupplyConservationRule
)

__all__ = [
    "ValidationEngine",
    "ValidationContext",
    "ValidationRule",
    "ValidationError",
    "create_default_validator",
    "validate_transaction",
    "Authority",
    "CategoryState",
    "resolve_categories",
    "unknown_category_violations",
    "VerdictReport",
    "BurnRecord",
    "compute_burns",
    "CapabilityTransitionRule",
    "SupplyConservationRule"
]
