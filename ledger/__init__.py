"""
CashToken Validator Ledger Module

Immutable token ledger model, protocol configuration, well-formedness checks,
violation types and the JSON transaction codec.
"""

from .model import (
    CATEGORY_LENGTH,
    Capability,
    NFT,
    Token,
    Outpoint,
    UTXO,
    TransactionInput,
    Transaction
)

from .violations import (
    Violation,
    FormatError,
    UnknownCategory,
    CapabilityViolation,
    CapabilityViolationReason,
    SupplyConservationViolation,
    AmountOverflow
)

from .exceptions import (
    LedgerError,
    ConfigurationError,
    AmountOverflowError,
    PrevoutNotFound,
    TransactionDecodeError
)

from .config import ProtocolConfig, DEFAULT_CONFIG
from .amounts import MAX_AMOUNT, checked_add, sum_amounts
from .wellformed import validate_well_formed, validate_transaction_well_formed
from .txid import compute_txid

__all__ = [
    "CATEGORY_LENGTH",
    "Capability",
    "NFT",
    "Token",
    "Outpoint",
    "UTXO",
    "TransactionInput",
    "Transaction",
    "Violation",
    "FormatError",
    "UnknownCategory",
    "CapabilityViolation",
    "CapabilityViolationReason",
    "SupplyConservationViolation",
    "AmountOverflow",
    "LedgerError",
    "ConfigurationError",
    "AmountOverflowError",
    "PrevoutNotFound",
    "TransactionDecodeError",
    "ProtocolConfig",
    "DEFAULT_CONFIG",
    "MAX_AMOUNT",
    "checked_add",
    "sum_amounts",
    "validate_well_formed",
    "validate_transaction_well_formed",
    "compute_txid"
]
