"""
CashToken Validator - Ledger Exceptions

This module defines the exceptions raised by the ledger layer. Transaction
defects are never raised; they are reported as violation values. These
exceptions cover caller and configuration errors only.
"""


class LedgerError(Exception):
    """Base exception for ledger-related errors."""
    pass


class ConfigurationError(LedgerError):
    """Exception raised when a protocol configuration is invalid."""
    pass


class AmountOverflowError(LedgerError):
    """Exception raised when token amount arithmetic leaves the representable range."""
    
    def __init__(self, total: int, maximum: int, message: str = None):
        self.total = total
        self.maximum = maximum
        if message is None:
            message = f"Amount overflow: {total} exceeds maximum {maximum}"
        super().__init__(message)


class PrevoutNotFound(LedgerError):
    """Exception raised when a referenced previous output cannot be resolved."""
    
    def __init__(self, outpoint, message: str = None):
        self.outpoint = outpoint
        if message is None:
            message = f"Previous output not found: {outpoint}"
        super().__init__(message)


class TransactionDecodeError(LedgerError):
    """Exception raised when a transaction document cannot be decoded."""
    pass
