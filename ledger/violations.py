"""
CashToken Validator - Violation Types

Structured result values describing why a transaction is rejected. The
validator collects these rather than raising them, so one call reports every
defect of a transaction.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict


class CapabilityViolationReason(str, Enum):
    """Reasons an NFT evolution is illegal."""
    MUTABLE_AUTHORITY_EXCEEDED = "mutable-authority-exceeded"
    IMMUTABLE_NFT_MUTATED_OR_FABRICATED = "immutable-nft-mutated-or-fabricated"


@dataclass(frozen=True)
class Violation:
    """Base class for all violations."""
    code: ClassVar[str] = "VIOLATION"
    
    @property
    def message(self) -> str:
        return self.code
    
    def details(self) -> Dict[str, Any]:
        return {}
    
    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, **self.details()}


@dataclass(frozen=True)
class FormatError(Violation):
    """A UTXO field is malformed."""
    field: str
    reason: str
    location: str = ""
    code: ClassVar[str] = "FORMAT_ERROR"
    
    @property
    def message(self) -> str:
        where = f"{self.location}: " if self.location else ""
        return f"{where}malformed {self.field}: {self.reason}"
    
    def details(self) -> Dict[str, Any]:
        return {"field": self.field, "reason": self.reason, "location": self.location}


@dataclass(frozen=True)
class UnknownCategory(Violation):
    """Category is neither genesis nor present on any input."""
    category: bytes
    code: ClassVar[str] = "UNKNOWN_CATEGORY"
    
    @property
    def message(self) -> str:
        return f"category {self.category.hex()} has no genesis or input provenance"
    
    def details(self) -> Dict[str, Any]:
        return {"category": self.category.hex()}


@dataclass(frozen=True)
class CapabilityViolation(Violation):
    """Output NFTs are not a legal evolution of the input NFTs."""
    category: bytes
    reason: CapabilityViolationReason
    code: ClassVar[str] = "CAPABILITY_VIOLATION"
    
    @property
    def message(self) -> str:
        return f"category {self.category.hex()}: {self.reason.value}"
    
    def details(self) -> Dict[str, Any]:
        return {"category": self.category.hex(), "reason": self.reason.value}


@dataclass(frozen=True)
class SupplyConservationViolation(Violation):
    """Fungible amount created without minting authority."""
    category: bytes
    input_sum: int
    output_sum: int
    code: ClassVar[str] = "SUPPLY_CONSERVATION_VIOLATION"
    
    @property
    def message(self) -> str:
        return (
            f"category {self.category.hex()}: outputs carry {self.output_sum} "
            f"but inputs only {self.input_sum}"
        )
    
    def details(self) -> Dict[str, Any]:
        return {
            "category": self.category.hex(),
            "input_sum": self.input_sum,
            "output_sum": self.output_sum,
        }


@dataclass(frozen=True)
class AmountOverflow(Violation):
    """Amount accounting for a category exceeds the representable range."""
    category: bytes
    code: ClassVar[str] = "AMOUNT_OVERFLOW"
    
    @property
    def message(self) -> str:
        return f"category {self.category.hex()}: amount sum overflows"
    
    def details(self) -> Dict[str, Any]:
        return {"category": self.category.hex()}
