"""
CashToken Validator - Verdict Reports

Result types produced by the validation pipeline: the accept/reject verdict,
every violation found, advisory warnings and per-category burn accounting.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from ledger.model import NFT
from ledger.violations import Violation


@dataclass(frozen=True)
class BurnRecord:
    """Token value present in inputs but not carried to outputs."""
    amount_burned: int = 0
    nfts_burned: Tuple[NFT, ...] = ()
    
    @property
    def is_empty(self) -> bool:
        return self.amount_burned == 0 and not self.nfts_burned
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "amount_burned": str(self.amount_burned),
            "nfts_burned": [
                {"capability": nft.capability.label, "commitment": nft.commitment.hex()}
                for nft in self.nfts_burned
            ]
        }


@dataclass(frozen=True)
class VerdictReport:
    """
    Outcome of validating one transaction.
    
    A transaction is accepted iff no violation was found. Burns and warnings
    are reported for visibility and never affect acceptance.
    """
    txid: bytes
    accepted: bool
    violations: Tuple[Violation, ...] = ()
    burns: Dict[bytes, BurnRecord] = field(default_factory=dict)
    warnings: Tuple[str, ...] = ()
    
    @property
    def violation_codes(self) -> List[str]:
        return [violation.code for violation in self.violations]
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "txid": self.txid.hex(),
            "accepted": self.accepted,
            "violations": [violation.to_dict() for violation in self.violations],
            "burns": {category.hex(): record.to_dict() for category, record in self.burns.items()},
            "warnings": list(self.warnings)
        }
    
    def get_summary(self) -> Dict[str, Any]:
        """Get a flat summary suitable for tables and logs."""
        return {
            "txid": self.txid.hex(),
            "result": "accepted" if self.accepted else "rejected",
            "violations": len(self.violations),
            "burned_categories": len(self.burns),
            "warnings": len(self.warnings)
        }
