"""
CashToken Validator - Category Identity Resolver

Groups every token-bearing input and output of a transaction by category and
derives, per category, whether it is genesis for the transaction, whether it
already exists on an input, the NFT multisets on both sides and the fungible
amount sums.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ledger.amounts import sum_amounts
from ledger.config import DEFAULT_CONFIG, ProtocolConfig
from ledger.exceptions import AmountOverflowError
from ledger.model import NFT, Capability, Transaction
from ledger.violations import UnknownCategory

logger = logging.getLogger(__name__)


class Authority(Enum):
    """Highest authority available to a category within one transaction."""
    GENESIS = "genesis"
    MINTING = "minting"
    MUTABLE = "mutable"
    NONE = "none"
    
    @property
    def can_mint(self) -> bool:
        return self in (Authority.GENESIS, Authority.MINTING)


@dataclass(frozen=True)
class CategoryState:
    """Aggregated token state of one category within a transaction."""
    category: bytes
    is_genesis: bool
    present_in_inputs: bool
    input_nfts: Tuple[NFT, ...] = ()
    output_nfts: Tuple[NFT, ...] = ()
    input_amount_sum: Optional[int] = 0
    output_amount_sum: Optional[int] = 0
    
    @property
    def amount_overflow(self) -> bool:
        """True when either amount sum left the representable range."""
        return self.input_amount_sum is None or self.output_amount_sum is None
    
    @property
    def is_phantom(self) -> bool:
        return not self.is_genesis and not self.present_in_inputs
    
    @property
    def authority(self) -> Authority:
        if self.is_genesis:
            return Authority.GENESIS
        capabilities = {nft.capability for nft in self.input_nfts}
        if Capability.MINTING in capabilities:
            return Authority.MINTING
        if Capability.MUTABLE in capabilities:
            return Authority.MUTABLE
        return Authority.NONE


@dataclass
class _CategoryAccumulator:
    present_in_inputs: bool = False
    input_nfts: List[NFT] = field(default_factory=list)
    output_nfts: List[NFT] = field(default_factory=list)
    input_amounts: List[int] = field(default_factory=list)
    output_amounts: List[int] = field(default_factory=list)


def _checked_sum(amounts: List[int], maximum: int) -> Optional[int]:
    try:
        return sum_amounts(amounts, maximum)
    except AmountOverflowError:
        return None


def resolve_categories(tx: Transaction,
                       config: ProtocolConfig = DEFAULT_CONFIG) -> Dict[bytes, CategoryState]:
    """
    Resolve the categories touched by a transaction.
    
    Grouping is by category byte equality only. Categories are returned in
    order of first appearance, inputs before outputs.
    
    Args:
        tx: Well-formed transaction
        config: Protocol limits (the amount ceiling bounds each sum)
        
    Returns:
        Mapping of category bytes to CategoryState. A sum that overflows is
        stored as None.
    """
    groups: "OrderedDict[bytes, _CategoryAccumulator]" = OrderedDict()
    
    for tx_input in tx.inputs:
        token = tx_input.prevout.token
        if token is None:
            continue
        group = groups.setdefault(token.category, _CategoryAccumulator())
        group.present_in_inputs = True
        group.input_amounts.append(token.amount)
        if token.nft is not None:
            group.input_nfts.append(token.nft)
    
    for output in tx.outputs:
        token = output.token
        if token is None:
            continue
        group = groups.setdefault(token.category, _CategoryAccumulator())
        group.output_amounts.append(token.amount)
        if token.nft is not None:
            group.output_nfts.append(token.nft)
    
    states: Dict[bytes, CategoryState] = OrderedDict()
    for category, group in groups.items():
        states[category] = CategoryState(
            category=category,
            is_genesis=category == tx.txid,
            present_in_inputs=group.present_in_inputs,
            input_nfts=tuple(group.input_nfts),
            output_nfts=tuple(group.output_nfts),
            input_amount_sum=_checked_sum(group.input_amounts, config.max_amount),
            output_amount_sum=_checked_sum(group.output_amounts, config.max_amount)
        )
    
    logger.debug(f"Resolved {len(states)} categories for transaction {tx.txid.hex()}")
    return states


def unknown_category_violations(states: Dict[bytes, CategoryState]) -> List[UnknownCategory]:
    """Report every category with neither genesis nor input provenance."""
    return [
        UnknownCategory(category=state.category)
        for state in states.values()
        if state.is_phantom
    ]
