"""
CashToken Validator - Burn Accounting

Classifies implicit burns per category: fungible amount and NFTs present in
the inputs that the outputs do not carry forward, either directly or through
authorized evolution.
"""

from typing import Dict, List, Tuple

from ledger.model import NFT, Capability
from .categories import Authority, CategoryState
from .report import BurnRecord


def burned_nfts(state: CategoryState) -> Tuple[NFT, ...]:
    """
    Compute the input NFTs of a category not accounted for by its outputs.
    
    An output reproducing an input NFT exactly accounts for it. Under Mutable
    authority, an output that reproduces nothing accounts for the first
    remaining Mutable input, since it is that NFT's evolution.
    """
    remaining: List[NFT] = list(state.input_nfts)
    unmatched: List[NFT] = []
    
    for nft in state.output_nfts:
        if nft in remaining:
            remaining.remove(nft)
        else:
            unmatched.append(nft)
    
    if state.authority is Authority.MUTABLE:
        for _ in unmatched:
            for i, nft in enumerate(remaining):
                if nft.capability is Capability.MUTABLE:
                    del remaining[i]
                    break
    
    return tuple(remaining)


def compute_burns(states: Dict[bytes, CategoryState]) -> Dict[bytes, BurnRecord]:
    """
    Compute burn records for all resolved categories.
    
    Args:
        states: Resolved category states
        
    Returns:
        Mapping of category to BurnRecord, only for categories with a burn
    """
    burns: Dict[bytes, BurnRecord] = {}
    
    for category, state in states.items():
        if state.is_phantom:
            continue
        
        amount_burned = 0
        if not state.amount_overflow:
            amount_burned = max(0, state.input_amount_sum - state.output_amount_sum)
        
        record = BurnRecord(amount_burned=amount_burned, nfts_burned=burned_nfts(state))
        if not record.is_empty:
            burns[category] = record
    
    return burns
