"""
Capability Transition Rule

This module implements the CapabilityTransitionRule class that decides
whether the output NFTs of a category are a legal evolution of its input
NFTs. Authority is taken from capability presence on the inputs, never from
per-UTXO identity:

- Genesis or Minting: outputs are unconstrained.
- Mutable: at most one output NFT, never with Minting capability.
- None: outputs must be a sub-multiset of the input NFTs.
"""

from collections import Counter

from validator.core import ValidationContext, ValidationRule
from validator.categories import Authority
from ledger.model import Capability
from ledger.violations import CapabilityViolation, CapabilityViolationReason


class CapabilityTransitionRule(ValidationRule):
    """
    Validation rule enforcing the one-way NFT authority downgrade.
    
    Capability can only stay the same or decrease across a spend, except
    when the category is created by this transaction or a Minting NFT of the
    category is spent.
    """
    
    def __init__(self):
        super().__init__(
            name="capability_transition",
            description="Enforces NFT capability authority across a spend"
        )
    
    def is_applicable(self, context: ValidationContext) -> bool:
        if not self.enabled:
            return False
        
        # Only categories with NFTs on either side have something to check
        return bool(context.state.input_nfts or context.state.output_nfts)
    
    def validate(self, context: ValidationContext) -> bool:
        authority = context.state.authority
        
        if authority.can_mint:
            self.logger.debug(
                f"Category {context.category.hex()}: {authority.value} authority, "
                f"{len(context.state.output_nfts)} output NFTs unconstrained"
            )
            return True
        
        if authority is Authority.MUTABLE:
            return self._validate_mutable(context)
        
        return self._validate_immutable(context)
    
    def _validate_mutable(self, context: ValidationContext) -> bool:
        outputs = context.state.output_nfts
        
        if len(outputs) > 1 or any(nft.capability is Capability.MINTING for nft in outputs):
            context.add_violation(self.name, CapabilityViolation(
                category=context.category,
                reason=CapabilityViolationReason.MUTABLE_AUTHORITY_EXCEEDED
            ))
            return False
        
        return True
    
    def _validate_immutable(self, context: ValidationContext) -> bool:
        available = Counter(
            nft for nft in context.state.input_nfts
            if nft.capability is Capability.NONE
        )
        
        for nft in context.state.output_nfts:
            if nft.capability is Capability.NONE and available[nft] > 0:
                available[nft] -= 1
                continue
            
            self.logger.debug(
                f"Category {context.category.hex()}: output NFT {nft.describe()} "
                f"matches no unclaimed input NFT"
            )
            context.add_violation(self.name, CapabilityViolation(
                category=context.category,
                reason=CapabilityViolationReason.IMMUTABLE_NFT_MUTATED_OR_FABRICATED
            ))
            return False
        
        return True
