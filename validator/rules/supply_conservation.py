"""
Supply Conservation Rule

This module implements the SupplyConservationRule class that enforces
per-category fungible amount accounting. Without genesis or minting
authority the outputs of a category may not carry more than its inputs.
"""

from validator.core import ValidationContext, ValidationRule
from ledger.violations import AmountOverflow, SupplyConservationViolation


class SupplyConservationRule(ValidationRule):
    """
    Validation rule that forbids creating fungible supply without authority.
    
    Output sums below the input sum are partial burns; they pass with an
    advisory warning.
    """
    
    def __init__(self):
        super().__init__(
            name="supply_conservation",
            description="Enforces fungible supply conservation per category"
        )
    
    def validate(self, context: ValidationContext) -> bool:
        state = context.state
        
        if state.amount_overflow:
            context.add_violation(self.name, AmountOverflow(category=state.category))
            return False
        
        input_sum = state.input_amount_sum
        output_sum = state.output_amount_sum
        
        if state.authority.can_mint:
            self.logger.debug(
                f"Category {state.category.hex()}: {state.authority.value} authority, "
                f"issuing {output_sum} against {input_sum}"
            )
            return True
        
        if output_sum > input_sum:
            context.add_violation(self.name, SupplyConservationViolation(
                category=state.category,
                input_sum=input_sum,
                output_sum=output_sum
            ))
            return False
        
        if output_sum < input_sum:
            context.add_warning(
                self.name,
                f"partial burn of {input_sum - output_sum} from category "
                f"{state.category.hex()} ({input_sum} in, {output_sum} out)"
            )
        
        return True
