"""
CashToken Validator Core Engine

This module provides the main ValidationEngine class that orchestrates the
token validation pipeline for a single transaction.

The ValidationEngine acts as the central coordinator for:
- Well-formedness checking of every prevout and output
- Category resolution and phantom category rejection
- Per-category rule evaluation (capability transitions, supply conservation)
- Burn classification and advisory diagnostics

The engine holds only an immutable ProtocolConfig and stateless rules, so a
single engine may validate any number of transactions concurrently.
"""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from ledger.config import DEFAULT_CONFIG, ProtocolConfig
from ledger.exceptions import ConfigurationError, LedgerError
from ledger.model import Transaction
from ledger.violations import Violation
from ledger.wellformed import find_dust_outputs, validate_transaction_well_formed
from .burns import compute_burns
from .categories import CategoryState, resolve_categories, unknown_category_violations
from .report import VerdictReport


class ValidationError(LedgerError):
    """Raised when the validation pipeline itself fails."""
    pass


@dataclass
class ValidationContext:
    """
    Context object passed between validation rules.
    
    One context is created per category of a transaction; rules record the
    violations and warnings they find on it.
    """
    state: CategoryState
    config: ProtocolConfig = DEFAULT_CONFIG
    
    violations: List[Violation] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    rule_results: Dict[str, bool] = field(default_factory=dict)
    
    @property
    def category(self) -> bytes:
        return self.state.category
    
    def add_violation(self, rule_name: str, violation: Violation):
        """Add a violation found by a rule."""
        self.violations.append(violation)
        self.rule_results[rule_name] = False
    
    def add_warning(self, rule_name: str, message: str):
        """Add an advisory warning."""
        self.warnings.append(f"{rule_name}: {message}")
    
    def mark_rule_passed(self, rule_name: str):
        """Mark a validation rule as passed."""
        self.rule_results.setdefault(rule_name, True)
    
    def has_errors(self) -> bool:
        """Check if validation has found violations."""
        return len(self.violations) > 0


class ValidationRule(ABC):
    """
    Abstract base class for per-category validation rules.
    
    Rules must not keep state between calls: the same instance is shared by
    every transaction the engine validates.
    """
    
    def __init__(self, name: str, description: str, enabled: bool = True):
        self.name = name
        self.description = description
        self.enabled = enabled
        self.logger = logging.getLogger(f"validator.rules.{name}")
    
    @abstractmethod
    def validate(self, context: ValidationContext) -> bool:
        """
        Validate one category of a transaction.
        
        Args:
            context: Validation context for the category
            
        Returns:
            True if validation passes, False otherwise
        """
        pass
    
    def is_applicable(self, context: ValidationContext) -> bool:
        """
        Check if this rule applies to the given context.
        
        Args:
            context: Validation context
            
        Returns:
            True if this rule should be applied
        """
        return self.enabled


class ValidationEngine:
    """
    Main validation engine for CashToken transactions.
    
    validate() is a pure function of the transaction and the engine's
    configuration: identical input always yields an identical VerdictReport.
    """
    
    def __init__(self, config: Optional[ProtocolConfig] = None,
                 rules: Optional[List[ValidationRule]] = None):
        """
        Initialize the validation engine.
        
        Args:
            config: Protocol configuration (defaults apply when None)
            rules: Rules to evaluate per category (default rules when None)
        """
        if config is not None and not isinstance(config, ProtocolConfig):
            raise ConfigurationError(f"Expected ProtocolConfig, got {type(config).__name__}")
        
        self.config = config or DEFAULT_CONFIG
        self.logger = logging.getLogger("validator.engine")
        
        self.rules: List[ValidationRule] = []
        self.rule_registry: Dict[str, ValidationRule] = {}
        
        if rules is None:
            self._register_default_rules()
        else:
            for rule in rules:
                self.register_rule(rule)
    
    def _register_default_rules(self):
        """Register default validation rules."""
        # Import here to avoid circular imports
        from .rules.capability import CapabilityTransitionRule
        from .rules.supply_conservation import SupplyConservationRule
        
        self.register_rule(CapabilityTransitionRule())
        self.register_rule(SupplyConservationRule())
    
    def register_rule(self, rule: ValidationRule):
        """
        Register a validation rule.
        
        Rules should be registered before the engine is shared between threads.
        """
        if rule.name in self.rule_registry:
            self.logger.warning(f"Rule {rule.name} already registered, replacing")
            self.rules.remove(self.rule_registry[rule.name])
        
        self.rules.append(rule)
        self.rule_registry[rule.name] = rule
        self.logger.debug(f"Registered validation rule: {rule.name}")
    
    def unregister_rule(self, rule_name: str) -> bool:
        """
        Unregister a validation rule.
        
        Returns:
            True if rule was found and removed
        """
        if rule_name in self.rule_registry:
            rule = self.rule_registry.pop(rule_name)
            self.rules.remove(rule)
            self.logger.debug(f"Unregistered validation rule: {rule_name}")
            return True
        
        return False
    
    def validate(self, tx: Transaction) -> VerdictReport:
        """
        Validate the token state transition of a transaction.
        
        Args:
            tx: Transaction with resolved prevouts
            
        Returns:
            VerdictReport listing every violation, burn and warning
        """
        txid_hex = tx.txid.hex() if isinstance(tx.txid, bytes) else repr(tx.txid)
        self.logger.debug(f"Validating transaction {txid_hex}")
        
        format_errors = validate_transaction_well_formed(tx, self.config)
        if format_errors:
            self.logger.info(
                f"Transaction {txid_hex} rejected: {len(format_errors)} format errors"
            )
            return VerdictReport(
                txid=tx.txid,
                accepted=False,
                violations=tuple(format_errors)
            )
        
        states = resolve_categories(tx, self.config)
        violations: List[Violation] = list(unknown_category_violations(states))
        warnings: List[str] = []
        
        for state in states.values():
            if state.is_phantom:
                continue
            
            context = ValidationContext(state=state, config=self.config)
            self._apply_validation_rules(context)
            violations.extend(context.violations)
            warnings.extend(context.warnings)
        
        burns = compute_burns(states)
        for category, record in burns.items():
            if record.nfts_burned:
                warnings.append(
                    f"burn: {len(record.nfts_burned)} NFT(s) of category "
                    f"{category.hex()} not carried to outputs"
                )
        
        for index in find_dust_outputs(tx, self.config):
            warnings.append(
                f"dust: output[{index}] carries tokens with value {tx.outputs[index].value} "
                f"below dust threshold {self.config.dust_threshold}"
            )
        
        report = VerdictReport(
            txid=tx.txid,
            accepted=not violations,
            violations=tuple(violations),
            burns=burns,
            warnings=tuple(warnings)
        )
        
        if report.accepted:
            self.logger.info(f"Transaction {txid_hex} accepted ({len(states)} categories)")
        else:
            self.logger.info(
                f"Transaction {txid_hex} rejected: {len(violations)} violations"
            )
        
        return report
    
    def validate_many(self, transactions: Iterable[Transaction],
                      max_workers: Optional[int] = None) -> List[VerdictReport]:
        """
        Validate several transactions concurrently.
        
        Args:
            transactions: Transactions to validate
            max_workers: Thread pool size (executor default when None)
            
        Returns:
            Reports in the same order as the transactions
        """
        transactions = list(transactions)
        if not transactions:
            return []
        
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(self.validate, transactions))
    
    def _apply_validation_rules(self, context: ValidationContext):
        """Apply all applicable rules to one category."""
        for rule in self.rules:
            if not rule.is_applicable(context):
                self.logger.debug(f"Skipping rule {rule.name} - not applicable")
                continue
            
            try:
                if rule.validate(context):
                    context.mark_rule_passed(rule.name)
                    self.logger.debug(f"Rule {rule.name} passed for {context.category.hex()}")
                else:
                    self.logger.debug(f"Rule {rule.name} failed for {context.category.hex()}")
            except Exception as e:
                self.logger.error(f"Rule {rule.name} execution error: {e}")
                raise ValidationError(f"Rule {rule.name} execution error: {e}") from e
    
    def get_config(self) -> Dict[str, Any]:
        """Get current protocol configuration."""
        return self.config.model_dump()


# Utility functions for validation

def create_default_validator(config: Optional[ProtocolConfig] = None,
                             **options: Any) -> ValidationEngine:
    """
    Create a ValidationEngine with the default rules.
    
    Args:
        config: Base configuration
        **options: Configuration overrides (e.g. max_commitment_length=128)
        
    Returns:
        Configured ValidationEngine instance
    """
    config = config or DEFAULT_CONFIG
    if options:
        config = config.merged(options)
    return ValidationEngine(config)


def validate_transaction(tx: Transaction,
                         config: Optional[ProtocolConfig] = None) -> VerdictReport:
    """Validate one transaction with a freshly created default engine."""
    return create_default_validator(config).validate(tx)
