"""
CashToken Validator - Protocol Configuration

This module defines the Pydantic model holding the protocol constants the
validator depends on. A configuration is immutable and passed explicitly to
the validation pipeline, so differently-versioned configurations can be used
side by side in one process.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .amounts import MAX_AMOUNT
from .exceptions import ConfigurationError

DEFAULT_MAX_COMMITMENT_LENGTH = 40
DEFAULT_DUST_THRESHOLD = 546


class ProtocolConfig(BaseModel):
    """Protocol constants for token validation."""
    
    model_config = ConfigDict(frozen=True, extra="forbid")
    
    max_commitment_length: int = Field(
        default=DEFAULT_MAX_COMMITMENT_LENGTH, ge=0,
        description="Maximum NFT commitment length in bytes"
    )
    max_amount: int = Field(
        default=MAX_AMOUNT, gt=0,
        description="Maximum fungible amount of a single output or category sum"
    )
    dust_threshold: int = Field(
        default=DEFAULT_DUST_THRESHOLD, ge=0,
        description="Satoshi value below which token outputs draw an advisory warning"
    )
    
    @model_validator(mode='after')
    def validate_amount_ceiling(self):
        """Amounts must fit a signed 64-bit integer."""
        if self.max_amount > MAX_AMOUNT:
            raise ValueError(f'max_amount cannot exceed {MAX_AMOUNT}')
        return self
    
    @classmethod
    def create(cls, **options: Any) -> 'ProtocolConfig':
        """
        Build a configuration, converting validation failures.
        
        Raises:
            ConfigurationError: If any option is out of range or unknown
        """
        try:
            return cls(**options)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid protocol configuration: {e}") from e
    
    def merged(self, overrides: Dict[str, Any]) -> 'ProtocolConfig':
        """Return a new configuration with the given options replaced."""
        return ProtocolConfig.create(**{**self.model_dump(), **overrides})


DEFAULT_CONFIG = ProtocolConfig()
