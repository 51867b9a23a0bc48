"""
CashToken Validator - Token Ledger Model

This module defines the immutable value types the validator operates on:
capabilities, NFTs, tokens, UTXOs and transactions. Instances are snapshots
built once per validation call and are safe to share between threads.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterator, Optional, Tuple

CATEGORY_LENGTH = 32
TXID_LENGTH = 32


class Capability(IntEnum):
    """
    NFT capability, ordered by authority.
    
    Values match the low nibble of the CashTokens token bitfield so a
    capability occupies a single byte at the model boundary.
    """
    NONE = 0
    MUTABLE = 1
    MINTING = 2
    
    @property
    def label(self) -> str:
        return self.name.lower()
    
    @classmethod
    def from_label(cls, label: str) -> 'Capability':
        """Parse a lowercase capability name ("none", "mutable", "minting")."""
        try:
            return cls[label.upper()]
        except KeyError:
            raise ValueError(f"Unknown capability: {label!r}")
    
    @classmethod
    def from_byte(cls, value: int) -> 'Capability':
        """Decode a capability from the low nibble of a token bitfield byte."""
        return cls(value & 0x0F)


@dataclass(frozen=True)
class NFT:
    """Non-fungible token payload."""
    capability: Capability = Capability.NONE
    commitment: bytes = b""
    
    def describe(self) -> str:
        commitment = self.commitment.hex() or "<empty>"
        return f"{self.capability.label}:{commitment}"


@dataclass(frozen=True)
class Token:
    """
    Token data attached to an output.
    
    A token may carry a fungible amount, an NFT, or both. The category is
    the 32-byte identifier of the genesis transaction.
    """
    category: bytes
    amount: int = 0
    nft: Optional[NFT] = None
    
    @property
    def category_hex(self) -> str:
        return self.category.hex()
    
    @property
    def is_fungible_only(self) -> bool:
        return self.nft is None and self.amount > 0
    
    @property
    def is_pure_nft(self) -> bool:
        return self.nft is not None and self.amount == 0


@dataclass(frozen=True)
class Outpoint:
    """Reference to a transaction output."""
    txid: bytes
    index: int
    
    def __str__(self) -> str:
        return f"{self.txid.hex()}:{self.index}"


@dataclass(frozen=True)
class UTXO:
    """Transaction output with optional token data."""
    value: int
    txid: bytes
    output_index: int
    token: Optional[Token] = None
    
    @property
    def outpoint(self) -> Outpoint:
        return Outpoint(self.txid, self.output_index)
    
    @property
    def has_token(self) -> bool:
        return self.token is not None


@dataclass(frozen=True)
class TransactionInput:
    """Transaction input carrying its already-resolved previous output."""
    prevout: UTXO
    
    @property
    def outpoint(self) -> Outpoint:
        return self.prevout.outpoint


@dataclass(frozen=True)
class Transaction:
    """
    Transaction under validation.
    
    The identifier is supplied by the caller; a category equal to it is a
    genesis category for this transaction.
    """
    txid: bytes
    inputs: Tuple[TransactionInput, ...] = field(default_factory=tuple)
    outputs: Tuple[UTXO, ...] = field(default_factory=tuple)
    
    def __post_init__(self):
        # Accept lists from callers while keeping the value hashable.
        object.__setattr__(self, "inputs", tuple(self.inputs))
        object.__setattr__(self, "outputs", tuple(self.outputs))
    
    @property
    def txid_hex(self) -> str:
        return self.txid.hex()
    
    def iter_located_utxos(self) -> Iterator[Tuple[str, UTXO]]:
        """Yield (location, utxo) for every prevout and output in order."""
        for i, tx_input in enumerate(self.inputs):
            yield f"input[{i}]", tx_input.prevout
        for j, output in enumerate(self.outputs):
            yield f"output[{j}]", output
