"""
Pytest configuration and fixtures for CashToken validator tests.
"""

from typing import List, Optional

import pytest

from ledger.config import ProtocolConfig
from ledger.model import NFT, Capability, Token, Transaction, TransactionInput, UTXO
from validator.core import ValidationEngine

GENESIS_TXID = bytes.fromhex("aa" * 32)
FUNDING_TXID = bytes.fromhex("bb" * 32)
CATEGORY_A = bytes.fromhex("01" * 32)
CATEGORY_B = bytes.fromhex("02" * 32)


class TransactionBuilder:
    """Assembles test transactions one input/output at a time."""
    
    def __init__(self, txid: bytes = GENESIS_TXID):
        self.txid = txid
        self.inputs: List[TransactionInput] = []
        self.outputs: List[UTXO] = []
    
    @staticmethod
    def _token(category: Optional[bytes], amount: int,
               capability: Optional[Capability], commitment: bytes) -> Optional[Token]:
        if category is None:
            return None
        nft = NFT(capability, commitment) if capability is not None else None
        return Token(category=category, amount=amount, nft=nft)
    
    def add_input(self, category: Optional[bytes] = None, amount: int = 0,
                  capability: Optional[Capability] = None, commitment: bytes = b"",
                  value: int = 1000) -> 'TransactionBuilder':
        prevout = UTXO(
            value=value,
            txid=FUNDING_TXID,
            output_index=len(self.inputs),
            token=self._token(category, amount, capability, commitment)
        )
        self.inputs.append(TransactionInput(prevout=prevout))
        return self
    
    def add_output(self, category: Optional[bytes] = None, amount: int = 0,
                   capability: Optional[Capability] = None, commitment: bytes = b"",
                   value: int = 1000) -> 'TransactionBuilder':
        self.outputs.append(UTXO(
            value=value,
            txid=self.txid,
            output_index=len(self.outputs),
            token=self._token(category, amount, capability, commitment)
        ))
        return self
    
    def build(self) -> Transaction:
        return Transaction(txid=self.txid, inputs=tuple(self.inputs), outputs=tuple(self.outputs))


@pytest.fixture
def builder():
    """Fresh transaction builder for the genesis txid."""
    return TransactionBuilder()


@pytest.fixture
def protocol_config():
    return ProtocolConfig()


@pytest.fixture
def engine(protocol_config):
    return ValidationEngine(protocol_config)


@pytest.fixture
def category_a():
    return CATEGORY_A


@pytest.fixture
def category_b():
    return CATEGORY_B


@pytest.fixture
def genesis_txid():
    return GENESIS_TXID


@pytest.fixture
def builder_factory():
    """TransactionBuilder class, for tests needing several transactions."""
    return TransactionBuilder
