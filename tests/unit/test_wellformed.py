"""
Tests for UTXO and transaction well-formedness checks.
"""

import pytest

from ledger.config import ProtocolConfig
from ledger.model import NFT, Capability, Token, Transaction, TransactionInput, UTXO
from ledger.violations import FormatError
from ledger.wellformed import (
    find_dust_outputs,
    validate_transaction_well_formed,
    validate_well_formed
)

TXID = bytes.fromhex("11" * 32)
CATEGORY = bytes.fromhex("22" * 32)


def make_utxo(token=None, value=1000, txid=TXID, index=0):
    return UTXO(value=value, txid=txid, output_index=index, token=token)


def fields_of(errors):
    return [error.field for error in errors]


class TestValidateWellFormed:
    
    def test_plain_utxo_is_well_formed(self):
        assert validate_well_formed(make_utxo()) == []
    
    def test_fungible_token_is_well_formed(self):
        assert validate_well_formed(make_utxo(Token(CATEGORY, amount=500))) == []
    
    def test_nft_with_maximum_commitment(self):
        token = Token(CATEGORY, nft=NFT(Capability.MUTABLE, b"\x00" * 40))
        assert validate_well_formed(make_utxo(token)) == []
    
    @pytest.mark.parametrize("category", [b"", b"\x01" * 31, b"\x01" * 33])
    def test_category_length(self, category):
        errors = validate_well_formed(make_utxo(Token(category, amount=1)))
        assert fields_of(errors) == ["category"]
    
    def test_commitment_too_long(self):
        token = Token(CATEGORY, nft=NFT(Capability.NONE, b"\x00" * 41))
        errors = validate_well_formed(make_utxo(token), location="output[2]")
        
        assert errors == [FormatError(
            field="commitment",
            reason="commitment length 41 exceeds maximum 40",
            location="output[2]"
        )]
    
    def test_commitment_limit_is_configurable(self):
        token = Token(CATEGORY, nft=NFT(Capability.NONE, b"\x00" * 64))
        config = ProtocolConfig.create(max_commitment_length=128)
        
        assert validate_well_formed(make_utxo(token), config) == []
    
    def test_negative_amount(self):
        errors = validate_well_formed(make_utxo(Token(CATEGORY, amount=-1)))
        assert fields_of(errors) == ["amount"]
        assert "negative" in errors[0].reason
    
    def test_amount_above_maximum(self):
        config = ProtocolConfig.create(max_amount=1000)
        errors = validate_well_formed(make_utxo(Token(CATEGORY, amount=1001)), config)
        assert fields_of(errors) == ["amount"]
    
    def test_non_integer_amount(self):
        errors = validate_well_formed(make_utxo(Token(CATEGORY, amount="5")))
        assert fields_of(errors) == ["amount"]
    
    def test_empty_token(self):
        errors = validate_well_formed(make_utxo(Token(CATEGORY, amount=0)))
        assert fields_of(errors) == ["token"]
    
    def test_unknown_capability(self):
        token = Token(CATEGORY, nft=NFT(capability=7, commitment=b""))
        errors = validate_well_formed(make_utxo(token))
        assert fields_of(errors) == ["capability"]
    
    def test_negative_value_and_index(self):
        errors = validate_well_formed(make_utxo(value=-1, index=-1))
        assert fields_of(errors) == ["value", "output_index"]
    
    def test_all_problems_reported(self):
        token = Token(b"\x01", amount=-3, nft=NFT(Capability.NONE, b"\x00" * 50))
        errors = validate_well_formed(make_utxo(token, txid=b"\x00"))
        
        assert fields_of(errors) == ["txid", "category", "amount", "commitment"]


class TestTransactionWellFormed:
    
    def test_locations_are_reported(self):
        bad = make_utxo(Token(CATEGORY, amount=-1))
        tx = Transaction(
            txid=TXID,
            inputs=(TransactionInput(make_utxo()),),
            outputs=(make_utxo(), bad)
        )
        
        errors = validate_transaction_well_formed(tx)
        assert [error.location for error in errors] == ["output[1]"]
    
    def test_bad_txid(self):
        tx = Transaction(txid=b"\x01\x02")
        errors = validate_transaction_well_formed(tx)
        
        assert errors[0].field == "txid"
        assert errors[0].location == "transaction"


class TestDustOutputs:
    
    def test_only_token_outputs_below_threshold(self):
        tx = Transaction(txid=TXID, outputs=(
            make_utxo(Token(CATEGORY, amount=1), value=545, index=0),
            make_utxo(Token(CATEGORY, amount=1), value=546, index=1),
            make_utxo(value=10, index=2),
        ))
        
        assert find_dust_outputs(tx) == [0]
    
    def test_threshold_is_configurable(self):
        tx = Transaction(txid=TXID, outputs=(make_utxo(Token(CATEGORY, amount=1), value=800),))
        config = ProtocolConfig.create(dust_threshold=1000)
        
        assert find_dust_outputs(tx, config) == [0]
