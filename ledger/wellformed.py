"""
CashToken Validator - Well-Formedness Checks

Structural checks every UTXO must pass before token accounting runs. The
checks never raise for malformed data; each problem becomes a FormatError.
"""

import logging
from typing import List

from .config import DEFAULT_CONFIG, ProtocolConfig
from .model import CATEGORY_LENGTH, TXID_LENGTH, Capability, Transaction, UTXO
from .violations import FormatError

logger = logging.getLogger(__name__)


def _is_integer(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_well_formed(utxo: UTXO, config: ProtocolConfig = DEFAULT_CONFIG,
                         location: str = "") -> List[FormatError]:
    """
    Check a single UTXO against the ledger invariants.
    
    Args:
        utxo: UTXO to check
        config: Protocol limits to check against
        location: Label used in error messages (e.g. "output[1]")
        
    Returns:
        List of format errors, empty when the UTXO is well formed
    """
    errors: List[FormatError] = []
    
    def fail(field_name: str, reason: str):
        errors.append(FormatError(field=field_name, reason=reason, location=location))
    
    if not _is_integer(utxo.value) or utxo.value < 0:
        fail("value", f"satoshi value must be a non-negative integer, got {utxo.value!r}")
    
    if not isinstance(utxo.txid, bytes) or len(utxo.txid) != TXID_LENGTH:
        fail("txid", f"transaction id must be {TXID_LENGTH} bytes")
    
    if not _is_integer(utxo.output_index) or utxo.output_index < 0:
        fail("output_index", f"output index must be a non-negative integer, got {utxo.output_index!r}")
    
    token = utxo.token
    if token is None:
        return errors
    
    if not isinstance(token.category, bytes) or len(token.category) != CATEGORY_LENGTH:
        fail("category", f"category must be exactly {CATEGORY_LENGTH} bytes")
    
    if not _is_integer(token.amount):
        fail("amount", f"amount must be an integer, got {token.amount!r}")
    elif token.amount < 0:
        fail("amount", f"amount {token.amount} is negative")
    elif token.amount > config.max_amount:
        fail("amount", f"amount {token.amount} exceeds maximum {config.max_amount}")
    
    nft = token.nft
    if nft is not None:
        if not isinstance(nft.capability, Capability):
            fail("capability", f"unknown capability {nft.capability!r}")
        if not isinstance(nft.commitment, bytes):
            fail("commitment", "commitment must be bytes")
        elif len(nft.commitment) > config.max_commitment_length:
            fail(
                "commitment",
                f"commitment length {len(nft.commitment)} exceeds maximum "
                f"{config.max_commitment_length}"
            )
    elif _is_integer(token.amount) and token.amount == 0:
        fail("token", "token carries neither a fungible amount nor an NFT")
    
    return errors


def validate_transaction_well_formed(tx: Transaction,
                                     config: ProtocolConfig = DEFAULT_CONFIG) -> List[FormatError]:
    """Check the transaction id and every prevout and output of a transaction."""
    errors: List[FormatError] = []
    
    if not isinstance(tx.txid, bytes) or len(tx.txid) != TXID_LENGTH:
        errors.append(FormatError(
            field="txid",
            reason=f"transaction id must be {TXID_LENGTH} bytes",
            location="transaction"
        ))
    
    for location, utxo in tx.iter_located_utxos():
        errors.extend(validate_well_formed(utxo, config, location))
    
    if errors:
        logger.debug(f"Transaction has {len(errors)} format errors")
    
    return errors


def find_dust_outputs(tx: Transaction, config: ProtocolConfig = DEFAULT_CONFIG) -> List[int]:
    """Return indexes of token-bearing outputs whose value is below the dust threshold."""
    return [
        index for index, output in enumerate(tx.outputs)
        if output.has_token and output.value < config.dust_threshold
    ]
