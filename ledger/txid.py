"""
CashToken Validator - Transaction Identifiers

The validator treats a transaction id as an opaque 32-byte value supplied by
the caller. These helpers derive it from a serialized transaction the way
nodes do.
"""

import hashlib
from typing import Union


def double_sha256(data: bytes) -> bytes:
    """
    Calculate double SHA256 hash (used for transaction IDs).
    
    Args:
        data: Data to hash
        
    Returns:
        Double SHA256 hash
    """
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def compute_txid(raw_tx: Union[bytes, str]) -> bytes:
    """
    Compute a transaction id in display byte order.
    
    Args:
        raw_tx: Serialized transaction as bytes or hex string
        
    Returns:
        32-byte transaction id, byte-reversed like txids shown by nodes
    """
    if isinstance(raw_tx, str):
        raw_tx = bytes.fromhex(raw_tx)
    return double_sha256(raw_tx)[::-1]
