"""
CashToken Validator - Previous Output Resolution

Resolvers that turn outpoints into the UTXOs they reference, so a transaction
can be handed to the validator with every prevout already attached. This is
the only I/O-bound step of validation and it runs entirely before the engine.
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ledger.codec import node_output_to_utxo
from ledger.exceptions import PrevoutNotFound, TransactionDecodeError
from ledger.model import Outpoint, Transaction, TransactionInput, UTXO
from .rpc import RPC_INVALID_ADDRESS_OR_KEY, NodeRPCClient, RPCError

DEFAULT_MAX_CACHED_TRANSACTIONS = 1024


class PrevoutResolver(ABC):
    """Looks up the UTXO referenced by an outpoint."""
    
    @abstractmethod
    def resolve(self, outpoint: Outpoint) -> UTXO:
        """
        Resolve an outpoint.
        
        Raises:
            PrevoutNotFound: If the referenced output does not exist
        """
        pass
    
    def resolve_all(self, outpoints: Iterable[Outpoint]) -> List[UTXO]:
        return [self.resolve(outpoint) for outpoint in outpoints]


class InMemoryPrevoutResolver(PrevoutResolver):
    """Dictionary-backed resolver for fixtures and offline tooling."""
    
    def __init__(self, utxos: Optional[Iterable[UTXO]] = None):
        self._utxos: Dict[Outpoint, UTXO] = {}
        for utxo in utxos or ():
            self.add(utxo)
    
    def add(self, utxo: UTXO):
        self._utxos[utxo.outpoint] = utxo
    
    def resolve(self, outpoint: Outpoint) -> UTXO:
        try:
            return self._utxos[outpoint]
        except KeyError:
            raise PrevoutNotFound(outpoint)
    
    def __len__(self) -> int:
        return len(self._utxos)


class RPCPrevoutResolver(PrevoutResolver):
    """
    Resolver backed by a node's getrawtransaction RPC.
    
    Decoded transactions are kept in a bounded LRU cache keyed by txid.
    Transport retries happen inside the RPC client; a transaction the node
    does not know becomes PrevoutNotFound.
    """
    
    def __init__(self, client: NodeRPCClient, enable_caching: bool = True,
                 max_cached_transactions: int = DEFAULT_MAX_CACHED_TRANSACTIONS):
        if max_cached_transactions < 1:
            raise ValueError("max_cached_transactions must be at least 1")
        
        self.client = client
        self.enable_caching = enable_caching
        self.max_cached_transactions = max_cached_transactions
        self.logger = logging.getLogger(__name__)
        self._cache: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        self._cache_lock = threading.Lock()
        self.stats = {"hits": 0, "misses": 0, "evictions": 0}
    
    def _cache_get(self, txid_hex: str) -> Optional[Dict[str, Any]]:
        with self._cache_lock:
            decoded = self._cache.get(txid_hex)
            if decoded is None:
                self.stats["misses"] += 1
                return None
            self._cache.move_to_end(txid_hex)
            self.stats["hits"] += 1
            return decoded
    
    def _cache_put(self, txid_hex: str, decoded: Dict[str, Any]):
        with self._cache_lock:
            self._cache[txid_hex] = decoded
            self._cache.move_to_end(txid_hex)
            while len(self._cache) > self.max_cached_transactions:
                evicted, _ = self._cache.popitem(last=False)
                self.stats["evictions"] += 1
                self.logger.debug(f"Evicted cached transaction {evicted}")
    
    def _fetch_transaction(self, txid_hex: str) -> Dict[str, Any]:
        if self.enable_caching:
            cached = self._cache_get(txid_hex)
            if cached is not None:
                return cached
        
        decoded = self.client.getrawtransaction(txid_hex, True)
        
        if self.enable_caching:
            self._cache_put(txid_hex, decoded)
        
        return decoded
    
    def resolve(self, outpoint: Outpoint) -> UTXO:
        txid_hex = outpoint.txid.hex()
        
        try:
            decoded = self._fetch_transaction(txid_hex)
        except RPCError as e:
            if e.code == RPC_INVALID_ADDRESS_OR_KEY:
                raise PrevoutNotFound(outpoint) from e
            raise
        
        for vout in decoded.get("vout", []):
            if vout.get("n") == outpoint.index:
                try:
                    return node_output_to_utxo(vout, outpoint.txid)
                except TransactionDecodeError as e:
                    raise TransactionDecodeError(f"Invalid output {outpoint}: {e}") from e
        
        raise PrevoutNotFound(outpoint)
    
    @property
    def cache_size(self) -> int:
        with self._cache_lock:
            return len(self._cache)
    
    def clear_cache(self):
        with self._cache_lock:
            self._cache.clear()


def resolve_transaction(txid: bytes, outpoints: Sequence[Outpoint],
                        outputs: Sequence[UTXO], resolver: PrevoutResolver) -> Transaction:
    """
    Build a validator-ready transaction from unresolved parts.
    
    Args:
        txid: The transaction's own identifier
        outpoints: Outpoints spent by the transaction, in input order
        outputs: Proposed outputs, in output order
        resolver: Resolver for the spent outpoints
        
    Returns:
        Transaction whose inputs carry their resolved prevouts
        
    Raises:
        PrevoutNotFound: If any outpoint cannot be resolved
    """
    inputs = tuple(TransactionInput(prevout=utxo) for utxo in resolver.resolve_all(outpoints))
    return Transaction(txid=txid, inputs=inputs, outputs=tuple(outputs))
