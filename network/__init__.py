"""
CashToken Validator Network Module

Node RPC access and previous-output resolution performed before validation.
"""

from .rpc import (
    RPCConfig,
    RPCError,
    RPCConnectionError,
    RPCAuthError,
    RPCTimeoutError,
    NodeRPCClient
)

from .prevouts import (
    PrevoutResolver,
    InMemoryPrevoutResolver,
    RPCPrevoutResolver,
    resolve_transaction
)

__all__ = [
    "RPCConfig",
    "RPCError",
    "RPCConnectionError",
    "RPCAuthError",
    "RPCTimeoutError",
    "NodeRPCClient",
    "PrevoutResolver",
    "InMemoryPrevoutResolver",
    "RPCPrevoutResolver",
    "resolve_transaction"
]
