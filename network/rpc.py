"""
CashToken Validator - Node RPC Client

JSON-RPC access to a Bitcoin Cash node for previous-output resolution. The
validator itself never performs I/O; this client runs before it, so transport
retries and authentication live here.
"""

import json
import logging
import os
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import requests
from requests.adapters import HTTPAdapter
from requests.auth import HTTPBasicAuth
from urllib3.util.retry import Retry

# Node error code for an unknown transaction
RPC_INVALID_ADDRESS_OR_KEY = -5

# JSON-RPC code for an unparsable reply
RPC_PARSE_ERROR = -32700

RETRY_STATUS_CODES = (429, 500, 502, 503, 504)


class RPCError(Exception):
    """Error reported by the node or raised while talking to it."""
    
    def __init__(self, code: int, message: str, data: Optional[Any] = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"RPC error {code}: {message}")


class RPCConnectionError(RPCError):
    """The node could not be reached or answered with an HTTP error."""
    pass


class RPCAuthError(RPCError):
    """Credentials were missing, unreadable or rejected."""
    pass


class RPCTimeoutError(RPCError):
    """The node did not answer within the configured timeout."""
    pass


@dataclass
class RPCConfig:
    """Connection settings for one node."""
    host: str = "localhost"
    port: int = 8332
    username: Optional[str] = None
    password: Optional[str] = None
    cookie_file: Optional[str] = None
    timeout: int = 30
    max_retries: int = 3
    backoff_factor: float = 1.0
    use_ssl: bool = False
    
    def __post_init__(self):
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid RPC port: {self.port}")
        if not (self.username or self.cookie_file):
            raise ValueError("RPC credentials required: set a username/password or a cookie file")
    
    @property
    def url(self) -> str:
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{self.host}:{self.port}/"
    
    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'RPCConfig':
        """
        Build settings from CASHTOKENS_RPC_* variables.
        
        Args:
            environ: Variables to read (os.environ if None)
        """
        env = os.environ if environ is None else environ
        return cls(
            host=env.get("CASHTOKENS_RPC_HOST", "localhost"),
            port=int(env.get("CASHTOKENS_RPC_PORT", "8332")),
            username=env.get("CASHTOKENS_RPC_USER"),
            password=env.get("CASHTOKENS_RPC_PASSWORD"),
            cookie_file=env.get("CASHTOKENS_RPC_COOKIE_FILE"),
            timeout=int(env.get("CASHTOKENS_RPC_TIMEOUT", "30")),
            max_retries=int(env.get("CASHTOKENS_RPC_MAX_RETRIES", "3")),
            use_ssl=env.get("CASHTOKENS_RPC_SSL", "false").lower() == "true"
        )


def _resolve_auth(config: RPCConfig) -> HTTPBasicAuth:
    """Credentials from the config, falling back to the node's cookie file."""
    if config.username and config.password:
        return HTTPBasicAuth(config.username, config.password)
    
    try:
        cookie = Path(config.cookie_file).read_text().strip()
    except OSError as e:
        raise RPCAuthError(-1, f"Cannot read cookie file {config.cookie_file}: {e}") from e
    
    user, sep, secret = cookie.partition(":")
    if not sep:
        raise RPCAuthError(-1, f"Malformed cookie file {config.cookie_file}")
    return HTTPBasicAuth(user, secret)


def _build_session(config: RPCConfig) -> requests.Session:
    """HTTP session with pooled connections and transport retries."""
    session = requests.Session()
    retries = Retry(
        total=config.max_retries,
        backoff_factor=config.backoff_factor,
        status_forcelist=RETRY_STATUS_CODES,
        allowed_methods=frozenset(["POST"])
    )
    adapter = HTTPAdapter(max_retries=retries, pool_maxsize=10, pool_block=True)
    for prefix in ("http://", "https://"):
        session.mount(prefix, adapter)
    session.auth = _resolve_auth(config)
    session.headers.update({
        "Content-Type": "application/json",
        "User-Agent": "cashtoken-validator/0.1"
    })
    return session


class NodeRPCClient:
    """
    Minimal node client exposing the calls prevout resolution needs.
    
    The client is safe to share between threads: request ids come from a
    locked counter and requests.Session pools its connections.
    """
    
    def __init__(self, config: Optional[RPCConfig] = None):
        """
        Args:
            config: Connection settings (read from the environment if None)
        """
        self.config = config or RPCConfig.from_env()
        self.session = _build_session(self.config)
        self.logger = logging.getLogger(__name__)
        self._last_id = 0
        self._id_lock = threading.Lock()
    
    def _next_id(self) -> int:
        with self._id_lock:
            self._last_id += 1
            return self._last_id
    
    def call(self, method: str, *params: Any) -> Any:
        """
        Invoke an RPC method and return its result.
        
        Raises:
            RPCError: If the node reports an error or the transport fails
        """
        body = {"jsonrpc": "1.0", "id": self._next_id(), "method": method, "params": list(params)}
        started = time.monotonic()
        
        try:
            response = self.session.post(self.config.url, data=json.dumps(body),
                                         timeout=self.config.timeout)
        except requests.exceptions.Timeout as e:
            raise RPCTimeoutError(-1, f"{method} timed out after {self.config.timeout}s") from e
        except requests.exceptions.ConnectionError as e:
            raise RPCConnectionError(-1, f"Cannot reach node at {self.config.url}: {e}") from e
        except requests.exceptions.RequestException as e:
            raise RPCError(-1, f"{method} request failed: {e}") from e
        
        self.logger.debug(f"RPC {method} answered in {time.monotonic() - started:.3f}s")
        
        try:
            return self._unwrap(response)
        except RPCError as e:
            self.logger.error(f"RPC {method} failed: {e}")
            raise
    
    @staticmethod
    def _unwrap(response: requests.Response) -> Any:
        if response.status_code == 401:
            raise RPCAuthError(401, "Node rejected the RPC credentials")
        
        # Nodes send RPC-level errors with HTTP 404/500 and a JSON body
        try:
            reply: Dict[str, Any] = response.json()
        except ValueError as e:
            if response.status_code != 200:
                raise RPCConnectionError(response.status_code,
                                         f"HTTP {response.status_code} {response.reason}")
            raise RPCError(RPC_PARSE_ERROR, f"Unparsable reply: {e}") from e
        
        error = reply.get("error")
        if error:
            raise RPCError(error.get("code", -1), error.get("message", "unknown error"),
                           error.get("data"))
        if response.status_code != 200:
            raise RPCConnectionError(response.status_code,
                                     f"HTTP {response.status_code} {response.reason}")
        return reply.get("result")
    
    def getblockcount(self) -> int:
        return self.call("getblockcount")
    
    def getrawtransaction(self, txid: str, verbose: bool = False) -> Union[str, Dict[str, Any]]:
        """Fetch a transaction as hex, or decoded (with tokenData) when verbose."""
        return self.call("getrawtransaction", txid, verbose)
    
    def ping(self) -> bool:
        """Return True when the node answers."""
        try:
            return isinstance(self.getblockcount(), int)
        except RPCError as e:
            self.logger.warning(f"Node at {self.config.url} unreachable: {e}")
            return False
    
    def close(self):
        self.session.close()
    
    def __enter__(self):
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
