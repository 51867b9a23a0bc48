"""
CashToken Validator - JSON Transaction Codec

Pydantic document models for the plain JSON format used by the CLI, test
fixtures and node RPC replies, and their mapping onto the ledger model.
Categories, transaction ids and commitments are hex strings; capabilities are
lowercase names; amounts may be decimal strings so 63-bit values survive JSON.

Document format::

    {
      "txid": "<64 hex>",
      "inputs": [
        {"prevout": {"txid": "<64 hex>", "vout": 0, "value": 1000,
                     "token": {"category": "<64 hex>", "amount": "100",
                               "nft": {"capability": "none", "commitment": "ab"}}}}
      ],
      "outputs": [{"value": 1000, "token": {...}}]
    }

Output txids and indexes are implied by the transaction. The models only
check types; protocol limits (lengths, ranges) are reported later by the
well-formedness checks.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError, field_serializer, field_validator

from .exceptions import TransactionDecodeError
from .model import NFT, Capability, Token, Transaction, TransactionInput, UTXO

SATOSHIS_PER_COIN = Decimal(100_000_000)

DocumentT = TypeVar("DocumentT", bound=BaseModel)


def _parse_hex(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    if not isinstance(value, str):
        raise ValueError("must be a hex string")
    try:
        return bytes.fromhex(value)
    except ValueError as e:
        raise ValueError(f"is not valid hex: {e}")


def _parse_integer(value: Any) -> Any:
    # bool is an int subclass but never a valid amount
    if isinstance(value, bool):
        raise ValueError("must be an integer, not a boolean")
    if isinstance(value, str):
        try:
            return int(value, 10)
        except ValueError:
            raise ValueError(f"is not an integer: {value!r}")
    return value


class NFTDocument(BaseModel):
    """NFT payload of a token document."""
    
    capability: Capability = Field(default=Capability.NONE, description="none, mutable or minting")
    commitment: bytes = Field(default=b"", description="Commitment (hex)")
    
    @field_validator('capability', mode='before')
    @classmethod
    def validate_capability(cls, v):
        """Accept capability names only."""
        if isinstance(v, Capability):
            return v
        if not isinstance(v, str):
            raise ValueError("capability must be one of 'none', 'mutable', 'minting'")
        return Capability.from_label(v)
    
    @field_validator('commitment', mode='before')
    @classmethod
    def validate_commitment(cls, v):
        return _parse_hex(v)
    
    @field_serializer('capability')
    def serialize_capability(self, capability: Capability) -> str:
        return capability.label
    
    @field_serializer('commitment')
    def serialize_commitment(self, commitment: bytes) -> str:
        return commitment.hex()
    
    def to_nft(self) -> NFT:
        return NFT(capability=self.capability, commitment=self.commitment)
    
    @classmethod
    def from_nft(cls, nft: NFT) -> 'NFTDocument':
        return cls(capability=nft.capability, commitment=nft.commitment)


class TokenDocument(BaseModel):
    """Token data of an output, as found in fixtures and node tokenData."""
    
    category: bytes = Field(..., description="Category id (hex)")
    amount: int = Field(default=0, description="Fungible amount (integer or decimal string)")
    nft: Optional[NFTDocument] = None
    
    @field_validator('category', mode='before')
    @classmethod
    def validate_category(cls, v):
        return _parse_hex(v)
    
    @field_validator('amount', mode='before')
    @classmethod
    def validate_amount(cls, v):
        return _parse_integer(v)
    
    @field_serializer('category')
    def serialize_category(self, category: bytes) -> str:
        return category.hex()
    
    @field_serializer('amount')
    def serialize_amount(self, amount: int) -> str:
        return str(amount)
    
    def to_token(self) -> Token:
        nft = self.nft.to_nft() if self.nft is not None else None
        return Token(category=self.category, amount=self.amount, nft=nft)
    
    @classmethod
    def from_token(cls, token: Token) -> 'TokenDocument':
        nft = NFTDocument.from_nft(token.nft) if token.nft is not None else None
        return cls(category=token.category, amount=token.amount, nft=nft)


class UTXODocument(BaseModel):
    """
    UTXO document.
    
    txid and vout are optional so transaction outputs can inherit them from
    the enclosing transaction.
    """
    
    txid: Optional[bytes] = Field(default=None, description="Transaction id (hex)")
    vout: Optional[int] = None
    value: int = Field(default=0, description="Satoshi value")
    token: Optional[TokenDocument] = None
    
    @field_validator('txid', mode='before')
    @classmethod
    def validate_txid(cls, v):
        return None if v is None else _parse_hex(v)
    
    @field_validator('vout', 'value', mode='before')
    @classmethod
    def validate_integers(cls, v):
        return _parse_integer(v)
    
    @field_serializer('txid')
    def serialize_txid(self, txid: Optional[bytes]) -> Optional[str]:
        return None if txid is None else txid.hex()
    
    def to_utxo(self, txid: Optional[bytes] = None, index: Optional[int] = None) -> UTXO:
        txid = self.txid if self.txid is not None else txid
        index = self.vout if self.vout is not None else index
        if txid is None or index is None:
            raise TransactionDecodeError("UTXO is missing txid or vout")
        
        token = self.token.to_token() if self.token is not None else None
        return UTXO(value=self.value, txid=txid, output_index=index, token=token)
    
    @classmethod
    def from_utxo(cls, utxo: UTXO, with_outpoint: bool = True) -> 'UTXODocument':
        token = TokenDocument.from_token(utxo.token) if utxo.token is not None else None
        if not with_outpoint:
            return cls(value=utxo.value, token=token)
        return cls(txid=utxo.txid, vout=utxo.output_index, value=utxo.value, token=token)


class InputDocument(BaseModel):
    """Transaction input carrying its resolved previous output."""
    
    prevout: UTXODocument


class TransactionDocument(BaseModel):
    """Transaction with resolved prevouts and proposed outputs."""
    
    txid: bytes = Field(..., description="Transaction id (hex)")
    inputs: List[InputDocument] = Field(default_factory=list)
    outputs: List[UTXODocument] = Field(default_factory=list)
    
    @field_validator('txid', mode='before')
    @classmethod
    def validate_txid(cls, v):
        return _parse_hex(v)
    
    @field_serializer('txid')
    def serialize_txid(self, txid: bytes) -> str:
        return txid.hex()
    
    def to_transaction(self) -> Transaction:
        inputs = []
        for i, input_document in enumerate(self.inputs):
            try:
                inputs.append(TransactionInput(prevout=input_document.prevout.to_utxo()))
            except TransactionDecodeError as e:
                raise TransactionDecodeError(f"input {i}: {e}") from e
        
        outputs = [
            output_document.to_utxo(txid=self.txid, index=j)
            for j, output_document in enumerate(self.outputs)
        ]
        return Transaction(txid=self.txid, inputs=tuple(inputs), outputs=tuple(outputs))


class NodeOutputDocument(BaseModel):
    """Entry of the vout array in a node's verbose getrawtransaction reply."""
    
    n: int
    value: Decimal = Field(default=Decimal(0), description="Value in coins")
    token_data: Optional[TokenDocument] = Field(default=None, alias="tokenData")
    
    @field_validator('value', mode='before')
    @classmethod
    def validate_value(cls, v):
        # str() keeps the exact decimal digits of a JSON float
        try:
            return Decimal(str(v))
        except InvalidOperation:
            raise ValueError(f"is not a coin amount: {v!r}")
    
    @property
    def satoshis(self) -> int:
        return int((self.value * SATOSHIS_PER_COIN).to_integral_value())
    
    def to_utxo(self, txid: bytes) -> UTXO:
        token = self.token_data.to_token() if self.token_data is not None else None
        return UTXO(value=self.satoshis, txid=txid, output_index=self.n, token=token)


def _describe_errors(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in detail['loc']) or 'document'}: {detail['msg']}"
        for detail in error.errors()
    )


def parse_document(model: Type[DocumentT], data: Any) -> DocumentT:
    """
    Validate raw JSON data against a document model.
    
    Raises:
        TransactionDecodeError: If the data does not match the model
    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise TransactionDecodeError(f"Invalid {model.__name__}: {_describe_errors(e)}") from e


def token_from_dict(data: Optional[Dict[str, Any]]) -> Optional[Token]:
    """Decode a token object, or None when absent."""
    if data is None:
        return None
    return parse_document(TokenDocument, data).to_token()


def token_to_dict(token: Optional[Token]) -> Optional[Dict[str, Any]]:
    if token is None:
        return None
    return TokenDocument.from_token(token).model_dump(mode="json", exclude_none=True)


def utxo_from_dict(data: Dict[str, Any], txid: Optional[bytes] = None,
                   index: Optional[int] = None) -> UTXO:
    """
    Decode a UTXO.
    
    Args:
        data: UTXO object
        txid: Transaction id to use when the object carries none
        index: Output index to use when the object carries none
    
    Returns:
        Decoded UTXO
    """
    return parse_document(UTXODocument, data).to_utxo(txid, index)


def utxo_to_dict(utxo: UTXO) -> Dict[str, Any]:
    return UTXODocument.from_utxo(utxo).model_dump(mode="json", exclude_none=True)


def node_output_to_utxo(data: Dict[str, Any], txid: bytes) -> UTXO:
    """Decode one vout entry of a verbose getrawtransaction reply."""
    return parse_document(NodeOutputDocument, data).to_utxo(txid)


def transaction_from_dict(data: Dict[str, Any]) -> Transaction:
    """
    Decode a transaction document.
    
    Raises:
        TransactionDecodeError: If the document is structurally invalid
    """
    return parse_document(TransactionDocument, data).to_transaction()


def transaction_to_dict(tx: Transaction) -> Dict[str, Any]:
    document = TransactionDocument(
        txid=tx.txid,
        inputs=[InputDocument(prevout=UTXODocument.from_utxo(i.prevout)) for i in tx.inputs],
        outputs=[UTXODocument.from_utxo(output, with_outpoint=False) for output in tx.outputs]
    )
    return document.model_dump(mode="json", exclude_none=True)
