"""Meta Call Types.

Type trees for parsed method definitions, decoded RLP values, and the wire
and internal representations of a meta call.
"""

import struct
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from .errors import ArgumentParseError
from .utils import format_address


# -----------------------------
# Argument types
# -----------------------------


@dataclass(frozen=True)
class AddressType:
    """``address``"""


@dataclass(frozen=True)
class UintType:
    """``uint`` / ``uintN``. The bit width does not affect hashing."""


@dataclass(frozen=True)
class IntType:
    """``int`` / ``intN``."""


@dataclass(frozen=True)
class BoolType:
    """``bool``"""


@dataclass(frozen=True)
class StringType:
    """``string``"""


@dataclass(frozen=True)
class BytesType:
    """Dynamic ``bytes``."""


@dataclass(frozen=True)
class FixedBytesType:
    """``bytesN`` with N in 1..32. ``byte`` is ``bytes1``."""

    size: int


@dataclass(frozen=True)
class CustomType:
    """Reference to a struct declared alongside the method."""

    name: str


@dataclass(frozen=True)
class ArrayType:
    """``T[]`` (``length`` is None) or ``T[K]``."""

    inner: "ArgType"
    length: Optional[int] = None


ArgType = Union[
    AddressType,
    UintType,
    IntType,
    BoolType,
    StringType,
    BytesType,
    FixedBytesType,
    CustomType,
    ArrayType,
]


# -----------------------------
# RLP values
# -----------------------------


@dataclass(frozen=True)
class RlpBytes:
    """An RLP byte string."""

    data: bytes


@dataclass(frozen=True)
class RlpList:
    """An RLP list."""

    items: Tuple["RlpValue", ...] = ()


RlpValue = Union[RlpBytes, RlpList]


# -----------------------------
# Wire envelope
# -----------------------------


class _Reader:
    """Cursor over a Borsh encoded buffer."""

    def __init__(self, data: bytes):
        self._data = data
        self._offset = 0

    def take(self, size: int) -> bytes:
        end = self._offset + size
        if end > len(self._data):
            raise ArgumentParseError(
                f"Envelope truncated: need {end} bytes, have {len(self._data)}"
            )
        chunk = self._data[self._offset:end]
        self._offset = end
        return chunk

    def take_u8(self) -> int:
        return self.take(1)[0]

    def take_vec(self) -> bytes:
        (length,) = struct.unpack("<I", self.take(4))
        return self.take(length)

    def take_string(self) -> str:
        raw = self.take_vec()
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ArgumentParseError("Envelope string is not valid UTF-8") from exc

    def finish(self) -> None:
        if self._offset != len(self._data):
            raise ArgumentParseError(
                f"Envelope has {len(self._data) - self._offset} trailing bytes"
            )


def _vec(data: bytes) -> bytes:
    return struct.pack("<I", len(data)) + data


@dataclass
class MetaCallArgs:
    """Signed meta call as received on the wire (Borsh layout)."""

    signature: bytes
    """64 bytes: ``r || s``."""

    v: int
    """Recovery byte, 0/1 or 27/28."""

    nonce: bytes
    """32-byte big-endian."""

    fee_amount: bytes
    """32-byte big-endian."""

    fee_address: str
    contract_address: str

    value: bytes
    """32-byte big-endian."""

    method: str
    """Full method definition, e.g. ``adopt(uint256 petId)``. Empty for a plain call."""

    args: bytes
    """RLP encoded argument list."""

    @classmethod
    def from_bytes(cls, data: bytes) -> "MetaCallArgs":
        """Decode the wire envelope.

        Raises:
            ArgumentParseError: If the buffer is truncated, has trailing
                bytes, or carries invalid UTF-8
        """
        reader = _Reader(bytes(data))
        result = cls(
            signature=reader.take(64),
            v=reader.take_u8(),
            nonce=reader.take(32),
            fee_amount=reader.take(32),
            fee_address=reader.take_string(),
            contract_address=reader.take_string(),
            value=reader.take(32),
            method=reader.take_string(),
            args=reader.take_vec(),
        )
        reader.finish()
        return result

    def to_bytes(self) -> bytes:
        """Encode the wire envelope."""
        for name in ("nonce", "fee_amount", "value"):
            if len(getattr(self, name)) != 32:
                raise ValueError(f"{name} must be 32 bytes")
        if len(self.signature) != 64:
            raise ValueError("signature must be 64 bytes")
        return b"".join(
            [
                self.signature,
                struct.pack("<B", self.v),
                self.nonce,
                self.fee_amount,
                _vec(self.fee_address.encode("utf-8")),
                _vec(self.contract_address.encode("utf-8")),
                self.value,
                _vec(self.method.encode("utf-8")),
                _vec(self.args),
            ]
        )


@dataclass
class InternalMetaCallArgs:
    """Meta call with numeric fields widened and, once verified, its sender."""

    nonce: int
    fee_amount: int
    fee_address: str
    contract_address: str
    method_name: str
    value: int
    args: bytes
    sender: Optional[bytes] = None
    """Raw 20-byte signer address. Unset until recovery succeeds."""

    raw_args: bytes = field(default=b"", repr=False)
    """The caller's original RLP argument payload."""

    @classmethod
    def from_wire(cls, meta_tx: MetaCallArgs) -> "InternalMetaCallArgs":
        return cls(
            nonce=int.from_bytes(meta_tx.nonce, "big"),
            fee_amount=int.from_bytes(meta_tx.fee_amount, "big"),
            fee_address=meta_tx.fee_address,
            contract_address=meta_tx.contract_address,
            method_name=meta_tx.method,
            value=int.from_bytes(meta_tx.value, "big"),
            args=meta_tx.args,
            raw_args=meta_tx.args,
        )

    @property
    def sender_address(self) -> Optional[str]:
        """Checksum form of ``sender``."""
        if self.sender is None:
            return None
        return format_address(self.sender)

    def populate(self, sender: bytes, method_name: str, args: bytes) -> None:
        """Record the verified sender and the canonical method data.

        Raises:
            ValueError: If the sender was already set
        """
        if self.sender is not None:
            raise ValueError("Meta call sender is already set")
        self.sender = sender
        self.method_name = method_name
        self.args = args
