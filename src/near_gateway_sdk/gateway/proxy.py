"""Argument layouts understood by the per-user proxy account.

``transfer`` input::

    <amount:u128><receiver_id:bytes>

``call`` input::

    <gas:u64><amount:u128><receiver_len:u32><receiver_id:bytes>
    <method_name_len:u32><method_name:bytes><args_len:u32><args:bytes>

All integers are little-endian.
"""

import struct
from dataclasses import dataclass

from .errors import ProxyArgumentError

U128_MAX = 2**128 - 1
U64_MAX = 2**64 - 1


def _u128(value: int) -> bytes:
    if value < 0 or value > U128_MAX:
        raise ProxyArgumentError(f"Amount does not fit in u128: {value}")
    return value.to_bytes(16, "little")


def _u32_prefixed(data: bytes) -> bytes:
    return struct.pack("<I", len(data)) + data


def encode_transfer_args(amount: int, receiver_id: str) -> bytes:
    """Encode the input of the proxy's ``transfer`` method."""
    return _u128(amount) + receiver_id.encode("utf-8")


def decode_transfer_args(data: bytes):
    """Decode ``transfer`` input into ``(amount, receiver_id)``."""
    if len(data) < 16:
        raise ProxyArgumentError("Transfer args shorter than 16 bytes")
    try:
        receiver_id = data[16:].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ProxyArgumentError("Receiver id is not valid UTF-8") from exc
    return int.from_bytes(data[:16], "little"), receiver_id


@dataclass
class ProxyCall:
    """A function call forwarded through the proxy's ``call`` method."""

    gas: int
    amount: int
    receiver_id: str
    method_name: str
    args: bytes = b""

    def to_bytes(self) -> bytes:
        if self.gas < 0 or self.gas > U64_MAX:
            raise ProxyArgumentError(f"Gas does not fit in u64: {self.gas}")
        return b"".join(
            [
                struct.pack("<Q", self.gas),
                _u128(self.amount),
                _u32_prefixed(self.receiver_id.encode("utf-8")),
                _u32_prefixed(self.method_name.encode("utf-8")),
                _u32_prefixed(self.args),
            ]
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "ProxyCall":
        """Decode ``call`` input.

        Raises:
            ProxyArgumentError: If the input is truncated or has trailing bytes
        """
        try:
            (gas,) = struct.unpack_from("<Q", data, 0)
            amount = int.from_bytes(data[8:24], "little")
            offset = 24
            fields = []
            for _ in range(3):
                (length,) = struct.unpack_from("<I", data, offset)
                offset += 4
                if offset + length > len(data):
                    raise ProxyArgumentError("Proxy call input truncated")
                fields.append(data[offset:offset + length])
                offset += length
        except struct.error as exc:
            raise ProxyArgumentError("Proxy call input truncated") from exc
        if offset != len(data):
            raise ProxyArgumentError("Proxy call input has trailing bytes")
        receiver_id, method_name, args = fields
        try:
            return cls(
                gas=gas,
                amount=amount,
                receiver_id=receiver_id.decode("utf-8"),
                method_name=method_name.decode("utf-8"),
                args=args,
            )
        except UnicodeDecodeError as exc:
            raise ProxyArgumentError("Proxy call names are not valid UTF-8") from exc
