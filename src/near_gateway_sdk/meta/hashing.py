"""EIP-712 struct hashing over RLP decoded argument values.

See https://eips.ethereum.org/EIPS/eip-712#definition-of-hashstruct
"""

from typing import Dict, Optional, Protocol, Sequence

from eth_utils import keccak

from .errors import ArgsLengthMismatch, InvalidMetaTransactionFunctionArg
from .method_parser import Method
from .types import (
    AddressType,
    ArgType,
    ArrayType,
    BoolType,
    BytesType,
    CustomType,
    FixedBytesType,
    IntType,
    RlpBytes,
    RlpList,
    RlpValue,
    StringType,
    UintType,
)
from .utils import MAX_NESTING_DEPTH, encode_address, encode_uint256


class Hasher(Protocol):
    """Protocol for a 32-byte hash primitive (keccak-256)."""

    def hash(self, data: bytes) -> bytes:
        """Hash data to 32 bytes."""
        ...


class Keccak256:
    """Keccak-256 backed by ``eth_utils``."""

    def hash(self, data: bytes) -> bytes:
        return keccak(data)


KECCAK256 = Keccak256()


class StructHasher:
    """Compute EIP-712 encodings of argument values.

    Example::

        methods = MethodAndTypes.parse("adopt(uint256 petId,PetObj petObj)PetObj(string name)")
        hasher = StructHasher(methods.types)
        word = hasher.hash(methods.method.args[1].t, RlpList((RlpBytes(b"Rex"),)))
    """

    def __init__(
        self,
        types: Dict[str, Method],
        hasher: Optional[Hasher] = None,
        max_depth: int = MAX_NESTING_DEPTH,
    ):
        self.types = types
        self.hasher = hasher or KECCAK256
        self.max_depth = max_depth

    def type_hash(self, struct_name: str) -> bytes:
        """``keccak256`` of a struct's raw definition text."""
        struct_type = self._lookup(struct_name)
        return self.hasher.hash(struct_type.raw.encode("utf-8"))

    def hash(self, arg_type: ArgType, value: RlpValue, depth: int = 0) -> bytes:
        """Encode a single value of type ``arg_type`` to a 32-byte word.

        Raises:
            InvalidMetaTransactionFunctionArg: On a value/type shape
                mismatch, an undeclared struct, or recursion past the bound
            ArgsLengthMismatch: If a struct value has the wrong field count
        """
        if depth > self.max_depth:
            raise InvalidMetaTransactionFunctionArg(
                f"Struct values nested deeper than {self.max_depth}"
            )

        if isinstance(arg_type, (StringType, BytesType)):
            return self.hasher.hash(_expect_bytes(value))

        if isinstance(arg_type, FixedBytesType):
            data = _expect_bytes(value)
            if len(data) > arg_type.size:
                raise InvalidMetaTransactionFunctionArg(
                    f"bytes{arg_type.size} value is {len(data)} bytes long"
                )
            return data.ljust(32, b"\x00")

        # TODO: intN values are read as unsigned; signed values need an
        # agreed sign-extended RLP form from the off-chain encoder first.
        if isinstance(arg_type, (UintType, IntType, BoolType)):
            data = _expect_bytes(value)
            if len(data) > 32:
                raise InvalidMetaTransactionFunctionArg(
                    f"Integer value is {len(data)} bytes long"
                )
            return encode_uint256(int.from_bytes(data, "big"))

        if isinstance(arg_type, AddressType):
            data = _expect_bytes(value)
            if len(data) != 20:
                raise InvalidMetaTransactionFunctionArg(
                    f"Address value is {len(data)} bytes long"
                )
            return encode_address(data)

        if isinstance(arg_type, ArrayType):
            elements = _expect_list(value)
            if arg_type.length is not None and len(elements) != arg_type.length:
                raise InvalidMetaTransactionFunctionArg(
                    f"Expected {arg_type.length} array elements, got {len(elements)}"
                )
            return self.hasher.hash(
                b"".join(self.hash(arg_type.inner, element, depth + 1) for element in elements)
            )

        if isinstance(arg_type, CustomType):
            elements = _expect_list(value)
            struct_type = self._lookup(arg_type.name)
            if len(elements) != len(struct_type.args):
                raise ArgsLengthMismatch(
                    f"{arg_type.name} has {len(struct_type.args)} fields, got {len(elements)}"
                )
            encoded = [self.type_hash(arg_type.name)]
            for field_arg, element in zip(struct_type.args, elements):
                encoded.append(self.hash(field_arg.t, element, depth + 1))
            return self.hasher.hash(b"".join(encoded))

        raise InvalidMetaTransactionFunctionArg(f"Unsupported type: {arg_type!r}")

    def hash_args(self, args: Sequence[ArgType], values: Sequence[RlpValue]) -> bytes:
        """Concatenate the encodings of a method's argument values.

        Raises:
            ArgsLengthMismatch: If the value count differs from the arg count
        """
        if len(args) != len(values):
            raise ArgsLengthMismatch(f"Expected {len(args)} arguments, got {len(values)}")
        return b"".join(self.hash(arg_type, value) for arg_type, value in zip(args, values))

    def _lookup(self, name: str) -> Method:
        struct_type = self.types.get(name)
        if struct_type is None:
            raise InvalidMetaTransactionFunctionArg(f"Unknown struct type: {name}")
        return struct_type


def _expect_bytes(value: RlpValue) -> bytes:
    if not isinstance(value, RlpBytes):
        raise InvalidMetaTransactionFunctionArg("Expected an RLP byte string, got a list")
    return value.data


def _expect_list(value: RlpValue) -> tuple:
    if not isinstance(value, RlpList):
        raise InvalidMetaTransactionFunctionArg("Expected an RLP list, got a byte string")
    return value.items
