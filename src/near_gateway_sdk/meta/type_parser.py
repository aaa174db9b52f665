"""Parser for a single ABI-like argument type, e.g. ``uint256[3][]``."""

import re

from .errors import ArgumentParseError
from .types import (
    AddressType,
    ArgType,
    ArrayType,
    BoolType,
    BytesType,
    CustomType,
    FixedBytesType,
    IntType,
    StringType,
    UintType,
)
from .utils import MAX_NESTING_DEPTH

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_ARRAY_SUFFIX = re.compile(r"\[([0-9]*)\]")

# Words that look like a sized atomic type. Anything they match must carry a
# canonical size, otherwise the type is rejected instead of being read as a
# struct name.
_SIZED_INT = re.compile(r"(u?int)([0-9]+)")
_SIZED_BYTES = re.compile(r"bytes([0-9]+)")

_ATOMIC = {
    "address": AddressType(),
    "bool": BoolType(),
    "string": StringType(),
    "bytes": BytesType(),
    "byte": FixedBytesType(1),
    "uint": UintType(),
    "int": IntType(),
}


def _canonical(digits: str) -> bool:
    return not digits.startswith("0")


def _classify(word: str) -> ArgType:
    """Map an identifier word to its atomic type or a struct reference."""
    atomic = _ATOMIC.get(word)
    if atomic is not None:
        return atomic

    sized = _SIZED_INT.fullmatch(word)
    if sized:
        prefix, digits = sized.groups()
        bits = int(digits)
        if not _canonical(digits) or bits % 8 or not 8 <= bits <= 256:
            raise ArgumentParseError(f"Invalid integer size: {word}")
        return UintType() if prefix == "uint" else IntType()

    sized = _SIZED_BYTES.fullmatch(word)
    if sized:
        digits = sized.group(1)
        size = int(digits)
        if not _canonical(digits) or not 1 <= size <= 32:
            raise ArgumentParseError(f"Invalid fixed bytes size: {word}")
        return FixedBytesType(size)

    return CustomType(word)


def parse_type(field_type: str, max_depth: int = MAX_NESTING_DEPTH) -> ArgType:
    """Parse a single argument type without its argument name.

    Each array suffix wraps the type built so far, so the rightmost suffix
    is the outermost array: ``uint256[3][]`` is a dynamic array of
    ``uint256[3]``.

    Args:
        field_type: Type text, e.g. ``"bytes"``, ``"uint256[][3]"``, ``"PetObj"``
        max_depth: Maximum number of array suffixes

    Returns:
        The parsed type tree

    Raises:
        ArgumentParseError: On an unrecognized token, an array suffix with
            no base type, a base type after an array suffix, a non-canonical
            size, or nesting deeper than ``max_depth``
    """
    match = _IDENTIFIER.match(field_type)
    if not match:
        raise ArgumentParseError(f"Invalid type: {field_type!r}")

    parsed = _classify(match.group(0))
    position = match.end()
    depth = 0

    while position < len(field_type):
        suffix = _ARRAY_SUFFIX.match(field_type, position)
        if not suffix:
            raise ArgumentParseError(
                f"Unexpected {field_type[position:]!r} in type {field_type!r}"
            )
        depth += 1
        if depth > max_depth:
            raise ArgumentParseError(f"Type nested deeper than {max_depth}: {field_type!r}")
        digits = suffix.group(1)
        parsed = ArrayType(inner=parsed, length=int(digits) if digits else None)
        position = suffix.end()

    return parsed
