"""Decode RLP argument payloads into ``RlpBytes`` / ``RlpList`` trees."""

from typing import List, Union

import rlp
from rlp.exceptions import DecodingError

from .errors import ArgumentParseError, InvalidMetaTransactionFunctionArg
from .types import RlpBytes, RlpList, RlpValue
from .utils import MAX_NESTING_DEPTH

_Decoded = Union[bytes, list]


def _to_value(item: _Decoded, depth: int, max_depth: int) -> RlpValue:
    if isinstance(item, (bytes, bytearray)):
        return RlpBytes(bytes(item))
    if depth >= max_depth:
        raise ArgumentParseError(f"RLP lists nested deeper than {max_depth}")
    return RlpList(tuple(_to_value(element, depth + 1, max_depth) for element in item))


def decode_rlp_value(data: bytes, max_depth: int = MAX_NESTING_DEPTH) -> RlpValue:
    """Decode a single canonical RLP item.

    Raises:
        ArgumentParseError: If the bytes are not canonical RLP, carry
            trailing data, or nest lists deeper than ``max_depth``
    """
    try:
        decoded = rlp.decode(bytes(data), strict=True)
    except (DecodingError, IndexError, RecursionError) as exc:
        raise ArgumentParseError(f"Malformed RLP payload: {exc}") from exc
    return _to_value(decoded, 0, max_depth)


def decode_rlp_args(data: bytes, max_depth: int = MAX_NESTING_DEPTH) -> List[RlpValue]:
    """Decode an RLP argument list.

    Returns:
        One value per argument

    Raises:
        ArgumentParseError: If the payload is malformed
        InvalidMetaTransactionFunctionArg: If the outermost item is not a list
    """
    value = decode_rlp_value(data, max_depth)
    if not isinstance(value, RlpList):
        raise InvalidMetaTransactionFunctionArg("Arguments must be an RLP list")
    return list(value.items)
