"""Parser for method definitions with their auxiliary struct declarations.

A definition looks like::

    adopt(uint256 petId,PetObj petObj)PetObj(string name,address owner)

The first chunk is the called method, every following chunk declares a
struct. Exactly one space separates a type from its argument name and no
space may follow a comma, since the raw text of every chunk is hashed as an
EIP-712 type string.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Tuple

from .errors import InvalidMetaTransactionFunctionArg, InvalidMetaTransactionMethodName
from .type_parser import parse_type
from .types import ArgType, ArrayType, CustomType
from .utils import MAX_NESTING_DEPTH

logger = logging.getLogger(__name__)


@dataclass
class Arg:
    """An argument of a method, or a field of a struct."""

    name: str
    type_raw: str
    """Type text exactly as written, e.g. ``uint256[]``."""

    t: ArgType


@dataclass
class Method:
    """A parsed method (or struct) definition."""

    name: str
    raw: str
    """The consumed text ``name(type name,...)``, byte-exact."""

    args: List[Arg] = field(default_factory=list)


@dataclass
class MethodAndTypes:
    """A called method together with the structs it references."""

    method: Method
    type_sequences: List[str] = field(default_factory=list)
    """Struct names in declaration order."""

    types: Dict[str, Method] = field(default_factory=dict)

    @classmethod
    def parse(cls, method_def: str, max_depth: int = MAX_NESTING_DEPTH) -> "MethodAndTypes":
        """Parse a full method definition.

        Raises:
            InvalidMetaTransactionMethodName: On a grammar violation or a
                struct declared twice
            ArgumentParseError: If an argument type cannot be parsed
            InvalidMetaTransactionFunctionArg: If a referenced struct is
                not declared
        """
        method, remains = _parse_method(method_def, max_depth)
        result = cls(method=method)
        while remains:
            struct_def, remains = _parse_method(remains, max_depth)
            if struct_def.name in result.types:
                raise InvalidMetaTransactionMethodName(
                    f"Struct {struct_def.name} declared twice"
                )
            result.type_sequences.append(struct_def.name)
            result.types[struct_def.name] = struct_def

        for definition in [result.method, *result.types.values()]:
            for arg in definition.args:
                for name in _custom_names(arg.t):
                    if name not in result.types:
                        raise InvalidMetaTransactionFunctionArg(f"Unknown struct type: {name}")

        logger.debug(
            "Parsed method %s with %d args and types %s",
            method.name,
            len(method.args),
            result.type_sequences,
        )
        return result


def method_signature(method_and_types: MethodAndTypes) -> str:
    """Return the canonical signature of the called method.

    E.g. ``adopt(uint256 petId,PetObj petObj)PetObj(string name)`` gives
    ``adopt(uint256,PetObj)``.
    """
    method = method_and_types.method
    return f"{method.name}({','.join(arg.type_raw for arg in method.args)})"


def _custom_names(arg_type: ArgType) -> Iterator[str]:
    while isinstance(arg_type, ArrayType):
        arg_type = arg_type.inner
    if isinstance(arg_type, CustomType):
        yield arg_type.name


def _parse_method(text: str, max_depth: int) -> Tuple[Method, str]:
    name, remains = _parse_ident(text)
    args, remains = _parse_args(remains, max_depth)
    return Method(name=name, raw=text[: len(text) - len(remains)], args=args), remains


def _parse_args(text: str, max_depth: int) -> Tuple[List[Arg], str]:
    remains = _consume(text, "(")
    if not remains:
        raise InvalidMetaTransactionMethodName("Unterminated argument list")

    args = []
    if _is_arg_start(remains[0]):
        arg, remains = _parse_arg(remains, max_depth)
        args.append(arg)
        while remains.startswith(","):
            arg, remains = _parse_arg(remains[1:], max_depth)
            args.append(arg)

    return args, _consume(remains, ")")


def _parse_arg(text: str, max_depth: int) -> Tuple[Arg, str]:
    # The type runs up to the next space; it is not split into tokens here.
    index = text.find(" ")
    if index < 0:
        raise InvalidMetaTransactionMethodName(f"Missing argument name in {text!r}")
    type_raw = text[:index]
    arg_type = parse_type(type_raw, max_depth)
    name, remains = _parse_ident(text[index + 1:])
    return Arg(name=name, type_raw=type_raw, t=arg_type), remains


def _parse_ident(text: str) -> Tuple[str, str]:
    if not text or not _is_arg_start(text[0]):
        raise InvalidMetaTransactionMethodName(f"Expected identifier at {text!r}")
    end = 1
    while end < len(text) and _is_arg_char(text[end]):
        end += 1
    return text[:end], text[end:]


def _consume(text: str, char: str) -> str:
    if not text.startswith(char):
        raise InvalidMetaTransactionMethodName(f"Expected {char!r} at {text!r}")
    return text[1:]


def _is_arg_start(char: str) -> bool:
    return (char.isascii() and char.isalpha()) or char == "_"


def _is_arg_char(char: str) -> bool:
    return (char.isascii() and char.isalnum()) or char == "_"
