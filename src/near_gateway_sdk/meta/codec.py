"""Meta call verification.

Rebuilds the EIP-712 digest a wallet signed for a meta call and recovers the
signer from it. The signed message is the ``NearTx`` struct::

    NearTx(string gatewayId,uint256 nonce,uint256 feeAmount,address feeReceiver,
           address receiver,uint256 value,string method,Arguments arguments)

where ``Arguments`` is the called method's argument list renamed, followed by
any struct declarations. ``feeReceiver`` and ``receiver`` carry NEAR account
ids, so they are hashed as strings.
"""

import logging
from typing import Optional, Tuple

from .domain import DomainConfig
from .ecrecover import ecrecover
from .errors import ArgumentParseError, InvalidMetaTransactionMethodName
from .hashing import KECCAK256, Hasher, StructHasher
from .method_parser import MethodAndTypes, method_signature
from .rlp_values import decode_rlp_args
from .types import InternalMetaCallArgs, MetaCallArgs
from .utils import MAX_NESTING_DEPTH, NEAR_TX_TYPE, encode_uint256

logger = logging.getLogger(__name__)

EIP712_PREFIX = b"\x19\x01"


def arguments_type(method_def: str) -> str:
    """Return the ``Arguments`` struct text for a method definition.

    E.g. ``adopt(uint256 petId,PetObj petObj)PetObj(string name)`` gives
    ``Arguments(uint256 petId,PetObj petObj)PetObj(string name)``.

    Raises:
        InvalidMetaTransactionMethodName: If the definition has no ``(``
    """
    if not method_def:
        return "Arguments()"
    start = method_def.find("(")
    if start < 0:
        raise InvalidMetaTransactionMethodName(f"No argument list in {method_def!r}")
    return "Arguments" + method_def[start:]


def prepare_meta_call_args(
    domain_separator: bytes,
    relying_party_id: bytes,
    call: InternalMetaCallArgs,
    hasher: Optional[Hasher] = None,
    max_depth: int = MAX_NESTING_DEPTH,
) -> Tuple[bytes, str, bytes]:
    """Compute the signing digest of a meta call.

    Args:
        domain_separator: 32-byte EIP-712 domain separator
        relying_party_id: Gateway account id, signed as ``gatewayId``
        call: Meta call whose ``method_name`` holds the full method definition
            and ``args`` the RLP encoded argument list
        hasher: Hash primitive (keccak-256 by default)
        max_depth: Nesting bound for types and values

    Returns:
        Tuple of (digest, method name, encoded argument bytes). For an empty
        method the name and bytes are empty.

    Raises:
        ParsingError: Any parsing, decoding or hashing failure
    """
    hasher = hasher or KECCAK256
    arguments = arguments_type(call.method_name)
    type_hash = hasher.hash((NEAR_TX_TYPE + arguments).encode("utf-8"))

    try:
        fields = [
            type_hash,
            hasher.hash(relying_party_id),
            encode_uint256(call.nonce),
            encode_uint256(call.fee_amount),
            hasher.hash(call.fee_address.encode("utf-8")),
            hasher.hash(call.contract_address.encode("utf-8")),
            encode_uint256(call.value),
        ]
    except ValueError as exc:
        raise ArgumentParseError(str(exc)) from exc

    method_name = ""
    arg_bytes = b""
    # An empty method signs neither the method nor the Arguments struct.
    if call.method_name:
        methods = MethodAndTypes.parse(call.method_name, max_depth)
        fields.append(hasher.hash(method_signature(methods).encode("utf-8")))

        values = decode_rlp_args(call.args, max_depth)
        struct_hasher = StructHasher(methods.types, hasher, max_depth)
        arg_bytes = hasher.hash(arguments.encode("utf-8")) + struct_hasher.hash_args(
            [arg.t for arg in methods.method.args], values
        )
        fields.append(hasher.hash(arg_bytes))
        method_name = methods.method.name

    struct_hash = hasher.hash(b"".join(fields))
    digest = hasher.hash(EIP712_PREFIX + bytes(domain_separator) + struct_hash)
    logger.debug("Prepared meta call %r with %d signed fields", method_name, len(fields))
    return digest, method_name, arg_bytes


def parse_meta_call(
    domain_separator: bytes,
    relying_party_id: bytes,
    args: bytes,
    hasher: Optional[Hasher] = None,
    max_depth: int = MAX_NESTING_DEPTH,
) -> InternalMetaCallArgs:
    """Decode a signed meta call and recover its sender.

    The returned record has ``sender`` set, ``method_name`` reduced to the
    bare method name and ``args`` replaced by the encoded argument bytes.
    The original payload stays available as ``raw_args``.

    Raises:
        ArgumentParseError: If the envelope is malformed
        InvalidEcRecoverSignature: If the signer cannot be recovered
        ParsingError: Any other failure from ``prepare_meta_call_args``
    """
    meta_tx = MetaCallArgs.from_bytes(args)
    result = InternalMetaCallArgs.from_wire(meta_tx)

    digest, method_name, arg_bytes = prepare_meta_call_args(
        domain_separator, relying_party_id, result, hasher, max_depth
    )
    sender = ecrecover(digest, meta_tx.signature + bytes([meta_tx.v]), hasher)
    result.populate(sender, method_name, arg_bytes)
    logger.debug("Recovered meta call sender %s", result.sender_address)
    return result


class MetaCallCodec:
    """Meta call verifier bound to one domain and gateway account.

    Example::

        codec = MetaCallCodec(DomainConfig(chain_id=1), b"gateway")
        call = codec.parse(message)
        print(call.sender_address, call.method_name)
    """

    def __init__(
        self,
        domain: Optional[DomainConfig] = None,
        relying_party_id: bytes = b"",
        hasher: Optional[Hasher] = None,
        max_depth: int = MAX_NESTING_DEPTH,
    ):
        self.domain = domain or DomainConfig()
        self.relying_party_id = relying_party_id
        self.hasher = hasher or KECCAK256
        self.max_depth = max_depth

    @property
    def domain_separator(self) -> bytes:
        return self.domain.separator(self.hasher)

    def prepare(self, call: InternalMetaCallArgs) -> Tuple[bytes, str, bytes]:
        """See ``prepare_meta_call_args``."""
        return prepare_meta_call_args(
            self.domain_separator, self.relying_party_id, call, self.hasher, self.max_depth
        )

    def parse(self, message: bytes) -> InternalMetaCallArgs:
        """See ``parse_meta_call``."""
        return parse_meta_call(
            self.domain_separator, self.relying_party_id, message, self.hasher, self.max_depth
        )
