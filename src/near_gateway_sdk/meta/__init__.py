"""NEAR Meta Call Module.

This module verifies meta calls signed off-chain with an Ethereum key
(EIP-712) and relayed to the NEAR gateway.

Key components:
- Method definition parsing (``adopt(uint256 petId,PetObj petObj)PetObj(string name)``)
- RLP argument decoding and EIP-712 struct hashing
- Domain separator and signing digest reconstruction
- Signer recovery (ecrecover)
- Client-side signing of wire envelopes

Example usage:
    ```python
    import rlp
    from near_gateway_sdk.meta import (
        DomainConfig,
        MetaCallCodec,
        encode_meta_call,
    )

    # Sign a call
    message = encode_meta_call(
        private_key="0x...",
        relying_party_id=b"gateway.near",
        nonce=0,
        fee_amount=5,
        fee_address="token.near",
        contract_address="pets.near",
        value=0,
        method_def="adopt(uint256 petId)",
        args=rlp.encode([(42).to_bytes(1, "big")]),
    )

    # Verify it at the gateway
    codec = MetaCallCodec(DomainConfig(chain_id=1), b"gateway.near")
    call = codec.parse(message)
    print(call.sender_address, call.method_name)
    ```
"""

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
    RlpBytes,
    RlpList,
    RlpValue,
    MetaCallArgs,
    InternalMetaCallArgs,
)
from .errors import (
    ParsingError,
    ArgumentParseError,
    InvalidMetaTransactionMethodName,
    InvalidMetaTransactionFunctionArg,
    InvalidEcRecoverSignature,
    ArgsLengthMismatch,
)
from .type_parser import parse_type
from .method_parser import Arg, Method, MethodAndTypes, method_signature
from .rlp_values import decode_rlp_args, decode_rlp_value
from .hashing import Hasher, Keccak256, StructHasher
from .domain import DomainConfig, near_erc712_domain
from .ecrecover import ecrecover
from .codec import MetaCallCodec, arguments_type, parse_meta_call, prepare_meta_call_args
from .signing import encode_meta_call, public_key_to_address, verify_meta_call_signature
from .utils import (
    DEFAULT_CHAIN_ID,
    DEFAULT_DOMAIN_NAME,
    DEFAULT_DOMAIN_VERSION,
    MAX_NESTING_DEPTH,
    encode_address,
    encode_uint256,
    format_address,
)

__all__ = [
    # Types
    "AddressType",
    "ArgType",
    "ArrayType",
    "BoolType",
    "BytesType",
    "CustomType",
    "FixedBytesType",
    "IntType",
    "StringType",
    "UintType",
    "RlpBytes",
    "RlpList",
    "RlpValue",
    "MetaCallArgs",
    "InternalMetaCallArgs",
    # Errors
    "ParsingError",
    "ArgumentParseError",
    "InvalidMetaTransactionMethodName",
    "InvalidMetaTransactionFunctionArg",
    "InvalidEcRecoverSignature",
    "ArgsLengthMismatch",
    # Parsing
    "parse_type",
    "Arg",
    "Method",
    "MethodAndTypes",
    "method_signature",
    "decode_rlp_args",
    "decode_rlp_value",
    # Hashing
    "Hasher",
    "Keccak256",
    "StructHasher",
    "DomainConfig",
    "near_erc712_domain",
    # Verification
    "ecrecover",
    "MetaCallCodec",
    "arguments_type",
    "parse_meta_call",
    "prepare_meta_call_args",
    # Signing
    "encode_meta_call",
    "public_key_to_address",
    "verify_meta_call_signature",
    # Utils
    "DEFAULT_CHAIN_ID",
    "DEFAULT_DOMAIN_NAME",
    "DEFAULT_DOMAIN_VERSION",
    "MAX_NESTING_DEPTH",
    "encode_address",
    "encode_uint256",
    "format_address",
]
