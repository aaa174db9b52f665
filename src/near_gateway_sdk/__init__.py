"""NEAR Gateway SDK.

Verify and build Ethereum-signed (EIP-712) meta calls for the NEAR gateway.
"""

from .meta import (
    DomainConfig,
    InternalMetaCallArgs,
    MetaCallArgs,
    MetaCallCodec,
    ParsingError,
    encode_meta_call,
    near_erc712_domain,
    parse_meta_call,
    prepare_meta_call_args,
    verify_meta_call_signature,
)
from .gateway import Gateway, GatewayConfig, GatewayError, IncorrectNonceError

__version__ = "0.1.0"

__all__ = [
    "DomainConfig",
    "InternalMetaCallArgs",
    "MetaCallArgs",
    "MetaCallCodec",
    "ParsingError",
    "encode_meta_call",
    "near_erc712_domain",
    "parse_meta_call",
    "prepare_meta_call_args",
    "verify_meta_call_signature",
    "Gateway",
    "GatewayConfig",
    "GatewayError",
    "IncorrectNonceError",
]
