"""Gateway modules for the NEAR Gateway SDK."""

from .errors import (
    GatewayError,
    MetaCallRejectedError,
    IncorrectNonceError,
    ProxyArgumentError,
)
from .nonces import NonceStore, InMemoryNonceStore
from .proxy import ProxyCall, encode_transfer_args, decode_transfer_args
from .gateway import (
    Gateway,
    GatewayConfig,
    ResolvedGatewayConfig,
    CreateAccountAction,
    FunctionCallAction,
)

__all__ = [
    "Gateway",
    "GatewayConfig",
    "ResolvedGatewayConfig",
    "CreateAccountAction",
    "FunctionCallAction",
    "NonceStore",
    "InMemoryNonceStore",
    "ProxyCall",
    "encode_transfer_args",
    "decode_transfer_args",
    "GatewayError",
    "MetaCallRejectedError",
    "IncorrectNonceError",
    "ProxyArgumentError",
]
