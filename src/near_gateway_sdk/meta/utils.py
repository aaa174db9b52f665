"""Constants and word encoding helpers for NEAR meta calls."""

from eth_abi import encode
from eth_utils import to_checksum_address

# Default EIP-712 domain of the gateway deployment
DEFAULT_CHAIN_ID = 1
DEFAULT_DOMAIN_NAME = "NEAR"
DEFAULT_DOMAIN_VERSION = "1"

# Upper bound for RLP list nesting, array nesting and struct recursion
MAX_NESTING_DEPTH = 32

UINT256_MAX = 2**256 - 1

# Primary EIP-712 struct of a meta call. The ``Arguments`` struct text is
# appended per call.
NEAR_TX_TYPE = (
    "NearTx(string gatewayId,uint256 nonce,uint256 feeAmount,"
    "address feeReceiver,address receiver,uint256 value,string method,"
    "Arguments arguments)"
)

EIP712_DOMAIN_TYPE = "EIP712Domain(string name,string version,uint256 chainId)"


def encode_uint256(value: int) -> bytes:
    """Encode an unsigned integer as a 32-byte big-endian word.

    Args:
        value: Integer in ``[0, 2**256)``

    Returns:
        32 bytes

    Raises:
        ValueError: If value does not fit in 256 bits
    """
    if value < 0 or value > UINT256_MAX:
        raise ValueError(f"Value out of uint256 range: {value}")
    return encode(["uint256"], [value])


def encode_address(address: bytes) -> bytes:
    """Left-pad a raw 20-byte address to a 32-byte word."""
    if len(address) != 20:
        raise ValueError(f"Address must be 20 bytes, got {len(address)}")
    return encode(["address"], [address])


def format_address(address: bytes) -> str:
    """Format a raw 20-byte address as an EIP-55 checksum string."""
    return to_checksum_address(address)
