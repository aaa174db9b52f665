"""EIP-712 domain separator for the NEAR gateway.

See https://eips.ethereum.org/EIPS/eip-712#definition-of-domainseparator
"""

from dataclasses import dataclass
from typing import Optional

from .hashing import KECCAK256, Hasher
from .utils import (
    DEFAULT_CHAIN_ID,
    DEFAULT_DOMAIN_NAME,
    DEFAULT_DOMAIN_VERSION,
    EIP712_DOMAIN_TYPE,
    encode_uint256,
)


@dataclass(frozen=True)
class DomainConfig:
    """EIP-712 domain of a gateway deployment."""

    chain_id: int = DEFAULT_CHAIN_ID
    name: str = DEFAULT_DOMAIN_NAME
    version: str = DEFAULT_DOMAIN_VERSION

    def separator(self, hasher: Optional[Hasher] = None) -> bytes:
        """Compute this domain's separator."""
        return near_erc712_domain(self.chain_id, self.name, self.version, hasher)


def near_erc712_domain(
    chain_id: int,
    name: str = DEFAULT_DOMAIN_NAME,
    version: str = DEFAULT_DOMAIN_VERSION,
    hasher: Optional[Hasher] = None,
) -> bytes:
    """Compute the domain separator for ``chain_id``.

    The domain has no ``verifyingContract``; the gateway account id is bound
    into the message itself as ``gatewayId``.

    Args:
        chain_id: Chain ID the signature is valid for
        name: Domain ``name``
        version: Domain ``version``
        hasher: Hash primitive (keccak-256 by default)

    Returns:
        32-byte domain separator

    Raises:
        ValueError: If chain_id does not fit in uint256
    """
    hasher = hasher or KECCAK256
    return hasher.hash(
        hasher.hash(EIP712_DOMAIN_TYPE.encode("utf-8"))
        + hasher.hash(name.encode("utf-8"))
        + hasher.hash(version.encode("utf-8"))
        + encode_uint256(chain_id)
    )
