"""Meta Call Signing.

Client-side helpers that build a signed wire envelope from a private key,
the counterpart of ``parse_meta_call``. Wallets that sign with
``eth_signTypedData`` produce the same digest.
"""

from typing import Optional, Union

import rlp
from eth_account import Account
from eth_keys import keys

from .codec import parse_meta_call, prepare_meta_call_args
from .domain import near_erc712_domain
from .errors import ParsingError
from .types import InternalMetaCallArgs, MetaCallArgs
from .utils import (
    DEFAULT_CHAIN_ID,
    DEFAULT_DOMAIN_NAME,
    DEFAULT_DOMAIN_VERSION,
    encode_uint256,
)


def public_key_to_address(public_key: Union[bytes, keys.PublicKey]) -> str:
    """Derive the checksum address of a secp256k1 public key.

    Args:
        public_key: 64-byte raw key, 65-byte uncompressed key, or an
            ``eth_keys`` PublicKey

    Returns:
        Checksum address

    Raises:
        ValueError: If the key has an unexpected length
    """
    if isinstance(public_key, keys.PublicKey):
        return public_key.to_checksum_address()
    if len(public_key) == 65:
        public_key = public_key[1:]
    if len(public_key) != 64:
        raise ValueError(f"Invalid public key length: {len(public_key)}")
    return keys.PublicKey(bytes(public_key)).to_checksum_address()


def encode_meta_call(
    private_key: str,
    *,
    relying_party_id: bytes,
    nonce: int,
    fee_amount: int,
    fee_address: str,
    contract_address: str,
    value: int,
    method_def: str = "",
    args: Optional[bytes] = None,
    chain_id: int = DEFAULT_CHAIN_ID,
    domain_name: str = DEFAULT_DOMAIN_NAME,
    domain_version: str = DEFAULT_DOMAIN_VERSION,
) -> bytes:
    """Sign a meta call and encode it as a wire envelope.

    Args:
        private_key: Private key (hex string with or without 0x prefix)
        relying_party_id: Gateway account id the call is addressed to
        nonce: Sender's current nonce at the gateway
        fee_amount: Fee paid to ``fee_address``
        fee_address: NEAR account receiving the fee
        contract_address: NEAR account receiving the call
        value: Amount attached to the call
        method_def: Full method definition, e.g. ``adopt(uint256 petId)``
        args: RLP encoded argument list. Defaults to an empty list when a
            method is given.
        chain_id: Chain ID of the domain
        domain_name: Domain ``name``
        domain_version: Domain ``version``

    Returns:
        Borsh encoded ``MetaCallArgs``

    Raises:
        ValueError: If a numeric field does not fit in uint256 or the call
            cannot be encoded
    """
    if args is None:
        args = rlp.encode([]) if method_def else b""

    call = InternalMetaCallArgs(
        nonce=nonce,
        fee_amount=fee_amount,
        fee_address=fee_address,
        contract_address=contract_address,
        method_name=method_def,
        value=value,
        args=args,
    )
    domain_separator = near_erc712_domain(chain_id, domain_name, domain_version)
    try:
        digest, _, _ = prepare_meta_call_args(domain_separator, relying_party_id, call)
    except ParsingError as exc:
        raise ValueError(f"Cannot encode meta call: {exc}") from exc

    account = Account.from_key(private_key)
    signature = keys.PrivateKey(bytes(account.key)).sign_msg_hash(digest)

    return MetaCallArgs(
        signature=signature.to_bytes()[:64],
        # Add 27 to match the eth-sig-util signature format
        v=signature.v + 27,
        nonce=encode_uint256(nonce),
        fee_amount=encode_uint256(fee_amount),
        fee_address=fee_address,
        contract_address=contract_address,
        value=encode_uint256(value),
        method=method_def,
        args=args,
    ).to_bytes()


def verify_meta_call_signature(
    message: bytes,
    relying_party_id: bytes,
    expected_signer: str,
    chain_id: int = DEFAULT_CHAIN_ID,
    domain_name: str = DEFAULT_DOMAIN_NAME,
    domain_version: str = DEFAULT_DOMAIN_VERSION,
) -> bool:
    """Check that a wire envelope was signed by ``expected_signer``.

    Returns:
        True if the message parses and recovers to the expected signer
    """
    domain_separator = near_erc712_domain(chain_id, domain_name, domain_version)
    try:
        call = parse_meta_call(domain_separator, relying_party_id, message)
    except ParsingError:
        return False
    return call.sender_address.lower() == expected_signer.lower()
