"""Recover the signer address of a secp256k1 signature over a 32-byte digest."""

from typing import Optional

from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError

from .errors import InvalidEcRecoverSignature
from .hashing import KECCAK256, Hasher

SIGNATURE_LENGTH = 65
DIGEST_LENGTH = 32


def normalize_recovery_id(v: int) -> int:
    """Map ``v`` to a recovery id: 0..26 as-is, 27 and above minus 27."""
    return v if v <= 26 else v - 27


def ecrecover(digest: bytes, signature: bytes, hasher: Optional[Hasher] = None) -> bytes:
    """Recover the 20-byte address that signed ``digest``.

    Args:
        digest: 32-byte message hash
        signature: 65 bytes ``r || s || v``
        hasher: Hash primitive used to derive the address (keccak-256 by default)

    Returns:
        Raw 20-byte address

    Raises:
        InvalidEcRecoverSignature: On any length or format violation, an
            unsupported recovery id, or a signature that does not recover
    """
    if len(digest) != DIGEST_LENGTH:
        raise InvalidEcRecoverSignature(f"Digest must be {DIGEST_LENGTH} bytes, got {len(digest)}")
    if len(signature) != SIGNATURE_LENGTH:
        raise InvalidEcRecoverSignature(
            f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(signature)}"
        )

    recovery_id = normalize_recovery_id(signature[64])
    # Ids 2 and 3 (x >= n) are valid secp256k1 recovery ids but eth_keys only
    # recovers 0 and 1, so they are rejected here.
    if recovery_id not in (0, 1):
        raise InvalidEcRecoverSignature(f"Unsupported recovery id: {signature[64]}")

    try:
        sig = keys.Signature(vrs=(
            recovery_id,
            int.from_bytes(signature[:32], "big"),
            int.from_bytes(signature[32:64], "big"),
        ))
        public_key = sig.recover_public_key_from_msg_hash(bytes(digest))
    except (BadSignature, ValidationError, ValueError) as exc:
        raise InvalidEcRecoverSignature(f"Signature recovery failed: {exc}") from exc

    # to_bytes() is the 64-byte key without the 0x04 prefix
    hasher = hasher or KECCAK256
    return hasher.hash(public_key.to_bytes())[12:]
