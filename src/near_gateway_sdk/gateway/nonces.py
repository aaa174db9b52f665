"""Per-sender nonce ledger for replay protection."""

import threading
from typing import Dict, Protocol

from .errors import IncorrectNonceError


class NonceStore(Protocol):
    """Protocol for nonce storage keyed by raw 20-byte sender address."""

    def get(self, sender: bytes) -> int:
        """Return the next nonce expected from sender (0 if unseen)."""
        ...

    def check_and_increment(self, sender: bytes, nonce: int) -> None:
        """Accept ``nonce`` if it equals the expected one, then advance it.

        Raises:
            IncorrectNonceError: If nonce is not the expected one
        """
        ...


class InMemoryNonceStore:
    """Nonce store kept in process memory.

    The check and the increment happen under one lock, so concurrent calls
    for the same sender are serialized.
    """

    def __init__(self):
        self._nonces: Dict[bytes, int] = {}
        self._lock = threading.Lock()

    def get(self, sender: bytes) -> int:
        with self._lock:
            return self._nonces.get(bytes(sender), 0)

    def check_and_increment(self, sender: bytes, nonce: int) -> None:
        key = bytes(sender)
        with self._lock:
            expected = self._nonces.get(key, 0)
            if nonce != expected:
                raise IncorrectNonceError(expected, nonce)
            self._nonces[key] = expected + 1
