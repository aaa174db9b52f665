"""NEAR Gateway.

Accepts meta calls signed with an Ethereum key, enforces the sender's nonce,
and turns each verified call into the action the gateway contract performs:

1. ``create``: create the sender's proxy sub-account and fund it
2. ``proxy``: make the proxy transfer ``value`` to ``contract_address``
3. ``forward``: make the proxy call a method on ``contract_address``

Actions are returned as plain descriptors; submitting them to the chain is
up to the host.
"""

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Optional, TypedDict, Union

from ..meta import DomainConfig, InternalMetaCallArgs, MetaCallCodec, ParsingError
from ..meta.hashing import Hasher
from ..meta.utils import DEFAULT_CHAIN_ID, DEFAULT_DOMAIN_NAME, DEFAULT_DOMAIN_VERSION
from .errors import MetaCallRejectedError
from .nonces import InMemoryNonceStore, NonceStore
from .proxy import ProxyCall, encode_transfer_args

logger = logging.getLogger(__name__)

TGAS = 1_000_000_000_000


class GatewayConfig(TypedDict, total=False):
    """Gateway configuration."""

    account_id: str
    """Gateway account id, signed as ``gatewayId``. Default: "gateway" """

    chain_id: int
    """EIP-712 domain chain ID. Default: 1"""

    domain_name: str
    """EIP-712 domain name. Default: "NEAR" """

    domain_version: str
    """EIP-712 domain version. Default: "1" """

    proxy_gas: int
    """Gas attached to proxy calls. Default: 10 TGas"""

    proxy_code: bytes
    """Contract code deployed to new proxy accounts. Default: empty"""


@dataclass
class ResolvedGatewayConfig:
    """Resolved gateway configuration with all defaults applied."""

    account_id: str
    chain_id: int
    domain_name: str
    domain_version: str
    proxy_gas: int
    proxy_code: bytes


@dataclass
class CreateAccountAction:
    """Create ``account_id``, deploy ``code`` and transfer ``deposit`` to it."""

    account_id: str
    code: bytes
    deposit: int


@dataclass
class FunctionCallAction:
    """Call ``method_name`` on ``receiver_id``."""

    receiver_id: str
    method_name: str
    args: bytes
    deposit: int
    gas: int


Message = Union[str, bytes]


class Gateway:
    """Meta call gateway with replay protection.

    Example:
        ```python
        gateway = Gateway({"account_id": "gateway.near", "chain_id": 1})

        action = gateway.create(message, deposit=10**24)
        # action.account_id == "<sender hex>.gateway.near"

        action = gateway.proxy(next_message)
        ```
    """

    def __init__(
        self,
        config: Optional[GatewayConfig] = None,
        nonces: Optional[NonceStore] = None,
        hasher: Optional[Hasher] = None,
    ):
        """Initialize the gateway.

        Args:
            config: Optional configuration for the gateway
            nonces: Nonce store (in-memory by default)
            hasher: Hash primitive (keccak-256 by default)
        """
        config = config or {}
        self._config = ResolvedGatewayConfig(
            account_id=config.get("account_id", "gateway"),
            chain_id=config.get("chain_id", DEFAULT_CHAIN_ID),
            domain_name=config.get("domain_name", DEFAULT_DOMAIN_NAME),
            domain_version=config.get("domain_version", DEFAULT_DOMAIN_VERSION),
            proxy_gas=config.get("proxy_gas", 10 * TGAS),
            proxy_code=config.get("proxy_code", b""),
        )
        self._nonces = nonces or InMemoryNonceStore()
        self._codec = MetaCallCodec(
            DomainConfig(
                chain_id=self._config.chain_id,
                name=self._config.domain_name,
                version=self._config.domain_version,
            ),
            self._config.account_id.encode("utf-8"),
            hasher,
        )

    def get_config(self) -> ResolvedGatewayConfig:
        """Get the gateway configuration."""
        return self._config

    def get_nonce(self, sender: bytes) -> int:
        """Get the next nonce expected from a raw 20-byte sender address."""
        return self._nonces.get(sender)

    def sub_account_id(self, sender: bytes) -> str:
        """Return the proxy account id of a sender: ``<hex address>.<gateway>``."""
        return f"{bytes(sender).hex()}.{self._config.account_id}"

    def verify_message(self, message: Message) -> InternalMetaCallArgs:
        """Decode and verify a message without touching the sender's nonce.

        Args:
            message: Wire envelope, raw or base64 encoded

        Returns:
            The verified meta call

        Raises:
            MetaCallRejectedError: If the message fails to decode or verify
        """
        try:
            raw = base64.b64decode(message, validate=True) if isinstance(message, str) else message
        except (binascii.Error, ValueError) as exc:
            raise MetaCallRejectedError("Message is not valid base64") from exc

        try:
            return self._codec.parse(raw)
        except ParsingError as exc:
            logger.warning("Rejected meta call: %s: %s", type(exc).__name__, exc)
            raise MetaCallRejectedError(str(exc)) from exc

    def parse_message(self, message: Message) -> InternalMetaCallArgs:
        """Verify a message and consume the sender's nonce.

        Raises:
            MetaCallRejectedError: If the message fails to decode or verify
            IncorrectNonceError: If the nonce is not the sender's next nonce
        """
        call = self.verify_message(message)
        self._consume_nonce(call)
        return call

    def _consume_nonce(self, call: InternalMetaCallArgs) -> None:
        self._nonces.check_and_increment(call.sender, call.nonce)
        logger.info(
            "Accepted meta call from %s with nonce %d", call.sender_address, call.nonce
        )

    def create(self, message: Message, deposit: int) -> CreateAccountAction:
        """Create and fund the sender's proxy account."""
        call = self.parse_message(message)
        return CreateAccountAction(
            account_id=self.sub_account_id(call.sender),
            code=self._config.proxy_code,
            deposit=deposit,
        )

    def proxy(self, message: Message) -> FunctionCallAction:
        """Transfer ``value`` from the sender's proxy account to ``contract_address``.

        Raises:
            ProxyArgumentError: If value does not fit in u128. The nonce is
                left unchanged.
        """
        call = self.verify_message(message)
        action = FunctionCallAction(
            receiver_id=self.sub_account_id(call.sender),
            method_name="transfer",
            args=encode_transfer_args(call.value, call.contract_address),
            deposit=0,
            gas=self._config.proxy_gas,
        )
        self._consume_nonce(call)
        return action

    def forward(self, message: Message, gas: Optional[int] = None) -> FunctionCallAction:
        """Call the signed method on ``contract_address`` through the proxy.

        The forwarded arguments are the caller's original RLP payload.

        Raises:
            ProxyArgumentError: If value or gas are out of range. The nonce is
                left unchanged.
        """
        call = self.verify_message(message)
        proxy_call = ProxyCall(
            gas=gas if gas is not None else self._config.proxy_gas,
            amount=call.value,
            receiver_id=call.contract_address,
            method_name=call.method_name,
            args=call.raw_args,
        )
        action = FunctionCallAction(
            receiver_id=self.sub_account_id(call.sender),
            method_name="call",
            args=proxy_call.to_bytes(),
            deposit=0,
            # The proxy needs its own gas on top of what it forwards
            gas=proxy_call.gas + self._config.proxy_gas,
        )
        self._consume_nonce(call)
        return action
