"""Tests for the gateway: nonces, account naming and proxy actions."""

import base64
import logging

import pytest
import rlp
from eth_account import Account

from near_gateway_sdk.gateway import (
    CreateAccountAction,
    FunctionCallAction,
    Gateway,
    GatewayError,
    IncorrectNonceError,
    InMemoryNonceStore,
    MetaCallRejectedError,
    ProxyArgumentError,
    ProxyCall,
    decode_transfer_args,
    encode_transfer_args,
)
from near_gateway_sdk.gateway.gateway import TGAS
from near_gateway_sdk.meta import InvalidEcRecoverSignature, encode_meta_call


# Test wallet (DO NOT use in production)
TEST_PRIVATE_KEY = "0x" + "ab" * 32  # Deterministic test key
TEST_ACCOUNT = Account.from_key(TEST_PRIVATE_KEY)
TEST_SENDER = bytes.fromhex(TEST_ACCOUNT.address[2:])
SUB_ACCOUNT = f"{TEST_ACCOUNT.address[2:].lower()}.gateway"


def sign(nonce: int = 0, **overrides) -> bytes:
    fields = dict(
        relying_party_id=b"gateway",
        nonce=nonce,
        fee_amount=0,
        fee_address="token",
        contract_address="pets.near",
        value=0,
    )
    fields.update(overrides)
    return encode_meta_call(TEST_PRIVATE_KEY, **fields)


class TestInMemoryNonceStore:
    """Tests for the nonce ledger."""

    def test_starts_at_zero(self):
        """Test that unseen senders expect nonce 0."""
        assert InMemoryNonceStore().get(b"\x11" * 20) == 0

    def test_increments(self):
        """Test that accepted nonces advance the ledger."""
        store = InMemoryNonceStore()
        store.check_and_increment(b"\x11" * 20, 0)
        store.check_and_increment(b"\x11" * 20, 1)
        assert store.get(b"\x11" * 20) == 2
        assert store.get(b"\x22" * 20) == 0

    def test_rejects_wrong_nonce(self):
        """Test that replayed and skipped nonces are rejected without side effects."""
        store = InMemoryNonceStore()
        store.check_and_increment(b"\x11" * 20, 0)

        with pytest.raises(IncorrectNonceError) as exc_info:
            store.check_and_increment(b"\x11" * 20, 0)
        assert exc_info.value.expected_nonce == 1
        assert exc_info.value.provided_nonce == 0

        with pytest.raises(IncorrectNonceError):
            store.check_and_increment(b"\x11" * 20, 5)
        assert store.get(b"\x11" * 20) == 1


class TestGatewayConfig:
    """Tests for gateway configuration."""

    def test_defaults(self):
        """Test the resolved defaults."""
        config = Gateway().get_config()
        assert config.account_id == "gateway"
        assert config.chain_id == 1
        assert config.domain_name == "NEAR"
        assert config.domain_version == "1"
        assert config.proxy_gas == 10 * TGAS
        assert config.proxy_code == b""

    def test_overrides(self):
        """Test that supplied options win over defaults."""
        config = Gateway({"account_id": "relay.near", "chain_id": 5}).get_config()
        assert config.account_id == "relay.near"
        assert config.chain_id == 5
        assert config.domain_name == "NEAR"


class TestGateway:
    """Tests for gateway actions."""

    def test_create(self):
        """Test creating the sender's proxy account."""
        gateway = Gateway({"proxy_code": b"\x00asm"})

        action = gateway.create(sign(), deposit=10**24)

        assert action == CreateAccountAction(
            account_id=SUB_ACCOUNT, code=b"\x00asm", deposit=10**24
        )
        assert gateway.get_nonce(TEST_SENDER) == 1

    def test_replay_rejected(self):
        """Test that a message cannot be used twice."""
        gateway = Gateway()
        message = sign()
        gateway.create(message, deposit=0)

        with pytest.raises(IncorrectNonceError) as exc_info:
            gateway.create(message, deposit=0)
        assert exc_info.value.expected_nonce == 1
        assert exc_info.value.provided_nonce == 0
        assert isinstance(exc_info.value, GatewayError)

    def test_proxy_transfer(self):
        """Test a transfer through the proxy account."""
        gateway = Gateway()
        gateway.create(sign(0), deposit=0)

        action = gateway.proxy(sign(1, value=25))

        assert isinstance(action, FunctionCallAction)
        assert action.receiver_id == SUB_ACCOUNT
        assert action.method_name == "transfer"
        assert action.gas == 10 * TGAS
        assert decode_transfer_args(action.args) == (25, "pets.near")

    def test_proxy_value_out_of_range(self):
        """Test that a value above u128 is rejected and leaves the nonce unused."""
        gateway = Gateway()
        with pytest.raises(ProxyArgumentError):
            gateway.proxy(sign(value=2**128))
        assert gateway.get_nonce(TEST_SENDER) == 0

        gateway.proxy(sign(value=2**128 - 1))
        assert gateway.get_nonce(TEST_SENDER) == 1

    def test_forward_out_of_range_keeps_nonce(self):
        """Test that a rejected forward has no side effects."""
        gateway = Gateway()
        with pytest.raises(ProxyArgumentError):
            gateway.forward(sign(method_def="create()"), gas=2**64)
        with pytest.raises(ProxyArgumentError):
            gateway.forward(sign(value=2**128, method_def="create()"))
        assert gateway.get_nonce(TEST_SENDER) == 0

        assert gateway.forward(sign(method_def="create()")).method_name == "call"
        assert gateway.get_nonce(TEST_SENDER) == 1

    def test_verify_message_is_read_only(self):
        """Test that verification alone does not consume the nonce."""
        gateway = Gateway()
        message = sign()
        assert gateway.verify_message(message).sender == TEST_SENDER
        assert gateway.verify_message(message).nonce == 0
        assert gateway.get_nonce(TEST_SENDER) == 0

    def test_forward(self):
        """Test forwarding a signed method call."""
        args = rlp.encode([b"\x2a"])
        gateway = Gateway({"proxy_gas": 5 * TGAS})

        action = gateway.forward(
            sign(value=3, method_def="adopt(uint256 petId)", args=args), gas=20 * TGAS
        )

        assert action.receiver_id == SUB_ACCOUNT
        assert action.method_name == "call"
        assert action.gas == 25 * TGAS
        assert ProxyCall.from_bytes(action.args) == ProxyCall(
            gas=20 * TGAS,
            amount=3,
            receiver_id="pets.near",
            method_name="adopt",
            args=args,
        )

    def test_base64_message(self):
        """Test that base64 text messages are accepted."""
        gateway = Gateway()
        message = base64.b64encode(sign()).decode("ascii")
        assert gateway.create(message, deposit=0).account_id == SUB_ACCOUNT

    def test_invalid_base64(self):
        """Test that non-base64 text is rejected."""
        with pytest.raises(MetaCallRejectedError, match="base64"):
            Gateway().create("not base64!", deposit=0)

    def test_truncated_message(self, caplog):
        """Test that a malformed message is rejected and logged."""
        gateway = Gateway()
        with caplog.at_level(logging.WARNING, logger="near_gateway_sdk.gateway.gateway"):
            with pytest.raises(MetaCallRejectedError):
                gateway.create(sign()[:-1], deposit=0)
        assert "Rejected meta call" in caplog.text
        assert gateway.get_nonce(TEST_SENDER) == 0

    def test_wrong_gateway(self):
        """Test that a message signed for another gateway has another sender."""
        gateway = Gateway({"account_id": "other"})
        action = gateway.create(sign(), deposit=0)
        assert action.account_id != SUB_ACCOUNT.replace(".gateway", ".other")

    def test_bad_signature_chained(self):
        """Test that the parsing failure is kept as the cause."""
        message = bytearray(sign())
        message[64] = 29
        with pytest.raises(MetaCallRejectedError) as exc_info:
            Gateway().create(bytes(message), deposit=0)
        assert isinstance(exc_info.value.__cause__, InvalidEcRecoverSignature)


class TestProxyArgs:
    """Tests for the proxy account argument layouts."""

    def test_transfer_layout(self):
        """Test the transfer input layout."""
        data = encode_transfer_args(1, "bob.near")
        assert data == b"\x01" + b"\x00" * 15 + b"bob.near"
        assert decode_transfer_args(data) == (1, "bob.near")

    def test_transfer_errors(self):
        """Test malformed transfer input and amounts."""
        with pytest.raises(ProxyArgumentError):
            encode_transfer_args(-1, "bob.near")
        with pytest.raises(ProxyArgumentError):
            decode_transfer_args(b"\x00" * 15)
        with pytest.raises(ProxyArgumentError):
            decode_transfer_args(b"\x00" * 16 + b"\xff")

    def test_call_layout(self):
        """Test the call input layout."""
        call = ProxyCall(gas=7, amount=9, receiver_id="a", method_name="bc", args=b"\x01")
        data = call.to_bytes()
        assert data[:8] == (7).to_bytes(8, "little")
        assert data[8:24] == (9).to_bytes(16, "little")
        assert data[24:29] == b"\x01\x00\x00\x00a"
        assert ProxyCall.from_bytes(data) == call

    def test_call_errors(self):
        """Test truncated, trailing and out-of-range call input."""
        data = ProxyCall(gas=1, amount=0, receiver_id="a", method_name="b").to_bytes()
        with pytest.raises(ProxyArgumentError):
            ProxyCall.from_bytes(data[:-1])
        with pytest.raises(ProxyArgumentError):
            ProxyCall.from_bytes(data[:10])
        with pytest.raises(ProxyArgumentError, match="trailing"):
            ProxyCall.from_bytes(data + b"\x00")
        with pytest.raises(ProxyArgumentError):
            ProxyCall(gas=2**64, amount=0, receiver_id="a", method_name="b").to_bytes()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
