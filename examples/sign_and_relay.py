"""Sign a Meta Call and Relay It Through the Gateway.

This example signs meta calls with an Ethereum key, verifies them the way
the gateway contract does, and prints the NEAR actions the gateway would
submit:
- Create the sender's proxy account
- Forward a method call through it

Prerequisites:
1. pip install near-gateway-sdk[examples]
2. Set SIGNER_PRIVATE_KEY (and optionally GATEWAY_ACCOUNT_ID, CHAIN_ID)

Usage:
    python sign_and_relay.py
"""

import logging
import os

import rlp
from dotenv import load_dotenv

from near_gateway_sdk import Gateway, encode_meta_call
from near_gateway_sdk.gateway import ProxyCall

load_dotenv()


def main():
    SIGNER_PRIVATE_KEY = os.environ.get("SIGNER_PRIVATE_KEY")
    GATEWAY_ACCOUNT_ID = os.environ.get("GATEWAY_ACCOUNT_ID", "gateway.near")
    CHAIN_ID = int(os.environ.get("CHAIN_ID", "1"))

    if not SIGNER_PRIVATE_KEY:
        print("Missing required environment variable: SIGNER_PRIVATE_KEY")
        return

    logging.basicConfig(level=logging.INFO)

    print("=" * 60)
    print("  META CALL THROUGH THE NEAR GATEWAY")
    print("=" * 60)

    gateway = Gateway({"account_id": GATEWAY_ACCOUNT_ID, "chain_id": CHAIN_ID})
    relying_party_id = GATEWAY_ACCOUNT_ID.encode("utf-8")

    # 1. Create the proxy account
    message = encode_meta_call(
        SIGNER_PRIVATE_KEY,
        relying_party_id=relying_party_id,
        nonce=0,
        fee_amount=0,
        fee_address="fees.near",
        contract_address="",
        value=0,
        chain_id=CHAIN_ID,
    )
    action = gateway.create(message, deposit=10**24)
    print(f"\nCreate account: {action.account_id}")

    # 2. Forward adopt(42, {name: "Rex"})
    method_def = "adopt(uint256 petId,PetObj petObj)PetObj(string name)"
    message = encode_meta_call(
        SIGNER_PRIVATE_KEY,
        relying_party_id=relying_party_id,
        nonce=1,
        fee_amount=5,
        fee_address="fees.near",
        contract_address="pets.near",
        value=0,
        method_def=method_def,
        args=rlp.encode([(42).to_bytes(1, "big"), [b"Rex"]]),
        chain_id=CHAIN_ID,
    )
    action = gateway.forward(message)
    call = ProxyCall.from_bytes(action.args)
    print(f"\nForward via {action.receiver_id}:")
    print(f"  {call.receiver_id}.{call.method_name} gas={call.gas} amount={call.amount}")
    print(f"  Sender nonce is now {gateway.get_nonce(bytes.fromhex(action.receiver_id.split('.')[0]))}")


if __name__ == "__main__":
    main()
