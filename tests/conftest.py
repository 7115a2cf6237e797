from datetime import datetime, timedelta, timezone

import pytest

from artto_handler.models import PaymentIntent

RECIPIENT = "0x" + "11" * 20
RECIPIENT_CURRENCY = "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913"
REFUND_DESTINATION = "0x" + "22" * 20
OPERATOR = "0x" + "33" * 20
SETTLEMENT_CONTRACT = "0xeade6bc1f2d9fd47c6ea0b2cd0ad6bdb6e1a4f2c"
WALLET = "0x" + "44" * 20
INTENT_ID = "0x" + "ab" * 16
SIGNATURE = "0x" + "cd" * 65
PREFIX = "0x" + "ef" * 4


def charge_payload(deadline: str = "2030-01-01T00:00:00Z", **call_data_overrides):
    call_data = {
        "recipient_amount": "49500000",
        "deadline": deadline,
        "recipient": RECIPIENT,
        "recipient_currency": RECIPIENT_CURRENCY,
        "refund_destination": REFUND_DESTINATION,
        "fee_amount": "500000",
        "id": INTENT_ID,
        "operator": OPERATOR,
        "signature": SIGNATURE,
        "prefix": PREFIX,
    }
    call_data.update(call_data_overrides)
    return {
        "data": {
            "id": "charge-123",
            "web3_data": {
                "transfer_intent": {
                    "metadata": {
                        "chain_id": 8453,
                        "contract_address": SETTLEMENT_CONTRACT,
                        "sender": WALLET,
                    },
                    "call_data": call_data,
                }
            },
        }
    }


@pytest.fixture
def intent() -> PaymentIntent:
    return PaymentIntent.from_charge(charge_payload())


@pytest.fixture
def future_deadline() -> datetime:
    return (datetime.now(timezone.utc) + timedelta(hours=1)).replace(microsecond=0)
