"""Translate a negotiated payment intent into the settlement contract call."""

from __future__ import annotations

import calendar
from datetime import datetime, timezone

from web3 import Web3

from .constants import (
    DEFAULT_FUNDING_VALUE_WEI,
    DEFAULT_POOL_FEES_TIER,
    SETTLEMENT_FUNCTION,
)
from .errors import InvalidIntent
from .models import PaymentIntent, TransactionCall

INTENT_ID_LENGTH = 16


def deadline_to_epoch(deadline: datetime) -> int:
    """Whole epoch seconds for ``deadline``; naive values are taken as UTC."""
    if deadline.tzinfo is None:
        deadline = deadline.replace(tzinfo=timezone.utc)
    return calendar.timegm(deadline.utctimetuple())


def build_transaction_call(
    intent: PaymentIntent,
    *,
    pool_fees_tier: int = DEFAULT_POOL_FEES_TIER,
    value_wei: int = DEFAULT_FUNDING_VALUE_WEI,
) -> TransactionCall:
    """Map ``intent`` onto ``swapAndTransferUniswapV3Native(intent, tier)``.

    Amounts pass through untouched; the billing service already quotes them in
    the settlement token's base units. ``value_wei`` is the fixed native amount
    forwarded with the call, whatever the quoted amount.
    """
    if not isinstance(intent, PaymentIntent):
        raise InvalidIntent(f"Expected a PaymentIntent, got {type(intent).__name__}")
    if len(intent.id) != INTENT_ID_LENGTH:
        raise InvalidIntent(
            f"Intent id must be {INTENT_ID_LENGTH} bytes, got {len(intent.id)}"
        )
    if not 0 <= pool_fees_tier < 2**24:
        raise InvalidIntent(f"Pool fee tier {pool_fees_tier} does not fit in uint24")
    if value_wei < 0:
        raise InvalidIntent("Call value must not be negative")

    try:
        intent_args = (
            intent.recipient_amount,
            deadline_to_epoch(intent.deadline),
            Web3.to_checksum_address(intent.recipient),
            Web3.to_checksum_address(intent.recipient_currency),
            Web3.to_checksum_address(intent.refund_destination),
            intent.fee_amount,
            intent.id,
            Web3.to_checksum_address(intent.operator),
            intent.signature,
            intent.prefix,
        )
        contract_address = Web3.to_checksum_address(intent.settlement_contract_address)
    except ValueError as exc:
        raise InvalidIntent(f"Intent contains an invalid address: {exc}") from exc

    return TransactionCall(
        contract_address=contract_address,
        function_name=SETTLEMENT_FUNCTION,
        intent=intent_args,
        pool_fees_tier=pool_fees_tier,
        value_wei=int(value_wei),
    )
