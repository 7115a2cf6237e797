"""Value objects passed between the stages of the funding pipeline."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, Optional, Tuple, Union

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .constants import MAX_FUNDING_AMOUNT_USD
from .errors import InvalidIntent, ValidationError

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")

INVALID_AMOUNT_MESSAGE = (
    f"Invalid amount_usd. Must be a number between 0 and {MAX_FUNDING_AMOUNT_USD}."
)


@dataclass(frozen=True)
class FundingRequest:
    amount_usd: Decimal

    @classmethod
    def parse(cls, raw: Any) -> "FundingRequest":
        """Validate a raw ``amount_usd`` value (JSON number or numeric string)."""
        if raw is None or isinstance(raw, bool):
            raise ValidationError("amount_usd", INVALID_AMOUNT_MESSAGE)
        if isinstance(raw, (int, float)):
            text = str(raw)
        elif isinstance(raw, str):
            text = raw.strip()
        else:
            raise ValidationError("amount_usd", INVALID_AMOUNT_MESSAGE)
        try:
            amount = Decimal(text)
        except InvalidOperation as exc:
            raise ValidationError("amount_usd", INVALID_AMOUNT_MESSAGE) from exc
        if not amount.is_finite() or amount <= 0 or amount > MAX_FUNDING_AMOUNT_USD:
            raise ValidationError("amount_usd", INVALID_AMOUNT_MESSAGE)
        return cls(amount_usd=amount)

    @property
    def json_amount(self) -> Union[int, float]:
        if self.amount_usd == self.amount_usd.to_integral_value():
            return int(self.amount_usd)
        return float(self.amount_usd)


def _check_address(value: str) -> str:
    if not _ADDRESS_RE.match(value):
        raise ValueError("must be a 0x-prefixed 20-byte hex address")
    return value


def _hex_to_bytes(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not isinstance(value, str):
        raise ValueError("must be a 0x-prefixed hex string")
    digits = value[2:] if value.lower().startswith("0x") else value
    try:
        return bytes.fromhex(digits)
    except ValueError as exc:
        raise ValueError("must be a 0x-prefixed hex string") from exc


def _reject_bool(value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError("must be an integer, not a boolean")
    return value


Address = Annotated[str, AfterValidator(_check_address)]
HexBlob = Annotated[bytes, BeforeValidator(_hex_to_bytes)]
BaseUnits = Annotated[int, BeforeValidator(_reject_bool), Field(ge=0)]


class PaymentIntent(BaseModel):
    """Signed transfer intent issued by the billing service.

    Amounts are already expressed in the settlement token's base units. The
    signature is opaque here; the settlement contract verifies it.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    recipient_amount: BaseUnits
    deadline: datetime
    recipient: Address
    recipient_currency: Address
    refund_destination: Address
    fee_amount: BaseUnits
    id: HexBlob
    operator: Address
    signature: HexBlob
    prefix: HexBlob
    settlement_contract_address: Address

    @classmethod
    def from_charge(cls, payload: Any) -> "PaymentIntent":
        """Parse ``data.web3_data.transfer_intent`` out of a charge response."""
        try:
            transfer_intent = payload["data"]["web3_data"]["transfer_intent"]
            call_data = transfer_intent["call_data"]
            contract_address = transfer_intent["metadata"]["contract_address"]
        except (KeyError, TypeError) as exc:
            raise InvalidIntent(f"Charge response missing transfer intent field {exc}") from exc
        if not isinstance(call_data, dict):
            raise InvalidIntent("Charge response call_data must be an object")

        try:
            return cls.model_validate(
                {**call_data, "settlement_contract_address": contract_address}
            )
        except PydanticValidationError as exc:
            fields = ", ".join(
                ".".join(str(part) for part in error["loc"]) or "<root>"
                for error in exc.errors()
            )
            raise InvalidIntent(f"Charge response has invalid transfer intent fields: {fields}") from exc


IntentArgs = Tuple[int, int, str, str, str, int, bytes, str, bytes, bytes]


@dataclass(frozen=True)
class TransactionCall:
    contract_address: str
    function_name: str
    intent: IntentArgs
    pool_fees_tier: int
    value_wei: int

    @property
    def arguments(self) -> Tuple[IntentArgs, int]:
        return (self.intent, self.pool_fees_tier)


@dataclass(frozen=True)
class TransactionOutcome:
    transaction_hash: str
    confirmed: bool
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
