"""Boundary to the external marketplace SDK (offers, listings, auctions).

Order construction, signing and submission belong to the SDK. This module
validates request fields, resolves the chain, fills in the listing terms the
service always uses, and turns SDK results into JSON-safe payloads.
"""

from __future__ import annotations

import dataclasses
import importlib
import math
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, Mapping, Optional, Protocol

from .config import Settings
from .constants import LISTING_TTL_SECONDS, ChainDescriptor, UnsupportedChainError, resolve_chain
from .errors import ConfigurationError, ValidationError

# Largest integer a JavaScript client can read back without losing precision.
_MAX_SAFE_INTEGER = 2**53 - 1


class MarketplaceClient(Protocol):
    async def create_offer(
        self,
        chain: ChainDescriptor,
        *,
        token_address: str,
        token_id: str,
        account_address: str,
        start_amount: Any,
    ) -> Any: ...

    async def create_listing(
        self,
        chain: ChainDescriptor,
        *,
        token_address: str,
        token_id: str,
        account_address: str,
        start_amount: Any,
        expiration_time: int,
        payment_token_address: Optional[str] = None,
        english_auction: bool = False,
    ) -> Any: ...


MarketplaceFactory = Callable[[Settings], MarketplaceClient]


def load_marketplace_factory(path: str) -> MarketplaceFactory:
    """Import ``package.module:callable`` and return the callable."""
    module_name, _, attr = path.partition(":")
    if not module_name or not attr:
        raise ConfigurationError(
            f"MARKETPLACE_FACTORY must look like 'package.module:callable', got {path!r}"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"Cannot import marketplace module {module_name!r}: {exc}") from exc
    try:
        factory = getattr(module, attr)
    except AttributeError as exc:
        raise ConfigurationError(f"{module_name!r} has no attribute {attr!r}") from exc
    if not callable(factory):
        raise ConfigurationError(f"{path!r} is not callable")
    return factory


@dataclass(frozen=True)
class OrderRequest:
    chain: ChainDescriptor
    token_address: str
    token_id: str
    amount: Any

    @classmethod
    def parse(
        cls,
        body: Mapping[str, Any],
        amount_field: str,
        *,
        allow_falsy_amount: bool = False,
    ) -> "OrderRequest":
        chain_name = body.get("chain")
        token_address = body.get("tokenAddress")
        token_id = body.get("tokenId")
        amount = body.get(amount_field)

        amount_missing = amount is None if allow_falsy_amount else not amount
        if not chain_name or not token_address or not token_id or amount_missing:
            raise ValidationError(
                amount_field,
                "Missing required parameters: chain, tokenAddress, tokenId, "
                f"and {amount_field} are required",
            )
        try:
            chain = resolve_chain(chain_name)
        except UnsupportedChainError as exc:
            raise ValidationError("chain", "Invalid chain specified") from exc

        return cls(chain=chain, token_address=str(token_address), token_id=str(token_id), amount=amount)


class MarketplaceService:
    def __init__(
        self,
        client: MarketplaceClient,
        account_address: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._account_address = account_address
        self._clock = clock

    def _expiration_time(self) -> int:
        return round(self._clock() + LISTING_TTL_SECONDS)

    async def make_offer(self, order: OrderRequest) -> Any:
        return await self._client.create_offer(
            order.chain,
            token_address=order.token_address,
            token_id=order.token_id,
            account_address=self._account_address,
            start_amount=order.amount,
        )

    async def sell(self, order: OrderRequest) -> Any:
        return await self._client.create_listing(
            order.chain,
            token_address=order.token_address,
            token_id=order.token_id,
            account_address=self._account_address,
            start_amount=order.amount,
            expiration_time=self._expiration_time(),
        )

    async def create_auction(self, order: OrderRequest) -> Any:
        # English auctions settle in the chain's wrapped native token.
        return await self._client.create_listing(
            order.chain,
            token_address=order.token_address,
            token_id=order.token_id,
            account_address=self._account_address,
            start_amount=order.amount,
            expiration_time=self._expiration_time(),
            payment_token_address=order.chain.wrapped_native_token,
            english_auction=True,
        )


def to_json_safe(value: Any) -> Any:
    """Convert SDK results into values ``json.dumps`` accepts losslessly."""
    if isinstance(value, bool) or value is None or isinstance(value, str):
        return value
    if isinstance(value, float):
        # JSON has no NaN or Infinity.
        return value if math.isfinite(value) else str(value)
    if isinstance(value, int):
        return str(value) if abs(value) > _MAX_SAFE_INTEGER else value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if hasattr(value, "model_dump"):
        return to_json_safe(value.model_dump(by_alias=True, exclude_none=True))
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return to_json_safe(dataclasses.asdict(value))
    if isinstance(value, Mapping):
        return {str(key): to_json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_json_safe(item) for item in value]
    raise TypeError(f"Cannot serialise {type(value).__name__} to JSON")


def describe(order: OrderRequest) -> Dict[str, Any]:
    return {
        "chain": order.chain.name,
        "tokenAddress": order.token_address,
        "tokenId": order.token_id,
        "amount": order.amount,
    }
