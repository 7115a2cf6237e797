"""Client for the billing service that issues signed payment intents."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .constants import CHAIN_IDS, CHARGE_PATH, DEFAULT_BILLING_URL, FUNDING_CHAIN
from .errors import InvalidIntent, NegotiationError, TransportError
from .models import FundingRequest, PaymentIntent

logger = logging.getLogger(__name__)


class ChargeClient:
    """Async client for ``POST /api/v1/credits/coinbase``.

    Each call makes exactly one request. The caller decides whether a failed
    negotiation is worth repeating.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BILLING_URL,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ) -> None:
        self._api_key = api_key
        self._url = base_url.rstrip("/")
        self._timeout = timeout
        self._http_client = http_client
        self._owns_client = http_client is None

    def _get_async_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    async def create_charge(
        self,
        request: FundingRequest,
        sender: str,
        chain_id: int = CHAIN_IDS[FUNDING_CHAIN],
    ) -> PaymentIntent:
        body: Dict[str, Any] = {
            "amount": request.json_amount,
            "sender": sender,
            "chain_id": chain_id,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        client = self._get_async_client()
        try:
            response = await client.post(
                f"{self._url}{CHARGE_PATH}",
                headers=headers,
                json=body,
                timeout=self._timeout,
            )
        except httpx.TransportError as exc:
            raise TransportError(f"Billing service unreachable: {exc}") from exc

        if response.status_code != 200:
            raise NegotiationError(response.status_code, response.reason_phrase)

        try:
            payload = response.json()
        except ValueError as exc:
            raise InvalidIntent(f"Charge response is not valid JSON: {exc}") from exc

        intent = PaymentIntent.from_charge(payload)
        charge_id = payload.get("data", {}).get("id")
        logger.info(
            "Created charge %s for %s USD (settlement contract %s)",
            charge_id or "<unknown>",
            request.amount_usd,
            intent.settlement_contract_address,
        )
        return intent
