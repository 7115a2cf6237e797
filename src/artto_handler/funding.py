"""Fund the OpenRouter credit balance with an on-chain payment."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

import httpx

from .charges import ChargeClient
from .config import Settings
from .constants import (
    CHAIN_IDS,
    DEFAULT_FUNDING_VALUE_WEI,
    DEFAULT_POOL_FEES_TIER,
    FUNDING_CHAIN,
)
from .errors import ConfirmationTimeout, FundingError, PipelineError
from .executor import TransactionExecutor
from .intents import build_transaction_call
from .models import FundingRequest, PaymentIntent, TransactionCall, TransactionOutcome

logger = logging.getLogger(__name__)


class ChargeNegotiator(Protocol):
    async def create_charge(
        self, request: FundingRequest, sender: str, chain_id: int = ...
    ) -> PaymentIntent: ...


class Executor(Protocol):
    async def submit(self, call: TransactionCall) -> TransactionOutcome: ...


CallBuilder = Callable[..., TransactionCall]


@dataclass(frozen=True)
class FundingContext:
    sender: str
    chain_id: int = CHAIN_IDS[FUNDING_CHAIN]
    pool_fees_tier: int = DEFAULT_POOL_FEES_TIER
    value_wei: int = DEFAULT_FUNDING_VALUE_WEI

    @classmethod
    def from_settings(cls, settings: Settings) -> "FundingContext":
        return cls(
            sender=settings.wallet_address,
            chain_id=CHAIN_IDS[FUNDING_CHAIN],
            pool_fees_tier=settings.pool_fees_tier,
            value_wei=settings.funding_value_wei,
        )


class FundingOrchestrator:
    """Runs negotiation, call building and execution strictly in sequence.

    Every stage failure is re-raised as a :class:`FundingError` naming the
    stage. Requests are not de-duplicated: two calls with the same amount are
    two payments.
    """

    def __init__(
        self,
        charges: ChargeNegotiator,
        executor: Executor,
        context: FundingContext,
        builder: CallBuilder = build_transaction_call,
    ) -> None:
        self._charges = charges
        self._executor = executor
        self._context = context
        self._build = builder

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "FundingOrchestrator":
        charges = ChargeClient(
            settings.billing_api_key,
            base_url=settings.billing_url,
            http_client=http_client,
            timeout=settings.billing_timeout,
        )
        executor = TransactionExecutor.from_settings(settings)
        return cls(charges, executor, FundingContext.from_settings(settings))

    async def aclose(self) -> None:
        for component in (self._charges, self._executor):
            close = getattr(component, "aclose", None)
            if close is not None:
                await close()

    async def fund(self, amount_usd: Any) -> TransactionOutcome:
        request = FundingRequest.parse(amount_usd)

        stage = "negotiation"
        try:
            intent = await self._charges.create_charge(
                request, self._context.sender, self._context.chain_id
            )
            stage = "intent"
            call = self._build(
                intent,
                pool_fees_tier=self._context.pool_fees_tier,
                value_wei=self._context.value_wei,
            )
            stage = "execution"
            outcome = await self._executor.submit(call)
        except ConfirmationTimeout as exc:
            logger.warning("Funding of %s USD unconfirmed: %s", request.amount_usd, exc)
            raise FundingError(exc.stage, exc) from exc
        except PipelineError as exc:
            logger.error("Funding of %s USD failed at %s: %s", request.amount_usd, exc.stage, exc)
            raise FundingError(exc.stage, exc) from exc
        except Exception as exc:
            logger.exception("Unexpected error funding %s USD during %s", request.amount_usd, stage)
            raise FundingError(stage, exc) from exc

        logger.info("Funded %s USD in transaction %s", request.amount_usd, outcome.transaction_hash)
        return outcome
