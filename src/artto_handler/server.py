"""FastAPI application exposing the marketplace and funding endpoints.

Run with:

    uvicorn artto_handler.server:create_app_from_env --factory --port 3001

or ``python -m artto_handler``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import Settings
from .errors import FundingError, ValidationError
from .funding import FundingOrchestrator
from .http import bearer_auth_middleware
from .marketplace import (
    MarketplaceService,
    OrderRequest,
    describe,
    load_marketplace_factory,
    to_json_safe,
)

logger = logging.getLogger(__name__)

FUNDED_MESSAGE = "OpenRouter wallet funded successfully"


async def _read_body(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _failure(error: str, status_code: int, **extra: Any) -> JSONResponse:
    content: Dict[str, Any] = {"success": False, "error": error}
    content.update({key: value for key, value in extra.items() if value is not None})
    return JSONResponse(content=content, status_code=status_code)


def create_app(
    bearer_token: str,
    orchestrator: FundingOrchestrator,
    marketplace: MarketplaceService,
    on_shutdown: Optional[Callable[[], Awaitable[None]]] = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        if on_shutdown is not None:
            await on_shutdown()

    app = FastAPI(title="Artto OpenSea API Handler", lifespan=lifespan)
    gate = bearer_auth_middleware(bearer_token)

    @app.middleware("http")
    async def auth_middleware(request, call_next):
        return await gate(request, call_next)

    async def _order_endpoint(
        request: Request,
        amount_field: str,
        result_key: str,
        action: Callable[[OrderRequest], Awaitable[Any]],
        *,
        allow_falsy_amount: bool = False,
    ) -> JSONResponse:
        body = await _read_body(request)
        try:
            order = OrderRequest.parse(body, amount_field, allow_falsy_amount=allow_falsy_amount)
        except ValidationError as err:
            return _failure(str(err), 400)

        try:
            result = await action(order)
            return JSONResponse(content={"success": True, result_key: to_json_safe(result)})
        except Exception as exc:
            logger.exception("Error creating %s for %s", result_key, describe(order))
            return _failure(str(exc) or exc.__class__.__name__, 500)

    @app.post("/make-offer")
    async def make_offer(request: Request):
        return await _order_endpoint(request, "amount", "offer", marketplace.make_offer)

    @app.post("/sell-nft")
    async def sell_nft(request: Request):
        return await _order_endpoint(request, "startAmount", "listing", marketplace.sell)

    @app.post("/create-auction")
    async def create_auction(request: Request):
        return await _order_endpoint(
            request,
            "startAmount",
            "auction",
            marketplace.create_auction,
            allow_falsy_amount=True,
        )

    @app.post("/fund-openrouter")
    async def fund_openrouter(request: Request):
        body = await _read_body(request)
        try:
            outcome = await orchestrator.fund(body.get("amount_usd"))
        except ValidationError as err:
            return _failure(str(err), 400)
        except FundingError as err:
            return _failure(
                str(err),
                500,
                stage=err.stage,
                transactionHash=err.transaction_hash,
            )

        return JSONResponse(
            content={
                "success": True,
                "message": FUNDED_MESSAGE,
                "transactionHash": outcome.transaction_hash,
            }
        )

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


def create_app_from_env(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    factory = load_marketplace_factory(settings.marketplace_factory)
    client = factory(settings)
    orchestrator = FundingOrchestrator.from_settings(settings)

    async def shutdown() -> None:
        await orchestrator.aclose()
        close = getattr(client, "aclose", None)
        if close is not None:
            await close()

    return create_app(
        settings.bearer_token,
        orchestrator,
        MarketplaceService(client, settings.wallet_address),
        on_shutdown=shutdown,
    )
