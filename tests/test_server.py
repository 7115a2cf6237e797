import pytest
from fastapi.testclient import TestClient

from artto_handler.errors import GasEstimationError, NegotiationError
from artto_handler.funding import FundingContext, FundingOrchestrator
from artto_handler.http import UNAUTHORIZED_MESSAGE
from artto_handler.marketplace import MarketplaceService
from artto_handler.models import INVALID_AMOUNT_MESSAGE, PaymentIntent, TransactionOutcome
from artto_handler.server import create_app

from conftest import WALLET, charge_payload

TOKEN = "server-token"
AUTH = {"Authorization": f"Bearer {TOKEN}"}
TX_HASH = "0x" + "ab" * 32


class StubCharges:
    def __init__(self, error=None):
        self.calls = 0
        self.error = error

    async def create_charge(self, request, sender, chain_id=8453):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return PaymentIntent.from_charge(charge_payload())


class StubExecutor:
    def __init__(self, error=None):
        self.calls = 0
        self.error = error

    async def submit(self, call):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return TransactionOutcome(transaction_hash=TX_HASH, confirmed=True)


class StubMarketplace:
    def __init__(self, result=None, error=None):
        self.calls = []
        self.result = result if result is not None else {"orderHash": "0x01"}
        self.error = error

    async def create_offer(self, chain, **kwargs):
        self.calls.append(("offer", chain.name, kwargs))
        if self.error is not None:
            raise self.error
        return self.result

    async def create_listing(self, chain, **kwargs):
        self.calls.append(("listing", chain.name, kwargs))
        if self.error is not None:
            raise self.error
        return self.result


def make_client(charges=None, executor=None, marketplace=None):
    charges = charges or StubCharges()
    executor = executor or StubExecutor()
    marketplace = marketplace or StubMarketplace()
    orchestrator = FundingOrchestrator(charges, executor, FundingContext(sender=WALLET))
    app = create_app(TOKEN, orchestrator, MarketplaceService(marketplace, WALLET, clock=lambda: 0))
    return TestClient(app), charges, executor, marketplace


ORDER = {"chain": "Base", "tokenAddress": "0xnft", "tokenId": "1"}


@pytest.mark.parametrize("path", ["/make-offer", "/sell-nft", "/create-auction", "/fund-openrouter"])
@pytest.mark.parametrize("headers", [{}, {"Authorization": "Bearer wrong"}, {"Authorization": TOKEN}])
def test_requests_without_valid_token_are_rejected(path, headers):
    client, charges, executor, marketplace = make_client()

    response = client.post(path, json={**ORDER, "amount": 1, "startAmount": 1, "amount_usd": 50}, headers=headers)

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": UNAUTHORIZED_MESSAGE}
    assert charges.calls == 0
    assert executor.calls == 0
    assert marketplace.calls == []


def test_health_requires_token():
    client, *_ = make_client()
    assert client.get("/health").status_code == 401
    assert client.get("/health", headers=AUTH).json() == {"status": "ok"}


def test_fund_openrouter_success():
    client, charges, executor, _ = make_client()

    response = client.post("/fund-openrouter", json={"amount_usd": 50}, headers=AUTH)

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "OpenRouter wallet funded successfully",
        "transactionHash": TX_HASH,
    }
    assert charges.calls == 1
    assert executor.calls == 1


@pytest.mark.parametrize("body", [{"amount_usd": 2001}, {"amount_usd": 0}, {}, {"amount_usd": "abc"}])
def test_fund_openrouter_invalid_amount(body):
    client, charges, _, _ = make_client()

    response = client.post("/fund-openrouter", json=body, headers=AUTH)

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": INVALID_AMOUNT_MESSAGE}
    assert charges.calls == 0


def test_fund_openrouter_negotiation_failure():
    client, _, executor, _ = make_client(charges=StubCharges(error=NegotiationError(401, "Unauthorized")))

    response = client.post("/fund-openrouter", json={"amount_usd": 50}, headers=AUTH)

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": "Failed to create charge: 401 Unauthorized",
        "stage": "negotiation",
    }
    assert executor.calls == 0


def test_fund_openrouter_execution_failure():
    client, *_ = make_client(executor=StubExecutor(error=GasEstimationError("Gas estimation failed: reverted")))

    response = client.post("/fund-openrouter", json={"amount_usd": 50}, headers=AUTH)

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["stage"] == "gas_estimation"
    assert "reverted" in body["error"]


def test_make_offer_success():
    client, _, _, marketplace = make_client()

    response = client.post("/make-offer", json={**ORDER, "amount": "0.5"}, headers=AUTH)

    assert response.status_code == 200
    assert response.json() == {"success": True, "offer": {"orderHash": "0x01"}}
    ((kind, chain, kwargs),) = marketplace.calls
    assert (kind, chain) == ("offer", "Base")
    assert kwargs["account_address"] == WALLET


def test_make_offer_missing_parameters():
    client, _, _, marketplace = make_client()

    response = client.post("/make-offer", json=ORDER, headers=AUTH)

    assert response.status_code == 400
    assert response.json()["error"] == (
        "Missing required parameters: chain, tokenAddress, tokenId, and amount are required"
    )
    assert marketplace.calls == []


def test_sell_nft_invalid_chain():
    client, *_ = make_client()

    response = client.post("/sell-nft", json={**ORDER, "chain": "Solana", "startAmount": 1}, headers=AUTH)

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid chain specified"}


def test_sell_nft_returns_listing():
    client, _, _, marketplace = make_client()

    response = client.post("/sell-nft", json={**ORDER, "startAmount": 1}, headers=AUTH)

    assert response.json() == {"success": True, "listing": {"orderHash": "0x01"}}
    assert marketplace.calls[0][2]["expiration_time"] == 30 * 24 * 60 * 60


def test_create_auction_accepts_zero_start_amount():
    client, _, _, marketplace = make_client()

    response = client.post("/create-auction", json={**ORDER, "startAmount": 0}, headers=AUTH)

    assert response.status_code == 200
    assert "auction" in response.json()
    assert marketplace.calls[0][2]["english_auction"] is True


def test_marketplace_failure_returns_500():
    client, *_ = make_client(marketplace=StubMarketplace(error=RuntimeError("order rejected")))

    response = client.post("/make-offer", json={**ORDER, "amount": 1}, headers=AUTH)

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "order rejected"}


def test_large_integers_are_serialized_as_strings():
    client, *_ = make_client(marketplace=StubMarketplace(result={"price": 10**21}))

    response = client.post("/make-offer", json={**ORDER, "amount": 1}, headers=AUTH)

    assert response.json() == {"success": True, "offer": {"price": str(10**21)}}


def test_non_json_body_is_a_validation_error():
    client, *_ = make_client()

    response = client.post("/make-offer", content=b"not json", headers=AUTH)

    assert response.status_code == 400


def test_non_finite_sdk_values_still_return_json():
    client, *_ = make_client(marketplace=StubMarketplace(result={"price": float("nan")}))

    response = client.post("/make-offer", json={**ORDER, "amount": 1}, headers=AUTH)

    assert response.status_code == 200
    assert response.json() == {"success": True, "offer": {"price": "nan"}}
