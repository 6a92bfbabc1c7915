from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

import frontend_api
from defi_fixtures import WALLET, make_quote
from tools.lifi_tool import LiFiQuoteError

QUOTE_BODY = {
    "amount": "1,5",
    "fromChain": 8453,
    "toChain": 42161,
    "fromToken": "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
    "toToken": "0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
    "fromAddress": WALLET,
    "decimals": 6,
}


@pytest.fixture
def quotes():
    client = MagicMock()
    client.get_quote = AsyncMock(return_value=make_quote())
    frontend_api.app.state.quotes = client
    yield client
    frontend_api.app.state.quotes = None


@pytest.fixture
def client():
    return TestClient(frontend_api.app)


def test_chat_with_agent_relays_result(client):
    result = {"status": "success", "last_tool": "fallback", "message": "hi"}
    with patch("frontend_api.chat_with_agent", AsyncMock(return_value=result)) as relay:
        response = client.post("/api/chatWithAgent", json={"message": "hi", "context": {"address": WALLET}})

    assert response.status_code == 200
    assert response.json() == result
    relay.assert_awaited_once_with({"message": "hi", "context": {"address": WALLET}})


def test_chat_with_agent_transport_failure_is_empty(client):
    with patch("frontend_api.chat_with_agent", AsyncMock(return_value=None)):
        response = client.post("/api/chatWithAgent", json={"message": "hi"})
    assert response.status_code == 200
    assert response.json() == {}


def test_quote_success(client, quotes):
    response = client.post("/api/quote", json=QUOTE_BODY)

    assert response.status_code == 200
    body = response.json()
    assert body["error"] is None
    assert body["result"]["toAmount"] == "990000"
    assert body["result"]["route"]["id"] == "quote-1"

    kwargs = quotes.get_quote.await_args.kwargs
    assert kwargs["from_amount"] == 1_500_000
    assert kwargs["to_address"] == WALLET
    assert kwargs["order"] == "FASTEST"
    assert kwargs["deny_exchanges"] == ["fly"]


@pytest.mark.parametrize("changes", [{"amount": "0"}, {"amount": "abc"}, {"toToken": None}])
def test_quote_invalid_request(client, quotes, changes):
    response = client.post("/api/quote", json={**QUOTE_BODY, **changes})
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidRequest"
    quotes.get_quote.assert_not_called()


@pytest.mark.parametrize("body", [
    {k: v for k, v in QUOTE_BODY.items() if k != "fromAddress"},
    {**QUOTE_BODY, "fromChain": "base"},
])
def test_quote_malformed_body_is_invalid_request(client, quotes, body):
    response = client.post("/api/quote", json=body)
    assert response.status_code == 400
    assert response.json() == {"error": "InvalidRequest", "message": "Invalid amount or missing tokens."}
    quotes.get_quote.assert_not_called()


def test_chat_with_agent_rejects_non_json_body(client):
    with patch("frontend_api.chat_with_agent", AsyncMock()) as relay:
        response = client.post(
            "/api/chatWithAgent", content="not json", headers={"Content-Type": "application/json"}
        )
    assert response.status_code == 200
    assert response.json() == {}
    relay.assert_not_called()


@pytest.mark.parametrize("error", [
    LiFiQuoteError("Not found", 404),
    LiFiQuoteError("No available quotes for the requested transfer", 400),
])
def test_quote_no_route(client, quotes, error):
    quotes.get_quote = AsyncMock(side_effect=error)
    response = client.post("/api/quote", json=QUOTE_BODY)
    assert response.status_code == 404
    assert response.json()["error"] == "NoRouteFound"


def test_quote_upstream_error(client, quotes):
    quotes.get_quote = AsyncMock(side_effect=LiFiQuoteError("rate limit exceeded", 429))
    response = client.post("/api/quote", json=QUOTE_BODY)
    assert response.status_code == 500
    assert response.json() == {"error": "API_Error", "message": "rate limit exceeded"}


def test_portfolio_rejects_invalid_address(client):
    response = client.get("/api/portfolio/not-an-address")
    assert response.status_code == 400


def test_portfolio_summary(client):
    service = MagicMock()
    service.initialize = AsyncMock()
    service.get_portfolio_summary = AsyncMock(return_value={"address": WALLET, "balances": {"ETH": "1"}})
    frontend_api.app.state.portfolio_service = service
    try:
        response = client.get(f"/api/portfolio/{WALLET}")
    finally:
        frontend_api.app.state.portfolio_service = None

    assert response.status_code == 200
    assert response.json()["balances"] == {"ETH": "1"}
