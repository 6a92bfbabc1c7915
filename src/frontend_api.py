"""
Backend-for-frontend: the client's own API. It keeps the agent's shared secret
server-side and fronts the quoting service for the client's quote screen.
"""
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional, Union

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from web3 import Web3

from config import logger, FRONTEND_PORT
from services.agent_client import chat_with_agent
from services.portfolio_service import PortfolioService
from tools.lifi_tool import LiFiClient, LiFiQuoteError, quote_to_route
from utils.amounts import sanitize_amount

NO_ROUTE_MESSAGE = "No route available. Try changing the amount or token pair."
NO_ROUTE_MARKERS = ("No available quotes", "NotFoundError")
INVALID_QUOTE_MESSAGE = "Invalid amount or missing tokens."
QUOTE_PATH = "/api/quote"


@asynccontextmanager
async def lifespan(app: FastAPI):
    if getattr(app.state, "quotes", None) is None:
        app.state.quotes = LiFiClient()
    if getattr(app.state, "portfolio_service", None) is None:
        app.state.portfolio_service = PortfolioService()

    yield

    await app.state.portfolio_service.destroy()


app = FastAPI(lifespan=lifespan)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow any origin
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class QuoteRequest(BaseModel):
    amount: Union[str, float, None] = None
    fromChain: int
    toChain: int
    fromToken: Optional[str] = None
    toToken: Optional[str] = None
    fromAddress: str
    toAddress: Optional[str] = None
    decimals: int = 18


def _error(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "message": message})


def _is_no_route(error: LiFiQuoteError) -> bool:
    text = str(error)
    return error.status_code == 404 or any(marker in text for marker in NO_ROUTE_MARKERS)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Quote clients only understand the {error, message} shape
    if request.url.path == QUOTE_PATH:
        logger.info(f"Rejected malformed quote request: {exc.errors()}")
        return _error(400, "InvalidRequest", INVALID_QUOTE_MESSAGE)
    return await request_validation_exception_handler(request, exc)


@app.post("/api/chatWithAgent")
async def chat_with_agent_endpoint(request: Request):
    try:
        body: Dict[str, Any] = await request.json()
    except ValueError as e:
        logger.error(f"Invalid chat body: {e}")
        return {}
    result = await chat_with_agent(body)
    # A transport failure yields an empty object rather than an error status
    return {**(result or {})}


@app.post(QUOTE_PATH)
async def quote_endpoint(request: QuoteRequest):
    from_amount = sanitize_amount(request.amount, request.decimals)
    if from_amount == "0" or not request.fromToken or not request.toToken:
        return _error(400, "InvalidRequest", INVALID_QUOTE_MESSAGE)

    quotes = getattr(app.state, "quotes", None) or LiFiClient()

    try:
        quote = await quotes.get_quote(
            from_chain=request.fromChain,
            to_chain=request.toChain,
            from_token=request.fromToken,
            to_token=request.toToken,
            from_amount=int(from_amount),
            from_address=request.fromAddress,
            to_address=request.toAddress or request.fromAddress,
            order="FASTEST",
            deny_exchanges=["fly"]
        )
    except LiFiQuoteError as e:
        if _is_no_route(e):
            return _error(404, "NoRouteFound", NO_ROUTE_MESSAGE)
        logger.error(f"LiFi quote error: {e}")
        return _error(500, "API_Error", str(e))
    except Exception as e:
        logger.error(f"Error getting quote: {e}")
        return _error(500, "API_Error", str(e))

    estimate = quote.get("estimate", {})
    return {
        "error": None,
        "result": {
            "fromChain": request.fromChain,
            "toChain": request.toChain,
            "fromAmount": quote.get("action", {}).get("fromAmount"),
            "toAmount": estimate.get("toAmount"),
            "executionDuration": estimate.get("executionDuration"),
            "gasCosts": estimate.get("gasCosts", []),
            "route": quote_to_route(quote),
            "quote": quote,
        },
    }


@app.get("/api/portfolio/{address}")
async def portfolio_endpoint(address: str):
    """Aave positions, account health and wallet balances for an address on Base"""
    if not Web3.is_address(address):
        return _error(400, "InvalidRequest", "Invalid wallet address.")

    portfolio_service = getattr(app.state, "portfolio_service", None)
    if portfolio_service is None:
        return _error(500, "API_Error", "Portfolio service not initialized")

    try:
        await portfolio_service.initialize()
        return await portfolio_service.get_portfolio_summary(Web3.to_checksum_address(address))
    except Exception as e:
        logger.error(f"Error getting portfolio for {address}: {e}")
        return _error(500, "API_Error", str(e))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("frontend_api:app", host="0.0.0.0", port=FRONTEND_PORT)
