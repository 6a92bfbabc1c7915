"""
LiFi quote client and the swap/bridge transaction builder.

Swaps and bridges always originate on Base. The builder asks LiFi for a
quote, prepends an ERC20 approval when the quote's spender lacks allowance,
and returns the quote's transaction request for the wallet to sign.
"""
from typing import Any, Dict, List, Optional

import httpx
from langchain_core.runnables import RunnableConfig

from asset_config import NETWORKS
from config import LIFI_API_BASE, LIFI_API_KEY, LIFI_INTEGRATOR, MAX_UINT256, logger
from models.network import Network
from models.transaction import PreparedTransaction, fail_result, success_result
from utils.amounts import AllAmount, parse_amount, parse_units
from utils.chain_client import ChainClient, encode_approve
from utils.network_matcher import best_network_match, find_token
from utils.tool_errors import ToolInputError, describe_failure, require_wallet_address

SWAP_BRIDGE_TOOL_NAME = "prepare_swap_or_bridge"

SWAP_BRIDGE_FAILURE = "Failed to prepare the transfer. Check the token pair, the amount and your balance."


class LiFiQuoteError(Exception):
    """Raised when LiFi cannot produce a quote."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def parse_quantity(value: Any) -> Optional[int]:
    """Read a hex ("0x...") or decimal quantity from a LiFi transaction request."""
    if value is None or value == "":
        return None
    if isinstance(value, int):
        return value
    text = str(value)
    if text.lower().startswith("0x"):
        return int(text, 16)
    return int(text)


class LiFiClient:
    """Minimal async client for the LiFi quote endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = LIFI_API_KEY,
        integrator: str = LIFI_INTEGRATOR,
        base_url: str = LIFI_API_BASE,
        timeout: float = 30.0
    ):
        self.api_key = api_key
        self.integrator = integrator
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        headers = {"accept": "application/json"}
        if self.api_key:
            headers["x-lifi-api-key"] = self.api_key
        return headers

    async def get_quote(
        self,
        from_chain: int,
        to_chain: int,
        from_token: str,
        to_token: str,
        from_amount: int,
        from_address: str,
        to_address: Optional[str] = None,
        order: Optional[str] = None,
        deny_exchanges: Optional[List[str]] = None
    ) -> Dict[str, Any]:
        """
        Get a single-step quote including the transaction request

        Args:
            from_chain: Origin chain id
            to_chain: Destination chain id
            from_token: Source token address
            to_token: Destination token address
            from_amount: Amount in source token base units
            from_address: Address that will sign the transaction
            to_address: Recipient on the destination chain (defaults to from_address)
            order: Optional route preference, e.g. "FASTEST"
            deny_exchanges: Optional exchange keys to exclude

        Returns:
            The LiFi quote object

        Raises:
            LiFiQuoteError: when the API returns an error or no route exists
        """
        params = {
            "fromChain": from_chain,
            "toChain": to_chain,
            "fromToken": from_token,
            "toToken": to_token,
            "fromAmount": str(from_amount),
            "fromAddress": from_address,
            "toAddress": to_address or from_address,
            "integrator": self.integrator,
        }
        if order:
            params["order"] = order
        if deny_exchanges:
            params["denyExchanges"] = deny_exchanges

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(f"{self.base_url}/quote", params=params, headers=self._headers())

        if response.status_code != 200:
            try:
                message = response.json().get("message") or response.text
            except ValueError:
                message = response.text
            logger.error(f"Failed to get LiFi quote: {response.status_code} - {message}")
            raise LiFiQuoteError(message or f"LiFi quote failed with status {response.status_code}", response.status_code)

        quote = response.json()
        logger.info(
            f"Got LiFi quote: {from_amount} {from_token} ({from_chain}) -> "
            f"{quote.get('estimate', {}).get('toAmount', 'N/A')} {to_token} ({to_chain})"
        )
        return quote


def quote_to_route(quote: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap a single-step quote in the route shape used by route-based clients."""
    action = quote.get("action", {})
    estimate = quote.get("estimate", {})
    return {
        "id": quote.get("id"),
        "fromChainId": action.get("fromChainId"),
        "fromAmountUSD": estimate.get("fromAmountUSD"),
        "fromAmount": action.get("fromAmount"),
        "fromToken": action.get("fromToken"),
        "fromAddress": action.get("fromAddress"),
        "toChainId": action.get("toChainId"),
        "toAmountUSD": estimate.get("toAmountUSD"),
        "toAmount": estimate.get("toAmount"),
        "toAmountMin": estimate.get("toAmountMin"),
        "toToken": action.get("toToken"),
        "toAddress": action.get("toAddress"),
        "gasCostUSD": sum(float(cost.get("amountUSD") or 0) for cost in estimate.get("gasCosts", [])),
        "steps": [quote],
    }


def route_transaction(quote: Dict[str, Any], chain_id: int, value: Optional[int] = None) -> PreparedTransaction:
    """Turn the quote's transaction request into a PreparedTransaction."""
    request = quote["transactionRequest"]
    if value is None:
        value = parse_quantity(request.get("value")) or 0
    return PreparedTransaction(
        to=request["to"],
        data=request["data"],
        value=value,
        chain_id=chain_id,
        gas_limit=parse_quantity(request.get("gasLimit")),
        gas_price=parse_quantity(request.get("gasPrice")),
    )


async def get_token_allowance(chain: ChainClient, token: str, owner: str, spender: str) -> int:
    """Current allowance, or 0 when it cannot be read (which forces an approval)."""
    try:
        return await chain.allowance(token, owner, spender)
    except Exception as e:
        logger.error(f"Error checking allowance of {spender} on {token}: {e}")
        return 0


def _network_by_id(chain_id: int) -> Network:
    for network in NETWORKS:
        if network.id == chain_id:
            return network
    return Network(id=chain_id, name=str(chain_id))


async def prepare_swap_or_bridge(
    chain: ChainClient,
    quotes: LiFiClient,
    address: str,
    from_token_symbol: str,
    to_token_symbol: str,
    amount: str,
    swap: bool = False,
    destination_chain_name: Optional[str] = None,
    to_address: Optional[str] = None
) -> str:
    """Build [approval?, route] for a same-chain swap or a bridge out of Base."""
    try:
        origin = _network_by_id(chain.chain_id)
        if swap:
            destination = origin
        else:
            if not destination_chain_name:
                raise ToolInputError("Please tell me which network you want to bridge to.")
            destination = best_network_match(destination_chain_name)

        from_token = find_token(from_token_symbol, origin.id)
        to_token = find_token(to_token_symbol, destination.id)
        if from_token is None or to_token is None:
            raise ToolInputError("Token symbols not found in supported list.")

        parsed = parse_amount(amount)
        if isinstance(parsed, AllAmount):
            raise ToolInputError(f"Please tell me how much {from_token.symbol} to send.")
        raw_amount = parse_units(parsed.value, from_token.decimals)

        quote = await quotes.get_quote(
            from_chain=origin.id,
            to_chain=destination.id,
            from_token=from_token.address,
            to_token=to_token.address,
            from_amount=raw_amount,
            from_address=address,
            to_address=to_address or address
        )
        spender = quote["transactionRequest"]["to"]

        txs = []
        if not from_token.is_native:
            allowance = await get_token_allowance(chain, from_token.address, address, spender)
            if allowance < raw_amount:
                logger.info(f"Allowance {allowance} below {raw_amount}, adding approval for {spender}")
                approve_data = encode_approve(spender, MAX_UINT256)
                txs.append(PreparedTransaction(
                    to=from_token.address,
                    data=approve_data,
                    value=0,
                    chain_id=origin.id,
                    gas_limit=await chain.gas_limit(
                        {"from": address, "to": from_token.address, "data": approve_data, "value": 0}
                    ),
                ))

        txs.append(route_transaction(
            quote,
            origin.id,
            value=raw_amount if from_token.is_native else None
        ))

        action = "swap" if swap else "bridge"
        if to_address and to_address.lower() != address.lower():
            message = f"I've prepared a {action} to send {parsed} {from_token.symbol} to {to_address} on {destination.name}."
        else:
            message = f"I've prepared your {action} of {parsed} {from_token.symbol} on {destination.name}."

        return success_result(SWAP_BRIDGE_TOOL_NAME, message, txs)

    except Exception as e:
        logger.error(f"Error preparing swap/bridge for {address}: {e}")
        return fail_result(SWAP_BRIDGE_TOOL_NAME, describe_failure(e, SWAP_BRIDGE_FAILURE))


def create_swap_bridge_tool(chain: ChainClient, quotes: LiFiClient) -> Dict[str, Any]:
    """
    Create the LiFi swap/bridge tool bound to a chain client and quote client.

    Returns:
        Dictionary with "tool" function and "metadata"
    """

    async def swap_or_bridge(
        from_token_symbol: str,
        to_token_symbol: str,
        amount: str,
        swap: bool = False,
        destination_chain_name: Optional[str] = None,
        to_address: Optional[str] = None,
        config: RunnableConfig = None
    ) -> str:
        """Prepare a swap on Base or a bridge from Base to another network."""
        try:
            address = require_wallet_address(config)
        except ToolInputError as e:
            return fail_result(SWAP_BRIDGE_TOOL_NAME, str(e))
        return await prepare_swap_or_bridge(
            chain,
            quotes,
            address,
            from_token_symbol=from_token_symbol,
            to_token_symbol=to_token_symbol,
            amount=amount,
            swap=swap,
            destination_chain_name=destination_chain_name,
            to_address=to_address
        )

    return {
        "tool": swap_or_bridge,
        "metadata": {
            "name": SWAP_BRIDGE_TOOL_NAME,
            "description": "Swap tokens on Base or bridge tokens from Base to another network via LiFi",
            "parameters": {
                "from_token_symbol": "Token to send, e.g. USDC",
                "to_token_symbol": "Token to receive",
                "amount": "Amount of the source token",
                "swap": "True for a same-chain swap on Base",
                "destination_chain_name": "Destination network for bridges",
                "to_address": "Optional recipient address"
            }
        }
    }
