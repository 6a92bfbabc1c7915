"""
Borrow-and-bridge: make sure the wallet holds a target amount of USDC on Base
(borrowing only the shortfall from Aave), then optionally route it elsewhere.

Exactly one of three follow-ups is prepared after the optional borrow:
- a LiFi route when the destination is another chain or the target token is not USDC
- a plain USDC transfer when a different recipient on Base is requested
- nothing, when the USDC should simply land in the caller's wallet
"""
from typing import Any, Dict, Optional

from langchain_core.runnables import RunnableConfig

from asset_config import NETWORKS
from config import (
    AAVE_POOL_ADDRESS,
    AAVE_REFERRAL_CODE,
    AAVE_VARIABLE_RATE_MODE,
    BASE_CHAIN_ID,
    DEFAULT_ACTION_GAS_LIMIT,
    USDC_ADDRESS,
    USDC_DECIMALS,
    logger,
)
from models.transaction import PreparedTransaction, fail_result, success_result
from tools.aave_tool import encode_aave_borrow
from tools.lifi_tool import LiFiClient, route_transaction
from utils.amounts import AllAmount, format_units, parse_amount, parse_units
from utils.chain_client import ChainClient, encode_transfer, prepare_approval
from utils.network_matcher import best_network_match, find_token
from utils.tool_errors import ToolInputError, describe_failure, require_wallet_address

BORROW_BRIDGE_TOOL_NAME = "borrow_and_bridge"

BORROW_BRIDGE_FAILURE = (
    "Failed to prepare the borrow. Ensure you have enough collateral on Aave to borrow this amount of USDC."
)

BASE_NETWORK = next(network for network in NETWORKS if network.id == BASE_CHAIN_ID)


async def prepare_borrow_and_bridge(
    chain: ChainClient,
    quotes: LiFiClient,
    address: str,
    borrow_amount_usdc: str,
    to_token_symbol: Optional[str] = None,
    destination_chain_name: Optional[str] = None,
    to_address: Optional[str] = None
) -> str:
    """Build [borrow?, approval?, route] or [borrow?, transfer] or [borrow?]."""
    try:
        parsed = parse_amount(borrow_amount_usdc)
        if isinstance(parsed, AllAmount):
            raise ToolInputError("Please tell me how much USDC you need.")
        target_raw = parse_units(parsed.value, USDC_DECIMALS)

        target_symbol = (to_token_symbol or "USDC").strip()
        chain_name = (destination_chain_name or "Base").strip()
        if chain_name.lower() == "base":
            destination = BASE_NETWORK
        else:
            destination = best_network_match(chain_name)
        recipient = to_address or address

        balance = await chain.balance_of(USDC_ADDRESS, address)
        shortfall = max(0, target_raw - balance)
        logger.info(f"USDC balance {balance}, target {target_raw}, shortfall {shortfall} for {address}")

        txs = []
        gas_price = None
        if shortfall > 0:
            borrow_data = encode_aave_borrow(
                USDC_ADDRESS, shortfall, AAVE_VARIABLE_RATE_MODE, AAVE_REFERRAL_CODE, address
            )
            gas_price = await chain.gas_price()
            txs.append(PreparedTransaction(
                to=AAVE_POOL_ADDRESS,
                data=borrow_data,
                value=0,
                chain_id=chain.chain_id,
                gas_limit=await chain.gas_limit({"from": address, "to": AAVE_POOL_ADDRESS, "data": borrow_data, "value": 0}),
                gas_price=gas_price,
            ))

        borrow_str = f"borrowing **{format_units(shortfall, USDC_DECIMALS)} USDC**" if shortfall > 0 else ""
        is_cross_chain = destination.id != chain.chain_id
        is_usdc = target_symbol.upper() == "USDC"
        sends_elsewhere = recipient.lower() != address.lower()

        if is_cross_chain or not is_usdc:
            to_token = find_token(target_symbol, destination.id)
            if to_token is None:
                raise ToolInputError(f"Token {target_symbol} is not supported on {destination.name}.")

            quote = await quotes.get_quote(
                from_chain=chain.chain_id,
                to_chain=destination.id,
                from_token=USDC_ADDRESS,
                to_token=to_token.address,
                from_amount=target_raw,
                from_address=address,
                to_address=recipient
            )
            approval = await prepare_approval(
                chain, USDC_ADDRESS, address, quote["transactionRequest"]["to"], target_raw
            )
            if approval:
                txs.append(approval)
            txs.append(route_transaction(quote, chain.chain_id))

            if is_cross_chain:
                action_str = f"bridging to **{to_token.symbol}** on **{destination.name}**"
            else:
                action_str = f"swapping for **{to_token.symbol}**"
            summary = f"{borrow_str} and then {action_str}." if borrow_str else f"Using balance to {action_str}."

        elif sends_elsewhere:
            transfer_data = encode_transfer(recipient, target_raw)
            if gas_price is None:
                gas_price = await chain.gas_price()
            txs.append(PreparedTransaction(
                to=USDC_ADDRESS,
                data=transfer_data,
                value=0,
                chain_id=chain.chain_id,
                gas_limit=await chain.gas_limit(
                    {"from": address, "to": USDC_ADDRESS, "data": transfer_data, "value": 0},
                    fallback=DEFAULT_ACTION_GAS_LIMIT if shortfall > 0 else None
                ),
                gas_price=gas_price,
            ))
            if borrow_str:
                summary = f"{borrow_str} and sending it to **{recipient}** on Base."
            else:
                summary = f"Sending **{parsed} USDC** from your balance to **{recipient}**."

        else:
            if borrow_str:
                summary = f"{borrow_str} to your wallet."
            else:
                summary = "You already have the desired USDC balance in your wallet."

        message = f"I've prepared your request: {summary}\n\n**Please sign the {len(txs)} transaction(s).**"

        return success_result(BORROW_BRIDGE_TOOL_NAME, message, txs)

    except Exception as e:
        logger.error(f"Error preparing borrow and bridge for {address}: {e}")
        return fail_result(BORROW_BRIDGE_TOOL_NAME, describe_failure(e, BORROW_BRIDGE_FAILURE))


def create_borrow_bridge_tool(chain: ChainClient, quotes: LiFiClient) -> Dict[str, Any]:
    """
    Create the borrow-and-bridge tool bound to a chain client and quote client.

    Returns:
        Dictionary with "tool" function and "metadata"
    """

    async def borrow_and_bridge(
        borrow_amount_usdc: str,
        to_token_symbol: Optional[str] = None,
        destination_chain_name: Optional[str] = None,
        to_address: Optional[str] = None,
        config: RunnableConfig = None
    ) -> str:
        """Borrow USDC on Aave (Base) as needed and optionally send, swap or bridge it."""
        try:
            address = require_wallet_address(config)
        except ToolInputError as e:
            return fail_result(BORROW_BRIDGE_TOOL_NAME, str(e))
        return await prepare_borrow_and_bridge(
            chain,
            quotes,
            address,
            borrow_amount_usdc=borrow_amount_usdc,
            to_token_symbol=to_token_symbol,
            destination_chain_name=destination_chain_name,
            to_address=to_address
        )

    return {
        "tool": borrow_and_bridge,
        "metadata": {
            "name": BORROW_BRIDGE_TOOL_NAME,
            "description": "Get a target amount of USDC (borrowing the shortfall on Aave) and optionally send, swap or bridge it",
            "parameters": {
                "borrow_amount_usdc": "Target amount of USDC",
                "to_token_symbol": "Token to end up with (defaults to USDC)",
                "destination_chain_name": "Destination network (defaults to Base)",
                "to_address": "Optional recipient address"
            }
        }
    }
