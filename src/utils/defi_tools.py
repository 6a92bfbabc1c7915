"""
Shared DeFi tools utilities for creating LangChain tools.
"""
from typing import List, Optional
from pydantic import BaseModel, Field
from langchain_core.tools import StructuredTool
from utils.ai_router_tools import create_langchain_tool
from utils.chain_client import ChainClient
from tools.aave_tool import DEPOSIT_TOOL_NAME, REPAY_TOOL_NAME, WITHDRAW_TOOL_NAME, create_aave_tools
from tools.borrow_bridge_tool import BORROW_BRIDGE_TOOL_NAME, create_borrow_bridge_tool
from tools.fallback_tool import FALLBACK_TOOL_NAME, create_fallback_tool
from tools.lifi_tool import SWAP_BRIDGE_TOOL_NAME, LiFiClient, create_swap_bridge_tool
from tools.research_tool import WEB_SEARCH_TOOL_NAME, create_web_search_tool
from config import logger


# Input schemas for tools
class FallbackInput(BaseModel):
    pass


class WebSearchInput(BaseModel):
    query: str = Field(description="The question or search query to look up on the web")


class AaveDepositInput(BaseModel):
    amount_in_eth: str = Field(description="The amount of ETH to deposit, as a decimal string (e.g., '0.01')")


class AaveRepayInput(BaseModel):
    amount_usdc: str = Field(
        description="The amount of USDC to repay as a decimal string (e.g., '25.5'), or 'MAX' to repay the whole debt"
    )


class AaveWithdrawInput(BaseModel):
    amount_eth: str = Field(
        description="The amount of ETH to withdraw as a decimal string (e.g., '0.5'), or 'MAX' to withdraw everything supplied"
    )


class SwapOrBridgeInput(BaseModel):
    from_token_symbol: str = Field(description="The token symbol to send from Base (e.g., 'USDC', 'ETH')")
    to_token_symbol: str = Field(description="The token symbol to receive (e.g., 'USDC', 'WETH')")
    amount: str = Field(description="The amount of the source token, as a decimal string")
    swap: bool = Field(
        default=False,
        description="True for a swap on Base; false for a bridge to another network"
    )
    destination_chain_name: Optional[str] = Field(
        default=None,
        description="The destination network name for bridges (e.g., 'Arbitrum', 'Optimism'); ignored for swaps"
    )
    to_address: Optional[str] = Field(
        default=None,
        description="Optional recipient address; defaults to the user's own wallet"
    )


class BorrowAndBridgeInput(BaseModel):
    borrow_amount_usdc: str = Field(
        description="The amount of USDC the user wants to end up with; only the shortfall over their wallet balance is borrowed"
    )
    to_token_symbol: Optional[str] = Field(
        default=None,
        description="Token to convert the USDC into (defaults to USDC)"
    )
    destination_chain_name: Optional[str] = Field(
        default=None,
        description="Network to bridge the funds to (defaults to Base)"
    )
    to_address: Optional[str] = Field(
        default=None,
        description="Optional recipient address; defaults to the user's own wallet"
    )


def create_defi_langchain_tools(
    chain: Optional[ChainClient] = None,
    quotes: Optional[LiFiClient] = None,
    search_llm=None
) -> List[StructuredTool]:
    """Create all DeFi LangChain tools.

    Args:
        chain: Chain client for Base (a default one is created when omitted)
        quotes: LiFi quote client (a default one is created when omitted)
        search_llm: Optional chat model backing the web search tool

    Returns:
        List of LangChain StructuredTool objects
    """
    chain = chain or ChainClient()
    quotes = quotes or LiFiClient()
    tools = []

    # Fallback tool
    fallback_config = create_fallback_tool()
    tools.append(create_langchain_tool(
        func=fallback_config["tool"],
        name=FALLBACK_TOOL_NAME,
        description="Use this when the request does not match any other tool, or to greet the user and explain what you can do.",
        args_schema=FallbackInput
    ))

    # Aave tools
    aave_configs = create_aave_tools(chain)

    tools.append(create_langchain_tool(
        func=aave_configs[DEPOSIT_TOOL_NAME]["tool"],
        name=DEPOSIT_TOOL_NAME,
        description="Deposit (supply) ETH into Aave on Base. Use this when the user wants to supply, deposit or lend ETH.",
        args_schema=AaveDepositInput
    ))

    tools.append(create_langchain_tool(
        func=aave_configs[REPAY_TOOL_NAME]["tool"],
        name=REPAY_TOOL_NAME,
        description="Repay USDC debt on Aave on Base. Use 'MAX' when the user wants to repay everything.",
        args_schema=AaveRepayInput
    ))

    tools.append(create_langchain_tool(
        func=aave_configs[WITHDRAW_TOOL_NAME]["tool"],
        name=WITHDRAW_TOOL_NAME,
        description="Withdraw supplied ETH from Aave on Base. Use 'MAX' when the user wants to withdraw everything.",
        args_schema=AaveWithdrawInput
    ))

    # LiFi swap / bridge tool
    swap_config = create_swap_bridge_tool(chain, quotes)
    tools.append(create_langchain_tool(
        func=swap_config["tool"],
        name=SWAP_BRIDGE_TOOL_NAME,
        description="Swap tokens on Base, or bridge tokens from Base to another network, using LiFi. Use this when the user wants to swap, exchange, bridge or send tokens cross-chain.",
        args_schema=SwapOrBridgeInput
    ))

    # Borrow and bridge tool
    borrow_config = create_borrow_bridge_tool(chain, quotes)
    tools.append(create_langchain_tool(
        func=borrow_config["tool"],
        name=BORROW_BRIDGE_TOOL_NAME,
        description="Borrow USDC on Aave (Base) against the user's collateral, only as much as their wallet is missing, then optionally send it to an address, swap it or bridge it to another network.",
        args_schema=BorrowAndBridgeInput
    ))

    # Web search tool
    search_config = create_web_search_tool(llm=search_llm)
    tools.append(create_langchain_tool(
        func=search_config["tool"],
        name=WEB_SEARCH_TOOL_NAME,
        description="Search the web for current information on DeFi protocols, tokens, prices or news.",
        args_schema=WebSearchInput
    ))

    logger.info(f"Created {len(tools)} DeFi tools")
    return tools
