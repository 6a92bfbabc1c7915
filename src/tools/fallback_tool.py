"""
Fallback tool: static onboarding text used whenever the model does not pick a tool.
"""
from typing import Any, Dict

from models.transaction import success_result

FALLBACK_TOOL_NAME = "fallback"

FALLBACK_MESSAGE = (
    "Welcome to Loanify, your DeFi liquidity strategist. \n\n"
    "I can help you supply assets or manage loans on Aave, and execute cross-chain "
    "bridges or swaps via LiFi. \n\n"
    "What is your next move? You can say things like: \n\n"
    "Supply 1 ETH to Aave, or Bridge USDC to Base."
)


def create_fallback_tool() -> Dict[str, Any]:
    """Create the no-argument fallback tool."""

    async def fallback() -> str:
        """Explain what the assistant can do."""
        return success_result(FALLBACK_TOOL_NAME, FALLBACK_MESSAGE)

    return {
        "tool": fallback,
        "metadata": {
            "name": FALLBACK_TOOL_NAME,
            "description": "Describe the assistant's capabilities when no other tool fits",
            "parameters": {}
        }
    }
