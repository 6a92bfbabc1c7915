"""
Web Search Tool for LLM Integration

This module creates an LLM-friendly tool for answering general questions with a
search-capable hosted model (Perplexity's Sonar via OpenRouter by default).
"""

import logging
from typing import Dict, Any
from langchain_openai import ChatOpenAI
from langchain_core.messages import HumanMessage

from config import LLM_BASE_URL, OPENROUTER_API_KEY, RESEARCH_MODEL_ID
from models.transaction import fail_result, success_result

logger = logging.getLogger(__name__)

WEB_SEARCH_TOOL_NAME = "web_search"


def create_web_search_tool(llm=None) -> Dict[str, Any]:
    """
    Create a web search tool.

    Args:
        llm: Optional chat model to use instead of the configured search model

    Returns:
        Dictionary with "tool" function and "metadata"
    """

    async def web_search(query: str) -> str:
        """
        Search the web for up-to-date information on a query.

        Args:
            query: The search query or question

        Returns:
            ToolResult JSON with the findings as the message
        """
        try:
            search_llm = llm
            if search_llm is None:
                if not OPENROUTER_API_KEY:
                    return fail_result(WEB_SEARCH_TOOL_NAME, "Web search is not configured.")
                search_llm = ChatOpenAI(
                    model=RESEARCH_MODEL_ID,
                    api_key=OPENROUTER_API_KEY,
                    base_url=LLM_BASE_URL,
                    temperature=0.0
                )

            messages = [HumanMessage(content=f"Search the web and give a concise, up-to-date answer: {query}")]
            response = await search_llm.ainvoke(messages)

            return success_result(WEB_SEARCH_TOOL_NAME, response.content)

        except Exception as e:
            logger.error(f"Web search tool error: {e}")
            return fail_result(WEB_SEARCH_TOOL_NAME, str(e))

    return {
        "tool": web_search,
        "metadata": {
            "name": WEB_SEARCH_TOOL_NAME,
            "description": "Search the web for current information about DeFi, tokens or protocols",
            "parameters": {
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "The search query or question"
                    }
                },
                "required": ["query"]
            }
        }
    }
