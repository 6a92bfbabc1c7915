"""
Server-side client used by the backend-for-frontend to reach the agent server.
"""
from typing import Any, Dict, Optional

import httpx

from config import AGENT_URL_API, AI_URL_API_KEY, logger


async def chat_with_agent(
    body: Dict[str, Any],
    agent_url: str = AGENT_URL_API,
    api_key: str = AI_URL_API_KEY,
    timeout: float = 60.0
) -> Optional[Dict[str, Any]]:
    """
    Forward a chat body to the agent with the shared secret attached.

    Returns:
        The agent's JSON response, or None on any transport or decoding failure
    """
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.post(
                agent_url,
                json=body,
                headers={"X-API-Key": api_key or "", "Content-Type": "application/json"},
            )
        return response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Error calling agent at {agent_url}: {e}")
        return None
