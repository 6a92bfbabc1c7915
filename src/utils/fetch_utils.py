"""
HTTP helper with exponential backoff for the client's calls to its own backend.
"""
import asyncio
from typing import Any, Iterable, Optional

import httpx

from config import logger


async def fetch_with_retries(
    url: str,
    method: str = "GET",
    retries: int = 10,
    delay: float = 3.0,
    backoff: float = 2,
    null_on_statuses: Iterable[int] = (),
    timeout: float = 30.0,
    **request_kwargs
) -> Optional[Any]:
    """
    Request `url` until it succeeds, sleeping delay * backoff**attempt between tries.

    Args:
        url: Target URL
        method: HTTP method
        retries: Maximum number of attempts
        delay: Initial wait in seconds
        backoff: Multiplier applied to the wait after each failure
        null_on_statuses: Status codes that return None immediately instead of retrying
        timeout: Per-request timeout in seconds
        **request_kwargs: Passed through to httpx (json, headers, params, ...)

    Returns:
        The decoded JSON body, or None for a status in `null_on_statuses`

    Raises:
        RuntimeError: when every attempt failed
    """
    null_statuses = set(null_on_statuses)
    wait = delay
    last_error = None

    for attempt in range(1, retries + 1):
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.request(method, url, **request_kwargs)

            if response.status_code in null_statuses:
                logger.info(f"{method} {url} returned {response.status_code}, treating as empty result")
                return None
            if response.is_success:
                return response.json()

            last_error = f"HTTP {response.status_code}"
        except (httpx.HTTPError, ValueError) as e:
            last_error = str(e)

        logger.warning(f"{method} {url} failed on attempt {attempt}/{retries}: {last_error}")
        if attempt < retries:
            await asyncio.sleep(wait)
            wait *= backoff

    raise RuntimeError(f"Request to {url} failed after {retries} attempts: {last_error}")
