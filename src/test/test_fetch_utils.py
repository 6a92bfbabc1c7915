from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from utils.fetch_utils import fetch_with_retries


def response(status_code, body=None):
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.is_success = 200 <= status_code < 300
    mock_response.json.return_value = body
    return mock_response


@pytest.mark.asyncio
async def test_returns_json_on_first_success():
    with patch("utils.fetch_utils.httpx.AsyncClient") as mock_client, \
            patch("utils.fetch_utils.asyncio.sleep", new_callable=AsyncMock) as sleep:
        request = AsyncMock(return_value=response(200, {"ok": True}))
        mock_client.return_value.__aenter__.return_value.request = request

        result = await fetch_with_retries("http://bff/api/chatWithAgent", method="POST", json={"message": "hi"})

    assert result == {"ok": True}
    request.assert_awaited_once_with("POST", "http://bff/api/chatWithAgent", json={"message": "hi"})
    sleep.assert_not_called()


@pytest.mark.asyncio
async def test_retries_with_exponential_backoff():
    with patch("utils.fetch_utils.httpx.AsyncClient") as mock_client, \
            patch("utils.fetch_utils.asyncio.sleep", new_callable=AsyncMock) as sleep:
        mock_client.return_value.__aenter__.return_value.request = AsyncMock(side_effect=[
            response(503),
            httpx.ConnectError("refused"),
            response(200, [1, 2]),
        ])

        result = await fetch_with_retries("http://bff/x", retries=5, delay=1.0, backoff=2)

    assert result == [1, 2]
    assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]


@pytest.mark.asyncio
async def test_null_status_returns_none_without_retry():
    with patch("utils.fetch_utils.httpx.AsyncClient") as mock_client, \
            patch("utils.fetch_utils.asyncio.sleep", new_callable=AsyncMock) as sleep:
        request = AsyncMock(return_value=response(404))
        mock_client.return_value.__aenter__.return_value.request = request

        result = await fetch_with_retries("http://bff/x", null_on_statuses=[404])

    assert result is None
    assert request.await_count == 1
    sleep.assert_not_called()


@pytest.mark.asyncio
async def test_raises_after_all_attempts():
    with patch("utils.fetch_utils.httpx.AsyncClient") as mock_client, \
            patch("utils.fetch_utils.asyncio.sleep", new_callable=AsyncMock) as sleep:
        mock_client.return_value.__aenter__.return_value.request = AsyncMock(return_value=response(500))

        with pytest.raises(RuntimeError, match="after 3 attempts"):
            await fetch_with_retries("http://bff/x", retries=3, delay=0.5)

    assert [c.args[0] for c in sleep.await_args_list] == [0.5, 1.0]
