from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from defi_fixtures import WALLET
from services.chat_session_handler import RETRY_MESSAGE, ChatSession

TX = {"to": WALLET, "data": "0x", "value": "0", "chainId": 8453}


@pytest.fixture
def wallet():
    mock_wallet = MagicMock()
    mock_wallet.address = WALLET
    mock_wallet.send_transaction = AsyncMock(return_value={"status": 1, "transactionHash": b"\x01" * 32})
    return mock_wallet


@pytest.mark.asyncio
async def test_send_posts_context_and_records_reply(wallet):
    reply = {"status": "success", "last_tool": "fallback", "message": "Welcome"}
    with patch("services.chat_session_handler.fetch_with_retries", AsyncMock(return_value=reply)) as fetch:
        session = ChatSession("http://bff/", wallet, context={"locale": "en"}, session_id="s-1")
        result = await session.send("hi")

    assert result == reply
    assert fetch.await_args.args[0] == "http://bff/api/chatWithAgent"
    assert fetch.await_args.kwargs["method"] == "POST"
    assert fetch.await_args.kwargs["json"] == {
        "message": "hi",
        "context": {"locale": "en", "address": WALLET, "sessionId": "s-1"},
    }
    assert session.messages == [{"role": "user", "content": "hi"}, {"role": "assistant", "content": "Welcome"}]
    wallet.send_transaction.assert_not_called()


@pytest.mark.asyncio
async def test_send_executes_prepared_transactions(wallet):
    reply = {"status": "success", "last_tool": "prepare_aave_repay", "message": "Sign both", "tx": [TX, TX]}
    with patch("services.chat_session_handler.fetch_with_retries", AsyncMock(return_value=reply)):
        session = ChatSession("http://bff", wallet)
        result = await session.send("repay all")

    assert wallet.send_transaction.await_count == 2
    assert result["execution"]["succeeded"] is True
    assert session.messages[-1]["content"] == "All 2 transaction(s) confirmed."


@pytest.mark.asyncio
async def test_failed_transaction_is_reported(wallet):
    wallet.send_transaction = AsyncMock(side_effect=RuntimeError("user rejected"))
    reply = {"status": "success", "message": "Sign", "tx": [TX, TX]}
    with patch("services.chat_session_handler.fetch_with_retries", AsyncMock(return_value=reply)):
        session = ChatSession("http://bff", wallet)
        result = await session.send("repay all")

    assert result["execution"]["failed_index"] == 0
    assert session.messages[-1]["content"] == "Transaction 1 of 2 failed: user rejected"


@pytest.mark.asyncio
async def test_failed_tool_result_is_not_executed(wallet):
    reply = {"status": "fail", "message": "Failed to prepare repayment."}
    with patch("services.chat_session_handler.fetch_with_retries", AsyncMock(return_value=reply)):
        result = await ChatSession("http://bff", wallet).send("repay")
    assert result == reply
    wallet.send_transaction.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("outcome", [AsyncMock(return_value={}), AsyncMock(side_effect=RuntimeError("down"))])
async def test_unreachable_backend_gives_retry_message(wallet, outcome):
    with patch("services.chat_session_handler.fetch_with_retries", outcome):
        session = ChatSession("http://bff", wallet)
        result = await session.send("hi")

    assert result == {"status": "error", "message": RETRY_MESSAGE}
    assert session.messages[-1] == {"role": "assistant", "content": RETRY_MESSAGE}
