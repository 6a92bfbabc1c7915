import json
from unittest.mock import AsyncMock

import pytest
from eth_abi import decode
from web3.exceptions import ContractLogicError

from config import AAVE_POOL_ADDRESS, DEFAULT_ACTION_GAS_LIMIT, USDC_ADDRESS
from defi_fixtures import LIFI_ROUTER, RECIPIENT, WALLET
from tools.borrow_bridge_tool import (
    BORROW_BRIDGE_FAILURE,
    create_borrow_bridge_tool,
    prepare_borrow_and_bridge,
)


def usdc(amount: int) -> int:
    return amount * 10**6


@pytest.mark.asyncio
async def test_enough_balance_needs_no_transactions(chain, quotes):
    chain.balance_of = AsyncMock(return_value=usdc(150))
    result = json.loads(await prepare_borrow_and_bridge(chain, quotes, WALLET, "100"))

    assert result["status"] == "success"
    assert result["tx"] == []
    assert result["message"] == (
        "I've prepared your request: You already have the desired USDC balance in your wallet."
        "\n\n**Please sign the 0 transaction(s).**"
    )
    quotes.get_quote.assert_not_called()


@pytest.mark.asyncio
async def test_borrows_only_the_shortfall(chain, quotes):
    chain.balance_of = AsyncMock(return_value=usdc(40))
    result = json.loads(await prepare_borrow_and_bridge(chain, quotes, WALLET, "100"))

    assert len(result["tx"]) == 1
    borrow = result["tx"][0]
    assert borrow["to"] == AAVE_POOL_ADDRESS
    assert borrow["gasPrice"] == "1500000000"
    asset, amount, rate_mode, referral, on_behalf_of = decode(
        ["address", "uint256", "uint256", "uint16", "address"], bytes.fromhex(borrow["data"][10:])
    )
    assert asset.lower() == USDC_ADDRESS.lower()
    assert amount == usdc(60)
    assert rate_mode == 2
    assert referral == 0
    assert on_behalf_of.lower() == WALLET

    assert "borrowing **60 USDC** to your wallet." in result["message"]
    assert result["message"].endswith("**Please sign the 1 transaction(s).**")


@pytest.mark.asyncio
async def test_bridge_after_borrow(chain, quotes):
    result = json.loads(await prepare_borrow_and_bridge(
        chain, quotes, WALLET, "100", destination_chain_name="Arbitrum"
    ))

    borrow, approval, route = result["tx"]
    assert borrow["to"] == AAVE_POOL_ADDRESS
    assert approval["to"] == USDC_ADDRESS
    assert route["to"] == LIFI_ROUTER

    kwargs = quotes.get_quote.await_args.kwargs
    assert kwargs["to_chain"] == 42161
    assert kwargs["from_amount"] == usdc(100)

    assert "borrowing **100 USDC** and then bridging to **USDC** on **Arbitrum**." in result["message"]
    assert "Please sign the 3 transaction(s)." in result["message"]


@pytest.mark.asyncio
async def test_swap_on_base_from_balance(chain, quotes):
    chain.balance_of = AsyncMock(return_value=usdc(500))
    chain.allowance = AsyncMock(return_value=usdc(500))
    result = json.loads(await prepare_borrow_and_bridge(chain, quotes, WALLET, "100", to_token_symbol="ETH"))

    assert len(result["tx"]) == 1
    assert result["tx"][0]["to"] == LIFI_ROUTER
    assert "Using balance to swapping for **ETH**." in result["message"]


@pytest.mark.asyncio
async def test_transfer_from_balance(chain, quotes):
    chain.balance_of = AsyncMock(return_value=usdc(200))
    result = json.loads(await prepare_borrow_and_bridge(chain, quotes, WALLET, "100", to_address=RECIPIENT))

    assert len(result["tx"]) == 1
    transfer = result["tx"][0]
    assert transfer["to"] == USDC_ADDRESS
    to, amount = decode(["address", "uint256"], bytes.fromhex(transfer["data"][10:]))
    assert to.lower() == RECIPIENT
    assert amount == usdc(100)
    assert f"Sending **100 USDC** from your balance to **{RECIPIENT}**." in result["message"]


@pytest.mark.asyncio
async def test_transfer_after_borrow_falls_back_on_revert(chain, quotes):
    chain.estimate_gas = AsyncMock(side_effect=[200_000, ContractLogicError("execution reverted")])
    result = json.loads(await prepare_borrow_and_bridge(chain, quotes, WALLET, "100", to_address=RECIPIENT))

    borrow, transfer = result["tx"]
    assert borrow["gasLimit"] == "220000"
    assert transfer["gasLimit"] == str(DEFAULT_ACTION_GAS_LIMIT)
    assert f"and sending it to **{RECIPIENT}** on Base." in result["message"]


@pytest.mark.asyncio
async def test_borrow_revert_gives_reassurance(chain, quotes):
    chain.estimate_gas = AsyncMock(side_effect=ContractLogicError("execution reverted"))
    result = json.loads(await prepare_borrow_and_bridge(chain, quotes, WALLET, "100"))
    assert result["status"] == "fail"
    assert result["message"] == BORROW_BRIDGE_FAILURE


@pytest.mark.asyncio
async def test_unsupported_target_token(chain, quotes):
    result = json.loads(await prepare_borrow_and_bridge(chain, quotes, WALLET, "10", to_token_symbol="DOGE"))
    assert result["status"] == "fail"
    assert result["message"] == "Token DOGE is not supported on Base."


@pytest.mark.asyncio
async def test_max_is_rejected(chain, quotes):
    result = json.loads(await prepare_borrow_and_bridge(chain, quotes, WALLET, "MAX"))
    assert result["status"] == "fail"
    chain.balance_of.assert_not_called()


@pytest.mark.asyncio
async def test_tool_reads_address_from_config(chain, quotes):
    chain.balance_of = AsyncMock(return_value=usdc(1))
    tool = create_borrow_bridge_tool(chain, quotes)["tool"]
    result = json.loads(await tool("1", config={"configurable": {"address": WALLET}}))
    assert result["tx"] == []
    chain.balance_of.assert_awaited_once_with(USDC_ADDRESS, WALLET)
