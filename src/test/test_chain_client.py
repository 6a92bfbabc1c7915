from unittest.mock import AsyncMock

import pytest
from eth_abi import decode
from web3.exceptions import ContractLogicError

from config import MAX_UINT256
from models.network import NATIVE_TOKEN_ADDRESS
from utils.chain_client import (
    ChainClient,
    encode_approve,
    encode_transfer,
    prepare_approval,
    with_gas_buffer,
)
from defi_fixtures import RECIPIENT, WALLET

TOKEN = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"


def test_gas_buffer_adds_ten_percent():
    assert with_gas_buffer(100_000) == 110_000
    assert with_gas_buffer(21_001) == 23_101


def test_encode_approve():
    data = encode_approve(RECIPIENT, MAX_UINT256)
    assert data.startswith("0x095ea7b3")
    spender, amount = decode(["address", "uint256"], bytes.fromhex(data[10:]))
    assert spender.lower() == RECIPIENT
    assert amount == MAX_UINT256


def test_encode_transfer():
    data = encode_transfer(RECIPIENT, 5_000_000)
    assert data.startswith("0xa9059cbb")
    to, amount = decode(["address", "uint256"], bytes.fromhex(data[10:]))
    assert to.lower() == RECIPIENT
    assert amount == 5_000_000


@pytest.mark.asyncio
async def test_gas_limit_buffers_estimate():
    client = ChainClient("http://localhost:8545")
    client.estimate_gas = AsyncMock(return_value=50_000)
    assert await client.gas_limit({"from": WALLET, "to": TOKEN, "data": "0x", "value": 0}) == 55_000


@pytest.mark.asyncio
async def test_gas_limit_uses_fallback_for_dependent_transaction():
    client = ChainClient("http://localhost:8545")
    client.estimate_gas = AsyncMock(side_effect=ContractLogicError("execution reverted"))
    tx = {"from": WALLET, "to": TOKEN, "data": "0x", "value": 0}

    assert await client.gas_limit(tx, fallback=300_000) == 300_000
    with pytest.raises(ContractLogicError):
        await client.gas_limit(tx)


@pytest.mark.asyncio
async def test_gas_limit_does_not_hide_transport_errors():
    client = ChainClient("http://localhost:8545")
    client.estimate_gas = AsyncMock(side_effect=ConnectionError("rpc down"))
    with pytest.raises(ConnectionError):
        await client.gas_limit({"from": WALLET, "to": TOKEN, "data": "0x", "value": 0}, fallback=300_000)


@pytest.mark.asyncio
async def test_native_allowance_is_unlimited():
    client = ChainClient("http://localhost:8545")
    client.call = AsyncMock()
    assert await client.allowance(NATIVE_TOKEN_ADDRESS, WALLET, RECIPIENT) == MAX_UINT256
    client.call.assert_not_called()


@pytest.mark.asyncio
async def test_no_approval_when_allowance_covers_amount(chain):
    chain.allowance = AsyncMock(return_value=10_000_000)
    assert await prepare_approval(chain, TOKEN, WALLET, RECIPIENT, 5_000_000) is None


@pytest.mark.asyncio
async def test_approval_when_allowance_short(chain):
    chain.allowance = AsyncMock(return_value=1)
    tx = await prepare_approval(chain, TOKEN, WALLET, RECIPIENT, 5_000_000)

    assert tx.to == TOKEN
    assert tx.value == 0
    assert tx.gas_limit == 110_000
    assert tx.chain_id == 8453
    assert tx.data == encode_approve(RECIPIENT, MAX_UINT256)
    chain.allowance.assert_awaited_once_with(TOKEN, WALLET, RECIPIENT)


@pytest.mark.asyncio
async def test_threshold_applies_to_full_position_requests(chain):
    chain.allowance = AsyncMock(return_value=10**9)
    tx = await prepare_approval(chain, TOKEN, WALLET, RECIPIENT, MAX_UINT256, threshold=10**12)
    assert tx is not None

    chain.allowance = AsyncMock(return_value=10**12)
    assert await prepare_approval(chain, TOKEN, WALLET, RECIPIENT, MAX_UINT256, threshold=10**12) is None
