from unittest.mock import AsyncMock, MagicMock

import pytest

from defi_fixtures import make_quote
from utils.chain_client import ChainClient


@pytest.fixture
def chain():
    """A ChainClient whose network calls are replaced by mocks; gas buffering stays real."""
    client = ChainClient("http://localhost:8545")
    client.estimate_gas = AsyncMock(return_value=100_000)
    client.gas_price = AsyncMock(return_value=1_500_000_000)
    client.allowance = AsyncMock(return_value=0)
    client.balance_of = AsyncMock(return_value=0)
    client.call = AsyncMock()
    return client


@pytest.fixture
def quotes():
    client = MagicMock()
    client.get_quote = AsyncMock(return_value=make_quote())
    return client
