import pytest

from config import USDC_ADDRESS
from models.network import Network
from utils.network_matcher import best_network_match, find_token, similarity
from utils.tool_errors import ToolInputError


def test_identical_names_score_one():
    assert similarity("Base", "base") == 1.0
    assert similarity("BNB Chain", "bnbchain") == 1.0


def test_unrelated_names_score_low():
    assert similarity("Arbitrum", "Gnosis") < 0.2


@pytest.mark.parametrize(
    "name, chain_id",
    [
        ("arbitrum one", 42161),
        ("Optimsm", 10),
        ("Polygon PoS", 137),
        ("ethereum mainnet", 1),
        ("avax", 43114),
    ],
)
def test_best_match(name, chain_id):
    assert best_network_match(name).id == chain_id


def test_always_returns_a_network_without_floor():
    networks = [Network(id=1, name="Ethereum"), Network(id=10, name="Optimism")]
    assert best_network_match("zzz", networks, min_score=0.0) in networks


def test_floor_rejects_weak_match():
    with pytest.raises(ToolInputError):
        best_network_match("zzz", min_score=0.5)


def test_empty_candidates_raise():
    with pytest.raises(ToolInputError):
        best_network_match("Base", [])


def test_blank_name_raises():
    with pytest.raises(ToolInputError):
        best_network_match("   ")


def test_find_token_is_case_insensitive():
    token = find_token("usdc", 8453)
    assert token.address == USDC_ADDRESS
    assert token.decimals == 6


def test_find_token_is_exact():
    assert find_token("USDCX", 8453) is None
    assert find_token("USDC", 999) is None
    assert find_token("", 8453) is None


def test_native_token_flag():
    assert find_token("ETH", 8453).is_native
    assert not find_token("WETH", 8453).is_native
