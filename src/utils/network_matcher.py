"""
Fuzzy resolution of user-supplied network names and exact token lookup.
"""
from collections import Counter
from typing import Iterable, Optional

from asset_config import NETWORKS, TOKENS
from config import NETWORK_MATCH_MIN_SCORE, logger
from models.network import Network, Token
from utils.tool_errors import ToolInputError


def _squash(text: str) -> str:
    return "".join(text.split()).lower()


def similarity(first: str, second: str) -> float:
    """Sørensen-Dice coefficient over character bigrams, ignoring whitespace and case."""
    first, second = _squash(first), _squash(second)
    if first == second:
        return 1.0
    if len(first) < 2 or len(second) < 2:
        return 0.0

    bigrams = Counter(first[i:i + 2] for i in range(len(first) - 1))
    intersection = 0
    for i in range(len(second) - 1):
        bigram = second[i:i + 2]
        if bigrams[bigram] > 0:
            bigrams[bigram] -= 1
            intersection += 1

    return (2.0 * intersection) / (len(first) + len(second) - 2)


def best_network_match(
    name: str,
    networks: Iterable[Network] = NETWORKS,
    min_score: Optional[float] = None
) -> Network:
    """Return the network whose name is most similar to `name`.

    There is no floor unless `min_score` (or NETWORK_MATCH_MIN_SCORE) is raised above zero,
    so any non-empty input resolves to some network.
    """
    candidates = list(networks)
    if not candidates:
        raise ToolInputError("No networks available to match against.")
    if not name or not name.strip():
        raise ToolInputError("A destination network name is required.")

    floor = NETWORK_MATCH_MIN_SCORE if min_score is None else min_score
    best = max(candidates, key=lambda network: similarity(name, network.name))
    score = similarity(name, best.name)
    logger.info(f"Matched network '{name}' to {best.name} (score {score:.2f})")

    if score < floor:
        raise ToolInputError(f"Could not recognise the network '{name}'.")
    return best


def find_token(symbol: str, chain_id: int, tokens: Iterable[Token] = TOKENS) -> Optional[Token]:
    """Exact, case-insensitive lookup of a token symbol on a chain."""
    if not symbol:
        return None
    wanted = symbol.strip().lower()
    for token in tokens:
        if token.chain_id == chain_id and token.symbol.lower() == wanted:
            return token
    return None
