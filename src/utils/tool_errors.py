"""
Error types shared by the transaction builders and the mapping from failures to user-facing text.
"""
from web3.exceptions import ContractLogicError

# Substrings of node errors that mean the user's position or balance cannot cover the request
ANTICIPATED_CHAIN_ERRORS = (
    "insufficient funds",
    "execution reverted",
    "exceeds balance",
    "gas required exceeds",
)


class ToolInputError(ValueError):
    """Raised when tool arguments cannot be resolved (unknown token or network, bad amount)."""


def is_anticipated_chain_failure(error: Exception) -> bool:
    if isinstance(error, ContractLogicError):
        return True
    text = str(error).lower()
    return any(marker in text for marker in ANTICIPATED_CHAIN_ERRORS)


def describe_failure(error: Exception, reassurance: str) -> str:
    """Pick the message shown to the user for a failed build."""
    if isinstance(error, ToolInputError):
        return str(error)
    if is_anticipated_chain_failure(error):
        return reassurance
    return str(error) or reassurance


def require_wallet_address(config) -> str:
    """Read the caller's wallet address from the per-request agent config."""
    configurable = (config or {}).get("configurable", {})
    address = configurable.get("address")
    if not address:
        raise ToolInputError("No wallet address was provided with this request. Please connect your wallet.")
    return address
