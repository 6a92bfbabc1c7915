"""
Read-only access to the Base chain plus ERC20 calldata helpers.

Builders never sign anything; they only simulate, read allowances and balances,
and encode calldata for the client's wallet.
"""
from typing import Any, Dict, List, Optional

from eth_abi import encode
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from config import (
    BASE_CHAIN_ID,
    BASE_RPC_URL,
    ERC20_ABI,
    GAS_BUFFER_PERCENT,
    MAX_UINT256,
    logger,
)
from models.network import NATIVE_TOKEN_ADDRESS
from models.transaction import PreparedTransaction
from utils.tool_errors import is_anticipated_chain_failure


def with_gas_buffer(estimate: int) -> int:
    """Add the 10% safety margin to a gas estimate."""
    return estimate * GAS_BUFFER_PERCENT // 100


def encode_call(signature: str, types: List[str], values: List[Any]) -> str:
    """Encode a contract call as 0x-prefixed calldata from its text signature."""
    function_selector = Web3.keccak(text=signature)[:4]
    encoded_params = encode(types, values)
    return "0x" + bytes(function_selector + encoded_params).hex()


def encode_approve(spender: str, amount: int) -> str:
    return encode_call(
        "approve(address,uint256)",
        ["address", "uint256"],
        [Web3.to_checksum_address(spender), amount]
    )


def encode_transfer(to: str, amount: int) -> str:
    return encode_call(
        "transfer(address,uint256)",
        ["address", "uint256"],
        [Web3.to_checksum_address(to), amount]
    )


class ChainClient:
    """Thin async wrapper around AsyncWeb3 for the calls the builders make."""

    def __init__(self, rpc_url: str = BASE_RPC_URL, chain_id: int = BASE_CHAIN_ID):
        self.rpc_url = rpc_url
        self.chain_id = chain_id
        self.w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))

    async def call(self, address: str, abi: List[Dict[str, Any]], function_name: str, *args) -> Any:
        contract = self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)
        return await getattr(contract.functions, function_name)(*args).call()

    async def estimate_gas(self, tx: Dict[str, Any]) -> int:
        params = {
            "from": Web3.to_checksum_address(tx["from"]),
            "to": Web3.to_checksum_address(tx["to"]),
            "data": tx["data"],
            "value": int(tx.get("value", 0)),
        }
        return await self.w3.eth.estimate_gas(params)

    async def gas_limit(self, tx: Dict[str, Any], fallback: Optional[int] = None) -> int:
        """Estimate gas with the safety buffer.

        When `fallback` is given the transaction depends on an earlier one in the same
        batch (an approval or a borrow), so a reverting simulation is expected and the
        fallback limit is used instead.
        """
        try:
            return with_gas_buffer(await self.estimate_gas(tx))
        except Exception as e:
            if fallback is None or not is_anticipated_chain_failure(e):
                raise
            logger.info(f"Gas simulation for {tx['to']} reverted before its dependency executed, using {fallback}")
            return fallback

    async def gas_price(self) -> int:
        return await self.w3.eth.gas_price

    async def native_balance(self, owner: str) -> int:
        return await self.w3.eth.get_balance(Web3.to_checksum_address(owner))

    async def balance_of(self, token: str, owner: str) -> int:
        if token.lower() == NATIVE_TOKEN_ADDRESS:
            return await self.native_balance(owner)
        return await self.call(token, ERC20_ABI, "balanceOf", Web3.to_checksum_address(owner))

    async def allowance(self, token: str, owner: str, spender: str) -> int:
        if token.lower() == NATIVE_TOKEN_ADDRESS:
            return MAX_UINT256
        return await self.call(
            token,
            ERC20_ABI,
            "allowance",
            Web3.to_checksum_address(owner),
            Web3.to_checksum_address(spender)
        )


async def prepare_approval(
    chain: ChainClient,
    token: str,
    owner: str,
    spender: str,
    required: int,
    threshold: Optional[int] = None,
    estimate: bool = True
) -> Optional[PreparedTransaction]:
    """Return an unlimited approval when the current allowance is insufficient, else None.

    The allowance is read before anything else is decided. A request for the whole
    position passes `threshold`, since any finite allowance below it may not cover
    accrued interest.
    """
    current = await chain.allowance(token, owner, spender)
    needed = threshold if threshold is not None else required
    if current >= needed:
        logger.info(f"Allowance for {spender} on {token} already sufficient ({current})")
        return None

    logger.info(f"Allowance for {spender} on {token} is {current}, preparing approval")
    data = encode_approve(spender, MAX_UINT256)
    gas_limit = None
    if estimate:
        gas_limit = await chain.gas_limit({"from": owner, "to": token, "data": data, "value": 0})
    return PreparedTransaction(
        to=token,
        data=data,
        value=0,
        chain_id=chain.chain_id,
        gas_limit=gas_limit,
    )
