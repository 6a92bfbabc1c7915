"""
Aave V3 (Base) transaction builders: deposit ETH, repay USDC debt, withdraw ETH.

Each builder returns the ToolResult JSON string with the ordered list of
transactions the client must sign. Nothing is signed or submitted here.
"""
from typing import Any, Dict

from langchain_core.runnables import RunnableConfig
from web3 import Web3

from config import (
    AAVE_POOL_ADDRESS,
    AAVE_REFERRAL_CODE,
    AAVE_VARIABLE_RATE_MODE,
    AAVE_WETH_GATEWAY,
    AWETH_ADDRESS,
    AWETH_MAX_ALLOWANCE_THRESHOLD,
    DEFAULT_ACTION_GAS_LIMIT,
    USDC_ADDRESS,
    USDC_DECIMALS,
    USDC_MAX_ALLOWANCE_THRESHOLD,
    logger,
)
from models.transaction import PreparedTransaction, fail_result, success_result
from utils.amounts import AllAmount, format_units, parse_amount, parse_units, to_contract_amount
from utils.chain_client import ChainClient, encode_call, prepare_approval
from utils.tool_errors import ToolInputError, describe_failure, require_wallet_address

DEPOSIT_TOOL_NAME = "prepare_aave_deposit"
REPAY_TOOL_NAME = "prepare_aave_repay"
WITHDRAW_TOOL_NAME = "prepare_aave_withdraw"

DEPOSIT_FAILURE = "Failed to prepare transaction. Ensure you have enough ETH for the deposit and gas."
REPAY_FAILURE = "Failed to prepare repayment. Ensure you have the required USDC balance in your wallet."
WITHDRAW_FAILURE = (
    "Failed to prepare withdrawal. Ensure you have enough supplied ETH and that "
    "withdrawing this amount won't put your loan at risk."
)


def _encode_deposit_eth(pool: str, on_behalf_of: str, referral_code: int = 0) -> str:
    """Encode WrappedTokenGateway depositETH call data."""
    return encode_call(
        "depositETH(address,address,uint16)",
        ["address", "address", "uint16"],
        [Web3.to_checksum_address(pool), Web3.to_checksum_address(on_behalf_of), referral_code]
    )


def _encode_withdraw_eth(pool: str, amount: int, to: str) -> str:
    """Encode WrappedTokenGateway withdrawETH call data."""
    return encode_call(
        "withdrawETH(address,uint256,address)",
        ["address", "uint256", "address"],
        [Web3.to_checksum_address(pool), amount, Web3.to_checksum_address(to)]
    )


def _encode_aave_repay(asset: str, amount: int, rate_mode: int, on_behalf_of: str) -> str:
    """Encode Aave V3 Pool repay call data."""
    return encode_call(
        "repay(address,uint256,uint256,address)",
        ["address", "uint256", "uint256", "address"],
        [Web3.to_checksum_address(asset), amount, rate_mode, Web3.to_checksum_address(on_behalf_of)]
    )


def encode_aave_borrow(asset: str, amount: int, rate_mode: int, referral_code: int, on_behalf_of: str) -> str:
    """Encode Aave V3 Pool borrow call data."""
    return encode_call(
        "borrow(address,uint256,uint256,uint16,address)",
        ["address", "uint256", "uint256", "uint16", "address"],
        [Web3.to_checksum_address(asset), amount, rate_mode, referral_code, Web3.to_checksum_address(on_behalf_of)]
    )


async def prepare_aave_deposit(chain: ChainClient, address: str, amount_in_eth: str) -> str:
    """Build the single depositETH transaction for supplying native ETH to Aave on Base."""
    try:
        amount = parse_amount(amount_in_eth)
        if isinstance(amount, AllAmount):
            raise ToolInputError("Please tell me how much ETH you want to deposit.")
        value = parse_units(amount.value, 18)

        data = _encode_deposit_eth(AAVE_POOL_ADDRESS, address, AAVE_REFERRAL_CODE)
        gas_limit = await chain.gas_limit({"from": address, "to": AAVE_WETH_GATEWAY, "data": data, "value": value})
        gas_price = await chain.gas_price()

        tx = PreparedTransaction(
            to=AAVE_WETH_GATEWAY,
            data=data,
            value=value,
            chain_id=chain.chain_id,
            gas_limit=gas_limit,
            gas_price=gas_price,
        )
        message = (
            f"I've prepared the transaction to deposit {amount} ETH into Aave on Base. "
            f"The estimated gas price is {format_units(gas_price, 9)} gwei. "
            "Please confirm the transaction in your wallet."
        )
        logger.info(f"Prepared Aave deposit of {amount} ETH for {address}")
        return success_result(DEPOSIT_TOOL_NAME, message, [tx])

    except Exception as e:
        logger.error(f"Error preparing Aave deposit for {address}: {e}")
        return fail_result(DEPOSIT_TOOL_NAME, describe_failure(e, DEPOSIT_FAILURE))


async def prepare_aave_repay(chain: ChainClient, address: str, amount_usdc: str) -> str:
    """Build [approval?, repay] for variable-rate USDC debt. "MAX" repays everything."""
    try:
        amount = parse_amount(amount_usdc)
        repay_all = isinstance(amount, AllAmount)
        raw_amount = to_contract_amount(amount, USDC_DECIMALS)

        approval = await prepare_approval(
            chain,
            USDC_ADDRESS,
            address,
            AAVE_POOL_ADDRESS,
            raw_amount,
            threshold=USDC_MAX_ALLOWANCE_THRESHOLD if repay_all else None
        )

        data = _encode_aave_repay(USDC_ADDRESS, raw_amount, AAVE_VARIABLE_RATE_MODE, address)
        gas_limit = await chain.gas_limit(
            {"from": address, "to": AAVE_POOL_ADDRESS, "data": data, "value": 0},
            fallback=DEFAULT_ACTION_GAS_LIMIT if approval else None
        )
        gas_price = await chain.gas_price()

        repay_tx = PreparedTransaction(
            to=AAVE_POOL_ADDRESS,
            data=data,
            value=0,
            chain_id=chain.chain_id,
            gas_limit=gas_limit,
            gas_price=gas_price,
        )

        if approval:
            message = (
                "I have prepared an approval and a repayment transaction. "
                "You will need to sign both in your wallet to clear your USDC debt."
            )
            txs = [approval, repay_tx]
        else:
            amount_text = "your full USDC debt" if repay_all else f"{amount} USDC"
            message = f"I have prepared the transaction to repay {amount_text}. Please confirm in your wallet."
            txs = [repay_tx]

        logger.info(f"Prepared Aave repay ({amount}) for {address} with {len(txs)} transaction(s)")
        return success_result(REPAY_TOOL_NAME, message, txs)

    except Exception as e:
        logger.error(f"Error preparing Aave repay for {address}: {e}")
        return fail_result(REPAY_TOOL_NAME, describe_failure(e, REPAY_FAILURE))


async def prepare_aave_withdraw(chain: ChainClient, address: str, amount_eth: str) -> str:
    """Build [aWETH approval?, withdrawETH] through the WETH gateway. "MAX" withdraws everything."""
    try:
        amount = parse_amount(amount_eth)
        withdraw_all = isinstance(amount, AllAmount)
        raw_amount = to_contract_amount(amount, 18)

        approval = await prepare_approval(
            chain,
            AWETH_ADDRESS,
            address,
            AAVE_WETH_GATEWAY,
            raw_amount,
            threshold=AWETH_MAX_ALLOWANCE_THRESHOLD if withdraw_all else None
        )

        data = _encode_withdraw_eth(AAVE_POOL_ADDRESS, raw_amount, address)
        gas_limit = await chain.gas_limit(
            {"from": address, "to": AAVE_WETH_GATEWAY, "data": data, "value": 0},
            fallback=DEFAULT_ACTION_GAS_LIMIT if approval else None
        )
        gas_price = await chain.gas_price()

        withdraw_tx = PreparedTransaction(
            to=AAVE_WETH_GATEWAY,
            data=data,
            value=0,
            chain_id=chain.chain_id,
            gas_limit=gas_limit,
            gas_price=gas_price,
        )

        if approval:
            message = (
                "I have prepared an approval for your aWETH and the withdrawal transaction. "
                "You will need to sign both to receive your ETH."
            )
            txs = [approval, withdraw_tx]
        else:
            amount_text = "all of your supplied" if withdraw_all else f"{amount}"
            message = f"I have prepared the transaction to withdraw {amount_text} ETH. Please confirm in your wallet."
            txs = [withdraw_tx]

        logger.info(f"Prepared Aave withdraw ({amount}) for {address} with {len(txs)} transaction(s)")
        return success_result(WITHDRAW_TOOL_NAME, message, txs)

    except Exception as e:
        logger.error(f"Error preparing Aave withdraw for {address}: {e}")
        return fail_result(WITHDRAW_TOOL_NAME, describe_failure(e, WITHDRAW_FAILURE))


# ===========================================
# LLM-Friendly Interface with Subtool Pattern
# ===========================================

def create_aave_tools(chain: ChainClient) -> Dict[str, Dict[str, Any]]:
    """
    Create the Aave builder tools bound to a chain client.

    The returned functions take only the amount from the model; the wallet
    address is read from the per-request config at call time.

    Args:
        chain: ChainClient for Base

    Returns:
        Dictionary of tool name to {"tool": function, "metadata": {...}}
    """

    async def aave_deposit(amount_in_eth: str, config: RunnableConfig) -> str:
        """Prepare a deposit of native ETH into Aave on Base."""
        try:
            address = require_wallet_address(config)
        except ToolInputError as e:
            return fail_result(DEPOSIT_TOOL_NAME, str(e))
        return await prepare_aave_deposit(chain, address, amount_in_eth)

    async def aave_repay(amount_usdc: str, config: RunnableConfig) -> str:
        """Prepare a repayment of USDC debt on Aave (Base)."""
        try:
            address = require_wallet_address(config)
        except ToolInputError as e:
            return fail_result(REPAY_TOOL_NAME, str(e))
        return await prepare_aave_repay(chain, address, amount_usdc)

    async def aave_withdraw(amount_eth: str, config: RunnableConfig) -> str:
        """Prepare a withdrawal of supplied ETH from Aave (Base)."""
        try:
            address = require_wallet_address(config)
        except ToolInputError as e:
            return fail_result(WITHDRAW_TOOL_NAME, str(e))
        return await prepare_aave_withdraw(chain, address, amount_eth)

    return {
        DEPOSIT_TOOL_NAME: {
            "tool": aave_deposit,
            "metadata": {
                "name": DEPOSIT_TOOL_NAME,
                "description": "Deposit (supply) native ETH into Aave V3 on Base",
                "parameters": {"amount_in_eth": "Amount of ETH, e.g. '0.01'"}
            }
        },
        REPAY_TOOL_NAME: {
            "tool": aave_repay,
            "metadata": {
                "name": REPAY_TOOL_NAME,
                "description": "Repay USDC debt on Aave V3 on Base",
                "parameters": {"amount_usdc": "Amount of USDC or 'MAX' for the whole debt"}
            }
        },
        WITHDRAW_TOOL_NAME: {
            "tool": aave_withdraw,
            "metadata": {
                "name": WITHDRAW_TOOL_NAME,
                "description": "Withdraw supplied ETH from Aave V3 on Base",
                "parameters": {"amount_eth": "Amount of ETH or 'MAX' for everything supplied"}
            }
        },
    }
