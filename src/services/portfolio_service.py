from typing import Dict, List, Optional, Any
import logging

from web3 import Web3

from config import (
    AAVE_ASSETS,
    AAVE_POOL_ABI,
    AAVE_POOL_ADDRESS,
    AWETH_ADDRESS,
    MAX_UINT256,
    RAY,
    SECONDS_PER_YEAR,
    USDC_ADDRESS,
    USDC_DECIMALS,
    WETH_ADDRESS,
)
from models.network import NATIVE_TOKEN_ADDRESS
from utils.amounts import format_units
from utils.chain_client import ChainClient

logger = logging.getLogger(__name__)

# Aave reports account values in USD with 8 decimals and the health factor with 18
BASE_CURRENCY_DECIMALS = 8
HEALTH_FACTOR_DECIMALS = 18
LTV_DECIMALS = 4

WALLET_ASSETS = {
    "ETH": {"address": NATIVE_TOKEN_ADDRESS, "decimals": 18},
    "USDC": {"address": USDC_ADDRESS, "decimals": USDC_DECIMALS},
    "WETH": {"address": WETH_ADDRESS, "decimals": 18},
    "aWETH": {"address": AWETH_ADDRESS, "decimals": 18},
}


def rate_to_apy(ray_rate: int) -> float:
    """Convert an Aave per-year RAY rate to an APY percentage with per-second compounding."""
    rate_per_second = (ray_rate / RAY) / SECONDS_PER_YEAR
    return ((1 + rate_per_second) ** SECONDS_PER_YEAR - 1) * 100


class PortfolioService:
    """Aave positions, account health and wallet balances for a user on Base.

    Reserve data is loaded once per session and kept until invalidate_reserves()
    or destroy() is called.
    """

    def __init__(self, chain: Optional[ChainClient] = None):
        self.chain = chain or ChainClient()
        self.reserves: Optional[Dict[str, Dict[str, Any]]] = None
        self.initialized = False

    async def initialize(self):
        if self.initialized:
            return
        await self.load_reserves()
        self.initialized = True
        logger.info("Portfolio service initialized")

    async def destroy(self):
        self.reserves = None
        self.initialized = False
        logger.info("Portfolio service destroyed")

    def invalidate_reserves(self):
        self.reserves = None

    async def load_reserves(self) -> Dict[str, Dict[str, Any]]:
        """Fetch reserve data for the tracked Aave assets, caching the result."""
        if self.reserves is not None:
            return self.reserves

        reserves = {}
        for symbol, asset in AAVE_ASSETS.items():
            reserve_data = await self.chain.call(
                AAVE_POOL_ADDRESS,
                AAVE_POOL_ABI,
                "getReserveData",
                Web3.to_checksum_address(asset["address"])
            )
            reserves[symbol] = {
                "asset": asset["address"],
                "decimals": asset["decimals"],
                "liquidity_rate": reserve_data[2],  # currentLiquidityRate
                "variable_borrow_rate": reserve_data[4],  # currentVariableBorrowRate
                "atoken_address": reserve_data[8],
                "variable_debt_token_address": reserve_data[10],
            }

        self.reserves = reserves
        logger.info(f"Loaded {len(reserves)} Aave reserves")
        return reserves

    async def get_user_positions(self, user: str) -> List[Dict[str, Any]]:
        """Supplied and borrowed amounts per tracked reserve, with supply and borrow APY."""
        try:
            reserves = await self.load_reserves()
            positions = []
            for symbol, reserve in reserves.items():
                supplied = await self.chain.balance_of(reserve["atoken_address"], user)
                borrowed = await self.chain.balance_of(reserve["variable_debt_token_address"], user)
                positions.append({
                    "symbol": symbol,
                    "supplied": format_units(supplied, reserve["decimals"]),
                    "borrowed": format_units(borrowed, reserve["decimals"]),
                    "supply_apy": rate_to_apy(reserve["liquidity_rate"]),
                    "borrow_apy": rate_to_apy(reserve["variable_borrow_rate"]),
                })
            return positions
        except Exception as e:
            logger.error(f"Error getting Aave positions for {user}: {e}")
            return []

    async def get_user_account_data(self, user: str) -> Dict[str, Any]:
        """Collateral, debt and health of the user's Aave account. Zeros when unavailable."""
        try:
            (
                total_collateral,
                total_debt,
                available_borrows,
                liquidation_threshold,
                ltv,
                health_factor,
            ) = await self.chain.call(
                AAVE_POOL_ADDRESS,
                AAVE_POOL_ABI,
                "getUserAccountData",
                Web3.to_checksum_address(user)
            )
        except Exception as e:
            logger.error(f"Error getting Aave account data for {user}: {e}")
            return {
                "total_collateral_usd": 0.0,
                "total_debt_usd": 0.0,
                "available_borrows_usd": 0.0,
                "liquidation_threshold": 0.0,
                "ltv": 0.0,
                "health_factor": 0.0,
            }

        return {
            "total_collateral_usd": total_collateral / 10**BASE_CURRENCY_DECIMALS,
            "total_debt_usd": total_debt / 10**BASE_CURRENCY_DECIMALS,
            "available_borrows_usd": available_borrows / 10**BASE_CURRENCY_DECIMALS,
            "liquidation_threshold": liquidation_threshold / 10**LTV_DECIMALS,
            "ltv": ltv / 10**LTV_DECIMALS,
            # No debt means an unbounded health factor
            "health_factor": None if health_factor == MAX_UINT256 else health_factor / 10**HEALTH_FACTOR_DECIMALS,
        }

    async def get_health_factor(self, user: str) -> Optional[float]:
        account = await self.get_user_account_data(user)
        return account["health_factor"]

    async def get_balances(self, user: str) -> Dict[str, str]:
        """Wallet balances of ETH, USDC, WETH and aWETH; a failed read reports zero."""
        balances = {}
        for symbol, asset in WALLET_ASSETS.items():
            try:
                raw = await self.chain.balance_of(asset["address"], user)
                balances[symbol] = format_units(raw, asset["decimals"])
            except Exception as e:
                logger.error(f"Error getting {symbol} balance for {user}: {e}")
                balances[symbol] = "0"
        return balances

    async def get_portfolio_summary(self, user: str) -> Dict[str, Any]:
        return {
            "address": user,
            "balances": await self.get_balances(user),
            "positions": await self.get_user_positions(user),
            "account": await self.get_user_account_data(user),
        }
