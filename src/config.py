import sys
import logging
import os
from dotenv import load_dotenv

# Configure basic logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(levelname)-8s %(name)-10s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
    stream=sys.stdout
)

# Create logger instance
logger = logging.getLogger()

load_dotenv()

# Hosted model configuration (OpenAI-compatible endpoint, OpenRouter by default)
OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY")
LLM_MODEL_ID = os.getenv("LLM_MODEL_ID", "meta-llama/llama-3.1-8b-instruct")
LLM_BASE_URL = os.getenv("LLM_BASE_URL", "https://openrouter.ai/api/v1")
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0"))
RESEARCH_MODEL_ID = os.getenv("RESEARCH_MODEL_ID", "perplexity/sonar")

# Shared secret between the backend-for-frontend and the agent server
AI_URL_API_KEY = os.getenv("AI_URL_API_KEY", "")
AGENT_URL_API = os.getenv("AGENT_URL_API", "http://localhost:8000/api/chat")

# LiFi quoting service
LIFI_API_KEY = os.getenv("LIFI_API_KEY")
LIFI_INTEGRATOR = os.getenv("LIFI_INTEGRATOR", "Loanify")
LIFI_API_BASE = os.getenv("LIFI_API_BASE", "https://li.quest/v1")

# Servers
PORT = int(os.getenv("PORT", "8000"))
FRONTEND_PORT = int(os.getenv("FRONTEND_PORT", "8081"))

# Minimum Dice score accepted by the network matcher (0 keeps plain best-match)
NETWORK_MATCH_MIN_SCORE = float(os.getenv("NETWORK_MATCH_MIN_SCORE", "0.0"))

# Python wallet provider
WALLET_PRIVATE_KEY = os.getenv("WALLET_PRIVATE_KEY")
WALLET_SESSION_PATH = os.getenv("WALLET_SESSION_PATH", ".wallet_session.json")
WALLET_SESSION_DAYS = 7

# Base chain
BASE_CHAIN_ID = 8453
BASE_RPC_URL = os.getenv("BASE_RPC_URL", "https://mainnet.base.org")

# Aave V3 on Base
AAVE_POOL_ADDRESS = "0xA238Dd80C259a72e81d7e4664a9801593F98d1c5"
AAVE_POOL_ADDRESSES_PROVIDER = "0xe20fCBdBfFC4Dd138cE8b2E6FBb6CB49777ad64D"
AAVE_WETH_GATEWAY = os.getenv("AAVE_WETH_GATEWAY", "0x729b3EA8C005AbC58c9150fb57Ec161296F06766")
AWETH_ADDRESS = "0xD4a0e0b9149BCee3C920d2E00b5dE09138fd8bb7"
WETH_ADDRESS = "0x4200000000000000000000000000000000000006"
USDC_ADDRESS = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
USDC_DECIMALS = 6
AAVE_VARIABLE_RATE_MODE = 2
AAVE_REFERRAL_CODE = 0

# Reserves shown in the portfolio view
AAVE_ASSETS = {
    "WETH": {"address": WETH_ADDRESS, "decimals": 18},
    "USDC": {"address": USDC_ADDRESS, "decimals": USDC_DECIMALS},
}

MAX_UINT256 = 2**256 - 1

# An existing allowance at or above these amounts counts as "unlimited" for MAX requests
USDC_MAX_ALLOWANCE_THRESHOLD = 1_000_000 * 10**USDC_DECIMALS
AWETH_MAX_ALLOWANCE_THRESHOLD = 1_000_000_000 * 10**18

# Gas settings
GAS_BUFFER_PERCENT = 110
DEFAULT_APPROVAL_GAS_LIMIT = 100_000
DEFAULT_ACTION_GAS_LIMIT = 500_000

SECONDS_PER_YEAR = 31_536_000
RAY = 10**27

# ERC20 ABI for balance and allowance calls
ERC20_ABI = [
    {
        "inputs": [{"internalType": "address", "name": "account", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [
            {"internalType": "address", "name": "owner", "type": "address"},
            {"internalType": "address", "name": "spender", "type": "address"}
        ],
        "name": "allowance",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    }
]

# Aave V3 Pool ABI - only the read methods we need
AAVE_POOL_ABI = [
    {
        "inputs": [{"internalType": "address", "name": "user", "type": "address"}],
        "name": "getUserAccountData",
        "outputs": [
            {"internalType": "uint256", "name": "totalCollateralBase", "type": "uint256"},
            {"internalType": "uint256", "name": "totalDebtBase", "type": "uint256"},
            {"internalType": "uint256", "name": "availableBorrowsBase", "type": "uint256"},
            {"internalType": "uint256", "name": "currentLiquidationThreshold", "type": "uint256"},
            {"internalType": "uint256", "name": "ltv", "type": "uint256"},
            {"internalType": "uint256", "name": "healthFactor", "type": "uint256"}
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [{"internalType": "address", "name": "asset", "type": "address"}],
        "name": "getReserveData",
        "outputs": [
            {
                "components": [
                    {"name": "configuration", "type": "uint256"},
                    {"name": "liquidityIndex", "type": "uint128"},
                    {"name": "currentLiquidityRate", "type": "uint128"},
                    {"name": "variableBorrowIndex", "type": "uint128"},
                    {"name": "currentVariableBorrowRate", "type": "uint128"},
                    {"name": "currentStableBorrowRate", "type": "uint128"},
                    {"name": "lastUpdateTimestamp", "type": "uint40"},
                    {"name": "id", "type": "uint16"},
                    {"name": "aTokenAddress", "type": "address"},
                    {"name": "stableDebtTokenAddress", "type": "address"},
                    {"name": "variableDebtTokenAddress", "type": "address"},
                    {"name": "interestRateStrategyAddress", "type": "address"},
                    {"name": "accruedToTreasury", "type": "uint128"},
                    {"name": "unbacked", "type": "uint128"},
                    {"name": "isolationModeTotalDebt", "type": "uint128"}
                ],
                "name": "",
                "type": "tuple"
            }
        ],
        "stateMutability": "view",
        "type": "function"
    }
]
