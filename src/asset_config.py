"""
Asset configuration: chains reachable through the quoting service and the token catalog per chain.
"""
from typing import List

from models.network import NATIVE_TOKEN_ADDRESS, Network, Token

NETWORKS: List[Network] = [
    Network(id=1, name="Ethereum"),
    Network(id=8453, name="Base"),
    Network(id=42161, name="Arbitrum"),
    Network(id=10, name="Optimism"),
    Network(id=137, name="Polygon"),
    Network(id=56, name="BNB Chain"),
    Network(id=43114, name="Avalanche"),
    Network(id=100, name="Gnosis"),
    Network(id=59144, name="Linea"),
    Network(id=534352, name="Scroll"),
]

# Token configuration keyed by symbol, one address per chain
SUPPORTED_TOKENS = {
    "ETH": {
        "name": "Ether",
        "decimals": 18,
        "addresses": {
            1: NATIVE_TOKEN_ADDRESS,
            8453: NATIVE_TOKEN_ADDRESS,
            42161: NATIVE_TOKEN_ADDRESS,
            10: NATIVE_TOKEN_ADDRESS,
            59144: NATIVE_TOKEN_ADDRESS,
            534352: NATIVE_TOKEN_ADDRESS,
        },
    },
    "WETH": {
        "name": "Wrapped Ether",
        "decimals": 18,
        "addresses": {
            1: "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
            8453: "0x4200000000000000000000000000000000000006",
            42161: "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1",
            10: "0x4200000000000000000000000000000000000006",
            137: "0x7ceB23fD6bC0adD59E62ac25578270cFf1b9f619",
        },
    },
    "USDC": {
        "name": "USD Coin",
        "decimals": 6,
        "addresses": {
            1: "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
            8453: "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
            42161: "0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
            10: "0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85",
            137: "0x3c499c542cEF5E3811e1192ce70d8cC03d5c3359",
            43114: "0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E",
            100: "0xDDAfbb505ad214D7b80b1f830fcCc89B60fb7A83",
            59144: "0x176211869cA2b568f2A7D4EE941E073a821EE1ff",
            534352: "0x06eFdBFf2a14a7c8E15944D1F4A48F9F95F663A4",
        },
    },
    "USDT": {
        "name": "Tether USD",
        "decimals": 6,
        "addresses": {
            1: "0xdAC17F958D2ee523a2206206994597C13D831ec7",
            42161: "0xFd086bC7CD5C481DCC9C85ebE478A1C0b69FCbb9",
            10: "0x94b008aA00579c1307B0EF2c499aD98a8ce58e58",
            137: "0xc2132D05D31c914a87C6611C10748AEb04B58e8F",
            43114: "0x9702230A8Ea53601f5cD2dc00fDBc13d4dF4A8c7",
        },
    },
    "DAI": {
        "name": "Dai Stablecoin",
        "decimals": 18,
        "addresses": {
            1: "0x6B175474E89094C44Da98b954EedeAC495271d0F",
            8453: "0x50c5725949A6F0c72E6C4a641F24049A917DB0Cb",
        },
    },
    "POL": {
        "name": "Polygon Ecosystem Token",
        "decimals": 18,
        "addresses": {137: NATIVE_TOKEN_ADDRESS},
    },
    "BNB": {
        "name": "BNB",
        "decimals": 18,
        "addresses": {56: NATIVE_TOKEN_ADDRESS},
    },
    "AVAX": {
        "name": "Avalanche",
        "decimals": 18,
        "addresses": {43114: NATIVE_TOKEN_ADDRESS},
    },
    "XDAI": {
        "name": "xDAI",
        "decimals": 18,
        "addresses": {100: NATIVE_TOKEN_ADDRESS},
    },
    "ARB": {
        "name": "Arbitrum",
        "decimals": 18,
        "addresses": {42161: "0x912CE59144191C1204E64559FE8253a0e49E6548"},
    },
    "OP": {
        "name": "Optimism",
        "decimals": 18,
        "addresses": {10: "0x4200000000000000000000000000000000000042"},
    },
}

# Tether and USD Coin on BNB Chain are 18-decimal tokens
BNB_CHAIN_STABLES = [
    Token(chain_id=56, address="0x8AC76a51cc950d9822D68b83fE1Ad97B32Cd580d", symbol="USDC", decimals=18, name="USD Coin"),
    Token(chain_id=56, address="0x55d398326f99059fF775485246999027B3197955", symbol="USDT", decimals=18, name="Tether USD"),
]

# Flattened catalog, unique on (chain_id, symbol) and (chain_id, address)
TOKENS: List[Token] = [
    Token(chain_id=chain_id, address=address, symbol=symbol, decimals=info["decimals"], name=info["name"])
    for symbol, info in SUPPORTED_TOKENS.items()
    for chain_id, address in info["addresses"].items()
] + BNB_CHAIN_STABLES
