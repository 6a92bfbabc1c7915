"""
Chain and token records used by the transaction builders.
"""
from dataclasses import dataclass

# LiFi and the builders treat the zero address as the chain's native currency
NATIVE_TOKEN_ADDRESS = "0x0000000000000000000000000000000000000000"


@dataclass(frozen=True)
class Network:
    id: int
    name: str


@dataclass(frozen=True)
class Token:
    chain_id: int
    address: str
    symbol: str
    decimals: int
    name: str = ""

    @property
    def is_native(self) -> bool:
        return self.address.lower() == NATIVE_TOKEN_ADDRESS
