"""
Wire shapes returned by the tools: prepared transactions and the tool result envelope.
"""
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass
class PreparedTransaction:
    """An unsigned transaction for the client's wallet to sign and submit.

    Amounts are kept as integers here and rendered as decimal strings on the wire.
    """
    to: str
    data: str
    value: int
    chain_id: int
    gas_limit: Optional[int] = None
    gas_price: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        tx = {
            "to": self.to,
            "data": self.data,
            "value": str(self.value),
        }
        if self.gas_limit is not None:
            tx["gasLimit"] = str(self.gas_limit)
        if self.gas_price is not None:
            tx["gasPrice"] = str(self.gas_price)
        tx["chainId"] = self.chain_id
        return tx


def tool_result(
    status: str,
    last_tool: str,
    message: str,
    tx: Optional[List[PreparedTransaction]] = None
) -> str:
    """Serialize a tool outcome to the JSON string the agent returns to the client."""
    result: Dict[str, Any] = {
        "status": status,
        "last_tool": last_tool,
        "message": message,
    }
    if tx is not None:
        result["tx"] = [t.to_dict() for t in tx]
    return json.dumps(result)


def success_result(last_tool: str, message: str, tx: Optional[List[PreparedTransaction]] = None) -> str:
    return tool_result("success", last_tool, message, tx)


def fail_result(last_tool: str, message: str) -> str:
    return tool_result("fail", last_tool, message)
