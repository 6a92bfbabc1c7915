"""
Sequential execution of a prepared transaction list.
"""
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from web3 import Web3

from config import logger

SendTransaction = Callable[[Dict[str, Any]], Awaitable[Any]]


@dataclass
class ExecutionReport:
    receipts: List[Any] = field(default_factory=list)
    failed_index: Optional[int] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.failed_index is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "succeeded": self.succeeded,
            "executed": len(self.receipts),
            "tx_hashes": [_receipt_hash(r) for r in self.receipts],
            "failed_index": self.failed_index,
            "error": self.error,
        }


def _receipt_hash(receipt: Any) -> Optional[str]:
    try:
        return Web3.to_hex(receipt["transactionHash"])
    except (KeyError, TypeError):
        return None


async def execute_transactions(
    txs: Union[Dict[str, Any], List[Dict[str, Any]]],
    send_transaction: SendTransaction
) -> ExecutionReport:
    """Submit transactions one by one, each after the previous receipt.

    Stops at the first failure. Transactions already confirmed are not rolled back.
    """
    if isinstance(txs, dict):
        txs = [txs]

    report = ExecutionReport()
    for index, tx in enumerate(txs):
        try:
            receipt = await send_transaction(tx)
        except Exception as e:
            logger.error(f"Transaction {index + 1}/{len(txs)} failed, stopping: {e}")
            report.failed_index = index
            report.error = str(e)
            return report
        report.receipts.append(receipt)
        logger.info(f"Transaction {index + 1}/{len(txs)} confirmed")

    return report
