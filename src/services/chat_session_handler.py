"""
Client chat session: sends messages through the backend-for-frontend, keeps the
message history in memory and executes any transactions the agent prepared.
"""
from typing import Any, Dict, List, Optional
from uuid import uuid4

from config import logger
from services.transaction_executor import execute_transactions
from services.wallet_provider import WalletProvider
from utils.fetch_utils import fetch_with_retries

RETRY_MESSAGE = "Something went wrong while contacting the assistant. Please try again."


class ChatSession:
    """One conversation with the agent for a connected wallet."""

    def __init__(
        self,
        frontend_url: str,
        wallet: WalletProvider,
        context: Optional[Dict[str, Any]] = None,
        session_id: Optional[str] = None,
        retries: int = 3,
        delay: float = 1.0
    ):
        self.frontend_url = frontend_url.rstrip("/")
        self.wallet = wallet
        self.context = dict(context or {})
        self.session_id = session_id or str(uuid4())
        self.retries = retries
        self.delay = delay
        self.messages: List[Dict[str, str]] = []

    def _add_message(self, role: str, content: str):
        self.messages.append({"role": role, "content": content})

    async def send(self, message: str) -> Dict[str, Any]:
        """Send a user message and run any returned transactions through the wallet."""
        self._add_message("user", message)

        body = {
            "message": message,
            "context": {
                **self.context,
                "address": self.wallet.address,
                "sessionId": self.session_id,
            },
        }

        try:
            result = await fetch_with_retries(
                f"{self.frontend_url}/api/chatWithAgent",
                method="POST",
                json=body,
                retries=self.retries,
                delay=self.delay,
            )
        except RuntimeError as e:
            logger.error(f"Chat request failed: {e}")
            result = None

        if not result or "message" not in result:
            self._add_message("assistant", RETRY_MESSAGE)
            return {"status": "error", "message": RETRY_MESSAGE}

        self._add_message("assistant", result["message"])

        txs = result.get("tx")
        if result.get("status") == "success" and txs:
            report = await execute_transactions(txs, self.wallet.send_transaction)
            result["execution"] = report.to_dict()
            if report.succeeded:
                self._add_message("assistant", f"All {len(report.receipts)} transaction(s) confirmed.")
            else:
                self._add_message(
                    "assistant",
                    f"Transaction {report.failed_index + 1} of {len(txs)} failed: {report.error}"
                )

        return result
