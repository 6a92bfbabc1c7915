"""
Client wallet provider: holds the connected account, persists the session and
signs, submits and waits for the transactions the agent prepares.
"""
import json
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from eth_account import Account
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from config import BASE_RPC_URL, WALLET_PRIVATE_KEY, WALLET_SESSION_DAYS, WALLET_SESSION_PATH, logger

STATUS_LOADING = "loading"
STATUS_CONNECTED = "connected"
STATUS_DISCONNECTED = "disconnected"


class WalletProvider:
    """Connected-account state and transaction submission for one user."""

    def __init__(self, rpc_url: str = BASE_RPC_URL, session_path: str = WALLET_SESSION_PATH, w3=None):
        self.w3 = w3 or AsyncWeb3(AsyncHTTPProvider(rpc_url))
        self.session_path = session_path
        self.account = None
        self.balance: int = 0
        self.status = STATUS_DISCONNECTED
        self.error: Optional[str] = None
        self.tx_loading = False

    @property
    def address(self) -> Optional[str]:
        return self.account.address if self.account else None

    def _save_session(self):
        expires_at = datetime.now(timezone.utc) + timedelta(days=WALLET_SESSION_DAYS)
        with open(self.session_path, "w") as f:
            json.dump({"address": self.address, "expires_at": expires_at.isoformat()}, f)

    def _load_session(self) -> Optional[Dict[str, Any]]:
        if not os.path.exists(self.session_path):
            return None
        try:
            with open(self.session_path) as f:
                session = json.load(f)
            expires_at = datetime.fromisoformat(session["expires_at"])
        except (OSError, ValueError, KeyError) as e:
            logger.warning(f"Ignoring unreadable wallet session: {e}")
            return None
        if expires_at <= datetime.now(timezone.utc):
            logger.info("Wallet session expired")
            return None
        return session

    def _clear_session(self):
        if os.path.exists(self.session_path):
            os.remove(self.session_path)

    async def connect(self, private_key: str) -> str:
        """Connect an account, persist the session and load its balance."""
        self.status = STATUS_LOADING
        self.error = None
        try:
            self.account = Account.from_key(private_key)
            self._save_session()
            await self.refresh_balance()
            self.status = STATUS_CONNECTED
            logger.info(f"Wallet connected: {self.address}")
            return self.address
        except Exception as e:
            self.error = str(e)
            self.account = None
            self.status = STATUS_DISCONNECTED
            raise

    def disconnect(self):
        self.account = None
        self.balance = 0
        self.status = STATUS_DISCONNECTED
        self._clear_session()
        logger.info("Wallet disconnected")

    async def restore(self, private_key: Optional[str] = WALLET_PRIVATE_KEY) -> bool:
        """Reconnect from a saved session when the configured key owns the saved address."""
        self.status = STATUS_LOADING
        session = self._load_session()
        if session is None or not private_key:
            self.disconnect()
            return False

        account = Account.from_key(private_key)
        if account.address.lower() != str(session.get("address", "")).lower():
            logger.warning("Saved wallet session does not match the configured key")
            self.disconnect()
            return False

        self.account = account
        await self.refresh_balance()
        self.status = STATUS_CONNECTED
        return True

    async def refresh_balance(self) -> int:
        if self.account is None:
            return 0
        self.balance = await self.w3.eth.get_balance(self.account.address)
        return self.balance

    async def send_transaction(self, tx_config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Sign and submit one prepared transaction, then wait for its receipt.

        Args:
            tx_config: Wire transaction {to, data, value, gasLimit?, gasPrice?, chainId}

        Returns:
            The transaction receipt

        Raises:
            RuntimeError: when no wallet is connected or the transaction reverted
        """
        if self.account is None:
            raise RuntimeError("Wallet not connected")

        self.tx_loading = True
        self.error = None
        try:
            tx = {
                "from": self.account.address,
                "to": Web3.to_checksum_address(tx_config["to"]),
                "data": tx_config.get("data", "0x"),
                "value": int(tx_config.get("value") or 0),
                "chainId": int(tx_config["chainId"]),
                "nonce": await self.w3.eth.get_transaction_count(self.account.address, "pending"),
            }
            if tx_config.get("gasLimit"):
                tx["gas"] = int(tx_config["gasLimit"])
            else:
                tx["gas"] = await self.w3.eth.estimate_gas(tx)
            if tx_config.get("gasPrice"):
                tx["gasPrice"] = int(tx_config["gasPrice"])
            else:
                tx["gasPrice"] = await self.w3.eth.gas_price

            signed = self.account.sign_transaction(tx)
            tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
            logger.info(f"Submitted transaction {Web3.to_hex(tx_hash)}")

            receipt = await self.w3.eth.wait_for_transaction_receipt(tx_hash)
            if receipt["status"] != 1:
                raise RuntimeError(f"Transaction {Web3.to_hex(tx_hash)} reverted")

            await self.refresh_balance()
            return receipt
        except Exception as e:
            self.error = str(e)
            logger.error(f"Transaction failed: {e}")
            raise
        finally:
            self.tx_loading = False
