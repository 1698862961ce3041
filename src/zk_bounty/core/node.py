"""
LedgerNode: REST client for a WhatsOnChain-style ledger API.

Used by buyers and sellers around the escrow, never by the escrow itself:
reading the chain height (is the bounty expired yet?), broadcasting a
signed spend, and finding the disclosure a settle transaction published.

Docs: https://docs.whatsonchain.com/
"""

from __future__ import annotations

from typing import Any

import httpx

from zk_bounty.config import BountyConfig
from zk_bounty.core.ledger import parse_data_script
from zk_bounty.zk.binding import CANONICAL_SIZE, BindingError, Disclosure, parse_canonical_bytes


class LedgerNodeError(Exception):
    """Raised when the ledger API returns an error."""
    pass


class LedgerNode:
    """
    Synchronous ledger client.

    Usage:
        node = LedgerNode()                           # public mainnet API
        node = LedgerNode.from_config(BountyConfig.from_env())
    """

    def __init__(
        self,
        base_url: str = "https://api.whatsonchain.com/v1/bsv/main",
        api_key: str | None = None,
        timeout: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = api_key
        self._client = httpx.Client(headers=headers, timeout=timeout, transport=transport)

    @classmethod
    def from_config(cls, config: BountyConfig) -> LedgerNode:
        return cls(base_url=config.base_url, api_key=config.api_key, timeout=config.timeout)

    # ------------------------------------------------------------------
    # Chain info
    # ------------------------------------------------------------------

    def get_height(self) -> int:
        """Return the current chain height."""
        data = self._get("/chain/info")
        return int(data["blocks"])

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def get_transaction(self, txid: str) -> dict[str, Any]:
        """Return a decoded transaction by ID."""
        return self._get(f"/tx/hash/{txid}")

    def broadcast(self, raw_tx_hex: str) -> str:
        """
        Broadcast a signed raw transaction.

        Returns:
            str: transaction ID
        """
        response = self._client.post(f"{self.base_url}/tx/raw", json={"txhex": raw_tx_hex})
        if response.status_code != 200:
            raise LedgerNodeError(
                f"Transaction rejected: {response.status_code} — {response.text}"
            )
        return str(response.json()).strip('"')

    def find_disclosure(self, txid: str) -> Disclosure:
        """
        Parse the settle disclosure published by transaction ``txid``.

        Raises:
            LedgerNodeError: if the transaction carries no disclosure output.
        """
        tx = self.get_transaction(txid)
        for vout in tx.get("vout", []):
            script_hex = vout.get("scriptPubKey", {}).get("hex", "")
            try:
                payload = parse_data_script(bytes.fromhex(script_hex))
            except ValueError:
                continue
            if payload is None or len(payload) != CANONICAL_SIZE:
                continue
            try:
                return parse_canonical_bytes(payload)
            except BindingError:
                continue
        raise LedgerNodeError(f"No disclosure output in transaction {txid}")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        response = self._client.get(url)
        if response.status_code != 200:
            raise LedgerNodeError(f"API error {response.status_code} for {url}: {response.text}")
        return response.json()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> LedgerNode:
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()
