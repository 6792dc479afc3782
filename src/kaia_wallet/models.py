"""Value types returned by the wallet."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from pydantic import BaseModel


def to_hex(value: Any) -> Optional[str]:
    """Render bytes-like RPC values as ``0x``-prefixed hex, pass strings through."""
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    text = str(value)
    return text if text.startswith("0x") else "0x" + text


@dataclass(frozen=True)
class WalletHandle:
    """The identity a wallet is bound to for its whole lifetime."""

    address: str
    private_key: str = field(repr=False)
    mnemonic: Optional[str] = field(default=None, repr=False)


class TransactionReceipt(BaseModel):
    """The finalized outcome of a mined transaction."""

    tx_hash: str
    status: int
    block_number: int
    block_hash: Optional[str] = None
    gas_used: int = 0
    from_address: Optional[str] = None
    to_address: Optional[str] = None
    contract_address: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == 1

    @classmethod
    def from_rpc(cls, receipt: Mapping[str, Any]) -> TransactionReceipt:
        """Build from the mapping returned by ``eth_getTransactionReceipt``."""
        return cls(
            tx_hash=to_hex(receipt["transactionHash"]),
            status=int(receipt.get("status", 0)),
            block_number=int(receipt["blockNumber"]),
            block_hash=to_hex(receipt.get("blockHash")),
            gas_used=int(receipt.get("gasUsed", 0)),
            from_address=receipt.get("from"),
            to_address=receipt.get("to"),
            contract_address=receipt.get("contractAddress"),
        )


@dataclass
class TransactionHandle:
    """A transaction accepted into the node's pending pool.

    ``await handle.wait()`` asks the provider to poll until the receipt appears.
    """

    hash: str
    from_address: str
    to_address: str
    value: int
    nonce: int
    provider: Any = field(repr=False, compare=False)

    async def wait(
        self,
        timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
    ) -> TransactionReceipt:
        """Wait for the transaction to be mined and return its receipt.

        With ``timeout=None`` this waits for as long as the network takes.
        Otherwise :class:`ReceiptTimeoutError` is raised once *timeout*
        seconds have elapsed without a receipt. *poll_interval* defaults to
        the provider's ``receipt_poll_interval``.
        """
        return await self.provider.wait_for_receipt(
            self.hash, timeout=timeout, poll_interval=poll_interval
        )
