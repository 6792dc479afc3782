"""Async Web3 provider for a single Kaia network."""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from typing import Any, Awaitable, Iterator, Optional, TypeVar

from aiohttp import ClientError
from web3 import AsyncWeb3, Web3
from web3.exceptions import (
    BadFunctionCallOutput,
    ContractLogicError,
    MismatchedABI,
    TimeExhausted,
    TransactionNotFound,
    Web3Exception,
    Web3RPCError,
    Web3ValidationError,
)
from web3.middleware import ExtraDataToPOAMiddleware

from kaia_wallet.errors import (
    ContractCallError,
    InsufficientFundsError,
    NetworkError,
    ReceiptTimeoutError,
    WalletError,
)
from kaia_wallet.models import TransactionHandle, TransactionReceipt, to_hex
from kaia_wallet.signer import SignerIdentity

logger = logging.getLogger("kaia_wallet.provider")

T = TypeVar("T")

DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_PRIORITY_FEE = Web3.to_wei(1.5, "gwei")

_INSUFFICIENT_FUNDS_MARKERS = ("insufficient funds", "insufficient balance")


def _error_message(exc: BaseException) -> str:
    return getattr(exc, "message", None) or str(exc) or type(exc).__name__


@contextmanager
def translate_rpc_errors(operation: str) -> Iterator[None]:
    """Re-raise web3 and transport failures as :mod:`kaia_wallet.errors` types.

    The original exception is kept as ``__cause__``.
    """
    try:
        yield
    except WalletError:
        raise
    except (ContractLogicError, BadFunctionCallOutput) as exc:
        raise ContractCallError(f"{operation} failed: {_error_message(exc)}") from exc
    except Web3RPCError as exc:
        message = _error_message(exc)
        if any(marker in message.lower() for marker in _INSUFFICIENT_FUNDS_MARKERS):
            raise InsufficientFundsError(f"{operation} rejected: {message}") from exc
        raise NetworkError(f"{operation} failed: {message}") from exc
    except asyncio.TimeoutError as exc:
        raise NetworkError(f"{operation} timed out") from exc
    except (ClientError, OSError, Web3Exception) as exc:
        raise NetworkError(f"{operation} failed: {_error_message(exc)}") from exc


class ChainProvider:
    """JSON-RPC access to one Kaia endpoint.

    Every request is bounded by *request_timeout* seconds. Kaia block headers
    carry an ``extraData`` field longer than 32 bytes, so the POA middleware
    is always injected.
    """

    def __init__(
        self,
        rpc_url: str,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        receipt_poll_interval: float = 1.0,
    ) -> None:
        self.rpc_url = rpc_url
        self.request_timeout = request_timeout
        self.receipt_poll_interval = receipt_poll_interval
        self.w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
        self.w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
        self._chain_id: Optional[int] = None

    async def _call(self, awaitable: Awaitable[T]) -> T:
        return await asyncio.wait_for(awaitable, self.request_timeout)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_chain_id(self) -> int:
        if self._chain_id is None:
            with translate_rpc_errors("eth_chainId"):
                self._chain_id = await self._call(self.w3.eth.chain_id)
        return self._chain_id

    async def get_balance(self, address: str) -> int:
        """Native balance of *address* in kei."""
        with translate_rpc_errors(f"Balance lookup for {address}"):
            balance = await self._call(self.w3.eth.get_balance(address))
        if not isinstance(balance, int):
            raise NetworkError(f"Malformed balance for {address}: {balance!r}")
        return balance

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[TransactionReceipt]:
        """Return the receipt, or ``None`` if the transaction is pending or unknown."""
        with translate_rpc_errors(f"Receipt lookup for {tx_hash}"):
            try:
                receipt = await self._call(self.w3.eth.get_transaction_receipt(tx_hash))
            except TransactionNotFound:
                return None
        if receipt is None:
            return None
        return TransactionReceipt.from_rpc(receipt)

    async def call_contract(self, address: str, abi: list[dict], fn_name: str, *args: Any) -> Any:
        """Run a read-only contract call and return the decoded result."""
        contract = self.w3.eth.contract(address=address, abi=abi)
        with translate_rpc_errors(f"{fn_name}() on {address}"):
            return await self._call(getattr(contract.functions, fn_name)(*args).call())

    def encode_contract_call(self, address: str, abi: list[dict], fn_name: str, *args: Any) -> str:
        """ABI-encode a call to *fn_name* as transaction ``data``.

        Arguments that do not match the ABI (an amount wider than uint256,
        a malformed address) raise :class:`ContractCallError`.
        """
        with translate_rpc_errors(f"Encoding {fn_name}() for {address}"):
            contract = self.w3.eth.contract(address=address, abi=abi)
            try:
                return contract.encode_abi(fn_name, args=list(args))
            except (MismatchedABI, Web3ValidationError) as exc:
                raise ContractCallError(
                    f"Arguments {args!r} do not match {fn_name}() on {address}: {exc}"
                ) from exc

    async def wait_for_receipt(
        self,
        tx_hash: str,
        timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
    ) -> TransactionReceipt:
        """Block until *tx_hash* is mined and return its receipt.

        ``timeout=None`` waits for as long as the network takes.
        """
        interval = self.receipt_poll_interval if poll_interval is None else poll_interval
        with translate_rpc_errors(f"Waiting for {tx_hash}"):
            try:
                receipt = await self.w3.eth.wait_for_transaction_receipt(
                    tx_hash, timeout=timeout, poll_latency=interval
                )
            except TimeExhausted as exc:
                raise ReceiptTimeoutError(tx_hash, timeout) from exc
        return TransactionReceipt.from_rpc(receipt)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def _priority_fee(self) -> int:
        try:
            return await self._call(self.w3.eth.max_priority_fee)
        except Web3Exception as exc:
            logger.debug(f"eth_maxPriorityFeePerGas unavailable ({exc}), using default tip")
            return DEFAULT_PRIORITY_FEE

    async def _fill_fees(self, tx: dict[str, Any]) -> None:
        """Use EIP-1559 fee parameters, falling back to a legacy gas price."""
        latest = await self._call(self.w3.eth.get_block("latest"))
        base_fee = latest.get("baseFeePerGas")
        if base_fee is not None:
            priority = await self._priority_fee()
            tx["maxFeePerGas"] = base_fee * 2 + priority
            tx["maxPriorityFeePerGas"] = priority
        else:
            logger.warning("Latest block has no baseFeePerGas, using legacy gas price")
            tx["gasPrice"] = await self._call(self.w3.eth.gas_price)

    async def send_transaction(self, signer: SignerIdentity, tx: dict[str, Any]) -> TransactionHandle:
        """Populate, sign and submit *tx* from *signer*.

        Returns once the node has accepted the transaction into its pending
        pool; it does not wait for the transaction to be mined.
        """
        tx = dict(tx)
        tx["from"] = signer.address
        tx.setdefault("value", 0)

        with translate_rpc_errors(f"Transaction to {tx.get('to')}"):
            tx["nonce"] = await self._call(
                self.w3.eth.get_transaction_count(signer.address, "pending")
            )
            tx["chainId"] = await self.get_chain_id()
            await self._fill_fees(tx)
            tx["gas"] = await self._call(self.w3.eth.estimate_gas(tx))

            raw = signer.sign_transaction(tx)
            tx_hash = to_hex(await self._call(self.w3.eth.send_raw_transaction(raw)))

        logger.info(
            f"Submitted tx {tx_hash} from {signer.address} to {tx['to']} "
            f"(value={tx['value']}, nonce={tx['nonce']})"
        )
        return TransactionHandle(
            hash=tx_hash,
            from_address=signer.address,
            to_address=tx["to"],
            value=tx["value"],
            nonce=tx["nonce"],
            provider=self,
        )

    async def close(self) -> None:
        """Release the HTTP session held by the underlying provider."""
        await self.w3.provider.disconnect()

    def __repr__(self) -> str:
        return f"ChainProvider(rpc_url={self.rpc_url})"
