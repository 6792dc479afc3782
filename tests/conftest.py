"""Shared fixtures: an in-memory stand-in for ChainProvider."""

from __future__ import annotations

import asyncio

import pytest

from kaia_wallet.errors import ContractCallError, ReceiptTimeoutError
from kaia_wallet.models import TransactionHandle, TransactionReceipt

# Account #0 of the well-known "test test ... junk" development mnemonic.
DEV_MNEMONIC = "test test test test test test test test test test test junk"
DEV_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
DEV_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"

# Example key from the eth-account documentation.
DOC_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
DOC_ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"

TOKEN = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
RECIPIENT = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"


class FakeProvider:
    """Records what the wallet asks for and answers from dictionaries."""

    def __init__(self) -> None:
        self.balances: dict[str, int] = {}
        self.tokens: dict[str, dict] = {}
        self.receipts: dict[str, TransactionReceipt] = {}
        self.contract_calls: list[tuple] = []
        self.sent: list[tuple[str, dict]] = []
        self.send_error: Exception | None = None
        self.closed = False

    def add_token(self, address: str, decimals, balances: dict[str, int] | None = None) -> None:
        self.tokens[address] = {"decimals": decimals, "balances": balances or {}}

    async def get_balance(self, address: str) -> int:
        return self.balances.get(address, 0)

    async def get_transaction_receipt(self, tx_hash: str):
        return self.receipts.get(tx_hash)

    async def wait_for_receipt(self, tx_hash, timeout=None, poll_interval=None):
        async def _poll():
            while True:
                receipt = await self.get_transaction_receipt(tx_hash)
                if receipt is not None:
                    return receipt
                await asyncio.sleep(0.01)

        try:
            return await asyncio.wait_for(_poll(), timeout)
        except asyncio.TimeoutError as exc:
            raise ReceiptTimeoutError(tx_hash, timeout) from exc

    async def call_contract(self, address, abi, fn_name, *args):
        self.contract_calls.append((address, fn_name, args))
        token = self.tokens.get(address)
        if token is None:
            raise ContractCallError(f"{fn_name}() on {address} failed: could not decode output")
        if fn_name == "balanceOf":
            return token["balances"].get(args[0], 0)
        if fn_name == "decimals":
            if isinstance(token["decimals"], Exception):
                raise token["decimals"]
            return token["decimals"]
        raise ContractCallError(f"{fn_name}() on {address} reverted")

    def encode_contract_call(self, address, abi, fn_name, *args):
        return {"fn": fn_name, "args": args}

    async def send_transaction(self, signer, tx):
        if self.send_error is not None:
            raise self.send_error
        self.sent.append((signer.address, tx))
        return TransactionHandle(
            hash="0x" + f"{len(self.sent):064x}",
            from_address=signer.address,
            to_address=tx["to"],
            value=tx.get("value", 0),
            nonce=len(self.sent) - 1,
            provider=self,
        )

    async def close(self) -> None:
        self.closed = True


def make_receipt(tx_hash: str, status: int = 1, block_number: int = 100) -> TransactionReceipt:
    return TransactionReceipt(
        tx_hash=tx_hash,
        status=status,
        block_number=block_number,
        block_hash="0x" + "ab" * 32,
        gas_used=21000,
        from_address=DEV_ADDRESS,
        to_address=RECIPIENT,
    )


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()
