"""Minimal ERC20 (KIP-7 compatible) contract handle."""

from __future__ import annotations

from typing import Any, Optional

from kaia_wallet.errors import ContractCallError, WalletError
from kaia_wallet.models import TransactionHandle
from kaia_wallet.signer import SignerIdentity

# Only the functions the wallet needs.
ERC20_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": False,
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "name": "transfer",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
]


class TokenContract:
    """A token contract bound to a provider, and optionally to a signer.

    Without a signer the handle is read-only.
    """

    def __init__(
        self,
        provider: Any,
        address: str,
        signer: Optional[SignerIdentity] = None,
    ) -> None:
        self.provider = provider
        self.address = address
        self.signer = signer

    async def balance_of(self, owner: str) -> int:
        """Raw token balance of *owner* in smallest units."""
        balance = await self.provider.call_contract(self.address, ERC20_ABI, "balanceOf", owner)
        if not isinstance(balance, int) or balance < 0:
            raise ContractCallError(f"balanceOf() on {self.address} returned {balance!r}")
        return balance

    async def decimals(self) -> int:
        """Number of decimal places the token's display amounts use."""
        decimals = await self.provider.call_contract(self.address, ERC20_ABI, "decimals")
        if not isinstance(decimals, int) or not 0 <= decimals <= 255:
            raise ContractCallError(f"decimals() on {self.address} returned {decimals!r}")
        return decimals

    async def transfer(self, to: str, amount: int) -> TransactionHandle:
        """Submit ``transfer(to, amount)`` signed by the bound signer."""
        if self.signer is None:
            raise WalletError(f"Token handle for {self.address} is read-only")
        data = self.provider.encode_contract_call(self.address, ERC20_ABI, "transfer", to, amount)
        return await self.provider.send_transaction(
            self.signer, {"to": self.address, "value": 0, "data": data}
        )

    def __repr__(self) -> str:
        mode = "signing" if self.signer is not None else "read-only"
        return f"TokenContract(address={self.address}, {mode})"
