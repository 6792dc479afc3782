"""Kaia wallet.

Wallet creation, balance queries and KAIA / token transfers for the Kaia
network, built on web3.py and eth-account.
"""

from kaia_wallet.errors import (
    ContractCallError,
    InsufficientFundsError,
    InvalidAddressError,
    InvalidAmountError,
    InvalidKeyError,
    NetworkError,
    ReceiptTimeoutError,
    WalletError,
)
from kaia_wallet.models import TransactionHandle, TransactionReceipt, WalletHandle
from kaia_wallet.provider import ChainProvider
from kaia_wallet.signer import SignerIdentity
from kaia_wallet.wallet import KaiaWallet

__version__ = "0.1.0"

__all__ = [
    "KaiaWallet",
    "ChainProvider",
    "SignerIdentity",
    "WalletHandle",
    "TransactionHandle",
    "TransactionReceipt",
    # errors
    "WalletError",
    "InvalidKeyError",
    "InvalidAddressError",
    "InvalidAmountError",
    "InsufficientFundsError",
    "ContractCallError",
    "NetworkError",
    "ReceiptTimeoutError",
]
