"""Exceptions raised by the Kaia wallet."""

from __future__ import annotations


class WalletError(Exception):
    """Base class for every error raised by :mod:`kaia_wallet`."""


class InvalidKeyError(WalletError, ValueError):
    """The private key or mnemonic could not be loaded."""


class InvalidAddressError(WalletError, ValueError):
    """An account or contract address is not a well-formed identifier."""


class InvalidAmountError(WalletError, ValueError):
    """An amount string cannot be converted to smallest units."""


class InsufficientFundsError(WalletError):
    """The node rejected a transaction because the sender cannot pay for it."""


class ContractCallError(WalletError):
    """The target contract does not implement the call, or the call reverted."""


class NetworkError(WalletError):
    """The RPC endpoint failed, timed out, or returned malformed data."""


class ReceiptTimeoutError(NetworkError):
    """No receipt appeared before the caller's timeout elapsed."""

    def __init__(self, tx_hash: str, timeout: float) -> None:
        self.tx_hash = tx_hash
        self.timeout = timeout
        super().__init__(
            f"Transaction {tx_hash} was not mined within {timeout} seconds"
        )
