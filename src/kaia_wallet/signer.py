"""Signing identities backed by eth-account."""

from __future__ import annotations

from typing import Any, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount

from kaia_wallet.errors import InvalidKeyError

# BIP-44 path of the first Ethereum-style account, shared by Kaia wallets.
DEFAULT_ACCOUNT_PATH = "m/44'/60'/0'/0/0"

Account.enable_unaudited_hdwallet_features()


class SignerIdentity:
    """A keypair able to sign transactions, optionally derived from a mnemonic.

    Instances are immutable; build a new one instead of re-keying.
    """

    __slots__ = ("_account", "_mnemonic")

    def __init__(self, account: LocalAccount, mnemonic: Optional[str] = None) -> None:
        self._account = account
        self._mnemonic = mnemonic

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_key(cls, private_key: str | bytes) -> SignerIdentity:
        """Load an identity from a hex private key (``0x`` prefix optional).

        Raises
        ------
        InvalidKeyError
            If the key is not a valid 32-byte secp256k1 secret.
        """
        try:
            account = Account.from_key(private_key)
        except Exception as exc:
            raise InvalidKeyError(f"Invalid private key: {exc}") from exc
        return cls(account)

    @classmethod
    def from_mnemonic(
        cls,
        mnemonic: str,
        account_path: str = DEFAULT_ACCOUNT_PATH,
        passphrase: str = "",
    ) -> SignerIdentity:
        """Derive an identity from a BIP-39 seed phrase."""
        phrase = " ".join(mnemonic.split())
        try:
            account = Account.from_mnemonic(
                phrase, passphrase=passphrase, account_path=account_path
            )
        except Exception as exc:
            raise InvalidKeyError(f"Invalid mnemonic: {exc}") from exc
        return cls(account, phrase)

    @classmethod
    def generate(cls, num_words: int = 12) -> SignerIdentity:
        """Create a fresh random keypair together with its mnemonic."""
        account, mnemonic = Account.create_with_mnemonic(num_words=num_words)
        return cls(account, mnemonic)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def address(self) -> str:
        """Checksummed account address."""
        return self._account.address

    @property
    def private_key(self) -> str:
        """The secret key as ``0x``-prefixed hex."""
        return "0x" + bytes(self._account.key).hex()

    @property
    def mnemonic(self) -> Optional[str]:
        """The seed phrase, or ``None`` if the identity was loaded from a key."""
        return self._mnemonic

    def sign_transaction(self, tx: dict[str, Any]) -> bytes:
        """Sign a fully populated transaction dict and return the raw bytes."""
        signed = self._account.sign_transaction(tx)
        return bytes(signed.raw_transaction)

    def __repr__(self) -> str:
        return f"SignerIdentity(address={self.address})"
