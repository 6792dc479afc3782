"""High-level wallet for the Kaia network.

:class:`KaiaWallet` binds one signing identity to one :class:`ChainProvider`
and exposes balance lookups and native / token transfers. Amounts cross the
API as decimal strings in display units (``"0.05"`` KAIA, ``"10.5"`` tokens).
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from web3 import Web3

from kaia_wallet.chains import get_chain
from kaia_wallet.config import WalletConfig
from kaia_wallet.errors import InvalidAddressError
from kaia_wallet.models import TransactionHandle, TransactionReceipt, WalletHandle
from kaia_wallet.provider import DEFAULT_REQUEST_TIMEOUT, ChainProvider
from kaia_wallet.signer import DEFAULT_ACCOUNT_PATH, SignerIdentity
from kaia_wallet.token import TokenContract
from kaia_wallet.units import format_ether, format_units, parse_ether, parse_units

logger = logging.getLogger("kaia_wallet.wallet")


def to_checksum(address: Any, label: str = "account") -> str:
    """Validate *address* and return its checksummed form.

    Raises :class:`InvalidAddressError` for anything that is not a 20-byte
    hex address (or a mixed-case address with a wrong checksum).
    """
    if not isinstance(address, str) or not Web3.is_address(address):
        raise InvalidAddressError(f"Invalid {label} address: {address!r}")
    return Web3.to_checksum_address(address)


class KaiaWallet:
    """A wallet bound to a single key and a single network for its lifetime.

    Parameters
    ----------
    private_key:
        Hex private key of an existing account. When ``None`` or empty a new
        random account (with mnemonic) is generated.
    rpc_url:
        JSON-RPC endpoint. Defaults to the public endpoint of *network*.
    network:
        Name of the network in :data:`kaia_wallet.chains.CHAINS`.
    provider:
        Pre-built provider; anything exposing the :class:`ChainProvider`
        coroutine methods. Takes precedence over *rpc_url*.
    verbose_init:
        Log the address, private key and mnemonic at INFO level once the
        wallet is ready. Off by default so secrets stay out of logs.

    Raises
    ------
    InvalidKeyError
        *private_key* is not a valid secp256k1 key.
    KeyError
        *network* is not a known network and neither *rpc_url* nor
        *provider* was given.
    """

    def __init__(
        self,
        private_key: Optional[str] = None,
        rpc_url: Optional[str] = None,
        *,
        network: str = "kairos",
        provider: Optional[Any] = None,
        signer: Optional[SignerIdentity] = None,
        verbose_init: bool = False,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        receipt_poll_interval: float = 1.0,
    ) -> None:
        if signer is not None and private_key:
            raise ValueError("Pass either a private key or a signer, not both")

        generated = False
        if signer is None:
            if private_key:
                signer = SignerIdentity.from_key(private_key)
            else:
                signer = SignerIdentity.generate()
                generated = True

        if provider is None:
            provider = ChainProvider(
                rpc_url or get_chain(network).rpc_url,
                request_timeout=request_timeout,
                receipt_poll_interval=receipt_poll_interval,
            )

        self.network = network
        self.provider = provider
        self._signer = signer
        self._handle = WalletHandle(
            address=signer.address,
            private_key=signer.private_key,
            mnemonic=signer.mnemonic,
        )
        self._token_decimals: dict[str, int] = {}

        if verbose_init:
            if generated:
                logger.info("New wallet has been generated")
            logger.info(f"Address: {self._handle.address}")
            logger.info(f"Private Key: {self._handle.private_key}")
            logger.info(f"Mnemonic: {self._handle.mnemonic or 'Not available'}")
        else:
            logger.debug(f"Wallet {self._handle.address} bound to {provider!r}")

    # ------------------------------------------------------------------
    # Alternative constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_mnemonic(
        cls,
        mnemonic: str,
        rpc_url: Optional[str] = None,
        *,
        account_path: str = DEFAULT_ACCOUNT_PATH,
        **kwargs: Any,
    ) -> KaiaWallet:
        """Restore a wallet from its seed phrase."""
        signer = SignerIdentity.from_mnemonic(mnemonic, account_path=account_path)
        return cls(rpc_url=rpc_url, signer=signer, **kwargs)

    @classmethod
    def from_config(cls, config: WalletConfig, provider: Optional[Any] = None) -> KaiaWallet:
        """Build a wallet from a loaded :class:`WalletConfig`."""
        return cls(
            config.private_key,
            config.resolve_rpc_url(),
            network=config.network,
            provider=provider,
            verbose_init=config.verbose_init,
            request_timeout=config.request_timeout,
            receipt_poll_interval=config.receipt_poll_interval,
        )

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def handle(self) -> WalletHandle:
        return self._handle

    def get_address(self) -> str:
        return self._handle.address

    def get_private_key(self) -> str:
        """The account's secret key. Treat the return value as sensitive."""
        return self._handle.private_key

    def get_mnemonic(self) -> Optional[str]:
        """The seed phrase, or ``None`` when the wallet was loaded from a key."""
        return self._handle.mnemonic

    # ------------------------------------------------------------------
    # Native coin
    # ------------------------------------------------------------------

    async def get_balance(self) -> str:
        """Native balance in whole KAIA, e.g. ``"12.5"``."""
        balance = await self.provider.get_balance(self._handle.address)
        return format_ether(balance)

    async def send_transaction(self, to: str, amount: str) -> TransactionHandle:
        """Send *amount* whole KAIA to *to*.

        Returns as soon as the node accepts the transaction; use
        ``await handle.wait()`` to wait for it to be mined.
        """
        recipient = to_checksum(to, "recipient")
        value = parse_ether(amount)
        return await self.provider.send_transaction(
            self._signer, {"to": recipient, "value": value}
        )

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[TransactionReceipt]:
        """Receipt of a mined transaction, ``None`` if pending or unknown."""
        return await self.provider.get_transaction_receipt(tx_hash)

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    async def _decimals(self, token: TokenContract) -> int:
        cached = self._token_decimals.get(token.address)
        if cached is not None:
            return cached
        decimals = await token.decimals()
        self._token_decimals[token.address] = decimals
        return decimals

    async def get_token_balance(self, token_address: str) -> str:
        """Balance of the wallet in the token's display units."""
        token = TokenContract(self.provider, to_checksum(token_address, "token"))
        balance = await token.balance_of(self._handle.address)
        decimals = await self._decimals(token)
        return format_units(balance, decimals)

    async def send_token(self, token_address: str, to: str, amount: str) -> TransactionHandle:
        """Transfer *amount* tokens (display units) to *to*."""
        token = TokenContract(
            self.provider, to_checksum(token_address, "token"), signer=self._signer
        )
        recipient = to_checksum(to, "recipient")
        decimals = await self._decimals(token)
        raw_amount = parse_units(amount, decimals)
        return await token.transfer(recipient, raw_amount)

    async def close(self) -> None:
        await self.provider.close()

    async def __aenter__(self) -> KaiaWallet:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"KaiaWallet(address={self._handle.address}, network={self.network})"
