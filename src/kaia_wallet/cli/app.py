"""CLI for the Kaia wallet - check balances and send KAIA or tokens from the terminal."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from kaia_wallet.chains import CHAINS, get_chain
from kaia_wallet.config import WalletConfig, load_config
from kaia_wallet.errors import WalletError
from kaia_wallet.wallet import KaiaWallet

app = typer.Typer(
    name="kaia-wallet",
    help="Create wallets, check balances and send KAIA or tokens on Kaia.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

_config: WalletConfig = WalletConfig()


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        console.print(f"kaia-wallet {version('kaia-wallet')}")
        raise typer.Exit()


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML config file",
        envvar="KAIA_WALLET_CONFIG",
        exists=True,
        dir_okay=False,
    ),
    network: Optional[str] = typer.Option(
        None, "--network", "-n", help="Network name (kaia, kairos)"
    ),
    rpc_url: Optional[str] = typer.Option(
        None, "--rpc-url", "-r", help="JSON-RPC endpoint overriding the network default"
    ),
    private_key: Optional[str] = typer.Option(
        None,
        "--private-key",
        "-k",
        help="Hex private key of the wallet",
        envvar="KAIA_PRIVATE_KEY",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log RPC activity"),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """Create wallets, check balances and send KAIA or tokens on Kaia."""
    global _config
    try:
        base = load_config(config) if config else WalletConfig()
        overrides = {
            key: value
            for key, value in {
                "network": network,
                "rpc_url": rpc_url,
                "private_key": private_key,
            }.items()
            if value
        }
        _config = WalletConfig.model_validate({**base.model_dump(), **overrides})
    except (ValueError, yaml.YAMLError) as e:
        err_console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(1)

    _setup_logging("INFO" if verbose else _config.log_level)


def _run(coro):
    """Run an async function synchronously, turning wallet errors into exit code 1."""
    try:
        return asyncio.run(coro)
    except WalletError as e:
        err_console.print(f"[red]{type(e).__name__}: {e}[/red]")
        raise typer.Exit(1)


def _open_wallet(require_key: bool = True) -> KaiaWallet:
    """Build the configured wallet. Exits if a key is required but not set."""
    if require_key and not _config.private_key:
        err_console.print(
            "[yellow]No private key configured.[/yellow] "
            "Pass --private-key or set KAIA_PRIVATE_KEY (see 'kaia-wallet new')."
        )
        raise typer.Exit(1)
    try:
        return KaiaWallet.from_config(_config)
    except WalletError as e:
        err_console.print(f"[red]{type(e).__name__}: {e}[/red]")
        raise typer.Exit(1)


# ------------------------------------------------------------------
# Identity
# ------------------------------------------------------------------


@app.command("new")
def wallet_new():
    """Generate a new random wallet and print its secrets."""
    wallet = KaiaWallet(
        rpc_url=_config.resolve_rpc_url(),
        network=_config.network,
        verbose_init=_config.verbose_init,
    )
    console.print(Panel(
        f"[bold green]New wallet has been generated![/bold green]\n\n"
        f"Address:     [cyan]{wallet.get_address()}[/cyan]\n"
        f"Private Key: {wallet.get_private_key()}\n"
        f"Mnemonic:    {wallet.get_mnemonic() or 'Not available'}\n\n"
        f"[dim]Store the private key and mnemonic somewhere safe.\n"
        f"Anyone holding them controls the funds.[/dim]",
        title="Kaia Wallet",
    ))


@app.command("address")
def wallet_address():
    """Show the address of the configured wallet."""
    wallet = _open_wallet()
    chain = get_chain(_config.network)
    console.print(Panel(
        f"[cyan]{wallet.get_address()}[/cyan]\n\n"
        f"[dim]{chain.explorer_url}/account/{wallet.get_address()}[/dim]",
        title="Wallet Address",
    ))


@app.command("networks")
def wallet_networks():
    """List the supported networks."""
    table = Table(title="Networks")
    table.add_column("Name", style="cyan")
    table.add_column("Chain ID", justify="right")
    table.add_column("RPC URL")
    table.add_column("Explorer", style="dim")
    for name, chain in CHAINS.items():
        table.add_row(name, str(chain.chain_id), chain.rpc_url, chain.explorer_url)
    console.print(table)


# ------------------------------------------------------------------
# Native coin
# ------------------------------------------------------------------


@app.command("balance")
def wallet_balance():
    """Show the KAIA balance of the configured wallet."""
    wallet = _open_wallet()
    chain = get_chain(_config.network)

    async def _balance():
        async with wallet:
            return wallet.get_address(), await wallet.get_balance()

    address, balance = _run(_balance())
    console.print(f"[bold]{address}:[/bold] {balance} {chain.native_symbol}")


@app.command("send")
def wallet_send(
    amount: str = typer.Argument(help="Amount of KAIA to send (e.g. 0.05)"),
    to: str = typer.Option(..., "--to", "-t", help="Recipient address (0x...)"),
    wait: bool = typer.Option(False, "--wait", "-w", help="Wait for the receipt"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Seconds to wait for the receipt"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """Send KAIA to an address."""
    wallet = _open_wallet()
    chain = get_chain(_config.network)

    console.print(f"\n[bold]Send {amount} {chain.native_symbol} on {chain.name}[/bold]")
    console.print(f"  To: {to}\n")
    if not yes:
        typer.confirm("Confirm this transaction?", abort=True)

    async def _send():
        async with wallet:
            handle = await wallet.send_transaction(to, amount)
            receipt = await handle.wait(timeout=timeout) if wait else None
            return handle, receipt

    handle, receipt = _run(_send())
    _print_submitted(handle.hash, receipt)


@app.command("receipt")
def wallet_receipt(
    tx_hash: str = typer.Argument(help="Transaction hash (0x...)"),
):
    """Show the receipt of a transaction."""
    wallet = _open_wallet(require_key=False)

    async def _receipt():
        async with wallet:
            return await wallet.get_transaction_receipt(tx_hash)

    receipt = _run(_receipt())
    if receipt is None:
        console.print(f"[yellow]No receipt for {tx_hash}.[/yellow] It is pending or unknown.")
        return

    table = Table(title="Transaction Receipt", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Hash", receipt.tx_hash)
    table.add_row(
        "Status",
        "[green]success[/green]" if receipt.succeeded else "[red]reverted[/red]",
    )
    table.add_row("Block", str(receipt.block_number))
    table.add_row("Gas used", str(receipt.gas_used))
    table.add_row("From", receipt.from_address or "")
    table.add_row("To", receipt.to_address or "")
    console.print(table)


# ------------------------------------------------------------------
# Tokens
# ------------------------------------------------------------------


@app.command("token-balance")
def wallet_token_balance(
    token: str = typer.Argument(help="Token contract address (0x...)"),
):
    """Show the balance of an ERC20 token."""
    wallet = _open_wallet()

    async def _token_balance():
        async with wallet:
            return await wallet.get_token_balance(token)

    balance = _run(_token_balance())
    console.print(f"[bold]{token}:[/bold] {balance}")


@app.command("send-token")
def wallet_send_token(
    token: str = typer.Argument(help="Token contract address (0x...)"),
    amount: str = typer.Argument(help="Amount in the token's units (e.g. 10.5)"),
    to: str = typer.Option(..., "--to", "-t", help="Recipient address (0x...)"),
    wait: bool = typer.Option(False, "--wait", "-w", help="Wait for the receipt"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Seconds to wait for the receipt"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """Send ERC20 tokens to an address."""
    wallet = _open_wallet()
    console.print(f"\n[bold]Send {amount} of token {token}[/bold]")
    console.print(f"  To: {to}\n")
    if not yes:
        typer.confirm("Confirm this transaction?", abort=True)

    async def _send_token():
        async with wallet:
            handle = await wallet.send_token(token, to, amount)
            receipt = await handle.wait(timeout=timeout) if wait else None
            return handle, receipt

    handle, receipt = _run(_send_token())
    _print_submitted(handle.hash, receipt)


def _print_submitted(tx_hash: str, receipt) -> None:
    chain = get_chain(_config.network)
    lines = [
        "[bold green]Transaction sent![/bold green]\n",
        f"Tx: [cyan]{tx_hash}[/cyan]",
        f"Explorer: {chain.tx_url(tx_hash)}",
    ]
    if receipt is not None:
        status = "[green]success[/green]" if receipt.succeeded else "[red]reverted[/red]"
        lines.append(f"Mined in block {receipt.block_number}: {status}")
    console.print(Panel("\n".join(lines), title="Transaction Sent"))
