"""Network definitions for the Kaia chain and its testnet."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Chain:
    """An EVM-compatible Kaia network."""

    name: str
    chain_id: int
    rpc_url: str
    native_symbol: str
    explorer_url: str

    def tx_url(self, tx_hash: str) -> str:
        return f"{self.explorer_url}/tx/{tx_hash}"


CHAINS: dict[str, Chain] = {
    "kaia": Chain(
        name="kaia",
        chain_id=8217,
        rpc_url="https://public-en.node.kaia.io",
        native_symbol="KAIA",
        explorer_url="https://kaiascan.io",
    ),
    "kairos": Chain(
        name="kairos",
        chain_id=1001,
        rpc_url="https://public-en-kairos.node.kaia.io",
        native_symbol="KAIA",
        explorer_url="https://kairos.kaiascan.io",
    ),
}


def get_chain(name: str) -> Chain:
    """Get a chain by name. Raises ``KeyError`` if not found."""
    if name not in CHAINS:
        raise KeyError(
            f"Unknown network '{name}'. Available: {list_chain_names()}"
        )
    return CHAINS[name]


def list_chain_names() -> list[str]:
    """Return the names of all supported networks."""
    return list(CHAINS.keys())
