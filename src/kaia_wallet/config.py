"""Configuration for the Kaia wallet.

Loads settings from a YAML file, supports environment variable expansion
(``${KAIA_PRIVATE_KEY}``), and resolves the RPC endpoint for the selected
network.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from kaia_wallet.chains import get_chain, list_chain_names


# ---------------------------------------------------------------------------
# Environment-variable expansion helper
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)\}")


def _expand_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with their environment values.

    If the variable is not set the placeholder is left as-is so that
    validation can catch it later.
    """

    def _replace(match: re.Match) -> str:
        var_name = match.group(1)
        return os.environ.get(var_name, match.group(0))

    return _ENV_VAR_RE.sub(_replace, value)


def _expand_env_recursive(obj: object) -> object:
    """Walk an arbitrary nested structure and expand env vars in strings."""
    if isinstance(obj, str):
        return _expand_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _expand_env_recursive(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_recursive(item) for item in obj]
    return obj


# ---------------------------------------------------------------------------
# Pydantic v2 models
# ---------------------------------------------------------------------------


class WalletConfig(BaseModel):
    """Settings for a single wallet bound to one network."""

    network: str = "kairos"
    rpc_url: Optional[str] = None  # Overrides the network's public endpoint
    private_key: Optional[str] = Field(default=None, repr=False)
    verbose_init: bool = False  # Log secrets when the wallet is created
    request_timeout: float = Field(default=30.0, gt=0)
    receipt_poll_interval: float = Field(default=1.0, gt=0)
    log_level: str = "WARNING"

    @field_validator("network")
    @classmethod
    def _known_network(cls, value: str) -> str:
        if value not in list_chain_names():
            raise ValueError(
                f"Unknown network '{value}'. Available: {list_chain_names()}"
            )
        return value

    @field_validator("private_key", "rpc_url")
    @classmethod
    def _unset_placeholder(cls, value: Optional[str]) -> Optional[str]:
        # An unexpanded ``${VAR}`` or an empty string means "not configured".
        if value is None or not value.strip() or _ENV_VAR_RE.fullmatch(value.strip()):
            return None
        return value.strip()

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    def resolve_rpc_url(self) -> str:
        """Return the explicit RPC URL, or the network's public endpoint."""
        return self.rpc_url or get_chain(self.network).rpc_url


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def load_config(path: Path) -> WalletConfig:
    """Load and validate a wallet configuration from a YAML file.

    Environment variable placeholders (``${VAR}``) are expanded before
    validation.
    """
    raw_text = path.read_text(encoding="utf-8")
    raw_data = yaml.safe_load(raw_text) or {}
    expanded = _expand_env_recursive(raw_data)
    return WalletConfig.model_validate(expanded)


def save_config(config: WalletConfig, path: Path) -> None:
    """Serialize a :class:`WalletConfig` to a YAML file.

    The private key is never written; reference it with ``${KAIA_PRIVATE_KEY}``.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="python", exclude_none=True, exclude={"private_key"})
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(data, fh, default_flow_style=False, sort_keys=False)
