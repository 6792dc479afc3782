"""Conversion between decimal display amounts and integer smallest units.

Native amounts go through ``Web3.to_wei`` / ``Web3.from_wei``; token amounts
are rescaled with ``Decimal.scaleb`` at a precision wide enough for any
uint256 value, so nothing is rounded.
"""

from __future__ import annotations

import re
from decimal import Decimal, localcontext

from web3 import Web3

from kaia_wallet.errors import InvalidAmountError

# Native KAIA uses the same 18-decimal scale as ether (1 KAIA = 10**18 kei).
NATIVE_DECIMALS = 18

MAX_UINT256 = 2**256 - 1

_MAX_DECIMALS = 255
_PRECISION = 999
_AMOUNT_RE = re.compile(r"^(\d*)(?:\.(\d*))?$")


def _check_decimals(decimals: int) -> None:
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise InvalidAmountError(f"Decimals must be an integer, got {decimals!r}")
    if not 0 <= decimals <= _MAX_DECIMALS:
        raise InvalidAmountError(
            f"Decimals must be between 0 and {_MAX_DECIMALS}, got {decimals}"
        )


def _check_raw(value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmountError(f"Raw amount must be an integer, got {value!r}")


def _to_decimal(amount: str | int | Decimal, decimals: int) -> Decimal:
    """Validate a display amount and return it as an exact ``Decimal``."""
    if isinstance(amount, bool):
        raise InvalidAmountError(f"Invalid amount: {amount!r}")
    if isinstance(amount, Decimal):
        if not amount.is_finite():
            raise InvalidAmountError(f"Invalid amount: {amount}")
        text = format(amount, "f")
    elif isinstance(amount, (int, str)):
        text = str(amount).strip()
    else:
        raise InvalidAmountError(
            f"Amount must be a decimal string, got {type(amount).__name__}"
        )

    match = _AMOUNT_RE.match(text)
    if match is None or text in ("", "."):
        raise InvalidAmountError(f"Invalid amount: {text!r}")
    if len((match.group(2) or "").rstrip("0")) > decimals:
        raise InvalidAmountError(
            f"Amount {text!r} has more than {decimals} decimal places"
        )
    return Decimal(text)


def _plain(value: Decimal) -> str:
    """Fixed-point text without trailing fractional zeros."""
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def parse_units(amount: str | int | Decimal, decimals: int) -> int:
    """Convert a display amount such as ``"10.5"`` into integer smallest units.

    Raises
    ------
    InvalidAmountError
        If *amount* is not a non-negative decimal number, carries more
        fractional digits than *decimals* allows, or does not fit in a
        uint256.
    """
    _check_decimals(decimals)
    value = _to_decimal(amount, decimals)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        scaled = value.scaleb(decimals)
    if scaled > MAX_UINT256:
        raise InvalidAmountError(f"Amount {amount!r} does not fit in a uint256")
    return int(scaled)


def format_units(value: int, decimals: int) -> str:
    """Convert integer smallest units into a normalized decimal string.

    Trailing fractional zeros are dropped, so ``10**18`` at 18 decimals
    renders as ``"1"`` and zero renders as ``"0"``.
    """
    _check_decimals(decimals)
    _check_raw(value)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return _plain(Decimal(value).scaleb(-decimals))


def parse_ether(amount: str | int | Decimal) -> int:
    """Whole KAIA to kei."""
    value = _to_decimal(amount, NATIVE_DECIMALS)
    try:
        return Web3.to_wei(value, "ether")
    except ValueError as exc:
        raise InvalidAmountError(f"Invalid amount {amount!r}: {exc}") from exc


def format_ether(value: int) -> str:
    """Kei to whole KAIA."""
    _check_raw(value)
    try:
        return _plain(Decimal(Web3.from_wei(value, "ether")))
    except ValueError as exc:
        raise InvalidAmountError(f"Invalid raw amount {value!r}: {exc}") from exc
