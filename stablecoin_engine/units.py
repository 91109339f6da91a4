"""Pure fixed-point helpers — no I/O."""
from __future__ import annotations

from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext

PRECISION = 10**18
MAX_UINT256 = 2**256 - 1

# Enough significant digits for any uint256 amount.
_DECIMAL_PREC = 80


def to_fixed(value: str | int | Decimal, decimals: int = 18) -> int:
    """Convert a human amount to fixed-point integer units, truncating.

    Examples:
        "2.75" → 2750000000000000000
        "15000" → 15000000000000000000000
    """
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Not a number: {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    with localcontext() as ctx:
        ctx.prec = _DECIMAL_PREC
        return int(amount.scaleb(decimals).to_integral_value(rounding=ROUND_DOWN))


def from_fixed(amount: int, decimals: int = 18) -> Decimal:
    """Convert fixed-point integer units back to a Decimal."""
    with localcontext() as ctx:
        ctx.prec = _DECIMAL_PREC
        return Decimal(amount).scaleb(-decimals)


def format_fixed(amount: int, decimals: int = 18, places: int = 4) -> str:
    """Human-readable rendering with thousands separators."""
    return f"{from_fixed(amount, decimals):,.{places}f}"


def format_health_factor(health_factor: int) -> str:
    """Render a health factor, showing the debt-free sentinel as infinity."""
    if health_factor >= MAX_UINT256:
        return "∞"
    return f"{from_fixed(health_factor):.4f}"


def parse_allocation(text: str) -> tuple[str, int]:
    """Parse ``SYMBOL=AMOUNT`` into ``(symbol, fixed_amount)``."""
    symbol, sep, amount = text.partition("=")
    if not sep or not symbol.strip():
        raise ValueError(f"Expected SYMBOL=AMOUNT, got {text!r}")
    return symbol.strip(), to_fixed(amount.strip())
