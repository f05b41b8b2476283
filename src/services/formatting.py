# src/services/formatting.py

"""Display formatting for currency amounts."""

from src.config.settings import Settings


def decimals_for(code: str) -> int:
    """Number of minor-unit digits shown for *code*."""
    if code in Settings.ZERO_DECIMAL_CURRENCIES:
        return 0
    if code in Settings.THREE_DECIMAL_CURRENCIES:
        return 3
    return 2


def format_amount(value: float, code: str) -> str:
    """Render *value* with *code*'s decimals and comma thousands separators.

    Rounding is Python's fixed-point formatting (round-half-to-even on the
    binary value), so ``1234567.5`` in JPY renders as ``1,234,568``.
    Separators go into the integer part only.
    """
    return f"{value:,.{decimals_for(code)}f}"
