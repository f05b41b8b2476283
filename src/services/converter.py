# src/services/converter.py

"""Currency conversion through a snapshot's pivot currency."""

import math
from dataclasses import dataclass

from src.models.errors import CurrencyNotFoundError, InvalidAmountError
from src.models.rate_snapshot import RateSnapshot


@dataclass
class ConversionResult:
    """Outcome of a single conversion, ready for display."""

    amount: float
    source: str
    target: str
    converted: float
    rate: float
    base: str
    base_equivalent: float | None = None


def validate_amount(text: str) -> float:
    """Parse a user-entered amount, rejecting anything not > 0.

    Raises:
        InvalidAmountError: not a finite number, or not positive.
    """
    try:
        value = float(text.strip())
    except (AttributeError, ValueError) as exc:
        raise InvalidAmountError("please enter a valid number") from exc
    if not math.isfinite(value):
        raise InvalidAmountError("please enter a valid number")
    if value <= 0:
        raise InvalidAmountError("amount must be greater than 0")
    return value


def convert(
    amount: float,
    source: str,
    target: str,
    snapshot: RateSnapshot,
) -> float:
    """Convert *amount* of *source* into *target*.

    Non-base pairs hop once through the base: ``amount / rate[source] *
    rate[target]``.

    Raises:
        CurrencyNotFoundError: a code is neither the base nor in the rates.
    """
    if source == target:
        return amount

    rates = snapshot.rates
    if source == snapshot.base:
        if target not in rates:
            raise CurrencyNotFoundError([target], "target")
        return amount * rates[target]

    if target == snapshot.base:
        if source not in rates:
            raise CurrencyNotFoundError([source], "source")
        return amount / rates[source]

    missing = [code for code in (source, target) if code not in rates]
    if len(missing) == 2:
        raise CurrencyNotFoundError(missing)
    if missing:
        role = "source" if missing[0] == source else "target"
        raise CurrencyNotFoundError(missing, role)

    return amount / rates[source] * rates[target]


def build_conversion(
    amount: float,
    source: str,
    target: str,
    snapshot: RateSnapshot,
) -> ConversionResult:
    """Convert and derive the effective rate and base equivalent.

    Raises:
        InvalidAmountError: *amount* is not positive.
        CurrencyNotFoundError: a code is neither the base nor in the rates.
    """
    if not amount > 0:
        raise InvalidAmountError("amount must be greater than 0")
    converted = convert(amount, source, target, snapshot)
    base_equivalent = None
    if snapshot.base not in (source, target):
        base_equivalent = convert(amount, source, snapshot.base, snapshot)
    return ConversionResult(
        amount=amount,
        source=source,
        target=target,
        converted=converted,
        rate=converted / amount,
        base=snapshot.base,
        base_equivalent=base_equivalent,
    )
