# src/models/rate_snapshot.py

"""Exchange rate snapshot model and its JSON shape."""

import math
import time
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from src.config.settings import Settings
from src.models.errors import SnapshotDecodeError

# Default snapshots carry the process start time
_PROCESS_START: int = int(time.time())


@dataclass(frozen=True)
class RateSnapshot:
    """One immutable set of exchange rates and the time they were captured.

    ``rates`` maps a currency code to how many units of it one unit of
    ``base`` buys. The base itself is never a key; its rate is implicitly
    1.0.
    """

    timestamp: int
    base: str
    rates: Mapping[str, float]

    def __post_init__(self) -> None:
        if not self.base:
            raise SnapshotDecodeError("snapshot base currency is empty")
        if self.base in self.rates:
            raise SnapshotDecodeError(
                f"base currency {self.base} must not appear in rates"
            )
        for code, rate in self.rates.items():
            if not (rate > 0 and math.isfinite(rate)):
                raise SnapshotDecodeError(
                    f"invalid rate {rate!r} for {code}"
                )
        object.__setattr__(
            self, "rates", MappingProxyType(dict(self.rates))
        )

    @property
    def currencies(self) -> set[str]:
        """Every code this snapshot can convert, base included."""
        return {self.base, *self.rates}

    def age(self, now: float) -> float:
        """Seconds elapsed between capture and *now*."""
        return now - self.timestamp

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the persisted JSON shape."""
        return {
            "timestamp": self.timestamp,
            "base": self.base,
            "rates": dict(self.rates),
        }

    @classmethod
    def from_dict(cls, payload: Any) -> "RateSnapshot":
        """Decode a persisted document or an API response body.

        Unknown top-level keys (``disclaimer``, ``license``) are ignored.
        A base entry of exactly 1.0 inside ``rates`` is dropped, as the
        rate service lists the base against itself.

        Raises:
            SnapshotDecodeError: when the payload is not a valid snapshot.
        """
        if not isinstance(payload, dict):
            raise SnapshotDecodeError(
                f"expected a JSON object, got {type(payload).__name__}"
            )

        timestamp = payload.get("timestamp")
        if isinstance(timestamp, bool) or not isinstance(timestamp, int):
            raise SnapshotDecodeError(
                f"invalid or missing timestamp: {timestamp!r}"
            )

        base = payload.get("base")
        if not isinstance(base, str) or not base:
            raise SnapshotDecodeError(f"invalid or missing base: {base!r}")

        raw_rates = payload.get("rates")
        if not isinstance(raw_rates, dict):
            raise SnapshotDecodeError("invalid or missing rates object")

        rates: dict[str, float] = {}
        for code, value in raw_rates.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise SnapshotDecodeError(
                    f"rate for {code} is not a number: {value!r}"
                )
            rates[str(code)] = float(value)

        if base in rates:
            if rates[base] != 1.0:
                raise SnapshotDecodeError(
                    f"base currency {base} listed with rate {rates[base]}"
                )
            del rates[base]

        return cls(timestamp=timestamp, base=base, rates=rates)


def default_snapshot() -> RateSnapshot:
    """Return the compiled-in rates used when nothing better is available."""
    return RateSnapshot(
        timestamp=_PROCESS_START,
        base=Settings.DEFAULT_BASE,
        rates=Settings.DEFAULT_RATES,
    )
