# src/services/rate_refresher.py

"""Keeps the cached rate snapshot fresh enough to convert with.

The refresh policy is an ordered fallback chain, most recoverable first:

1. No API key: compiled-in defaults, the cache file is never read.
2. Cache younger than the staleness threshold: cached snapshot.
3. Network or HTTP error: stale cached snapshot, logged as a warning.
4. Malformed response body: ``SnapshotDecodeError``.
5. Cache write failure: ``SnapshotWriteError``.
"""

import json
import logging
import os
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.models.errors import FxError, SnapshotDecodeError
from src.models.rate_snapshot import RateSnapshot, default_snapshot
from src.storage.rate_store import RateStore

logger = logging.getLogger("fx_convert.refresher")


class RefreshOutcome(Enum):
    """How the snapshot returned by a refresh was obtained."""

    DEFAULTS = auto()
    CACHED = auto()
    REFRESHED = auto()
    STALE = auto()


@dataclass
class RefreshResult:
    """Snapshot produced by :meth:`RateRefresher.refresh` and its origin."""

    snapshot: RateSnapshot
    outcome: RefreshOutcome
    reason: str = ""


def resolve_api_key() -> str | None:
    """Read the rate service credential from the environment."""
    value = os.getenv(Settings.API_KEY_ENV, "").strip()
    return value or None


class RateRefresher:
    """Decides when to refetch rates and persists what it fetches."""

    def __init__(
        self,
        store: RateStore | None = None,
        api_key: str | None = None,
        session: Any = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store if store is not None else RateStore()
        self._api_key = api_key
        self._session = session
        self._clock = clock
        self._threshold: int = Settings.STALENESS_THRESHOLD
        self._timeout: int = Settings.REQUEST_TIMEOUT

    @property
    def session(self) -> Any:
        """HTTP session, created on first network access."""
        if self._session is None:
            self._session = curl_requests.Session(
                impersonate=Settings.IMPERSONATE_BROWSER
            )
        return self._session

    def close(self) -> None:
        """Release the HTTP session if one was opened."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def refresh(self) -> RefreshResult:
        """Return the snapshot to convert with, fetching if stale.

        Raises:
            SnapshotDecodeError: the cache file or the response is corrupt.
            SnapshotReadError: the cache file cannot be read.
            SnapshotWriteError: a fetched snapshot cannot be persisted.
        """
        api_key = self._api_key or resolve_api_key()
        if api_key is None:
            logger.info(
                "%s not set, using default rates", Settings.API_KEY_ENV
            )
            return RefreshResult(default_snapshot(), RefreshOutcome.DEFAULTS)

        cached = self.store.read()
        age = cached.age(self._clock())
        if age < self._threshold:
            logger.info(
                "Using cached rates from %s (age %.0fs)",
                self.store.path,
                age,
            )
            return RefreshResult(cached, RefreshOutcome.CACHED)

        logger.info(
            "Cached rates are %.0fs old (threshold %ds), fetching",
            age,
            self._threshold,
        )
        body = self._fetch(api_key)
        if body is None:
            return RefreshResult(
                cached,
                RefreshOutcome.STALE,
                reason="rate service unreachable",
            )

        snapshot = self._decode(body)
        self.store.write(snapshot)
        logger.info(
            "Fetched %d rates (base=%s) and wrote them to %s",
            len(snapshot.rates),
            snapshot.base,
            self.store.path,
        )
        return RefreshResult(snapshot, RefreshOutcome.REFRESHED)

    def get_current_rates(self) -> RateSnapshot:
        """Return the snapshot chosen by :meth:`refresh`."""
        return self.refresh().snapshot

    def list_available_currencies(self) -> set[str]:
        """Every currency code in the current snapshot, base included.

        Falls back to the default snapshot when the cache cannot be read.
        """
        try:
            snapshot = self.store.read()
        except FxError as exc:
            logger.warning(
                "Could not read cached rates (%s), listing defaults", exc
            )
            snapshot = default_snapshot()
        return snapshot.currencies

    def _fetch(self, api_key: str) -> str | None:
        """GET the latest rates; ``None`` on any transport or HTTP failure."""
        url = Settings.RATES_API_URL.format(api_key=api_key)
        try:
            resp = self.session.get(url, timeout=self._timeout)
        except Exception as exc:
            logger.warning(
                "Error fetching rates, using cached data: %s",
                exc,
                exc_info=True,
            )
            return None
        if resp.status_code != 200:
            logger.warning(
                "Rate service returned HTTP %d, using cached data",
                resp.status_code,
            )
            return None
        text: str = resp.text
        return text

    @staticmethod
    def _decode(body: str) -> RateSnapshot:
        """Parse a response body into a snapshot."""
        try:
            payload = json.loads(body)
        except json.JSONDecodeError as exc:
            raise SnapshotDecodeError(
                f"error parsing API response: {exc}"
            ) from exc
        try:
            return RateSnapshot.from_dict(payload)
        except SnapshotDecodeError as exc:
            raise SnapshotDecodeError(
                f"error parsing API response: {exc}"
            ) from exc
