# src/storage/rate_store.py

"""JSON file persistence for the current exchange rate snapshot."""

import json
import logging
import os
import tempfile
from pathlib import Path

from src.config.settings import Settings
from src.models.errors import (
    SnapshotDecodeError,
    SnapshotReadError,
    SnapshotWriteError,
)
from src.models.rate_snapshot import RateSnapshot, default_snapshot

logger = logging.getLogger("fx_convert.store")


class RateStore:
    """Reads and writes the single rate snapshot file.

    The file holds exactly one snapshot and is replaced wholesale on every
    write. There is no locking: one process, one invocation at a time.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path: Path = Path(path) if path is not None else Settings.RATES_PATH
        logger.debug("RateStore initialised, path=%s", self.path)

    def exists(self) -> bool:
        """Return True when a snapshot file is present on disk."""
        return self.path.is_file()

    def read(self) -> RateSnapshot:
        """Load the persisted snapshot, seeding defaults on first use.

        Raises:
            SnapshotDecodeError: the file exists but is not a snapshot.
            SnapshotReadError: the file exists but cannot be read.
            SnapshotWriteError: seeding the default snapshot failed.
        """
        try:
            with open(self.path, encoding="utf-8") as f:
                payload = json.load(f)
        except FileNotFoundError:
            logger.info(
                "No rate cache at %s, writing default rates", self.path
            )
            snapshot = default_snapshot()
            self.write(snapshot)
            return snapshot
        except json.JSONDecodeError as exc:
            raise SnapshotDecodeError(
                f"rate cache {self.path} is not valid JSON: {exc}"
            ) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise SnapshotReadError(
                f"cannot read rate cache {self.path}: {exc}"
            ) from exc

        try:
            snapshot = RateSnapshot.from_dict(payload)
        except SnapshotDecodeError as exc:
            raise SnapshotDecodeError(
                f"rate cache {self.path} is corrupt: {exc}"
            ) from exc

        logger.debug(
            "Loaded %d rates (base=%s, timestamp=%d) from %s",
            len(snapshot.rates),
            snapshot.base,
            snapshot.timestamp,
            self.path,
        )
        return snapshot

    def write(self, snapshot: RateSnapshot) -> None:
        """Persist *snapshot*, replacing any previous file atomically.

        The document is written to a temporary file next to the target and
        renamed over it, so readers see either the old or the new content.

        Raises:
            SnapshotWriteError: the snapshot could not be persisted.
        """
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                json.dump(snapshot.to_dict(), tmp, indent=2)
                tmp.write("\n")
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise SnapshotWriteError(
                f"cannot write rate cache {self.path}: {exc}"
            ) from exc

        logger.info(
            "Saved %d rates (base=%s) to %s",
            len(snapshot.rates),
            snapshot.base,
            self.path,
        )
