# src/models/errors.py

"""Exception hierarchy shared by the store, refresher and converter."""


class FxError(Exception):
    """Base class for every error fx_convert reports to the user."""


class InvalidAmountError(FxError, ValueError):
    """The amount entered is not a positive number."""


class CurrencyNotFoundError(FxError):
    """One or more currency codes are missing from the snapshot."""

    def __init__(self, codes: list[str], role: str = "") -> None:
        self.codes = codes
        self.role = role
        label = f"{role} currency" if role else "currency"
        if len(codes) > 1:
            label += " rates"
        super().__init__(f"{label} {', '.join(codes)} not found")


class SnapshotDecodeError(FxError, ValueError):
    """A persisted or fetched payload is not a valid rate snapshot."""


class SnapshotReadError(FxError):
    """The rate cache file exists but could not be read."""


class SnapshotWriteError(FxError):
    """A rate snapshot could not be persisted."""
