"""Custom error classes."""
from typing import Optional, Sequence


class LedgerError(Exception):
    """Base exception for the ledger application."""
    pass


class SourceFetchError(LedgerError):
    """Error raised by a source fetcher (transport, HTTP status or payload)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NormalizationError(LedgerError):
    """A raw record could not be mapped into a transaction."""
    pass


class SessionNotReadyError(LedgerError):
    """The identity or its container list is not available yet."""
    pass


class AggregationError(LedgerError):
    """Every request of an aggregation pass failed."""

    def __init__(self, message: str, failures: Sequence = ()):
        super().__init__(message)
        self.failures = tuple(failures)
