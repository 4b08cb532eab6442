"""Ledger aggregation across all containers of an identity."""
import asyncio
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Set, Tuple
from pydantic import BaseModel, ConfigDict
from portfolio_ledger.config import settings
from portfolio_ledger.models.container import Container, Identity
from portfolio_ledger.models.ledger import FetchFailure
from portfolio_ledger.models.raw import RecordType
from portfolio_ledger.models.transaction import Transaction
from portfolio_ledger.services.normalizer import normalize_records
from portfolio_ledger.utils.errors import AggregationError, SessionNotReadyError
from portfolio_ledger.utils.logging_setup import get_logger
from portfolio_ledger.utils.timeutils import UTC

logger = get_logger(__name__)

_MISSING_CREATED_AT = datetime.min.replace(tzinfo=UTC)


class RecordFetcher(Protocol):
    async def fetch_records(self, record_type: RecordType, container_id: str) -> List[Mapping[str, Any]]:
        ...


class AggregationResult(BaseModel):
    """Outcome of one aggregation pass."""
    model_config = ConfigDict(frozen=True)

    ledger: Tuple[Transaction, ...] = ()
    failures: Tuple[FetchFailure, ...] = ()
    request_count: int = 0

    @property
    def partial(self) -> bool:
        """Some, but not all, requests failed."""
        return 0 < len(self.failures) < self.request_count


def default_record_types() -> Tuple[RecordType, ...]:
    if settings.include_fund_units:
        return (RecordType.TRADE, RecordType.CASH_FLOW, RecordType.FUND_UNIT)
    return (RecordType.TRADE, RecordType.CASH_FLOW)


def _ordering_key(tx: Transaction) -> Tuple[datetime, datetime]:
    return (tx.occurred_at, tx.created_at or _MISSING_CREATED_AT)


def sort_ledger(transactions: Iterable[Transaction]) -> List[Transaction]:
    """
    Order a ledger newest first.

    Ties on ``occurred_at`` are broken by ``created_at`` (newest first,
    missing last), then by insertion order; the sort is stable.
    """
    return sorted(transactions, key=_ordering_key, reverse=True)


class LedgerAggregator:
    """Fans out source fetchers over every container and merges the results."""

    def __init__(self, fetcher: RecordFetcher, record_types: Optional[Sequence[RecordType]] = None):
        self.fetcher = fetcher
        self.record_types = tuple(record_types) if record_types else default_record_types()

    async def aggregate(self, identity: Optional[Identity]) -> AggregationResult:
        """
        Build one chronologically ordered ledger for ``identity``.

        Every per-container, per-record-type request runs concurrently and is
        contained individually: a failure is recorded and excluded, the other
        requests carry on. Sorting happens once every request has settled, so
        the result does not depend on completion order.

        Raises:
            SessionNotReadyError: identity or its container list is not available
            AggregationError: every request failed
        """
        if identity is None or not identity.ready:
            raise SessionNotReadyError("Identity or container list not available yet")

        requests: List[Tuple[Container, RecordType]] = [
            (container, record_type)
            for container in identity.containers
            for record_type in self.record_types
        ]
        if not requests:
            logger.info("Account %s has no accessible containers", identity.account_id)
            return AggregationResult()

        outcomes = await asyncio.gather(
            *(self.fetcher.fetch_records(record_type, container.id) for container, record_type in requests),
            return_exceptions=True,
        )

        accumulator: List[Transaction] = []
        failures: List[FetchFailure] = []
        for (container, record_type), outcome in zip(requests, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.warning(
                    "Fetching %s records for container %s failed: %s",
                    record_type.value, container.id, outcome,
                )
                failures.append(FetchFailure(
                    container_id=container.id,
                    record_type=record_type,
                    error=str(outcome) or type(outcome).__name__,
                ))
                continue
            accumulator.extend(normalize_records(outcome, container, record_type))

        if len(failures) == len(requests):
            logger.error("All %d request(s) failed for account %s", len(requests), identity.account_id)
            raise AggregationError(
                f"Could not load transactions: all {len(requests)} request(s) failed",
                failures=failures,
            )

        ledger = sort_ledger(self._unique(accumulator))
        logger.info(
            "Aggregated %d transaction(s) from %d container(s), %d failed request(s)",
            len(ledger), len(identity.containers), len(failures),
        )
        return AggregationResult(ledger=tuple(ledger), failures=tuple(failures), request_count=len(requests))

    @staticmethod
    def _unique(transactions: List[Transaction]) -> List[Transaction]:
        """Keep the first occurrence of every ``kind:container:id`` key."""
        seen: Set[str] = set()
        unique: List[Transaction] = []
        duplicates: Dict[str, int] = {}
        for tx in transactions:
            if tx.key in seen:
                duplicates[tx.key] = duplicates.get(tx.key, 0) + 1
                continue
            seen.add(tx.key)
            unique.append(tx)
        if duplicates:
            logger.warning("Removed %d duplicate transaction(s): %s",
                           sum(duplicates.values()), ", ".join(sorted(duplicates)))
        return unique
