"""Pure queries over a ledger: filtering, container listing and summary."""
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from portfolio_ledger.models.ledger import ALL, DateWindow, LedgerCriteria, LedgerSummary
from portfolio_ledger.models.transaction import Transaction, TransactionKind
from portfolio_ledger.utils.timeutils import utcnow


def _matches_search(tx: Transaction, needle: str) -> bool:
    fields = (
        tx.description,
        getattr(tx, "asset_symbol", None),
        getattr(tx, "asset_name", None),
        tx.container_name,
    )
    return any(field and needle in field.lower() for field in fields)


def filter_ledger(
    ledger: Sequence[Transaction],
    criteria: Optional[LedgerCriteria] = None,
    now: Optional[datetime] = None,
) -> List[Transaction]:
    """
    Apply filter criteria to a ledger.

    All active criteria combine with AND; the relative order of the input is
    preserved. Default criteria return every transaction.

    Args:
        ledger: Sorted ledger
        criteria: Filter criteria (None means match everything)
        now: Reference time for the date window (defaults to the current time)

    Returns:
        Filtered list of transactions
    """
    criteria = criteria or LedgerCriteria()
    needle = criteria.search_text.lower()

    window = None
    if criteria.date_window != DateWindow.ALL:
        now = now or utcnow()
        window = (now - criteria.date_window.span, now)

    filtered = []
    for tx in ledger:
        if needle and not _matches_search(tx, needle):
            continue
        if criteria.kind != ALL and tx.kind != criteria.kind:
            continue
        if criteria.container_id != ALL and tx.container_id != criteria.container_id:
            continue
        if window and not (window[0] <= tx.occurred_at <= window[1]):
            continue
        filtered.append(tx)
    return filtered


def list_containers(ledger: Iterable[Transaction]) -> List[Tuple[str, str]]:
    """Distinct ``(container_id, container_name)`` pairs, first-seen order."""
    seen: Dict[str, str] = {}
    for tx in ledger:
        if tx.container_id not in seen:
            seen[tx.container_id] = tx.container_name
    return list(seen.items())


def summarize(ledger: Iterable[Transaction]) -> LedgerSummary:
    """
    Reduce a ledger into counters and totals.

    ``total_amount`` adds absolute amounts across every currency;
    ``amount_by_currency`` keeps the per-currency sums.
    """
    count_by_kind = {kind: 0 for kind in TransactionKind}
    amount_by_currency: Dict[str, Decimal] = {}
    total_amount = Decimal("0")
    total_count = 0

    for tx in ledger:
        total_count += 1
        count_by_kind[tx.kind] += 1
        amount = abs(tx.amount)
        total_amount += amount
        amount_by_currency[tx.currency] = amount_by_currency.get(tx.currency, Decimal("0")) + amount

    return LedgerSummary(
        total_count=total_count,
        count_by_kind=count_by_kind,
        total_amount=total_amount,
        amount_by_currency=amount_by_currency,
    )
