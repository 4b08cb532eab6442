"""Shared route dependencies."""
from fastapi import HTTPException, Query, Request
from pydantic import ValidationError
from portfolio_ledger.models.ledger import DateWindow, LedgerCriteria, LedgerState, LedgerStatus
from portfolio_ledger.services.ledger_store import LedgerStoreRegistry


def get_registry(request: Request) -> LedgerStoreRegistry:
    """Ledger store registry attached to the application."""
    return request.app.state.ledger_registry


def get_criteria(
    search: str = Query(default="", description="Case-insensitive text search"),
    kind: str = Query(default="ALL", description="TRADE, CASH_FLOW, FUND_UNIT or ALL"),
    container_id: str = Query(default="ALL", description="Container id or ALL"),
    date_window: DateWindow = Query(default=DateWindow.ALL, description="ALL, 7D, 30D, 90D or 1Y"),
) -> LedgerCriteria:
    """Build filter criteria from query parameters."""
    try:
        return LedgerCriteria(
            search_text=search,
            kind=kind.upper(),
            container_id=container_id,
            date_window=date_window,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Invalid filter criteria: {e.errors()[0]['msg']}")


def raise_on_unavailable(account_id: str, state: LedgerState):
    """
    Reject states that carry no usable ledger.

    A store that has not started gives 409; a failed pass gives 502. Both
    can be retried through ``/refetch``.
    """
    if state.status == LedgerStatus.IDLE:
        raise HTTPException(
            status_code=409,
            detail={"account_id": account_id, "message": "Portfolios are not available yet", "retryable": True},
        )
    if state.status == LedgerStatus.ERROR:
        raise HTTPException(
            status_code=502,
            detail={
                "account_id": account_id,
                "message": state.error or "Failed to load transactions",
                "retryable": True,
            },
        )
