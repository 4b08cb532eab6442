"""Ledger endpoints."""
from datetime import datetime
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from typing import List, Optional
from portfolio_ledger.api.deps import get_criteria, get_registry, raise_on_unavailable
from portfolio_ledger.models.ledger import FetchFailure, LedgerCriteria, LedgerState, LedgerStatus, LedgerSummary
from portfolio_ledger.models.transaction import Transaction
from portfolio_ledger.services.ledger_query import filter_ledger, list_containers, summarize
from portfolio_ledger.services.ledger_store import LedgerStoreRegistry

router = APIRouter()


class LedgerResponse(BaseModel):
    """Filtered view of an account's ledger."""
    account_id: str
    status: LedgerStatus
    error: Optional[str] = None
    partial: bool = Field(default=False, description="Some requests of the pass failed")
    failures: List[FetchFailure] = Field(default_factory=list)
    total_count: int = Field(default=0, description="Size of the unfiltered ledger")
    transactions: List[Transaction] = Field(default_factory=list)
    updated_at: Optional[datetime] = None


class ContainerEntry(BaseModel):
    id: str
    name: str


def _response(account_id: str, state: LedgerState, criteria: LedgerCriteria) -> LedgerResponse:
    raise_on_unavailable(account_id, state)
    return LedgerResponse(
        account_id=account_id,
        status=state.status,
        error=state.error,
        partial=state.partial,
        failures=list(state.failures),
        total_count=len(state.ledger),
        transactions=filter_ledger(state.ledger, criteria),
        updated_at=state.updated_at,
    )


@router.get("/{account_id}", response_model=LedgerResponse)
async def get_ledger(
    account_id: str,
    criteria: LedgerCriteria = Depends(get_criteria),
    registry: LedgerStoreRegistry = Depends(get_registry),
):
    """
    Get the merged transaction ledger of an account, newest first.

    The first request for an account runs an aggregation pass; later requests
    serve the committed ledger until ``/refetch`` is called.
    """
    state = await registry.get(account_id).ensure_loaded()
    return _response(account_id, state, criteria)


@router.post("/{account_id}/refetch", response_model=LedgerResponse)
async def refetch_ledger(
    account_id: str,
    criteria: LedgerCriteria = Depends(get_criteria),
    registry: LedgerStoreRegistry = Depends(get_registry),
):
    """Run a fresh aggregation pass and return the new ledger."""
    state = await registry.get(account_id).refetch()
    return _response(account_id, state, criteria)


@router.get("/{account_id}/summary", response_model=LedgerSummary)
async def get_ledger_summary(
    account_id: str,
    criteria: LedgerCriteria = Depends(get_criteria),
    registry: LedgerStoreRegistry = Depends(get_registry),
):
    """Summary counters and totals of the filtered ledger."""
    state = await registry.get(account_id).ensure_loaded()
    raise_on_unavailable(account_id, state)
    return summarize(filter_ledger(state.ledger, criteria))


@router.get("/{account_id}/containers", response_model=List[ContainerEntry])
async def get_ledger_containers(
    account_id: str,
    registry: LedgerStoreRegistry = Depends(get_registry),
):
    """Distinct containers that appear in the ledger."""
    state = await registry.get(account_id).ensure_loaded()
    raise_on_unavailable(account_id, state)
    return [ContainerEntry(id=cid, name=name) for cid, name in list_containers(state.ledger)]
