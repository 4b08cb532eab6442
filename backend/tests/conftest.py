"""Shared fixtures: containers, raw record factories and an in-memory fetcher."""
import asyncio
from typing import Any, Dict, List, Optional, Tuple

import pytest

from portfolio_ledger.models.container import Container, Identity
from portfolio_ledger.models.raw import RecordType
from portfolio_ledger.utils.errors import SourceFetchError


class FakeFetcher:
    """In-memory stand-in for ``PortfolioApiClient.fetch_records``."""

    def __init__(
        self,
        records: Optional[Dict[Tuple[str, RecordType], List[Dict[str, Any]]]] = None,
        errors: Optional[Dict[Tuple[str, RecordType], Exception]] = None,
        delays: Optional[Dict[Tuple[str, RecordType], float]] = None,
    ):
        self.records = records or {}
        self.errors = errors or {}
        self.delays = delays or {}
        self.calls: List[Tuple[str, RecordType]] = []

    async def fetch_records(self, record_type: RecordType, container_id: str) -> List[Dict[str, Any]]:
        key = (container_id, record_type)
        self.calls.append(key)
        delay = self.delays.get(key)
        if delay:
            await asyncio.sleep(delay)
        if key in self.errors:
            raise self.errors[key]
        return list(self.records.get(key, []))


class FakeContainerClient:
    """Serves ``fetch_containers`` for the session provider."""

    def __init__(self, portfolios=None, error: Optional[Exception] = None):
        self.portfolios = portfolios or []
        self.error = error
        self.calls = 0

    async def fetch_containers(self, account_id: str):
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.portfolios)


def trade(trade_id, date, side="BUY", quantity="10", price="150", symbol="AAPL", created_at=None, **extra):
    raw = {
        "tradeId": trade_id,
        "tradeDate": date,
        "side": side,
        "quantity": quantity,
        "price": price,
        "asset": {"symbol": symbol, "name": f"{symbol} Inc."} if symbol else None,
    }
    if created_at:
        raw["createdAt"] = created_at
    raw.update(extra)
    return raw


def cash_flow(cashflow_id, date, amount="1000", flow_type="DEPOSIT", description=None, created_at=None, **extra):
    raw = {
        "cashflowId": cashflow_id,
        "flowDate": date,
        "amount": amount,
        "type": flow_type,
    }
    if description is not None:
        raw["description"] = description
    if created_at:
        raw["createdAt"] = created_at
    raw.update(extra)
    return raw


@pytest.fixture
def container_a():
    return Container(id="pa", name="Growth Fund", currency="VND")


@pytest.fixture
def container_b():
    return Container(id="pb", name="Income Portfolio", currency="VND")


@pytest.fixture
def identity(container_a, container_b):
    return Identity(account_id="acc-1", containers=[container_a, container_b])


@pytest.fixture
def fetch_error():
    return SourceFetchError("GET /api/v1/trades returned 503", status_code=503)
