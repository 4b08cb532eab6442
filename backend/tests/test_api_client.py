import httpx
import pytest

from portfolio_ledger.models.raw import RecordType
from portfolio_ledger.services.api_client import PortfolioApiClient
from portfolio_ledger.utils.errors import SourceFetchError


def _client(handler, token="secret"):
    return PortfolioApiClient(
        base_url="http://api.test",
        token=token,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_fetch_trades_scopes_by_portfolio_and_sends_token():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json=[{"tradeId": "t1"}])

    async with _client(handler) as client:
        records = await client.fetch_trades("pa")

    assert records == [{"tradeId": "t1"}]
    assert seen == {"path": "/api/v1/trades", "params": {"portfolioId": "pa"}, "auth": "Bearer secret"}


@pytest.mark.asyncio
async def test_fetch_cash_flows_unwraps_paginated_envelope():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v1/portfolios/pa/cash-flows"
        return httpx.Response(200, json={"data": [{"cashflowId": "c1"}], "pagination": {"page": 1}})

    async with _client(handler, token="") as client:
        records = await client.fetch_cash_flows("pa")

    assert records == [{"cashflowId": "c1"}]


@pytest.mark.asyncio
async def test_http_error_status_raises_source_fetch_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"message": "unavailable"})

    async with _client(handler) as client:
        with pytest.raises(SourceFetchError) as exc_info:
            await client.fetch_trades("pa")

    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_transport_error_raises_source_fetch_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(SourceFetchError):
            await client.fetch_cash_flows("pa")


@pytest.mark.asyncio
async def test_non_list_payload_is_rejected():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"message": "ok"})

    async with _client(handler) as client:
        with pytest.raises(SourceFetchError):
            await client.fetch_trades("pa")


@pytest.mark.asyncio
async def test_empty_container_id_is_refused_before_any_request():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=[])

    async with _client(handler) as client:
        with pytest.raises(SourceFetchError):
            await client.fetch_trades("")
        with pytest.raises(SourceFetchError):
            await client.fetch_cash_flows("  ")

    assert calls == []


@pytest.mark.asyncio
async def test_fetch_records_dispatches_by_record_type():
    paths = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, json=[])

    async with _client(handler) as client:
        for record_type in RecordType:
            await client.fetch_records(record_type, "pa")

    assert paths == [
        "/api/v1/trades",
        "/api/v1/portfolios/pa/cash-flows",
        "/api/v1/portfolios/pa/fund-unit-transactions",
    ]


@pytest.mark.asyncio
async def test_fetch_containers_filters_by_account():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["accountId"] == "acc-1"
        return httpx.Response(200, json=[{"portfolioId": "pa", "name": "Growth"}])

    async with _client(handler) as client:
        portfolios = await client.fetch_containers("acc-1")

    assert portfolios == [{"portfolioId": "pa", "name": "Growth"}]
