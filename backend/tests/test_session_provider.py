import pytest

from conftest import FakeContainerClient
from portfolio_ledger.services.session_provider import SessionProvider, parse_container


def test_parse_container_reads_portfolio_fields():
    container = parse_container({"portfolioId": "pa", "name": "Growth", "baseCurrency": "USD"})

    assert container.id == "pa"
    assert container.name == "Growth"
    assert container.currency == "USD"


def test_parse_container_defaults():
    container = parse_container({"id": 7}, default_currency="EUR")

    assert container.id == "7"
    assert container.name == "7"
    assert container.currency == "EUR"


def test_parse_container_without_id():
    assert parse_container({"name": "Orphan"}) is None


def test_pending_identity_is_not_ready():
    identity = SessionProvider.pending("acc-1")
    assert identity.loading
    assert not identity.ready


@pytest.mark.asyncio
async def test_resolve_skips_unusable_and_duplicate_portfolios():
    provider = SessionProvider(FakeContainerClient([
        {"portfolioId": "pa", "name": "Growth"},
        {"name": "No id"},
        {"portfolioId": "pa", "name": "Growth (again)"},
        {"portfolioId": "pb", "name": "Income", "baseCurrency": "USD"},
    ]))

    identity = await provider.resolve("acc-1")

    assert identity.ready
    assert [c.id for c in identity.containers] == ["pa", "pb"]
    assert identity.containers[0].name == "Growth"
    assert identity.containers[1].currency == "USD"


def test_parse_container_coerces_non_string_fields():
    container = parse_container({"portfolioId": "p1", "name": 2024, "baseCurrency": 840})

    assert container.name == "2024"
    assert container.currency == "840"


@pytest.mark.asyncio
async def test_portfolio_with_numeric_name_still_resolves():
    provider = SessionProvider(FakeContainerClient([
        {"portfolioId": "p1", "name": 2024, "baseCurrency": "VND"},
        {"portfolioId": "p2", "name": "Income"},
    ]))

    identity = await provider.resolve("acc-1")

    assert [(c.id, c.name) for c in identity.containers] == [("p1", "2024"), ("p2", "Income")]
