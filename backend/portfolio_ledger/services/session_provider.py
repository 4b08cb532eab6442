"""Identity/session provider backed by the portfolio API."""
from typing import Any, Dict, List, Optional
from portfolio_ledger.config import settings
from portfolio_ledger.models.container import Container, Identity
from portfolio_ledger.services.api_client import PortfolioApiClient
from portfolio_ledger.utils.logging_setup import get_logger

logger = get_logger(__name__)


def parse_container(raw: Dict[str, Any], default_currency: Optional[str] = None) -> Optional[Container]:
    """
    Map a raw portfolio into a container.

    Returns None when the portfolio has no usable identifier.
    """
    container_id = raw.get("portfolioId") or raw.get("id")
    if container_id is None or not str(container_id).strip():
        return None
    container_id = str(container_id)
    name = raw.get("name")
    currency = raw.get("baseCurrency") or raw.get("currency") or default_currency or settings.default_currency
    return Container(
        id=container_id,
        name=str(name) if name not in (None, "") else container_id,
        currency=str(currency),
    )


class SessionProvider:
    """Resolves the active identity and the containers it may read."""

    def __init__(self, client: PortfolioApiClient):
        self.client = client

    @staticmethod
    def pending(account_id: str) -> Identity:
        """Identity whose container list is still loading."""
        return Identity(account_id=account_id, containers=None, loading=True)

    async def resolve(self, account_id: str) -> Identity:
        """
        Resolve the accessible containers of ``account_id``.

        Raises:
            SourceFetchError: the container list could not be loaded
        """
        raw_containers = await self.client.fetch_containers(account_id)

        containers: List[Container] = []
        seen = set()
        for raw in raw_containers:
            container = parse_container(raw) if isinstance(raw, dict) else None
            if container is None:
                logger.warning("Skipping portfolio without identifier for account %s", account_id)
                continue
            if container.id in seen:
                continue
            seen.add(container.id)
            containers.append(container)

        logger.info("Resolved %d container(s) for account %s", len(containers), account_id)
        return Identity(account_id=account_id, containers=containers, loading=False)
