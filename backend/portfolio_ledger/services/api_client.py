"""Portfolio API client: the per-container source fetchers."""
from typing import Any, Dict, List, Optional
import httpx
from portfolio_ledger.config import settings
from portfolio_ledger.models.raw import RecordType
from portfolio_ledger.utils.errors import SourceFetchError


class PortfolioApiClient:
    """
    Thin async wrapper over the remote portfolio API.

    Each fetcher returns the raw record list of one record type for one
    container. Errors are raised as ``SourceFetchError``; containment is the
    aggregator's job.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.portfolio_api_base_url).rstrip("/")
        token = token if token is not None else settings.portfolio_api_token
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout or settings.request_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.client.aclose()

    async def aclose(self):
        await self.client.aclose()

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a JSON document from the API."""
        try:
            response = await self.client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SourceFetchError(
                f"GET {path} returned {e.response.status_code}",
                status_code=e.response.status_code,
            )
        except httpx.HTTPError as e:
            raise SourceFetchError(f"HTTP error calling {path}: {str(e)}")

        try:
            return response.json()
        except ValueError:
            raise SourceFetchError(f"GET {path} returned a non-JSON body")

    @staticmethod
    def _records(payload: Any, path: str) -> List[Dict[str, Any]]:
        """Accept a bare list or a paginated ``{"data": [...]}`` envelope."""
        if isinstance(payload, dict) and "data" in payload:
            payload = payload["data"]
        if not isinstance(payload, list):
            raise SourceFetchError(f"GET {path} did not return a list of records")
        return payload

    @staticmethod
    def _require_container(container_id: str) -> str:
        if not container_id or not str(container_id).strip():
            raise SourceFetchError("container id must be non-empty")
        return str(container_id)

    async def fetch_containers(self, account_id: str) -> List[Dict[str, Any]]:
        """Fetch the raw portfolios accessible to an account."""
        if not account_id:
            raise SourceFetchError("account id must be non-empty")
        path = "/api/v1/portfolios"
        payload = await self._get(path, params={"accountId": account_id})
        return self._records(payload, path)

    async def fetch_trades(self, container_id: str) -> List[Dict[str, Any]]:
        """Fetch raw trade executions of one container."""
        container_id = self._require_container(container_id)
        params: Dict[str, Any] = {"portfolioId": container_id}
        if settings.trade_fetch_limit:
            params["limit"] = settings.trade_fetch_limit
        path = "/api/v1/trades"
        payload = await self._get(path, params=params)
        return self._records(payload, path)

    async def fetch_cash_flows(self, container_id: str) -> List[Dict[str, Any]]:
        """Fetch raw cash-flow entries of one container."""
        container_id = self._require_container(container_id)
        path = f"/api/v1/portfolios/{container_id}/cash-flows"
        payload = await self._get(path)
        return self._records(payload, path)

    async def fetch_fund_unit_transactions(self, container_id: str) -> List[Dict[str, Any]]:
        """Fetch raw fund-unit subscriptions and redemptions of one container."""
        container_id = self._require_container(container_id)
        path = f"/api/v1/portfolios/{container_id}/fund-unit-transactions"
        payload = await self._get(path)
        return self._records(payload, path)

    async def fetch_records(self, record_type: RecordType, container_id: str) -> List[Dict[str, Any]]:
        """Dispatch to the fetcher of ``record_type``."""
        if record_type == RecordType.TRADE:
            return await self.fetch_trades(container_id)
        if record_type == RecordType.CASH_FLOW:
            return await self.fetch_cash_flows(container_id)
        if record_type == RecordType.FUND_UNIT:
            return await self.fetch_fund_unit_transactions(container_id)
        raise SourceFetchError(f"Unsupported record type: {record_type}")
