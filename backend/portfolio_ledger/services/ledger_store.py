"""Ledger state per account: aggregation passes, refetch and stale-result discard."""
from typing import Dict, Optional
from portfolio_ledger.models.container import Identity
from portfolio_ledger.models.ledger import LedgerState, LedgerStatus
from portfolio_ledger.services.aggregator import LedgerAggregator
from portfolio_ledger.services.session_provider import SessionProvider
from portfolio_ledger.utils.errors import AggregationError, LedgerError, SessionNotReadyError
from portfolio_ledger.utils.logging_setup import get_logger
from portfolio_ledger.utils.timeutils import utcnow

logger = get_logger(__name__)


class LedgerStore:
    """
    Holds the current ledger of one account.

    Every pass gets a generation number; a pass only commits its result if
    no newer pass started meanwhile, so late results of superseded passes are
    dropped. The committed ``LedgerState`` is immutable and replaced as a
    whole.
    """

    def __init__(self, account_id: str, session_provider: SessionProvider, aggregator: LedgerAggregator):
        self.account_id = account_id
        self.session_provider = session_provider
        self.aggregator = aggregator
        self._state = LedgerState()
        self._generation = 0

    @property
    def state(self) -> LedgerState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    async def ensure_loaded(self) -> LedgerState:
        """Run the first pass if none was started yet."""
        if self._generation == 0:
            return await self.refetch()
        return self._state

    async def refetch(self, identity: Optional[Identity] = None) -> LedgerState:
        """
        Run a fresh aggregation pass, superseding any pass in flight.

        Args:
            identity: Identity to aggregate for; resolved through the session
                provider when omitted

        Returns:
            The committed state, or the current one when this pass was superseded
        """
        self._generation += 1
        generation = self._generation
        self._state = self._state.model_copy(update={"status": LedgerStatus.LOADING, "generation": generation})

        try:
            if identity is None:
                identity = await self.session_provider.resolve(self.account_id)
            result = await self.aggregator.aggregate(identity)
        except SessionNotReadyError:
            new_state = LedgerState(status=LedgerStatus.IDLE, generation=generation)
        except AggregationError as e:
            new_state = LedgerState(
                status=LedgerStatus.ERROR,
                error=str(e),
                failures=e.failures,
                generation=generation,
                updated_at=utcnow(),
            )
        except LedgerError as e:
            logger.error("Could not resolve containers for account %s: %s", self.account_id, e)
            new_state = LedgerState(
                status=LedgerStatus.ERROR,
                error=f"Could not load portfolios: {e}",
                generation=generation,
                updated_at=utcnow(),
            )
        except Exception:
            if generation == self._generation:
                self._state = LedgerState(
                    status=LedgerStatus.ERROR,
                    error="Unexpected error while loading transactions",
                    generation=generation,
                    updated_at=utcnow(),
                )
            raise
        else:
            new_state = LedgerState(
                status=LedgerStatus.READY,
                ledger=result.ledger,
                failures=result.failures,
                generation=generation,
                updated_at=utcnow(),
            )

        if generation != self._generation:
            logger.info("Discarding result of superseded pass %d for account %s (current pass %d)",
                        generation, self.account_id, self._generation)
            return self._state

        self._state = new_state
        return new_state


class LedgerStoreRegistry:
    """One ``LedgerStore`` per account, created on first use."""

    def __init__(self, session_provider: SessionProvider, aggregator: LedgerAggregator):
        self.session_provider = session_provider
        self.aggregator = aggregator
        self._stores: Dict[str, LedgerStore] = {}

    def get(self, account_id: str) -> LedgerStore:
        store = self._stores.get(account_id)
        if store is None:
            store = LedgerStore(account_id, self.session_provider, self.aggregator)
            self._stores[account_id] = store
        return store

    def clear(self):
        self._stores.clear()
