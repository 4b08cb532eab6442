"""Ledger query, summary and state models."""
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Literal, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field, computed_field
from portfolio_ledger.models.raw import RecordType
from portfolio_ledger.models.transaction import Transaction, TransactionKind

ALL = "ALL"


class DateWindow(str, Enum):
    """Relative date windows ending now."""
    ALL = "ALL"
    LAST_7_DAYS = "7D"
    LAST_30_DAYS = "30D"
    LAST_90_DAYS = "90D"
    LAST_YEAR = "1Y"

    @property
    def span(self) -> Optional[timedelta]:
        return _WINDOW_SPANS.get(self)


_WINDOW_SPANS = {
    DateWindow.LAST_7_DAYS: timedelta(days=7),
    DateWindow.LAST_30_DAYS: timedelta(days=30),
    DateWindow.LAST_90_DAYS: timedelta(days=90),
    DateWindow.LAST_YEAR: timedelta(days=365),
}


class LedgerCriteria(BaseModel):
    """Filter criteria; the defaults match everything."""
    model_config = ConfigDict(frozen=True)

    search_text: str = Field(default="", description="Case-insensitive substring")
    kind: Union[TransactionKind, Literal["ALL"]] = Field(default=ALL, description="Kind or ALL")
    container_id: str = Field(default=ALL, description="Container id or ALL")
    date_window: DateWindow = Field(default=DateWindow.ALL, description="Relative window or ALL")


class LedgerSummary(BaseModel):
    """Aggregate counters and totals over a ledger."""
    total_count: int = Field(default=0, description="Number of transactions")
    count_by_kind: Dict[TransactionKind, int] = Field(
        default_factory=lambda: {kind: 0 for kind in TransactionKind},
        description="Number of transactions per kind",
    )
    total_amount: Decimal = Field(default=Decimal("0"), description="Sum of absolute amounts, all currencies")
    amount_by_currency: Dict[str, Decimal] = Field(
        default_factory=dict, description="Sum of absolute amounts per currency"
    )

    @computed_field
    @property
    def currencies(self) -> List[str]:
        return sorted(self.amount_by_currency)

    @computed_field
    @property
    def mixed_currency(self) -> bool:
        """True when ``total_amount`` adds up more than one unit of account."""
        return len(self.amount_by_currency) > 1


class LedgerStatus(str, Enum):
    """Consumer-visible aggregation status."""
    IDLE = "IDLE"
    LOADING = "LOADING"
    ERROR = "ERROR"
    READY = "READY"


class FetchFailure(BaseModel):
    """One failed per-container, per-record-type request."""
    model_config = ConfigDict(frozen=True)

    container_id: str
    record_type: RecordType
    error: str


class LedgerState(BaseModel):
    """Snapshot of a ledger store; replaced wholesale on every commit."""
    model_config = ConfigDict(frozen=True)

    status: LedgerStatus = LedgerStatus.IDLE
    ledger: Tuple[Transaction, ...] = ()
    error: Optional[str] = None
    failures: Tuple[FetchFailure, ...] = ()
    generation: int = 0
    updated_at: Optional[datetime] = None

    @property
    def partial(self) -> bool:
        return self.status == LedgerStatus.READY and bool(self.failures)
