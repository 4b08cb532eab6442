"""Unified transaction model."""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class TransactionKind(str, Enum):
    """Transaction kind enumeration."""
    TRADE = "TRADE"
    CASH_FLOW = "CASH_FLOW"
    FUND_UNIT = "FUND_UNIT"


class TransactionBase(BaseModel):
    """Fields shared by every ledger entry, whatever its source."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Identifier, unique within (kind, container_id)")
    container_id: str = Field(..., description="Owning container")
    container_name: str = Field(..., description="Owning container display name")
    occurred_at: datetime = Field(..., description="Ordering instant (UTC)")
    amount: Decimal = Field(..., description="Signed amount, sign convention depends on kind")
    currency: str = Field(..., description="Unit of account inherited from the container")
    description: str = Field(..., description="Synthesized human-readable summary")
    created_at: Optional[datetime] = Field(None, description="Source creation time, tie-break only")

    @property
    def key(self) -> str:
        """Globally unique key: ``kind:container_id:id``."""
        return f"{self.kind.value}:{self.container_id}:{self.id}"


class TradeTransaction(TransactionBase):
    """Trade execution. ``amount`` is the unsigned total value."""
    kind: Literal[TransactionKind.TRADE] = TransactionKind.TRADE
    side: Optional[str] = Field(None, description="BUY or SELL")
    asset_symbol: Optional[str] = None
    asset_name: Optional[str] = None
    quantity: Optional[Decimal] = None
    price: Optional[Decimal] = None
    fee: Optional[Decimal] = None


class CashFlowTransaction(TransactionBase):
    """Cash movement. ``amount`` is signed by direction."""
    kind: Literal[TransactionKind.CASH_FLOW] = TransactionKind.CASH_FLOW
    flow_type: Optional[str] = Field(None, description="DEPOSIT, WITHDRAWAL, DIVIDEND, ...")
    funding_source: Optional[str] = None
    status: Optional[str] = None


class FundUnitTransaction(TransactionBase):
    """Fund-unit subscription (positive) or redemption (negative)."""
    kind: Literal[TransactionKind.FUND_UNIT] = TransactionKind.FUND_UNIT
    holding_id: Optional[str] = None
    holding_type: Optional[str] = Field(None, description="SUBSCRIBE or REDEEM")
    units: Optional[Decimal] = None
    nav_per_unit: Optional[Decimal] = None


Transaction = Annotated[
    Union[TradeTransaction, CashFlowTransaction, FundUnitTransaction],
    Field(discriminator="kind"),
]
