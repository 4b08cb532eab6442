"""Raw record shapes returned by the portfolio API.

Field names follow the remote API (camelCase aliases); every model also
accepts the snake_case names. Unknown fields are kept so that nothing the
source sends is silently lost before normalization.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional
from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field
from portfolio_ledger.utils.timeutils import parse_timestamp


def _id_to_str(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


SourceId = Annotated[str, BeforeValidator(_id_to_str)]
Timestamp = Annotated[datetime, BeforeValidator(parse_timestamp)]


class RecordType(str, Enum):
    """Source record types, one per backend collection."""
    TRADE = "trade"
    CASH_FLOW = "cash_flow"
    FUND_UNIT = "fund_unit"


class RawRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)


class RawAsset(RawRecord):
    symbol: Optional[str] = None
    name: Optional[str] = None


class RawTrade(RawRecord):
    """Trade execution as served by ``GET /api/v1/trades``."""
    trade_id: SourceId = Field(validation_alias=AliasChoices("tradeId", "trade_id", "id"))
    trade_date: Timestamp = Field(validation_alias=AliasChoices("tradeDate", "trade_date"))
    side: str
    quantity: Optional[Decimal] = None
    price: Optional[Decimal] = None
    total_value: Optional[Decimal] = Field(None, validation_alias=AliasChoices("totalValue", "total_value"))
    fee: Optional[Decimal] = None
    asset: Optional[RawAsset] = None
    asset_symbol: Optional[str] = Field(None, validation_alias=AliasChoices("assetSymbol", "asset_symbol"))
    asset_name: Optional[str] = Field(None, validation_alias=AliasChoices("assetName", "asset_name"))
    created_at: Optional[Timestamp] = Field(None, validation_alias=AliasChoices("createdAt", "created_at"))

    @property
    def symbol(self) -> Optional[str]:
        if self.asset_symbol:
            return self.asset_symbol
        return self.asset.symbol if self.asset else None

    @property
    def name(self) -> Optional[str]:
        if self.asset_name:
            return self.asset_name
        return self.asset.name if self.asset else None


class RawCashFlow(RawRecord):
    """Cash-flow entry as served by ``GET /api/v1/portfolios/{id}/cash-flows``."""
    cashflow_id: SourceId = Field(validation_alias=AliasChoices("cashflowId", "cashFlowId", "cashflow_id", "id"))
    flow_date: Timestamp = Field(validation_alias=AliasChoices("flowDate", "flow_date"))
    amount: Decimal
    type: str
    description: Optional[str] = None
    status: Optional[str] = None
    funding_source: Optional[str] = Field(None, validation_alias=AliasChoices("fundingSource", "funding_source"))
    currency: Optional[str] = None
    created_at: Optional[Timestamp] = Field(None, validation_alias=AliasChoices("createdAt", "created_at"))


class RawFundUnit(RawRecord):
    """Fund-unit subscription or redemption of an investor holding."""
    transaction_id: SourceId = Field(validation_alias=AliasChoices("transactionId", "transaction_id", "id"))
    holding_id: Optional[SourceId] = Field(None, validation_alias=AliasChoices("holdingId", "holding_id"))
    holding_type: str = Field(validation_alias=AliasChoices("holdingType", "holding_type"))
    units: Optional[Decimal] = None
    nav_per_unit: Optional[Decimal] = Field(None, validation_alias=AliasChoices("navPerUnit", "nav_per_unit"))
    amount: Decimal
    transaction_date: Optional[Timestamp] = Field(
        None, validation_alias=AliasChoices("transactionDate", "transaction_date")
    )
    created_at: Optional[Timestamp] = Field(None, validation_alias=AliasChoices("createdAt", "created_at"))
