"""Transaction normalization: one mapping rule per source record type."""
from decimal import Decimal
from functools import wraps
from typing import Any, Callable, Dict, List, Mapping, Optional
from pydantic import ValidationError
from portfolio_ledger.models.container import Container
from portfolio_ledger.models.raw import RawCashFlow, RawFundUnit, RawTrade, RecordType
from portfolio_ledger.models.transaction import (
    CashFlowTransaction,
    FundUnitTransaction,
    TradeTransaction,
    Transaction,
)
from portfolio_ledger.utils.errors import NormalizationError
from portfolio_ledger.utils.logging_setup import get_logger

logger = get_logger(__name__)

REDEMPTION_TYPES = {"REDEEM", "REDEMPTION"}


def _fmt(value: Optional[Decimal]) -> str:
    """Render a decimal without exponent or trailing zeros."""
    if value is None:
        return ""
    return format(value.normalize(), "f")


def _parse(model, raw: Mapping[str, Any]):
    if isinstance(raw, model):
        return raw
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise NormalizationError(f"Invalid {model.__name__}: {e.error_count()} error(s)") from e


Normalizer = Callable[[Mapping[str, Any], Container], Transaction]


def _contained(normalize: Normalizer) -> Normalizer:
    """Report any failure to map a single record as ``NormalizationError``."""
    @wraps(normalize)
    def wrapper(raw: Mapping[str, Any], container: Container) -> Transaction:
        try:
            return normalize(raw, container)
        except NormalizationError:
            raise
        except (ArithmeticError, ValueError, TypeError) as e:
            raise NormalizationError(f"{normalize.__name__} failed: {e!r}") from e
    return wrapper


@_contained
def normalize_trade(raw: Mapping[str, Any], container: Container) -> TradeTransaction:
    """
    Map a raw trade execution into a transaction.

    ``amount`` is the unsigned total value (``totalValue``, else
    ``quantity * price``); the side is carried separately.

    Raises:
        NormalizationError: record is malformed or has no derivable value
    """
    trade = _parse(RawTrade, raw)

    if trade.total_value is not None:
        amount = abs(trade.total_value)
    elif trade.quantity is not None and trade.price is not None:
        amount = abs(trade.quantity * trade.price)
    else:
        raise NormalizationError(f"Trade {trade.trade_id} has neither total value nor quantity and price")

    side = trade.side.strip().upper()
    parts = [side, _fmt(trade.quantity), trade.symbol or "Asset"]
    description = " ".join(p for p in parts if p)

    return TradeTransaction(
        id=trade.trade_id,
        container_id=container.id,
        container_name=container.name,
        occurred_at=trade.trade_date,
        amount=amount,
        currency=container.currency,
        description=description,
        created_at=trade.created_at,
        side=side,
        asset_symbol=trade.symbol,
        asset_name=trade.name,
        quantity=trade.quantity,
        price=trade.price,
        fee=trade.fee,
    )


@_contained
def normalize_cash_flow(raw: Mapping[str, Any], container: Container) -> CashFlowTransaction:
    """Map a raw cash-flow entry; the signed amount is kept as given."""
    flow = _parse(RawCashFlow, raw)

    description = (flow.description or "").strip() or f"{flow.type} transaction"

    return CashFlowTransaction(
        id=flow.cashflow_id,
        container_id=container.id,
        container_name=container.name,
        occurred_at=flow.flow_date,
        amount=flow.amount,
        currency=container.currency,
        description=description,
        created_at=flow.created_at,
        flow_type=flow.type,
        funding_source=flow.funding_source,
        status=flow.status,
    )


@_contained
def normalize_fund_unit(raw: Mapping[str, Any], container: Container) -> FundUnitTransaction:
    """
    Map a raw fund-unit operation.

    Subscriptions are positive and redemptions negative, like cash flows.
    The operation date falls back to the creation time when absent.
    """
    op = _parse(RawFundUnit, raw)

    occurred_at = op.transaction_date or op.created_at
    if occurred_at is None:
        raise NormalizationError(f"Fund-unit transaction {op.transaction_id} has no date")

    holding_type = op.holding_type.strip().upper()
    amount = -abs(op.amount) if holding_type in REDEMPTION_TYPES else abs(op.amount)

    if op.units is not None:
        description = f"{holding_type} {_fmt(op.units)} units"
    else:
        description = f"{holding_type} fund units"
    if op.nav_per_unit is not None:
        description += f" at {_fmt(op.nav_per_unit)}"

    return FundUnitTransaction(
        id=op.transaction_id,
        container_id=container.id,
        container_name=container.name,
        occurred_at=occurred_at,
        amount=amount,
        currency=container.currency,
        description=description,
        created_at=op.created_at,
        holding_id=op.holding_id,
        holding_type=holding_type,
        units=op.units,
        nav_per_unit=op.nav_per_unit,
    )


# Adding a record type means adding one entry here
NORMALIZERS: Dict[RecordType, Normalizer] = {
    RecordType.TRADE: normalize_trade,
    RecordType.CASH_FLOW: normalize_cash_flow,
    RecordType.FUND_UNIT: normalize_fund_unit,
}


def normalize_records(
    records: List[Mapping[str, Any]],
    container: Container,
    record_type: RecordType,
) -> List[Transaction]:
    """
    Normalize a batch of raw records of one type.

    Records that cannot be normalized are dropped with a warning; they never
    abort the batch.
    """
    normalize = NORMALIZERS[record_type]
    transactions = []
    dropped = 0
    for raw in records:
        try:
            transactions.append(normalize(raw, container))
        except NormalizationError as e:
            dropped += 1
            logger.warning(
                "Dropping malformed %s record in container %s: %s",
                record_type.value, container.id, e,
            )

    if dropped:
        logger.warning("Dropped %d of %d %s record(s) in container %s",
                       dropped, len(records), record_type.value, container.id)
    return transactions
