"""Ledger export endpoints."""
from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from io import BytesIO
from typing import Sequence
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter
from portfolio_ledger.api.deps import get_criteria, get_registry, raise_on_unavailable
from portfolio_ledger.models.ledger import LedgerCriteria, LedgerSummary
from portfolio_ledger.models.transaction import Transaction, TransactionKind
from portfolio_ledger.services.ledger_query import filter_ledger, summarize
from portfolio_ledger.services.ledger_store import LedgerStoreRegistry
from portfolio_ledger.utils.timeutils import utcnow

router = APIRouter()

EXCEL_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

TRANSACTION_HEADERS = [
    "Key", "Date", "Kind", "Portfolio", "Description", "Amount", "Currency",
    "Side", "Symbol", "Asset", "Quantity", "Price", "Flow Type", "Funding Source",
    "Units", "NAV per Unit", "Created At",
]


def _cell(value) -> str:
    return "" if value is None else str(value)


def _transaction_row(tx: Transaction) -> list:
    return [
        tx.key,
        tx.occurred_at.isoformat(),
        tx.kind.value,
        tx.container_name,
        tx.description,
        str(tx.amount),
        tx.currency,
        _cell(getattr(tx, "side", None)),
        _cell(getattr(tx, "asset_symbol", None)),
        _cell(getattr(tx, "asset_name", None)),
        _cell(getattr(tx, "quantity", None)),
        _cell(getattr(tx, "price", None)),
        _cell(getattr(tx, "flow_type", None)),
        _cell(getattr(tx, "funding_source", None)),
        _cell(getattr(tx, "units", None)),
        _cell(getattr(tx, "nav_per_unit", None)),
        tx.created_at.isoformat() if tx.created_at else "",
    ]


def generate_ledger_workbook(account_id: str, ledger: Sequence[Transaction], summary: LedgerSummary) -> BytesIO:
    """
    Generate an Excel workbook from a ledger.

    Creates two sheets:
    1. Summary - counters and totals
    2. Transactions - one row per ledger entry, newest first
    """
    wb = Workbook()

    # Remove default sheet
    if "Sheet" in wb.sheetnames:
        wb.remove(wb["Sheet"])

    header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF")

    # Summary sheet
    ws_summary = wb.create_sheet("Summary", 0)
    ws_summary.append(["Transaction Ledger"])
    ws_summary.append(["Account", account_id])
    ws_summary.append(["Generated At", utcnow().isoformat()])
    ws_summary.append([])
    ws_summary.append(["Metric", "Value"])
    ws_summary.append(["Total Transactions", summary.total_count])
    ws_summary.append(["Trades", summary.count_by_kind.get(TransactionKind.TRADE, 0)])
    ws_summary.append(["Cash Flows", summary.count_by_kind.get(TransactionKind.CASH_FLOW, 0)])
    ws_summary.append(["Fund Unit Transactions", summary.count_by_kind.get(TransactionKind.FUND_UNIT, 0)])
    ws_summary.append(["Total Amount (absolute)", str(summary.total_amount)])
    for currency in summary.currencies:
        ws_summary.append([f"Total Amount {currency}", str(summary.amount_by_currency[currency])])

    for cell in ws_summary[5]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center")

    # Transactions sheet
    ws_tx = wb.create_sheet("Transactions", 1)
    ws_tx.append(TRANSACTION_HEADERS)
    for cell in ws_tx[1]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center")

    for tx in ledger:
        ws_tx.append(_transaction_row(tx))

    # Auto-adjust column widths
    for column in ws_tx.columns:
        column_letter = get_column_letter(column[0].column)
        max_length = max(len(_cell(cell.value)) for cell in column)
        ws_tx.column_dimensions[column_letter].width = min(max_length + 2, 50)

    output = BytesIO()
    wb.save(output)
    output.seek(0)

    return output


@router.get("/ledger/{account_id}/excel")
async def export_ledger_excel(
    account_id: str,
    criteria: LedgerCriteria = Depends(get_criteria),
    registry: LedgerStoreRegistry = Depends(get_registry),
):
    """Download the filtered ledger and its summary as an Excel file."""
    state = await registry.get(account_id).ensure_loaded()
    raise_on_unavailable(account_id, state)

    ledger = filter_ledger(state.ledger, criteria)
    excel_file = generate_ledger_workbook(account_id, ledger, summarize(ledger))
    return StreamingResponse(
        excel_file,
        media_type=EXCEL_MEDIA_TYPE,
        headers={
            "Content-Disposition": f"attachment; filename=ledger-{account_id}.xlsx"
        },
    )
