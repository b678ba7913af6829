"""
Excel Export Service - daily report workbooks

Two workbooks are produced from the same DailyReportData:

- On-demand export (Summary / Orders / Expenses), streamed to the admin as
  FlashPrint_DailyReport_<date>.xlsx
- Stored daily workbook (Daily Summary / All Orders / Status Breakdown /
  Daily Expenses) kept under REPORTS_PATH as FlashPrint_Orders_<date>.xlsx
  and refreshed whenever orders change
"""

import io
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import AsyncSessionLocal
from app.core.exceptions import ReportGenerationError
from app.core.logging_config import logger
from app.services.report_service import DailyReportData, build_daily_report, upsert_daily_report
from app.utils.dates import local_today, to_local
from app.utils.orders import format_delivery_address


XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

header_fill = PatternFill(start_color="6366F1", end_color="6366F1", fill_type="solid")
header_font = Font(bold=True, color="FFFFFF", size=11)
section_font = Font(bold=True, size=12)
profit_font = Font(bold=True, color="22C55E", size=11)
loss_font = Font(bold=True, color="EF4444", size=11)

ORDER_COLUMNS = [
    ("S.No", 6),
    ("Order Number", 18),
    ("Order Date", 12),
    ("Order Time", 10),
    ("Customer Name", 20),
    ("Customer Email", 28),
    ("Customer Phone", 15),
    ("Copies", 8),
    ("Total Pages", 12),
    ("B&W Pages", 12),
    ("Color Pages", 12),
    ("Amount (₹)", 12),
    ("Payment Status", 15),
    ("Order Status", 18),
    ("Delivery Address", 35),
]

EXPORT_ORDER_COLUMNS = [
    ("S.No", 6),
    ("Order Number", 18),
    ("Customer Name", 20),
    ("Customer Email", 25),
    ("Copies", 8),
    ("Total Pages", 12),
    ("B&W Pages", 12),
    ("Color Pages", 12),
    ("Amount (₹)", 12),
    ("Status", 18),
    ("Time", 10),
]

EXPENSE_COLUMNS = [("S.No", 6), ("Category", 15), ("Description", 35), ("Amount (₹)", 12)]


def rupees(amount: float) -> str:
    return f"₹{amount:.2f}"


def export_file_name(day: date) -> str:
    return f"FlashPrint_DailyReport_{day.isoformat()}.xlsx"


def stored_file_name(day: date) -> str:
    return f"FlashPrint_Orders_{day.isoformat()}.xlsx"


# ==================== Sheet helpers ====================

def _write_table(ws: Worksheet, columns: Sequence[tuple], rows: Iterable[Sequence]) -> None:
    """Header row in the brand colour, then data rows"""
    ws.append([title for title, _ in columns])
    for cell in ws[1]:
        cell.fill = header_fill
        cell.font = header_font
    for row in rows:
        ws.append(list(row))
    for index, (_, width) in enumerate(columns, start=1):
        ws.column_dimensions[get_column_letter(index)].width = width


def _write_metrics(ws: Worksheet, metrics: List[tuple], widths=(30, 25)) -> None:
    """Two-column Metric / Value sheet; upper-case titles are section headings"""
    _write_table(ws, [("Metric", widths[0]), ("Value", widths[1])], [])
    for metric, value in metrics:
        ws.append([metric, value])
        row = ws.max_row
        if metric.isupper():
            ws.cell(row=row, column=1).font = section_font
        if metric == "NET PROFIT":
            ws.cell(row=row, column=2).font = loss_font if "-" in str(value) else profit_font


def _expense_rows(report: DailyReportData) -> List[list]:
    return [
        [index, expense.category.value.upper(), expense.description or "-", expense.amount]
        for index, expense in enumerate(report.expenses, start=1)
    ]


def _pricing_metrics(report: DailyReportData) -> List[tuple]:
    rates = report.rates
    return [
        ("B&W Price/Page", rupees(rates.bw_price_per_page)),
        ("Color Price/Page", rupees(rates.color_price_per_page)),
        ("B&W Cost/Page", rupees(rates.bw_cost_per_page)),
        ("Color Cost/Page", rupees(rates.color_cost_per_page)),
    ]


def _to_bytes(wb: Workbook) -> bytes:
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


# ==================== On-demand export ====================

def build_export_workbook(report: DailyReportData) -> Workbook:
    """Summary, Orders and Expenses sheets for the admin download"""
    wb = Workbook()

    summary = wb.active
    summary.title = "Summary"
    _write_metrics(summary, [
        ("Date", report.day.strftime("%d %B %Y")),
        ("Total Orders", report.total_orders),
        ("Total Copies", report.total_copies),
        ("Total Pages Printed", report.total_pages),
        ("B&W Pages", report.bw_pages),
        ("Color Pages", report.color_pages),
        ("", ""),
        ("REVENUE & COSTS", ""),
        ("Gross Revenue", rupees(report.gross_revenue)),
        ("Production Cost", rupees(report.production_cost)),
        ("Other Expenses", rupees(report.other_expenses)),
        ("", ""),
        ("NET PROFIT", rupees(report.net_profit)),
        ("", ""),
        ("PRICING CONFIG", ""),
        *_pricing_metrics(report),
    ], widths=(25, 20))

    orders = wb.create_sheet("Orders")
    _write_table(orders, EXPORT_ORDER_COLUMNS, [
        [
            index,
            line.order_number,
            line.customer_name,
            line.customer_email,
            line.copies,
            line.pages,
            line.bw_pages,
            line.color_pages,
            line.amount,
            line.status.value,
            to_local(line.created_at).strftime("%I:%M %p"),
        ]
        for index, line in enumerate(report.orders, start=1)
    ])

    expenses = wb.create_sheet("Expenses")
    _write_table(expenses, EXPENSE_COLUMNS, _expense_rows(report))

    return wb


def export_workbook_bytes(report: DailyReportData) -> bytes:
    return _to_bytes(build_export_workbook(report))


# ==================== Stored daily workbook ====================

def build_daily_workbook(report: DailyReportData, generated_at: Optional[datetime] = None) -> Workbook:
    """Daily Summary, All Orders, Status Breakdown and Daily Expenses sheets"""
    generated_at = generated_at or datetime.utcnow()
    wb = Workbook()

    summary = wb.active
    summary.title = "Daily Summary"
    _write_metrics(summary, [
        ("Report Date", report.day.strftime("%d %B %Y, %A")),
        ("Generated At", to_local(generated_at).strftime("%d/%m/%Y %I:%M %p")),
        ("", ""),
        ("═══ ORDER SUMMARY ═══", ""),
        ("Total Orders", report.total_orders),
        ("Total Copies", report.total_copies),
        ("Total Pages Printed", report.total_pages),
        ("B&W Pages", report.bw_pages),
        ("Color Pages", report.color_pages),
        ("", ""),
        ("═══ REVENUE BREAKDOWN ═══", ""),
        ("Gross Revenue", rupees(report.gross_revenue)),
        ("Payments Received", rupees(report.payments_received)),
        ("Payments Pending", rupees(report.payments_pending)),
        ("", ""),
        ("═══ COST ANALYSIS ═══", ""),
        ("Production Cost", rupees(report.production_cost)),
        ("Other Expenses", rupees(report.other_expenses)),
        ("Total Costs", rupees(report.total_costs)),
        ("", ""),
        ("═══ PROFIT ═══", ""),
        ("NET PROFIT", rupees(report.net_profit)),
        ("Profit Margin", f"{report.profit_margin:.1f}%"),
        ("", ""),
        ("═══ PRICING CONFIG ═══", ""),
        *_pricing_metrics(report),
    ])

    orders = wb.create_sheet("All Orders")
    rows = []
    for index, line in enumerate(report.orders, start=1):
        local_time = to_local(line.created_at)
        rows.append([
            index,
            line.order_number,
            local_time.strftime("%d/%m/%Y"),
            local_time.strftime("%I:%M %p"),
            line.customer_name,
            line.customer_email,
            line.customer_phone,
            line.copies,
            line.pages,
            line.bw_pages,
            line.color_pages,
            line.amount,
            line.payment_status.value,
            line.status.value,
            format_delivery_address(line.delivery_address),
        ])
    _write_table(orders, ORDER_COLUMNS, rows)
    if not rows:
        orders.append(["No orders for this date"])

    breakdown = wb.create_sheet("Status Breakdown")
    _write_table(breakdown, [("Status", 25), ("Count", 10)], [
        [status.replace("_", " "), count] for status, count in report.status_breakdown.items()
    ])

    expenses = wb.create_sheet("Daily Expenses")
    _write_table(expenses, EXPENSE_COLUMNS, _expense_rows(report))

    return wb


def get_reports_dir() -> Path:
    reports_dir = settings.REPORTS_DIR
    reports_dir.mkdir(parents=True, exist_ok=True)
    return reports_dir


def get_daily_workbook_path(day: date) -> Optional[Path]:
    """Path of the stored workbook for a day, None if it was never generated"""
    path = get_reports_dir() / stored_file_name(day)
    return path if path.exists() else None


def list_daily_workbooks() -> List[str]:
    """Stored workbook file names, newest first"""
    return sorted(
        (p.name for p in get_reports_dir().glob("*.xlsx") if p.is_file()),
        reverse=True,
    )


async def save_daily_workbook(db: AsyncSession, day: Optional[date] = None) -> Path:
    """
    Rebuild the stored workbook for a day and upsert its DailyReport row.

    Returns:
        Path of the written workbook
    """
    day = day or local_today()
    report = await build_daily_report(db, day)
    path = get_reports_dir() / stored_file_name(day)

    try:
        build_daily_workbook(report).save(path)
    except OSError as e:
        logger.log_error_with_context(e, "save_daily_workbook", report_date=day.isoformat())
        raise ReportGenerationError(f"Could not write daily workbook: {e}", day.isoformat()) from e

    await upsert_daily_report(db, report)
    logger.info(
        f"[Reports] Daily workbook saved: {path}",
        extra={"event_type": "daily_workbook_saved", "report_date": day.isoformat()},
    )
    return path


async def refresh_daily_workbook(day: Optional[date] = None) -> None:
    """
    Background task: regenerate the stored workbook in its own session.

    Failures are logged and never reach the request that scheduled the task.
    """
    if not settings.REPORT_AUTOSAVE_ENABLED:
        return

    try:
        async with AsyncSessionLocal() as db:
            await save_daily_workbook(db, day)
            await db.commit()
    except Exception as e:
        logger.log_error_with_context(e, "refresh_daily_workbook")
