"""
Report Service - daily aggregation of orders, costs and profit

A calendar day is cut at local midnight (REPORT_UTC_OFFSET_MINUTES).
Cancelled orders are left out of volume and money totals but still show up
in the status breakdown.

    production cost = B&W pages x B&W cost + colour pages x colour cost
    net profit      = gross revenue - production cost - other expenses
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import ExpenseNotFoundError
from app.core.logging_config import logger
from app.models.expense import DailyExpense
from app.models.order import Order, OrderStatus, PaymentStatus, PrintType
from app.models.report import DailyReport
from app.models.user import User
from app.schemas.report import ExpenseCreate
from app.services.pricing_service import PriceRates, get_pricing
from app.utils.dates import day_bounds, local_today


@dataclass
class OrderLine:
    """Per-order figures used by the report and the workbooks"""
    order_id: str
    order_number: str
    customer_name: str
    customer_email: str
    customer_phone: str
    copies: int
    pages: int
    bw_pages: int
    color_pages: int
    amount: float
    status: OrderStatus
    payment_status: PaymentStatus
    created_at: datetime
    delivery_address: Optional[Dict[str, Any]] = None


@dataclass
class DailyReportData:
    day: date
    rates: PriceRates
    orders: List[OrderLine] = field(default_factory=list)
    expenses: List[DailyExpense] = field(default_factory=list)
    status_breakdown: Dict[str, int] = field(default_factory=dict)

    @property
    def total_orders(self) -> int:
        return len(self.orders)

    @property
    def total_copies(self) -> int:
        return sum(line.copies for line in self.orders)

    @property
    def total_pages(self) -> int:
        return sum(line.pages for line in self.orders)

    @property
    def bw_pages(self) -> int:
        return sum(line.bw_pages for line in self.orders)

    @property
    def color_pages(self) -> int:
        return sum(line.color_pages for line in self.orders)

    @property
    def gross_revenue(self) -> float:
        return float(sum(line.amount for line in self.orders))

    @property
    def payments_received(self) -> float:
        return float(sum(line.amount for line in self.orders if line.payment_status == PaymentStatus.COMPLETED))

    @property
    def payments_pending(self) -> float:
        return float(sum(line.amount for line in self.orders if line.payment_status == PaymentStatus.PENDING))

    @property
    def production_cost(self) -> float:
        return float(
            self.bw_pages * self.rates.bw_cost_per_page
            + self.color_pages * self.rates.color_cost_per_page
        )

    @property
    def other_expenses(self) -> float:
        return float(sum(expense.amount for expense in self.expenses))

    @property
    def total_costs(self) -> float:
        return self.production_cost + self.other_expenses

    @property
    def net_profit(self) -> float:
        return self.gross_revenue - self.production_cost - self.other_expenses

    @property
    def profit_margin(self) -> float:
        """Net profit as a percentage of gross revenue, one decimal"""
        if self.gross_revenue <= 0:
            return 0.0
        return round(self.net_profit / self.gross_revenue * 100, 1)

    def summary(self) -> Dict[str, Any]:
        return {
            "total_orders": self.total_orders,
            "total_copies": self.total_copies,
            "total_pages": self.total_pages,
            "bw_pages": self.bw_pages,
            "color_pages": self.color_pages,
            "gross_revenue": self.gross_revenue,
            "payments_received": self.payments_received,
            "payments_pending": self.payments_pending,
            "production_cost": self.production_cost,
            "other_expenses": self.other_expenses,
            "net_profit": self.net_profit,
            "profit_margin": self.profit_margin,
        }


def order_line(order: Order) -> OrderLine:
    """Collapse an order's items into copies and printed pages"""
    copies = pages = bw_pages = color_pages = 0
    for item in order.items:
        item_pages = item.printed_pages
        copies += item.copies
        pages += item_pages
        if item.print_type == PrintType.BW:
            bw_pages += item_pages
        else:
            color_pages += item_pages

    user = order.user
    return OrderLine(
        order_id=order.id,
        order_number=order.order_number,
        customer_name=(user.full_name if user else None) or "Unknown",
        customer_email=user.email if user else "Unknown",
        customer_phone=(user.phone if user else None) or "N/A",
        copies=copies,
        pages=pages,
        bw_pages=bw_pages,
        color_pages=color_pages,
        amount=float(order.total_amount or 0),
        status=order.status,
        payment_status=order.payment_status,
        created_at=order.created_at,
        delivery_address=order.delivery_address,
    )


def status_breakdown(orders: List[Order]) -> Dict[str, int]:
    """Order count per status, in pipeline order, statuses with no orders omitted"""
    counts = {status.value: 0 for status in OrderStatus}
    for order in orders:
        counts[OrderStatus(order.status).value] += 1
    return {status: count for status, count in counts.items() if count}


async def get_expenses_for_day(db: AsyncSession, day: date) -> List[DailyExpense]:
    result = await db.execute(
        select(DailyExpense)
        .where(DailyExpense.date == day)
        .order_by(DailyExpense.created_at)
    )
    return list(result.scalars().all())


async def build_daily_report(db: AsyncSession, day: Optional[date] = None) -> DailyReportData:
    """
    Aggregate one calendar day.

    Args:
        db: Database session
        day: Local calendar day, defaults to today

    Returns:
        DailyReportData with per-order lines, expenses and totals
    """
    day = day or local_today()
    start, end = day_bounds(day)

    result = await db.execute(
        select(Order)
        .options(selectinload(Order.items), selectinload(Order.user))
        .where(Order.created_at >= start, Order.created_at < end)
        .order_by(Order.created_at.asc())
    )
    orders = list(result.scalars().all())

    report = DailyReportData(
        day=day,
        rates=await get_pricing(db),
        orders=[order_line(o) for o in orders if o.status != OrderStatus.CANCELLED],
        expenses=await get_expenses_for_day(db, day),
        status_breakdown=status_breakdown(orders),
    )

    logger.debug(
        f"[Reports] {day.isoformat()}: {report.total_orders} orders, "
        f"gross {report.gross_revenue:.2f}, net {report.net_profit:.2f}"
    )
    return report


async def upsert_daily_report(db: AsyncSession, report: DailyReportData) -> DailyReport:
    """Store the aggregate for the report's day, replacing any earlier figures"""
    row = (await db.execute(
        select(DailyReport).where(DailyReport.date == report.day)
    )).scalar_one_or_none()

    if row is None:
        row = DailyReport(date=report.day)
        db.add(row)

    row.total_orders = report.total_orders
    row.total_copies = report.total_copies
    row.total_pages = report.total_pages
    row.bw_pages = report.bw_pages
    row.color_pages = report.color_pages
    row.gross_revenue = report.gross_revenue
    row.production_cost = report.production_cost
    row.other_expenses = report.other_expenses
    row.net_profit = report.net_profit
    row.updated_at = datetime.utcnow()

    await db.flush()
    return row


# ==================== EXPENSES ====================

async def add_expense(db: AsyncSession, data: ExpenseCreate, admin: User) -> DailyExpense:
    expense = DailyExpense(
        date=data.date,
        category=data.category,
        amount=data.amount,
        description=data.description or None,
        created_by=admin.email,
    )
    db.add(expense)
    await db.flush()

    logger.info(
        f"[Reports] Expense added: {data.category.value} {data.amount:.2f} on {data.date.isoformat()}",
        extra={"event_type": "expense_added", "admin_email": admin.email},
    )
    return expense


async def delete_expense(db: AsyncSession, expense_id: str, admin: User) -> date:
    """Delete an expense and return the day it was booked on"""
    expense = await db.get(DailyExpense, expense_id)
    if not expense:
        raise ExpenseNotFoundError(expense_id)

    day = expense.date
    await db.delete(expense)
    await db.flush()

    logger.info(
        f"[Reports] Expense {expense_id} deleted",
        extra={"event_type": "expense_deleted", "admin_email": admin.email},
    )
    return day
