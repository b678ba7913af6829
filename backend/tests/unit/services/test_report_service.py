"""
Unit Tests for Report Service
Tests for: daily aggregation, day boundaries, expenses, DailyReport upsert
"""
from datetime import date, datetime, timedelta

import pytest
from sqlalchemy import select

from app.core.exceptions import ExpenseNotFoundError
from app.models.expense import DailyExpense, ExpenseCategory
from app.models.order import Order, OrderItem, OrderStatus, PaymentStatus, PrintSide, PrintType, PaperSize
from app.models.report import DailyReport
from app.schemas.report import ExpenseCreate
from app.services.pricing_service import default_rates
from app.services.report_service import (
    DailyReportData,
    OrderLine,
    add_expense,
    build_daily_report,
    delete_expense,
    status_breakdown,
    upsert_daily_report,
)
from app.utils.dates import day_bounds
from app.utils.orders import generate_order_number

REPORT_DAY = date(2024, 3, 15)


def make_order(user, created_at, items, status=OrderStatus.PENDING, payment_status=PaymentStatus.PENDING):
    """items: (pages_to_print, copies, print_type)"""
    order_items = [
        OrderItem(
            position=index,
            file_name=f"file-{index}.pdf",
            file_url=f"/uploads/file-{index}.pdf",
            page_count=pages,
            pages_to_print=pages,
            copies=copies,
            print_type=print_type,
            paper_size=PaperSize.A4,
            print_side=PrintSide.SINGLE,
            price=pages * copies * default_rates().price_for(print_type),
        )
        for index, (pages, copies, print_type) in enumerate(items)
    ]
    return Order(
        order_number=generate_order_number(),
        user=user,
        status=status,
        payment_status=payment_status,
        total_amount=sum(item.price for item in order_items),
        created_at=created_at,
        items=order_items,
    )


def make_line(amount, bw_pages=0, color_pages=0, payment_status=PaymentStatus.PENDING):
    return OrderLine(
        order_id="o1", order_number="FP-1-AAAA", customer_name="A", customer_email="a@example.com",
        customer_phone="N/A", copies=1, pages=bw_pages + color_pages, bw_pages=bw_pages,
        color_pages=color_pages, amount=amount, status=OrderStatus.PENDING,
        payment_status=payment_status, created_at=datetime(2024, 3, 15, 6, 0),
    )


class TestDailyReportData:
    """Test the derived figures"""

    def test_totals_and_profit(self):
        report = DailyReportData(
            day=REPORT_DAY,
            rates=default_rates(),
            orders=[
                make_line(24.0, bw_pages=8, payment_status=PaymentStatus.COMPLETED),
                make_line(24.0, color_pages=2),
            ],
            expenses=[DailyExpense(category=ExpenseCategory.PAPER, amount=10.0)],
        )

        assert report.total_orders == 2
        assert report.gross_revenue == 48.0
        assert report.payments_received == 24.0
        assert report.payments_pending == 24.0
        # 8 x 1 + 2 x 5
        assert report.production_cost == 18.0
        assert report.other_expenses == 10.0
        assert report.total_costs == 28.0
        assert report.net_profit == 20.0
        assert report.profit_margin == 41.7

    def test_empty_day(self):
        report = DailyReportData(day=REPORT_DAY, rates=default_rates())

        assert report.net_profit == 0
        assert report.profit_margin == 0.0
        assert report.summary()["total_orders"] == 0

    def test_status_breakdown_follows_pipeline_and_skips_zero(self):
        orders = [
            Order(status=OrderStatus.DELIVERED),
            Order(status=OrderStatus.PENDING),
            Order(status=OrderStatus.CANCELLED),
            Order(status=OrderStatus.PENDING),
        ]
        breakdown = status_breakdown(orders)

        assert breakdown == {"PENDING": 2, "DELIVERED": 1, "CANCELLED": 1}
        assert list(breakdown) == ["PENDING", "DELIVERED", "CANCELLED"]


class TestBuildDailyReport:
    """Test aggregation against the database"""

    @pytest.mark.asyncio
    async def test_aggregates_one_local_day(self, db_session, test_user, admin_user):
        start, end = day_bounds(REPORT_DAY)
        db_session.add_all([
            make_order(test_user, start + timedelta(hours=2), [(4, 2, PrintType.BW), (2, 1, PrintType.COLOR)],
                       payment_status=PaymentStatus.COMPLETED),
            make_order(test_user, start + timedelta(hours=3), [(10, 1, PrintType.BW)], status=OrderStatus.CANCELLED),
            # previous and next local day
            make_order(test_user, start - timedelta(seconds=1), [(1, 1, PrintType.BW)]),
            make_order(test_user, end, [(1, 1, PrintType.BW)]),
        ])
        await add_expense(
            db_session,
            ExpenseCreate(date=REPORT_DAY, category=ExpenseCategory.INK, amount=5.0, description="Toner"),
            admin_user,
        )
        await db_session.commit()

        report = await build_daily_report(db_session, REPORT_DAY)

        assert report.total_orders == 1
        line = report.orders[0]
        assert line.copies == 3
        assert line.pages == 10
        assert line.bw_pages == 8
        assert line.color_pages == 2
        assert line.amount == 48.0
        assert line.customer_email == test_user.email
        assert report.production_cost == 18.0
        assert report.other_expenses == 5.0
        assert report.net_profit == 25.0
        assert report.status_breakdown == {"PENDING": 1, "CANCELLED": 1}

    @pytest.mark.asyncio
    async def test_upsert_replaces_existing_row(self, db_session, test_user):
        start, _ = day_bounds(REPORT_DAY)
        db_session.add(make_order(test_user, start + timedelta(hours=1), [(3, 1, PrintType.BW)]))
        await db_session.commit()

        await upsert_daily_report(db_session, await build_daily_report(db_session, REPORT_DAY))
        db_session.add(make_order(test_user, start + timedelta(hours=5), [(2, 1, PrintType.BW)]))
        await db_session.commit()
        await upsert_daily_report(db_session, await build_daily_report(db_session, REPORT_DAY))
        await db_session.commit()

        rows = (await db_session.execute(select(DailyReport))).scalars().all()
        assert len(rows) == 1
        assert rows[0].total_orders == 2
        assert rows[0].gross_revenue == 15.0


class TestExpenses:

    @pytest.mark.asyncio
    async def test_add_and_delete(self, db_session, admin_user):
        expense = await add_expense(
            db_session,
            ExpenseCreate(date=REPORT_DAY, category=ExpenseCategory.RENT, amount=500.0),
            admin_user,
        )
        assert expense.created_by == admin_user.email

        day = await delete_expense(db_session, expense.id, admin_user)

        assert day == REPORT_DAY
        assert await db_session.get(DailyExpense, expense.id) is None

    @pytest.mark.asyncio
    async def test_delete_missing_expense(self, db_session, admin_user):
        with pytest.raises(ExpenseNotFoundError):
            await delete_expense(db_session, "00000000-0000-0000-0000-000000000000", admin_user)
