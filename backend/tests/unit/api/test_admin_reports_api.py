"""
Unit Tests for Admin Daily Report Endpoints
"""
import io
from datetime import date

import pytest
from httpx import AsyncClient
from openpyxl import load_workbook
from sqlalchemy import select

from app.core.config import settings
from app.models.report import DailyReport
from app.utils.dates import local_today


@pytest.fixture
def reports_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, '_reports_dir', tmp_path / 'reports')
    return tmp_path / 'reports'


class TestDailyReport:

    @pytest.mark.asyncio
    async def test_requires_admin(self, client: AsyncClient, auth_headers):
        response = await client.get('/api/v1/admin/reports', headers=auth_headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_empty_day(self, client: AsyncClient, admin_auth_headers):
        response = await client.get(
            '/api/v1/admin/reports', headers=admin_auth_headers, params={'date': '2020-01-01'},
        )

        assert response.status_code == 200
        data = response.json()
        assert data['date'] == '2020-01-01'
        assert data['summary']['total_orders'] == 0
        assert data['summary']['profit_margin'] == 0.0
        assert data['orders'] == []
        assert data['status_breakdown'] == {}

    @pytest.mark.asyncio
    async def test_today_with_order_and_expense(self, client: AsyncClient, admin_auth_headers, placed_order):
        today = local_today().isoformat()
        created = await client.post(
            '/api/v1/admin/reports/expenses',
            headers=admin_auth_headers,
            json={'date': today, 'category': 'paper', 'amount': 5, 'description': 'One ream'},
        )
        assert created.status_code == 201

        response = await client.get('/api/v1/admin/reports', headers=admin_auth_headers)

        data = response.json()
        summary = data['summary']
        assert data['date'] == today
        assert summary['total_orders'] == 1
        assert summary['total_copies'] == 2
        assert summary['total_pages'] == 8
        assert summary['bw_pages'] == 8
        assert summary['color_pages'] == 0
        assert summary['gross_revenue'] == 24.0
        assert summary['payments_pending'] == 24.0
        assert summary['production_cost'] == 8.0
        assert summary['other_expenses'] == 5.0
        assert summary['net_profit'] == 11.0
        assert summary['profit_margin'] == 45.8
        assert data['orders'][0]['order_number'] == placed_order['order_number']
        assert data['expenses'][0]['description'] == 'One ream'
        assert data['status_breakdown'] == {'PENDING': 1}
        assert data['pricing']['bw_price_per_page'] == 3.0

    @pytest.mark.asyncio
    async def test_cancelled_orders_only_in_breakdown(self, client: AsyncClient, admin_auth_headers, placed_order):
        await client.patch(
            f"/api/v1/admin/orders/{placed_order['id']}",
            headers=admin_auth_headers,
            json={'status': 'CANCELLED'},
        )

        data = (await client.get('/api/v1/admin/reports', headers=admin_auth_headers)).json()

        assert data['summary']['total_orders'] == 0
        assert data['summary']['gross_revenue'] == 0.0
        assert data['status_breakdown'] == {'CANCELLED': 1}

    @pytest.mark.asyncio
    async def test_invalid_date(self, client: AsyncClient, admin_auth_headers):
        response = await client.get(
            '/api/v1/admin/reports', headers=admin_auth_headers, params={'date': '15-03-2024'},
        )
        assert response.status_code == 422


class TestExpenses:

    @pytest.mark.asyncio
    async def test_create_expense(self, client: AsyncClient, admin_auth_headers, admin_user):
        response = await client.post(
            '/api/v1/admin/reports/expenses',
            headers=admin_auth_headers,
            json={'date': '2024-03-15', 'category': 'ink', 'amount': 450.5},
        )

        assert response.status_code == 201
        data = response.json()
        assert data['category'] == 'ink'
        assert data['amount'] == 450.5
        assert data['created_by'] == admin_user.email

    @pytest.mark.asyncio
    @pytest.mark.parametrize('payload', [
        {'date': '2024-03-15', 'category': 'snacks', 'amount': 10},
        {'date': '2024-03-15', 'category': 'paper', 'amount': -1},
        {'category': 'paper', 'amount': 10},
    ])
    async def test_invalid_expense(self, client: AsyncClient, admin_auth_headers, payload):
        response = await client.post('/api/v1/admin/reports/expenses', headers=admin_auth_headers, json=payload)
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_delete_expense(self, client: AsyncClient, admin_auth_headers):
        created = await client.post(
            '/api/v1/admin/reports/expenses',
            headers=admin_auth_headers,
            json={'date': '2024-03-15', 'category': 'rent', 'amount': 1000},
        )

        response = await client.delete(
            f"/api/v1/admin/reports/expenses/{created.json()['id']}", headers=admin_auth_headers,
        )

        assert response.status_code == 200
        assert response.json() == {'success': True, 'message': 'Expense deleted'}

        report = await client.get(
            '/api/v1/admin/reports', headers=admin_auth_headers, params={'date': '2024-03-15'},
        )
        assert report.json()['expenses'] == []

    @pytest.mark.asyncio
    async def test_delete_missing_expense(self, client: AsyncClient, admin_auth_headers):
        response = await client.delete(
            '/api/v1/admin/reports/expenses/00000000-0000-0000-0000-000000000000',
            headers=admin_auth_headers,
        )

        assert response.status_code == 404
        assert response.json()['error']['code'] == 'EXPENSE_NOT_FOUND'


class TestExport:

    @pytest.mark.asyncio
    async def test_export_workbook(self, client: AsyncClient, admin_auth_headers, placed_order):
        today = local_today().isoformat()
        response = await client.get(
            '/api/v1/admin/reports/export', headers=admin_auth_headers, params={'date': today},
        )

        assert response.status_code == 200
        assert response.headers['content-type'].startswith(
            'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
        )
        assert response.headers['content-disposition'] == (
            f'attachment; filename="FlashPrint_DailyReport_{today}.xlsx"'
        )

        wb = load_workbook(io.BytesIO(response.content))
        assert len(wb.sheetnames) >= 2


class TestStoredWorkbooks:

    @pytest.mark.asyncio
    async def test_list_empty(self, client: AsyncClient, admin_auth_headers, reports_dir):
        response = await client.get('/api/v1/admin/reports/excel/list', headers=admin_auth_headers)

        assert response.status_code == 200
        assert response.json() == {'reports': []}

    @pytest.mark.asyncio
    async def test_regenerate_then_list(self, client: AsyncClient, admin_auth_headers, reports_dir):
        response = await client.post(
            '/api/v1/admin/reports/excel', headers=admin_auth_headers, json={'date': '2024-03-15'},
        )

        assert response.status_code == 200
        data = response.json()
        assert data['success'] is True
        assert data['message'] == 'Daily report regenerated for 2024-03-15'
        assert data['file_name'] == 'FlashPrint_Orders_2024-03-15.xlsx'
        assert (reports_dir / data['file_name']).exists()

        listing = await client.get('/api/v1/admin/reports/excel/list', headers=admin_auth_headers)
        assert listing.json()['reports'] == ['FlashPrint_Orders_2024-03-15.xlsx']

    @pytest.mark.asyncio
    async def test_regenerate_defaults_to_today(self, client: AsyncClient, admin_auth_headers, reports_dir):
        response = await client.post('/api/v1/admin/reports/excel', headers=admin_auth_headers)

        assert response.status_code == 200
        assert response.json()['date'] == local_today().isoformat()

    @pytest.mark.asyncio
    async def test_download_generates_missing_workbook(self, client: AsyncClient, admin_auth_headers, reports_dir):
        response = await client.get(
            '/api/v1/admin/reports/excel', headers=admin_auth_headers, params={'date': '2024-03-15'},
        )

        assert response.status_code == 200
        assert 'FlashPrint_Orders_2024-03-15.xlsx' in response.headers['content-disposition']
        assert (reports_dir / 'FlashPrint_Orders_2024-03-15.xlsx').exists()
        load_workbook(io.BytesIO(response.content))

    @pytest.mark.asyncio
    async def test_regenerate_stores_daily_totals(self, client: AsyncClient, admin_auth_headers,
                                                  reports_dir, db_session):
        await client.post('/api/v1/admin/reports/excel', headers=admin_auth_headers, json={'date': '2024-03-15'})

        row = (await db_session.execute(
            select(DailyReport).where(DailyReport.date == date(2024, 3, 15))
        )).scalar_one()
        assert row.total_orders == 0
