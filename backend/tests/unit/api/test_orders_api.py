"""
Unit Tests for customer Order API Endpoints
"""
import json
from pathlib import Path
from types import SimpleNamespace

import pytest
from httpx import AsyncClient
from PyPDF2 import PdfReader

from app.core.config import settings
import importlib
document_module = importlib.import_module("app.services.document_service")
from app.utils.dates import local_today


def pdf_upload(pdf_factory, name='notes.pdf', pages=4):
    return ('files', (name, pdf_factory(pages), 'application/pdf'))


def options(*entries):
    return {'options': json.dumps(list(entries))}


class TestCreateOrder:
    """Test order placement"""

    @pytest.mark.asyncio
    async def test_create_order(self, client: AsyncClient, placed_order, test_user):
        assert placed_order['order_number'].startswith('FP-')
        assert placed_order['status'] == 'PENDING'
        assert placed_order['payment_status'] == 'PENDING'
        assert placed_order['total_amount'] == 24.0
        assert placed_order['delivery_address']['hostel_name'] == 'Ganga Hostel'
        assert placed_order['user']['email'] == test_user.email

        item = placed_order['items'][0]
        assert item['file_name'] == 'notes.pdf'
        assert item['file_url'].startswith('/uploads/')
        assert item['page_count'] == 4
        assert item['pages_to_print'] == 4
        assert item['copies'] == 2
        assert item['price'] == 24.0

        history = placed_order['status_history']
        assert len(history) == 1
        assert history[0]['status'] == 'PENDING'
        assert history[0]['notes'] == 'Order placed successfully'

    @pytest.mark.asyncio
    async def test_page_range_and_double_sided(self, client: AsyncClient, auth_headers, test_address, pdf_factory):
        response = await client.post(
            '/api/v1/orders',
            headers=auth_headers,
            files=[pdf_upload(pdf_factory, pages=4)],
            data=options({'copies': 1, 'print_type': 'COLOR', 'print_side': 'DOUBLE', 'page_range': '2-3'}),
        )

        assert response.status_code == 201
        item = response.json()['items'][0]
        assert item['pages_to_print'] == 2
        assert item['page_range'] == '2-3'
        # one sheet of colour
        assert item['price'] == 12.0

    @pytest.mark.asyncio
    async def test_multiple_files(self, client: AsyncClient, auth_headers, test_address, pdf_factory):
        response = await client.post(
            '/api/v1/orders',
            headers=auth_headers,
            files=[pdf_upload(pdf_factory, 'a.pdf', 2), pdf_upload(pdf_factory, 'b.pdf', 3)],
            data=options({'copies': 1}, {'copies': 2, 'print_type': 'COLOR'}),
        )

        assert response.status_code == 201
        data = response.json()
        assert [item['file_name'] for item in data['items']] == ['a.pdf', 'b.pdf']
        # 2 x 1 x 3 + 3 x 2 x 12
        assert data['total_amount'] == 78.0

    @pytest.mark.asyncio
    async def test_requires_address(self, client: AsyncClient, auth_headers, pdf_factory):
        response = await client.post(
            '/api/v1/orders',
            headers=auth_headers,
            files=[pdf_upload(pdf_factory)],
            data=options({'copies': 1}),
        )

        assert response.status_code == 400
        assert response.json()['error']['message'] == 'Please set up your delivery address first'

    @pytest.mark.asyncio
    async def test_requires_files(self, client: AsyncClient, auth_headers, test_address):
        response = await client.post('/api/v1/orders', headers=auth_headers, data={'options': '[]'})

        assert response.status_code == 400
        assert response.json()['error']['message'] == 'No files uploaded'

    @pytest.mark.asyncio
    async def test_options_must_match_files(self, client: AsyncClient, auth_headers, test_address, pdf_factory):
        response = await client.post(
            '/api/v1/orders',
            headers=auth_headers,
            files=[pdf_upload(pdf_factory, 'a.pdf'), pdf_upload(pdf_factory, 'b.pdf')],
            data=options({'copies': 1}),
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_malformed_options(self, client: AsyncClient, auth_headers, test_address, pdf_factory):
        response = await client.post(
            '/api/v1/orders',
            headers=auth_headers,
            files=[pdf_upload(pdf_factory)],
            data={'options': '{not json'},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_invalid_copies(self, client: AsyncClient, auth_headers, test_address, pdf_factory):
        response = await client.post(
            '/api/v1/orders',
            headers=auth_headers,
            files=[pdf_upload(pdf_factory)],
            data=options({'copies': 0}),
        )
        assert response.status_code == 400
        assert response.json()['error']['details']['field'] == 'options'

    @pytest.mark.asyncio
    async def test_rejects_non_pdf(self, client: AsyncClient, auth_headers, test_address):
        response = await client.post(
            '/api/v1/orders',
            headers=auth_headers,
            files=[('files', ('notes.docx', b'word document', 'application/octet-stream'))],
            data=options({'copies': 1}),
        )

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'INVALID_FILE_TYPE'

    @pytest.mark.asyncio
    async def test_rejects_corrupt_pdf(self, client: AsyncClient, auth_headers, test_address):
        response = await client.post(
            '/api/v1/orders',
            headers=auth_headers,
            files=[('files', ('broken.pdf', b'not really a pdf', 'application/pdf'))],
            data=options({'copies': 1}),
        )

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'INVALID_DOCUMENT'

    @pytest.mark.asyncio
    async def test_page_range_outside_document(self, client: AsyncClient, auth_headers, test_address, pdf_factory):
        response = await client.post(
            '/api/v1/orders',
            headers=auth_headers,
            files=[pdf_upload(pdf_factory, pages=4)],
            data=options({'copies': 1, 'page_range': '9-10'}),
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_too_many_files(self, client: AsyncClient, auth_headers, test_address, pdf_factory, monkeypatch):
        monkeypatch.setattr(settings, 'MAX_FILES_PER_ORDER', 1)
        response = await client.post(
            '/api/v1/orders',
            headers=auth_headers,
            files=[pdf_upload(pdf_factory, 'a.pdf'), pdf_upload(pdf_factory, 'b.pdf')],
            data=options({'copies': 1}, {'copies': 1}),
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_requires_auth(self, client: AsyncClient, pdf_factory):
        response = await client.post('/api/v1/orders', files=[pdf_upload(pdf_factory)], data=options({}))
        assert response.status_code in (401, 403)


class TestListAndGet:

    @pytest.mark.asyncio
    async def test_list_own_orders(self, client: AsyncClient, auth_headers, placed_order):
        response = await client.get('/api/v1/orders', headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert [o['id'] for o in data['orders']] == [placed_order['id']]
        assert data['pagination'] == {'page': 1, 'limit': 20, 'total': 1, 'total_pages': 1}

    @pytest.mark.asyncio
    async def test_list_status_filter(self, client: AsyncClient, auth_headers, placed_order):
        response = await client.get('/api/v1/orders', headers=auth_headers, params={'status': 'DELIVERED'})
        assert response.json()['orders'] == []

    @pytest.mark.asyncio
    async def test_other_users_see_nothing(self, client: AsyncClient, placed_order, other_auth_headers):
        response = await client.get('/api/v1/orders', headers=other_auth_headers)
        assert response.json()['pagination']['total'] == 0

    @pytest.mark.asyncio
    async def test_get_own_order(self, client: AsyncClient, auth_headers, placed_order):
        response = await client.get(f"/api/v1/orders/{placed_order['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()['order_number'] == placed_order['order_number']

    @pytest.mark.asyncio
    async def test_get_other_users_order(self, client: AsyncClient, placed_order, other_auth_headers):
        response = await client.get(f"/api/v1/orders/{placed_order['id']}", headers=other_auth_headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_can_get_any_order(self, client: AsyncClient, placed_order, admin_auth_headers):
        response = await client.get(f"/api/v1/orders/{placed_order['id']}", headers=admin_auth_headers)
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_get_missing_order(self, client: AsyncClient, auth_headers):
        response = await client.get('/api/v1/orders/00000000-0000-0000-0000-000000000000', headers=auth_headers)
        assert response.status_code == 404


class TestCustomerUpdate:

    @pytest.mark.asyncio
    async def test_confirm_payment(self, client: AsyncClient, auth_headers, placed_order):
        response = await client.patch(
            f"/api/v1/orders/{placed_order['id']}",
            headers=auth_headers,
            json={'status': 'PAYMENT_CONFIRMED', 'payment_status': 'COMPLETED', 'payment_id': 'UPI1234567890'},
        )

        assert response.status_code == 200
        data = response.json()
        assert data['status'] == 'PAYMENT_CONFIRMED'
        assert data['payment_status'] == 'COMPLETED'
        assert data['payment_id'] == 'UPI1234567890'
        assert data['paid_at'] is not None
        assert len(data['status_history']) == 2
        assert data['status_history'][0]['status'] == 'PAYMENT_CONFIRMED'

    @pytest.mark.asyncio
    async def test_customer_cannot_set_other_statuses(self, client: AsyncClient, auth_headers, placed_order):
        response = await client.patch(
            f"/api/v1/orders/{placed_order['id']}",
            headers=auth_headers,
            json={'status': 'DELIVERED'},
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_other_customer_cannot_update(self, client: AsyncClient, placed_order, other_auth_headers):
        response = await client.patch(
            f"/api/v1/orders/{placed_order['id']}",
            headers=other_auth_headers,
            json={'status': 'PAYMENT_CONFIRMED'},
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_delivered_stamps_time(self, client: AsyncClient, admin_auth_headers, placed_order):
        response = await client.patch(
            f"/api/v1/orders/{placed_order['id']}",
            headers=admin_auth_headers,
            json={'status': 'DELIVERED', 'note': 'Handed over'},
        )

        data = response.json()
        assert data['status'] == 'DELIVERED'
        assert data['delivered_at'] is not None
        assert data['status_history'][0]['notes'] == 'Handed over'


class TestPaymentDetails:

    @pytest.mark.asyncio
    async def test_payment_details(self, client: AsyncClient, auth_headers, placed_order):
        response = await client.get(f"/api/v1/orders/{placed_order['id']}/payment", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data['amount'] == 24.0
        assert data['upi_id'] == settings.UPI_ID
        assert 'am=24.00' in data['upi_link']
        assert f"tn=Order-{placed_order['order_number']}" in data['upi_link']
        assert data['qr_code']

    @pytest.mark.asyncio
    async def test_payment_details_other_user(self, client: AsyncClient, placed_order, other_auth_headers):
        response = await client.get(f"/api/v1/orders/{placed_order['id']}/payment", headers=other_auth_headers)
        assert response.status_code == 403


class TestUploadedFiles:
    """Test how order uploads land on disk"""

    @pytest.mark.asyncio
    async def test_same_name_uploads_keep_their_own_files(self, client: AsyncClient, auth_headers, test_address,
                                                          pdf_factory, monkeypatch):
        monkeypatch.setattr(document_module, 'time', SimpleNamespace(time=lambda: 1700000000.123))

        response = await client.post(
            '/api/v1/orders',
            headers=auth_headers,
            files=[pdf_upload(pdf_factory, 'notes.pdf', 2), pdf_upload(pdf_factory, 'notes.pdf', 5)],
            data=options({'copies': 1}, {'copies': 1}),
        )

        assert response.status_code == 201
        items = response.json()['items']
        urls = [item['file_url'] for item in items]
        assert urls[0] != urls[1]
        assert [item['page_count'] for item in items] == [2, 5]
        stored_pages = [len(PdfReader(str(settings.UPLOAD_DIR / Path(url).name)).pages) for url in urls]
        assert stored_pages == [2, 5]

    @pytest.mark.asyncio
    async def test_invalid_second_file_leaves_no_files(self, client: AsyncClient, auth_headers, test_address,
                                                       pdf_factory, monkeypatch, tmp_path):
        monkeypatch.setattr(settings, '_upload_dir', tmp_path)

        response = await client.post(
            '/api/v1/orders',
            headers=auth_headers,
            files=[pdf_upload(pdf_factory, 'good.pdf'), ('files', ('bad.pdf', b'not a pdf', 'application/pdf'))],
            data=options({'copies': 1}, {'copies': 1}),
        )

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'INVALID_DOCUMENT'
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_bad_page_range_on_second_file_leaves_no_files(self, client: AsyncClient, auth_headers,
                                                                 test_address, pdf_factory, monkeypatch, tmp_path):
        monkeypatch.setattr(settings, '_upload_dir', tmp_path)

        response = await client.post(
            '/api/v1/orders',
            headers=auth_headers,
            files=[pdf_upload(pdf_factory, 'a.pdf', 4), pdf_upload(pdf_factory, 'b.pdf', 2)],
            data=options({'copies': 1}, {'copies': 1, 'page_range': '5-6'}),
        )

        assert response.status_code == 400
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_create_refreshes_todays_workbook(self, client: AsyncClient, auth_headers, test_address,
                                                    pdf_factory, monkeypatch):
        refreshed_days = []

        async def record_refresh(day=None):
            refreshed_days.append(day)

        monkeypatch.setattr('app.api.v1.endpoints.orders.refresh_daily_workbook', record_refresh)

        response = await client.post(
            '/api/v1/orders', headers=auth_headers, files=[pdf_upload(pdf_factory)], data=options({'copies': 1}),
        )

        assert response.status_code == 201
        assert refreshed_days == [local_today()]


class TestItemFileDownload:
    """Test the authenticated download of an uploaded PDF"""

    @staticmethod
    def file_url(order):
        item = order['items'][0]
        return f"/api/v1/orders/{order['id']}/items/{item['id']}/file"

    @pytest.mark.asyncio
    async def test_owner_downloads_pdf(self, client: AsyncClient, auth_headers, placed_order):
        response = await client.get(self.file_url(placed_order), headers=auth_headers)

        assert response.status_code == 200
        assert response.headers['content-type'] == 'application/pdf'
        assert 'notes.pdf' in response.headers['content-disposition']
        stored = settings.UPLOAD_DIR / Path(placed_order['items'][0]['file_url']).name
        assert response.content == stored.read_bytes()

    @pytest.mark.asyncio
    async def test_admin_downloads_pdf(self, client: AsyncClient, admin_auth_headers, placed_order):
        response = await client.get(self.file_url(placed_order), headers=admin_auth_headers)
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_anonymous_rejected(self, client: AsyncClient, placed_order):
        response = await client.get(self.file_url(placed_order))
        assert response.status_code in (401, 403)

    @pytest.mark.asyncio
    async def test_other_customer_rejected(self, client: AsyncClient, placed_order, other_auth_headers):
        response = await client.get(self.file_url(placed_order), headers=other_auth_headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_item(self, client: AsyncClient, auth_headers, placed_order):
        response = await client.get(
            f"/api/v1/orders/{placed_order['id']}/items/00000000-0000-0000-0000-000000000000/file",
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert response.json()['error']['code'] == 'DOCUMENT_NOT_FOUND'

    @pytest.mark.asyncio
    async def test_missing_file_on_disk(self, client: AsyncClient, auth_headers, placed_order):
        (settings.UPLOAD_DIR / Path(placed_order['items'][0]['file_url']).name).unlink()

        response = await client.get(self.file_url(placed_order), headers=auth_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_uploads_are_not_public(self, client: AsyncClient, placed_order):
        response = await client.get(placed_order['items'][0]['file_url'])
        assert response.status_code == 404
