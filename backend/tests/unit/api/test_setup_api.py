"""
Unit Tests for First-Run Setup Endpoints
"""
import pytest
from httpx import AsyncClient

from app.core.config import settings


@pytest.fixture
def production(monkeypatch):
    monkeypatch.setattr(settings, 'ENVIRONMENT', 'production')
    monkeypatch.setattr(settings, 'ADMIN_SETUP_KEY', 'campus-setup-key')


class TestSetupInfo:

    @pytest.mark.asyncio
    async def test_no_admin_yet(self, client: AsyncClient):
        response = await client.get('/api/v1/setup/admin')

        assert response.status_code == 200
        assert response.json() == {
            'admin_exists': False,
            'setup_key_required': False,
            'setup_enabled': True,
        }

    @pytest.mark.asyncio
    async def test_admin_exists(self, client: AsyncClient, admin_user):
        response = await client.get('/api/v1/setup/admin')
        assert response.json()['admin_exists'] is True

    @pytest.mark.asyncio
    async def test_production_without_key_is_disabled(self, client: AsyncClient, monkeypatch):
        monkeypatch.setattr(settings, 'ENVIRONMENT', 'production')
        monkeypatch.setattr(settings, 'ADMIN_SETUP_KEY', '')

        data = (await client.get('/api/v1/setup/admin')).json()

        assert data['setup_key_required'] is True
        assert data['setup_enabled'] is False


class TestAdminBootstrap:

    @pytest.mark.asyncio
    async def test_create_admin(self, client: AsyncClient):
        response = await client.post('/api/v1/setup/admin', json={
            'email': 'Printshop@College.edu',
            'password': 'strongpass1',
            'name': 'Print Shop',
        })

        assert response.status_code == 200
        data = response.json()
        assert data['success'] is True
        assert data['user'] == {'email': 'printshop@college.edu', 'full_name': 'Print Shop', 'role': 'ADMIN'}

        login = await client.post('/api/v1/auth/login', json={
            'email': 'printshop@college.edu', 'password': 'strongpass1',
        })
        assert login.status_code == 200
        assert login.json()['user']['role'] == 'ADMIN'

    @pytest.mark.asyncio
    async def test_defaults_from_settings(self, client: AsyncClient):
        response = await client.post('/api/v1/setup/admin', json={})

        assert response.status_code == 200
        assert response.json()['user']['email'] == settings.DEFAULT_ADMIN_EMAIL.lower()

    @pytest.mark.asyncio
    async def test_resets_existing_account(self, client: AsyncClient, test_user):
        response = await client.post('/api/v1/setup/admin', json={
            'email': test_user.email, 'password': 'brandnewpass',
        })

        assert response.json()['user']['role'] == 'ADMIN'
        login = await client.post('/api/v1/auth/login', json={'email': test_user.email, 'password': 'brandnewpass'})
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_production_requires_key(self, client: AsyncClient, production):
        response = await client.post('/api/v1/setup/admin', json={'setup_key': 'wrong'})

        assert response.status_code == 403
        assert response.json()['success'] is False

    @pytest.mark.asyncio
    async def test_production_with_key(self, client: AsyncClient, production):
        response = await client.post('/api/v1/setup/admin', json={'setup_key': 'campus-setup-key'})
        assert response.status_code == 200


class TestUpgradeMe:

    @pytest.mark.asyncio
    async def test_promotes_current_user(self, client: AsyncClient, test_user, auth_headers):
        response = await client.post('/api/v1/setup/upgrade-me', headers=auth_headers, json={})

        assert response.status_code == 200
        assert response.json()['user']['role'] == 'ADMIN'
        assert response.json()['message'] == f'{test_user.email} is now an admin'

        admin_only = await client.get('/api/v1/admin/analytics', headers=auth_headers)
        assert admin_only.status_code == 200

    @pytest.mark.asyncio
    async def test_requires_login(self, client: AsyncClient):
        response = await client.post('/api/v1/setup/upgrade-me', json={})
        assert response.status_code in (401, 403)

    @pytest.mark.asyncio
    async def test_wrong_key_in_production(self, client: AsyncClient, auth_headers, production):
        response = await client.post(
            '/api/v1/setup/upgrade-me', headers=auth_headers, json={'setup_key': 'nope'},
        )
        assert response.status_code == 403
