"""
FlashPrint - Test Configuration and Fixtures
"""
import io
import os
import tempfile
from pathlib import Path
from typing import AsyncGenerator

import pytest
from faker import Faker
from httpx import AsyncClient, ASGITransport
from PyPDF2 import PdfWriter
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine
from sqlalchemy.pool import StaticPool

# Set testing environment before the app reads its settings
TEST_ROOT = Path(tempfile.mkdtemp(prefix="flashprint-tests-"))
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite://'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['REPORT_AUTOSAVE_ENABLED'] = 'false'
os.environ['UPLOADS_PATH'] = str(TEST_ROOT / 'uploads')
os.environ['REPORTS_PATH'] = str(TEST_ROOT / 'reports')
os.environ['LOG_FILE'] = str(TEST_ROOT / 'logs' / 'flashprint.log')

from app.main import app
from app.core.database import Base, get_db
from app.core.security import get_password_hash, create_token_pair
from app.models.address import Address, AddressType
from app.models.user import User, UserRole

fake = Faker()

TEST_PASSWORD = 'testpassword123'


def make_pdf(pages: int = 3) -> bytes:
    """Blank A4 PDF with the given number of pages"""
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=595, height=842)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def bearer(user: User) -> dict:
    tokens = create_token_pair(user.id, user.email, user.role.value)
    return {'Authorization': f"Bearer {tokens['access_token']}"}


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite shared by every session of one test"""
    engine = create_async_engine(
        'sqlite+aiosqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    session_factory = async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


async def create_user(db_session: AsyncSession, role: UserRole = UserRole.STUDENT, **kwargs) -> User:
    user = User(
        email=kwargs.pop('email', fake.unique.email()),
        hashed_password=get_password_hash(kwargs.pop('password', TEST_PASSWORD)),
        full_name=kwargs.pop('full_name', fake.name()),
        phone=kwargs.pop('phone', '9876543210'),
        role=role,
        is_active=kwargs.pop('is_active', True),
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user"""
    return await create_user(db_session, UserRole.STUDENT)


@pytest.fixture
async def other_user(db_session: AsyncSession) -> User:
    """A second customer, for ownership checks"""
    return await create_user(db_session, UserRole.FACULTY)


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    """Create an admin test user"""
    return await create_user(db_session, UserRole.ADMIN)


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Generate authentication headers for test user"""
    return bearer(test_user)


@pytest.fixture
def other_auth_headers(other_user: User) -> dict:
    return bearer(other_user)


@pytest.fixture
def admin_auth_headers(admin_user: User) -> dict:
    """Generate authentication headers for admin user"""
    return bearer(admin_user)


@pytest.fixture
async def test_address(db_session: AsyncSession, test_user: User) -> Address:
    """Hostel delivery address for the test user"""
    address = Address(
        user_id=test_user.id,
        type=AddressType.HOSTEL,
        hostel_name='Ganga Hostel',
        room_number='214',
        landmark='Near mess',
    )
    db_session.add(address)
    await db_session.commit()
    await db_session.refresh(address)
    return address


@pytest.fixture
def pdf_bytes() -> bytes:
    return make_pdf(3)


@pytest.fixture
def pdf_factory():
    """Callable building a blank PDF of n pages"""
    return make_pdf


@pytest.fixture
async def placed_order(client: AsyncClient, auth_headers: dict, test_address: Address) -> dict:
    """Order of one 4-page PDF, 2 copies, B&W single-sided (4 x 2 x 3 = 24.0)"""
    response = await client.post(
        '/api/v1/orders',
        headers=auth_headers,
        files=[('files', ('notes.pdf', make_pdf(4), 'application/pdf'))],
        data={'options': '[{"copies": 2, "print_type": "BW", "print_side": "SINGLE"}]'},
    )
    assert response.status_code == 201, response.text
    return response.json()
