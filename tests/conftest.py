"""
Test configuration and fixtures
"""
import os
import uuid
from typing import AsyncGenerator

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set testing environment before the app reads its settings
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite://'
os.environ['HMAC_SECRET'] = 'test-hmac-secret'
os.environ['PUBLIC_BASE_URL'] = ''

from app.main import app
from app.models import Base, User, get_async_session

TEST_DATABASE_URL = 'sqlite+aiosqlite://'


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database for each test"""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={'check_same_thread': False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
        await session.rollback()

    await test_engine.dispose()


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with the database session overridden"""
    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def approver(db_session: AsyncSession) -> User:
    user = User(
        USER_ID=str(uuid.uuid4()),
        NAME='Kepala Sekolah',
        EMAIL='kepsek@sekolah.com',
        ROLE='admin',
        IS_ACTIVE=True,
    )
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
def letter_payload() -> dict:
    return {
        'date': '2024-03-04',
        'time_start': '07:00',
        'time_end': '15:00',
        'location': 'GOR Pajajaran',
        'activity': 'Lomba Futsal Antar Sekolah',
        'letter_type': 'lomba',
        'reason': 'Mewakili sekolah',
        'participants': [
            {'name': 'Andi Pratama', 'class': 'XI RPL 1'},
            {'name': 'Budi Santoso', 'class': 'XI TKJ 2', 'reason': 'Kapten tim'},
        ],
    }


@pytest.fixture
async def approved_letter(client: AsyncClient, letter_payload: dict, approver: User) -> dict:
    """Letter created and approved through the API"""
    created = await client.post('/api/permission-letters', json=letter_payload)
    assert created.status_code == 201

    approved = await client.patch(
        f"/api/permission-letters/{created.json()['id']}",
        json={'status': 'approved', 'approved_by': approver.USER_ID},
    )
    assert approved.status_code == 200
    return approved.json()
