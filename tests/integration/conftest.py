import bcrypt
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from tests.fixtures.json_loader import FixtureData
from src.depends import get_unit_of_work
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.domain.entities import Account, AccountRole


@pytest_asyncio.fixture
def test_data():
    return FixtureData()


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def accounts(db_session, test_data):
    """Provision every account from test_data.json; returns {key: Account}"""
    created = {}
    for key, spec in test_data.get("accounts").items():
        account = Account(
            username=spec["username"],
            password_hash=bcrypt.hashpw(spec["password"].encode(), bcrypt.gensalt(4)).decode(),
            display_name=spec["display_name"],
            role=AccountRole(spec["role"]),
            disabled=spec["disabled"],
        )
        db_session.add(account)
        created[key] = account
    await db_session.commit()
    # Detached copies: requests rolling back db_session must not expire them
    db_session.expunge_all()
    return created


@pytest_asyncio.fixture
async def app(db_session):
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    return app


@pytest_asyncio.fixture
def per_request_sessions(app, session_factory):
    """Give every request its own database session, as the running service does"""

    async def override_get_unit_of_work():
        async with session_factory() as session:
            yield SqlAlchemyUnitOfWork(session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    return app


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
def login(client, test_data):
    """Log an account in from a tab; returns the login response"""

    async def _login(key, session_token=None, device_id=None):
        headers = {}
        if session_token:
            headers["X-Session-Id"] = session_token
        if device_id:
            headers["X-Device-Id"] = device_id
        return await client.post(
            "/auth/login", json=test_data.credentials(key), headers=headers
        )

    return _login


@pytest_asyncio.fixture
def auth_headers():
    """Headers a tab sends after login: credential plus its session token"""

    def _headers(login_body, session_token=None):
        return {
            "Authorization": f"Bearer {login_body['access_token']}",
            "X-Session-Id": session_token or login_body["session"]["session_token"],
        }

    return _headers
