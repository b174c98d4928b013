import sys
from pathlib import Path

import pytest
from cryptography.fernet import Fernet
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

sys.path.append(str(Path(__file__).parents[1] / "src"))

from autoexpense.config import Settings
from autoexpense.container import AppContainer
from autoexpense.core.tokens import TokenProvider
from autoexpense.db.session import init_db
from autoexpense.main import app
from autoexpense.schemas.storage import StorageConfig
from autoexpense.storage.crypto import RecordCipher
from autoexpense.storage.records import EncryptedRecordStore
from autoexpense.storage.router import StorageRouter


class StaticTokenProvider(TokenProvider):
    """Token provider for tests; counts refreshes."""

    def __init__(self, token: str = "test-token"):
        self.token = token
        self.refreshes = 0

    async def get_access_token(self) -> str:
        return self.token

    async def refresh(self) -> str:
        self.refreshes += 1
        self.token = f"test-token-{self.refreshes}"
        return self.token


@pytest.fixture
def encryption_key() -> str:
    return Fernet.generate_key().decode()


@pytest.fixture
def test_settings(tmp_path: Path, encryption_key: str) -> Settings:
    return Settings(
        _env_file=None,
        encryption_key=encryption_key,
        encryption_key_file=str(tmp_path / ".encryption_key"),
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        gmail_client_id=None,
        gmail_client_secret=None,
        gmail_refresh_token=None,
    )


@pytest.fixture
async def session_factory(test_settings: Settings):
    """Fresh SQLite database per test."""
    engine = create_async_engine(test_settings.database_url, echo=False)
    await init_db(engine)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def cipher(encryption_key: str) -> RecordCipher:
    return RecordCipher(encryption_key.encode())


@pytest.fixture
def record_store(session_factory, cipher: RecordCipher) -> EncryptedRecordStore:
    return EncryptedRecordStore(session_factory, cipher)


@pytest.fixture
def local_router(record_store: EncryptedRecordStore) -> StorageRouter:
    return StorageRouter(StorageConfig(), record_store)


@pytest.fixture
def token_provider() -> StaticTokenProvider:
    return StaticTokenProvider()


@pytest.fixture
async def container(test_settings: Settings, session_factory):
    """App container on the test database, with no Google account connected."""
    container = AppContainer(test_settings, session_factory)
    await container.start()
    yield container
    await container.aclose()


@pytest.fixture
async def client(container: AppContainer):
    """Provide test client bound to the test container."""
    app.state.container = container

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    del app.state.container

