import os
import tempfile

# Settings are read at import time, so point them at test resources first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("QR_LOCAL_PATH", tempfile.mkdtemp(prefix="livingbrush-static-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.security import create_user_token
from app.main import app
from app.models import Artwork, Media, MediaType, User, UserRole, VisibilityType
from app.services.storage import LocalImageStorage, get_image_storage

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
WEB_PREFIX = "/static-files/qr-images/"


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage(tmp_path):
    return LocalImageStorage(str(tmp_path / "qr-images"), WEB_PREFIX)


class Seed:
    """Creates committed rows through short-lived sessions and hands back ids."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    async def user(self, nickname="artist", user_id=None, role=UserRole.ARTIST) -> int:
        async with self.session_factory() as session:
            user = User(nickname=nickname, email=f"{nickname}@livingbrush.test", role=role)
            if user_id is not None:
                user.user_id = user_id
            session.add(user)
            await session.commit()
            return user.user_id

    async def artwork(
        self,
        owner_id,
        artwork_id=None,
        title="Floating Garden",
        visibility=VisibilityType.PUBLIC,
        media_urls=(),
    ) -> int:
        async with self.session_factory() as session:
            artwork = Artwork(
                user_id=owner_id,
                title=title,
                glb_url=f"https://cdn.livingbrush.test/glb/{title}.glb",
                description="A VR painting",
            )
            if artwork_id is not None:
                artwork.artwork_id = artwork_id
            artwork.visibility = visibility
            session.add(artwork)
            await session.flush()
            for url in media_urls:
                session.add(Media(user_id=owner_id, media_type=MediaType.IMAGE, file_url=url,
                                  artwork_id=artwork.artwork_id))
            await session.commit()
            return artwork.artwork_id


@pytest.fixture
def seed(session_factory):
    return Seed(session_factory)


def auth_headers(user_id: int) -> dict:
    return {"Authorization": f"Bearer {create_user_token(user_id)}"}


@pytest_asyncio.fixture
async def client(session_factory, storage):
    async def get_db_override():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = get_db_override
    app.dependency_overrides[get_image_storage] = lambda: storage
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
