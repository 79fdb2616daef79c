import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from formbuilder import models  # noqa: E402,F401
from formbuilder.database import Base, get_db_session  # noqa: E402
from formbuilder.main import app  # noqa: E402
from formbuilder.schemas import FormDocument  # noqa: E402


@pytest_asyncio.fixture
async def engine():
    # Eine gemeinsame In-Memory-Verbindung für alle Sessions eines Tests
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(
        bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False
    )


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def name_form_payload():
    """Ein Schritt, ein Pflicht-Textfeld "Name"."""
    return {
        "title": "Newsletter Signup",
        "description": "Stay in the loop",
        "steps": [{"id": 1, "title": "Step 1", "order": 1}],
        "fields": [
            {
                "id": "name",
                "type": "text",
                "label": "Name",
                "required": True,
                "stepId": 1,
                "order": 1,
            }
        ],
    }


@pytest.fixture
def two_step_document():
    return FormDocument.model_validate(
        {
            "title": "Trip Planner",
            "steps": [
                {"id": 1, "title": "Who", "order": 1},
                {"id": 2, "title": "Where", "order": 2},
            ],
            "fields": [
                {"id": "name", "type": "text", "label": "Name", "required": True, "stepId": 1, "order": 1},
                {"id": "nickname", "type": "text", "label": "Nickname", "stepId": 1, "order": 2},
                {
                    "id": "places",
                    "type": "checkbox",
                    "label": "Places",
                    "required": True,
                    "options": [
                        {"label": "Beach", "value": "beach"},
                        {"label": "Mountains", "value": "mountains"},
                    ],
                    "stepId": 2,
                    "order": 1,
                },
            ],
        }
    )
