"""Фикстуры для тестов HTTP API.

Приложение собирается из роутеров без lifespan: сессия БД подменяется
тестовой (db_session), служебный ключ — фиксированным.
"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import AsyncSession

from src.api import (
    ai_models_router,
    health_router,
    requests_router,
    root_router,
    users_router,
    webhooks_router,
)
from src.api.dependencies import get_admin_settings
from src.config.models import AdminSettings
from src.db.base import get_session

ADMIN_KEY = "test-admin-key"


@pytest.fixture
def app(db_session: AsyncSession) -> FastAPI:
    """FastAPI app с роутерами и тестовой БД.

    Args:
        db_session: Сессия тестовой БД.

    Returns:
        Приложение с подменёнными зависимостями.
    """
    app = FastAPI()
    for router in (
        requests_router,
        users_router,
        ai_models_router,
        webhooks_router,
        health_router,
        root_router,
    ):
        app.include_router(router)

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_admin_settings] = lambda: AdminSettings(
        api_key=SecretStr(ADMIN_KEY)
    )
    return app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client для тестирования API.

    Args:
        app: FastAPI приложение.

    Yields:
        AsyncClient для отправки запросов.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def admin_headers() -> dict[str, str]:
    """Заголовок со служебным ключом."""
    return {"X-Admin-Key": ADMIN_KEY}
