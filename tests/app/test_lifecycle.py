"""Тесты для сборки приложения и его жизненного цикла."""

from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from pydantic import SecretStr

from src.app.factory import create_app
from src.app.lifecycle import ApplicationLifecycle
from src.config.models import AIProvidersSettings
from src.config.settings import Settings
from src.config.yaml_config import YamlConfig
from src.services.dispatcher import ModalityDispatcher


@pytest.fixture
def mock_engine() -> Generator[MagicMock, None, None]:
    """Подменить движок БД и проверку миграций."""
    engine = MagicMock()
    engine.dispose = AsyncMock()
    with (
        patch("src.app.lifecycle.get_engine", return_value=engine),
        patch("src.app.lifecycle.check_migrations", new=AsyncMock()) as check,
    ):
        engine.check_migrations = check
        yield engine


def test_create_app_registers_routes() -> None:
    """Тест: приложение содержит все эндпоинты и раздачу изображений."""
    app = create_app()

    paths = {getattr(route, "path", None) for route in app.routes}
    assert {
        "/request",
        "/enter",
        "/getBalance",
        "/getAiModels",
        "/getUserChosenModels",
        "/chooseAiModel",
        "/deleteChosenModel",
        "/createAiModel",
        "/webhook_payment",
        "/redeemPromocode",
        "/createPromocode",
        "/health",
        "/api",
        "/images",
    } <= paths


@pytest.mark.asyncio
async def test_startup_creates_dispatcher(mock_engine: MagicMock) -> None:
    """Тест: startup проверяет миграции и кладёт диспетчер в app.state."""
    # Arrange
    settings = Settings(ai=AIProvidersSettings(openrouter_api_key=SecretStr("sk-or")))
    lifecycle = ApplicationLifecycle(settings, YamlConfig())
    app = FastAPI()

    # Act
    await lifecycle.startup(app)

    # Assert
    mock_engine.check_migrations.assert_awaited_once_with(mock_engine)
    assert isinstance(app.state.dispatcher, ModalityDispatcher)
    assert lifecycle.dispatcher is app.state.dispatcher


@pytest.mark.asyncio
async def test_shutdown_closes_resources(mock_engine: MagicMock) -> None:
    """Тест: shutdown закрывает адаптеры провайдеров и пул БД."""
    # Arrange
    lifecycle = ApplicationLifecycle(Settings(), YamlConfig())
    dispatcher = MagicMock()
    dispatcher.aclose = AsyncMock()
    lifecycle.dispatcher = dispatcher

    # Act
    await lifecycle.shutdown()

    # Assert
    dispatcher.aclose.assert_awaited_once()
    mock_engine.dispose.assert_awaited_once()
