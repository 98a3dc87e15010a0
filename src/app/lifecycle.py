"""Управление жизненным циклом приложения.

Класс ApplicationLifecycle инкапсулирует всю логику startup и shutdown:
- Проверка миграций БД
- Создание диспетчера модальностей (один на приложение)
- Корректное закрытие HTTP-клиентов провайдеров и пула соединений БД
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.config.constants import IMAGES_DIR
from src.db.base import get_engine
from src.db.migrations import check_migrations
from src.services.dispatcher import ModalityDispatcher
from src.services.extraction import ResponseExtractor
from src.services.image_storage import ImageStorage
from src.utils.logging import get_logger

if TYPE_CHECKING:
    from fastapi import FastAPI

    from src.config.settings import Settings
    from src.config.yaml_config import YamlConfig

logger = get_logger(__name__)


class ApplicationLifecycle:
    """Управление жизненным циклом приложения.

    Attributes:
        settings: Настройки приложения из .env
        yaml_config: Конфигурация из config.yaml
        dispatcher: Диспетчер модальностей (создаётся при startup)
    """

    def __init__(self, settings: Settings, yaml_config: YamlConfig) -> None:
        """Инициализировать lifecycle manager.

        Args:
            settings: Настройки приложения из .env
            yaml_config: Конфигурация из config.yaml
        """
        self.settings = settings
        self.yaml_config = yaml_config
        self.dispatcher: ModalityDispatcher | None = None

    async def startup(self, app: FastAPI) -> None:
        """Выполнить startup приложения.

        1. Проверка миграций БД (только предупреждение в лог)
        2. Диспетчер модальностей → app.state.dispatcher

        Args:
            app: FastAPI приложение для сохранения диспетчера в app.state
        """
        logger.info("Запуск приложения...")

        await check_migrations(get_engine())

        storage = ImageStorage(IMAGES_DIR, self.settings.app.normalized_base_url)
        self.dispatcher = ModalityDispatcher(
            self.settings.ai,
            ResponseExtractor(storage),
            self.yaml_config.generation_timeouts,
            proxy_url=self.settings.proxy,
        )
        app.state.dispatcher = self.dispatcher

        if not (
            self.settings.ai.has_openrouter
            or self.settings.ai.has_routerai
            or self.settings.ai.has_openai
        ):
            logger.warning(
                "Не задан ни один API-ключ провайдера (AI__OPENROUTER_API_KEY, "
                "AI__ROUTERAI_API_KEY, AI__OPENAI_API_KEY) — запросы к моделям "
                "будут завершаться ошибкой"
            )

        logger.info("✅ Приложение запущено успешно")

    async def shutdown(self) -> None:
        """Выполнить shutdown приложения.

        Закрывает клиенты провайдеров и пул соединений БД.
        """
        logger.info("Остановка приложения...")

        if self.dispatcher is not None:
            await self.dispatcher.aclose()
            logger.debug("Клиенты провайдеров закрыты")

        await get_engine().dispose()
        logger.debug("Пул соединений БД закрыт")

        logger.info("✅ Приложение остановлено")
