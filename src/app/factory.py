"""Factory для создания FastAPI приложения.

Функция create_app() создаёт и настраивает FastAPI app:
- Подключает все роутеры (requests, users, ai_models, webhooks, root, health)
- Раздаёт сохранённые изображения по /images
- Настраивает CORS middleware для Mini App
- Подключает lifecycle manager
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from src.api.ai_models import router as ai_models_router
from src.api.health import router as health_router
from src.api.requests import router as requests_router
from src.api.root import router as root_router
from src.api.users import router as users_router
from src.api.webhooks import router as webhooks_router
from src.app.lifecycle import ApplicationLifecycle
from src.config.constants import IMAGES_DIR, IMAGES_URL_PREFIX
from src.config.settings import settings
from src.config.yaml_config import yaml_config
from src.utils.logging import get_logger

logger = get_logger(__name__)


def create_app() -> FastAPI:
    """Создать и настроить FastAPI приложение.

    Returns:
        Настроенное FastAPI приложение готовое к запуску
    """
    lifecycle = ApplicationLifecycle(settings, yaml_config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """Управление жизненным циклом приложения.

        Args:
            app: FastAPI приложение

        Yields:
            None: Приложение работает между startup и shutdown
        """
        await lifecycle.startup(app)

        yield

        await lifecycle.shutdown()

    app = FastAPI(
        title="AI Broker",
        description="Доступ к AI-моделям по токенам с оплатой за токены",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Порядок middleware в FastAPI обратный: последний добавленный выполняется первым
    if settings.cors.is_enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors.allow_origins,
            allow_credentials=settings.cors.allow_credentials,
            allow_methods=settings.cors.allow_methods,
            allow_headers=settings.cors.allow_headers,
        )
        logger.info(
            "CORS включён для доменов: %s",
            ", ".join(settings.cors.allow_origins),
        )

    # Запросы к моделям: POST /request
    app.include_router(requests_router)

    # Пользователи: POST /enter, GET /getBalance
    app.include_router(users_router)

    # Каталог моделей и токены: /getAiModels, /chooseAiModel, ...
    app.include_router(ai_models_router)

    # Пополнения и промокоды: /webhook_payment, /redeemPromocode, ...
    app.include_router(webhooks_router)

    # Health check API: /health
    app.include_router(health_router)

    # GET /api
    app.include_router(root_router)

    # Изображения, которые провайдер вернул в base64
    IMAGES_DIR.mkdir(parents=True, exist_ok=True)
    app.mount(IMAGES_URL_PREFIX, StaticFiles(directory=IMAGES_DIR), name="images")

    return app
