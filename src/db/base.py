"""Базовая конфигурация SQLAlchemy.

Этот модуль отвечает за:
- Создание подключения к базе данных (engine)
- Настройку фабрики сессий (async_sessionmaker)
- Выдачу сессии на каждый HTTP-запрос (get_session)

URL базы данных:
- Если DATABASE__POSTGRES_URL указан — используется PostgreSQL (asyncpg)
- Иначе — SQLite (./data/broker.db или /data/broker.db на Amvera)

ВАЖНО: Для изоляции тестов engine и фабрика сессий создаются лениво.
Импорт Base для моделей должен быть из src.db.models_base.
"""

from collections.abc import AsyncGenerator
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.config.constants import DATA_DIR
from src.db.models_base import Base

__all__ = [
    "Base",
    "get_async_session_factory",
    "get_engine",
    "get_session",
]

if TYPE_CHECKING:
    from src.config.settings import Settings

# Ленивые синглтоны для engine и session factory
_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def _get_settings() -> "Settings":
    """Ленивая загрузка настроек (при первом обращении к БД, а не при импорте)."""
    from src.config.settings import settings

    return settings


def _get_database_url() -> str:
    """Получить URL подключения к базе данных (async).

    Логика выбора:
    1. Если DATABASE__POSTGRES_URL указан — используем PostgreSQL
    2. Иначе — SQLite из DATA_DIR/broker.db

    Returns:
        URL подключения в формате SQLAlchemy (с async-драйвером).
    """
    settings = _get_settings()
    if settings.database.postgres_url:
        return settings.database.postgres_url

    db_path = DATA_DIR / "broker.db"
    return f"sqlite+aiosqlite:///{db_path}"


def get_engine() -> AsyncEngine:
    """Получить асинхронный engine (ленивая инициализация).

    Returns:
        Асинхронный Engine для SQLAlchemy (пул соединений).
    """
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            _get_database_url(),
            echo=False,
            pool_pre_ping=True,
        )
    return _engine


def get_async_session_factory() -> async_sessionmaker[AsyncSession]:
    """Получить фабрику асинхронных сессий (ленивая инициализация).

    expire_on_commit=False — объекты остаются читаемыми после commit,
    что нужно для формирования ответа после фиксации списания.
    """
    global _async_session_factory
    if _async_session_factory is None:
        _async_session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _async_session_factory


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Получить сессию для работы с БД (для FastAPI Depends).

    Каждый HTTP-запрос работает в своей сессии.

    Yields:
        AsyncSession для выполнения запросов.
    """
    factory = get_async_session_factory()
    async with factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
