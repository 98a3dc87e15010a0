"""Конфигурация Alembic для миграций базы данных.

Этот файл запускается каждый раз при выполнении команд alembic.
Настроен для работы с async SQLAlchemy (asyncpg, aiosqlite).

Как работают миграции:
1. Разработчик меняет модели (src/db/models/*.py)
2. Запускает: alembic revision --autogenerate -m "описание"
3. Проверяет сгенерированную миграцию и запускает: alembic upgrade head
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy.engine import Connection

from alembic import context

from src.db.base import Base, get_engine

# Все модели должны быть импортированы, иначе autogenerate их не увидит
from src.db.models import (  # noqa: F401
    AccessGrant,
    AIModel,
    Promocode,
    PromocodeRedemption,
    RequestRecord,
    Transaction,
    User,
)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Сгенерировать SQL без подключения к БД.

    Пример: alembic upgrade head --sql > migration.sql
    """
    context.configure(
        url=str(get_engine().url),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    """Выполнить миграции на синхронном соединении."""
    # batch-режим нужен SQLite для ALTER TABLE
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Выполнить миграции через async engine.

    Alembic не поддерживает async напрямую, поэтому миграции
    выполняются в sync-контексте через run_sync().
    """
    engine = get_engine()
    try:
        async with engine.connect() as connection:
            await connection.run_sync(do_run_migrations)
    finally:
        # Закрываем engine, чтобы процесс мог завершиться
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
