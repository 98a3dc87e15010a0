"""Проверка статуса миграций базы данных.

Используется при старте приложения: если к базе применены не все
миграции, в лог пишется предупреждение. Сервис при этом запускается.

Как работает проверка:
1. Текущая ревизия — из таблицы alembic_version в БД
2. Последняя ревизия (head) — из файлов alembic/versions/*.py
3. Если они не совпадают — предупреждение
"""

from pathlib import Path

from sqlalchemy import text
from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.ext.asyncio import AsyncEngine

from src.config.constants import PROJECT_ROOT
from src.utils.logging import get_logger

logger = get_logger(__name__)

MIGRATIONS_DIR = PROJECT_ROOT / "alembic" / "versions"


def _parse_migration_file(content: str) -> tuple[str | None, str | None]:
    """Извлечь revision и down_revision из содержимого файла миграции.

    Returns:
        Кортеж (revision, down_revision). Оба могут быть None.
    """
    revision = None
    down_revision = None

    for line in content.splitlines():
        key, sep, value = line.partition("=")
        if not sep:
            continue
        # Аннотированные переменные: revision: str = "0001_initial"
        name = key.split(":")[0].strip()
        value = value.strip()
        if name == "revision":
            revision = value.strip("\"'")
        elif name == "down_revision" and value != "None":
            down_revision = value.strip("\"'")

    return revision, down_revision


def get_head_revision(migrations_dir: Path = MIGRATIONS_DIR) -> str | None:
    """Получить последнюю ревизию из файлов миграций.

    Head — ревизия, на которую не ссылается ни одна другая как down_revision.

    Returns:
        ID head-ревизии или None, если миграций нет.
    """
    if not migrations_dir.exists():
        logger.warning("Папка миграций не найдена: %s", migrations_dir)
        return None

    revisions: dict[str, str | None] = {}
    for migration_file in migrations_dir.glob("*.py"):
        if migration_file.name.startswith("_"):
            continue
        revision, down_revision = _parse_migration_file(
            migration_file.read_text(encoding="utf-8")
        )
        if revision:
            revisions[revision] = down_revision

    referenced = set(revisions.values())
    heads = sorted(rev for rev in revisions if rev not in referenced)
    if len(heads) > 1:
        logger.warning("Обнаружено несколько head-ревизий: %s", heads)
    return heads[0] if heads else None


async def get_current_revision(engine: AsyncEngine) -> str | None:
    """Получить текущую ревизию из таблицы alembic_version.

    Returns:
        ID текущей ревизии или None, если таблица не существует.
    """
    async with engine.connect() as conn:
        try:
            result = await conn.execute(text("SELECT version_num FROM alembic_version"))
            row = result.fetchone()
            return row[0] if row else None
        except (OperationalError, ProgrammingError):
            # SQLite: no such table / PostgreSQL: relation does not exist
            return None


async def check_migrations(engine: AsyncEngine) -> None:
    """Проверить статус миграций и вывести предупреждение, если нужно.

    Args:
        engine: Асинхронный SQLAlchemy engine.
    """
    head_revision = get_head_revision()
    current_revision = await get_current_revision(engine)

    if head_revision is None:
        logger.warning("⚠️  Файлы миграций не найдены в %s", MIGRATIONS_DIR)
        return

    if current_revision is None:
        logger.warning(
            "⚠️  МИГРАЦИИ НЕ ПРИМЕНЕНЫ! База данных не инициализирована.\n"
            "   Выполните: alembic upgrade head"
        )
        return

    if current_revision != head_revision:
        logger.warning(
            "⚠️  МИГРАЦИИ НЕ АКТУАЛЬНЫ! Текущая ревизия: %s, последняя: %s.\n"
            "   Выполните: alembic upgrade head",
            current_revision,
            head_revision,
        )
        return

    logger.debug("✅ Миграции актуальны (ревизия: %s)", current_revision)
