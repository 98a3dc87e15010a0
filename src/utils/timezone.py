"""Утилиты для работы с часовыми поясами.

Время в базе данных хранится в UTC. Часовой пояс для отображения
(логи, ответы API) задаётся через LOGGING__TIMEZONE в настройках.
"""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo


def get_timezone(timezone_name: str) -> ZoneInfo:
    """Получить объект часового пояса по имени.

    Args:
        timezone_name: Название часового пояса из базы IANA.
            Примеры: "Europe/Moscow", "UTC", "America/New_York".

    Returns:
        Объект ZoneInfo для указанного часового пояса.

    Raises:
        ZoneInfoNotFoundError: Если указанный часовой пояс не найден.
    """
    return ZoneInfo(timezone_name)


def to_timezone(dt: datetime, timezone_name: str) -> datetime:
    """Конвертировать время в указанный часовой пояс.

    Naive datetime (SQLite возвращает именно такие) считается UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(get_timezone(timezone_name))
