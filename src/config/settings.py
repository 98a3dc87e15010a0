"""Настройки приложения через переменные окружения.

ВАЖНО: Этот модуль загружает настройки из .env файла при импорте.
Для использования только классов настроек (без загрузки .env)
импортируйте из src.config.models вместо этого модуля.

Пример для тестов:
    # Изолированный импорт без побочных эффектов:
    from src.config.models import AIProvidersSettings

    # НЕ используйте в тестах (загрузит .env):
    from src.config.settings import AIProvidersSettings
"""

import sys
from pathlib import Path

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

# Путь к корню проекта (вычисляем от текущего файла)
# src/config/settings.py → src/config → src → корень проекта
PROJECT_ROOT = Path(__file__).parent.parent.parent
ENV_FILE = PROJECT_ROOT / ".env"

# Если файл .env существует — используем его, иначе None (только переменные окружения)
ENV_FILE_PATH = ENV_FILE if ENV_FILE.exists() else None

from src.config.models import (  # noqa: E402
    AdminSettings,
    AIProvidersSettings,
    AppSettings,
    CORSSettings,
    DatabaseSettings,
    LoggingSettings,
)

__all__ = [
    "AIProvidersSettings",
    "AdminSettings",
    "AppSettings",
    "CORSSettings",
    "DatabaseSettings",
    "LoggingSettings",
    "Settings",
    "load_settings",
    "settings",
]

# Сообщение по умолчанию для ошибок конфигурации
DEFAULT_ERROR_MESSAGE = "Ошибка конфигурации. Проверьте файл .env или переменные окружения"


class Settings(BaseSettings):
    """Главные настройки приложения.

    Настройки загружаются из двух источников (в порядке приоритета):
    1. Переменные окружения (приоритет выше)
    2. Файл .env (если существует)

    Вложенные секции задаются через двойное подчёркивание:
        AI__OPENROUTER_API_KEY=sk-or-...
        APP__PUBLIC_BASE_URL=https://api.example.com
    """

    model_config = SettingsConfigDict(
        env_file=ENV_FILE_PATH,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app: AppSettings = AppSettings()
    database: DatabaseSettings = DatabaseSettings()
    logging: LoggingSettings = LoggingSettings()
    admin: AdminSettings = AdminSettings()
    ai: AIProvidersSettings = AIProvidersSettings()
    cors: CORSSettings = CORSSettings()

    # URL прокси-сервера для запросов к AI-провайдерам (опционально).
    # Формат: http://host:port, https://host:port, socks5://host:port
    proxy: str | None = None


def _format_validation_error(error: ValidationError) -> str:
    """Преобразовать ошибку Pydantic в понятное русское сообщение.

    Args:
        error: Ошибка валидации от Pydantic.

    Returns:
        Понятное сообщение на русском языке.
    """
    messages: list[str] = [DEFAULT_ERROR_MESSAGE]

    for err in error.errors():
        field_path = ".".join(str(loc) for loc in err["loc"])
        messages.append(f"Поле: {field_path} — {err['msg']}")

    return "\n".join(messages)


def load_settings() -> Settings:
    """Загрузить настройки из переменных окружения.

    Если настройки некорректны — выводит понятную ошибку на русском
    и завершает программу.

    Returns:
        Объект Settings с загруженными настройками.
    """
    try:
        return Settings()
    except ValidationError as e:
        print(_format_validation_error(e), file=sys.stderr)
        sys.exit(1)


# Загружаем настройки при импорте модуля.
settings = load_settings()
