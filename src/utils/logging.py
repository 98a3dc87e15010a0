"""Настройка логирования.

Два канала вывода:
1. Консоль (stdout) — с цветной подсветкой уровней, если это терминал
2. Файл с ротацией — для хранения истории (data/logs/app.log)

Компактный формат логов:
    25-01-07 21:55:46 | INFO | services.request_service | Сообщение
"""

import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler

from typing_extensions import override

from src.config.constants import DATA_DIR
from src.utils.timezone import get_timezone

# Папка для логов
LOGS_DIR = DATA_DIR / "logs"

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%y-%m-%d %H:%M:%S"  # 25-01-07 вместо 2025-01-07

# Ротация: app.log + app.log.1..3, по 5 МБ
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUP_COUNT = 3


# ==============================================================================
# ANSI-коды для цветного вывода в терминале
# ==============================================================================
#
# Формат: \033[<код>m — где <код> определяет цвет/стиль.
# 31 = красный, 32 = зелёный, 33 = жёлтый, 35 = пурпурный, 36 = голубой


class AnsiColors:
    """ANSI escape-коды для цветного вывода в терминале."""

    RESET = "\033[0m"

    DEBUG = "\033[36m"
    INFO = "\033[32m"
    WARNING = "\033[33m"
    ERROR = "\033[31m"
    CRITICAL = "\033[35m"


LEVEL_COLORS: dict[str, str] = {
    "DEBUG": AnsiColors.DEBUG,
    "INFO": AnsiColors.INFO,
    "WARNING": AnsiColors.WARNING,
    "ERROR": AnsiColors.ERROR,
    "CRITICAL": AnsiColors.CRITICAL,
}


class TimezoneFormatter(logging.Formatter):
    """Форматтер логов с поддержкой часового пояса.

    Стандартный logging.Formatter использует локальное время системы,
    а сервер на хостинге обычно живёт в UTC.
    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        timezone_name: str = "Europe/Moscow",
    ) -> None:
        super().__init__(fmt, datefmt)
        self.timezone = get_timezone(timezone_name)

    @override
    def formatTime(
        self,
        record: logging.LogRecord,
        datefmt: str | None = None,
    ) -> str:
        dt = datetime.fromtimestamp(record.created, tz=self.timezone)
        return dt.strftime(datefmt or self.datefmt or self.default_time_format)


class ColoredFormatter(TimezoneFormatter):
    """Форматтер для консоли.

    - Убирает префикс "src." из имени модуля
    - Подсвечивает уровень логирования цветом (если use_colors=True)
    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        timezone_name: str = "Europe/Moscow",
        use_colors: bool = True,
    ) -> None:
        super().__init__(fmt, datefmt, timezone_name)
        self.use_colors = use_colors

    @override
    def format(self, record: logging.LogRecord) -> str:
        # src.services.dispatcher → services.dispatcher
        original_name = record.name
        record.name = record.name.removeprefix("src.")
        try:
            formatted = super().format(record)
        finally:
            # Другие handler-ы должны видеть оригинальное имя
            record.name = original_name

        level_color = LEVEL_COLORS.get(record.levelname)
        if not self.use_colors or not level_color:
            return formatted

        return formatted.replace(
            f"| {record.levelname} |",
            f"| {level_color}{record.levelname}{AnsiColors.RESET} |",
            1,
        )


def _should_use_colors() -> bool:
    """Определить, можно ли выводить цвета.

    Учитывает стандарт NO_COLOR (https://no-color.org/) и то,
    является ли stdout терминалом (в Docker/CI — нет).
    """
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stdout.isatty()


def _attach(logger: logging.Logger, *handlers: logging.Handler) -> None:
    """Заменить handler-ы логгера и отключить всплытие к корню."""
    logger.handlers = list(handlers)
    logger.propagate = False


def setup_logging(level: str = "INFO", timezone_name: str = "Europe/Moscow") -> None:
    """Настроить логирование приложения.

    Логи выводятся в консоль и сохраняются в файл с ротацией
    (data/logs/app.log, максимум 5 МБ, 3 резервных копии).
    Повторный вызов заменяет ранее установленные handler-ы.

    Args:
        level: Уровень логирования (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        timezone_name: Часовой пояс для отображения времени в логах.
    """
    LOGS_DIR.mkdir(parents=True, exist_ok=True)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        ColoredFormatter(
            LOG_FORMAT,
            datefmt=DATE_FORMAT,
            timezone_name=timezone_name,
            use_colors=_should_use_colors(),
        )
    )

    file_handler = RotatingFileHandler(
        LOGS_DIR / "app.log",
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(
        TimezoneFormatter(LOG_FORMAT, datefmt=DATE_FORMAT, timezone_name=timezone_name)
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    root_logger.handlers = [console_handler, file_handler]

    # ===========================================================================
    # Uvicorn пишет в своём формате — переводим его на наши handler-ы
    # ===========================================================================
    _attach(logging.getLogger("uvicorn.error"), console_handler, file_handler)
    _attach(logging.getLogger("uvicorn.access"), console_handler, file_handler)
    _attach(logging.getLogger("uvicorn"))

    # httpx логирует каждый запрос на INFO (курс ЦБ, провайдеры) — это шум
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Получить логгер с указанным именем.

    Args:
        name: Имя логгера (обычно __name__).

    Returns:
        Настроенный экземпляр логгера.
    """
    return logging.getLogger(name)
