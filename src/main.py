"""Точка входа в приложение.

Команда запуска:
    uvicorn src.main:app --host 0.0.0.0 --port 4444

Или через python:
    python -m src
    python src/main.py
"""

import sys
from pathlib import Path

# Добавляем корень проекта в sys.path для запуска через python src/main.py
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

# Импорты после sys.path, иначе не найдёт модуль src при запуске python src/main.py
import logging  # noqa: E402

from src.app import create_app  # noqa: E402
from src.config.settings import settings  # noqa: E402
from src.utils.logging import setup_logging  # noqa: E402

# Настраиваем логирование при импорте модуля
setup_logging(
    level=settings.logging.level,
    timezone_name=settings.logging.timezone,
)

_logger = logging.getLogger(__name__)
_logger.info("AI Broker: логирование настроено, загрузка приложения")

app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.app.port)
