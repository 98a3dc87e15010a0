"""Константы приложения."""

from pathlib import Path

# ==============================================================================
# ПУТИ К ФАЙЛАМ И ДИРЕКТОРИЯМ
# ==============================================================================

# Корень проекта (где лежит pyproject.toml)
PROJECT_ROOT = Path(__file__).parent.parent.parent


# Папка для данных (база, логи, сохранённые изображения)
#
# На Amvera: /data — персистентное хранилище (абсолютный путь обязателен!)
# Локально: ./data — папка в корне проекта
_AMVERA_DATA = Path("/data")
DATA_DIR = _AMVERA_DATA if _AMVERA_DATA.exists() else PROJECT_ROOT / "data"

# Создаём директорию если не существует (важно для первого запуска)
DATA_DIR.mkdir(parents=True, exist_ok=True)

# Папка для статики, которую раздаёт сам сервис.
# Сюда сохраняются изображения, пришедшие от провайдера в base64.
STATIC_DIR = DATA_DIR / "static"
IMAGES_DIR = STATIC_DIR / "images"

# Публичный префикс, под которым изображения доступны снаружи.
# Итоговая ссылка: {APP__PUBLIC_BASE_URL}{IMAGES_URL_PREFIX}/<файл>
IMAGES_URL_PREFIX = "/images"
