"""Хранилище изображений, пришедших от провайдера в base64.

Провайдеры изображений часто возвращают картинку не ссылкой,
а data URI (data:image/png;base64,...). Клиенту нужна ссылка, поэтому
изображение сохраняется в DATA_DIR/static/images и раздаётся
самим сервисом по адресу {public_base_url}/images/<файл>.

Имя файла — uuid4, поэтому одновременные запросы не перезаписывают
файлы друг друга.
"""

import uuid
from pathlib import Path

from src.config.constants import IMAGES_DIR, IMAGES_URL_PREFIX
from src.utils.logging import get_logger

logger = get_logger(__name__)

# MIME-тип → расширение файла
MIME_EXTENSIONS: dict[str, str] = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}

DEFAULT_EXTENSION = "png"


class ImageStorage:
    """Сохранение изображений в локальную папку со статикой.

    Пример использования:
        storage = ImageStorage(IMAGES_DIR, "https://api.example.com")
        path, url = storage.save(png_bytes, "image/png")
        # url == "https://api.example.com/images/3f2a....png"
    """

    def __init__(self, directory: Path = IMAGES_DIR, public_base_url: str = "") -> None:
        """Создать хранилище.

        Args:
            directory: Папка для файлов (создаётся при необходимости).
            public_base_url: Публичный адрес сервиса без завершающего слеша.
        """
        self._directory = directory
        self._public_base_url = public_base_url.rstrip("/")

    @property
    def directory(self) -> Path:
        return self._directory

    def save(self, data: bytes, mime_type: str) -> tuple[Path, str]:
        """Сохранить изображение.

        Args:
            data: Байты изображения.
            mime_type: MIME-тип из data URI (image/png, image/jpeg, ...).

        Returns:
            Кортеж (путь к файлу, публичная ссылка).
        """
        extension = MIME_EXTENSIONS.get(mime_type.lower(), DEFAULT_EXTENSION)
        filename = f"{uuid.uuid4().hex}.{extension}"

        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._directory / filename
        path.write_bytes(data)

        logger.info("Изображение сохранено: %s (%d bytes)", filename, len(data))
        return path, f"{self._public_base_url}{IMAGES_URL_PREFIX}/{filename}"
