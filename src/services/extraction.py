"""Извлечение результата из ответа провайдера.

Разные провайдеры и модели возвращают результат в разной форме.
ResponseExtractor приводит сырой ответ к единому ExtractionResult:
- текст (возможно пустой — тогда is_empty=True)
- или ссылка на изображение (внешняя или на сохранённый у нас файл)

Поддерживаемые формы ответа с изображением (проверяются по порядку):
1. choices[0].message.images[*] — OpenRouter/RouterAI
   ({"type": "image_url", "image_url": {"url": ...}} или просто строка)
2. choices[0].message.content[*] — части с type=image_url или type=image
3. data[0].b64_json — Images API, base64 без префикса
4. data[0].url — Images API, внешняя ссылка

Текст:
- choices[0].message.content — строка или список частей с type=text
- output[0].content[0].text — Responses API
"""

import base64
import binascii
import re
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any

from src.core.exceptions import ImageDecodeError, UnrecognizedProviderResponseError
from src.services.image_storage import ImageStorage
from src.utils.logging import get_logger
from src.utils.redaction import log_snippet

logger = get_logger(__name__)

DATA_URI_RE = re.compile(r"^data:(image/[\w.+-]+);base64,(.+)$", re.DOTALL)

# MIME-тип для base64 без префикса (b64_json и голые строки в images)
RAW_BASE64_MIME = "image/png"

TEXT_PART_TYPES = frozenset({"text", "output_text"})


class ResultKind(StrEnum):
    """Какой результат ожидается от модальности."""

    TEXT = "text"
    IMAGE = "image"


@dataclass(frozen=True)
class ExtractionResult:
    """Результат запроса в едином формате.

    Attributes:
        kind: Текст или изображение.
        text: Текст ответа (для kind=TEXT).
        image_url: Ссылка на изображение (для kind=IMAGE).
        is_remote: Ссылка ведёт на сервер провайдера, а не на наш файл.
        is_empty: Модель вернула пустой текст.
        local_path: Путь к сохранённому файлу (если изображение было в base64).
    """

    kind: ResultKind
    text: str | None = None
    image_url: str | None = None
    is_remote: bool = False
    is_empty: bool = False
    local_path: Path | None = None

    @property
    def value(self) -> str:
        """То, что уходит клиенту: текст или ссылка."""
        if self.kind == ResultKind.IMAGE:
            return self.image_url or ""
        return self.text or ""


class ResponseExtractor:
    """Разбор сырого ответа провайдера.

    Работает со словарём (response.model_dump()), а не с объектами SDK,
    поэтому не зависит от того, какие поля SDK знает.
    """

    def __init__(self, storage: ImageStorage) -> None:
        self._storage = storage

    def extract(self, raw: dict[str, Any], kind: ResultKind) -> ExtractionResult:
        """Извлечь результат нужного вида.

        Args:
            raw: Сырой ответ провайдера.
            kind: Ожидаемый вид результата.

        Returns:
            ExtractionResult.

        Raises:
            UnrecognizedProviderResponseError: Результат не найден ни в одной
                из поддерживаемых форм.
            ImageDecodeError: Изображение найдено, но base64 некорректен.
        """
        if kind == ResultKind.IMAGE:
            return self._extract_image(raw)
        return self._extract_text(raw)

    # ------------------------------------------------------------------
    # Текст
    # ------------------------------------------------------------------

    def _extract_text(self, raw: dict[str, Any]) -> ExtractionResult:
        message = _first_message(raw)
        content = message.get("content") if message else None

        if isinstance(content, str):
            return ExtractionResult(
                kind=ResultKind.TEXT, text=content, is_empty=content == ""
            )

        if isinstance(content, list):
            parts = [
                part["text"]
                for part in content
                if isinstance(part, dict)
                and part.get("type") in TEXT_PART_TYPES
                and isinstance(part.get("text"), str)
            ]
            if parts:
                text = "".join(parts)
                return ExtractionResult(
                    kind=ResultKind.TEXT, text=text, is_empty=text == ""
                )

        text = _responses_api_text(raw)
        if text is not None:
            return ExtractionResult(kind=ResultKind.TEXT, text=text, is_empty=text == "")

        self._log_unrecognized("текст", raw)
        raise UnrecognizedProviderResponseError("Модель не вернула текстовый ответ")

    # ------------------------------------------------------------------
    # Изображение
    # ------------------------------------------------------------------

    def _extract_image(self, raw: dict[str, Any]) -> ExtractionResult:
        message = _first_message(raw) or {}

        candidate = _from_images_field(message.get("images")) or _from_content(
            message.get("content")
        )
        if candidate is not None:
            return self._resolve(candidate)

        data = raw.get("data")
        if isinstance(data, list) and data and isinstance(data[0], dict):
            b64_json = data[0].get("b64_json")
            if isinstance(b64_json, str) and b64_json:
                return self._store(b64_json, RAW_BASE64_MIME)
            url = data[0].get("url")
            if isinstance(url, str) and url:
                return self._resolve(url)

        self._log_unrecognized("изображение", raw)
        raise UnrecognizedProviderResponseError("Модель не вернула изображение")

    def _resolve(self, value: str) -> ExtractionResult:
        """Превратить найденное значение в ссылку.

        http(s) — отдаём как есть; data URI и голый base64 — сохраняем файл.
        """
        if value.startswith(("http://", "https://")):
            return ExtractionResult(kind=ResultKind.IMAGE, image_url=value, is_remote=True)

        if value.startswith("data:"):
            match = DATA_URI_RE.match(value)
            if match is None:
                logger.warning("Некорректный data URI: %s", log_snippet(value, 120))
                raise ImageDecodeError("Некорректный data URI изображения")
            return self._store(match.group(2), match.group(1))

        return self._store(value, RAW_BASE64_MIME)

    def _store(self, payload: str, mime_type: str) -> ExtractionResult:
        try:
            data = base64.b64decode("".join(payload.split()), validate=True)
        except (binascii.Error, ValueError) as e:
            logger.warning("Не удалось декодировать base64 изображения: %s", e)
            raise ImageDecodeError() from e

        if not data:
            raise ImageDecodeError("Изображение в ответе пустое")

        path, url = self._storage.save(data, mime_type)
        return ExtractionResult(kind=ResultKind.IMAGE, image_url=url, local_path=path)

    @staticmethod
    def _log_unrecognized(expected: str, raw: dict[str, Any]) -> None:
        # В лог — только структура сообщения, без base64 и с ограничением длины
        message = _first_message(raw)
        logger.error(
            "Не удалось извлечь %s из ответа провайдера: %s",
            expected,
            log_snippet(
                message if message is not None else raw, bare_mime=RAW_BASE64_MIME
            ),
        )


def _first_message(raw: dict[str, Any]) -> dict[str, Any] | None:
    """choices[0].message или None."""
    choices = raw.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    return message if isinstance(message, dict) else None


def _responses_api_text(raw: dict[str, Any]) -> str | None:
    """output[0].content[0].text (Responses API)."""
    output = raw.get("output")
    if not isinstance(output, list) or not output or not isinstance(output[0], dict):
        return None
    content = output[0].get("content")
    if not isinstance(content, list) or not content or not isinstance(content[0], dict):
        return None
    text = content[0].get("text")
    return text if isinstance(text, str) else None


def _url_of(image_url: Any) -> str | None:
    """URL из {"url": ...} или из строки."""
    if isinstance(image_url, str) and image_url:
        return image_url
    if isinstance(image_url, dict):
        url = image_url.get("url")
        if isinstance(url, str) and url:
            return url
    return None


def _from_images_field(images: Any) -> str | None:
    """Форма 1: message.images."""
    if not isinstance(images, list):
        return None
    for image in images:
        if isinstance(image, str) and image:
            return image
        if isinstance(image, dict):
            url = _url_of(image.get("image_url")) or _url_of(image.get("url"))
            if url:
                return url
    return None


def _from_content(content: Any) -> str | None:
    """Форма 2: части message.content с type=image_url или type=image."""
    # Некоторые модели кладут data URI прямо в content строкой
    if isinstance(content, str):
        return content if content.startswith("data:image") else None

    if not isinstance(content, list):
        return None

    for part in content:
        if not isinstance(part, dict):
            continue
        part_type = part.get("type")
        if part_type == "image_url":
            url = _url_of(part.get("image_url"))
        elif part_type == "image":
            url = (
                _url_of(part.get("image_url"))
                or _url_of(part.get("url"))
                or _url_of(part.get("data"))
            )
        else:
            continue
        if url:
            return url
    return None
