"""Очистка данных от base64 перед записью в лог.

Ответы провайдеров изображений содержат картинки в base64 — мегабайты
текста, которые забивают лог и бесполезны при разборе ошибок.
redact_base64() заменяет каждый такой фрагмент коротким описанием:
    "data:image/png;base64,iVBORw0..."  →  "<base64 image/png, 1024 bytes>"
У "голого" base64 тип неизвестен — его передаёт вызывающий код
(bare_mime), по умолчанию пишется "unknown".
"""

import json
import re
from typing import Any

# data:image/png;base64,AAAA...
DATA_URI_RE = re.compile(
    r"data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<payload>[A-Za-z0-9+/]+={0,2})"
)

# "Голый" base64 без префикса (b64_json у Images API) — считаем base64
# только достаточно длинные строки, чтобы не задеть обычный текст
BARE_BASE64_RE = re.compile(r"^[A-Za-z0-9+/]{200,}={0,2}$")

DEFAULT_SNIPPET_LIMIT = 1000

UNKNOWN_MIME = "unknown"


def _decoded_size(payload: str) -> int:
    """Размер данных после декодирования base64 (без самого декодирования)."""
    return len(payload) * 3 // 4 - payload[-2:].count("=")


def _redact_string(value: str, bare_mime: str) -> str:
    if BARE_BASE64_RE.match(value):
        return f"<base64 {bare_mime}, {_decoded_size(value)} bytes>"

    return DATA_URI_RE.sub(
        lambda m: f"<base64 {m.group('mime')}, {_decoded_size(m.group('payload'))} bytes>",
        value,
    )


def redact_base64(obj: Any, bare_mime: str = UNKNOWN_MIME) -> Any:
    """Заменить base64-данные в структуре на короткие описания.

    Обходит вложенные словари, списки и кортежи. Исходный объект
    не изменяется — возвращается очищенная копия.

    Args:
        obj: Строка, словарь, список или любое другое значение.
        bare_mime: Тип для base64 без префикса data:.

    Returns:
        Копия с заменёнными base64-фрагментами.
    """
    if isinstance(obj, str):
        return _redact_string(obj, bare_mime)
    if isinstance(obj, dict):
        return {key: redact_base64(value, bare_mime) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [redact_base64(item, bare_mime) for item in obj]
    return obj


def log_snippet(
    obj: Any,
    limit: int = DEFAULT_SNIPPET_LIMIT,
    bare_mime: str = UNKNOWN_MIME,
) -> str:
    """Короткое безопасное представление структуры для лога.

    Args:
        obj: Что угодно (обычно — сообщение из ответа провайдера).
        limit: Максимальная длина результата.
        bare_mime: Тип для base64 без префикса data:.

    Returns:
        JSON без base64, обрезанный до limit символов.
    """
    text = json.dumps(redact_base64(obj, bare_mime), ensure_ascii=False, default=repr)
    if len(text) > limit:
        return text[:limit] + "…"
    return text
