"""Тесты для очистки base64 перед логированием."""

from src.utils.redaction import log_snippet, redact_base64


def test_data_uri_replaced_with_summary() -> None:
    """Тест: data URI заменяется описанием с MIME-типом и размером."""
    text = "картинка: data:image/png;base64," + "A" * 400 + " конец"

    assert redact_base64(text) == "картинка: <base64 image/png, 300 bytes> конец"


def test_padding_is_counted() -> None:
    """Тест: символы '=' не входят в размер данных."""
    assert redact_base64("data:image/png;base64,AAAAAA==") == "<base64 image/png, 4 bytes>"


def test_bare_base64_replaced() -> None:
    """Тест: длинная строка base64 без префикса (b64_json) тоже заменяется."""
    assert redact_base64("B" * 400) == "<base64 unknown, 300 bytes>"


def test_bare_base64_uses_given_mime() -> None:
    """Тест: для base64 без префикса пишется переданный тип."""
    payload = {"data": [{"b64_json": "B" * 400}]}

    result = redact_base64(payload, bare_mime="image/png")

    assert result == {"data": [{"b64_json": "<base64 image/png, 300 bytes>"}]}


def test_plain_text_untouched() -> None:
    """Тест: обычный текст не меняется."""
    assert redact_base64("Привет, мир") == "Привет, мир"


def test_nested_structures() -> None:
    """Тест: обход вложенных словарей и списков, исходник не меняется."""
    original = {
        "message": {
            "content": "ok",
            "images": [{"image_url": {"url": "data:image/jpeg;base64,AAAA"}}],
        },
        "tokens": 10,
    }

    redacted = redact_base64(original)

    assert redacted["message"]["images"][0]["image_url"]["url"] == (
        "<base64 image/jpeg, 3 bytes>"
    )
    assert redacted["tokens"] == 10
    assert original["message"]["images"][0]["image_url"]["url"].startswith("data:")


def test_log_snippet_is_truncated() -> None:
    """Тест: log_snippet обрезает длинный вывод."""
    snippet = log_snippet({"content": "x" * 5000}, limit=100)

    assert len(snippet) == 101
    assert snippet.endswith("…")
