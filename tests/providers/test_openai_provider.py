"""Тесты для OpenAI-совместимого адаптера и фабрики адаптеров."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest
from pydantic import SecretStr

from src.config.models import AIProvidersSettings
from src.core.exceptions import ProviderCallFailedError
from src.providers.ai.openai_provider import OpenAIAdapter, OpenAIAdapterFactory

OPENROUTER_URL = "https://openrouter.ai/api/v1"


def _fake_client(response_dump: dict | None = None, error: Exception | None = None) -> MagicMock:
    """Мок AsyncOpenAI: chat.completions.create и close."""
    client = MagicMock()
    response = MagicMock()
    response.model_dump.return_value = response_dump or {}
    client.chat.completions.create = AsyncMock(return_value=response, side_effect=error)
    client.close = AsyncMock()
    return client


# ==============================================================================
# ФАБРИКА
# ==============================================================================


def test_openai_adapter_factory_creates_adapter_when_key_present() -> None:
    """Тест: фабрика создаёт адаптер когда API-ключ настроен."""
    settings = AIProvidersSettings(openrouter_api_key=SecretStr("sk-or-test-key"))
    factory = OpenAIAdapterFactory(
        name="openrouter", base_url=OPENROUTER_URL, api_key_attr="openrouter_api_key"
    )

    adapter = factory.create(settings, timeout=120.0)

    assert isinstance(adapter, OpenAIAdapter)
    assert adapter.provider_name == "openrouter"
    assert adapter._base_url == OPENROUTER_URL
    assert adapter._timeout == 120.0
    assert adapter._client.api_key == "sk-or-test-key"
    # Один вызов на запрос — SDK не должен повторять сам
    assert adapter._client.max_retries == 0


def test_openai_adapter_factory_returns_none_when_key_absent() -> None:
    """Тест: фабрика возвращает None когда API-ключ не настроен."""
    factory = OpenAIAdapterFactory(
        name="openrouter", base_url=OPENROUTER_URL, api_key_attr="openrouter_api_key"
    )

    assert factory.create(AIProvidersSettings()) is None


def test_openai_adapter_factory_picks_its_own_key() -> None:
    """Тест: фабрика выбирает правильный ключ из нескольких."""
    settings = AIProvidersSettings(
        openrouter_api_key=SecretStr("sk-or-key"),
        routerai_api_key=SecretStr("routerai-key"),
    )
    routerai_factory = OpenAIAdapterFactory(
        name="routerai",
        base_url="https://routerai.ru/api/v1",
        api_key_attr="routerai_api_key",
    )

    adapter = routerai_factory.create(settings)

    assert isinstance(adapter, OpenAIAdapter)
    assert adapter._client.api_key == "routerai-key"
    assert adapter.provider_name == "routerai"


def test_openai_adapter_factory_passes_proxy() -> None:
    """Тест: фабрика создаёт адаптер с прокси когда proxy_url указан."""
    settings = AIProvidersSettings(openrouter_api_key=SecretStr("sk-or-test-key"))
    factory = OpenAIAdapterFactory(
        name="openrouter", base_url=OPENROUTER_URL, api_key_attr="openrouter_api_key"
    )

    adapter = factory.create(settings, proxy_url="http://proxy.example.com:8080")

    assert isinstance(adapter, OpenAIAdapter)
    assert adapter._proxy_url == "http://proxy.example.com:8080"


# ==============================================================================
# ВЫЗОВ CHAT COMPLETIONS
# ==============================================================================


class TestOpenAIAdapterComplete:
    """Тесты OpenAIAdapter.complete()."""

    @pytest.mark.asyncio
    async def test_returns_raw_dump(self) -> None:
        """Адаптер возвращает сырой ответ без разбора."""
        # Arrange
        dump = {"choices": [{"message": {"content": "Привет!"}}], "usage": {}}
        client = _fake_client(dump)
        adapter = OpenAIAdapter("key", name="openrouter", client=client)

        # Act
        raw = await adapter.complete("openai/gpt-4o-mini", [{"role": "user", "content": "hi"}])

        # Assert
        assert raw == dump
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "openai/gpt-4o-mini"
        assert kwargs["extra_body"] is None

    @pytest.mark.asyncio
    async def test_sends_modalities_and_image_config(self) -> None:
        """modalities и image_config уходят через extra_body."""
        # Arrange
        client = _fake_client({"choices": []})
        adapter = OpenAIAdapter("key", client=client)

        # Act
        await adapter.complete(
            "google/gemini-2.5-flash-image",
            [{"role": "user", "content": "кот"}],
            modalities=["image", "text"],
            image_config={"aspect_ratio": "16:9"},
        )

        # Assert
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["extra_body"] == {
            "modalities": ["image", "text"],
            "image_config": {"aspect_ratio": "16:9"},
        }

    @pytest.mark.asyncio
    async def test_connection_error_is_retryable_failure(self) -> None:
        """Сетевая ошибка SDK → ProviderCallFailedError(is_retryable=True)."""
        # Arrange
        error = openai.APIConnectionError(
            request=httpx.Request("POST", f"{OPENROUTER_URL}/chat/completions")
        )
        adapter = OpenAIAdapter("key", name="openrouter", client=_fake_client(error=error))

        # Act
        with pytest.raises(ProviderCallFailedError) as exc_info:
            await adapter.complete("openai/gpt-4o-mini", [])

        # Assert
        assert exc_info.value.is_retryable is True
        assert exc_info.value.provider == "openrouter"
        assert exc_info.value.original_error is error
        assert str(exc_info.value).startswith("[openrouter:openai/gpt-4o-mini]")

    @pytest.mark.asyncio
    async def test_other_error_is_not_retryable(self) -> None:
        """Прочие ошибки → ProviderCallFailedError(is_retryable=False)."""
        # Arrange
        adapter = OpenAIAdapter("key", client=_fake_client(error=ValueError("bad model")))

        # Act / Assert
        with pytest.raises(ProviderCallFailedError) as exc_info:
            await adapter.complete("unknown/model", [])
        assert exc_info.value.is_retryable is False

    @pytest.mark.asyncio
    async def test_aclose_closes_client(self) -> None:
        """aclose() закрывает клиент SDK."""
        client = _fake_client()
        adapter = OpenAIAdapter("key", client=client)

        await adapter.aclose()

        client.close.assert_awaited_once()
