"""Тесты для реестра AI-провайдеров."""

from typing import Any

import pytest
from typing_extensions import override

from src.config.models import AIProvidersSettings
from src.providers.ai import get_registry
from src.providers.ai.base import BaseProviderAdapter
from src.providers.ai.registry import ProviderNotAvailableError, ProviderRegistry


class MockAdapter(BaseProviderAdapter):
    """Мок-адаптер для тестирования."""

    def __init__(self, provider_name: str) -> None:
        self._provider_name = provider_name

    @property
    @override
    def provider_name(self) -> str:
        return self._provider_name

    @override
    async def complete(
        self,
        model_id: str,
        messages: list[dict[str, Any]],
        *,
        modalities: list[str] | None = None,
        image_config: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Заглушка для complete."""
        raise NotImplementedError("Это мок")


class MockFactory:
    """Мок-фабрика для тестирования."""

    def __init__(self, should_return_adapter: bool = True) -> None:
        self.should_return_adapter = should_return_adapter
        self.proxy_url_called_with: str | None = None
        self.timeout_called_with: float | None = None

    def create(
        self,
        settings: AIProvidersSettings,
        proxy_url: str | None = None,
        timeout: float | None = None,
    ) -> BaseProviderAdapter | None:
        """Создать адаптер или None."""
        self.proxy_url_called_with = proxy_url
        self.timeout_called_with = timeout
        if self.should_return_adapter:
            return MockAdapter("mock-provider")
        return None


def test_registry_register_provider() -> None:
    """Тест: регистрация провайдера в реестре."""
    registry = ProviderRegistry()

    registry.register("test-provider", MockFactory())

    assert registry.is_registered("test-provider")
    assert registry.list_providers() == ["test-provider"]


def test_registry_create_adapter_passes_proxy_and_timeout() -> None:
    """Тест: create_adapter передаёт фабрике прокси и таймаут."""
    registry = ProviderRegistry()
    factory = MockFactory()
    registry.register("test-provider", factory)

    adapter = registry.create_adapter(
        "test-provider",
        AIProvidersSettings(),
        proxy_url="http://proxy:8080",
        timeout=120.0,
    )

    assert adapter.provider_name == "mock-provider"
    assert factory.proxy_url_called_with == "http://proxy:8080"
    assert factory.timeout_called_with == 120.0


def test_registry_unknown_provider_raises() -> None:
    """Тест: незарегистрированный провайдер → ProviderNotAvailableError."""
    registry = ProviderRegistry()
    registry.register("known", MockFactory())

    with pytest.raises(ProviderNotAvailableError) as exc_info:
        registry.create_adapter("unknown", AIProvidersSettings())

    assert exc_info.value.provider_type == "unknown"
    assert "known" in exc_info.value.message


def test_registry_missing_key_raises() -> None:
    """Тест: фабрика вернула None (нет ключа) → ProviderNotAvailableError."""
    registry = ProviderRegistry()
    registry.register("no-key", MockFactory(should_return_adapter=False))

    with pytest.raises(ProviderNotAvailableError):
        registry.create_adapter("no-key", AIProvidersSettings())


def test_global_registry_has_openai_compatible_providers() -> None:
    """Тест: импорт пакета регистрирует OpenRouter, RouterAI и OpenAI."""
    assert get_registry().list_providers() == ["openai", "openrouter", "routerai"]
