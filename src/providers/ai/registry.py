"""Реестр AI-провайдеров (паттерн Registry).

Провайдер модели хранится строкой в AIModel.provider. Реестр сопоставляет
эту строку с фабрикой, которая умеет создать адаптер из настроек.
Новый провайдер добавляется регистрацией фабрики, без изменения диспетчера.
"""

from typing import Protocol

from src.config.models import AIProvidersSettings
from src.core.exceptions import ProviderNotAvailableError
from src.providers.ai.base import BaseProviderAdapter
from src.utils.logging import get_logger

logger = get_logger(__name__)


class ProviderAdapterFactory(Protocol):
    """Протокол фабрики адаптеров (structural subtyping)."""

    def create(
        self,
        settings: AIProvidersSettings,
        proxy_url: str | None = None,
        timeout: float | None = None,
    ) -> BaseProviderAdapter | None:
        """Создать адаптер, если доступен API-ключ (иначе None)."""
        ...


class ProviderRegistry:
    """Реестр фабрик AI-провайдеров."""

    def __init__(self) -> None:
        self._factories: dict[str, ProviderAdapterFactory] = {}

    def register(self, provider_type: str, factory: ProviderAdapterFactory) -> None:
        """Зарегистрировать (или заменить) фабрику провайдера."""
        self._factories[provider_type] = factory
        logger.debug("Зарегистрирован провайдер: %s", provider_type)

    def is_registered(self, provider_type: str) -> bool:
        """Проверить, есть ли фабрика для провайдера."""
        return provider_type in self._factories

    def create_adapter(
        self,
        provider_type: str,
        settings: AIProvidersSettings,
        proxy_url: str | None = None,
        timeout: float | None = None,
    ) -> BaseProviderAdapter:
        """Создать адаптер для провайдера.

        Args:
            provider_type: Ключ провайдера (openrouter, routerai, openai).
            settings: Настройки с API-ключами.
            proxy_url: URL прокси (опционально).
            timeout: Таймаут запросов в секундах.

        Returns:
            Готовый адаптер.

        Raises:
            ProviderNotAvailableError: Провайдер не зарегистрирован
                или для него не задан API-ключ.
        """
        factory = self._factories.get(provider_type)
        if factory is None:
            raise ProviderNotAvailableError(
                f"Провайдер '{provider_type}' не зарегистрирован. "
                f"Доступные: {', '.join(self.list_providers())}",
                provider_type=provider_type,
            )

        adapter = factory.create(settings, proxy_url=proxy_url, timeout=timeout)
        if adapter is None:
            raise ProviderNotAvailableError(
                f"API-ключ для '{provider_type}' не настроен.",
                provider_type=provider_type,
            )

        return adapter

    def list_providers(self) -> list[str]:
        """Список зарегистрированных провайдеров (по алфавиту)."""
        return sorted(self._factories)


_registry = ProviderRegistry()


def register_provider(provider_type: str, factory: ProviderAdapterFactory) -> None:
    """Зарегистрировать провайдер в глобальном реестре."""
    _registry.register(provider_type, factory)


def get_registry() -> ProviderRegistry:
    """Получить глобальный реестр."""
    return _registry
