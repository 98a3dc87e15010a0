"""AI-провайдеры.

Каждый провайдер — это адаптер, который реализует единый интерфейс
BaseProviderAdapter. Все поддерживаемые провайдеры OpenAI-совместимые
и работают через OpenAIAdapter:
- OpenRouter (https://openrouter.ai)
- RouterAI (https://routerai.ru)
- OpenAI (https://api.openai.com)

Импорт пакета регистрирует фабрики провайдеров в глобальном реестре.

Пример использования:
    from src.providers.ai import get_registry

    adapter = get_registry().create_adapter("openrouter", settings.ai)
    raw = await adapter.complete("openai/gpt-4o-mini", messages)
"""

from src.core.exceptions import ProviderCallFailedError, ProviderNotAvailableError
from src.providers.ai.base import BaseProviderAdapter, Modality
from src.providers.ai.openai_provider import OpenAIAdapter, OpenAIAdapterFactory
from src.providers.ai.registry import ProviderRegistry, get_registry, register_provider

__all__ = [
    "BaseProviderAdapter",
    "Modality",
    "OpenAIAdapter",
    "OpenAIAdapterFactory",
    "ProviderCallFailedError",
    "ProviderNotAvailableError",
    "ProviderRegistry",
    "get_registry",
    "register_provider",
]
