"""API эндпоинты.

Этот модуль содержит FastAPI роутеры для:
- Запросов к моделям по токену (/request)
- Пользователей Mini App (/enter, /getBalance)
- Каталога моделей и токенов доступа (/getAiModels, /chooseAiModel, ...)
- Пополнений и промокодов (/webhook_payment, /redeemPromocode, ...)
- Health check (/health) и приветствия (/api)
"""

from src.api.ai_models import router as ai_models_router
from src.api.health import router as health_router
from src.api.requests import router as requests_router
from src.api.root import router as root_router
from src.api.users import router as users_router
from src.api.webhooks import router as webhooks_router

__all__ = [
    "ai_models_router",
    "health_router",
    "requests_router",
    "root_router",
    "users_router",
    "webhooks_router",
]
