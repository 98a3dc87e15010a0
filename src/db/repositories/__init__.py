"""Репозитории для работы с данными.

Репозиторий — это паттерн, который инкапсулирует логику доступа к данным.
Вместо прямых SQL-запросов в сервисах и роутерах используем методы репозитория.
"""

from src.db.repositories.ai_model_repo import AIModelRepository
from src.db.repositories.grant_repo import GrantRepository
from src.db.repositories.promocode_repo import PromocodeRepository
from src.db.repositories.request_repo import RequestRepository
from src.db.repositories.transaction_repo import TransactionRepository
from src.db.repositories.user_repo import UserRepository

__all__ = [
    "AIModelRepository",
    "GrantRepository",
    "PromocodeRepository",
    "RequestRepository",
    "TransactionRepository",
    "UserRepository",
]
