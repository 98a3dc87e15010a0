"""Модели базы данных (таблицы).

Каждая модель — это класс Python, который соответствует таблице в БД.
Все модели наследуются от Base (из db.models_base).
"""

from src.db.models.access_grant import AccessGrant
from src.db.models.ai_model import AIModel
from src.db.models.promocode import Promocode, PromocodeRedemption
from src.db.models.request import RequestRecord
from src.db.models.transaction import Transaction, TransactionType
from src.db.models.user import User

__all__ = [
    "AIModel",
    "AccessGrant",
    "Promocode",
    "PromocodeRedemption",
    "RequestRecord",
    "Transaction",
    "TransactionType",
    "User",
]
