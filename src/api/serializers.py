"""Преобразование моделей БД в JSON для Mini App."""

from decimal import Decimal
from typing import Any

from src.db.models import AccessGrant, AIModel, User


def _money(value: Decimal | float | None) -> float | None:
    return None if value is None else float(value)


def user_to_dict(user: User) -> dict[str, Any]:
    """Данные пользователя."""
    return {
        "id": user.id,
        "tlgid": user.telegram_id,
        "name": user.name,
        "balance": _money(user.balance),
        "createdAt": user.created_at.isoformat() if user.created_at else None,
    }


def model_to_dict(model: AIModel, is_choosed: bool | None = None) -> dict[str, Any]:
    """Карточка модели из каталога.

    Args:
        model: Модель.
        is_choosed: Выбрана ли модель пользователем (None — поле не добавляется).
    """
    data: dict[str, Any] = {
        "id": model.id,
        "nameForUser": model.display_name,
        "nameForRequest": model.request_name,
        "provider": model.provider,
        "modalities": list(model.modalities),
        "inputPriceUsd": _money(model.input_price_usd),
        "outputPriceUsd": _money(model.output_price_usd),
        "inputPriceRub": _money(model.input_price_rub),
        "outputPriceRub": _money(model.output_price_rub),
        "path": model.path,
    }
    if is_choosed is not None:
        data["isChoosed"] = is_choosed
    return data


def grant_to_dict(grant: AccessGrant, model: AIModel | None = None) -> dict[str, Any]:
    """Выбранная модель вместе с токеном доступа.

    Args:
        grant: Токен доступа.
        model: Модель токена (если уже загружена отдельно).
    """
    return {
        "id": grant.id,
        "tlgid": grant.telegram_id,
        "userId": grant.user_id,
        "token": grant.token,
        "aiModel": model_to_dict(model if model is not None else grant.model),
    }
