"""Общие зависимости роутеров (FastAPI Depends).

В тестах любую зависимость можно подменить через
app.dependency_overrides[get_request_service] = lambda: fake_service
"""

import secrets
from typing import Annotated, cast

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.models import AdminSettings
from src.config.settings import settings
from src.config.yaml_config import yaml_config
from src.db.base import get_session
from src.services.billing_service import create_billing_ledger
from src.services.dispatcher import ModalityDispatcher
from src.services.request_service import RequestService

SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_dispatcher(request: Request) -> ModalityDispatcher:
    """Получить диспетчер модальностей из app.state.

    Raises:
        HTTPException: Приложение запущено без lifespan.
    """
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        raise HTTPException(status_code=500, detail="Dispatcher not available")
    return cast("ModalityDispatcher", dispatcher)


def get_request_service(
    session: SessionDep,
    dispatcher: Annotated[ModalityDispatcher, Depends(get_dispatcher)],
) -> RequestService:
    """Собрать RequestService для одного HTTP-запроса."""
    return RequestService(
        session=session,
        dispatcher=dispatcher,
        ledger=create_billing_ledger(session),
        min_balance=yaml_config.billing.min_balance,
    )


def get_admin_settings() -> AdminSettings:
    """Настройки служебного API."""
    return settings.admin


async def require_admin_key(
    admin: Annotated[AdminSettings, Depends(get_admin_settings)],
    x_admin_key: Annotated[str | None, Header()] = None,
) -> None:
    """Проверить заголовок X-Admin-Key.

    Raises:
        HTTPException: 403 — ключ не настроен (служебные эндпоинты выключены),
            401 — ключ не передан или не совпадает.
    """
    if admin.api_key is None:
        raise HTTPException(status_code=403, detail="Admin API is disabled")

    expected = admin.api_key.get_secret_value()
    if x_admin_key is None or not secrets.compare_digest(x_admin_key, expected):
        raise HTTPException(status_code=401, detail="Invalid admin key")
