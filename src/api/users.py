"""Эндпоинты пользователей Mini App.

- POST /enter — вход в приложение (создаёт пользователя при первом входе)
- GET /getBalance?tlgid= — баланс пользователя
"""

from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.api.dependencies import SessionDep
from src.api.serializers import user_to_dict
from src.db.repositories.user_repo import UserRepository
from src.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["users"])


class EnterBody(BaseModel):
    """Тело запроса входа."""

    tlgid: int
    name: str | None = None


@router.post("/enter")
async def enter(body: EnterBody, session: SessionDep) -> dict[str, Any]:
    """Вход пользователя в Mini App.

    Новый пользователь получает result=showOnboarding,
    существующий — свои данные и result=showIndexPage.
    """
    user, created = await UserRepository(session).get_or_create(body.tlgid, body.name)

    if created:
        logger.info("Новый пользователь: telegram_id=%d", body.tlgid)
        return {"userData": {"result": "showOnboarding"}}

    user_data = user_to_dict(user)
    user_data["result"] = "showIndexPage"
    return {"userData": user_data}


@router.get("/getBalance", response_model=None)
async def get_balance(
    session: SessionDep, tlgid: int | None = None
) -> dict[str, Any] | JSONResponse:
    """Текущий баланс пользователя."""
    if tlgid is None:
        return JSONResponse(
            status_code=400,
            content={"status": "error", "message": "tlgid is required"},
        )

    user = await UserRepository(session).get_by_telegram_id(tlgid)
    if user is None:
        return JSONResponse(
            status_code=404,
            content={"status": "error", "message": "User not found"},
        )

    return {"status": "success", "balance": float(user.balance)}
