"""Корневые эндпоинты.

- GET /api — приветствие (проверка, что сервер отвечает)
"""

from fastapi import APIRouter

router = APIRouter(tags=["root"])


@router.get("/api")
async def welcome() -> dict[str, str]:
    """Приветствие API."""
    return {"message": "Welcome to the API", "status": "Server is running"}
