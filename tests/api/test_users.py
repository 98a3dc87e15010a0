"""Тесты для /enter, /getBalance, /api и /health."""

import pytest
from httpx import AsyncClient

from src.db.models import User


@pytest.mark.asyncio
async def test_enter_new_user_shows_onboarding(client: AsyncClient) -> None:
    """Тест: первый вход → showOnboarding."""
    response = await client.post("/enter", json={"tlgid": 42, "name": "Аня"})

    assert response.status_code == 200
    assert response.json() == {"userData": {"result": "showOnboarding"}}


@pytest.mark.asyncio
async def test_enter_existing_user_shows_index(
    client: AsyncClient, test_user: User
) -> None:
    """Тест: повторный вход → данные пользователя и showIndexPage."""
    response = await client.post("/enter", json={"tlgid": test_user.telegram_id})

    data = response.json()["userData"]
    assert data["result"] == "showIndexPage"
    assert data["tlgid"] == test_user.telegram_id
    assert data["balance"] == 100.0


@pytest.mark.asyncio
async def test_enter_twice(client: AsyncClient) -> None:
    """Тест: второй вход того же пользователя уже не онбординг."""
    await client.post("/enter", json={"tlgid": 42})

    response = await client.post("/enter", json={"tlgid": 42})

    assert response.json()["userData"]["result"] == "showIndexPage"


@pytest.mark.asyncio
async def test_get_balance(client: AsyncClient, test_user: User) -> None:
    """Тест: баланс пользователя."""
    response = await client.get("/getBalance", params={"tlgid": test_user.telegram_id})

    assert response.status_code == 200
    assert response.json() == {"status": "success", "balance": 100.0}


@pytest.mark.asyncio
async def test_get_balance_requires_tlgid(client: AsyncClient) -> None:
    """Тест: без tlgid → 400."""
    response = await client.get("/getBalance")

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_get_balance_unknown_user(client: AsyncClient) -> None:
    """Тест: неизвестный пользователь → 404."""
    response = await client.get("/getBalance", params={"tlgid": 404})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_welcome_and_health(client: AsyncClient) -> None:
    """Тест: служебные эндпоинты отвечают."""
    welcome = await client.get("/api")
    health = await client.get("/health")

    assert welcome.json() == {"message": "Welcome to the API", "status": "Server is running"}
    assert health.json() == {"status": "ok"}
