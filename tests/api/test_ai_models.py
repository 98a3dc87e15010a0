"""Тесты для каталога моделей и выбора моделей (токенов доступа)."""

import pytest
from httpx import AsyncClient

from src.db.models import AccessGrant, AIModel, User

NEW_MODEL = {
    "display_name": "GPT-4o",
    "request_name": "openai/gpt-4o",
    "modalities": ["text_to_text", "image_to_text"],
    "input_price_usd": "2.5",
    "output_price_usd": "10",
}


class TestCatalog:
    """GET /getAiModels и /getUserChosenModels."""

    @pytest.mark.asyncio
    async def test_list_models(
        self, client: AsyncClient, text_model: AIModel, image_model: AIModel
    ) -> None:
        """Каталог без tlgid — без флага isChoosed."""
        response = await client.get("/getAiModels")

        models = response.json()["models"]
        assert [m["id"] for m in models] == [text_model.id, image_model.id]
        assert models[0]["nameForRequest"] == "openai/gpt-4.1-nano"
        assert models[0]["inputPriceUsd"] == 0.1
        assert "isChoosed" not in models[0]

    @pytest.mark.asyncio
    async def test_list_models_marks_chosen(
        self,
        client: AsyncClient,
        test_user: User,
        text_grant: AccessGrant,
        image_model: AIModel,
    ) -> None:
        """С tlgid — флаг isChoosed у выбранных моделей."""
        response = await client.get("/getAiModels", params={"tlgid": test_user.telegram_id})

        flags = {m["id"]: m["isChoosed"] for m in response.json()["models"]}
        assert flags == {text_grant.model_id: True, image_model.id: False}

    @pytest.mark.asyncio
    async def test_user_chosen_models(
        self, client: AsyncClient, test_user: User, text_grant: AccessGrant
    ) -> None:
        """Выбранные модели возвращаются вместе с токеном."""
        response = await client.get(
            "/getUserChosenModels", params={"tlgid": test_user.telegram_id}
        )

        models = response.json()["models"]
        assert len(models) == 1
        assert models[0]["token"] == "TextToken123456"
        assert models[0]["aiModel"]["id"] == text_grant.model_id

    @pytest.mark.asyncio
    async def test_user_chosen_models_requires_tlgid(self, client: AsyncClient) -> None:
        """Без tlgid → 400."""
        response = await client.get("/getUserChosenModels")

        assert response.status_code == 400


class TestChooseModel:
    """POST /chooseAiModel и DELETE /deleteChosenModel."""

    @pytest.mark.asyncio
    async def test_choose_issues_token(
        self, client: AsyncClient, test_user: User, text_model: AIModel
    ) -> None:
        """Выбор модели → 201 и токен из 15 символов."""
        response = await client.post(
            "/chooseAiModel", json={"modelId": text_model.id, "tlgid": test_user.telegram_id}
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "created"
        assert len(body["choice"]["token"]) == 15
        assert body["choice"]["aiModel"]["id"] == text_model.id

    @pytest.mark.asyncio
    async def test_choose_again_returns_same_token(
        self, client: AsyncClient, test_user: User, text_model: AIModel
    ) -> None:
        """Повторный выбор → already_exists с тем же токеном."""
        payload = {"modelId": text_model.id, "tlgid": test_user.telegram_id}
        first = await client.post("/chooseAiModel", json=payload)

        second = await client.post("/chooseAiModel", json=payload)

        assert second.status_code == 200
        assert second.json()["status"] == "already_exists"
        assert second.json()["choice"]["token"] == first.json()["choice"]["token"]

    @pytest.mark.asyncio
    async def test_choose_validation(
        self, client: AsyncClient, test_user: User, text_model: AIModel
    ) -> None:
        """Нет полей → 400, неизвестные пользователь или модель → 404."""
        missing = await client.post("/chooseAiModel", json={"tlgid": test_user.telegram_id})
        no_user = await client.post(
            "/chooseAiModel", json={"modelId": text_model.id, "tlgid": 404}
        )
        no_model = await client.post(
            "/chooseAiModel", json={"modelId": 9999, "tlgid": test_user.telegram_id}
        )

        assert missing.status_code == 400
        assert no_user.status_code == 404
        assert no_model.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_chosen_model(
        self, client: AsyncClient, test_user: User, text_grant: AccessGrant
    ) -> None:
        """Удаление выбранной модели отзывает токен."""
        grant_id = text_grant.id

        response = await client.request(
            "DELETE", "/deleteChosenModel", json={"chosenModelId": grant_id}
        )

        assert response.status_code == 200
        assert response.json()["status"] == "deleted"
        assert response.json()["deletedModel"]["id"] == grant_id

        chosen = await client.get(
            "/getUserChosenModels", params={"tlgid": test_user.telegram_id}
        )
        assert chosen.json()["models"] == []

    @pytest.mark.asyncio
    async def test_delete_unknown(self, client: AsyncClient) -> None:
        """Несуществующая запись → 404, без поля → 400."""
        unknown = await client.request(
            "DELETE", "/deleteChosenModel", json={"chosenModelId": 9999}
        )
        missing = await client.request("DELETE", "/deleteChosenModel", json={})

        assert unknown.status_code == 404
        assert missing.status_code == 400


class TestCreateModel:
    """POST /createAiModel (служебный)."""

    @pytest.mark.asyncio
    async def test_create_model(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        """Модель добавляется в каталог."""
        response = await client.post(
            "/createAiModel", json=NEW_MODEL, headers=admin_headers
        )

        assert response.status_code == 201
        model = response.json()["model"]
        assert model["nameForRequest"] == "openai/gpt-4o"
        assert model["provider"] == "openrouter"
        assert model["outputPriceUsd"] == 10.0

        catalog = await client.get("/getAiModels")
        assert len(catalog.json()["models"]) == 1

    @pytest.mark.asyncio
    async def test_create_model_requires_key(self, client: AsyncClient) -> None:
        """Без ключа → 401, неверный ключ → 401."""
        no_key = await client.post("/createAiModel", json=NEW_MODEL)
        wrong_key = await client.post(
            "/createAiModel", json=NEW_MODEL, headers={"X-Admin-Key": "wrong"}
        )

        assert no_key.status_code == 401
        assert wrong_key.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_modality_rejected(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        """Неизвестная модальность → 400."""
        response = await client.post(
            "/createAiModel",
            json={**NEW_MODEL, "modalities": ["text_to_video"]},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert "text_to_video" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_unknown_provider_rejected(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        """Незарегистрированный провайдер → 400."""
        response = await client.post(
            "/createAiModel",
            json={**NEW_MODEL, "provider": "nowhere"},
            headers=admin_headers,
        )

        assert response.status_code == 400
