"""Эндпоинты каталога моделей и токенов доступа.

- GET /getAiModels?tlgid= — каталог (с флагом isChoosed, если передан tlgid)
- GET /getUserChosenModels?tlgid= — выбранные модели с токенами
- POST /chooseAiModel — выбрать модель (выдаёт токен доступа)
- DELETE /deleteChosenModel — убрать модель из выбранных (токен удаляется)
- POST /createAiModel — добавить модель в каталог (X-Admin-Key)
"""

from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.api.dependencies import SessionDep, require_admin_key
from src.api.serializers import grant_to_dict, model_to_dict
from src.db.repositories.ai_model_repo import AIModelRepository
from src.db.repositories.grant_repo import GrantRepository
from src.db.repositories.user_repo import UserRepository
from src.providers.ai import Modality, get_registry
from src.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["ai_models"])


class ChooseModelBody(BaseModel):
    """Тело запроса выбора модели."""

    model_id: int | None = Field(default=None, alias="modelId")
    tlgid: int | None = None


class DeleteChosenModelBody(BaseModel):
    """Тело запроса удаления выбранной модели."""

    chosen_model_id: int | None = Field(default=None, alias="chosenModelId")


class CreateAIModelBody(BaseModel):
    """Новая модель каталога.

    Цены — в USD за 1M токенов (как в прайсах провайдеров).
    """

    display_name: str
    request_name: str
    modalities: list[str] = Field(min_length=1)
    input_price_usd: Decimal = Field(ge=0)
    output_price_usd: Decimal = Field(ge=0)
    provider: str = "openrouter"
    input_price_rub: Decimal | None = None
    output_price_rub: Decimal | None = None
    path: str | None = None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"status": "error", "message": message}
    )


@router.get("/getAiModels")
async def get_ai_models(session: SessionDep, tlgid: int | None = None) -> dict[str, Any]:
    """Каталог моделей.

    Если передан tlgid — у каждой модели есть флаг isChoosed.
    """
    models = await AIModelRepository(session).list_all()

    if tlgid is None:
        return {"models": [model_to_dict(model) for model in models]}

    grants = await GrantRepository(session).list_for_telegram_id(tlgid)
    chosen_ids = {grant.model_id for grant in grants}
    return {
        "models": [model_to_dict(model, model.id in chosen_ids) for model in models]
    }


@router.get("/getUserChosenModels", response_model=None)
async def get_user_chosen_models(
    session: SessionDep, tlgid: int | None = None
) -> dict[str, Any] | JSONResponse:
    """Модели, выбранные пользователем, вместе с токенами доступа."""
    if tlgid is None:
        return _error(400, "tlgid is required")

    grants = await GrantRepository(session).list_for_telegram_id(tlgid)
    return {"models": [grant_to_dict(grant) for grant in grants]}


@router.post("/chooseAiModel")
async def choose_ai_model(body: ChooseModelBody, session: SessionDep) -> JSONResponse:
    """Выбрать модель: выдать токен доступа или вернуть существующий."""
    if body.tlgid is None or body.model_id is None:
        return _error(400, "tlgid and modelId are required")

    user = await UserRepository(session).get_by_telegram_id(body.tlgid)
    if user is None:
        return _error(404, "User not found")

    model = await AIModelRepository(session).get_by_id(body.model_id)
    if model is None:
        return _error(404, "AI model not found")

    grant, created = await GrantRepository(session).get_or_create(user, model)
    choice = grant_to_dict(grant, model)

    if not created:
        return JSONResponse(content={"status": "already_exists", "choice": choice})

    logger.info(
        "Выдан токен доступа: telegram_id=%d, model=%s",
        body.tlgid,
        model.request_name,
    )
    return JSONResponse(status_code=201, content={"status": "created", "choice": choice})


@router.delete("/deleteChosenModel")
async def delete_chosen_model(
    body: DeleteChosenModelBody, session: SessionDep
) -> JSONResponse:
    """Убрать модель из выбранных. Токен доступа перестаёт работать."""
    if body.chosen_model_id is None:
        return _error(400, "chosenModelId is required")

    repo = GrantRepository(session)
    grant = await repo.get_by_id(body.chosen_model_id)
    if grant is None:
        return _error(404, "Chosen model not found")

    deleted = grant_to_dict(grant)
    await repo.delete(grant)

    logger.info("Токен доступа удалён: grant_id=%d", body.chosen_model_id)
    return JSONResponse(content={"status": "deleted", "deletedModel": deleted})


@router.post("/createAiModel", dependencies=[Depends(require_admin_key)])
async def create_ai_model(body: CreateAIModelBody, session: SessionDep) -> JSONResponse:
    """Добавить модель в каталог (служебный эндпоинт)."""
    known = {m.value for m in Modality}
    unknown = [m for m in body.modalities if m not in known]
    if unknown:
        return _error(400, f"Unknown modalities: {', '.join(unknown)}")

    if not get_registry().is_registered(body.provider):
        return _error(400, f"Unknown provider: {body.provider}")

    model = await AIModelRepository(session).create(
        display_name=body.display_name,
        request_name=body.request_name,
        modalities=body.modalities,
        input_price_usd=body.input_price_usd,
        output_price_usd=body.output_price_usd,
        provider=body.provider,
        input_price_rub=body.input_price_rub,
        output_price_rub=body.output_price_rub,
        path=body.path,
    )

    logger.info("Модель добавлена в каталог: %s (%s)", model.request_name, model.provider)
    return JSONResponse(
        status_code=201, content={"status": "created", "model": model_to_dict(model)}
    )
