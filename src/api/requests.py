"""Эндпоинт запроса к модели.

POST /request
    Authorization: Bearer <token>
    {"input": "...", "modality": "text_to_text", "photo_url": "...", "format": "16:9"}

Ответы:
- 201 {"status": "success", "message": <результат>, "result": <результат>}
- 201 {"status": "lowbalance"}
- 400 {"status": "error", "code": ..., "message": ...} — бизнес-ошибка
- 401 — неизвестный или отсутствующий токен
- 404 — владелец токена удалён (до вызова модели)
- 500 — инфраструктурная ошибка: БД, сбой провайдера, владелец удалён
  до списания
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from src.api.dependencies import get_request_service
from src.core.exceptions import InvalidTokenError, UserNotFoundError
from src.providers.ai import Modality
from src.services.request_service import RequestService, RequestStatus
from src.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["requests"])


class ModelRequestBody(BaseModel):
    """Тело запроса к модели.

    Attributes:
        input: Текст запроса.
        modality: Тип запроса (по умолчанию text_to_text).
        photo_url: Ссылка на входное изображение (для image_to_*).
        aspect_ratio: Формат изображения, в JSON — поле "format".
    """

    model_config = ConfigDict(populate_by_name=True)

    input: str
    modality: str = Modality.TEXT_TO_TEXT.value
    photo_url: str | None = None
    aspect_ratio: str | None = Field(default=None, alias="format")


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def _json(status_code: int, content: dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content)


@router.post("/request")
async def create_request(
    body: ModelRequestBody,
    service: Annotated[RequestService, Depends(get_request_service)],
    authorization: Annotated[str | None, Header()] = None,
) -> JSONResponse:
    """Выполнить запрос к модели по токену доступа.

    Args:
        body: Тело запроса.
        service: Оркестратор запроса.
        authorization: Заголовок Authorization: Bearer <token>.

    Returns:
        JSONResponse со статусом обработки.
    """
    token = _bearer_token(authorization)
    if token is None:
        return _json(401, {"status": "error", "message": "Bearer token is required"})

    try:
        outcome = await service.handle(
            token,
            body.input,
            body.modality,
            image_ref=body.photo_url,
            aspect_ratio=body.aspect_ratio,
        )
    except InvalidTokenError as e:
        return _json(401, {"status": "error", "message": e.message})
    except UserNotFoundError as e:
        logger.warning("Владелец токена не найден: telegram_id=%d", e.telegram_id)
        return _json(404, {"status": "error", "message": "User not found"})
    except Exception:
        logger.exception("Ошибка обработки запроса к модели")
        return _json(500, {"status": "error", "message": "Failed to process request"})

    if outcome.status == RequestStatus.ERROR:
        return _json(
            400,
            {"status": "error", "code": outcome.code, "message": outcome.message},
        )

    if outcome.status == RequestStatus.LOW_BALANCE:
        return _json(201, {"status": "lowbalance"})

    return _json(
        201,
        {"status": "success", "message": outcome.result, "result": outcome.result},
    )
