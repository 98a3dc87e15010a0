"""Централизованные исключения приложения.

Этот модуль содержит ВСЕ кастомные исключения проекта.
Удобный импорт: `from src.core.exceptions import SomeError`

Организация исключений по доменам:
- Database: Ошибки работы с БД
- Access: Ошибки доступа (токены моделей)
- Dispatch: Бизнес-ошибки обработки запроса (возвращаются клиенту как есть)
- AI Providers: Ошибки реестра и вызова провайдеров (клиенту — 500)
- Rates: Ошибки источника курса валют
- Promocodes: Ошибки промокодов

Недостаточный баланс и пропуск списания — НЕ исключения, а результаты
(RequestOutcome.status, SettlementOutcome.billing_skipped).
"""

from collections.abc import Sequence

from typing_extensions import override

# =============================================================================
# DATABASE EXCEPTIONS
# =============================================================================
# Исключения для работы с базой данных.
# Иерархия: DatabaseError -> UserNotFoundError, SettlementError
# =============================================================================


class DatabaseError(Exception):
    """Базовое исключение для ошибок работы с БД.

    Используется как родительский класс для всех ошибок БД.
    Может быть потенциально восстановимым (retry) в зависимости от причины.
    """

    def __init__(self, message: str, retryable: bool = False) -> None:
        """Создать исключение БД.

        Args:
            message: Описание ошибки.
            retryable: Можно ли повторить операцию (True для временных сбоев).
        """
        super().__init__(message)
        self.message = message
        self.retryable = retryable


class UserNotFoundError(DatabaseError):
    """Пользователь (владелец токена) не найден в базе данных.

    Невосстановимая ошибка — пользователь должен пройти /enter.
    """

    def __init__(self, telegram_id: int) -> None:
        """Создать исключение о ненайденном пользователе.

        Args:
            telegram_id: ID пользователя в Telegram.
        """
        super().__init__(
            f"Пользователь с telegram_id={telegram_id} не найден в БД",
            retryable=False,
        )
        self.telegram_id = telegram_id


class SettlementError(DatabaseError):
    """Запись журнала не может быть рассчитана.

    Возникает после вызова провайдера: владелец удалён до списания
    или запись уже рассчитана. Клиенту — внутренняя ошибка (500).
    """

    def __init__(self, request_id: int, reason: str) -> None:
        """Создать ошибку расчёта.

        Args:
            request_id: ID записи журнала.
            reason: Причина.
        """
        super().__init__(f"Запрос #{request_id} не рассчитан: {reason}")
        self.request_id = request_id
        self.reason = reason


# =============================================================================
# ACCESS EXCEPTIONS
# =============================================================================


class InvalidTokenError(Exception):
    """Токен доступа к модели не найден.

    Отдаётся клиенту как 401.
    """

    def __init__(self, message: str = "Неизвестный токен доступа") -> None:
        super().__init__(message)
        self.message = message


# =============================================================================
# DISPATCH EXCEPTIONS
# =============================================================================
# Бизнес-ошибки запроса к модели. Сообщение возвращается клиенту дословно
# вместе с машиночитаемым кодом. Ни одна из них не приводит к списанию.
# =============================================================================


class DispatchError(Exception):
    """Базовая ошибка обработки запроса к модели.

    Attributes:
        message: Человекочитаемое описание (уходит клиенту).
        code: Машиночитаемый код ошибки.
    """

    code = "dispatch_error"

    def __init__(self, message: str, code: str | None = None) -> None:
        """Создать ошибку обработки запроса.

        Args:
            message: Описание ошибки.
            code: Код ошибки (по умолчанию — код класса).
        """
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class UnknownModalityError(DispatchError):
    """Тип запроса не входит в список известных модальностей."""

    code = "unknown_modality"

    def __init__(self, modality: str, known: Sequence[str]) -> None:
        super().__init__(
            f"Неизвестный тип запроса '{modality}'. "
            f"Допустимые значения: {', '.join(known)}"
        )
        self.modality = modality
        self.known = list(known)


class ModalityUnsupportedError(DispatchError):
    """Модель не поддерживает запрошенную модальность.

    Attributes:
        modality: Запрошенная модальность.
        allowed: Модальности, которые модель поддерживает.
    """

    code = "modality_unsupported"

    def __init__(self, modality: str, allowed: Sequence[str]) -> None:
        super().__init__(
            f"Модель не поддерживает тип запроса '{modality}'. "
            f"Доступно: {', '.join(allowed)}"
        )
        self.modality = modality
        self.allowed = list(allowed)


class MissingRequiredFieldError(DispatchError):
    """Не передано обязательное для модальности поле."""

    code = "missing_required_field"

    def __init__(self, field: str, message: str | None = None) -> None:
        """Создать ошибку об отсутствующем поле.

        Args:
            field: Имя поля запроса (photo_url, format).
            message: Текст ошибки (по умолчанию — стандартный).
        """
        super().__init__(message or f"Не передано обязательное поле '{field}'")
        self.field = field


class InvalidAspectRatioError(MissingRequiredFieldError):
    """Недопустимый формат изображения (соотношение сторон)."""

    code = "invalid_aspect_ratio"

    def __init__(self, value: str, allowed: Sequence[str]) -> None:
        super().__init__(
            "format",
            f"Недопустимый формат '{value}'. "
            f"Допустимые значения: {', '.join(allowed)}",
        )
        self.value = value
        self.allowed = list(allowed)


class UnrecognizedProviderResponseError(DispatchError):
    """Ответ провайдера не содержит результата в известном формате."""

    code = "unrecognized_response"

    def __init__(
        self, message: str = "Не удалось распознать ответ провайдера"
    ) -> None:
        super().__init__(message)


class ImageDecodeError(DispatchError):
    """Изображение в ответе провайдера найдено, но его не удалось декодировать."""

    code = "image_decode_failed"

    def __init__(
        self, message: str = "Не удалось декодировать изображение из ответа"
    ) -> None:
        super().__init__(message)


# =============================================================================
# AI PROVIDER EXCEPTIONS
# =============================================================================


class ProviderCallFailedError(Exception):
    """Ошибка при обращении к провайдеру.

    Выбрасывается когда провайдер не может выполнить запрос
    (сетевой сбой, таймаут, ошибка API). Это не бизнес-ошибка:
    текст SDK в ответ клиенту не попадает, роутер отвечает 500.

    Attributes:
        message: Человекочитаемое описание ошибки.
        provider: Название провайдера (openrouter, routerai, openai).
        model_id: ID модели, на которой произошла ошибка.
        is_retryable: Можно ли повторить запрос (True для временных ошибок).
        original_error: Оригинальное исключение от SDK провайдера.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        model_id: str,
        is_retryable: bool = False,
        original_error: Exception | None = None,
    ) -> None:
        """Создать ошибку обращения к провайдеру.

        Args:
            message: Описание ошибки.
            provider: Название провайдера.
            model_id: ID модели.
            is_retryable: Можно ли повторить запрос.
            original_error: Оригинальное исключение.
        """
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.model_id = model_id
        self.is_retryable = is_retryable
        self.original_error = original_error

    @override
    def __str__(self) -> str:
        """Строковое представление ошибки."""
        return f"[{self.provider}:{self.model_id}] {self.message}"


class ProviderNotAvailableError(Exception):
    """Провайдер недоступен или не зарегистрирован.

    Возникает когда:
    - Провайдер не зарегистрирован в реестре
    - API-ключ для провайдера не настроен

    Attributes:
        message: Описание ошибки.
        provider_type: Тип провайдера, который недоступен.
    """

    def __init__(self, message: str, provider_type: str | None = None) -> None:
        self.message = message
        self.provider_type = provider_type
        super().__init__(message)


# =============================================================================
# RATE EXCEPTIONS
# =============================================================================
# Всегда перехватываются внутри CbrRateProvider — наружу не выходят.
# =============================================================================


class RateSourceUnavailableError(Exception):
    """Источник курса валют недоступен или вернул некорректные данные."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


# =============================================================================
# PROMOCODE EXCEPTIONS
# =============================================================================


class PromocodeNotFoundError(Exception):
    """Промокод не существует или не активен."""

    def __init__(self, code: str) -> None:
        super().__init__(f"Промокод '{code}' не найден или не активен")
        self.code = code


class PromocodeAlreadyUsedError(Exception):
    """Пользователь уже активировал этот промокод."""

    def __init__(self, code: str, telegram_id: int) -> None:
        super().__init__(
            f"Промокод '{code}' уже использован пользователем telegram_id={telegram_id}"
        )
        self.code = code
        self.telegram_id = telegram_id
