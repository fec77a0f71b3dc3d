"""
Доменные ошибки.

Каждая ошибка несёт код (поле error в ответе), HTTP-статус и сообщение.
Обработчик в main.py превращает их в ErrorResponse, поэтому клиент всегда
различает "нет кредитов" и "сервис недоступен".
"""


class AppError(Exception):
    """Базовая ошибка приложения."""

    code = "app_error"
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(AppError):
    code = "unauthorized"
    status_code = 401
    default_message = "Could not validate credentials"


class InsufficientCredits(AppError):
    code = "insufficient_credits"
    status_code = 402
    default_message = "Insufficient credits"

    def __init__(self, required: int, balance: int | None = None):
        self.required = required
        self.balance = balance
        super().__init__(f"Insufficient credits. This operation requires {required} credit(s).")


class AccessDenied(AppError):
    code = "access_denied"
    status_code = 403
    default_message = "Access denied - Resume is private"


class NotFound(AppError):
    code = "not_found"
    status_code = 404
    default_message = "Resume not found"


class UpstreamUnavailable(AppError):
    code = "upstream_unavailable"
    status_code = 503
    default_message = "AI service unavailable"


class UpstreamEmptyResponse(AppError):
    code = "upstream_empty_response"
    status_code = 502
    default_message = "No content received from AI service"


class ResponseParseError(AppError):
    code = "response_parse_error"
    status_code = 502
    default_message = "Failed to parse AI service response"


class RefundFailed(AppError):
    """Возврат кредитов не записался: баланс и результат вызова расходятся."""

    code = "refund_failed"
    status_code = 500
    default_message = "Credits could not be refunded after a failed operation"

    def __init__(self, user_id: str, amount: int, cause: BaseException | None = None):
        self.user_id = user_id
        self.amount = amount
        self.cause = cause
        super().__init__()
