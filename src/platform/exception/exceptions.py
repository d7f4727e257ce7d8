class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class ForbiddenError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class InsufficientStockError(ConflictError):
    pass


class PaymentGatewayError(CustomBaseError):
    """Payment processor call failed after all attempts."""

    def __init__(
        self, message: str, *, response_status: int | None = None, body: str | None = None
    ) -> None:
        self.response_status = response_status
        self.body = body
        super().__init__(message, 502)
