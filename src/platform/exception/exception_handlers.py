from typing import Any, Callable, Coroutine

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.responses import Response

from src.platform.exception.exceptions import CustomBaseError, PaymentGatewayError
from src.platform.logging.loguru_io import Logger


# Starlette's exception handler signature
ExceptionHandler = Callable[[Request, Exception], Coroutine[Any, Any, Response]]


def _detail(status_code: int, detail: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={'detail': detail})


async def custom_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = exc if isinstance(exc, CustomBaseError) else CustomBaseError(str(exc))
    return _detail(error.status_code, error.message)


async def payment_gateway_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # The processor's body may echo payer data; it stays in the log only
    if isinstance(exc, PaymentGatewayError):
        Logger.base.warning(
            f'💳 [PAYMENT] {request.method} {request.url.path} -> processor status '
            f'{exc.response_status}: {exc.body}'
        )
        return _detail(exc.status_code, exc.message)
    return await custom_error_handler(request, exc)


async def value_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return _detail(status.HTTP_400_BAD_REQUEST, str(exc))


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    return _detail(status.HTTP_400_BAD_REQUEST, errors)


async def integrity_error_handler(request: Request, exc: Exception) -> JSONResponse:
    Logger.base.warning(f'⚠️ [DB] Constraint violated on {request.method} {request.url.path}')
    return _detail(status.HTTP_409_CONFLICT, 'Conflicting write, retry the request')


async def general_500_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    Logger.base.opt(exception=exc).error(f'Unhandled error on {request.method} {request.url.path}')
    return _detail(status.HTTP_500_INTERNAL_SERVER_ERROR, 'Internal server error')


# Most specific first; Starlette resolves handlers along the exception's MRO anyway
EXCEPTION_HANDLERS: dict[type[Exception], ExceptionHandler] = {
    PaymentGatewayError: payment_gateway_error_handler,
    CustomBaseError: custom_error_handler,
    IntegrityError: integrity_error_handler,
    ValueError: value_error_handler,
    RequestValidationError: validation_error_handler,
    Exception: general_500_exception_handler,
}


def register_exception_handlers(app: FastAPI) -> None:
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
