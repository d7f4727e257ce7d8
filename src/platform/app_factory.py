"""
FastAPI application factory

``src.main`` builds the production app with the scheduler lifespan; tests build
the same routes with a no-op lifespan and override the use-case dependencies.
"""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from src.platform.config.core_setting import settings
from src.platform.exception.exception_handlers import register_exception_handlers
from src.platform.observability.tracing import TracingConfig
from src.service.ticketing.driving_adapter.http_controller.order_controller import (
    router as order_router,
)
from src.service.ticketing.driving_adapter.http_controller.payment_controller import (
    router as payment_router,
)
from src.service.ticketing.driving_adapter.http_controller.ticket_controller import (
    router as ticket_router,
)


# (router, prefix, tag)
API_ROUTES: tuple[tuple[APIRouter, str, str], ...] = (
    (ticket_router, '/api/ticket', 'ticket'),
    (order_router, '/api', 'order'),
    (payment_router, '/api/payment', 'payment'),
)


def create_app(
    *,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[Any]],
    title_suffix: str = '',
    description: str = 'Ticket reservation, payment confirmation and producer payouts',
    service_name: str = 'ticket-sales',
) -> FastAPI:
    """
    Args:
        lifespan: Startup/shutdown context (database, DI wiring, scheduler loops)
        title_suffix: Appended to the OpenAPI title, e.g. " (Test)"
        description: OpenAPI description
        service_name: Service name reported on request spans
    """
    app = FastAPI(
        title=f'{settings.PROJECT_NAME}{title_suffix}',
        description=description,
        version=settings.VERSION,
        lifespan=lifespan,
    )

    # Instrument before routes are mounted
    TracingConfig(service_name=service_name).instrument_fastapi(app=app)

    app.add_middleware(
        CORSMiddleware,  # type: ignore
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )
    register_exception_handlers(app)

    for router, prefix, tag in API_ROUTES:
        app.include_router(router, prefix=prefix, tags=[tag])

    _register_ops_endpoints(app)
    return app


def _register_ops_endpoints(app: FastAPI) -> None:
    @app.get('/health', tags=['ops'])
    async def health_check() -> dict[str, Any]:
        """Liveness probe; also reports whether this process runs the scheduler loops."""
        return {
            'status': 'healthy',
            'service': settings.PROJECT_NAME,
            'scheduler_enabled': settings.SCHEDULER_ENABLED,
        }

    @app.get('/metrics', tags=['ops'])
    async def get_metrics() -> PlainTextResponse:
        return PlainTextResponse(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
