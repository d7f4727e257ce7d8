"""
OpenTelemetry tracing

The API process exports spans over OTLP when OTEL_EXPORTER_OTLP_ENDPOINT is
set (console export with OTEL_CONSOLE_EXPORT=true); otherwise spans are
created and dropped. FastAPI requests and SQLAlchemy statements are
auto-instrumented; scheduler ticks get one span per job run via ``job_span``.
"""

from contextlib import contextmanager
import os
from typing import Any, Iterator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ALWAYS_ON
from opentelemetry.trace import Span

from src.platform.logging.service_context import get_service_context


class TracingConfig:
    def __init__(
        self,
        *,
        service_name: str,
        otlp_endpoint: str | None = None,
        enable_console: bool | None = None,
    ) -> None:
        self.service_name = service_name
        self.otlp_endpoint = otlp_endpoint or os.getenv('OTEL_EXPORTER_OTLP_ENDPOINT')
        if enable_console is None:
            enable_console = os.getenv('OTEL_CONSOLE_EXPORT', 'false').lower() == 'true'
        self.enable_console = enable_console
        self._provider: TracerProvider | None = None

    @property
    def exporting(self) -> bool:
        return bool(self.otlp_endpoint or self.enable_console)

    def setup(self) -> None:
        """Install the global tracer provider; call once per process at startup."""
        resource = Resource(
            attributes={
                SERVICE_NAME: self.service_name,
                'service.instance.id': get_service_context(),
            }
        )
        # Tail sampling (keep errors, sample successes) is the collector's job
        self._provider = TracerProvider(resource=resource, sampler=ALWAYS_ON)

        if self.otlp_endpoint:
            self._provider.add_span_processor(
                BatchSpanProcessor(OTLPSpanExporter(endpoint=self.otlp_endpoint))
            )
        if self.enable_console:
            self._provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

        trace.set_tracer_provider(self._provider)

    def instrument_fastapi(self, *, app: Any, excluded_urls: str = 'health,metrics') -> None:
        FastAPIInstrumentor.instrument_app(app, excluded_urls=excluded_urls)

    def instrument_sqlalchemy(self, *, engine: Any) -> None:
        # AsyncEngine is instrumented through the sync engine it wraps
        SQLAlchemyInstrumentor().instrument(engine=getattr(engine, 'sync_engine', engine))

    def shutdown(self) -> None:
        if self._provider:
            self._provider.shutdown()


_job_tracer = trace.get_tracer('src.platform.scheduler')


@contextmanager
def job_span(job_name: str) -> Iterator[Span]:
    """Root span for one scheduler tick; an escaping exception is recorded on it."""
    with _job_tracer.start_as_current_span(
        f'job.{job_name}', attributes={'job.name': job_name}, record_exception=True
    ) as span:
        yield span
