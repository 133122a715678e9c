"""OpenTelemetry wiring.

``run_atomic`` opens a ``procedure <name>`` span whether or not anything
is configured here; without a provider those spans are no-ops. With
``OTLP_ENDPOINT`` set, request, query, Redis and procedure spans are
exported over gRPC. Debug mode prints them to the console instead.
"""

import structlog
from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from leaselink import __version__
from leaselink.config import settings
from leaselink.core.database.session import async_engine
from leaselink.core.logging.middleware import QUIET_PATHS


log = structlog.get_logger()


def _span_processor() -> SpanProcessor | None:
    if settings.otlp_endpoint:
        exporter = OTLPSpanExporter(
            endpoint=settings.otlp_endpoint,
            insecure=not settings.otlp_endpoint.startswith("https"),
        )
        log.info("tracing_configured", exporter="otlp", endpoint=settings.otlp_endpoint)
        return BatchSpanProcessor(exporter)
    if settings.debug:
        log.info("tracing_configured", exporter="console")
        return BatchSpanProcessor(ConsoleSpanExporter())
    return None


def setup_tracing(app: FastAPI) -> bool:
    """Install a tracer provider and instrument the app.

    Args:
        app: Application to instrument

    Returns:
        True if tracing was enabled
    """
    processor = _span_processor()
    if processor is None:
        log.info("tracing_disabled", reason="no OTLP_ENDPOINT configured")
        return False

    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": "leaselink",
                "service.version": __version__,
                "deployment.environment": settings.environment,
            }
        )
    )
    provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)

    FastAPIInstrumentor.instrument_app(
        app,
        excluded_urls=",".join(path.strip("/") for path in QUIET_PATHS),
    )
    SQLAlchemyInstrumentor().instrument(engine=async_engine.sync_engine)
    if settings.rate_limit_backend == "redis":
        RedisInstrumentor().instrument()

    return True


def shutdown_tracing() -> None:
    """Flush spans that are still buffered."""
    provider = trace.get_tracer_provider()
    if isinstance(provider, TracerProvider):
        provider.shutdown()
        log.info("tracing_shutdown_complete")
