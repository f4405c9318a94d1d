"""OpenTelemetry tracing for the API and the scheduler process."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from opentelemetry.semconv.resource import ResourceAttributes
from sqlalchemy.ext.asyncio import AsyncEngine

from stock_puzzle.config import AppSettings

logger = logging.getLogger(__name__)

_tracer_provider: TracerProvider | None = None


def _tracer_provider_for(settings: AppSettings) -> TracerProvider:
    global _tracer_provider  # noqa: PLW0603 - one provider per process
    if _tracer_provider is None:
        resource = Resource.create(
            {
                ResourceAttributes.SERVICE_NAME: settings.telemetry_service_name or settings.app_name,
                ResourceAttributes.SERVICE_NAMESPACE: "stock-puzzle",
            }
        )
        exporter = OTLPSpanExporter(
            endpoint=settings.telemetry_otlp_endpoint,
            insecure=settings.telemetry_otlp_insecure,
        )
        _tracer_provider = TracerProvider(
            resource=resource,
            sampler=ParentBased(TraceIdRatioBased(settings.telemetry_sample_ratio)),
        )
        _tracer_provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(_tracer_provider)
        # Quote requests to the market data gateway become client spans
        HTTPXClientInstrumentor().instrument(tracer_provider=_tracer_provider)
        logger.info("Tracing exporter configured for %s", settings.telemetry_service_name)
    return _tracer_provider


def setup_telemetry(
    settings: AppSettings,
    *,
    app: FastAPI | None = None,
    engine: AsyncEngine | None = None,
) -> bool:
    """Trace requests, quote calls and queries when telemetry is enabled.

    The scheduler process has no FastAPI app, so ``app`` is optional.
    """

    if not settings.telemetry_enabled:
        logger.info("Telemetry disabled via configuration")
        return False

    provider = _tracer_provider_for(settings)
    if app is not None:
        FastAPIInstrumentor.instrument_app(app, tracer_provider=provider)
    if engine is not None:
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine, tracer_provider=provider)
    return True


__all__ = ["setup_telemetry"]
