"""OpenTelemetry tracing for the API and its outbound calls.

Every backend Lyra talks to (Firestore REST, Google's token certificates,
the model providers) is reached through httpx, so instrumenting httpx plus
FastAPI covers a whole request. Set up in create_app, before startup: the
FastAPI instrumentor adds middleware and the httpx instrumentor only
patches clients built afterwards.

Example:
    telemetry = TelemetryConfig.from_settings(settings)
    if telemetry.setup():
        telemetry.instrument(app)
"""

from __future__ import annotations

import logging
import threading

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

from app.core.config import Settings

logger = logging.getLogger(__name__)

# Probes and long-lived sockets would only add noise (a WebSocket span lasts
# as long as the subscription).
EXCLUDED_URLS = "/api/v1/health,/api/v1/ws/"


class TelemetryConfig:
    """Tracer provider plus the instrumentors Lyra uses.

    exporter is "otlp" (gRPC, needs otlp_endpoint), "console", or "none"
    (spans are created for log correlation but not exported).
    """

    def __init__(
        self,
        service_name: str,
        service_version: str,
        *,
        environment: str = "development",
        exporter: str = "console",
        otlp_endpoint: str | None = None,
        sample_rate: float = 1.0,
    ) -> None:
        self.service_name = service_name
        self.service_version = service_version
        self.environment = environment
        self.exporter = exporter
        self.otlp_endpoint = otlp_endpoint
        self.sample_rate = sample_rate
        self.tracer_provider: TracerProvider | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> TelemetryConfig:
        return cls(
            settings.app_name,
            settings.app_version,
            environment=settings.telemetry_environment,
            exporter=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )

    def _span_exporter(self) -> SpanExporter | None:
        if self.exporter == "none":
            return None
        if self.exporter == "otlp":
            if self.otlp_endpoint:
                return OTLPSpanExporter(
                    endpoint=self.otlp_endpoint,
                    insecure=self.otlp_endpoint.startswith("http://"),
                )
            logger.warning("OTLP exporter selected without an endpoint; using console")
        elif self.exporter != "console":
            logger.warning("Unknown span exporter '%s'; using console", self.exporter)
        return ConsoleSpanExporter()

    def setup(self) -> TracerProvider | None:
        """Install the global tracer provider. Failures are logged; returns None then."""
        try:
            provider = TracerProvider(
                resource=Resource(
                    attributes={
                        SERVICE_NAME: self.service_name,
                        SERVICE_VERSION: self.service_version,
                        "deployment.environment": self.environment,
                    }
                ),
                sampler=TraceIdRatioBased(self.sample_rate),
            )
            span_exporter = self._span_exporter()
            if span_exporter is not None:
                provider.add_span_processor(BatchSpanProcessor(span_exporter))
            trace.set_tracer_provider(provider)
        except Exception:
            logger.exception("Failed to initialize tracing")
            return None
        self.tracer_provider = provider
        logger.info(
            "Tracing enabled: service=%s exporter=%s sample_rate=%s",
            self.service_name,
            self.exporter,
            self.sample_rate,
        )
        return provider

    def instrument(self, app: FastAPI) -> None:
        """Trace incoming requests, outbound httpx calls, and stamp log records with trace ids."""
        if self.tracer_provider is None:
            return
        try:
            FastAPIInstrumentor.instrument_app(
                app, tracer_provider=self.tracer_provider, excluded_urls=EXCLUDED_URLS
            )
            HTTPXClientInstrumentor().instrument(tracer_provider=self.tracer_provider)
            LoggingInstrumentor().instrument(
                tracer_provider=self.tracer_provider, set_logging_format=True
            )
        except Exception:
            logger.exception("Failed to instrument the application")

    def shutdown(self) -> None:
        """Flush pending spans and release the exporter."""
        if self.tracer_provider is None:
            return
        try:
            self.tracer_provider.shutdown()
        except Exception:
            logger.exception("Error during tracing shutdown")
        self.tracer_provider = None


_telemetry: TelemetryConfig | None = None
_telemetry_lock = threading.RLock()


def get_telemetry() -> TelemetryConfig | None:
    """Return the process-wide telemetry instance, if tracing was set up."""
    with _telemetry_lock:
        return _telemetry


def set_telemetry(telemetry: TelemetryConfig | None) -> None:
    global _telemetry
    with _telemetry_lock:
        _telemetry = telemetry
