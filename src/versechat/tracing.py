"""Span export for versechat.

Providers open an ``llm.stream`` span per request and sessions a
``chat.turn`` span per turn. Until ``init_telemetry`` runs those spans go to
the OpenTelemetry API's no-op provider.
"""

import os
from typing import Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)

from . import __version__

DEFAULT_OTLP_ENDPOINT = "http://localhost:4317"
TRACE_TARGETS = ("otlp", "console")

_provider: Optional[TracerProvider] = None


def init_telemetry(target: str = "otlp", otlp_endpoint: Optional[str] = None) -> TracerProvider:
    """Install an SDK tracer provider for the rest of the process.

    Args:
        target: "otlp" exports over gRPC, "console" prints finished spans
        otlp_endpoint: Collector address (default: OTEL_EXPORTER_OTLP_ENDPOINT or localhost:4317)
    """
    global _provider
    if _provider is not None:
        return _provider
    if target not in TRACE_TARGETS:
        raise ValueError(f"Unknown trace target: {target}")

    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": os.getenv("OTEL_SERVICE_NAME", "versechat"),
                "service.version": __version__,
            }
        )
    )
    if target == "console":
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
        where = "console"
    else:
        where = otlp_endpoint or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", DEFAULT_OTLP_ENDPOINT)
        # Chat processes are short lived; flush every second
        provider.add_span_processor(
            BatchSpanProcessor(
                OTLPSpanExporter(endpoint=where, insecure=True),
                schedule_delay_millis=1000,
            )
        )

    trace.set_tracer_provider(provider)
    _provider = provider
    print(f"[versechat.tracing] Exporting spans to {where}")
    return provider


def shutdown_telemetry() -> None:
    """Flush and close the provider installed by init_telemetry, if any."""
    global _provider
    if _provider is None:
        return
    _provider.shutdown()
    _provider = None


__all__ = ["DEFAULT_OTLP_ENDPOINT", "TRACE_TARGETS", "init_telemetry", "shutdown_telemetry"]
