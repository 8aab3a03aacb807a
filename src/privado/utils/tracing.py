"""OpenTelemetry tracing helpers for privado.

Thin wrapper around the OpenTelemetry API so container runs can be traced
without caring whether an SDK is installed. Without a configured SDK every
span is a no-op.

Usage::

    from privado.utils.tracing import get_tracer

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("privado.run_image") as span:
        span.set_attribute(ATTR_IMAGE, image)

Call :func:`configure_tracing` once at startup to export spans
(requires the ``otel`` extra: ``pip install privado[otel]``).
"""

from __future__ import annotations

from typing import Any

from opentelemetry import trace

# ---------------------------------------------------------------------------
# Semantic attribute keys used by container-run instrumentation
# ---------------------------------------------------------------------------

ATTR_IMAGE = "privado.image"
ATTR_CONTAINER_ID = "privado.container.id"
ATTR_PULL = "privado.pull_latest_image"
ATTR_ATTACH_OUTPUT = "privado.attach_output"
ATTR_TRIGGER_COUNT = "privado.output.trigger_sets"
ATTR_MOUNT_COUNT = "privado.mounts"
ATTR_EXIT_CODE = "privado.container.exit_code"
ATTR_INTERRUPTED = "privado.interrupted"

_INSTRUMENTATION_NAME = "privado"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a :class:`~opentelemetry.trace.Tracer` for *name* (no-op without an SDK)."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_tracing(
    *,
    service_name: str = "privado-cli",
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Configure OpenTelemetry tracing (requires ``privado[otel]``).

    Raises
    ------
    ImportError
        If the ``opentelemetry-sdk`` package is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required for configure_tracing(). "
            "Install it with: pip install privado[otel]"
        )
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))

    if export_to_console:
        _add_console_exporter(provider, SimpleSpanProcessor)

    if otlp_endpoint:
        _add_otlp_exporter(provider, BatchSpanProcessor, otlp_endpoint)

    trace.set_tracer_provider(provider)


def _add_console_exporter(provider: Any, processor_cls: Any) -> None:
    from opentelemetry.sdk.trace.export import ConsoleSpanExporter  # pyright: ignore[reportMissingImports]

    provider.add_span_processor(processor_cls(ConsoleSpanExporter()))


def _add_otlp_exporter(provider: Any, processor_cls: Any, endpoint: str) -> None:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = (
            "opentelemetry-exporter-otlp is required for OTLP export. "
            "Install it with: pip install privado[otel]"
        )
        raise ImportError(msg) from exc

    provider.add_span_processor(processor_cls(OTLPSpanExporter(endpoint=endpoint)))
