"""Privado CLI entrypoint."""

from __future__ import annotations

import click

from privado import __version__
from privado.cli_commands._output import console, err_console
from privado.runtime.errors import PrivadoError


@click.group()
@click.version_option(version=__version__, prog_name="privado")
@click.option(
    "--otlp-endpoint",
    envvar="PRIVADO_OTLP_ENDPOINT",
    default=None,
    help="Export OpenTelemetry spans to this OTLP endpoint (requires privado[otel]).",
)
@click.pass_context
def main(ctx: click.Context, otlp_endpoint: str | None) -> None:
    """Privado is a CLI tool that scans & monitors your repositories to build
    privacy, transparency reports & finds privacy issues.

    Find more at: https://github.com/Privado-Inc/privado
    """
    if otlp_endpoint:
        from privado.utils.tracing import configure_tracing

        try:
            configure_tracing(export_to_console=False, otlp_endpoint=otlp_endpoint)
        except ImportError as exc:
            err_console.print(f"Tracing disabled: {exc}", markup=False)

    if ctx.obj is not None:
        return

    from privado.context import RunContext

    try:
        ctx.obj = RunContext.bootstrap()
    except (PrivadoError, OSError, ValueError) as exc:
        console.print(f"Fatal: cannot bootstrap privado: {exc}", markup=False)
        ctx.exit(1)


# Register subcommands
from privado.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
