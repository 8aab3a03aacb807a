"""Runtime layer — the engine container lifecycle and its error types."""

from privado.runtime.errors import (
    ConfigurationError,
    DockerRuntimeError,
    EngineError,
    PackageCacheError,
    PrivadoError,
    SetupError,
)

__all__ = [
    "ConfigurationError",
    "DockerRuntimeError",
    "EngineError",
    "PackageCacheError",
    "PrivadoError",
    "SetupError",
]
