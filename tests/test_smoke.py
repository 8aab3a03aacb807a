"""Smoke test to verify the project scaffolding works."""

from __future__ import annotations


def test_import() -> None:
    import privado

    assert privado.__version__ == "0.1.0"


def test_cli_entrypoint() -> None:
    from privado.cli import main

    assert callable(main)


def test_container_imports() -> None:
    from privado.runtime.container import (
        ContainerRunner,
        DockerClient,
        InterruptCoordinator,
        OutputStreamProcessor,
        get_docker_access_key,
    )

    assert ContainerRunner is not None
    assert DockerClient is not None
    assert InterruptCoordinator is not None
    assert OutputStreamProcessor is not None
    assert callable(get_docker_access_key)


def test_lazy_import_from_privado() -> None:
    import privado

    assert privado.ContainerRunner is not None
    assert privado.RunContext is not None
