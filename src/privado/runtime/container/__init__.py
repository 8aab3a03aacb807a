"""Container subsystem — run the engine image and react to its output."""

from privado.runtime.container.docker_client import DockerClient
from privado.runtime.container.interrupt import InterruptCoordinator
from privado.runtime.container.models import (
    EnvVar,
    MountSlot,
    OutputTrigger,
    RunConfiguration,
    RunResult,
    VolumeMount,
)
from privado.runtime.container.output import OutputStreamProcessor
from privado.runtime.container.runner import ContainerRunner, get_docker_access_key

__all__ = [
    "ContainerRunner",
    "DockerClient",
    "EnvVar",
    "InterruptCoordinator",
    "MountSlot",
    "OutputStreamProcessor",
    "OutputTrigger",
    "RunConfiguration",
    "RunResult",
    "VolumeMount",
    "get_docker_access_key",
]
