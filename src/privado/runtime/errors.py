"""Shared error types for the container runtime layer."""


class PrivadoError(Exception):
    """Base error for all privado CLI failures."""


class SetupError(PrivadoError):
    """Invalid flags or inputs detected before any container work begins."""


class ConfigurationError(PrivadoError):
    """The user configuration could not be loaded or saved."""


class PackageCacheError(PrivadoError):
    """A package-manager cache directory could not be resolved."""

    def __init__(self, package_manager: str, detail: str = "") -> None:
        self.package_manager = package_manager
        self.detail = detail
        msg = f"Cannot resolve cache directory for {package_manager}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class DockerRuntimeError(PrivadoError):
    """A docker operation failed (client, pull, create, attach, start, wait)."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Docker error" + (f": {detail}" if detail else ""))


class DockerUnavailableError(DockerRuntimeError):
    """The docker CLI is not installed or cannot be executed."""


class ImagePullError(DockerRuntimeError):
    """Pulling the engine image failed."""

    def __init__(self, image: str, detail: str = "") -> None:
        self.image = image
        super().__init__(f"could not pull image {image}" + (f" ({detail})" if detail else ""))


class ImageInspectError(DockerRuntimeError):
    """Inspecting the engine image failed."""


class ContainerCreateError(DockerRuntimeError):
    """Creating the container failed."""


class ContainerAttachError(DockerRuntimeError):
    """Attaching to the container output stream failed."""


class ContainerStartError(DockerRuntimeError):
    """Starting the container failed."""


class ContainerWaitError(DockerRuntimeError):
    """Waiting for the container to stop failed."""


class EngineError(PrivadoError):
    """The engine reported a failure on its output stream."""

    def __init__(self, message: str = "") -> None:
        self.message = message
        super().__init__("Engine reported an error" + (f": {message}" if message else ""))


class UpdateError(PrivadoError):
    """Self-update could not be completed."""
