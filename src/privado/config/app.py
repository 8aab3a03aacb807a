"""Process-wide application configuration — paths, endpoints, container layout."""

from __future__ import annotations

import os
import platform
import sys
import tempfile
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_IMAGE_TAG = "niagara-dev"
IMAGE_REPOSITORY = "public.ecr.aws/privado/cli"
TELEMETRY_HOST = "t.cli.privado.ai"


class ContainerPaths(BaseModel):
    """Fixed locations inside the engine image."""

    image_url: str = f"{IMAGE_REPOSITORY}:{DEFAULT_IMAGE_TAG}"
    docker_access_key_env: str = "PRIVADO_DOCKER_ACCESS_KEY"
    user_key: str = "/app/keys/user.key"
    docker_key: str = "/app/keys/docker.key"
    user_config: str = "/app/config/config.json"
    log_config: str = "/app/config/log4j2.xml"
    source_code: str = "/app/code"
    internal_rules: str = "/app/rules"
    external_rules: str = "/app/external-rules"
    m2_cache: str = "/root/.m2"
    gradle_cache: str = "/root/.gradle"
    core_binary: str = "/app/privado-core/bin/privado-core"


class AppConfig(BaseModel):
    """Application constants resolved once at process start."""

    home_directory: Path
    configuration_directory: Path
    user_configuration_file: Path
    user_key_directory: Path
    user_key_path: Path
    cache_directory: Path | None = None
    m2_cache_directory_name: str = ".m2"
    gradle_cache_directory_name: str = ".gradle"
    privacy_results_path_suffix: str = str(Path(".privado") / "privado.json")
    repository_url: str = "https://github.com/Privado-Inc/privado-cli"
    repository_name: str = "Privado-Inc/privado-cli"
    release_filename: str = Field(default_factory=lambda: _release_filename())
    telemetry_endpoint: str = f"https://{TELEMETRY_HOST}/api/event?version=2"
    ci_user_identifier_env: str = "PRIVADO_USER_IDENTIFIER"
    slowdown_time: float = 0.6
    container: ContainerPaths = Field(default_factory=ContainerPaths)

    @classmethod
    def from_environment(cls, home: Path | None = None) -> AppConfig:
        """Build the configuration from the user's home directory and env vars.

        ``PRIVADO_DEV`` switches to developer settings, in which case
        ``PRIVADO_TAG`` selects the engine image tag.
        """
        home = home or Path.home()
        config_dir = home / ".privado"

        image_tag = DEFAULT_IMAGE_TAG
        if _is_dev_environment():
            image_tag = os.environ.get("PRIVADO_TAG") or DEFAULT_IMAGE_TAG

        config = cls(
            home_directory=home,
            configuration_directory=config_dir,
            user_configuration_file=config_dir / "config.json",
            user_key_directory=config_dir / "keys",
            user_key_path=config_dir / "keys" / "user.key",
            container=ContainerPaths(image_url=f"{IMAGE_REPOSITORY}:{image_tag}"),
        )
        config.cache_directory = config.find_cache_directory()
        return config

    def find_cache_directory(self) -> Path | None:
        """Return an existing privado cache directory, preferring the fallback location."""
        fallback = self.configuration_directory / ".cache"
        if fallback.exists():
            return fallback

        system_dir = _user_cache_dir()
        if system_dir is not None and (system_dir / "privado").exists():
            return system_dir / "privado"
        return None

    def create_cache_directory(self) -> Path:
        """Create the privado cache directory and return it."""
        system_dir = _user_cache_dir()
        location = (
            system_dir / "privado" if system_dir is not None
            else self.configuration_directory / ".cache"
        )
        location.mkdir(parents=True, exist_ok=True)
        self.cache_directory = location
        return location


def _is_dev_environment() -> bool:
    if os.environ.get("PRIVADO_DEV", "").strip().lower() in ("1", "t", "true", "yes"):
        return True
    # Running from a temporary build (e.g. a zipapp unpacked to /tmp)
    return bool(sys.argv) and sys.argv[0].startswith(tempfile.gettempdir())


def _user_cache_dir() -> Path | None:
    if sys.platform == "win32":
        local = os.environ.get("LOCALAPPDATA")
        return Path(local) if local else None
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Caches"
    xdg = os.environ.get("XDG_CACHE_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".cache"


def _release_filename() -> str:
    system = platform.system().lower()
    machine = platform.machine().lower()
    arch = {"x86_64": "amd64", "aarch64": "arm64"}.get(machine, machine)
    return f"privado-{system}-{arch}.tar.gz"
