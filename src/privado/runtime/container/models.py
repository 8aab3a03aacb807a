"""Data models for container runs."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

OnMatch = Callable[[str], Awaitable[None]]


class MountSlot(str, Enum):
    """Named bind-mount declarations understood by the engine image."""

    USER_KEY = "user_key"
    DOCKER_KEY = "docker_key"
    USER_CONFIG = "user_config"
    SOURCE_CODE = "source_code"
    EXTERNAL_RULES = "external_rules"
    M2_CACHE = "m2_cache"
    GRADLE_CACHE = "gradle_cache"


class VolumeMount(BaseModel):
    """A host path bound to a fixed container path."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    host_path: str = ""
    container_path: str = ""
    read_only: bool = False

    @model_validator(mode="after")
    def _require_host_path(self) -> VolumeMount:
        if self.enabled and not self.host_path:
            msg = f"mount for {self.container_path or 'unknown target'} enabled without a host path"
            raise ValueError(msg)
        return self


class EnvVar(BaseModel):
    key: str
    value: str = ""


@dataclass(frozen=True)
class OutputTrigger:
    """A set of substring patterns sharing one reaction."""

    patterns: tuple[str, ...]
    on_match: OnMatch
    name: str = "trigger"

    def first_match(self, line: str) -> str | None:
        """Return the first pattern contained in *line*, if any."""
        for pattern in self.patterns:
            if pattern in line:
                return pattern
        return None


class RunConfiguration(BaseModel):
    """Resolved arguments, mounts, environment and behaviour for one container run."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    image: str = ""
    entrypoint: list[str] | None = None
    args: list[str] = Field(default_factory=list)
    environment: dict[str, str] = Field(default_factory=dict)
    volumes: dict[MountSlot, VolumeMount] = Field(default_factory=dict)
    pull_latest_image: bool = False
    attach_output: bool = False
    setup_interrupt: bool = False
    browser_trigger_messages: list[str] | None = None
    error_trigger_messages: list[str] | None = None
    output_triggers: list[OutputTrigger] = Field(default_factory=list)

    @property
    def env_strings(self) -> list[str]:
        return [f"{key}={value}" for key, value in self.environment.items()]


class CreatedContainer(BaseModel):
    container_id: str
    warnings: list[str] = Field(default_factory=list)


class RunResult(BaseModel):
    """Outcome of :meth:`~privado.runtime.container.runner.ContainerRunner.run_image`."""

    container_id: str
    exit_code: int | None = None
    interrupted: bool = False
