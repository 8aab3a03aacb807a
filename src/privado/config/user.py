"""User configuration file (``~/.privado/config.json``) and session identity."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from privado.runtime.errors import ConfigurationError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class UserConfigFile(BaseModel):
    """Settings persisted in the user configuration file."""

    model_config = ConfigDict(populate_by_name=True)

    metrics_enabled: bool = Field(default=True, alias="metrics")
    sync_to_privado_cloud: bool = Field(default=False, alias="syncToPrivadoCloud")


class UserConfig(BaseModel):
    """Per-user state for this process: file settings plus derived identity."""

    config_file: UserConfigFile = Field(default_factory=UserConfigFile)
    user_hash: str = ""
    docker_access_hash: str = ""
    session_id: str = Field(default_factory=lambda: str(uuid.uuid4()))


def bootstrap_user_configuration(path: Path, *, reset: bool = False) -> bool:
    """Create the configuration file with defaults when missing (or on *reset*).

    Returns ``True`` when a file was written.
    """
    if path.exists() and not reset:
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    save_user_configuration(path, UserConfigFile())
    logger.info("Generated configuration file %s", path)
    return True


def load_user_configuration(path: Path) -> UserConfigFile:
    """Read and validate the configuration file."""
    try:
        return UserConfigFile.model_validate_json(path.read_text())
    except (OSError, ValidationError) as exc:
        msg = (
            f"Fatal: cannot load user configuration ({path}): {exc}\n\n"
            "To reset privado configuration, simply delete the file "
            "and we will generate a new one for you!"
        )
        raise ConfigurationError(msg) from exc


def save_user_configuration(path: Path, config: UserConfigFile) -> None:
    """Write *config* to *path* using the on-disk key names."""
    try:
        path.write_text(config.model_dump_json(by_alias=True, indent=2))
    except OSError as exc:
        raise ConfigurationError(f"Cannot save configuration file: {exc}") from exc
