"""Application and user configuration."""

from privado.config.app import AppConfig, ContainerPaths
from privado.config.package_cache import PACKAGE_MANAGERS, get_package_cache_directory
from privado.config.user import (
    UserConfig,
    UserConfigFile,
    bootstrap_user_configuration,
    load_user_configuration,
    save_user_configuration,
)

__all__ = [
    "PACKAGE_MANAGERS",
    "AppConfig",
    "ContainerPaths",
    "UserConfig",
    "UserConfigFile",
    "bootstrap_user_configuration",
    "get_package_cache_directory",
    "load_user_configuration",
    "save_user_configuration",
]
