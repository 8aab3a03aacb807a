"""Resolve host directories for package-manager caches shared with the engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

from privado.runtime.errors import PackageCacheError

if TYPE_CHECKING:
    from pathlib import Path

    from privado.config.app import AppConfig

PACKAGE_MANAGERS = ("m2", "gradle")


def get_package_cache_directory(config: AppConfig, package_manager: str) -> Path:
    """Return the host cache directory for *package_manager*.

    Lookup order: an existing directory in the privado cache, then the
    default location in the home directory (``~/.m2``, ``~/.gradle``),
    otherwise a new directory is created inside the privado cache.
    """
    if package_manager == "m2":
        dir_name = config.m2_cache_directory_name
    elif package_manager == "gradle":
        dir_name = config.gradle_cache_directory_name
    else:
        raise PackageCacheError(package_manager, "unsupported package manager")

    try:
        cache_dir = config.cache_directory
        if cache_dir is not None and (cache_dir / dir_name).is_dir():
            return cache_dir / dir_name

        default_location = config.home_directory / dir_name
        if default_location.is_dir():
            return default_location

        if cache_dir is None:
            cache_dir = config.create_cache_directory()
        location = cache_dir / dir_name
        location.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PackageCacheError(package_manager, str(exc)) from exc

    return location
