"""Run options — composable steps that build a :class:`RunConfiguration`.

Each option is a callable applied, in order, to a
:class:`RunConfigurationBuilder`. Options may read what earlier options
set (for example to avoid registering a volume twice) but never depend on
options applied later.

Usage::

    config = build_run_configuration(
        [
            with_args([paths.source_code]),
            with_source_volume("/home/me/repo"),
            with_external_rules_volume(rules_dir),  # no-op for ""
            with_debug(debug),
        ],
        app_config,
    )
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from privado.config.package_cache import PACKAGE_MANAGERS, get_package_cache_directory
from privado.runtime.container.models import (
    EnvVar,
    MountSlot,
    OnMatch,
    OutputTrigger,
    RunConfiguration,
    VolumeMount,
)
from privado.runtime.errors import PackageCacheError

if TYPE_CHECKING:
    from pathlib import Path

    from privado.config.app import AppConfig
    from privado.telemetry import Telemetry

logger = logging.getLogger(__name__)

RunImageOption = Callable[["RunConfigurationBuilder"], None]
PackageCacheResolver = Callable[["AppConfig", str], "Path"]


class RunConfigurationBuilder:
    """Mutable accumulator for a single run; :meth:`build` freezes it."""

    def __init__(
        self,
        app: AppConfig,
        *,
        telemetry: Telemetry | None = None,
        package_cache_resolver: PackageCacheResolver = get_package_cache_directory,
    ) -> None:
        self.app = app
        self.paths = app.container
        self.telemetry = telemetry
        self.package_cache_resolver = package_cache_resolver

        self.entrypoint: list[str] | None = None
        self.base_args: list[str] = []
        self.flag_args: list[str] = []
        self.environment: dict[str, str] = {}
        self.volumes: dict[MountSlot, VolumeMount] = {}
        self.pull_latest_image = False
        self.attach_output = False
        self.setup_interrupt = False
        self.browser_trigger_messages: list[str] | None = None
        self.error_trigger_messages: list[str] | None = None
        self.output_triggers: list[OutputTrigger] = []

    def apply(self, options: Iterable[RunImageOption]) -> RunConfigurationBuilder:
        for option in options:
            option(self)
        return self

    def set_volume(
        self,
        slot: MountSlot,
        host_path: str,
        container_path: str,
        *,
        read_only: bool = False,
    ) -> None:
        """Enable *slot* with *host_path*; both are set in one step."""
        self.volumes[slot] = VolumeMount(
            enabled=True,
            host_path=host_path,
            container_path=container_path,
            read_only=read_only,
        )

    def append_flag(self, *flag: str) -> None:
        self.flag_args.extend(flag)

    def record_warning(self, message: str) -> None:
        logger.warning(message)
        if self.telemetry is not None:
            self.telemetry.record_array_metric("warning", message)

    def build(self) -> RunConfiguration:
        return RunConfiguration(
            image=self.paths.image_url,
            entrypoint=list(self.entrypoint) if self.entrypoint is not None else None,
            args=[*self.base_args, *self.flag_args],
            environment=dict(self.environment),
            volumes=dict(self.volumes),
            pull_latest_image=self.pull_latest_image,
            attach_output=self.attach_output,
            setup_interrupt=self.setup_interrupt,
            browser_trigger_messages=self.browser_trigger_messages,
            error_trigger_messages=self.error_trigger_messages,
            output_triggers=list(self.output_triggers),
        )


def build_run_configuration(
    options: Iterable[RunImageOption],
    app: AppConfig,
    *,
    telemetry: Telemetry | None = None,
    package_cache_resolver: PackageCacheResolver = get_package_cache_directory,
) -> RunConfiguration:
    """Apply *options* in order to a fresh builder and return the frozen result."""
    builder = RunConfigurationBuilder(
        app, telemetry=telemetry, package_cache_resolver=package_cache_resolver
    )
    return builder.apply(options).build()


# ---------------------------------------------------------------------------
# Image and command
# ---------------------------------------------------------------------------


def with_latest_image(pull_image: bool) -> RunImageOption:
    def _apply(b: RunConfigurationBuilder) -> None:
        b.pull_latest_image = pull_image

    return _apply


def with_args(args: Iterable[str]) -> RunImageOption:
    """Set the leading container arguments; feature flags always follow them."""
    values = list(args)

    def _apply(b: RunConfigurationBuilder) -> None:
        b.base_args = list(values)

    return _apply


def with_entrypoint(entrypoint: Iterable[str]) -> RunImageOption:
    values = list(entrypoint)

    def _apply(b: RunConfigurationBuilder) -> None:
        b.entrypoint = list(values)

    return _apply


# ---------------------------------------------------------------------------
# Volumes
# ---------------------------------------------------------------------------


def with_user_key_volume(volume_host: str) -> RunImageOption:
    def _apply(b: RunConfigurationBuilder) -> None:
        b.set_volume(MountSlot.USER_KEY, volume_host, b.paths.user_key, read_only=True)

    return _apply


def with_docker_key_volume(volume_host: str) -> RunImageOption:
    def _apply(b: RunConfigurationBuilder) -> None:
        b.set_volume(MountSlot.DOCKER_KEY, volume_host, b.paths.docker_key, read_only=True)

    return _apply


def with_user_config_volume(volume_host: str) -> RunImageOption:
    def _apply(b: RunConfigurationBuilder) -> None:
        b.set_volume(MountSlot.USER_CONFIG, volume_host, b.paths.user_config)

    return _apply


def with_source_volume(volume_host: str) -> RunImageOption:
    def _apply(b: RunConfigurationBuilder) -> None:
        b.set_volume(MountSlot.SOURCE_CODE, volume_host, b.paths.source_code)

    return _apply


def with_external_rules_volume(volume_host: str) -> RunImageOption:
    """Mount external rules and pass ``-ec``; a no-op for an empty path."""

    def _apply(b: RunConfigurationBuilder) -> None:
        if not volume_host or MountSlot.EXTERNAL_RULES in b.volumes:
            return
        b.set_volume(MountSlot.EXTERNAL_RULES, volume_host, b.paths.external_rules)
        b.append_flag("-ec", b.paths.external_rules)

    return _apply


def with_package_cache_volumes() -> RunImageOption:
    """Share the host m2/gradle caches; unresolvable caches are skipped with a warning."""

    def _apply(b: RunConfigurationBuilder) -> None:
        targets = {
            "m2": (MountSlot.M2_CACHE, b.paths.m2_cache),
            "gradle": (MountSlot.GRADLE_CACHE, b.paths.gradle_cache),
        }
        for pkg in PACKAGE_MANAGERS:
            slot, container_path = targets[pkg]
            try:
                host_dir = b.package_cache_resolver(b.app, pkg)
            except PackageCacheError as exc:
                b.record_warning(
                    f"Could not get package cache directory for pkg {pkg}. "
                    f"skipping volume mount: {exc}"
                )
                continue
            b.set_volume(slot, str(host_dir), container_path)

    return _apply


# ---------------------------------------------------------------------------
# Engine flags
# ---------------------------------------------------------------------------


def with_flag(flag: str, enabled: bool) -> RunImageOption:
    """Append *flag* to the container arguments when *enabled*."""

    def _apply(b: RunConfigurationBuilder) -> None:
        if enabled:
            b.append_flag(flag)

    return _apply


def with_ignore_default_rules(ignore_default_rules: bool) -> RunImageOption:
    return with_flag("-i", ignore_default_rules)


def with_skip_dependency_download(skip_dependency_download: bool) -> RunImageOption:
    return with_flag("-sdd", skip_dependency_download)


def with_disabled_deduplication(disable_deduplication: bool) -> RunImageOption:
    return with_flag("-dd", disable_deduplication)


def with_debug(is_debug: bool) -> RunImageOption:
    """Debug mode attaches container output and enables engine debug logging."""

    def _apply(b: RunConfigurationBuilder) -> None:
        if is_debug:
            b.attach_output = True
            b.append_flag(f"-Dlog4j2.configurationFile={b.paths.log_config}")

    return _apply


# ---------------------------------------------------------------------------
# Environment and behaviour
# ---------------------------------------------------------------------------


def with_environment_variables(env_vars: Iterable[EnvVar]) -> RunImageOption:
    """Register environment variables; entries with an empty key are dropped."""
    values = [env for env in env_vars if env.key]

    def _apply(b: RunConfigurationBuilder) -> None:
        if not values:
            return
        for env in values:
            b.environment[env.key] = env.value
        if b.telemetry is not None:
            b.telemetry.record_atomic_metric(
                "env", [f"{k}={v}" for k, v in b.environment.items()]
            )

    return _apply


def with_interrupt() -> RunImageOption:
    def _apply(b: RunConfigurationBuilder) -> None:
        b.setup_interrupt = True

    return _apply


def with_attached_output() -> RunImageOption:
    def _apply(b: RunConfigurationBuilder) -> None:
        b.attach_output = True

    return _apply


def with_auto_spawn_browser_on_url_messages(messages: Iterable[str]) -> RunImageOption:
    """Open a browser for the URL on any output line containing one of *messages*.

    Lines without a URL are ignored. An empty list still activates output
    processing.
    """
    values = list(messages)

    def _apply(b: RunConfigurationBuilder) -> None:
        b.browser_trigger_messages = list(values)

    return _apply


def with_exit_error_messages(messages: Iterable[str]) -> RunImageOption:
    """Tear the container down as soon as a line contains one of *messages*."""
    values = list(messages)

    def _apply(b: RunConfigurationBuilder) -> None:
        b.error_trigger_messages = list(values)

    return _apply


def with_output_trigger(
    patterns: Iterable[str], on_match: OnMatch, *, name: str = "custom"
) -> RunImageOption:
    """Register an extra trigger set reacting to matching output lines."""
    trigger = OutputTrigger(patterns=tuple(patterns), on_match=on_match, name=name)

    def _apply(b: RunConfigurationBuilder) -> None:
        b.output_triggers.append(trigger)

    return _apply
