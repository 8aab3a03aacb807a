"""RunContext — process-wide state created once and passed explicitly."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx

from privado import __version__
from privado.auth import bootstrap_user_key, calculate_sha256_hash, get_user_hash
from privado.ci import CISession, detect_session
from privado.config.app import AppConfig
from privado.config.user import (
    UserConfig,
    bootstrap_user_configuration,
    load_user_configuration,
)
from privado.telemetry import Telemetry, TelemetryRequestConfig

logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    """Configuration, identity and telemetry shared by every command.

    Read-only after :meth:`bootstrap`, except for the docker access hash
    which is filled in once the engine image has been inspected.
    """

    app: AppConfig
    user: UserConfig = field(default_factory=UserConfig)
    ci: CISession = field(default_factory=CISession)
    telemetry: Telemetry = field(default_factory=Telemetry)
    version: str = __version__

    @classmethod
    def bootstrap(cls, app: AppConfig | None = None) -> RunContext:
        """Detect CI, ensure the user key and config file exist, then load them."""
        app = app or AppConfig.from_environment()
        ci_session = detect_session(app.ci_user_identifier_env)
        bootstrap_user_key(app.user_key_path, ci_session)
        bootstrap_user_configuration(app.user_configuration_file)

        user = UserConfig(
            config_file=load_user_configuration(app.user_configuration_file),
            user_hash=get_user_hash(app.user_key_path),
        )
        return cls(app=app, user=user, ci=ci_session)

    @property
    def is_dev_build(self) -> bool:
        return self.version in ("dev", "0.0.0.dev0")

    def load_docker_access_hash(self, key: str) -> None:
        self.user.docker_access_hash = calculate_sha256_hash(key)

    def post_telemetry(self) -> None:
        """Send recorded metrics once; failures are logged, never raised."""
        if self.telemetry.recorded or not self.user.docker_access_hash:
            return
        if not self.user.config_file.metrics_enabled:
            return
        try:
            self.telemetry.post_recorded(
                TelemetryRequestConfig(
                    url=self.app.telemetry_endpoint,
                    user_hash=self.user.user_hash,
                    session_id=self.user.session_id,
                    authentication_key_hash=self.user.docker_access_hash,
                )
            )
        except httpx.HTTPError as exc:
            logger.debug("Telemetry post failed: %s", exc)
