"""CI environment detection.

Identifies whether the CLI runs inside a CI pipeline, which provider runs
it, and a stable identifier for the user/organisation behind the build.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from importlib import resources

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

CI_IDENTIFIER_ENV_KEYS = (
    "CI",
    "CONTINUOUS_INTEGRATION",
    "CI_BUILD_NUMBER",
    "CI_BUILD_ID",
    "CI_RUN_ID",
    "CI_APP_ID",
    "BUILD_NUMBER",
)

_TRUE_VALUES = ("1", "t", "true", "yes")


class ProviderIdentifier(BaseModel):
    key: str
    value: str = ""


class CIProvider(BaseModel):
    """A CI provider and the env keys that identify it and its users."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    identifiers: list[ProviderIdentifier] = Field(default_factory=list)
    user_keys: list[str] = Field(default_factory=list, alias="keys")

    def user_identifier(self, env: Mapping[str, str]) -> str:
        """Join the non-empty user key values; ``*SLUG`` keys keep the owner part."""
        values: list[str] = []
        for key in self.user_keys:
            val = env.get(key, "")
            if not val:
                continue
            if "SLUG" in key:
                val = val.split("/", 1)[0]
            values.append(val)
        return "/".join(values)


class CISession(BaseModel):
    """CI details for the current process."""

    is_ci: bool = False
    user_identifier: str = ""
    provider: CIProvider | None = None


def load_providers() -> list[CIProvider]:
    """Load the bundled provider table."""
    try:
        raw = resources.files("privado.ci").joinpath("providers.yaml").read_text()
        return [CIProvider.model_validate(item) for item in yaml.safe_load(raw) or []]
    except (OSError, yaml.YAMLError, ValidationError) as exc:
        logger.warning("Could not parse CI providers: %s", exc)
        return []


def is_ci_environment(env: Mapping[str, str]) -> bool:
    return any(env.get(key, "").strip().lower() in _TRUE_VALUES for key in CI_IDENTIFIER_ENV_KEYS)


def identify_provider(
    env: Mapping[str, str], providers: list[CIProvider] | None = None
) -> CIProvider | None:
    """Return the first provider with a matching identifier, if any."""
    for provider in providers if providers is not None else load_providers():
        for identifier in provider.identifiers:
            if identifier.key not in env:
                continue
            if not identifier.value or identifier.value == env[identifier.key]:
                return provider
    return None


def detect_session(
    custom_identifier_key: str,
    env: Mapping[str, str] | None = None,
) -> CISession:
    """Build the :class:`CISession` for the current environment.

    A value in *custom_identifier_key* takes precedence over the
    provider-derived user identifier.
    """
    env = os.environ if env is None else env
    session = CISession(is_ci=is_ci_environment(env))
    if not session.is_ci:
        return session

    session.provider = identify_provider(env)
    if session.provider is not None:
        logger.info("Identified CI provider: %s", session.provider.name)

    custom = env.get(custom_identifier_key, "") if custom_identifier_key else ""
    if custom:
        session.user_identifier = custom
    elif session.provider is not None:
        session.user_identifier = session.provider.user_identifier(env)
    return session
