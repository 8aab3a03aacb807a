"""Tests for CI environment and provider detection."""

from __future__ import annotations

from privado.ci import (
    CIProvider,
    ProviderIdentifier,
    detect_session,
    identify_provider,
    is_ci_environment,
    load_providers,
)


class TestIsCIEnvironment:
    def test_not_ci(self) -> None:
        assert is_ci_environment({}) is False

    def test_truthy_values(self) -> None:
        assert is_ci_environment({"CI": "true"}) is True
        assert is_ci_environment({"BUILD_NUMBER": "1"}) is True

    def test_falsy_values(self) -> None:
        assert is_ci_environment({"CI": "false", "BUILD_NUMBER": "42"}) is False


class TestProviders:
    def test_bundled_table_loads(self) -> None:
        names = {p.name for p in load_providers()}
        assert "GitHub Actions" in names
        assert "GitLab CI" in names

    def test_identify_by_key_and_value(self) -> None:
        provider = identify_provider({"GITHUB_ACTIONS": "true"})
        assert provider is not None
        assert provider.name == "GitHub Actions"

    def test_value_mismatch(self) -> None:
        providers = [
            CIProvider(
                name="X",
                identifiers=[ProviderIdentifier(key="X_CI", value="yes")],
            )
        ]
        assert identify_provider({"X_CI": "no"}, providers) is None

    def test_key_only_identifier(self) -> None:
        providers = [CIProvider(name="Y", identifiers=[ProviderIdentifier(key="Y_CI")])]
        assert identify_provider({"Y_CI": "anything"}, providers) is providers[0]

    def test_slug_keeps_owner(self) -> None:
        provider = CIProvider.model_validate(
            {"name": "Travis", "keys": ["TRAVIS_REPO_SLUG"]}
        )
        assert provider.user_identifier({"TRAVIS_REPO_SLUG": "acme/widgets"}) == "acme"

    def test_user_identifier_joins_values(self) -> None:
        provider = CIProvider(name="Z", user_keys=["A", "B", "C"])
        assert provider.user_identifier({"A": "one", "C": "three"}) == "one/three"


class TestDetectSession:
    def test_outside_ci(self) -> None:
        session = detect_session("PRIVADO_USER_IDENTIFIER", env={})
        assert session.is_ci is False
        assert session.provider is None
        assert session.user_identifier == ""

    def test_provider_identifier(self) -> None:
        env = {"CI": "true", "GITHUB_ACTIONS": "true", "GITHUB_REPOSITORY_OWNER": "acme"}
        session = detect_session("PRIVADO_USER_IDENTIFIER", env=env)

        assert session.is_ci is True
        assert session.provider is not None
        assert session.user_identifier == "acme"

    def test_custom_identifier_wins(self) -> None:
        env = {
            "CI": "true",
            "GITHUB_ACTIONS": "true",
            "GITHUB_REPOSITORY_OWNER": "acme",
            "PRIVADO_USER_IDENTIFIER": "team-42",
        }
        session = detect_session("PRIVADO_USER_IDENTIFIER", env=env)
        assert session.user_identifier == "team-42"

    def test_unknown_provider(self) -> None:
        session = detect_session("PRIVADO_USER_IDENTIFIER", env={"CI": "1"})
        assert session.is_ci is True
        assert session.provider is None
        assert session.user_identifier == ""
