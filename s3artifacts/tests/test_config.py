"""
Unit Tests: Profile and Proxy Configuration

Tests:
    - Lenient parsing of retry settings
    - Legacy signed-URL expiry
    - Ambient role clears keys
    - Environment loading
    - No-proxy pattern matching
"""

import pytest

from s3artifacts.core.config import (
    AmbientRole,
    ExplicitCredentials,
    ProfileConfig,
    ProxyConfig,
)


class TestProfileConfig:
    """Tests for profile construction."""

    def test_defaults(self):
        config = ProfileConfig.create("default", "AKIA", "secret")

        assert config.max_upload_retries == 5
        assert config.retry_wait_seconds == 5
        assert config.signed_url_expiry_seconds == 60

    def test_parses_strings(self):
        config = ProfileConfig.create(
            "p", "a", "s", max_upload_retries="3", retry_wait_seconds="0"
        )

        assert config.max_upload_retries == 3
        assert config.retry_wait_seconds == 0

    def test_unparseable_falls_back(self):
        """Garbage retry settings use the defaults."""
        config = ProfileConfig.create(
            "p", "a", "s", max_upload_retries="many", retry_wait_seconds=""
        )

        assert config.max_upload_retries == 5
        assert config.retry_wait_seconds == 5

    def test_legacy_expiry(self):
        config = ProfileConfig.legacy("p", "a", "s")

        assert config.signed_url_expiry_seconds == 4

    def test_role_clears_keys(self):
        config = ProfileConfig.create("p", "AKIA", "secret", use_role=True)

        assert config.access_key == ""
        assert config.secret_key == ""
        assert config.credentials == AmbientRole()

    def test_explicit_credentials(self):
        config = ProfileConfig.create("p", "AKIA", "secret")

        assert config.credentials == ExplicitCredentials("AKIA", "secret")
        assert config.credentials.client_kwargs() == {
            "aws_access_key_id": "AKIA",
            "aws_secret_access_key": "secret",
        }

    def test_secret_not_in_repr(self):
        config = ProfileConfig.create("p", "AKIA", "hunter2")

        assert "hunter2" not in repr(config)
        assert "hunter2" not in repr(config.credentials)

    def test_validate(self):
        assert ProfileConfig.create("p", "a", "s").validate().is_ok()
        assert ProfileConfig.create("", "a", "s").validate().is_err()
        assert ProfileConfig.create("p", "a", "s", max_upload_retries=0).validate().is_err()

    def test_profile_proxy(self):
        config = ProfileConfig.create("p", "a", "s", proxy_host="proxy", proxy_port="3128")

        assert config.profile_proxy == ProxyConfig(host="proxy", port=3128)


class TestFromEnv:
    """Tests for environment loading."""

    def test_loads(self, monkeypatch):
        monkeypatch.setenv("S3ARTIFACTS_PROFILE_NAME", "ci")
        monkeypatch.setenv("S3ARTIFACTS_ACCESS_KEY", "AKIA")
        monkeypatch.setenv("S3ARTIFACTS_SECRET_KEY", "secret")
        monkeypatch.setenv("S3ARTIFACTS_MAX_UPLOAD_RETRIES", "2")

        result = ProfileConfig.from_env()

        assert result.is_ok()
        config = result.unwrap()
        assert config.name == "ci"
        assert config.max_upload_retries == 2
        assert config.retry_wait_seconds == 5

    def test_role_needs_no_keys(self, monkeypatch):
        monkeypatch.setenv("S3ARTIFACTS_PROFILE_NAME", "ci")
        monkeypatch.setenv("S3ARTIFACTS_USE_ROLE", "true")
        monkeypatch.delenv("S3ARTIFACTS_ACCESS_KEY", raising=False)
        monkeypatch.delenv("S3ARTIFACTS_SECRET_KEY", raising=False)

        result = ProfileConfig.from_env()

        assert result.is_ok()
        assert result.unwrap().use_role

    def test_missing_name(self, monkeypatch):
        monkeypatch.delenv("S3ARTIFACTS_PROFILE_NAME", raising=False)

        assert ProfileConfig.from_env().is_err()

    def test_missing_keys(self, monkeypatch):
        monkeypatch.setenv("S3ARTIFACTS_PROFILE_NAME", "ci")
        monkeypatch.delenv("S3ARTIFACTS_USE_ROLE", raising=False)
        monkeypatch.delenv("S3ARTIFACTS_ACCESS_KEY", raising=False)
        monkeypatch.delenv("S3ARTIFACTS_SECRET_KEY", raising=False)

        assert ProfileConfig.from_env().is_err()


class TestProxyConfig:
    """Tests for proxy selection."""

    def test_unconfigured(self):
        assert not ProxyConfig().should_use_proxy("s3.amazonaws.com")

    def test_configured(self):
        assert ProxyConfig(host="proxy", port=8080).should_use_proxy("s3.amazonaws.com")

    def test_full_match_exempts(self):
        proxy = ProxyConfig(host="proxy", no_proxy_patterns=(r".*\.amazonaws\.com", "s3.*"))

        assert not proxy.should_use_proxy("s3.amazonaws.com")

    def test_partial_match_does_not_exempt(self):
        """Patterns must match the whole hostname."""
        proxy = ProxyConfig(host="proxy", no_proxy_patterns=("s3",))

        assert proxy.should_use_proxy("s3.amazonaws.com")

    def test_invalid_pattern(self):
        with pytest.raises(ValueError):
            ProxyConfig(host="proxy", no_proxy_patterns=("(",))

    def test_url(self):
        proxy = ProxyConfig(host="proxy", port=3128, username="u", password="p")

        assert proxy.url() == "http://u:p@proxy:3128"
        assert ProxyConfig(host="proxy").url() == "http://proxy"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("S3ARTIFACTS_HTTP_PROXY_HOST", "proxy")
        monkeypatch.setenv("S3ARTIFACTS_HTTP_PROXY_PORT", "3128")
        monkeypatch.setenv("S3ARTIFACTS_NO_PROXY_PATTERNS", r"localhost, .*\.internal")

        proxy = ProxyConfig.from_env()

        assert proxy.host == "proxy"
        assert proxy.port == 3128
        assert proxy.no_proxy_patterns == ("localhost", r".*\.internal")
