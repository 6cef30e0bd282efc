"""
Configuration Management for Build Artifact Storage

Provides validated profile and proxy configuration with the defaults the
build host expects. Supports environment variable loading.

Design:
- Immutable after construction
- Lenient parsing of retry settings (unparseable values fall back to defaults)
- Credentials resolved once into a closed variant
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Optional, Union

from s3artifacts.core.types import Result, Ok, Err
from s3artifacts.core import constants as C


def _parse_int(value: Union[str, int, None], default: int) -> int:
    """Parse an integer setting, falling back to ``default`` when unparseable."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def _parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    val = value.strip().lower()
    if val in ("true", "1", "yes"):
        return True
    if val in ("false", "0", "no"):
        return False
    return default


# =============================================================================
# CREDENTIALS VARIANT
# =============================================================================
@dataclass(frozen=True, slots=True)
class ExplicitCredentials:
    """Static access/secret key pair."""

    access_key: str
    secret_key: str = field(repr=False)

    def client_kwargs(self) -> dict[str, str]:
        return {
            "aws_access_key_id": self.access_key,
            "aws_secret_access_key": self.secret_key,
        }


@dataclass(frozen=True, slots=True)
class AmbientRole:
    """Credentials resolved from the environment / instance role by boto3."""

    def client_kwargs(self) -> dict[str, str]:
        return {}


Credentials = Union[ExplicitCredentials, AmbientRole]


# =============================================================================
# PROXY CONFIGURATION
# =============================================================================
@dataclass(frozen=True)
class ProxyConfig:
    """
    Outbound proxy of the host process.

    Attributes:
        host: Proxy hostname. Empty means no proxy.
        port: Proxy port.
        username: Optional proxy user.
        password: Optional proxy password (never logged).
        no_proxy_patterns: Regexes; a target hostname that fully matches any
            of them bypasses the proxy.
    """

    host: str = ""
    port: int = 0
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    no_proxy_patterns: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for pattern in self.no_proxy_patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid no-proxy pattern {pattern!r}: {e}") from e

    @property
    def configured(self) -> bool:
        return bool(self.host)

    def should_use_proxy(self, hostname: str) -> bool:
        """True if a proxy is set and ``hostname`` matches no exemption pattern."""
        if not self.configured:
            return False
        for pattern in self.no_proxy_patterns:
            if re.fullmatch(pattern, hostname):
                return False
        return True

    def url(self) -> str:
        """Proxy URL in the form botocore expects."""
        auth = ""
        if self.username:
            auth = self.username
            if self.password:
                auth += f":{self.password}"
            auth += "@"
        port = f":{self.port}" if self.port else ""
        return f"http://{auth}{self.host}{port}"

    @classmethod
    def from_env(cls, prefix: str = C.ENV_PREFIX) -> ProxyConfig:
        """
        Construct the host proxy from environment variables.

        Environment Variables:
        - {prefix}_HTTP_PROXY_HOST
        - {prefix}_HTTP_PROXY_PORT
        - {prefix}_HTTP_PROXY_USER
        - {prefix}_HTTP_PROXY_PASSWORD
        - {prefix}_NO_PROXY_PATTERNS: comma-separated regexes
        """
        def _get(key: str, default: str = "") -> str:
            return os.environ.get(f"{prefix}_{key}", default)

        patterns = tuple(
            p.strip() for p in _get("NO_PROXY_PATTERNS").split(",") if p.strip()
        )
        return cls(
            host=_get("HTTP_PROXY_HOST"),
            port=_parse_int(_get("HTTP_PROXY_PORT"), 0),
            username=_get("HTTP_PROXY_USER") or None,
            password=_get("HTTP_PROXY_PASSWORD") or None,
            no_proxy_patterns=patterns,
        )


# =============================================================================
# PROFILE CONFIGURATION
# =============================================================================
@dataclass(frozen=True)
class ProfileConfig:
    """
    One storage account / configuration.

    Invariant: when ``use_role`` is set, ``access_key`` and ``secret_key``
    are empty.

    Attributes:
        name: Symbolic profile name, part of managed object keys.
        access_key: Access key id (empty when using the ambient role).
        secret_key: Secret key. Excluded from repr, never logged.
        proxy_host: Profile-level proxy host.
        proxy_port: Profile-level proxy port (kept as entered).
        use_role: Use ambient / instance-role credentials.
        signed_url_expiry_seconds: Lifetime of presigned download links.
        max_upload_retries: Attempts before an upload or invalidation fails.
        retry_wait_seconds: Fixed wait between attempts.
    """

    name: str
    access_key: str = ""
    secret_key: str = field(default="", repr=False)
    proxy_host: str = ""
    proxy_port: str = ""
    use_role: bool = False
    signed_url_expiry_seconds: int = C.DEFAULT_SIGNED_URL_EXPIRY_SECONDS
    max_upload_retries: int = C.DEFAULT_MAX_UPLOAD_RETRIES
    retry_wait_seconds: int = C.DEFAULT_RETRY_WAIT_SECONDS

    def __post_init__(self) -> None:
        if self.use_role:
            object.__setattr__(self, "access_key", "")
            object.__setattr__(self, "secret_key", "")

    @classmethod
    def create(
        cls,
        name: str,
        access_key: str,
        secret_key: str,
        proxy_host: str = "",
        proxy_port: str = "",
        use_role: bool = False,
        signed_url_expiry_seconds: int = C.DEFAULT_SIGNED_URL_EXPIRY_SECONDS,
        max_upload_retries: Union[str, int, None] = None,
        retry_wait_seconds: Union[str, int, None] = None,
    ) -> ProfileConfig:
        """Build a profile from the raw configuration surface."""
        return cls(
            name=name,
            access_key=access_key or "",
            secret_key=secret_key or "",
            proxy_host=proxy_host or "",
            proxy_port=proxy_port or "",
            use_role=use_role,
            signed_url_expiry_seconds=signed_url_expiry_seconds,
            max_upload_retries=_parse_int(max_upload_retries, C.DEFAULT_MAX_UPLOAD_RETRIES),
            retry_wait_seconds=_parse_int(retry_wait_seconds, C.DEFAULT_RETRY_WAIT_SECONDS),
        )

    @classmethod
    def legacy(
        cls,
        name: str,
        access_key: str,
        secret_key: str,
        proxy_host: str = "",
        proxy_port: str = "",
        use_role: bool = False,
        max_upload_retries: Union[str, int, None] = None,
        retry_wait_seconds: Union[str, int, None] = None,
    ) -> ProfileConfig:
        """Profile saved before the signed-URL expiry was configurable."""
        return cls.create(
            name,
            access_key,
            secret_key,
            proxy_host,
            proxy_port,
            use_role,
            C.LEGACY_SIGNED_URL_EXPIRY_SECONDS,
            max_upload_retries,
            retry_wait_seconds,
        )

    @classmethod
    def from_env(cls, prefix: str = C.ENV_PREFIX) -> Result[ProfileConfig, str]:
        """
        Load a profile from environment variables.

        Environment variables are prefixed with S3ARTIFACTS_.
        Example: S3ARTIFACTS_PROFILE_NAME, S3ARTIFACTS_USE_ROLE
        """
        def _get(key: str, default: str = "") -> str:
            return os.environ.get(f"{prefix}_{key}", default)

        name = _get("PROFILE_NAME")
        if not name:
            return Err(f"{prefix}_PROFILE_NAME is required")
        use_role = _parse_bool(_get("USE_ROLE"), False)
        if not use_role and not (_get("ACCESS_KEY") and _get("SECRET_KEY")):
            return Err(
                f"{prefix}_ACCESS_KEY and {prefix}_SECRET_KEY are required "
                f"unless {prefix}_USE_ROLE is set"
            )
        expiry = _parse_int(
            _get("SIGNED_URL_EXPIRY_SECONDS"), C.DEFAULT_SIGNED_URL_EXPIRY_SECONDS
        )
        return Ok(cls.create(
            name=name,
            access_key=_get("ACCESS_KEY"),
            secret_key=_get("SECRET_KEY"),
            proxy_host=_get("PROXY_HOST"),
            proxy_port=_get("PROXY_PORT"),
            use_role=use_role,
            signed_url_expiry_seconds=expiry,
            max_upload_retries=_get("MAX_UPLOAD_RETRIES"),
            retry_wait_seconds=_get("RETRY_WAIT_SECONDS"),
        ))

    @property
    def credentials(self) -> Credentials:
        if self.use_role:
            return AmbientRole()
        return ExplicitCredentials(self.access_key, self.secret_key)

    @property
    def profile_proxy(self) -> ProxyConfig:
        """The profile's own proxy settings as a ProxyConfig."""
        return ProxyConfig(host=self.proxy_host, port=_parse_int(self.proxy_port, 0))

    def validate(self) -> Result[None, str]:
        """Validate configuration invariants."""
        if not self.name:
            return Err("Profile name must not be empty")
        if self.max_upload_retries < 1:
            return Err("max_upload_retries must be >= 1")
        if self.retry_wait_seconds < 0:
            return Err("retry_wait_seconds must be >= 0")
        if self.signed_url_expiry_seconds < 1:
            return Err("signed_url_expiry_seconds must be >= 1")
        return Ok(None)
