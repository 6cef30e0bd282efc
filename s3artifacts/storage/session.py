"""
Storage Session: Client Construction and Network Configuration
===============================================================

Builds boto3 clients for one profile. The S3 client is created exactly once,
when the session is opened, and reused for the profile's lifetime; a
configuration change therefore needs a new session.

Credentials:
------------
- ``ExplicitCredentials``: the access/secret key pair is passed to boto3.
- ``AmbientRole``: no keys are passed and boto3's default provider chain
  (environment, shared config, instance role) resolves them.

Proxy Selection:
----------------
The host process proxy is applied only when one is configured AND the S3
hostname fully matches none of its no-proxy patterns. When the host process
has no proxy, the profile's own proxy host/port are used.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import boto3
from botocore.config import Config

from s3artifacts.core import constants as C
from s3artifacts.core.config import Credentials, ProfileConfig, ProxyConfig
from s3artifacts.core.errors import ArtifactError, ConfigurationError, StorageError
from s3artifacts.core.types import Result, Ok, Err

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., Any]


def client_config(proxy: Optional[ProxyConfig], hostname: str = C.S3_HOSTNAME) -> Config:
    """botocore client configuration, with proxies only where they apply."""
    if proxy is not None and proxy.should_use_proxy(hostname):
        url = proxy.url()
        return Config(proxies={"http": url, "https": url})
    return Config()


def build_client(
    service: str,
    credentials: Credentials,
    proxy: Optional[ProxyConfig] = None,
    region: Optional[str] = None,
) -> Any:
    """
    Create a boto3 client for ``service`` ("s3" or "cloudfront").

    Args:
        service: boto3 service name.
        credentials: Explicit key pair or ambient role.
        proxy: Effective proxy configuration, if any.
        region: Optional region name.
    """
    kwargs: dict[str, Any] = {
        "config": client_config(proxy),
        **credentials.client_kwargs(),
    }
    if region:
        kwargs["region_name"] = region
    return boto3.client(service, **kwargs)


def effective_proxy(config: ProfileConfig, host_proxy: Optional[ProxyConfig]) -> ProxyConfig:
    """Host process proxy if configured, otherwise the profile's own."""
    if host_proxy is not None and host_proxy.configured:
        return host_proxy
    return config.profile_proxy


@dataclass(frozen=True)
class StorageSession:
    """
    Explicit per-profile session.

    Constructed once at setup and passed by reference to every operation.

    Attributes:
        config: The profile this session was opened for.
        proxy: Effective proxy configuration.
        client: The S3 client.
        client_factory: Factory used for the client; transfer tasks build
            their own clients with it where they run.
    """

    config: ProfileConfig
    proxy: ProxyConfig
    client: Any
    client_factory: ClientFactory = build_client

    @classmethod
    def open(
        cls,
        config: ProfileConfig,
        proxy: Optional[ProxyConfig] = None,
        client_factory: ClientFactory = build_client,
    ) -> Result[StorageSession, ArtifactError]:
        """
        Validate the profile and create its S3 client.

        Args:
            config: Profile configuration.
            proxy: Host process proxy (default: loaded from environment).
            client_factory: Client constructor; injectable for tests.

        Returns:
            Ok(StorageSession) or Err with the configuration/client error.
        """
        validation = config.validate()
        if validation.is_err():
            return Err(ConfigurationError.invalid("profile", config.name, validation.error))

        if proxy is None:
            proxy = ProxyConfig.from_env()
        resolved = effective_proxy(config, proxy)

        try:
            client = client_factory("s3", config.credentials, resolved)
        except Exception as e:
            return Err(StorageError.request_failed("create client", config.name, e))

        logger.debug(
            "Opened storage session for profile %s (role=%s, proxy=%s)",
            config.name, config.use_role, resolved.should_use_proxy(C.S3_HOSTNAME),
        )
        return Ok(cls(config=config, proxy=resolved, client=client, client_factory=client_factory))

    @property
    def credentials(self) -> Credentials:
        return self.config.credentials
