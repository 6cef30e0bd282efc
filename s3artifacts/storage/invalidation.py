"""
CloudFront Invalidation Task

Invalidates cached copies of freshly uploaded artifacts on every CloudFront
distribution whose origin is the target bucket. Object paths are derived the
same way as unmanaged keys: the local path with the search-root prefix
stripped, rooted at "/".
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from s3artifacts.core.config import Credentials, ProxyConfig
from s3artifacts.storage.session import ClientFactory, build_client

logger = logging.getLogger(__name__)


def origin_matches_bucket(domain_name: str, bucket: str) -> bool:
    """True for ``<bucket>.s3.amazonaws.com`` and its regional variants."""
    return domain_name.startswith(f"{bucket}.s3.") or domain_name.startswith(f"{bucket}.s3-")


@dataclass(frozen=True)
class InvalidationTask:
    """
    Invalidate ``paths`` on the distributions serving ``bucket``.

    Attributes:
        credentials: Explicit key pair or ambient role.
        bucket: Origin bucket name.
        paths: Local artifact paths.
        search_path_length: Prefix length stripped from each path.
    """

    credentials: Credentials
    bucket: str
    paths: tuple[str, ...]
    search_path_length: int = 0
    proxy: Optional[ProxyConfig] = None
    client_factory: ClientFactory = field(default=build_client, compare=False, repr=False)

    def object_paths(self) -> list[str]:
        return ["/" + p[self.search_path_length:].lstrip("/") for p in self.paths]

    def distribution_ids(self, client: Any) -> list[str]:
        ids: list[str] = []
        paginator = client.get_paginator("list_distributions")
        for page in paginator.paginate():
            for dist in page.get("DistributionList", {}).get("Items", []):
                origins = dist.get("Origins", {}).get("Items", [])
                if any(origin_matches_bucket(o.get("DomainName", ""), self.bucket) for o in origins):
                    ids.append(dist["Id"])
        return ids

    def __call__(self, location: Optional[Path] = None) -> list[str]:
        """Create one invalidation per matching distribution; returns their ids."""
        client = self.client_factory("cloudfront", self.credentials, self.proxy)
        distributions = self.distribution_ids(client)
        if not distributions:
            raise LookupError(f"no CloudFront distribution serves bucket {self.bucket}")

        items = self.object_paths()
        invalidation_ids: list[str] = []
        for distribution_id in distributions:
            response = client.create_invalidation(
                DistributionId=distribution_id,
                InvalidationBatch={
                    "Paths": {"Quantity": len(items), "Items": items},
                    "CallerReference": f"s3artifacts-{time.time_ns()}",
                },
            )
            invalidation_ids.append(response["Invalidation"]["Id"])
            logger.debug("Invalidated %d paths on distribution %s", len(items), distribution_id)
        return invalidation_ids
