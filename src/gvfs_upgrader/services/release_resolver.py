"""Resolves the newest GVFS release and its bundled Git version."""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from gvfs_upgrader.models.release import (
    DependencyVersion,
    ProductVersion,
    Release,
    parse_product_version,
)
from gvfs_upgrader.models.result import Result
from gvfs_upgrader.models.ring import RingType


class ReleaseResolver:
    """Queries the releases endpoint for a newer release in a ring."""

    def __init__(
        self,
        releases_url: str,
        current_version: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ):
        """Initialize release resolver.

        Args:
            releases_url: URL returning the releases list as JSON
            current_version: Installed GVFS version, if already known
            client: HTTP client (a new one per request if None)
            timeout: Request timeout in seconds
        """
        self.logger = logging.getLogger("gvfs_upgrader.release_resolver")
        self.releases_url = releases_url
        self.current_version = (
            parse_product_version(current_version) if current_version else None
        )
        self.client = client
        self.timeout = timeout

    def fetch_releases(self) -> Result[list[Release]]:
        """Download and validate the releases list."""
        self.logger.debug(f"Fetching releases from {self.releases_url}")
        try:
            if self.client is not None:
                response = self.client.get(self.releases_url, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.get(self.releases_url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            self.logger.error(f"Failed to query releases: {e}")
            return Result.failure(f"Failed to query releases from {self.releases_url}: {e}")
        except ValueError as e:
            self.logger.error(f"Invalid releases JSON: {e}")
            return Result.failure(f"Invalid response from {self.releases_url}: {e}")

        if not isinstance(payload, list):
            return Result.failure(
                f"Invalid response from {self.releases_url}: expected a list of releases"
            )

        try:
            releases = [Release(**item) for item in payload]
        except (TypeError, ValidationError) as e:
            self.logger.error(f"Release metadata failed validation: {e}")
            return Result.failure(f"Invalid release metadata: {e}")

        self.logger.info(f"Fetched {len(releases)} releases")
        return Result.success(releases)

    def get_newer_release(
        self, ring: RingType, current_version: Optional[ProductVersion] = None
    ) -> Result[Optional[Release]]:
        """Find the newest release above the installed version.

        Drafts are never offered. The Slow ring skips prereleases.

        Args:
            ring: Ring loaded from the GVFS config
            current_version: Installed version (defaults to the one given at construction)

        Returns:
            Result carrying the release, or None when already up to date
        """
        if not ring.is_named_channel:
            return Result.failure(f"Cannot check for upgrades in ring {ring}")

        if current_version is None:
            current_version = self.current_version
        if current_version is None:
            return Result.failure("Installed GVFS version is unknown")

        fetched = self.fetch_releases()
        if not fetched.ok:
            return Result.failure(fetched.error)

        newest: Optional[Release] = None
        newest_version: Optional[ProductVersion] = None
        for release in fetched.value:
            if release.draft:
                continue
            if release.prerelease and ring != RingType.FAST:
                continue

            version = release.version
            if version is None:
                self.logger.warning(f"Ignoring release with unparsable tag {release.tag_name!r}")
                continue

            if version <= current_version:
                continue

            if newest_version is None or version > newest_version:
                newest, newest_version = release, version

        if newest is None:
            self.logger.info(f"No release newer than {current_version} in ring {ring}")
        else:
            self.logger.info(f"Newest release in ring {ring}: {newest_version}")
        return Result.success(newest)

    def get_dependency_version(self, release: Release) -> Result[DependencyVersion]:
        """Read the Git version from the release's Git installer asset."""
        asset = release.dependency_installer
        if asset is None:
            return Result.failure(f"Release {release.tag_name} has no Git installer")

        version = DependencyVersion.from_installer_name(asset.name)
        if version is None:
            return Result.failure(f"Could not parse Git version from {asset.name}")

        return Result.success(version)
