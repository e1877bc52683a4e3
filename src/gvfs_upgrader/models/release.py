"""Release metadata models parsed from the GitHub releases API."""

import re
from typing import Optional

from packaging.version import InvalidVersion, Version
from pydantic import BaseModel, Field, field_validator

# Product versions are compared with packaging's ordering
ProductVersion = Version

PRODUCT_INSTALLER_PATTERN = re.compile(r"^SetupGVFS\..+\.exe$", re.IGNORECASE)
DEPENDENCY_INSTALLER_PATTERN = re.compile(
    r"^Git-(?P<version>\d+\.\d+\.\d+\..+?)-64-bit\.exe$", re.IGNORECASE
)


def parse_product_version(text: str) -> Optional[ProductVersion]:
    """Parse a release tag like ``v1.0.19010.1``.

    Returns:
        Parsed version, or None if the tag is not a version
    """
    try:
        return Version(text.strip().lstrip("vV"))
    except InvalidVersion:
        return None


class DependencyVersion(BaseModel):
    """Version of the Git build bundled with a GVFS release.

    Git for GVFS versions look like ``2.20.1.vfs.1.1.102.gabcdef``:
    major.minor.build, then a platform tag and the fork revision numbers.
    """

    major: int = Field(..., ge=0)
    minor: int = Field(..., ge=0)
    build: int = Field(..., ge=0)
    platform: str = Field(..., min_length=1)
    revision: int = Field(..., ge=0)
    minor_revision: int = Field(..., ge=0)

    @classmethod
    def parse(cls, text: str) -> Optional["DependencyVersion"]:
        """Parse a dotted Git version string, ``None`` when malformed.

        Git reports ``2.20.1.windows.1``; installer names may carry a sixth
        part (``2.20.1.vfs.1.1``). A missing sixth part is 0; anything after it
        (``.102.g8a0ff2a``) is ignored.
        """
        text = text.strip()
        if text.lower().startswith("git version "):
            text = text[len("git version "):]

        parts = text.split(".")
        if len(parts) < 5:
            return None

        try:
            return cls(
                major=int(parts[0]),
                minor=int(parts[1]),
                build=int(parts[2]),
                platform=parts[3],
                revision=int(parts[4]),
                minor_revision=int(parts[5]) if len(parts) > 5 else 0,
            )
        except ValueError:
            return None

    @classmethod
    def from_installer_name(cls, name: str) -> Optional["DependencyVersion"]:
        """Parse the version out of ``Git-<version>-64-bit.exe``."""
        match = DEPENDENCY_INSTALLER_PATTERN.match(name)
        if not match:
            return None
        return cls.parse(match.group("version"))

    def __str__(self) -> str:
        return (
            f"{self.major}.{self.minor}.{self.build}.{self.platform}."
            f"{self.revision}.{self.minor_revision}"
        )


class ReleaseAsset(BaseModel):
    """Downloadable file attached to a release."""

    name: str = Field(..., min_length=1)
    size: int = Field(..., ge=0, description="Expected size in bytes")
    browser_download_url: str = Field(..., description="Direct download URL")

    @field_validator("name")
    @classmethod
    def no_path_separators(cls, v: str) -> str:
        """Asset names become file names in the download directory."""
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError("Asset name must be a plain file name")
        return v


class Release(BaseModel):
    """One entry of the releases list."""

    tag_name: str
    name: Optional[str] = None
    prerelease: bool = False
    draft: bool = False
    assets: list[ReleaseAsset] = Field(default_factory=list)

    @property
    def version(self) -> Optional[ProductVersion]:
        return parse_product_version(self.tag_name)

    @property
    def product_installer(self) -> Optional[ReleaseAsset]:
        return self._find_asset(PRODUCT_INSTALLER_PATTERN)

    @property
    def dependency_installer(self) -> Optional[ReleaseAsset]:
        return self._find_asset(DEPENDENCY_INSTALLER_PATTERN)

    def _find_asset(self, pattern: re.Pattern) -> Optional[ReleaseAsset]:
        for asset in self.assets:
            if pattern.match(asset.name):
                return asset
        return None
