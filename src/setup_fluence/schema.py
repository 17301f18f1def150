"""Setup data model - Immutable values produced once per run.

A specifier is classified exactly once into a tagged value; every consumer
dispatches on ``kind`` instead of re-inspecting the raw input string.
"""

import re
from enum import StrEnum
from typing import Annotated
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import RootModel

from .exceptions import VersionNotFoundError

# https://semver.org/#is-there-a-suggested-regular-expression-regex-to-check-a-semver-string
SEMVER_PATTERN = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


class FallbackPolicy(StrEnum):
    """What to do when the artifact path fails."""

    WARN = "warn"
    ERROR = "error"
    IGNORE = "ignore"


class PlatformKey(BaseModel):
    """Normalized ``{os}-{arch}`` pair, e.g. ``linux-x64``."""

    model_config = ConfigDict(frozen=True)

    os: str
    arch: str

    @property
    def key(self) -> str:
        return f"{self.os}-{self.arch}"

    def __str__(self) -> str:
        return self.key


class UrlSpecifier(BaseModel):
    """Direct http(s) download of a prebuilt package."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["url"] = "url"
    url: str

    @property
    def label(self) -> str:
        return self.url


class ArtifactSpecifier(BaseModel):
    """Artifact-store reference (name or numeric id)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["artifact"] = "artifact"
    name: str

    @property
    def label(self) -> str:
        return self.name


class ChannelSpecifier(BaseModel):
    """Named release channel such as ``stable``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["channel"] = "channel"
    name: str

    @property
    def label(self) -> str:
        return self.name


class SemVerSpecifier(BaseModel):
    """Strict semantic version, stored without a leading ``v``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["semver"] = "semver"
    version: str

    @property
    def label(self) -> str:
        return self.version


VersionSpecifier = Annotated[
    UrlSpecifier | ArtifactSpecifier | ChannelSpecifier | SemVerSpecifier,
    Field(discriminator="kind"),
]

ArtifactSource = UrlSpecifier | ArtifactSpecifier


def version_sort_key(version: str) -> tuple:
    """Sort key ordering semantic versions numerically, anything else after them."""
    match = SEMVER_PATTERN.match(version)
    if not match:
        return (1, (), version)
    major, minor, patch, prerelease, _build = match.groups()
    # A release sorts after its own prereleases
    return (0, (int(major), int(minor), int(patch), prerelease is None, prerelease or ""), version)


class VersionIndex(RootModel[dict[str, str]]):
    """Per-platform version index: version string -> tarball URL.

    Fetched fresh every run, never cached.
    """

    def available_versions(self) -> list[str]:
        return sorted(self.root, key=version_sort_key)

    def resolve(self, version: str) -> str:
        """
        Resolve version to its tarball URL.

        Args:
            version: Version string without leading ``v``

        Returns:
            Tarball URL recorded in the index

        Raises:
            VersionNotFoundError: If version is absent; message lists every known version
        """
        url = self.root.get(version)
        if not url:
            available = self.available_versions()
            raise VersionNotFoundError(
                f"Version {version} not found. Available versions are: {', '.join(available)}",
                context={"version": version, "available": available},
            )
        return url
