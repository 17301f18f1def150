"""Protocols for the seams of the setup pipeline.

Acquirers, the installer, the artifact store and the live channel listing are
injected, so the orchestrator can be exercised with fakes and no global state.
"""

from pathlib import Path
from typing import Protocol
from typing import runtime_checkable


class AcquirerProtocol(Protocol):
    """Turns a classified specifier into an unpacked tool directory."""

    async def acquire(self, specifier) -> Path:
        """Fetch and unpack the tool tree.

        Args:
            specifier: Classified specifier this acquirer handles

        Returns:
            Freshly created directory holding ``fluence/bin/fluence``

        Raises:
            FluenceSetupError: If download or unpacking fails
        """
        ...


class InstallerProtocol(Protocol):
    """Publishes an unpacked tool onto PATH."""

    async def install(self, tool_dir: Path) -> Path:
        """Install executable found in tool_dir.

        Args:
            tool_dir: Directory produced by an acquirer

        Returns:
            Path of the published executable (the bin directory symlink)
        """
        ...


class ArtifactClientProtocol(Protocol):
    """Artifact store: fetch by name or id into a local directory.

    Example implementations:
    - GitHubArtifactClient: GitHub Actions artifacts REST API
    - Fakes in tests that copy a prepared zip
    """

    async def download_artifact(self, name: str, target_dir: Path) -> Path:
        """Download artifact into target_dir.

        Args:
            name: Artifact name or numeric id
            target_dir: Directory to download into

        Returns:
            Directory containing the downloaded payload

        Raises:
            ArtifactNotFoundError: If the store has no such artifact
        """
        ...


@runtime_checkable
class ChannelListingProtocol(Protocol):
    """Live listing of release channels.

    When provided, the listing takes precedence over the built-in channel list.
    """

    async def list_channels(self) -> list[str] | None:
        """Return current channel names, or None if the listing is unavailable."""
        ...
