"""Fallback orchestrator - Artifact first, then version/channel resolution.

Two working states plus a terminal one:

    TRYING_ARTIFACT --success--> DONE
    TRYING_ARTIFACT --failure, policy warn/ignore--> RESOLVING_VERSION
    TRYING_ARTIFACT --failure, policy error--> raise
    RESOLVING_VERSION --success--> DONE
    RESOLVING_VERSION --failure--> raise (no further tier)

The artifact path always finishes before version resolution starts, and at
most one installation succeeds per run.
"""

import logging
from enum import StrEnum
from pathlib import Path

from .exceptions import ArtifactDownloadError
from .exceptions import FluenceSetupError
from .exceptions import InstallError
from .protocols import AcquirerProtocol
from .protocols import ChannelListingProtocol
from .protocols import InstallerProtocol
from .resolver import classify
from .resolver import classify_artifact
from .resolver import resolve_channels
from .schema import ArtifactSource
from .schema import ChannelSpecifier
from .schema import FallbackPolicy
from .schema import SemVerSpecifier
from .schema import UrlSpecifier

logger = logging.getLogger(__name__)


class SetupState(StrEnum):
    TRYING_ARTIFACT = "trying-artifact"
    RESOLVING_VERSION = "resolving-version"
    DONE = "done"


def initial_state(artifact: ArtifactSource | None) -> SetupState:
    return SetupState.TRYING_ARTIFACT if artifact is not None else SetupState.RESOLVING_VERSION


def state_after_artifact_failure(policy: FallbackPolicy, label: str, error: Exception) -> SetupState:
    """
    Apply the fallback policy to an artifact-path failure.

    Args:
        policy: Configured FallbackPolicy
        label: Artifact specifier as given by the user
        error: Failure raised by acquisition or installation

    Returns:
        RESOLVING_VERSION for warn and ignore

    Raises:
        ArtifactDownloadError: For policy error, with the failure attached as cause
    """
    match policy:
        case FallbackPolicy.WARN:
            logger.warning(f"Failed to download artifact '{label}' with error:\n{error}\nFalling back to releases.")
        case FallbackPolicy.IGNORE:
            logger.info(f"Failed to download artifact '{label}' with error:\n{error}\nFalling back to releases.")
        case FallbackPolicy.ERROR:
            raise ArtifactDownloadError(
                f"Failed to download artifact '{label}' with error:\n{error}",
                context={"artifact": label, "policy": policy.value},
            ) from error
    return SetupState.RESOLVING_VERSION


class FallbackOrchestrator:
    """
    Sequence artifact acquisition and version/channel resolution under a policy.

    Example:
        >>> orchestrator = FallbackOrchestrator(
        ...     artifact_acquirer=ArtifactAcquirer(...),
        ...     channel_acquirer=ChannelAcquirer(...),
        ...     release_acquirer=ReleaseAcquirer(...),
        ...     installer=BinaryInstaller(...),
        ...     policy=FallbackPolicy.WARN,
        ... )
        >>> installed = await orchestrator.run(artifact="fluence-cli", version="stable")
    """

    def __init__(
        self,
        artifact_acquirer: AcquirerProtocol,
        channel_acquirer: AcquirerProtocol,
        release_acquirer: AcquirerProtocol,
        installer: InstallerProtocol,
        policy: FallbackPolicy = FallbackPolicy.WARN,
        channel_listing: ChannelListingProtocol | None = None,
    ):
        self.artifact_acquirer = artifact_acquirer
        self.channel_acquirer = channel_acquirer
        self.release_acquirer = release_acquirer
        self.installer = installer
        self.policy = policy
        self.channel_listing = channel_listing
        self.visited: list[SetupState] = []

    async def run(self, artifact: str, version: str) -> Path:
        """
        Drive the state machine until an installation succeeds or an error is terminal.

        Args:
            artifact: Raw ``artifact`` input (empty: skip straight to version resolution)
            version: Raw ``version`` input

        Returns:
            Path of the installed executable

        Raises:
            FluenceSetupError: Terminal failure of the run
        """
        source = classify_artifact(artifact)
        state = initial_state(source)

        installed: Path | None = None
        while state is not SetupState.DONE:
            self.visited.append(state)
            if state is SetupState.TRYING_ARTIFACT:
                state, installed = await self.try_artifact(source)
            else:
                state, installed = await self.resolve_version(version)

        if installed is None:
            raise InstallError(
                "Setup finished without an installed fluence executable",
                context={"visited": [s.value for s in self.visited]},
            )
        return installed

    async def try_artifact(self, source: ArtifactSource) -> tuple[SetupState, Path | None]:
        logger.info(f"Attempting to download artifact: {source.label}")
        try:
            tool_dir = await self.artifact_acquirer.acquire(source)
            installed = await self.installer.install(tool_dir)
        except FluenceSetupError as e:
            return state_after_artifact_failure(self.policy, source.label, e), None
        return SetupState.DONE, installed

    async def resolve_version(self, version: str) -> tuple[SetupState, Path]:
        channels = await resolve_channels(self.channel_listing)
        specifier = classify(version, channels)
        logger.debug(f"Classified version input '{version}' as {specifier.kind}")

        match specifier:
            case ChannelSpecifier():
                tool_dir = await self.channel_acquirer.acquire(specifier)
            case SemVerSpecifier():
                tool_dir = await self.release_acquirer.acquire(specifier)
            case UrlSpecifier():
                tool_dir = await self.artifact_acquirer.acquire(specifier)

        installed = await self.installer.install(tool_dir)
        return SetupState.DONE, installed
