"""Setup-specific exceptions.

Every message is meant to be read in a CI job log: it names what was tried,
what was expected and what was found.
"""


class FluenceSetupError(Exception):
    """Base exception for fluence setup operations."""

    def __init__(self, message: str, context: dict | None = None):
        """Initialize with message and optional context.

        Args:
            message: Human-readable error message
            context: Optional dict with additional context (specifier, paths, urls, etc.)
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ConfigurationError(FluenceSetupError):
    """Action inputs or runner environment are invalid."""


class UnsupportedPlatformError(FluenceSetupError):
    """Host OS/architecture pair is not supported."""


class InvalidSpecifierError(FluenceSetupError):
    """Version input is neither a known channel nor a valid semantic version."""


class NoArchiveFoundError(FluenceSetupError):
    """Expected zip or tar.gz archive missing (or ambiguous) in a download."""


class ArtifactNotFoundError(FluenceSetupError):
    """Artifact store has no artifact with the requested name or id."""


class ArtifactDownloadError(FluenceSetupError):
    """Artifact could not be fetched or unpacked."""


class VersionNotFoundError(FluenceSetupError):
    """Requested version is absent from the version index."""


class ReleaseDownloadError(FluenceSetupError):
    """Version index or release tarball could not be fetched or unpacked."""


class ChannelDownloadFailedError(FluenceSetupError):
    """Channel tarball could not be fetched or unpacked."""


class BinaryNotFoundError(FluenceSetupError):
    """Unpacked tree lacks the expected executable."""


class InstallError(FluenceSetupError):
    """Executable could not be published onto PATH."""


class SmokeTestFailedError(FluenceSetupError):
    """Installed executable's self-check invocation exited non-zero."""
