"""setup-fluence - Resolve a version specifier and install the fluence CLI in a CI job.

Public API exports.
"""

from .acquirers import ArtifactAcquirer
from .acquirers import ChannelAcquirer
from .acquirers import ReleaseAcquirer
from .action import run
from .action import setup
from .config import ActionInputs
from .config import load_inputs
from .exceptions import ArtifactDownloadError
from .exceptions import ArtifactNotFoundError
from .exceptions import BinaryNotFoundError
from .exceptions import ChannelDownloadFailedError
from .exceptions import ConfigurationError
from .exceptions import FluenceSetupError
from .exceptions import InstallError
from .exceptions import InvalidSpecifierError
from .exceptions import NoArchiveFoundError
from .exceptions import ReleaseDownloadError
from .exceptions import SmokeTestFailedError
from .exceptions import UnsupportedPlatformError
from .exceptions import VersionNotFoundError
from .installer import BinaryInstaller
from .orchestrator import FallbackOrchestrator
from .orchestrator import SetupState
from .platform import SUPPORTED_PLATFORMS
from .platform import detect_platform
from .protocols import AcquirerProtocol
from .protocols import ArtifactClientProtocol
from .protocols import ChannelListingProtocol
from .protocols import InstallerProtocol
from .resolver import CHANNELS
from .resolver import classify
from .resolver import classify_artifact
from .schema import ArtifactSpecifier
from .schema import ChannelSpecifier
from .schema import FallbackPolicy
from .schema import PlatformKey
from .schema import SemVerSpecifier
from .schema import UrlSpecifier
from .schema import VersionIndex

__all__ = [
    # Platform
    "PlatformKey",
    "SUPPORTED_PLATFORMS",
    "detect_platform",
    # Specifiers
    "ArtifactSpecifier",
    "ChannelSpecifier",
    "SemVerSpecifier",
    "UrlSpecifier",
    "CHANNELS",
    "classify",
    "classify_artifact",
    # Acquisition
    "ArtifactAcquirer",
    "ChannelAcquirer",
    "ReleaseAcquirer",
    "VersionIndex",
    "AcquirerProtocol",
    "ArtifactClientProtocol",
    "ChannelListingProtocol",
    # Installation
    "BinaryInstaller",
    "InstallerProtocol",
    # Orchestration
    "FallbackOrchestrator",
    "FallbackPolicy",
    "SetupState",
    # Run boundary
    "ActionInputs",
    "load_inputs",
    "run",
    "setup",
    # Exceptions
    "FluenceSetupError",
    "ConfigurationError",
    "UnsupportedPlatformError",
    "InvalidSpecifierError",
    "NoArchiveFoundError",
    "ArtifactNotFoundError",
    "ArtifactDownloadError",
    "VersionNotFoundError",
    "ReleaseDownloadError",
    "ChannelDownloadFailedError",
    "BinaryNotFoundError",
    "InstallError",
    "SmokeTestFailedError",
]

__version__ = "0.1.0"
