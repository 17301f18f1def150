"""Platform gate - Validate the host before any network or filesystem work."""

import logging
import platform as _platform
import sys

from .exceptions import UnsupportedPlatformError
from .schema import PlatformKey

logger = logging.getLogger(__name__)

SUPPORTED_PLATFORMS = frozenset({"linux-x64", "linux-arm64", "darwin-x64", "darwin-arm64"})

# Release artifacts follow Node.js naming (process.platform / process.arch)
_OS_ALIASES = {
    "linux": "linux",
    "darwin": "darwin",
    "macos": "darwin",
}

_ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
}


def normalize_platform(system: str, machine: str) -> PlatformKey:
    """Normalize raw OS and machine names to a PlatformKey.

    Unknown names pass through lower-cased so the rejection message shows them.
    """
    os_name = system.lower()
    if os_name.startswith("linux"):
        os_name = "linux"
    os_name = _OS_ALIASES.get(os_name, os_name)
    arch = machine.lower()
    arch = _ARCH_ALIASES.get(arch, arch)
    return PlatformKey(os=os_name, arch=arch)


def detect_platform(system: str | None = None, machine: str | None = None) -> PlatformKey:
    """
    Detect and validate the host platform.

    Args:
        system: OS name override (defaults to ``sys.platform``)
        machine: Architecture override (defaults to ``platform.machine()``)

    Returns:
        Normalized PlatformKey belonging to SUPPORTED_PLATFORMS

    Raises:
        UnsupportedPlatformError: If the pair is not supported

    Example:
        >>> detect_platform("linux", "x86_64").key
        'linux-x64'
    """
    system = system if system is not None else sys.platform
    machine = machine if machine is not None else _platform.machine()

    key = normalize_platform(system, machine)
    if key.key not in SUPPORTED_PLATFORMS:
        raise UnsupportedPlatformError(
            f"Unsupported platform: {key.key}. Supported platforms: {', '.join(sorted(SUPPORTED_PLATFORMS))}",
            context={"system": system, "machine": machine},
        )

    logger.debug(f"Detected platform {key.key} (system={system}, machine={machine})")
    return key
