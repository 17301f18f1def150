"""Temporary directory helpers.

Each acquisition gets its own directory named after the specifier plus a
timestamp, so runs sharing a runner never collide.
"""

import logging
import re
import time
from pathlib import Path

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_MAX_PREFIX_LENGTH = 64


def safe_dir_prefix(prefix: str) -> str:
    """Make prefix usable as a single path component.

    Examples:
        >>> safe_dir_prefix("fluence-1.2.3")
        'fluence-1.2.3'
        >>> safe_dir_prefix("https://example.com/a/fluence.tar.gz")
        'https_example.com_a_fluence.tar.gz'
    """
    cleaned = _UNSAFE_CHARS.sub("_", prefix).strip("._")
    return cleaned[:_MAX_PREFIX_LENGTH] or "fluence"


def create_temp_dir(temp_root: Path, prefix: str) -> Path:
    """
    Create ``<temp_root>/<prefix>-<timestamp>``.

    Args:
        temp_root: Runner temp directory
        prefix: Specifier-derived prefix (sanitized here)

    Returns:
        Newly created, empty directory owned by the caller
    """
    base = safe_dir_prefix(prefix)
    temp_root.mkdir(parents=True, exist_ok=True)

    while True:
        candidate = temp_root / f"{base}-{time.time_ns() // 1_000}"
        try:
            candidate.mkdir()
        except FileExistsError:
            continue
        logger.debug(f"Created temp directory {candidate}")
        return candidate
