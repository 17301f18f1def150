"""Archive handling for downloaded packages.

Artifact stores wrap the real payload in a zip: the zip holds exactly one
``*.tar.gz`` which holds the ``fluence/`` tree. Direct URLs and release
channels serve the ``*.tar.gz`` itself.
"""

import logging
import tarfile
import zipfile
from pathlib import Path

from .exceptions import NoArchiveFoundError

logger = logging.getLogger(__name__)

TAR_GZ_SUFFIX = ".tar.gz"


def is_zip(path: Path) -> bool:
    return zipfile.is_zipfile(path)


def is_tar_gz(path: Path) -> bool:
    if path.name.endswith(TAR_GZ_SUFFIX) or path.suffix == ".tgz":
        return True
    try:
        with tarfile.open(path, "r:gz"):
            return True
    except (tarfile.TarError, OSError):
        return False


def extract_tar_gz(archive_path: Path, destination: Path) -> Path:
    """Extract a tar+gzip archive into destination.

    Members escaping destination (absolute paths, ``..``, unsafe links) are rejected.

    Raises:
        tarfile.TarError: If the archive is corrupt or has unsafe members
    """
    destination.mkdir(parents=True, exist_ok=True)
    logger.debug(f"Extracting {archive_path} into {destination}")
    with tarfile.open(archive_path, "r:gz") as tar:
        tar.extractall(destination, filter="data")
    return destination


def extract_zip(archive_path: Path, destination: Path) -> Path:
    """Extract a zip archive into destination.

    Raises:
        zipfile.BadZipFile: If the archive is corrupt
    """
    destination.mkdir(parents=True, exist_ok=True)
    logger.debug(f"Unzipping {archive_path} into {destination}")
    with zipfile.ZipFile(archive_path) as zf:
        zf.extractall(destination)
    return destination


def find_single_tar_gz(directory: Path) -> Path:
    """
    Locate the single ``*.tar.gz`` inside an unzipped artifact.

    Args:
        directory: Unzip output directory (searched recursively)

    Returns:
        Path to the tarball

    Raises:
        NoArchiveFoundError: If there is no tarball, or more than one
    """
    candidates = sorted(p for p in directory.rglob(f"*{TAR_GZ_SUFFIX}") if p.is_file())

    if not candidates:
        raise NoArchiveFoundError(
            f"No .tar.gz file found inside the zip archive (searched {directory})",
            context={"directory": str(directory)},
        )
    if len(candidates) > 1:
        names = ", ".join(str(p.relative_to(directory)) for p in candidates)
        raise NoArchiveFoundError(
            f"Expected exactly one .tar.gz file inside the zip archive, found {len(candidates)}: {names}",
            context={"directory": str(directory), "candidates": [str(p) for p in candidates]},
        )
    return candidates[0]


def find_zip(directory: Path) -> Path:
    """Locate the zip payload in an artifact-store download directory.

    Raises:
        NoArchiveFoundError: If the directory holds no zip archive
    """
    for item in sorted(directory.iterdir()):
        if item.is_file() and item.name.endswith(".zip"):
            return item

    raise NoArchiveFoundError(
        f"No zip archive found in the downloaded artifact at {directory}",
        context={"directory": str(directory)},
    )


def unpack_payload(payload: Path, destination: Path) -> Path:
    """
    Unpack a downloaded payload into destination.

    Zip payloads are unzipped into ``destination/extracted`` and their single
    inner tarball is extracted into destination. Tarballs are extracted directly.

    Args:
        payload: Downloaded zip or tar.gz file
        destination: Directory that receives the ``fluence/`` tree

    Returns:
        destination

    Raises:
        NoArchiveFoundError: If the payload is neither zip nor tar.gz, or the zip
            does not hold exactly one tarball
    """
    if is_zip(payload):
        unzip_dir = extract_zip(payload, destination / "extracted")
        tarball = find_single_tar_gz(unzip_dir)
        return extract_tar_gz(tarball, destination)

    if is_tar_gz(payload):
        return extract_tar_gz(payload, destination)

    raise NoArchiveFoundError(
        f"Downloaded file {payload.name} is neither a zip nor a .tar.gz archive",
        context={"payload": str(payload)},
    )
