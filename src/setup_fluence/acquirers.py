"""Acquirers - Turn a classified specifier into an unpacked fluence tree.

Three independent strategies share one contract: return a freshly created
temp directory holding ``fluence/bin/fluence``.

- ArtifactAcquirer: artifact store or direct URL (zip wrapping a tar.gz, or a tar.gz)
- ChannelAcquirer: fixed per-channel tarball URL
- ReleaseAcquirer: version index JSON -> tarball URL

Archive decoding runs in a worker thread so the event loop only ever waits
on one step at a time.
"""

import asyncio
import logging
from pathlib import Path

import httpx
from pydantic import ValidationError

from .archive import extract_tar_gz
from .archive import find_zip
from .archive import unpack_payload
from .download import auth_headers_for
from .download import download_file
from .download import url_filename
from .exceptions import ArtifactDownloadError
from .exceptions import ChannelDownloadFailedError
from .exceptions import FluenceSetupError
from .exceptions import ReleaseDownloadError
from .protocols import ArtifactClientProtocol
from .schema import ArtifactSource
from .schema import ChannelSpecifier
from .schema import PlatformKey
from .schema import SemVerSpecifier
from .schema import UrlSpecifier
from .schema import VersionIndex
from .utils import create_temp_dir

logger = logging.getLogger(__name__)

DEFAULT_BUCKET_URL = "https://fcli-binaries.s3.eu-west-1.amazonaws.com"


def channel_tarball_url(bucket_url: str, channel: str, platform: PlatformKey) -> str:
    return f"{bucket_url.rstrip('/')}/channels/{channel}/fluence-{platform.key}.tar.gz"


def version_index_url(bucket_url: str, platform: PlatformKey) -> str:
    return f"{bucket_url.rstrip('/')}/versions/fluence-{platform.key}-tar-gz.json"


class ArtifactAcquirer:
    """
    Acquire a prebuilt package from the artifact store or a direct URL.

    Process:
    1. Create temp dir named after the specifier
    2. URL: stream-download the file; artifact: let the store download its zip
    3. Unzip (if zip), locate the single inner tar.gz, extract into the temp dir
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        temp_root: Path,
        artifact_client: ArtifactClientProtocol | None = None,
        github_token: str | None = None,
    ):
        self.http = http
        self.temp_root = temp_root
        self.artifact_client = artifact_client
        self.github_token = github_token

    async def acquire(self, specifier: ArtifactSource) -> Path:
        """
        Download and unpack an artifact.

        Args:
            specifier: UrlSpecifier or ArtifactSpecifier

        Returns:
            Temp directory containing the unpacked tree

        Raises:
            NoArchiveFoundError: If the zip or inner tar.gz is missing
            ArtifactNotFoundError: If the store has no such artifact
            ArtifactDownloadError: On any other transport or decode failure (cause attached)
        """
        temp_dir: Path | None = None
        try:
            temp_dir = create_temp_dir(self.temp_root, specifier.label)
            if isinstance(specifier, UrlSpecifier):
                payload = temp_dir / url_filename(specifier.url)
                headers = auth_headers_for(specifier.url, self.github_token)
                await download_file(self.http, specifier.url, payload, headers=headers)
            else:
                if self.artifact_client is None:
                    raise ArtifactDownloadError(
                        f"No artifact store configured, cannot fetch artifact '{specifier.name}'",
                        context={"artifact": specifier.name},
                    )
                download_dir = await self.artifact_client.download_artifact(specifier.name, temp_dir)
                payload = find_zip(download_dir)

            await asyncio.to_thread(unpack_payload, payload, temp_dir)

        except Exception as e:
            if isinstance(e, FluenceSetupError):
                raise
            raise ArtifactDownloadError(
                f"An error occurred while processing the artifact '{specifier.label}': {e}",
                context={"artifact": specifier.label, "temp_dir": str(temp_dir) if temp_dir else None},
            ) from e

        logger.debug(f"Artifact '{specifier.label}' unpacked into {temp_dir}")
        return temp_dir


class ChannelAcquirer:
    """Acquire the current tarball of a release channel. No JSON indirection."""

    def __init__(self, http: httpx.AsyncClient, temp_root: Path, platform: PlatformKey, bucket_url: str):
        self.http = http
        self.temp_root = temp_root
        self.platform = platform
        self.bucket_url = bucket_url

    async def acquire(self, specifier: ChannelSpecifier) -> Path:
        """
        Download and unpack ``<bucket>/channels/<channel>/fluence-<platform>.tar.gz``.

        Raises:
            ChannelDownloadFailedError: On non-success status or decode failure
        """
        channel = specifier.name
        tar_url = channel_tarball_url(self.bucket_url, channel, self.platform)
        logger.info(f"Downloading fcli from channel {channel}")
        try:
            temp_dir = create_temp_dir(self.temp_root, f"fluence-{channel}")
            tar_path = temp_dir / url_filename(tar_url)
            await download_file(self.http, tar_url, tar_path)
            await asyncio.to_thread(extract_tar_gz, tar_path, temp_dir)
        except Exception as e:
            if isinstance(e, FluenceSetupError):
                raise
            raise ChannelDownloadFailedError(
                f"Failed to download channel '{channel}' from {tar_url}: {e}",
                context={"channel": channel, "url": tar_url},
            ) from e

        return temp_dir


class ReleaseAcquirer:
    """
    Acquire a released version through the per-platform version index.

    The index fetch and the tarball fetch are independent requests; failures
    name the stage they happened in.
    """

    def __init__(self, http: httpx.AsyncClient, temp_root: Path, platform: PlatformKey, bucket_url: str):
        self.http = http
        self.temp_root = temp_root
        self.platform = platform
        self.bucket_url = bucket_url

    async def fetch_index(self) -> VersionIndex:
        """Fetch and parse the version index.

        Raises:
            ReleaseDownloadError: If the index cannot be fetched or is not a version -> URL object
        """
        index_url = version_index_url(self.bucket_url, self.platform)
        logger.debug(f"Fetching version index {index_url}")
        try:
            response = await self.http.get(index_url)
            response.raise_for_status()
            return VersionIndex.model_validate_json(response.content)
        except (httpx.HTTPError, ValidationError) as e:
            raise ReleaseDownloadError(
                f"Failed to fetch version index {index_url}: {e}",
                context={"stage": "index", "url": index_url},
            ) from e

    async def acquire(self, specifier: SemVerSpecifier) -> Path:
        """
        Resolve version through the index, then download and unpack its tarball.

        Raises:
            ReleaseDownloadError: If the index or tarball stage fails
            VersionNotFoundError: If the version is absent (message lists available versions)
        """
        version = specifier.version
        index = await self.fetch_index()
        tar_url = index.resolve(version)

        logger.info(f"Downloading fcli version {version}")
        try:
            temp_dir = create_temp_dir(self.temp_root, f"fluence-{version}")
            tar_path = temp_dir / url_filename(tar_url)
            await download_file(self.http, tar_url, tar_path)
            await asyncio.to_thread(extract_tar_gz, tar_path, temp_dir)
        except Exception as e:
            if isinstance(e, FluenceSetupError):
                raise
            raise ReleaseDownloadError(
                f"Failed to download release tarball for version {version} from {tar_url}: {e}",
                context={"stage": "tarball", "version": version, "url": tar_url},
            ) from e

        return temp_dir
