"""Artifact store backed by the GitHub Actions artifacts REST API.

Artifacts are looked up in the current workflow run by name, or directly by
numeric id, and downloaded as the zip archive GitHub serves for them.
"""

import logging
from pathlib import Path

import httpx

from .download import download_file
from .exceptions import ArtifactDownloadError
from .exceptions import ArtifactNotFoundError
from .utils import safe_dir_prefix

logger = logging.getLogger(__name__)

API_VERSION = "2022-11-28"


class GitHubArtifactClient:
    """
    Fetch workflow artifacts through the GitHub REST API.

    Example:
        >>> client = GitHubArtifactClient(
        ...     http=http,
        ...     token=os.environ["GITHUB_TOKEN"],
        ...     repository="fluencelabs/cli",
        ...     run_id="123456",
        ... )
        >>> download_dir = await client.download_artifact("fluence-cli", Path("/tmp/x"))
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        token: str | None,
        repository: str | None,
        run_id: str | None,
        api_url: str = "https://api.github.com",
    ):
        self.http = http
        self.token = token
        self.repository = repository
        self.run_id = run_id
        self.api_url = api_url.rstrip("/")

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _require_context(self) -> None:
        missing = [
            name
            for name, value in (("GITHUB_TOKEN", self.token), ("GITHUB_REPOSITORY", self.repository))
            if not value
        ]
        if missing:
            raise ArtifactDownloadError(
                f"Cannot query the artifact store, missing environment: {', '.join(missing)}",
                context={"missing": missing},
            )

    async def _get_json(self, url: str, params: dict | None = None) -> dict:
        """GET an API object.

        Raises:
            httpx.HTTPStatusError: On a non-success status
            ArtifactDownloadError: If the body is not a JSON object
        """
        response = await self.http.get(url, params=params, headers=self._headers())
        response.raise_for_status()
        try:
            data = response.json()
        except ValueError as e:
            raise ArtifactDownloadError(
                f"Artifact store returned a non-JSON response from {url} "
                f"(content-type: {response.headers.get('content-type', 'unknown')})",
                context={"url": url},
            ) from e
        if not isinstance(data, dict):
            raise ArtifactDownloadError(
                f"Artifact store returned {type(data).__name__} from {url}, expected an object",
                context={"url": url},
            )
        return data

    async def find_artifact(self, name: str) -> dict:
        """
        Look up artifact metadata by numeric id or by name in the current run.

        Args:
            name: Artifact name or id

        Returns:
            Artifact object as returned by the API

        Raises:
            ArtifactNotFoundError: If no unexpired artifact matches
        """
        self._require_context()
        repo_url = f"{self.api_url}/repos/{self.repository}/actions"

        if name.isdigit():
            try:
                artifact = await self._get_json(f"{repo_url}/artifacts/{name}")
            except httpx.HTTPStatusError as e:
                if e.response.status_code == 404:
                    raise ArtifactNotFoundError(
                        f"Artifact with id {name} not found in {self.repository}",
                        context={"artifact": name},
                    ) from e
                raise
            artifacts = [artifact]
        else:
            url = f"{repo_url}/runs/{self.run_id}/artifacts" if self.run_id else f"{repo_url}/artifacts"
            data = await self._get_json(url, params={"name": name})
            artifacts = data.get("artifacts", [])
            if not isinstance(artifacts, list):
                raise ArtifactDownloadError(
                    f"Artifact store listing at {url} has no 'artifacts' array",
                    context={"url": url},
                )

        live = [a for a in artifacts if isinstance(a, dict) and not a.get("expired", False)]
        if not live:
            scope = f"run {self.run_id}" if self.run_id else self.repository
            raise ArtifactNotFoundError(
                f"Artifact '{name}' not found in {scope}",
                context={"artifact": name, "repository": self.repository, "run_id": self.run_id},
            )

        artifact = live[0]
        logger.debug(f"Found artifact '{name}' (id={artifact.get('id')}, size={artifact.get('size_in_bytes')})")
        return artifact

    async def download_artifact(self, name: str, target_dir: Path) -> Path:
        """Download artifact zip into ``target_dir/artifact``.

        Returns:
            Directory containing ``<artifact name>.zip``
        """
        artifact = await self.find_artifact(name)
        archive_url = artifact.get("archive_download_url")
        if not isinstance(archive_url, str) or not archive_url:
            raise ArtifactDownloadError(
                f"Artifact '{name}' metadata has no archive_download_url",
                context={"artifact": name, "id": artifact.get("id")},
            )

        download_dir = target_dir / "artifact"
        download_dir.mkdir(parents=True, exist_ok=True)

        zip_path = download_dir / f"{safe_dir_prefix(artifact.get('name', name))}.zip"
        await download_file(self.http, archive_url, zip_path, headers=self._headers())
        return download_dir
