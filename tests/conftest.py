"""Shared fixtures: fake fluence trees, tarballs and artifact zips."""

import io
import tarfile
import zipfile
from pathlib import Path

import httpx
import pytest

OK_SCRIPT = "#!/bin/sh\necho fluence ok\nexit 0\n"
FAILING_SCRIPT = "#!/bin/sh\necho broken >&2\nexit 3\n"


def write_tool_tree(root: Path, script: str = OK_SCRIPT) -> Path:
    """Create ``root/fluence/bin/fluence`` as an executable shell script."""
    binary = root / "fluence" / "bin" / "fluence"
    binary.parent.mkdir(parents=True, exist_ok=True)
    binary.write_text(script)
    binary.chmod(0o755)
    return binary


def tarball_bytes(script: str = OK_SCRIPT) -> bytes:
    """In-memory ``.tar.gz`` holding ``fluence/bin/fluence``."""
    data = script.encode()
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for directory in ("fluence", "fluence/bin"):
            info = tarfile.TarInfo(directory)
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            tar.addfile(info)
        info = tarfile.TarInfo("fluence/bin/fluence")
        info.size = len(data)
        info.mode = 0o755
        tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def zip_bytes(members: dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in members.items():
            zf.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def tarball() -> bytes:
    return tarball_bytes()


@pytest.fixture
def artifact_zip(tarball) -> bytes:
    return zip_bytes({"fluence-linux-x64.tar.gz": tarball})


def mock_client(routes: dict[str, httpx.Response | bytes], requests: list | None = None) -> httpx.AsyncClient:
    """AsyncClient answering from a ``url -> response`` table, 404 otherwise.

    Query strings are ignored when matching.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        key = str(request.url).split("?", 1)[0]
        answer = routes.get(key)
        if answer is None:
            return httpx.Response(404, text="not found")
        if isinstance(answer, bytes):
            return httpx.Response(200, content=answer)
        return answer

    return httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)
