"""
In-memory ContentClient used by the test suite in place of GitHub.
"""

import base64
import hashlib
from typing import Any, Dict, List, Optional, Tuple

from annotation_gateway.exceptions import NotFoundError, RemoteAPIError, UnexpectedResponseError
from annotation_gateway.schemas.content import RemoteEntry, RemoteFile
from annotation_gateway.services.content_base import ContentClient


def blob_sha(data: bytes) -> str:
    """Git blob hash, the same value GitHub reports as a file's sha."""
    return hashlib.sha1(b"blob %d\0" % len(data) + data).hexdigest()


class InMemoryContentClient(ContentClient):
    """
    Dict-backed stand-in for the GitHub contents API.

    Mirrors the parts of GitHub's behavior the gateway depends on:
        - directories exist only while they contain a file
        - a write to an existing path without a sha → 422
        - a write with a stale sha → 409
        - a write with a sha to a missing path → 422

    Every call is appended to `calls` as (method, path, kwargs) so tests can
    assert on call counts and on the exact write payloads.

    `fail_with` maps a method name to an exception raised on the next calls
    to that method (until removed).
    """

    def __init__(self, files: Optional[Dict[str, bytes]] = None):
        self.files: Dict[str, Tuple[bytes, str]] = {}
        for path, data in (files or {}).items():
            self.files[path] = (data, blob_sha(data))
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []
        self.fail_with: Dict[str, Exception] = {}
        self.healthy = True

    def _maybe_fail(self, method: str) -> None:
        if method in self.fail_with:
            raise self.fail_with[method]

    def calls_to(self, method: str) -> List[Tuple[str, str, Dict[str, Any]]]:
        return [call for call in self.calls if call[0] == method]

    async def list_directory(self, path: str) -> List[RemoteEntry]:
        self.calls.append(("list_directory", path, {}))
        self._maybe_fail("list_directory")
        prefix = path.rstrip("/") + "/"
        if path in self.files:
            raise UnexpectedResponseError(message=f"'{path}' is not a directory")
        entries = []
        seen = set()
        for file_path, (data, sha) in self.files.items():
            if not file_path.startswith(prefix):
                continue
            rest = file_path[len(prefix):]
            name, _, below = rest.partition("/")
            if name in seen:
                continue
            seen.add(name)
            entries.append(RemoteEntry(
                name=name,
                path=prefix + name,
                sha=None if below else sha,
                type="dir" if below else "file",
                size=None if below else len(data),
            ))
        if not entries:
            raise NotFoundError(resource="path", resource_id=path, reason="Not Found")
        return entries

    async def get_file(self, path: str) -> RemoteFile:
        self.calls.append(("get_file", path, {}))
        self._maybe_fail("get_file")
        if path not in self.files:
            if any(p.startswith(path.rstrip("/") + "/") for p in self.files):
                raise UnexpectedResponseError(message=f"'{path}' is a directory, not a file")
            raise NotFoundError(resource="path", resource_id=path, reason="Not Found")
        data, sha = self.files[path]
        return RemoteFile(
            name=path.rsplit("/", 1)[-1],
            path=path,
            sha=sha,
            content=base64.encodebytes(data).decode("ascii"),
            encoding="base64",
            type="file",
            size=len(data),
        )

    async def put_file(
        self,
        path: str,
        message: str,
        content: str,
        sha: Optional[str] = None,
    ) -> Dict[str, Any]:
        self.calls.append(("put_file", path, {"message": message, "content": content, "sha": sha}))
        self._maybe_fail("put_file")
        current = self.files.get(path)
        if current is not None and sha is None:
            raise RemoteAPIError(
                message=f"Repository API returned 422 for '{path}'",
                status_code=422,
                remote_message='Invalid request.\n\n"sha" wasn\'t supplied.',
            )
        if current is not None and sha != current[1]:
            raise RemoteAPIError(
                message=f"Repository API returned 409 for '{path}'",
                status_code=409,
                remote_message=f"{path} does not match {sha}",
            )
        if current is None and sha is not None:
            raise RemoteAPIError(
                message=f"Repository API returned 422 for '{path}'",
                status_code=422,
                remote_message="sha does not match any file",
            )
        data = base64.b64decode(content)
        new_sha = blob_sha(data)
        self.files[path] = (data, new_sha)
        return {
            "content": {"name": path.rsplit("/", 1)[-1], "path": path, "sha": new_sha},
            "commit": {"sha": hashlib.sha1(message.encode() + data).hexdigest(), "message": message},
        }

    async def health_check(self) -> bool:
        return self.healthy

