"""
Annotation Gateway - GitHub Contents API Client
=================================================

What:  Concrete ContentClient backed by GitHub's repository contents API.
How:   One shared httpx.AsyncClient (connection pool) issues GET/PUT requests
       against /repos/{owner}/{repo}/contents/{path}; responses are mapped
       onto RemoteEntry/RemoteFile models and typed exceptions.
Who:   Created by the application lifespan; called by ContentGateway.

Error mapping:
    404                      → NotFoundError
    other non-2xx            → RemoteAPIError(status_code, remote `message`)
    httpx.HTTPError          → RemoteAPIError(status_code=None)
    2xx, body not JSON or    → UnexpectedResponseError
    not the expected shape
    token/repo not set       → ConfigurationError (no request is sent)

No retries: a failed call is reported to the caller as-is.
"""

import logging
import time
import uuid
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError as SchemaError

from annotation_gateway.config import Settings
from annotation_gateway.exceptions import (
    ConfigurationError,
    NotFoundError,
    RemoteAPIError,
    UnexpectedResponseError,
)
from annotation_gateway.schemas.content import RemoteEntry, RemoteFile
from annotation_gateway.services.content_base import ContentClient

logger = logging.getLogger(__name__)


class GitHubContentClient(ContentClient):
    """
    GitHub implementation of the content capability.

    Args:
        settings:    Explicit configuration (token, repo, API URL, timeout).
        http_client: Optional pre-built httpx.AsyncClient. Tests pass one with
                     an httpx.MockTransport; in production the client builds
                     its own and owns its lifecycle (closed by aclose()).
    """

    ACCEPT = "application/vnd.github.v3+json"

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=settings.github_timeout,
            follow_redirects=True,  # renamed or transferred repositories answer 301
        )

        logger.info(
            "GitHubContentClient initialized for repo=%s, api=%s, timeout=%.1fs",
            settings.github_repo or "<unset>",
            settings.github_api_url,
            settings.github_timeout,
        )

    # ── Request plumbing ──────────────────────────────────────────────────

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"token {self.settings.github_token}",
            "Accept": self.ACCEPT,
            "User-Agent": self.settings.github_user_agent,
        }

    def _contents_url(self, path: str) -> str:
        # Percent-encode each segment but keep "/" as the separator
        return f"{self.settings.repo_api_url}/contents/{quote(path.strip('/'), safe='/')}"

    async def _request(
        self,
        method: str,
        url: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Issue one request and return the decoded JSON body.

        Raises the typed exceptions listed in the module docstring. `path` is
        the repository path, used only for messages and log lines.
        """
        if not self.settings.is_configured:
            raise ConfigurationError(context={"path": path})

        call_id = str(uuid.uuid4())[:8]
        start_time = time.perf_counter()
        headers = self._headers()
        if payload is not None:
            headers["Content-Type"] = "application/json"

        try:
            response = await self._http.request(method, url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.warning(
                "[%s] GitHub %s %s failed after %.0fms: %s",
                call_id, method, path, duration_ms, repr(e),
            )
            raise RemoteAPIError(
                message="Could not reach the repository API",
                context={"path": path, "error_type": type(e).__name__},
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            "[%s] GitHub %s %s -> %d in %.0fms",
            call_id, method, path, response.status_code, duration_ms,
        )

        if response.status_code == 404:
            raise NotFoundError(
                resource="path",
                resource_id=path,
                reason=self._remote_message(response) or "Not Found",
            )

        if not response.is_success:
            remote_message = self._remote_message(response)
            logger.warning(
                "[%s] GitHub %s %s rejected with %d: %s",
                call_id, method, path, response.status_code, remote_message,
            )
            raise RemoteAPIError(
                message=f"Repository API returned {response.status_code} for '{path}'",
                status_code=response.status_code,
                remote_message=remote_message,
                context={"path": path},
            )

        try:
            return response.json()
        except ValueError as e:
            raise UnexpectedResponseError(
                message=f"Repository API returned a non-JSON body for '{path}'",
                context={"path": path, "status_code": response.status_code},
            ) from e

    @staticmethod
    def _remote_message(response: httpx.Response) -> Optional[str]:
        """Pull GitHub's `message` field out of an error body, if there is one."""
        try:
            body = response.json()
        except ValueError:
            return response.reason_phrase or None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return response.reason_phrase or None

    # ── ContentClient operations ──────────────────────────────────────────

    async def list_directory(self, path: str) -> List[RemoteEntry]:
        body = await self._request("GET", self._contents_url(path), path)
        if not isinstance(body, list):
            raise UnexpectedResponseError(
                message=f"'{path}' is not a directory",
                context={"path": path, "type": body.get("type") if isinstance(body, dict) else None},
            )
        try:
            return [RemoteEntry.model_validate(entry) for entry in body if isinstance(entry, dict)]
        except SchemaError as e:
            raise UnexpectedResponseError(
                message=f"Malformed directory listing for '{path}'",
                context={"path": path},
            ) from e

    async def get_file(self, path: str) -> RemoteFile:
        body = await self._request("GET", self._contents_url(path), path)
        if not isinstance(body, dict):
            raise UnexpectedResponseError(
                message=f"'{path}' is a directory, not a file",
                context={"path": path},
            )
        try:
            return RemoteFile.model_validate(body)
        except SchemaError as e:
            raise UnexpectedResponseError(
                message=f"Malformed file descriptor for '{path}'",
                context={"path": path},
            ) from e

    async def put_file(
        self,
        path: str,
        message: str,
        content: str,
        sha: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"message": message, "content": content}
        if sha:
            payload["sha"] = sha

        logger.info("Writing %s (%s)", path, "update" if sha else "create")
        body = await self._request("PUT", self._contents_url(path), path, payload=payload)
        if not isinstance(body, dict):
            raise UnexpectedResponseError(
                message=f"Repository API returned an unexpected write result for '{path}'",
                context={"path": path},
            )
        return body

    async def health_check(self) -> bool:
        """
        Check if the repository is reachable.

        How:     GET /repos/{owner}/{repo}; any 2xx means token and repo are good.
        Returns: True if reachable and authorized, False otherwise (never raises).
        """
        if not self.settings.is_configured:
            return False
        try:
            response = await self._http.get(self.settings.repo_api_url, headers=self._headers())
        except httpx.HTTPError as e:
            logger.warning("GitHub health check failed: %s", repr(e))
            return False
        if response.is_success:
            return True
        logger.warning("GitHub health check returned %d", response.status_code)
        return False

    async def aclose(self) -> None:
        """Close the connection pool if this client created it."""
        if self._owns_client:
            await self._http.aclose()
