"""
Annotation Gateway - Abstract Content Client Interface
========================================================

What:  Abstract base class for the remote content-hosting API.
How:   Concrete implementations inherit from ContentClient and implement the
       three content operations plus a health probe.
Who:   Called by ContentGateway; implemented by GitHubContentClient and by
       the in-memory fake used in the test suite.

The three operations map one-to-one onto the contents API:

    list_directory(path)   GET  /repos/{repo}/contents/{path}  → array
    get_file(path)         GET  /repos/{repo}/contents/{path}  → object
    put_file(path, ...)    PUT  /repos/{repo}/contents/{path}  → {content, commit}
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from annotation_gateway.schemas.content import RemoteEntry, RemoteFile


class ContentClient(ABC):
    """
    Abstract interface for reading and writing files in a remote repository.

    Contract:
        - Paths are repository-relative ("New_ocr/page_1_annotated.json")
          and are passed through unsanitized
        - A missing object raises NotFoundError, never a generic error
        - Any other failure raises RemoteAPIError (or a subclass)
        - A success-shaped body of the wrong shape raises UnexpectedResponseError
        - Implementations do not retry
    """

    @abstractmethod
    async def list_directory(self, path: str) -> List[RemoteEntry]:
        """
        List the entries of a directory.

        Raises:
            NotFoundError: The directory does not exist.
            UnexpectedResponseError: The path exists but is not a directory.
            RemoteAPIError: Any other failure.
        """
        ...

    @abstractmethod
    async def get_file(self, path: str) -> RemoteFile:
        """
        Fetch a single file including its base64 content and current sha.

        Raises:
            NotFoundError: The file does not exist.
            UnexpectedResponseError: The path is a directory.
            RemoteAPIError: Any other failure.
        """
        ...

    @abstractmethod
    async def put_file(
        self,
        path: str,
        message: str,
        content: str,
        sha: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create or update a file as a single commit.

        Args:
            path:    Repository-relative file path.
            message: Commit message.
            content: Base64-encoded file content.
            sha:     Current sha of the file. Must be given if and only if
                     the file already exists; omitted from the request
                     entirely when None.

        Returns:
            The decoded response body. On success it carries `content`
            and/or `commit` descriptors; callers decide what counts as success.

        Raises:
            RemoteAPIError: The write was rejected (stale or missing sha,
                permissions, validation) or the API was unreachable.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Return True if the repository is reachable with the configured credentials."""
        ...

    async def aclose(self) -> None:
        """Release any held connections. Default: nothing to release."""
        return None
