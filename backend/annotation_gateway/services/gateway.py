"""
Annotation Gateway - Repository Content Gateway (Business Logic)
==================================================================

What:  The four operations behind the HTTP API: list images, list annotated
       files, read an old OCR result, save an annotation.
How:   Each operation shapes one or two ContentClient calls against a
       virtual filesystem layered on the repository tree:

           images/     source images (read-only for us)
           Old_ocr/    original OCR output, <name>.json (read-only for us)
           New_ocr/    reviewed annotations, <name>_annotated.json (we write)

Who:   Called by route handlers via the get_gateway dependency.

Write protocol (save_annotation):
    ┌──────────────┐    ┌────────────────────┐    ┌─────────────────────┐
    │ serialize +  │───▶│ GET New_ocr/<f>    │───▶│ PUT New_ocr/<f>     │
    │ base64       │    │ (discover sha)     │    │ {message, content,  │
    └──────────────┘    │ 404 → new file     │    │  sha if found}      │
                        └────────────────────┘    └─────────────────────┘

    State of one filename: ABSENT → PRESENT(sha=S1) → PRESENT(sha=S2) → ...
    The GET and PUT are not atomic: two writers racing on the same filename
    either both succeed (last writer wins) or one fails on a stale sha.

ContentGateway is stateless apart from its client, so one instance serves
every request.
"""

import base64
import binascii
import json
import logging
from typing import Any, List

from fastapi import Request

from annotation_gateway.exceptions import (
    AnnotationGatewayError,
    NotFoundError,
    RemoteAPIError,
    UnexpectedResponseError,
    ValidationError,
)
from annotation_gateway.services.content_base import ContentClient

logger = logging.getLogger(__name__)

IMAGES_DIR = "images"
OLD_OCR_DIR = "Old_ocr"
NEW_OCR_DIR = "New_ocr"

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png")
ANNOTATION_SUFFIX = "_annotated.json"


def encode_annotation(data: Any) -> str:
    """Serialize an annotation as 2-space indented JSON and base64 it."""
    text = json.dumps(data, indent=2, ensure_ascii=False)
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


class ContentGateway:
    """
    Business logic layer for the annotation workflow.

    Error Handling Strategy:
        list_images      any failure → RemoteAPIError (500), no partial result
        list_annotated   any failure → [] (logged; never an error response)
        get_old_ocr      any failure → NotFoundError (404) with the reason
        save_annotation  missing input → ValidationError (400);
                         sha lookup failures are absorbed;
                         write failures propagate
    """

    def __init__(self, client: ContentClient):
        self.client = client

    async def list_images(self) -> List[str]:
        """
        List image filenames under images/, sorted ascending.

        Raises:
            RemoteAPIError: The listing could not be retrieved.
        """
        try:
            entries = await self.client.list_directory(IMAGES_DIR)
        except AnnotationGatewayError as e:
            logger.error("Error fetching images: %s", e.message)
            raise RemoteAPIError(
                message="Failed to list images from the repository",
                context={"path": IMAGES_DIR, "reason": e.message},
            ) from e

        names = [entry.name for entry in entries if entry.name.lower().endswith(IMAGE_EXTENSIONS)]
        return sorted(names)

    async def list_annotated(self) -> List[str]:
        """
        List annotation filenames under New_ocr/, in listing order.

        A missing New_ocr/ directory means nothing has been annotated yet, so
        it yields an empty list. Other failures are logged and also yield [].
        """
        try:
            entries = await self.client.list_directory(NEW_OCR_DIR)
        except NotFoundError:
            logger.debug("%s/ does not exist yet; no annotations", NEW_OCR_DIR)
            return []
        except AnnotationGatewayError as e:
            logger.warning("Error fetching annotated files, returning none: %s", e.message)
            return []

        return [entry.name for entry in entries if entry.name.lower().endswith(ANNOTATION_SUFFIX)]

    async def get_old_ocr(self, filename: str) -> bytes:
        """
        Return the raw bytes of Old_ocr/<filename>, unparsed.

        `filename` is interpolated as-is; callers validate it first.

        Raises:
            NotFoundError: The file is missing, is not a file, has no inline
                content, or could not be fetched. The reason is included.
        """
        path = f"{OLD_OCR_DIR}/{filename}"
        try:
            remote = await self.client.get_file(path)
        except AnnotationGatewayError as e:
            reason = e.reason if isinstance(e, NotFoundError) else e.message
            logger.info("OCR file %s unavailable: %s", path, reason)
            raise NotFoundError(resource="OCR file", resource_id=filename, reason=reason) from e

        if not remote.has_content:
            raise NotFoundError(
                resource="OCR file",
                resource_id=filename,
                reason="no retrievable content",
            )

        try:
            return base64.b64decode(remote.content)
        except (binascii.Error, ValueError) as e:
            raise NotFoundError(
                resource="OCR file",
                resource_id=filename,
                reason="content is not valid base64",
            ) from e

    async def save_annotation(self, filename: Any, data: Any) -> None:
        """
        Commit `data` as New_ocr/<filename>, creating or updating the file.

        Steps:
            1. Validate inputs (no remote call on failure)
            2. Serialize with 2-space indentation, base64 encode
            3. Look up the current sha; absence means a new file
            4. PUT with "Add annotation: <filename>" and the sha if found
            5. Require `content` or `commit` in the response

        Raises:
            ValidationError: filename or data missing.
            RemoteAPIError: The write was rejected or the API was unreachable.
            UnexpectedResponseError: The write response lacked both markers.
        """
        if not isinstance(filename, str) or not filename:
            raise ValidationError(message="Missing filename or data", field="filename")
        if data is None:
            raise ValidationError(message="Missing filename or data", field="data")

        content = encode_annotation(data)
        path = f"{NEW_OCR_DIR}/{filename}"

        sha = None
        try:
            existing = await self.client.get_file(path)
            sha = existing.sha
        except NotFoundError:
            logger.debug("%s does not exist yet; creating", path)
        except AnnotationGatewayError as e:
            # Proceed without a sha; the remote rejects the write if one was required
            logger.warning("Could not look up current sha for %s: %s", path, e.message)

        result = await self.client.put_file(
            path,
            message=f"Add annotation: {filename}",
            content=content,
            sha=sha,
        )

        if not (result.get("content") or result.get("commit")):
            logger.error("Unexpected write response for %s: keys=%s", path, sorted(result))
            raise UnexpectedResponseError(
                message="Failed to save file to the repository",
                context={"path": path},
            )

        logger.info("Saved annotation %s (%s)", path, "updated" if sha else "created")


def get_gateway(request: Request) -> ContentGateway:
    """FastAPI dependency returning the gateway built during app startup."""
    return request.app.state.gateway
