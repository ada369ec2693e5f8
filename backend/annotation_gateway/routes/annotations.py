"""
Annotation Gateway - Annotation Route Handlers
================================================

What:  The four endpoints used by the annotation front-end.

    GET  /api/images               image filenames, sorted
    GET  /api/annotated            annotated filenames (possibly empty)
    GET  /api/old_ocr/{json_file}  raw OCR JSON for one image
    POST /api/save-json            commit an annotation to New_ocr/

How:   Routes are thin. They validate filenames, call ContentGateway, and
       shape the response. Errors are raised as exceptions and formatted by
       the global handlers in main.py.

Filenames are interpolated into repository paths by the gateway without
sanitization, so this layer rejects anything that could address a different
directory.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response

from annotation_gateway.exceptions import ValidationError
from annotation_gateway.schemas.content import (
    ErrorResponse,
    SaveAnnotationRequest,
    SaveAnnotationResponse,
)
from annotation_gateway.services.gateway import ContentGateway, get_gateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Annotations"])

_FORBIDDEN_CHARS = ("/", "\\", "\x00")


def validate_filename(filename: str, field: str = "filename") -> str:
    """
    Reject filenames that are not a single path segment.

    Empty values are left to the gateway, which reports them as missing.
    """
    if filename in (".", "..") or any(ch in filename for ch in _FORBIDDEN_CHARS):
        raise ValidationError(
            message=f"Invalid filename '{filename}': must be a plain file name",
            field=field,
        )
    return filename


@router.get(
    "/images",
    response_model=List[str],
    responses={500: {"description": "Listing failed", "model": ErrorResponse}},
    summary="List source images",
)
async def list_images(gateway: ContentGateway = Depends(get_gateway)) -> List[str]:
    """Image files (.jpg, .jpeg, .png) under images/, sorted ascending."""
    return await gateway.list_images()


@router.get(
    "/annotated",
    response_model=List[str],
    summary="List annotated files",
    description="Files under New_ocr/ ending in _annotated.json. Always 200; empty when none exist.",
)
async def list_annotated(gateway: ContentGateway = Depends(get_gateway)) -> List[str]:
    return await gateway.list_annotated()


@router.get(
    "/old_ocr/{json_file}",
    response_class=Response,
    responses={
        200: {"description": "Original OCR JSON, passed through unmodified",
              "content": {"application/json": {}}},
        400: {"description": "Invalid filename", "model": ErrorResponse},
        404: {"description": "OCR file not found", "model": ErrorResponse},
    },
    summary="Read the original OCR output for an image",
)
async def get_old_ocr(
    json_file: str,
    gateway: ContentGateway = Depends(get_gateway),
) -> Response:
    """
    Serve Old_ocr/<json_file> as-is.

    The bytes are neither parsed nor validated; whatever JSON the OCR step
    produced is what the front-end receives.
    """
    validate_filename(json_file, field="json_file")
    content = await gateway.get_old_ocr(json_file)
    return Response(content=content, media_type="application/json")


@router.post(
    "/save-json",
    response_model=SaveAnnotationResponse,
    responses={
        400: {"description": "Missing filename or data", "model": ErrorResponse},
        500: {"description": "Repository write failed", "model": ErrorResponse},
    },
    summary="Save an annotation to New_ocr/",
)
async def save_json(
    body: SaveAnnotationRequest,
    gateway: ContentGateway = Depends(get_gateway),
) -> SaveAnnotationResponse:
    """
    Create or update New_ocr/<filename> with `data` as one commit.

    Error responses (handled by global exception handlers):
        HTTP 400: filename or data missing, or filename unsafe
        HTTP 500: GitHub rejected the write or was unreachable
    """
    if body.filename:
        validate_filename(body.filename)

    logger.info("Received save request: filename=%s", body.filename)
    await gateway.save_annotation(body.filename, body.data)
    return SaveAnnotationResponse(success=True)
