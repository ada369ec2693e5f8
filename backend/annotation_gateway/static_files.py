"""
Annotation Gateway - Front-End Static Files
=============================================

What:  StaticFiles mount for the annotation front-end that never serves
       hidden files or directories.
How:   Any path segment starting with "." (".env", ".git/config", ...)
       answers 404 before the filesystem is touched.
Who:   Mounted at "/" by create_app() when STATIC_DIR exists.

STATIC_DIR defaults to the working directory, which is also where
Settings reads .env from.
"""

import logging
import os

from starlette.exceptions import HTTPException
from starlette.responses import Response
from starlette.staticfiles import StaticFiles
from starlette.types import Scope

logger = logging.getLogger(__name__)


def is_hidden_path(path: str) -> bool:
    """True if any segment of a relative path names a dotfile or dot-directory."""
    segments = path.replace("\\", "/").split("/")
    return any(seg.startswith(".") and seg != "." for seg in segments)


class FrontendStaticFiles(StaticFiles):
    """StaticFiles that refuses dotfiles, like Express's serve-static default."""

    async def get_response(self, path: str, scope: Scope) -> Response:
        if is_hidden_path(path.replace(os.sep, "/")):
            logger.warning("Refused hidden static path: %s", path)
            raise HTTPException(status_code=404)
        return await super().get_response(path, scope)
