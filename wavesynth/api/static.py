"""
Static Files
============

StaticFiles variant that can answer unknown paths with a fallback file,
for single-page front-ends that route on the client.
"""

from pathlib import Path
from typing import Optional

from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import FileResponse, Response
from starlette.staticfiles import StaticFiles
from starlette.types import Scope


class FallbackStaticFiles(StaticFiles):
    """Serve a directory; unknown paths get ``fallback`` (relative to the root) when set."""

    def __init__(self, *, directory: Path, fallback: Optional[str] = None, **kwargs) -> None:
        super().__init__(directory=directory, html=True, **kwargs)
        self.fallback_path: Optional[Path] = None
        if fallback:
            root = Path(directory).resolve()
            candidate = (root / fallback).resolve()
            # The fallback must live inside the served directory
            if root not in candidate.parents:
                raise ValueError(f"Fallback {fallback!r} is outside {root}")
            self.fallback_path = candidate

    async def get_response(self, path: str, scope: Scope) -> Response:
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as exc:
            if (
                exc.status_code != 404
                or self.fallback_path is None
                or not self.fallback_path.is_file()
                or scope["method"] not in ("GET", "HEAD")
            ):
                raise
            return FileResponse(self.fallback_path, status_code=200)
