"""Serves local files referenced through convertFileSrc URLs."""

import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{file_path:path}")
async def serve_file(file_path: str) -> FileResponse:
    """Serve a file by its local path, e.g. /file//tmp/x.png."""
    path = Path(file_path)
    if not path.is_file():
        logger.debug(f"File not found: {file_path}")
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(path)
