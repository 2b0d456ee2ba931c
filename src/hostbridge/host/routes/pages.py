"""Serves the frontend pages from the host's root directory under /app."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse, RedirectResponse

from hostbridge.config import HostConfig
from hostbridge.host.deps import get_config

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def app_root() -> RedirectResponse:
    """Redirect /app to /app/ so relative asset links resolve."""
    return RedirectResponse(url="/app/", status_code=301)


@router.get("/{page_path:path}", response_model=None)
async def serve_page(
    page_path: str,
    config: Annotated[HostConfig, Depends(get_config)],
) -> FileResponse | RedirectResponse:
    """Serve a page or asset; directories serve their index page."""
    root = config.root_dir.resolve()
    path = (root / page_path).resolve()
    if not path.is_relative_to(root):
        logger.warning(f"Rejected path outside root: {page_path}")
        raise HTTPException(status_code=404, detail="Page not found")

    if path.is_dir():
        if page_path and not page_path.endswith("/"):
            return RedirectResponse(url=f"/app/{page_path}/", status_code=301)
        path = path / config.index_file

    if not path.is_file():
        logger.debug(f"Page not found: {page_path}")
        raise HTTPException(status_code=404, detail="Page not found")
    return FileResponse(path)
