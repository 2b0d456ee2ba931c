"""Capability endpoints invoked by the command bridge.

Routes mirror the capability names:
- POST /api/log
- POST /api/core/convertFileSrc
- GET /api/core/getArgs
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from hostbridge.bridge.models import ConvertFileSrcRequest, LogRequest, LogResponse
from hostbridge.config import HostConfig
from hostbridge.host.deps import get_config
from hostbridge.host.paths import convert_file_src

logger = logging.getLogger(__name__)

# Frontend log lines go to their own logger so they can be routed separately
client_logger = logging.getLogger("hostbridge.client")

router = APIRouter()


@router.post("/log")
async def log_message(payload: LogRequest) -> LogResponse:
    """Write a frontend message to the host log."""
    client_logger.info(f"[CLIENT] {payload.message}")
    return LogResponse()


@router.post("/core/convertFileSrc")
async def convert_file_src_endpoint(payload: ConvertFileSrcRequest) -> str:
    """Rewrite a local file path into a URL under /file/."""
    new_src = convert_file_src(payload.file_path)
    logger.debug(f"Converted {payload.file_path} -> {new_src}")
    return new_src


@router.get("/core/getArgs")
async def get_args(config: Annotated[HostConfig, Depends(get_config)]) -> list[str]:
    """Return the arguments the host was launched with."""
    return list(config.args)
