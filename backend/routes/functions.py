"""Function routes — bible-import-enhanced and get-chapter-content."""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from backend.auth import require_caller
from backend.models.auth import Caller
from backend.models.bible import BibleFunctionRequest, ChapterContentRequest
from backend.services.bible_content import BibleService
from backend.services.scripture_api import scripture_api

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["functions"])

bible_service = BibleService()


async def _read_body(request: Request) -> dict[str, Any]:
    """Request JSON as a dict; an empty or unparsable body reads as {}."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return body if isinstance(body, dict) else {}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/bible-import-enhanced", status_code=200)
async def bible_import_enhanced(request: Request, caller: Caller = Depends(require_caller)) -> Any:
    """
    Bible reader function.

    Body: {action, versionId|bibleId, bookId?, chapterId?}. Bad requests
    answer 400, failures 500; both as {"error": message}.
    """
    try:
        req = BibleFunctionRequest.model_validate(await _read_body(request))
    except ValidationError as exc:
        return _error(status.HTTP_400_BAD_REQUEST, f"Invalid request: {exc.errors()[0]['msg']}")

    try:
        return await bible_service.dispatch(req)
    except ValueError as exc:
        logger.warning("bible-import-enhanced: bad request (%s): %s", req.action, exc)
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))
    except Exception as exc:
        logger.exception("bible-import-enhanced: %s failed for role=%s", req.action, caller.role)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))


@router.post("/get-chapter-content", status_code=200)
async def get_chapter_content(request: Request, caller: Caller = Depends(require_caller)) -> Any:
    """Proxy one chapter from the remote scripture API."""
    try:
        req = ChapterContentRequest.model_validate(await _read_body(request))
    except ValidationError as exc:
        return _error(status.HTTP_400_BAD_REQUEST, f"Invalid request: {exc.errors()[0]['msg']}")

    try:
        return await scripture_api.get_chapter(req.bible_id, req.chapter_id)
    except ValueError as exc:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))
    except Exception as exc:
        logger.warning("get-chapter-content: %s failed: %s", req.chapter_id, exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
