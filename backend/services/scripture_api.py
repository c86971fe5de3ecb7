"""HTTP client for the remote scripture API (api.scripture.api.bible)."""

from __future__ import annotations

import logging
import re
from typing import Any

import httpx
from pydantic import ValidationError

from backend.config import settings
from backend.models.bible import RemoteChapter

logger = logging.getLogger(__name__)

_BLOCK_TAG = re.compile(r"</?(?:p|div)[^>]*>")
_BREAK_TAG = re.compile(r"<br\s*/?>")
_BLANK_LINES = re.compile(r"\n\s*\n")

_CHAPTER_QUERY = {
    "content-type": "text",
    "include-notes": "false",
    "include-titles": "true",
    "include-chapter-numbers": "false",
    "include-verse-numbers": "true",
    "include-verse-spans": "false",
}


class ScriptureApiError(Exception):
    """The remote API refused or failed a request."""


def clean_chapter_markup(content: str) -> str:
    """Collapse paragraph, div and line-break tags into single newlines."""
    content = _BLOCK_TAG.sub("\n", content or "")
    content = _BREAK_TAG.sub("\n", content)
    content = _BLANK_LINES.sub("\n", content)
    return content.strip()


class ScriptureApiService:
    """
    Fetches chapter content from the remote scripture API.

    Backs the get-chapter-content function.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._base_url = settings.BIBLE_API_URL.rstrip("/")
        self._api_key = settings.BIBLE_API_KEY
        self._timeout = settings.BIBLE_API_TIMEOUT
        self._transport = transport

    async def get_chapter(self, bible_id: str | None, chapter_id: str | None) -> dict[str, Any]:
        """
        Fetch one chapter and return the function's response body.

        Raises:
            ValueError: If bible_id or chapter_id is missing
            ScriptureApiError: If the API key is missing or the API fails
        """
        if not bible_id or not chapter_id:
            raise ValueError("bibleId and chapterId are required")
        if not self._api_key:
            raise ScriptureApiError("BIBLE_API_KEY is not configured")

        logger.info("scripture_api: fetching %s from %s", chapter_id, bible_id)
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.get(
                    f"{self._base_url}/bibles/{bible_id}/chapters/{chapter_id}",
                    params=_CHAPTER_QUERY,
                    headers={"api-key": self._api_key},
                )
            except httpx.HTTPError as e:
                logger.warning("scripture_api: request failed: %s", e)
                raise ScriptureApiError(f"Scripture API unreachable: {e}") from e

        if response.status_code == 404:
            raise ScriptureApiError("Chapter not found")
        if response.is_error:
            raise ScriptureApiError(f"Scripture API error: {response.reason_phrase}")

        data = response.json().get("data")
        if not data:
            raise ScriptureApiError("No content found for this chapter")
        try:
            chapter = RemoteChapter.model_validate(data)
        except ValidationError as e:
            raise ScriptureApiError("Unexpected response from scripture API") from e

        logger.info("scripture_api: loaded %s (%s verses)", chapter.reference, chapter.verseCount)
        return {
            "success": True,
            "chapter": chapter.model_copy(update={"content": clean_chapter_markup(chapter.content)}).model_dump(),
        }


scripture_api = ScriptureApiService()
