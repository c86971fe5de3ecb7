"""
Pydantic models for Leitor.

All data shapes defined here. No imports from db, repos, or routes.
"""

from backend.models.auth import Caller
from backend.models.bible import (
    BibleBook,
    BibleFunctionRequest,
    BibleVersion,
    BookInfo,
    BookResponse,
    ChapterContent,
    ChapterContentRequest,
    ChapterResponse,
    RemoteChapter,
    Verse,
    VerseHit,
    VerseResult,
)

__all__ = [
    # Auth models
    "Caller",
    # Bible rows
    "BibleVersion",
    "BibleBook",
    "Verse",
    "VerseHit",
    "BookInfo",
    # Function requests/responses
    "BibleFunctionRequest",
    "ChapterContentRequest",
    "BookResponse",
    "ChapterResponse",
    "ChapterContent",
    "VerseResult",
    "RemoteChapter",
]
