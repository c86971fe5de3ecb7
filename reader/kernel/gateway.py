"""
Leitor Kernel — Remote Content Gateway

The transport boundary for every remote read made by the reader. The
functions service speaks loosely typed JSON; this module narrows it to
kernel types with pydantic before anything reaches the cascade.

Implement `invoke` with HTTP for production (see leitor_cli.client), or
use MemoryGateway for tests and offline demos.
"""

from __future__ import annotations

import copy
import logging
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from reader.kernel.types import CollectionItem, LeafContent, SubCollectionItem, VerseMatch, Version

logger = logging.getLogger(__name__)

BIBLE_FUNCTION = "bible-import-enhanced"
CHAPTER_FUNCTION = "get-chapter-content"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class GatewayError(Exception):
    """A remote call failed. The message is user-facing."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ---------------------------------------------------------------------------
# Wire payloads
# ---------------------------------------------------------------------------


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class VersionPayload(_Payload):
    id: str
    nome: str
    abreviacao: str = ""
    imported: bool | None = None


class BookPayload(_Payload):
    id: str
    nome: str
    abreviacao: str | None = None
    testamento: str | None = None
    total_capitulos: int = 0


class ChapterPayload(_Payload):
    id: str
    number: int
    book_id: str = Field(alias="bookId")
    bible_id: str | None = Field(default=None, alias="bibleId")


class ChapterContentPayload(_Payload):
    id: str
    reference: str
    content: str
    copyright: str = ""


class VersionsResponse(_Payload):
    versions: list[VersionPayload] = Field(default_factory=list)


class BooksResponse(_Payload):
    books: list[BookPayload] = Field(default_factory=list)


class ChaptersResponse(_Payload):
    chapters: list[ChapterPayload] = Field(default_factory=list)


class ChapterContentResponse(_Payload):
    content: ChapterContentPayload | None = None


class VerseResultPayload(_Payload):
    versao_id: str
    livro_id: str
    livro_nome: str
    capitulo: int
    versiculo: int
    texto: str


class SearchResponse(_Payload):
    results: list[VerseResultPayload] = Field(default_factory=list)


class RemoteChapterPayload(_Payload):
    id: str
    reference: str = ""
    content: str = ""


class RemoteChapterResponse(_Payload):
    chapter: RemoteChapterPayload | None = None


def _narrow(model: type[_Payload], data: dict[str, Any], action: str) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.warning("gateway: malformed %s payload: %s", action, e)
        raise GatewayError(f"Unexpected response for {action}.") from e


# ---------------------------------------------------------------------------
# Gateway protocol
# ---------------------------------------------------------------------------


class ContentGateway:
    """
    Abstract gateway interface.

    Subclasses implement `invoke`; the typed actions below are shared.
    """

    async def invoke(self, function: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Call a remote function. Raises GatewayError on any failure."""
        raise NotImplementedError

    async def call(self, action: str, **params: Any) -> dict[str, Any]:
        """Invoke an action on the Bible function and reject error payloads."""
        payload = {"action": action, **{k: v for k, v in params.items() if v is not None}}
        data = await self.invoke(BIBLE_FUNCTION, payload)
        if not isinstance(data, dict):
            raise GatewayError(f"Unexpected response for {action}.")
        if data.get("error") or data.get("success") is False:
            raise GatewayError(str(data.get("error") or f"{action} failed."))
        return data

    async def diagnostics(self) -> dict[str, Any]:
        return await self.call("diagnostics")

    async def get_versions(self) -> list[Version]:
        data = _narrow(VersionsResponse, await self.call("getVersions"), "getVersions")
        return [
            Version(id=v.id, name=v.nome, abbreviation=v.abreviacao, imported=v.imported) for v in data.versions
        ]

    async def get_collection_items(self, context: str) -> list[CollectionItem]:
        data = _narrow(BooksResponse, await self.call("getBooks", versionId=context), "getBooks")
        return [
            CollectionItem(
                id=b.id,
                display_name=b.nome,
                parent_id=context,
                abbreviation=b.abreviacao,
                testament=b.testamento,
                chapter_count=b.total_capitulos,
            )
            for b in data.books
        ]

    async def get_sub_collection_items(self, context: str, parent_id: str) -> list[SubCollectionItem]:
        raw = await self.call("getChapters", bookId=parent_id, versionId=context)
        data = _narrow(ChaptersResponse, raw, "getChapters")
        return [SubCollectionItem(id=c.id, ordinal=c.number, parent_id=c.book_id) for c in data.chapters]

    async def get_leaf_content(self, context: str, sub_collection_id: str) -> list[LeafContent]:
        """
        Fetch chapter content.

        Returns a one-element list, or an empty list when the service has
        no content for the chapter.
        """
        raw = await self.call("getChapterContent", chapterId=sub_collection_id, versionId=context)
        data = _narrow(ChapterContentResponse, raw, "getChapterContent")
        if data.content is None:
            return []
        c = data.content
        return [LeafContent(id=c.id, body=c.content, reference=c.reference, attribution=c.copyright)]

    async def search_verses(self, context: str, query: str) -> list[VerseMatch]:
        """Verses matching a reference ("jo 3:16") or words, in the given version."""
        raw = await self.call("searchVerses", query=query, versionId=context)
        data = _narrow(SearchResponse, raw, "searchVerses")
        return [
            VerseMatch(
                version_id=r.versao_id,
                book_id=r.livro_id,
                book_name=r.livro_nome,
                chapter=r.capitulo,
                verse=r.versiculo,
                text=r.texto,
            )
            for r in data.results
        ]

    async def get_remote_chapter(self, bible_id: str, chapter_id: str) -> LeafContent:
        """Fetch a chapter from the remote scripture API through the proxy function."""
        raw = await self.invoke(CHAPTER_FUNCTION, {"bibleId": bible_id, "chapterId": chapter_id})
        if not isinstance(raw, dict) or raw.get("error") or not raw.get("success"):
            error = raw.get("error") if isinstance(raw, dict) else None
            raise GatewayError(str(error or "Chapter not found"))
        data = _narrow(RemoteChapterResponse, raw, CHAPTER_FUNCTION)
        if data.chapter is None:
            raise GatewayError("Chapter not found")
        c = data.chapter
        return LeafContent(id=c.id, body=c.content, reference=c.reference or c.id, attribution=bible_id)


_VERSE_SPAN = re.compile(r'<span class="v">(\d+)</span>')
_TAG = re.compile(r"<[^>]+>")
_REFERENCE = re.compile(r"^(.+?)\s*(\d+)(?::(\d+))?$")


def _split_verses(markup: str) -> list[tuple[int, str]]:
    """(number, text) pairs from chapter markup with verse-number spans."""
    parts = _VERSE_SPAN.split(markup)
    return [(int(parts[i]), _TAG.sub("", parts[i + 1]).strip()) for i in range(1, len(parts) - 1, 2)]


class MemoryGateway(ContentGateway):
    """
    In-memory gateway for tests and offline demos.

    `library` maps version id → {"name": ..., "books": [{"id", "nome",
    "abreviacao", "chapters": {number: content_markup}}]}.
    `remote` maps (bible_id, chapter_id) → {"reference", "content"} for
    the get-chapter-content proxy.
    Every invocation is recorded in `calls`.
    """

    def __init__(
        self,
        library: dict[str, dict[str, Any]] | None = None,
        remote: dict[tuple[str, str], dict[str, str]] | None = None,
    ):
        self.library = copy.deepcopy(library or {})
        self.remote = dict(remote or {})
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def invoke(self, function: str, payload: dict[str, Any]) -> dict[str, Any]:
        self.calls.append((function, dict(payload)))
        if function == CHAPTER_FUNCTION:
            return self._remote_chapter(payload.get("bibleId", ""), payload.get("chapterId", ""))
        if function != BIBLE_FUNCTION:
            return {"error": f"Unknown function: {function}"}

        action = payload.get("action")
        version_id = payload.get("versionId", "")
        version = self.library.get(version_id)

        if action == "diagnostics":
            return {"success": True, "message": "memory gateway", "versions": sorted(self.library)}
        if action == "getVersions":
            versions = [
                {
                    "id": vid,
                    "nome": v.get("name", vid),
                    "abreviacao": vid.upper(),
                    "imported": bool(v.get("books")),
                }
                for vid, v in self.library.items()
            ]
            return {"success": True, "versions": versions}
        if version is None:
            return {"error": f"Version not imported: {version_id}"}

        books = {b["id"]: b for b in version.get("books", [])}
        if action == "getBooks":
            return {
                "success": True,
                "books": [
                    {
                        "id": b["id"],
                        "nome": b["nome"],
                        "abreviacao": b.get("abreviacao"),
                        "testamento": b.get("testamento", "AT"),
                        "total_capitulos": len(b.get("chapters", {})),
                    }
                    for b in books.values()
                ],
            }
        if action == "getChapters":
            book = books.get(payload.get("bookId", ""))
            numbers = sorted(book.get("chapters", {})) if book else []
            return {
                "success": True,
                "chapters": [
                    {"id": f"{book['id']}.{n}", "number": str(n), "bibleId": version_id, "bookId": book["id"]}
                    for n in numbers
                ],
            }
        if action == "getChapterContent":
            chapter_id = payload.get("chapterId", "")
            book_id, _, number = chapter_id.partition(".")
            book = books.get(book_id)
            if not book or not number.isdigit() or int(number) not in book.get("chapters", {}):
                return {"success": True}
            return {
                "content": {
                    "id": chapter_id,
                    "number": number,
                    "reference": f"{book['nome']} {number}",
                    "content": book["chapters"][int(number)],
                    "copyright": f"{version.get('name', version_id)} - Português do Brasil",
                }
            }
        if action == "searchVerses":
            return self._search(version_id, list(books.values()), payload.get("query") or "")
        return {"error": f"Unrecognized action: {action}"}

    def _search(self, version_id: str, books: list[dict[str, Any]], query: str) -> dict[str, Any]:
        """Reference lookup by book id, name or abbreviation; otherwise a substring match."""
        text = query.strip()
        if len(text) < 3:
            return {"error": "query must have at least 3 characters"}

        match = _REFERENCE.match(text)
        target = None
        if match:
            term = match.group(1).strip().lower()
            target = next(
                (b for b in books if term in (b["id"], b["nome"].lower(), (b.get("abreviacao") or "").lower())),
                None,
            )

        results = []
        for book in books if target is None else [target]:
            for number, markup in sorted(book.get("chapters", {}).items()):
                if target is not None and number != int(match.group(2)):
                    continue
                for verse, verse_text in _split_verses(markup):
                    if target is not None:
                        hit = match.group(3) is None or verse == int(match.group(3))
                    else:
                        hit = text.lower() in verse_text.lower()
                    if hit:
                        results.append(
                            {
                                "versao_id": version_id,
                                "livro_id": book["id"],
                                "livro_nome": book["nome"],
                                "capitulo": number,
                                "versiculo": verse,
                                "texto": verse_text,
                            }
                        )
        return {"success": True, "kind": "text" if target is None else "reference", "results": results}

    def _remote_chapter(self, bible_id: str, chapter_id: str) -> dict[str, Any]:
        if not bible_id or not chapter_id:
            return {"error": "bibleId and chapterId are required"}
        chapter = self.remote.get((bible_id, chapter_id))
        if chapter is None:
            return {"error": "Chapter not found"}
        return {"success": True, "chapter": {"id": chapter_id, "bibleId": bible_id, **chapter}}
