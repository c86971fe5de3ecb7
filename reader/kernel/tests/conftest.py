"""
Reader kernel test configuration.

Kernel tests run against in-memory and scripted gateways; no network,
no database.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from reader.kernel.gateway import BIBLE_FUNCTION, ContentGateway, GatewayError, MemoryGateway

GENESIS_1 = '<span class="v">1</span>No princípio criou Deus os céus e a terra. <span class="v">2</span>A terra era sem forma e vazia.'

LIBRARY = {
    "nvi": {
        "name": "Nova Versão Internacional",
        "books": [
            {
                "id": "exodus",
                "nome": "Êxodo",
                "abreviacao": "Ex",
                "chapters": {1: "<p>Êxodo 1</p>", 2: "<p>Êxodo 2</p>"},
            },
            {
                "id": "genesis",
                "nome": "Gênesis",
                "abreviacao": "Gn",
                "chapters": {1: GENESIS_1, 2: "<p>Gênesis 2</p>", 3: "<p>Gênesis 3</p>"},
            },
        ],
    },
    "ara": {
        "name": "Almeida Revista e Atualizada",
        "books": [
            {
                "id": "genesis",
                "nome": "Gênesis",
                "abreviacao": "Gn",
                "chapters": {1: "<p>ARA Gn 1</p>", 2: "<p>ARA Gn 2</p>", 3: "<p>ARA Gn 3</p>"},
            },
        ],
    },
}


class ScriptedGateway(ContentGateway):
    """
    Gateway whose responses are released by the test.

    Each invoke parks on a future keyed by (action, id). Tests resolve
    them in any order to reproduce slow or out-of-order responses.
    """

    def __init__(self) -> None:
        self.pending: dict[tuple[str, str], list[asyncio.Future]] = {}
        self.calls: list[dict[str, Any]] = []

    @staticmethod
    def key_for(payload: dict[str, Any]) -> tuple[str, str]:
        action = payload["action"]
        ident = payload.get("chapterId") or payload.get("bookId") or payload.get("versionId", "")
        return action, ident

    async def invoke(self, function: str, payload: dict[str, Any]) -> dict[str, Any]:
        assert function == BIBLE_FUNCTION
        self.calls.append(payload)
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self.pending.setdefault(self.key_for(payload), []).append(future)
        return await future

    async def wait_for_call(self, action: str, ident: str) -> None:
        for _ in range(100):
            if self.pending.get((action, ident)):
                return
            await asyncio.sleep(0)
        raise AssertionError(f"no pending call for {action} {ident}")

    def resolve(self, action: str, ident: str, data: dict[str, Any]) -> None:
        self.pending[(action, ident)].pop(0).set_result(data)

    def fail(self, action: str, ident: str, message: str) -> None:
        self.pending[(action, ident)].pop(0).set_exception(GatewayError(message))

    def resolve_books(self, version_id: str, *ids: str) -> None:
        books = [{"id": i, "nome": i.title(), "abreviacao": i[:2].title()} for i in ids]
        self.resolve("getBooks", version_id, {"success": True, "books": books})

    def resolve_chapters(self, book_id: str, count: int) -> None:
        chapters = [
            {"id": f"{book_id}.{n}", "number": str(n), "bibleId": "nvi", "bookId": book_id}
            for n in range(1, count + 1)
        ]
        self.resolve("getChapters", book_id, {"success": True, "chapters": chapters})

    def resolve_content(self, chapter_id: str) -> None:
        content = {
            "id": chapter_id,
            "number": chapter_id.split(".")[1],
            "reference": chapter_id,
            "content": f"<p>{chapter_id}</p>",
            "copyright": "NVI",
        }
        self.resolve("getChapterContent", chapter_id, {"content": content})


@pytest.fixture
def memory_gateway() -> MemoryGateway:
    return MemoryGateway(LIBRARY)


@pytest.fixture
def scripted_gateway() -> ScriptedGateway:
    return ScriptedGateway()
