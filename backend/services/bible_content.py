"""
Bible content service.

Backs the bible-import-enhanced function: version sync, book structure
derived from imported verses, chapter listing, chapter content and verse
search by reference or text.
Every action returns the JSON body the client receives.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from datetime import UTC, datetime
from typing import Any

from backend.config import settings
from backend.models.bible import (
    BibleBook,
    BibleFunctionRequest,
    BibleVersion,
    BookInfo,
    BookResponse,
    ChapterContent,
    ChapterResponse,
    VerseResult,
)
from backend.repos.bible_repo import BibleRepo

logger = logging.getLogger(__name__)


# Portuguese versions offered by the reader, in display order.
BIBLE_VERSIONS: dict[str, BibleVersion] = {
    v.id: v
    for v in (
        BibleVersion(
            id="arc",
            nome="Almeida Revista e Corrigida",
            abreviacao="ARC",
            editora="Sociedade Bíblica do Brasil",
            ano_publicacao=1995,
            ordem_exibicao=1,
        ),
        BibleVersion(
            id="ara",
            nome="Almeida Revista e Atualizada",
            abreviacao="ARA",
            editora="Sociedade Bíblica do Brasil",
            ano_publicacao=1993,
            ordem_exibicao=2,
        ),
        BibleVersion(
            id="nvi",
            nome="Nova Versão Internacional",
            abreviacao="NVI",
            editora="Editora Vida",
            ano_publicacao=2000,
            ordem_exibicao=3,
        ),
        BibleVersion(
            id="ntlh",
            nome="Nova Tradução na Linguagem de Hoje",
            abreviacao="NTLH",
            editora="Sociedade Bíblica do Brasil",
            ano_publicacao=2000,
            ordem_exibicao=4,
        ),
    )
}

# id → (name, abbreviation); position in the list is the canonical ordinal.
_CANON: list[tuple[str, str, str]] = [
    ("genesis", "Gênesis", "Gn"),
    ("exodus", "Êxodo", "Ex"),
    ("leviticus", "Levítico", "Lv"),
    ("numbers", "Números", "Nm"),
    ("deuteronomy", "Deuteronômio", "Dt"),
    ("joshua", "Josué", "Js"),
    ("judges", "Juízes", "Jz"),
    ("ruth", "Rute", "Rt"),
    ("1_samuel", "1 Samuel", "1Sm"),
    ("2_samuel", "2 Samuel", "2Sm"),
    ("1_kings", "1 Reis", "1Rs"),
    ("2_kings", "2 Reis", "2Rs"),
    ("1_chronicles", "1 Crônicas", "1Cr"),
    ("2_chronicles", "2 Crônicas", "2Cr"),
    ("ezra", "Esdras", "Ed"),
    ("nehemiah", "Neemias", "Ne"),
    ("esther", "Ester", "Et"),
    ("job", "Jó", "Jó"),
    ("psalms", "Salmos", "Sl"),
    ("proverbs", "Provérbios", "Pv"),
    ("ecclesiastes", "Eclesiastes", "Ec"),
    ("song_of_songs", "Cantares", "Ct"),
    ("isaiah", "Isaías", "Is"),
    ("jeremiah", "Jeremias", "Jr"),
    ("lamentations", "Lamentações", "Lm"),
    ("ezekiel", "Ezequiel", "Ez"),
    ("daniel", "Daniel", "Dn"),
    ("hosea", "Oseias", "Os"),
    ("joel", "Joel", "Jl"),
    ("amos", "Amós", "Am"),
    ("obadiah", "Obadias", "Ob"),
    ("jonah", "Jonas", "Jn"),
    ("micah", "Miqueias", "Mq"),
    ("nahum", "Naum", "Na"),
    ("habakkuk", "Habacuque", "Hc"),
    ("zephaniah", "Sofonias", "Sf"),
    ("haggai", "Ageu", "Ag"),
    ("zechariah", "Zacarias", "Zc"),
    ("malachi", "Malaquias", "Ml"),
    ("matthew", "Mateus", "Mt"),
    ("mark", "Marcos", "Mc"),
    ("luke", "Lucas", "Lc"),
    ("john", "João", "Jo"),
    ("acts", "Atos", "At"),
    ("romans", "Romanos", "Rm"),
    ("1_corinthians", "1 Coríntios", "1Co"),
    ("2_corinthians", "2 Coríntios", "2Co"),
    ("galatians", "Gálatas", "Gl"),
    ("ephesians", "Efésios", "Ef"),
    ("philippians", "Filipenses", "Fp"),
    ("colossians", "Colossenses", "Cl"),
    ("1_thessalonians", "1 Tessalonicenses", "1Ts"),
    ("2_thessalonians", "2 Tessalonicenses", "2Ts"),
    ("1_timothy", "1 Timóteo", "1Tm"),
    ("2_timothy", "2 Timóteo", "2Tm"),
    ("titus", "Tito", "Tt"),
    ("philemon", "Filemom", "Fm"),
    ("hebrews", "Hebreus", "Hb"),
    ("james", "Tiago", "Tg"),
    ("1_peter", "1 Pedro", "1Pe"),
    ("2_peter", "2 Pedro", "2Pe"),
    ("1_john", "1 João", "1Jo"),
    ("2_john", "2 João", "2Jo"),
    ("3_john", "3 João", "3Jo"),
    ("jude", "Judas", "Jd"),
    ("revelation", "Apocalipse", "Ap"),
]

BOOKS: dict[str, BookInfo] = {
    book_id: BookInfo(nome=nome, abreviacao=abbr, ordinal=i)
    for i, (book_id, nome, abbr) in enumerate(_CANON, start=1)
}

UNKNOWN_ORDINAL = 999
NEW_TESTAMENT_START = 40
_NEW_TESTAMENT_NAMES = ("Mateus", "Marcos", "Lucas", "João", "Atos")


def book_info(book_id: str) -> BookInfo:
    """Canonical info for a book id; unknown ids keep their id as name."""
    return BOOKS.get(book_id) or BookInfo(nome=book_id, abreviacao=book_id[:3], ordinal=UNKNOWN_ORDINAL)


def book_testament(ordinal: int, name: str) -> str:
    if ordinal >= NEW_TESTAMENT_START or any(n in name for n in _NEW_TESTAMENT_NAMES):
        return "NT"
    return "AT"


def version_copyright(version_id: str) -> str:
    version = BIBLE_VERSIONS.get(version_id)
    return f"{version.nome} - Português do Brasil" if version else f"Versão {version_id.upper()}"


def parse_chapter_id(chapter_id: str | None) -> tuple[str, int]:
    """
    Split "<book>.<n>" into (book, n).

    Raises:
        ValueError: If the id is not in that format
    """
    parts = (chapter_id or "").split(".")
    if len(parts) != 2 or not parts[0] or not parts[1].isdigit():
        raise ValueError(f'Invalid chapterId format: {chapter_id}. Expected "bookId.chapterNum"')
    return parts[0], int(parts[1])


def _fold(text: str) -> str:
    """Lowercase, drop accents, spaces and underscores: "1 João" → "1joao"."""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch) and ch not in " _")


def _build_aliases() -> dict[str, str]:
    exact: dict[str, str] = {}
    for book_id, nome, abbr in _CANON:
        for key in (book_id, nome, abbr):
            exact.setdefault(key.lower().replace(" ", "").replace("_", ""), book_id)

    aliases = dict(exact)
    for key, book_id in exact.items():
        aliases.setdefault(_fold(key), book_id)
    # Three-letter prefixes ("gen", "sal", "joa"); earlier books win.
    for book_id, nome, _ in _CANON:
        aliases.setdefault(_fold(nome)[:3], book_id)
    return aliases


BOOK_ALIASES = _build_aliases()

# "jo 3:16", "1 joão 3", "salmos91"
_REFERENCE = re.compile(r"^(\d?\s*[^\W\d_]+)\s*(\d+)(?::(\d+))?$")

MIN_QUERY_LENGTH = 3
REFERENCE_LIMIT = 20
TEXT_LIMIT = 15


def resolve_book(term: str) -> str | None:
    """Book id for a name, abbreviation or id typed by a reader ("Jó" is job, "jo" is john)."""
    key = term.strip().lower().replace(" ", "").replace("_", "")
    return BOOK_ALIASES.get(key) or BOOK_ALIASES.get(_fold(key))


def parse_reference(text: str) -> tuple[str, int, int | None] | None:
    """Split "<book> <chapter>[:<verse>]" into its parts, or None for free text."""
    match = _REFERENCE.match(text.strip())
    if not match:
        return None
    verse = match.group(3)
    return match.group(1).strip(), int(match.group(2)), int(verse) if verse else None


def verses_to_markup(verses: list[Any]) -> str:
    return " ".join(f'<span class="v">{v.versiculo}</span>{v.texto}' for v in verses)


class BibleService:
    """Actions of the bible-import-enhanced function."""

    def __init__(self, repo: BibleRepo | None = None):
        self.repo = repo or BibleRepo()

    async def diagnostics(self) -> dict[str, Any]:
        return {
            "success": True,
            "message": "bible-import-enhanced is running",
            "timestamp": datetime.now(UTC).isoformat(),
            "environment": settings.ENVIRONMENT,
            "versions": {
                vid: {"id": vid, "name": v.nome, "abbreviation": v.abreviacao} for vid, v in BIBLE_VERSIONS.items()
            },
        }

    async def sync_versions(self) -> dict[str, Any]:
        """Upsert the offered versions into biblia_versoes."""
        synced = 0
        for version in BIBLE_VERSIONS.values():
            row = version.model_copy(
                update={"codigo_versao": version.abreviacao, "descricao": f"Versão {version.nome}"}
            )
            await self.repo.upsert_version(row)
            logger.info("bible: version %s synced", version.id)
            synced += 1
        return {"success": True, "synced_count": synced, "message": f"{synced} versions synced"}

    async def get_versions(self) -> dict[str, Any]:
        """Active versions, each flagged with whether any verses have been imported."""
        versions = await self.repo.list_active_versions()
        imported = await self.repo.list_imported_version_ids()
        return {
            "success": True,
            "versions": [{**v.model_dump(), "imported": v.id in imported} for v in versions],
        }

    async def sync_books(self, version_id: str) -> dict[str, Any]:
        """
        Create missing biblia_livros rows for every book present in the
        version's verses.
        """
        book_ids = await self.repo.list_book_ids_in_verses(version_id)
        if not book_ids:
            logger.info("bible: no verses for version %s, nothing to sync", version_id)
            return {
                "success": True,
                "synced_books": 0,
                "message": f"No verses found to sync for version {version_id}",
            }

        existing = await self.repo.list_existing_book_ids(version_id)
        synced = 0
        for book_id in book_ids:
            if book_id in existing:
                continue
            info = book_info(book_id)
            book = BibleBook(
                id=book_id,
                versao_id=version_id,
                nome=info.nome,
                abreviacao=info.abreviacao,
                ordinal=info.ordinal,
            )
            if await self.repo.insert_book(book):
                synced += 1

        if synced:
            logger.info("bible: %s books synced for version %s", synced, version_id)
        return {"success": True, "synced_books": synced, "version_id": version_id}

    async def get_books(self, version_id: str) -> dict[str, Any]:
        await self.sync_books(version_id)
        books = await self.repo.list_books(version_id)
        if not books:
            return {
                "success": True,
                "books": [],
                "message": f"No books found for version {version_id}. Check that it has been imported.",
            }
        return {
            "success": True,
            "books": [
                BookResponse(
                    id=b.id,
                    nome=b.nome,
                    abreviacao=b.abreviacao,
                    testamento=book_testament(b.ordinal, b.nome),
                ).model_dump()
                for b in books
            ],
        }

    async def get_chapters(self, version_id: str, book_id: str | None) -> dict[str, Any]:
        if not book_id:
            raise ValueError("bookId is required")
        numbers = await self.repo.list_chapter_numbers(version_id, book_id)
        if not numbers:
            return {
                "success": True,
                "chapters": [],
                "message": f"No chapters found for book {book_id} in version {version_id}",
            }
        return {
            "success": True,
            "chapters": [
                ChapterResponse(id=f"{book_id}.{n}", number=str(n), bibleId=version_id, bookId=book_id).model_dump()
                for n in numbers
            ],
        }

    async def get_chapter_content(self, version_id: str, chapter_id: str | None) -> dict[str, Any]:
        book_id, number = parse_chapter_id(chapter_id)
        await self.sync_books(version_id)

        book_name = await self.repo.get_book_name(version_id, book_id) or book_info(book_id).nome
        reference = f"{book_name} {number}"
        verses = await self.repo.list_verses(version_id, book_id, number)

        if verses:
            body = verses_to_markup(verses)
        else:
            logger.info("bible: no verses for %s in version %s", chapter_id, version_id)
            body = await self._missing_chapter_message(version_id, reference)

        content = ChapterContent(
            id=f"{book_id}.{number}",
            number=str(number),
            reference=reference,
            content=body,
            copyright=version_copyright(version_id),
        )
        return {"content": content.model_dump()}

    async def search_verses(self, version_id: str, query: str | None) -> dict[str, Any]:
        """
        Look up verses by reference ("jo 3:16", "sl 23") or by words.

        Input that parses as a reference to a known book is a reference
        lookup; anything else is a full-text search.

        Raises:
            ValueError: If the query is shorter than MIN_QUERY_LENGTH
        """
        text = (query or "").strip()
        if len(text) < MIN_QUERY_LENGTH:
            raise ValueError(f"query must have at least {MIN_QUERY_LENGTH} characters")

        reference = parse_reference(text)
        book_id = resolve_book(reference[0]) if reference else None
        if reference and book_id:
            _, chapter, verse = reference
            hits = await self.repo.find_verses(version_id, book_id, chapter, verse, limit=REFERENCE_LIMIT)
            kind = "reference"
        else:
            hits = await self.repo.search_verses(version_id, text, limit=TEXT_LIMIT)
            kind = "text"
        logger.info("bible: %s search %r in %s, %s results", kind, text, version_id, len(hits))

        version = BIBLE_VERSIONS.get(version_id)
        version_name = version.nome if version else f"Versão {version_id.upper()}"
        results = [
            VerseResult(
                versao_id=version_id,
                versao_nome=version_name,
                livro_id=h.livro_id,
                livro_nome=h.livro_nome or book_info(h.livro_id).nome,
                capitulo=h.capitulo,
                versiculo=h.versiculo,
                texto=h.texto,
            ).model_dump()
            for h in hits
        ]
        body: dict[str, Any] = {"success": True, "kind": kind, "results": results}
        if not results:
            body["message"] = f"No verses found for '{text}' in version {version_id}"
        return body

    async def _missing_chapter_message(self, version_id: str, reference: str) -> str:
        label = version_id.upper()
        if not await self.repo.count_verses(version_id):
            return (
                f"<p>Version <strong>{label}</strong> has not been imported yet. "
                "<br><br>Import it from the Bible settings first.</p>"
            )
        return (
            f"<p><strong>{reference}</strong> is not available in version <strong>{label}</strong>. "
            "<br><br>Try another version or check that this book and chapter exist in this translation.</p>"
        )

    async def dispatch(self, req: BibleFunctionRequest) -> dict[str, Any]:
        """
        Run one action.

        Raises:
            ValueError: Unknown action or malformed arguments
        """
        action = req.action
        version_id = req.resolved_version(settings.DEFAULT_VERSION_ID)
        logger.info("bible: action=%s version=%s", action, version_id)

        if action == "diagnostics":
            return await self.diagnostics()
        if action == "getAvailableBibles":
            return await self.sync_versions()
        if action == "getVersions":
            return await self.get_versions()
        if action == "syncBooksFromVersicles":
            return await self.sync_books(version_id)
        if action == "getBooks":
            return await self.get_books(version_id)
        if action == "getChapters":
            return await self.get_chapters(version_id, req.book_id)
        if action == "getChapterContent":
            return await self.get_chapter_content(version_id, req.chapter_id)
        if action == "searchVerses":
            return await self.search_verses(version_id, req.query)
        raise ValueError(f"Unrecognized action: {action}")
