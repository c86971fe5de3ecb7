"""Tests for the Bible content service (bible-import-enhanced actions)."""

from __future__ import annotations

import pytest

from backend.config import settings
from backend.models.bible import BibleBook, BibleFunctionRequest, BibleVersion, VerseHit
from backend.services.bible_content import (
    BOOKS,
    BibleService,
    book_info,
    book_testament,
    parse_chapter_id,
    parse_reference,
    resolve_book,
    version_copyright,
)


def _book(book_id: str, nome: str, ordinal: int) -> BibleBook:
    return BibleBook(id=book_id, versao_id="nvi", nome=nome, abreviacao=nome[:2], ordinal=ordinal)


class TestBookMapping:
    def test_canon_has_66_books(self):
        assert len(BOOKS) == 66
        assert BOOKS["genesis"].ordinal == 1
        assert BOOKS["matthew"].ordinal == 40
        assert BOOKS["revelation"].nome == "Apocalipse"

    def test_unknown_book_falls_back(self):
        info = book_info("enoch")
        assert info.nome == "enoch"
        assert info.abreviacao == "eno"
        assert info.ordinal == 999

    def test_testament_by_ordinal(self):
        assert book_testament(39, "Malaquias") == "AT"
        assert book_testament(40, "Mateus") == "NT"

    def test_testament_by_name(self):
        # Unknown ordinal but a New Testament name
        assert book_testament(999, "Atos") == "NT"
        assert book_testament(0, "1 João") == "NT"
        assert book_testament(999, "enoch") == "NT"
        assert book_testament(7, "Juízes") == "AT"

    def test_copyright(self):
        assert version_copyright("nvi") == "Nova Versão Internacional - Português do Brasil"
        assert version_copyright("kjv") == "Versão KJV"


class TestParseChapterId:
    def test_valid(self):
        assert parse_chapter_id("genesis.1") == ("genesis", 1)
        assert parse_chapter_id("1_john.5") == ("1_john", 5)

    @pytest.mark.parametrize("bad", ["genesis", "genesis.1.2", ".1", "genesis.x", "", None])
    def test_invalid(self, bad):
        with pytest.raises(ValueError, match="Invalid chapterId"):
            parse_chapter_id(bad)


class TestSyncBooks:
    async def test_inserts_only_missing_books(self, repo):
        repo.list_book_ids_in_verses.return_value = ["genesis", "exodus", "enoch"]
        repo.list_existing_book_ids.return_value = {"genesis"}
        service = BibleService(repo)

        result = await service.sync_books("nvi")

        assert result == {"success": True, "synced_books": 2, "version_id": "nvi"}
        inserted = [call.args[0] for call in repo.insert_book.await_args_list]
        assert [b.id for b in inserted] == ["exodus", "enoch"]
        assert inserted[0].nome == "Êxodo"
        assert inserted[0].ordinal == 2
        assert inserted[1].ordinal == 999

    async def test_no_verses(self, repo):
        repo.list_book_ids_in_verses.return_value = []
        result = await BibleService(repo).sync_books("ntlh")
        assert result["synced_books"] == 0
        assert "ntlh" in result["message"]
        repo.insert_book.assert_not_awaited()

    async def test_conflicting_insert_not_counted(self, repo):
        repo.list_book_ids_in_verses.return_value = ["exodus"]
        repo.list_existing_book_ids.return_value = set()
        repo.insert_book.return_value = False
        result = await BibleService(repo).sync_books("nvi")
        assert result["synced_books"] == 0


class TestVersions:
    async def test_sync_versions_upserts_all_four(self, repo):
        result = await BibleService(repo).sync_versions()
        assert result["synced_count"] == 4
        rows = [call.args[0] for call in repo.upsert_version.await_args_list]
        assert [r.id for r in rows] == ["arc", "ara", "nvi", "ntlh"]
        assert rows[2].codigo_versao == "NVI"
        assert rows[2].descricao == "Versão Nova Versão Internacional"

    async def test_get_versions_flags_imported(self, repo):
        repo.list_active_versions.return_value = [
            BibleVersion(id="ara", nome="Almeida", abreviacao="ARA"),
            BibleVersion(id="nvi", nome="Nova Versão Internacional", abreviacao="NVI"),
        ]
        result = await BibleService(repo).get_versions()
        assert [(v["id"], v["imported"]) for v in result["versions"]] == [("ara", False), ("nvi", True)]


class TestGetBooks:
    async def test_books_with_testament(self, repo):
        repo.list_books.return_value = [_book("genesis", "Gênesis", 1), _book("matthew", "Mateus", 40)]
        result = await BibleService(repo).get_books("nvi")

        assert result["success"] is True
        assert [(b["id"], b["testamento"]) for b in result["books"]] == [("genesis", "AT"), ("matthew", "NT")]
        assert result["books"][0]["total_capitulos"] == 0
        repo.list_book_ids_in_verses.assert_awaited_once_with("nvi")

    async def test_no_books(self, repo):
        result = await BibleService(repo).get_books("arc")
        assert result["books"] == []
        assert "arc" in result["message"]


class TestGetChapters:
    async def test_chapters(self, repo):
        result = await BibleService(repo).get_chapters("nvi", "genesis")
        assert result["chapters"] == [
            {"id": "genesis.1", "number": "1", "bibleId": "nvi", "bookId": "genesis"},
            {"id": "genesis.2", "number": "2", "bibleId": "nvi", "bookId": "genesis"},
        ]

    async def test_no_chapters(self, repo):
        repo.list_chapter_numbers.return_value = []
        result = await BibleService(repo).get_chapters("nvi", "obadiah")
        assert result["chapters"] == []
        assert "obadiah" in result["message"]

    async def test_book_required(self, repo):
        with pytest.raises(ValueError):
            await BibleService(repo).get_chapters("nvi", None)


class TestGetChapterContent:
    async def test_joins_verses(self, repo):
        result = await BibleService(repo).get_chapter_content("nvi", "genesis.1")
        content = result["content"]
        assert content["id"] == "genesis.1"
        assert content["number"] == "1"
        assert content["reference"] == "Gênesis 1"
        assert content["content"] == (
            '<span class="v">1</span>No princípio criou Deus os céus e a terra. '
            '<span class="v">2</span>Era a terra sem forma e vazia.'
        )
        assert content["copyright"] == "Nova Versão Internacional - Português do Brasil"
        repo.list_verses.assert_awaited_once_with("nvi", "genesis", 1)

    async def test_unstructured_book_uses_canonical_name(self, repo):
        repo.get_book_name.return_value = None
        result = await BibleService(repo).get_chapter_content("nvi", "exodus.3")
        assert result["content"]["reference"] == "Êxodo 3"

    async def test_version_not_imported(self, repo):
        repo.list_verses.return_value = []
        repo.count_verses.return_value = 0
        result = await BibleService(repo).get_chapter_content("ntlh", "genesis.1")
        assert "has not been imported" in result["content"]["content"]
        assert "NTLH" in result["content"]["content"]

    async def test_chapter_missing_in_version(self, repo):
        repo.list_verses.return_value = []
        result = await BibleService(repo).get_chapter_content("nvi", "genesis.51")
        body = result["content"]["content"]
        assert "Gênesis 51" in body
        assert "not available" in body

    async def test_bad_id(self, repo):
        with pytest.raises(ValueError):
            await BibleService(repo).get_chapter_content("nvi", "genesis-1")


class TestReferences:
    @pytest.mark.parametrize(
        ("term", "book_id"),
        [
            ("gn", "genesis"),
            ("Gênesis", "genesis"),
            ("genesis", "genesis"),
            ("jo", "john"),
            ("joão", "john"),
            ("joao", "john"),
            ("Jó", "job"),
            ("1 João", "1_john"),
            ("1jo", "1_john"),
            ("sal", "psalms"),
            ("fil", "philippians"),
            ("Ap", "revelation"),
        ],
    )
    def test_resolve_book(self, term, book_id):
        assert resolve_book(term) == book_id

    def test_unknown_book(self):
        assert resolve_book("enoch") is None

    def test_parse_reference(self):
        assert parse_reference("jo 3:16") == ("jo", 3, 16)
        assert parse_reference("1 joão 2") == ("1 joão", 2, None)
        assert parse_reference("salmos91") == ("salmos", 91, None)
        assert parse_reference("  Gn 1:1 ") == ("Gn", 1, 1)

    @pytest.mark.parametrize("text", ["amor de deus", "3:16", "jo", "jo 3:"])
    def test_free_text_is_not_a_reference(self, text):
        assert parse_reference(text) is None


class TestSearchVerses:
    async def test_reference_lookup(self, repo):
        repo.find_verses.return_value = [
            VerseHit(livro_id="john", livro_nome="João", capitulo=3, versiculo=16, texto="Porque Deus amou o mundo"),
        ]
        result = await BibleService(repo).search_verses("nvi", "Jo 3:16")

        repo.find_verses.assert_awaited_once_with("nvi", "john", 3, 16, limit=20)
        repo.search_verses.assert_not_awaited()
        assert result["kind"] == "reference"
        assert result["results"] == [
            {
                "versao_id": "nvi",
                "versao_nome": "Nova Versão Internacional",
                "livro_id": "john",
                "livro_nome": "João",
                "capitulo": 3,
                "versiculo": 16,
                "texto": "Porque Deus amou o mundo",
            }
        ]

    async def test_whole_chapter(self, repo):
        await BibleService(repo).search_verses("ara", "sl 23")
        repo.find_verses.assert_awaited_once_with("ara", "psalms", 23, None, limit=20)

    async def test_text_search(self, repo):
        repo.search_verses.return_value = [
            VerseHit(livro_id="genesis", livro_nome=None, capitulo=1, versiculo=1, texto="No princípio criou Deus"),
        ]
        result = await BibleService(repo).search_verses("nvi", "princípio criou")

        repo.search_verses.assert_awaited_once_with("nvi", "princípio criou", limit=15)
        assert result["kind"] == "text"
        # Book not structured yet: canonical name
        assert result["results"][0]["livro_nome"] == "Gênesis"

    async def test_unknown_book_falls_back_to_text(self, repo):
        await BibleService(repo).search_verses("nvi", "enoch 1")
        repo.find_verses.assert_not_awaited()
        repo.search_verses.assert_awaited_once_with("nvi", "enoch 1", limit=15)

    async def test_no_results_message(self, repo):
        result = await BibleService(repo).search_verses("kjv", "love")
        assert result["results"] == []
        assert "kjv" in result["message"]

    @pytest.mark.parametrize("query", [None, "", "  a "])
    async def test_short_query(self, repo, query):
        with pytest.raises(ValueError, match="at least 3 characters"):
            await BibleService(repo).search_verses("nvi", query)


class TestDispatch:
    async def test_default_version(self, repo):
        repo.list_books.return_value = [_book("genesis", "Gênesis", 1)]
        await BibleService(repo).dispatch(BibleFunctionRequest(action="getBooks"))
        repo.list_books.assert_awaited_once_with("nvi")

    async def test_bible_id_alias(self, repo):
        await BibleService(repo).dispatch(BibleFunctionRequest.model_validate({"action": "getBooks", "bibleId": "ara"}))
        repo.list_books.assert_awaited_once_with("ara")

    async def test_diagnostics(self, repo):
        result = await BibleService(repo).dispatch(BibleFunctionRequest(action="diagnostics"))
        assert result["success"] is True
        assert set(result["versions"]) == {"arc", "ara", "nvi", "ntlh"}

    async def test_diagnostics_reports_environment(self, repo, monkeypatch):
        monkeypatch.setattr(settings, "ENVIRONMENT", "production")
        result = await BibleService(repo).diagnostics()
        assert result["environment"] == "production"

    async def test_unknown_action(self, repo):
        with pytest.raises(ValueError, match="Unrecognized action: importEverything"):
            await BibleService(repo).dispatch(BibleFunctionRequest(action="importEverything"))

    async def test_search_action(self, repo):
        req = BibleFunctionRequest.model_validate({"action": "searchVerses", "versionId": "ara", "query": "gn 1"})
        result = await BibleService(repo).dispatch(req)
        assert result["kind"] == "reference"
        repo.find_verses.assert_awaited_once_with("ara", "genesis", 1, None, limit=20)
