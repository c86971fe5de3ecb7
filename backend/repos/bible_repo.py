"""Repository for Bible versions, books and verses."""

from __future__ import annotations

import asyncpg

from backend.db import conn
from backend.models.bible import BibleBook, BibleVersion, Verse, VerseHit


def _row_to_version(row: asyncpg.Record) -> BibleVersion:
    """Convert a database row to a BibleVersion model."""
    return BibleVersion(
        id=row["id"],
        nome=row["nome"],
        abreviacao=row["abreviacao"],
        editora=row["editora"],
        ano_publicacao=row["ano_publicacao"],
        ordem_exibicao=row["ordem_exibicao"],
        ativa=row["ativa"],
        idioma=row["idioma"],
        codigo_versao=row["codigo_versao"],
        descricao=row["descricao"],
    )


def _row_to_book(row: asyncpg.Record) -> BibleBook:
    return BibleBook(
        id=row["id"],
        versao_id=row["versao_id"],
        nome=row["nome"],
        abreviacao=row["abreviacao"],
        ordinal=row["ordinal"],
    )


def _row_to_hit(row: asyncpg.Record) -> VerseHit:
    return VerseHit(
        livro_id=row["livro_id"],
        livro_nome=row["livro_nome"],
        capitulo=row["capitulo"],
        versiculo=row["versiculo"],
        texto=row["texto"],
    )


class BibleRepo:
    """All Bible-related database operations."""

    # -- versions ------------------------------------------------------------

    async def upsert_version(self, version: BibleVersion) -> None:
        """Insert a version or refresh it in place (keyed by id)."""
        async with conn() as c:
            await c.execute(
                """
                INSERT INTO biblia_versoes
                    (id, nome, abreviacao, editora, ano_publicacao, ordem_exibicao,
                     ativa, idioma, codigo_versao, descricao)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
                ON CONFLICT (id) DO UPDATE SET
                    nome = EXCLUDED.nome,
                    abreviacao = EXCLUDED.abreviacao,
                    editora = EXCLUDED.editora,
                    ano_publicacao = EXCLUDED.ano_publicacao,
                    ordem_exibicao = EXCLUDED.ordem_exibicao,
                    ativa = EXCLUDED.ativa,
                    idioma = EXCLUDED.idioma,
                    codigo_versao = EXCLUDED.codigo_versao,
                    descricao = EXCLUDED.descricao
                """,
                version.id,
                version.nome,
                version.abreviacao,
                version.editora,
                version.ano_publicacao,
                version.ordem_exibicao,
                version.ativa,
                version.idioma,
                version.codigo_versao,
                version.descricao,
            )

    async def list_active_versions(self) -> list[BibleVersion]:
        """Active versions ordered by display order."""
        async with conn() as c:
            rows = await c.fetch("SELECT * FROM biblia_versoes WHERE ativa = true ORDER BY ordem_exibicao")
            return [_row_to_version(row) for row in rows]

    # -- books ---------------------------------------------------------------

    async def list_book_ids_in_verses(self, version_id: str) -> list[str]:
        """Distinct book ids that have at least one verse in this version."""
        async with conn() as c:
            rows = await c.fetch(
                "SELECT DISTINCT livro_id FROM biblia_versiculos WHERE versao_id = $1",
                version_id,
            )
            return [row["livro_id"] for row in rows]

    async def list_existing_book_ids(self, version_id: str) -> set[str]:
        async with conn() as c:
            rows = await c.fetch("SELECT id FROM biblia_livros WHERE versao_id = $1", version_id)
            return {row["id"] for row in rows}

    async def insert_book(self, book: BibleBook) -> bool:
        """
        Insert a book row.

        Returns:
            False if the row already existed
        """
        async with conn() as c:
            status = await c.execute(
                """
                INSERT INTO biblia_livros (id, versao_id, nome, abreviacao, ordinal)
                VALUES ($1, $2, $3, $4, $5)
                ON CONFLICT (id, versao_id) DO NOTHING
                """,
                book.id,
                book.versao_id,
                book.nome,
                book.abreviacao,
                book.ordinal,
            )
            return status.endswith(" 1")

    async def list_books(self, version_id: str) -> list[BibleBook]:
        """Books of a version ordered by canonical position."""
        async with conn() as c:
            rows = await c.fetch(
                "SELECT * FROM biblia_livros WHERE versao_id = $1 ORDER BY ordinal, id",
                version_id,
            )
            return [_row_to_book(row) for row in rows]

    async def get_book_name(self, version_id: str, book_id: str) -> str | None:
        async with conn() as c:
            return await c.fetchval(
                "SELECT nome FROM biblia_livros WHERE id = $1 AND versao_id = $2",
                book_id,
                version_id,
            )

    # -- verses --------------------------------------------------------------

    async def list_chapter_numbers(self, version_id: str, book_id: str) -> list[int]:
        """Distinct chapter numbers of a book, ascending."""
        async with conn() as c:
            rows = await c.fetch(
                """
                SELECT DISTINCT capitulo FROM biblia_versiculos
                WHERE versao_id = $1 AND livro_id = $2
                ORDER BY capitulo
                """,
                version_id,
                book_id,
            )
            return [row["capitulo"] for row in rows]

    async def list_verses(self, version_id: str, book_id: str, chapter: int) -> list[Verse]:
        async with conn() as c:
            rows = await c.fetch(
                """
                SELECT versiculo, texto FROM biblia_versiculos
                WHERE versao_id = $1 AND livro_id = $2 AND capitulo = $3
                ORDER BY versiculo
                """,
                version_id,
                book_id,
                chapter,
            )
            return [Verse(versiculo=row["versiculo"], texto=row["texto"]) for row in rows]

    async def insert_verses(self, version_id: str, verses: list[tuple[str, int, int, str]]) -> None:
        """Insert (book_id, chapter, verse, text) rows, skipping ones already present."""
        async with conn() as c:
            await c.executemany(
                """
                INSERT INTO biblia_versiculos (versao_id, livro_id, capitulo, versiculo, texto)
                VALUES ($1, $2, $3, $4, $5)
                ON CONFLICT (versao_id, livro_id, capitulo, versiculo) DO NOTHING
                """,
                [(version_id, *row) for row in verses],
            )

    async def count_verses(self, version_id: str) -> int:
        async with conn() as c:
            return await c.fetchval(
                "SELECT count(*) FROM biblia_versiculos WHERE versao_id = $1",
                version_id,
            )

    async def list_imported_version_ids(self) -> set[str]:
        """Versions with at least one verse."""
        async with conn() as c:
            rows = await c.fetch("SELECT DISTINCT versao_id FROM biblia_versiculos")
            return {row["versao_id"] for row in rows}

    # -- search --------------------------------------------------------------

    async def find_verses(
        self,
        version_id: str,
        book_id: str,
        chapter: int,
        verse: int | None = None,
        limit: int = 20,
    ) -> list[VerseHit]:
        """Verses of one chapter, or the single verse when `verse` is given."""
        async with conn() as c:
            rows = await c.fetch(
                """
                SELECT v.livro_id, l.nome AS livro_nome, v.capitulo, v.versiculo, v.texto
                FROM biblia_versiculos v
                LEFT JOIN biblia_livros l ON l.id = v.livro_id AND l.versao_id = v.versao_id
                WHERE v.versao_id = $1 AND v.livro_id = $2 AND v.capitulo = $3
                  AND ($4::int IS NULL OR v.versiculo = $4)
                ORDER BY v.versiculo
                LIMIT $5
                """,
                version_id,
                book_id,
                chapter,
                verse,
                limit,
            )
            return [_row_to_hit(row) for row in rows]

    async def search_verses(self, version_id: str, text: str, limit: int = 15) -> list[VerseHit]:
        """
        Full-text search (Portuguese stemming); every word must match.

        Results are in canonical order.
        """
        async with conn() as c:
            rows = await c.fetch(
                """
                SELECT v.livro_id, l.nome AS livro_nome, v.capitulo, v.versiculo, v.texto
                FROM biblia_versiculos v
                LEFT JOIN biblia_livros l ON l.id = v.livro_id AND l.versao_id = v.versao_id
                WHERE v.versao_id = $1
                  AND to_tsvector('portuguese', v.texto) @@ plainto_tsquery('portuguese', $2)
                ORDER BY l.ordinal NULLS LAST, v.livro_id, v.capitulo, v.versiculo
                LIMIT $3
                """,
                version_id,
                text,
                limit,
            )
            return [_row_to_hit(row) for row in rows]
