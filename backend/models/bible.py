"""Bible models: versions, books, verses and the function request bodies."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class BibleVersion(BaseModel):
    """Core version model. Represents a row in the biblia_versoes table."""

    id: str
    nome: str
    abreviacao: str
    editora: str | None = None
    ano_publicacao: int | None = None
    ordem_exibicao: int = 0
    ativa: bool = True
    idioma: str = "pt"
    codigo_versao: str | None = None
    descricao: str | None = None


class BibleBook(BaseModel):
    """A row in the biblia_livros table."""

    id: str
    versao_id: str
    nome: str
    abreviacao: str
    ordinal: int


class Verse(BaseModel):
    """A row in the biblia_versiculos table (only the fields the reader uses)."""

    versiculo: int
    texto: str


class VerseHit(BaseModel):
    """A verse found by reference or text search, with its book name when structured."""

    livro_id: str
    livro_nome: str | None = None
    capitulo: int
    versiculo: int
    texto: str


class BookInfo(BaseModel):
    """Canonical name, abbreviation and position of a book id."""

    nome: str
    abreviacao: str
    ordinal: int


# -- request bodies ----------------------------------------------------------


class BibleFunctionRequest(BaseModel):
    """What clients send to /functions/v1/bible-import-enhanced."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    action: str | None = None
    version_id: str | None = Field(default=None, alias="versionId")
    bible_id: str | None = Field(default=None, alias="bibleId")
    book_id: str | None = Field(default=None, alias="bookId")
    chapter_id: str | None = Field(default=None, alias="chapterId")
    query: str | None = None

    def resolved_version(self, default: str) -> str:
        return self.version_id or self.bible_id or default


class ChapterContentRequest(BaseModel):
    """What clients send to /functions/v1/get-chapter-content."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    bible_id: str | None = Field(default=None, alias="bibleId")
    chapter_id: str | None = Field(default=None, alias="chapterId")


# -- response bodies ---------------------------------------------------------


class BookResponse(BaseModel):
    id: str
    nome: str
    abreviacao: str
    testamento: str
    total_capitulos: int = 0


class ChapterResponse(BaseModel):
    id: str
    number: str
    bibleId: str
    bookId: str


class ChapterContent(BaseModel):
    id: str
    number: str
    reference: str
    content: str
    copyright: str


class VerseResult(BaseModel):
    versao_id: str
    versao_nome: str
    livro_id: str
    livro_nome: str
    capitulo: int
    versiculo: int
    texto: str


class RemoteChapter(BaseModel):
    """A chapter as returned by the remote scripture API."""

    model_config = ConfigDict(extra="ignore")

    id: str
    bibleId: str | None = None
    bookId: str | None = None
    number: str | None = None
    reference: str = ""
    verseCount: int | None = None
    content: str = ""
