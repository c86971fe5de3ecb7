"""Bible tables: versions, books and verses.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from alembic import op

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.execute("""
        CREATE TABLE biblia_versoes (
            id TEXT PRIMARY KEY,
            nome TEXT NOT NULL,
            abreviacao TEXT NOT NULL,
            editora TEXT,
            ano_publicacao INTEGER,
            ordem_exibicao INTEGER NOT NULL DEFAULT 0,
            ativa BOOLEAN NOT NULL DEFAULT true,
            idioma TEXT NOT NULL DEFAULT 'pt',
            codigo_versao TEXT,
            descricao TEXT,
            created_at TIMESTAMPTZ DEFAULT now()
        );
    """)

    # One row per (book, version); rows are derived from imported verses.
    op.execute("""
        CREATE TABLE biblia_livros (
            id TEXT NOT NULL,
            versao_id TEXT NOT NULL REFERENCES biblia_versoes(id) ON DELETE CASCADE,
            nome TEXT NOT NULL,
            abreviacao TEXT NOT NULL,
            ordinal INTEGER NOT NULL,
            created_at TIMESTAMPTZ DEFAULT now(),
            PRIMARY KEY (id, versao_id)
        );
    """)

    op.execute("""
        CREATE TABLE biblia_versiculos (
            id BIGSERIAL PRIMARY KEY,
            versao_id TEXT NOT NULL REFERENCES biblia_versoes(id) ON DELETE CASCADE,
            livro_id TEXT NOT NULL,
            capitulo INTEGER NOT NULL CHECK (capitulo > 0),
            versiculo INTEGER NOT NULL CHECK (versiculo > 0),
            texto TEXT NOT NULL,
            UNIQUE (versao_id, livro_id, capitulo, versiculo)
        );
    """)

    op.execute("""
        CREATE INDEX idx_biblia_versiculos_livro
        ON biblia_versiculos (versao_id, livro_id, capitulo);
    """)

    op.execute("""
        CREATE INDEX idx_biblia_livros_ordinal
        ON biblia_livros (versao_id, ordinal);
    """)


def downgrade():
    op.execute("DROP TABLE IF EXISTS biblia_versiculos;")
    op.execute("DROP TABLE IF EXISTS biblia_livros;")
    op.execute("DROP TABLE IF EXISTS biblia_versoes;")
