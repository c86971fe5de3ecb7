"""Full-text index for verse search.

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""

from alembic import op

# revision identifiers, used by Alembic.
revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None


def upgrade():
    # Must match the expression used by BibleRepo.search_verses.
    op.execute("""
        CREATE INDEX idx_biblia_versiculos_texto
        ON biblia_versiculos USING GIN (to_tsvector('portuguese', texto));
    """)


def downgrade():
    op.execute("DROP INDEX IF EXISTS idx_biblia_versiculos_texto;")
