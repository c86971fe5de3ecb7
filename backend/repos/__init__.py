"""
Repository layer for Leitor.

All SQL lives here and ONLY here. No database access outside this module.
"""

from backend.repos.bible_repo import BibleRepo

__all__ = [
    "BibleRepo",
]
