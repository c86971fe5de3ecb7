"""Authentication models for project keys."""

from __future__ import annotations

from pydantic import BaseModel


class Caller(BaseModel):
    """Who is calling a function. Built from verified JWT claims."""

    role: str
