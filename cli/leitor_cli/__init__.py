"""Leitor CLI — a terminal Bible reader."""

__version__ = "0.1.0"
