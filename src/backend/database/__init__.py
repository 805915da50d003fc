"""Database package for the Gita problem search backend."""

from .models import (
    Base,
    Chapter,
    Shlok,
    Problem,
    ShlokProblem,
)

__all__ = [
    "Base",
    "Chapter",
    "Shlok",
    "Problem",
    "ShlokProblem",
]
