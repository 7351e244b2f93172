"""Tree diff/patch engine backed by git."""

from .diff import DiffEngine, GitDiffEngine, diff, patch

__all__ = ['DiffEngine', 'GitDiffEngine', 'diff', 'patch']
