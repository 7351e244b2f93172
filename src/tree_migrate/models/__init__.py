"""Change history models."""

from .change import Author, Change, Metadata, WriterResult
from .changes import Changes, ComputedChanges, LazyChanges
from .history import ChangeReader, SequenceChangeReader, VisitResult

__all__ = [
    'Author',
    'Change',
    'Metadata',
    'WriterResult',
    'Changes',
    'ComputedChanges',
    'LazyChanges',
    'ChangeReader',
    'SequenceChangeReader',
    'VisitResult',
]
