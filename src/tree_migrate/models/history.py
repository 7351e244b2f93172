"""Traversal of a repository change history."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Dict, Iterable, List

from ..exceptions import RepoError
from .change import Change


class VisitResult(str, Enum):
    """Whether a history traversal should go on."""

    CONTINUE = 'continue'
    TERMINATE = 'terminate'


ChangesVisitor = Callable[[Change], VisitResult]


class ChangeReader(ABC):
    """Read-only access to the change history of a repository."""

    @abstractmethod
    def visit_changes(self, start_ref: str, visitor: ChangesVisitor) -> None:
        """Walk history backwards from start_ref, most recent change first.

        Stops when history is exhausted or the visitor returns
        VisitResult.TERMINATE.
        """

    @abstractmethod
    def change(self, ref: str) -> Change:
        """Return the change for ref.

        Raises:
            RepoError: If ref cannot be resolved
        """


class SequenceChangeReader(ChangeReader):
    """Change reader over an in-memory history ordered most recent first."""

    def __init__(self, history: Iterable[Change]):
        self._history: List[Change] = list(history)
        self._index: Dict[str, int] = {}
        for position, change in enumerate(self._history):
            self._index.setdefault(change.ref, position)

    def visit_changes(self, start_ref: str, visitor: ChangesVisitor) -> None:
        if start_ref not in self._index:
            raise RepoError(f"Cannot find reference '{start_ref}'")
        for change in self._history[self._index[start_ref]:]:
            if visitor(change) == VisitResult.TERMINATE:
                return

    def change(self, ref: str) -> Change:
        if ref not in self._index:
            raise RepoError(f"Cannot find reference '{ref}'")
        return self._history[self._index[ref]]
