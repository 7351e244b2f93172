"""Views over the changes handled by a migration."""

import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable, Optional, Tuple

from loguru import logger

from ..exceptions import RepoError
from .change import Change

if TYPE_CHECKING:
    from ..migration.run_helper import RunHelper


class Changes(ABC):
    """Changes about to be migrated plus those already migrated in this run."""

    @property
    @abstractmethod
    def current(self) -> Tuple[Change, ...]:
        """Changes being migrated, oldest first."""

    @property
    @abstractmethod
    def migrated(self) -> Tuple[Change, ...]:
        """Changes already migrated in this run."""


class ComputedChanges(Changes):
    """Changes supplied eagerly at construction."""

    def __init__(self, current: Iterable[Change], migrated: Iterable[Change] = ()):
        self._current = tuple(current)
        self._migrated = tuple(migrated)

        current_refs = {change.ref for change in self._current}
        overlap = [c.ref for c in self._migrated if c.ref in current_refs]
        if overlap:
            raise ValueError(
                f'Changes cannot be both current and migrated: {", ".join(overlap)}'
            )

    @property
    def current(self) -> Tuple[Change, ...]:
        return self._current

    @property
    def migrated(self) -> Tuple[Change, ...]:
        return self._migrated


class LazyChanges(Changes):
    """Changes since the last import, computed on first access.

    Transformations may never look at the history, so resolving it is
    deferred. A history that cannot be resolved degrades to an empty
    sequence and a warning instead of failing the migration.
    """

    def __init__(self, run_helper: 'RunHelper'):
        self._run_helper = run_helper
        self._lock = threading.Lock()
        self._cached: Optional[Tuple[Change, ...]] = None
        self.warning: Optional[str] = None
        self.logger = logger.bind(component='LazyChanges')

    @property
    def current(self) -> Tuple[Change, ...]:
        with self._lock:
            if self._cached is None:
                self._cached = self._compute()
            return self._cached

    @property
    def migrated(self) -> Tuple[Change, ...]:
        return ()

    def _compute(self) -> Tuple[Change, ...]:
        try:
            return tuple(self._run_helper.changes_since_last_import())
        except RepoError as e:
            self.warning = (
                'Previous reference could not be resolved. '
                f'Cannot compute the set of changes in the migration: {e}'
            )
            self.logger.warning(self.warning)
            self._run_helper.console().warn(self.warning)
            return ()
