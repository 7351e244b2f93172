"""Boundary between workflow modes and the origin/destination adapters."""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ..config.config import Config, WorkflowConfig
from ..console import Console
from ..models.change import Author, Change, Metadata, WriterResult
from ..models.changes import Changes
from ..models.history import ChangeReader


class RunHelper(ABC):
    """Resolved references, authoring defaults and the migrate primitive."""

    def __init__(self, config: Optional[Config] = None):
        """Initialize run helper.

        Args:
            config: Configuration supplying authoring defaults and workflow
                overrides
        """
        self.config = config or Config()

    @abstractmethod
    def resolved_reference(self) -> str:
        """Origin reference being migrated."""

    @abstractmethod
    def changes_since_last_import(self) -> Sequence[Change]:
        """Origin changes not yet imported, oldest first.

        Raises:
            RepoError: If the last imported reference cannot be resolved
        """

    @abstractmethod
    def reader(self) -> ChangeReader:
        """Reader over the history used to look for a baseline."""

    @abstractmethod
    def migrate(
        self,
        ref: str,
        console: Console,
        metadata: Metadata,
        changes: Changes,
        baseline: Optional[str] = None,
    ) -> WriterResult:
        """Transform the origin tree at ref and write it to the destination.

        Raises:
            EmptyChangeError: If the write produces no delta
        """

    def default_author(self) -> Author:
        """Author used when individual change authors are discarded."""
        return Author.parse(self.config.authoring.default_author)

    @abstractmethod
    def destination_origin_label_name(self) -> str:
        """Label the destination uses to record the origin reference."""

    @abstractmethod
    def console(self) -> Console:
        """Console for operator output."""

    def workflow_options(self) -> WorkflowConfig:
        """Per-run workflow overrides."""
        return self.config.workflow
