"""Shared fixtures for Tree Migrate tests."""

from typing import Dict, List, Optional, Sequence

import pytest

from tree_migrate.config.config import Config, WorkflowConfig
from tree_migrate.console import Console
from tree_migrate.exceptions import EmptyChangeError, RepoError
from tree_migrate.migration.run_helper import RunHelper
from tree_migrate.models.change import Author, Change, Metadata, WriterResult
from tree_migrate.models.changes import Changes
from tree_migrate.models.history import ChangeReader, SequenceChangeReader

ORIGIN_LABEL = 'origin-ref'


class RecordingConsole(Console):
    """Console that records messages and answers prompts from a script."""

    def __init__(self, answers: Optional[List[bool]] = None):
        self.messages: List[tuple] = []
        self.prompts: List[str] = []
        self.answers = list(answers or [])

    def info(self, message: str) -> None:
        self.messages.append(('info', message))

    def warn(self, message: str) -> None:
        self.messages.append(('warn', message))

    def error(self, message: str) -> None:
        self.messages.append(('error', message))

    def progress(self, message: str) -> None:
        self.messages.append(('progress', message))

    def prompt_confirmation(self, message: str) -> bool:
        self.prompts.append(message)
        return self.answers.pop(0) if self.answers else False

    def warnings(self) -> List[str]:
        return [m for kind, m in self.messages if kind == 'warn']


class MigrateCall:
    """Arguments of one RunHelper.migrate() call."""

    def __init__(self, ref, console, metadata, changes, baseline):
        self.ref = ref
        self.console = console
        self.metadata = metadata
        self.changes = changes
        self.baseline = baseline


class FakeRunHelper(RunHelper):
    """In-memory run helper recording migrate calls."""

    def __init__(
        self,
        changes: Sequence[Change] = (),
        resolved_ref: Optional[str] = None,
        history: Sequence[Change] = (),
        results: Optional[Dict[str, WriterResult]] = None,
        empty: Sequence[str] = (),
        options: Optional[WorkflowConfig] = None,
        console: Optional[RecordingConsole] = None,
        history_error: Optional[Exception] = None,
        config: Optional[Config] = None,
    ):
        super().__init__(config)
        self.changes = list(changes)
        self.resolved_ref = resolved_ref or (
            self.changes[-1].ref if self.changes else 'HEAD'
        )
        self._reader = SequenceChangeReader(history or list(reversed(self.changes)))
        self.results = results or {}
        self.empty = set(empty)
        self.options = options or WorkflowConfig()
        self._console = console or RecordingConsole()
        self.history_error = history_error
        self.history_calls = 0
        self.calls: List[MigrateCall] = []

    def resolved_reference(self) -> str:
        return self.resolved_ref

    def changes_since_last_import(self) -> Sequence[Change]:
        self.history_calls += 1
        if self.history_error:
            raise self.history_error
        return list(self.changes)

    def reader(self) -> ChangeReader:
        return self._reader

    def migrate(
        self,
        ref: str,
        console: Console,
        metadata: Metadata,
        changes: Changes,
        baseline: Optional[str] = None,
    ) -> WriterResult:
        self.calls.append(MigrateCall(ref, console, metadata, changes, baseline))
        console.progress('Writing change')
        if ref in self.empty:
            raise EmptyChangeError(f'Migration of {ref} produced no change')
        return self.results.get(ref, WriterResult.OK)

    def default_author(self) -> Author:
        return Author(name='Default', email='default@example.com')

    def destination_origin_label_name(self) -> str:
        return ORIGIN_LABEL

    def console(self) -> RecordingConsole:
        return self._console

    def workflow_options(self) -> WorkflowConfig:
        return self.options

    def migrated_refs(self) -> List[str]:
        return [call.ref for call in self.calls]


def make_change(ref: str, labels: Optional[Dict[str, str]] = None) -> Change:
    return Change(
        ref=ref,
        author=Author(name=f'Author {ref}', email=f'{ref}@example.com'),
        message=f'Change {ref}\n\nBody of {ref}.',
        labels=labels or {},
    )


@pytest.fixture
def changes():
    return [make_change('c1'), make_change('c2'), make_change('c3')]


@pytest.fixture
def broken_history():
    return RepoError("Cannot find reference 'last-import'")
