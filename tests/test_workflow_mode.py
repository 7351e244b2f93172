"""Tests for workflow modes."""

import pytest

from tree_migrate.config.config import Config, WorkflowConfig
from tree_migrate.console import ProgressPrefixConsole
from tree_migrate.exceptions import (
    ChangeRejectedError,
    EmptyChangeError,
    MigrateError,
    MigrateValidationError,
    ModeNotImplementedError,
    RepoError,
)
from tree_migrate.migration import RunHelper, WorkflowEngine, WorkflowMode
from tree_migrate.models.change import Author, WriterResult
from tree_migrate.models.changes import LazyChanges

from conftest import ORIGIN_LABEL, FakeRunHelper, RecordingConsole, make_change


class TestSquashMode:
    """Test SQUASH workflow mode."""

    def test_single_migrate_call(self, changes):
        """Test squash writes once with the resolved reference."""
        helper = FakeRunHelper(changes, resolved_ref='c3')

        result = WorkflowMode.SQUASH.run(helper)

        assert helper.migrated_refs() == ['c3']
        assert result.migrated == ['c3']
        assert result.success

    def test_uses_default_author_and_squash_message(self, changes):
        """Test squash discards individual authors."""
        helper = FakeRunHelper(
            changes, options=WorkflowConfig(squash_message='Import\n')
        )

        WorkflowMode.SQUASH.run(helper)

        metadata = helper.calls[0].metadata
        assert metadata.message == 'Import\n'
        assert metadata.author == helper.default_author()

    def test_changes_are_lazy(self, changes):
        """Test history is only resolved when the changes are read."""
        helper = FakeRunHelper(changes)

        WorkflowMode.SQUASH.run(helper)

        view = helper.calls[0].changes
        assert isinstance(view, LazyChanges)
        assert helper.history_calls == 0
        assert [c.ref for c in view.current] == ['c1', 'c2', 'c3']
        assert view.migrated == ()
        assert helper.history_calls == 1

    def test_unresolvable_history_is_empty(self, broken_history):
        """Test squash still writes when history cannot be resolved."""
        helper = FakeRunHelper(
            [make_change('c1')], resolved_ref='c1', history_error=broken_history
        )

        WorkflowMode.SQUASH.run(helper)

        assert helper.calls[0].changes.current == ()
        assert len(helper.console().warnings()) == 1


class TestIterativeMode:
    """Test ITERATIVE workflow mode."""

    def test_migrates_each_change_in_order(self, changes):
        """Test one call per change, oldest first, with own metadata."""
        helper = FakeRunHelper(changes)

        result = WorkflowMode.ITERATIVE.run(helper)

        assert helper.migrated_refs() == ['c1', 'c2', 'c3']
        assert result.migrated == ['c1', 'c2', 'c3']
        for change, call in zip(changes, helper.calls):
            assert call.metadata.message == change.message
            assert call.metadata.author == change.author
            assert call.changes.current == (change,)

    def test_migrated_history_grows(self, changes):
        """Test later changes see the earlier ones as migrated."""
        helper = FakeRunHelper(changes)

        WorkflowMode.ITERATIVE.run(helper)

        assert helper.calls[0].changes.migrated == ()
        assert [c.ref for c in helper.calls[2].changes.migrated] == ['c2', 'c1']

    def test_console_prefix(self, changes):
        """Test output of each change is prefixed with its position."""
        helper = FakeRunHelper(changes)

        WorkflowMode.ITERATIVE.run(helper)

        assert isinstance(helper.calls[1].console, ProgressPrefixConsole)
        assert ('progress', 'Change 2 of 3 (c2): Writing change') in (
            helper.console().messages
        )

    def test_user_declines_continuation(self, changes):
        """Test declining after change 1 stops the run."""
        helper = FakeRunHelper(
            changes,
            results={'c1': WriterResult.PROMPT_TO_CONTINUE},
            console=RecordingConsole(answers=[False]),
        )

        with pytest.raises(ChangeRejectedError) as exc_info:
            WorkflowMode.ITERATIVE.run(helper)

        assert helper.migrated_refs() == ['c1']
        assert 'Change 1 of 3 (c1)' in str(exc_info.value)
        assert exc_info.value.migrated == ['c1']
        assert exc_info.value.last_change == 'c1'
        assert not isinstance(exc_info.value, MigrateValidationError)
        assert helper.console().prompts == ['Continue importing next change?']

    def test_user_accepts_continuation(self, changes):
        """Test accepting the prompt continues with the next change."""
        helper = FakeRunHelper(
            changes,
            results={'c1': WriterResult.PROMPT_TO_CONTINUE},
            console=RecordingConsole(answers=[True]),
        )

        result = WorkflowMode.ITERATIVE.run(helper)

        assert result.migrated == ['c1', 'c2', 'c3']

    def test_no_prompt_after_last_change(self, changes):
        """Test the last change never asks for confirmation."""
        helper = FakeRunHelper(
            changes, results={'c3': WriterResult.PROMPT_TO_CONTINUE}
        )

        result = WorkflowMode.ITERATIVE.run(helper)

        assert helper.console().prompts == []
        assert result.success

    def test_empty_change_is_skipped(self, changes):
        """Test an empty change warns and the run goes on."""
        helper = FakeRunHelper(changes, empty=['c2'])

        result = WorkflowMode.ITERATIVE.run(helper)

        assert helper.migrated_refs() == ['c1', 'c2', 'c3']
        assert result.migrated == ['c1', 'c3']
        assert result.skipped_empty == ['c2']
        assert result.success
        assert helper.console().warnings() == ['Migration of c2 produced no change']

    def test_write_error_propagates(self, changes):
        """Test failures other than empty changes abort the run."""
        helper = FakeRunHelper(changes)

        def failing_migrate(ref, *args, **kwargs):
            helper.calls.append(ref)
            raise RepoError('push rejected')

        helper.migrate = failing_migrate

        with pytest.raises(RepoError):
            WorkflowMode.ITERATIVE.run(helper)
        assert helper.calls == ['c1']

    def test_nothing_to_import(self):
        """Test an empty history migrates nothing."""
        helper = FakeRunHelper([])

        result = WorkflowMode.ITERATIVE.run(helper)

        assert helper.calls == []
        assert result.migrated == []


class TestChangeRequestMode:
    """Test CHANGE_REQUEST workflow mode."""

    def _history(self):
        return [
            make_change('head'),
            make_change('d3', {'other': '1'}),
            make_change('d2', {ORIGIN_LABEL: 'X'}),
            make_change('d1', {ORIGIN_LABEL: 'Y'}),
        ]

    def test_baseline_from_history(self):
        """Test the most recent origin label wins."""
        history = self._history()
        helper = FakeRunHelper(resolved_ref='head', history=history)

        result = WorkflowMode.CHANGE_REQUEST.run(helper)

        assert helper.calls[0].baseline == 'X'
        assert result.baseline == 'X'

    def test_scan_stops_on_first_match(self):
        """Test history is not visited past the first match."""
        history = self._history()
        helper = FakeRunHelper(resolved_ref='head', history=history)
        visited = []
        reader = helper.reader()
        original_visit = reader.visit_changes

        def recording_visit(ref, visitor):
            def wrapped(change):
                visited.append(change.ref)
                return visitor(change)

            original_visit(ref, wrapped)

        reader.visit_changes = recording_visit

        WorkflowMode.CHANGE_REQUEST.run(helper)

        assert visited == ['head', 'd3', 'd2']

    def test_explicit_baseline_overrides_history(self):
        """Test a configured baseline skips the history scan."""
        helper = FakeRunHelper(
            resolved_ref='head',
            history=self._history(),
            options=WorkflowConfig(change_baseline='forced'),
        )

        WorkflowMode.CHANGE_REQUEST.run(helper)

        assert helper.calls[0].baseline == 'forced'

    def test_metadata_from_change(self):
        """Test the change keeps its own message and author."""
        history = self._history()
        helper = FakeRunHelper(resolved_ref='head', history=history)

        WorkflowMode.CHANGE_REQUEST.run(helper)

        call = helper.calls[0]
        assert call.metadata.message == history[0].message
        assert call.metadata.author == history[0].author
        assert call.changes.current == (history[0],)
        assert call.changes.migrated == ()

    def test_no_baseline_found(self):
        """Test missing baseline tells the operator which flag to use."""
        helper = FakeRunHelper(
            resolved_ref='head', history=[make_change('head'), make_change('d1')]
        )

        with pytest.raises(MigrateValidationError) as exc_info:
            WorkflowMode.CHANGE_REQUEST.run(helper)

        assert '--change-request-parent' in str(exc_info.value)
        assert helper.calls == []

    def test_unresolvable_change_fails(self):
        """Test history errors are not absorbed outside the lazy view."""
        helper = FakeRunHelper(
            resolved_ref='missing',
            history=[make_change('head')],
            options=WorkflowConfig(change_baseline='forced'),
        )

        with pytest.raises(RepoError):
            WorkflowMode.CHANGE_REQUEST.run(helper)

    def test_empty_change_is_reported(self):
        """Test an empty change request is a failure."""
        helper = FakeRunHelper(
            resolved_ref='head', history=self._history(), empty=['head']
        )

        with pytest.raises(EmptyChangeError):
            WorkflowMode.CHANGE_REQUEST.run(helper)


class TestMirrorMode:
    """Test MIRROR workflow mode."""

    def test_not_implemented(self, changes):
        """Test mirror fails with its own error kind."""
        helper = FakeRunHelper(changes)

        with pytest.raises(ModeNotImplementedError) as exc_info:
            WorkflowMode.MIRROR.run(helper)

        assert isinstance(exc_info.value, NotImplementedError)
        assert not isinstance(exc_info.value, MigrateValidationError)
        assert "'MIRROR' not implemented" in str(exc_info.value)
        assert helper.calls == []


class TestWorkflowModeEnum:
    """Test mode selection."""

    def test_modes(self):
        """Test every mode has a description and a strategy."""
        assert [m.value for m in WorkflowMode] == [
            'SQUASH',
            'ITERATIVE',
            'CHANGE_REQUEST',
            'MIRROR',
        ]
        for mode in WorkflowMode:
            assert mode.description
            assert mode.strategy().mode == mode.value

    def test_lookup_by_name(self):
        """Test modes can be selected from configuration strings."""
        assert WorkflowMode('ITERATIVE') is WorkflowMode.ITERATIVE


class TestWorkflowEngine:
    """Test workflow engine."""

    def test_runs_configured_mode(self, changes):
        """Test the engine uses the configured mode by default."""
        engine = WorkflowEngine(Config(workflow={'mode': 'iterative'}))
        helper = FakeRunHelper(changes)

        result = engine.run(helper)

        assert result.mode == 'ITERATIVE'
        assert helper.migrated_refs() == ['c1', 'c2', 'c3']

    def test_explicit_mode(self, changes):
        """Test an explicit mode overrides the configuration."""
        helper = FakeRunHelper(changes)

        result = WorkflowEngine().run(helper, WorkflowMode.SQUASH)

        assert result.mode == 'SQUASH'
        assert len(helper.calls) == 1

    def test_reraises_failures(self, changes):
        """Test failures propagate to the caller."""
        with pytest.raises(MigrateError):
            WorkflowEngine().run(FakeRunHelper(changes), 'mirror')

    def test_configured_change_baseline(self):
        """Test the configured baseline is used when history has no label."""
        config = Config(
            workflow={'mode': 'CHANGE_REQUEST', 'change_baseline': 'B'}
        )
        helper = FakeRunHelper(
            resolved_ref='head', history=[make_change('head'), make_change('d1')]
        )

        result = WorkflowEngine(config).run(helper)

        assert helper.calls[0].baseline == 'B'
        assert result.baseline == 'B'

    def test_configured_squash_metadata(self, changes):
        """Test squash uses the configured message and default author."""
        config = Config(
            workflow={'mode': 'SQUASH', 'squash_message': 'Custom\n'},
            authoring={'default_author': 'Import Bot <bot@example.com>'},
        )
        helper = FakeRunHelper(changes)

        WorkflowEngine(config).run(helper)

        metadata = helper.calls[0].metadata
        assert metadata.message == 'Custom\n'
        assert metadata.author == Author(name='Import Bot', email='bot@example.com')


class ConfigBackedRunHelper(FakeRunHelper):
    """Run helper relying on the configuration-backed defaults."""

    default_author = RunHelper.default_author
    workflow_options = RunHelper.workflow_options


class TestRunHelperDefaults:
    """Test run helper defaults taken from configuration."""

    def test_default_author_from_config(self, changes):
        config = Config(authoring={'default_author': 'Jane Doe <jane@example.com>'})
        helper = ConfigBackedRunHelper(changes, config=config)

        assert helper.default_author() == Author(name='Jane Doe', email='jane@example.com')

    def test_workflow_options_from_config(self):
        config = Config(workflow={'change_baseline': 'base'})
        helper = ConfigBackedRunHelper(
            resolved_ref='head', history=[make_change('head')], config=config
        )

        WorkflowMode.CHANGE_REQUEST.run(helper)

        assert helper.calls[0].baseline == 'base'

    def test_squash_without_engine(self, changes):
        """Test squash falls back to the helper's own configuration."""
        config = Config(
            workflow={'squash_message': 'From helper\n'},
            authoring={'default_author': 'Helper <helper@example.com>'},
        )
        helper = ConfigBackedRunHelper(changes, config=config)

        WorkflowMode.SQUASH.run(helper)

        metadata = helper.calls[0].metadata
        assert metadata.message == 'From helper\n'
        assert str(metadata.author) == 'Helper <helper@example.com>'
