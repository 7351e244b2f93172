"""Workflow modes deciding which origin changes get written and how."""

from abc import ABC, abstractmethod
from collections import deque
from datetime import datetime
from enum import Enum
from typing import Deque, List, Optional

from loguru import logger
from pydantic import BaseModel, Field

from ..config.config import CHANGE_REQUEST_PARENT_FLAG, Config, WorkflowConfig
from ..console import ProgressPrefixConsole
from ..exceptions import (
    ChangeRejectedError,
    EmptyChangeError,
    MigrateValidationError,
    ModeNotImplementedError,
)
from ..models.change import Author, Change, Metadata, WriterResult
from ..models.changes import ComputedChanges, LazyChanges
from ..models.history import VisitResult
from .run_helper import RunHelper


class WorkflowResult(BaseModel):
    """Outcome of a workflow run."""

    mode: str = Field(..., description='Workflow mode that ran')
    migrated: List[str] = Field(
        default_factory=list, description='References written to the destination'
    )
    skipped_empty: List[str] = Field(
        default_factory=list, description='References that produced no change'
    )
    baseline: Optional[str] = Field(
        default=None, description='Destination baseline used, if any'
    )
    started_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = Field(default=None)

    class Config:
        """Pydantic configuration."""

        json_encoders = {datetime: lambda v: v.isoformat() if v else None}

    @property
    def success(self) -> bool:
        return self.completed_at is not None


class WorkflowStrategy(ABC):
    """Algorithm behind a single workflow mode."""

    mode: str = ''

    def __init__(self, config: Optional[Config] = None):
        """Initialize workflow strategy.

        Args:
            config: Run configuration. When omitted the workflow options and
                default author come from the run helper.
        """
        self.config = config
        self.logger = logger.bind(component=self.__class__.__name__)

    @abstractmethod
    def run(self, helper: RunHelper) -> WorkflowResult:
        """Run the workflow, calling helper.migrate() zero or more times."""

    def _result(self) -> WorkflowResult:
        return WorkflowResult(mode=self.mode)

    def _options(self, helper: RunHelper) -> WorkflowConfig:
        if self.config is not None:
            return self.config.workflow
        return helper.workflow_options()

    def _default_author(self, helper: RunHelper) -> Author:
        if self.config is not None:
            return Author.parse(self.config.authoring.default_author)
        return helper.default_author()


class SquashStrategy(WorkflowStrategy):
    """Single destination change with the new tree state."""

    mode = 'SQUASH'

    def run(self, helper: RunHelper) -> WorkflowResult:
        result = self._result()
        ref = helper.resolved_reference()
        self.logger.info(f'Squashing changes up to {ref}')

        helper.migrate(
            ref,
            helper.console(),
            # Individual authors are discarded when squashing
            Metadata(
                message=self._options(helper).squash_message,
                author=self._default_author(helper),
            ),
            LazyChanges(helper),
        )

        result.migrated.append(ref)
        result.completed_at = datetime.now()
        return result


class IterativeStrategy(WorkflowStrategy):
    """One destination change per origin change, oldest first."""

    mode = 'ITERATIVE'

    def run(self, helper: RunHelper) -> WorkflowResult:
        result = self._result()
        changes = list(helper.changes_since_last_import())
        total = len(changes)
        self.logger.info(f'Importing {total} change(s) iteratively')

        migrated: Deque[Change] = deque()
        for number, change in enumerate(changes, start=1):
            prefix = f'Change {number} of {total} ({change.ref}): '
            try:
                write_result = helper.migrate(
                    change.ref,
                    ProgressPrefixConsole(prefix, helper.console()),
                    Metadata(message=change.message, author=change.author),
                    ComputedChanges([change], migrated),
                )
                result.migrated.append(change.ref)
            except EmptyChangeError as e:
                helper.console().warn(str(e))
                self.logger.warning(f'{prefix}{e}')
                result.skipped_empty.append(change.ref)
                write_result = WriterResult.OK
            migrated.appendleft(change)

            if write_result == WriterResult.PROMPT_TO_CONTINUE and number < total:
                # Prompt on the plain console so the question stands out
                if not helper.console().prompt_confirmation(
                    'Continue importing next change?'
                ):
                    message = f'Iterative workflow aborted by user after: {prefix}'
                    helper.console().warn(message)
                    raise ChangeRejectedError(
                        message, migrated=result.migrated, last_change=change.ref
                    )

        result.completed_at = datetime.now()
        return result


class ChangeRequestStrategy(WorkflowStrategy):
    """Single origin change applied on top of a destination baseline."""

    mode = 'CHANGE_REQUEST'

    def run(self, helper: RunHelper) -> WorkflowResult:
        result = self._result()
        ref = helper.resolved_reference()

        baseline = self._options(helper).change_baseline
        if not baseline:
            baseline = self._find_baseline(helper, ref)

        if not baseline:
            raise MigrateValidationError(
                'Cannot find matching parent commit in the destination. Use '
                f"'{CHANGE_REQUEST_PARENT_FLAG}' flag to force a parent commit "
                'to use as baseline in the destination.'
            )
        self.logger.info(f'Using {baseline} as baseline for {ref}')

        change = helper.reader().change(ref)
        helper.migrate(
            ref,
            helper.console(),
            Metadata(message=change.message, author=change.author),
            ComputedChanges([change]),
            baseline,
        )

        result.migrated.append(ref)
        result.baseline = baseline
        result.completed_at = datetime.now()
        return result

    def _find_baseline(self, helper: RunHelper, ref: str) -> Optional[str]:
        """Most recent origin reference recorded in the history of ref."""
        label = helper.destination_origin_label_name()
        found: List[str] = []

        def visitor(change: Change) -> VisitResult:
            if label in change.labels:
                found.append(change.labels[label])
                return VisitResult.TERMINATE
            return VisitResult.CONTINUE

        helper.reader().visit_changes(ref, visitor)
        return found[0] if found else None


class MirrorStrategy(WorkflowStrategy):
    """Change-by-change mirroring between repositories of the same type."""

    mode = 'MIRROR'

    def run(self, helper: RunHelper) -> WorkflowResult:
        raise ModeNotImplementedError("WorkflowMode 'MIRROR' not implemented.")


class WorkflowMode(str, Enum):
    """Workflow type to run between origin and destination."""

    SQUASH = 'SQUASH'
    ITERATIVE = 'ITERATIVE'
    CHANGE_REQUEST = 'CHANGE_REQUEST'
    MIRROR = 'MIRROR'

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    def strategy(self, config: Optional[Config] = None) -> WorkflowStrategy:
        """New strategy instance implementing this mode."""
        return _STRATEGIES[self](config)

    def run(
        self, helper: RunHelper, config: Optional[Config] = None
    ) -> WorkflowResult:
        return self.strategy(config).run(helper)


_STRATEGIES = {
    WorkflowMode.SQUASH: SquashStrategy,
    WorkflowMode.ITERATIVE: IterativeStrategy,
    WorkflowMode.CHANGE_REQUEST: ChangeRequestStrategy,
    WorkflowMode.MIRROR: MirrorStrategy,
}

_DESCRIPTIONS = {
    WorkflowMode.SQUASH: (
        'Create a single commit in the destination with new tree state.'
    ),
    WorkflowMode.ITERATIVE: 'Import each origin change individually.',
    WorkflowMode.CHANGE_REQUEST: (
        'Import an origin tree state diffed by a common parent in destination. '
        'This could be a GitHub Pull Request, a Gerrit Change, etc.'
    ),
    WorkflowMode.MIRROR: (
        'Mirror individual changes from origin to destination. Requires that '
        'origin and destination are of the same type and that they support '
        'mirroring. Not implemented yet.'
    ),
}
