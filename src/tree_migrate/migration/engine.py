"""Workflow engine - main entry point for running a migration."""

from typing import Optional, Union

from loguru import logger

from ..config.config import Config
from ..exceptions import ChangeRejectedError
from .run_helper import RunHelper
from .workflow_mode import WorkflowMode, WorkflowResult


class WorkflowEngine:
    """Runs the configured workflow mode against a run helper."""

    def __init__(self, config: Optional[Config] = None):
        """Initialize workflow engine.

        Args:
            config: Migration configuration
        """
        self.config = config or Config()
        self.logger = logger.bind(component='WorkflowEngine')

    def run(
        self,
        helper: RunHelper,
        mode: Optional[Union[WorkflowMode, str]] = None,
    ) -> WorkflowResult:
        """Run a workflow.

        Args:
            helper: Origin/destination run helper
            mode: Workflow mode (uses the configured one if not provided)

        Returns:
            Workflow result
        """
        workflow_mode = WorkflowMode((mode or self.config.workflow.mode).upper())
        self.logger.info(f'Starting {workflow_mode.value} workflow')

        try:
            result = workflow_mode.run(helper, self.config)
        except ChangeRejectedError as e:
            self.logger.warning(f'Workflow stopped by user: {e}')
            raise
        except Exception as e:
            self.logger.error(f'{workflow_mode.value} workflow failed: {e}')
            raise

        self.logger.info(
            f'{workflow_mode.value} workflow completed: '
            f'{len(result.migrated)} migrated, '
            f'{len(result.skipped_empty)} skipped as empty'
        )
        return result
