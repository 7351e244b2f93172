"""Workflow modes and the engine running them."""

from .run_helper import RunHelper
from .workflow_mode import (
    WorkflowMode,
    WorkflowResult,
    WorkflowStrategy,
    SquashStrategy,
    IterativeStrategy,
    ChangeRequestStrategy,
    MirrorStrategy,
)
from .engine import WorkflowEngine

__all__ = [
    'RunHelper',
    'WorkflowMode',
    'WorkflowResult',
    'WorkflowStrategy',
    'SquashStrategy',
    'IterativeStrategy',
    'ChangeRequestStrategy',
    'MirrorStrategy',
    'WorkflowEngine',
]
