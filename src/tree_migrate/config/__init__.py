"""Configuration models."""

from .config import (
    Config,
    WorkflowConfig,
    AuthoringConfig,
    DiffConfig,
    LoggingConfig,
    CHANGE_REQUEST_PARENT_FLAG,
)

__all__ = [
    'Config',
    'WorkflowConfig',
    'AuthoringConfig',
    'DiffConfig',
    'LoggingConfig',
    'CHANGE_REQUEST_PARENT_FLAG',
]
