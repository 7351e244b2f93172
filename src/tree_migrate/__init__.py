"""Tree Migrate

Migrates changes recorded in an origin repository into a destination
repository, one workflow mode at a time, with a git-backed tree diff/patch
engine for replaying tree differences onto independently evolved trees.
"""

__version__ = '0.1.0'
__author__ = 'Tree Migrate Team'
__email__ = 'team@example.com'

from .migration import WorkflowMode, WorkflowResult, RunHelper

__all__ = ['WorkflowMode', 'WorkflowResult', 'RunHelper']
