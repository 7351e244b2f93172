"""Tree migration exceptions."""

from typing import List, Optional


class MigrateError(Exception):
    """Base exception for migration errors."""


class RepoError(MigrateError):
    """Repository access or history resolution failed."""


class MigrateValidationError(MigrateError):
    """A precondition the operator can fix before running again."""


class EmptyChangeError(MigrateValidationError):
    """The change produced no effective delta in the destination."""


class ChangeRejectedError(MigrateError):
    """The operator declined to continue an iterative migration."""

    def __init__(
        self,
        message: str,
        migrated: Optional[List[str]] = None,
        last_change: Optional[str] = None,
    ):
        """Initialize change rejected error.

        Args:
            message: Error message
            migrated: References written before the run stopped
            last_change: Reference of the change after which the run stopped
        """
        super().__init__(message)
        self.migrated = list(migrated or [])
        self.last_change = last_change


class DiffError(MigrateError):
    """The external diff tool failed."""

    def __init__(self, message: str, stderr: str = ''):
        super().__init__(message)
        self.stderr = stderr


class PatchConflictError(DiffError):
    """A diff hunk does not match the target tree."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        line: Optional[int] = None,
        stderr: str = '',
    ):
        """Initialize patch conflict error.

        Args:
            message: Error message
            path: Target-relative path of the offending file
            line: Line of the first hunk that failed to apply
            stderr: Raw output of the patch tool
        """
        super().__init__(message, stderr=stderr)
        self.path = path
        self.line = line


class ModeNotImplementedError(MigrateError, NotImplementedError):
    """The selected workflow mode is a placeholder."""
