"""Diff two sibling trees and replay the difference onto a third tree."""

import os
import re
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence, Union

from loguru import logger

from ..config.config import DiffConfig
from ..exceptions import DiffError, PatchConflictError

PathLike = Union[str, 'os.PathLike[str]']

_PATCH_FAILED_RE = re.compile(
    r'^error: patch failed: (?P<path>.+):(?P<line>\d+)$', re.M
)
_DOES_NOT_APPLY_RE = re.compile(
    r'^error: (?P<path>.+): (?:patch does not apply|already exists in working '
    r'directory|No such file or directory)$',
    re.M,
)


class DiffEngine(ABC):
    """Computes and applies tree differences."""

    @abstractmethod
    def diff(self, left: PathLike, right: PathLike, verbose: bool = False) -> bytes:
        """Return the unified difference between two sibling directories.

        Identical trees produce an empty byte string.

        Raises:
            ValueError: If left and right do not share a parent directory
        """

    @abstractmethod
    def patch(
        self,
        target_dir: PathLike,
        diff_contents: bytes,
        excluded_paths: Sequence[str] = (),
        strip_slashes: int = 0,
        verbose: bool = False,
        reverse: bool = False,
    ) -> None:
        """Apply a difference produced by diff() to target_dir.

        Raises:
            ValueError: If strip_slashes is negative
            PatchConflictError: If a hunk does not match target_dir
        """


class GitDiffEngine(DiffEngine):
    """Diff engine running 'git diff --no-index' and 'git apply'."""

    def __init__(self, config: Optional[DiffConfig] = None):
        """Initialize git diff engine.

        Args:
            config: Diff configuration (git binary and timeout)
        """
        self.config = config or DiffConfig()
        self.logger = logger.bind(component='GitDiffEngine')

    def diff(self, left: PathLike, right: PathLike, verbose: bool = False) -> bytes:
        left_path = Path(left).absolute()
        right_path = Path(right).absolute()
        if left_path.parent != right_path.parent:
            raise ValueError(
                f"Paths '{left}' and '{right}' must be sibling directories."
            )
        root = left_path.parent

        cmd = [
            self.config.git_binary,
            'diff',
            '--no-index',
            '--no-color',
            '--no-ext-diff',
            '--binary',
            '--no-renames',
            '--src-prefix=a/',
            '--dst-prefix=b/',
            # Keep directory names from being parsed as options
            '--',
            left_path.name,
            right_path.name,
        ]
        result = self._run(cmd, cwd=root, verbose=verbose)

        # 0: identical trees, 1: differences found
        if result.returncode not in (0, 1) or (result.returncode == 1 and result.stderr):
            stderr = _decode(result.stderr)
            raise DiffError(
                f"Error executing 'git diff' (exit status {result.returncode}): {stderr}",
                stderr=stderr,
            )
        return result.stdout

    def patch(
        self,
        target_dir: PathLike,
        diff_contents: bytes,
        excluded_paths: Sequence[str] = (),
        strip_slashes: int = 0,
        verbose: bool = False,
        reverse: bool = False,
    ) -> None:
        if strip_slashes < 0:
            raise ValueError('stripSlashes must be >= 0.')
        if not diff_contents:
            return

        target = Path(target_dir).absolute()
        cmd: List[str] = [self.config.git_binary, 'apply', f'-p{strip_slashes}']
        if verbose:
            cmd.append('-v')
        for excluded_path in excluded_paths:
            cmd.append(f'--exclude={excluded_path}')
        if reverse:
            cmd.append('-R')
        cmd.append('-')

        result = self._run(cmd, cwd=target, verbose=verbose, stdin=diff_contents)
        if result.returncode != 0:
            raise self._patch_error(result.returncode, _decode(result.stderr))

    def _run(
        self,
        cmd: List[str],
        cwd: Path,
        verbose: bool,
        stdin: Optional[bytes] = None,
    ) -> 'subprocess.CompletedProcess[bytes]':
        self.logger.debug(f'Executing: {" ".join(cmd)} (cwd: {cwd})')
        env = dict(os.environ)
        # Never pick up a repository enclosing the trees
        env['GIT_CEILING_DIRECTORIES'] = str(cwd.parent)
        env['GIT_CONFIG_NOSYSTEM'] = '1'
        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd),
                input=stdin,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=env,
                timeout=self.config.timeout,
            )
        except FileNotFoundError as e:
            raise DiffError(f'Cannot execute {cmd[0]!r}: {e}') from e
        except subprocess.TimeoutExpired as e:
            raise DiffError(
                f"'{' '.join(cmd[:2])}' timed out after {self.config.timeout}s"
            ) from e

        if verbose and result.stderr:
            self.logger.info(_decode(result.stderr).rstrip())
        return result

    def _patch_error(self, returncode: int, stderr: str) -> DiffError:
        match = _PATCH_FAILED_RE.search(stderr)
        if match:
            return PatchConflictError(
                f"Error executing 'patch': {stderr.strip()}",
                path=match.group('path'),
                line=int(match.group('line')),
                stderr=stderr,
            )
        match = _DOES_NOT_APPLY_RE.search(stderr)
        if match:
            return PatchConflictError(
                f"Error executing 'patch': {stderr.strip()}",
                path=match.group('path'),
                stderr=stderr,
            )
        return DiffError(
            f"Error executing 'patch' (exit status {returncode}): {stderr.strip()}",
            stderr=stderr,
        )


def _decode(output: bytes) -> str:
    return output.decode('utf-8', errors='replace')


_default_engine = GitDiffEngine()


def diff(left: PathLike, right: PathLike, verbose: bool = False) -> bytes:
    """Diff two sibling directories with the default engine."""
    return _default_engine.diff(left, right, verbose)


def patch(
    target_dir: PathLike,
    diff_contents: bytes,
    excluded_paths: Sequence[str] = (),
    strip_slashes: int = 0,
    verbose: bool = False,
    reverse: bool = False,
) -> None:
    """Apply a difference to target_dir with the default engine."""
    _default_engine.patch(
        target_dir, diff_contents, excluded_paths, strip_slashes, verbose, reverse
    )
