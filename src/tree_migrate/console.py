"""Operator-facing console output and prompts."""

from abc import ABC, abstractmethod
from typing import Optional

from loguru import logger
from rich.console import Console as RichOutput
from rich.markup import escape
from rich.prompt import Confirm


class Console(ABC):
    """Console used by migrations to talk to the operator."""

    @abstractmethod
    def info(self, message: str) -> None:
        """Print an informational message."""

    @abstractmethod
    def warn(self, message: str) -> None:
        """Print a warning."""

    @abstractmethod
    def error(self, message: str) -> None:
        """Print an error."""

    @abstractmethod
    def progress(self, message: str) -> None:
        """Print a progress message."""

    @abstractmethod
    def prompt_confirmation(self, message: str) -> bool:
        """Ask the operator a yes/no question.

        Returns:
            True only if the operator answered yes
        """


class RichConsole(Console):
    """Console backed by rich."""

    def __init__(self, output: Optional[RichOutput] = None, assume_yes: bool = False):
        """Initialize rich console.

        Args:
            output: Rich console to render to (stderr by default)
            assume_yes: Answer every prompt with yes
        """
        self.output = output or RichOutput(stderr=True)
        self.assume_yes = assume_yes

    def info(self, message: str) -> None:
        self.output.print(f'[blue]INFO:[/blue] {escape(message)}')

    def warn(self, message: str) -> None:
        self.output.print(f'[yellow]WARN:[/yellow] {escape(message)}')

    def error(self, message: str) -> None:
        self.output.print(f'[red]ERROR:[/red] {escape(message)}')

    def progress(self, message: str) -> None:
        self.output.print(f'[green]Task:[/green] {escape(message)}')

    def prompt_confirmation(self, message: str) -> bool:
        if self.assume_yes:
            self.info(f'{message} (assumed yes)')
            return True
        try:
            return Confirm.ask(escape(message), console=self.output)
        except (EOFError, KeyboardInterrupt):
            # A closed input channel is a decline
            self.output.print()
            return False


class ProgressPrefixConsole(Console):
    """Console that prefixes every message before delegating."""

    def __init__(self, prefix: str, delegate: Console):
        self.prefix = prefix
        self.delegate = delegate

    def info(self, message: str) -> None:
        self.delegate.info(self.prefix + message)

    def warn(self, message: str) -> None:
        self.delegate.warn(self.prefix + message)

    def error(self, message: str) -> None:
        self.delegate.error(self.prefix + message)

    def progress(self, message: str) -> None:
        self.delegate.progress(self.prefix + message)

    def prompt_confirmation(self, message: str) -> bool:
        return self.delegate.prompt_confirmation(self.prefix + message)


class LogConsole(Console):
    """Console that writes to the log and answers prompts with a fixed value."""

    def __init__(self, answer: bool = False):
        self.answer = answer
        self.logger = logger.bind(component='Console')

    def info(self, message: str) -> None:
        self.logger.info(message)

    def warn(self, message: str) -> None:
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.logger.error(message)

    def progress(self, message: str) -> None:
        self.logger.info(message)

    def prompt_confirmation(self, message: str) -> bool:
        self.logger.warning(f'{message} -> {"yes" if self.answer else "no"}')
        return self.answer
