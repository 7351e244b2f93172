"""Main CLI entry point for Tree Migrate."""

import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config.config import Config
from ..exceptions import PatchConflictError
from ..git.diff import GitDiffEngine
from ..migration.workflow_mode import WorkflowMode
from ..utils.logging import configure_logging, setup_logging

console = Console()


@click.group()
@click.version_option(version='0.1.0', prog_name='tree-migrate')
@click.option(
    '--config',
    '-c',
    type=click.Path(exists=True),
    help='Path to configuration file',
)
@click.option(
    '--verbose',
    '-v',
    is_flag=True,
    help='Enable verbose logging',
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], verbose: bool) -> None:
    """Tree Migrate - Replay origin repository changes into a destination."""
    ctx.ensure_object(dict)

    if config:
        ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    log_level = 'DEBUG' if verbose else 'WARNING'
    setup_logging(log_level)


@cli.command()
@click.option(
    '--output',
    '-o',
    default='tree-migrate.yaml',
    help='Output configuration file path',
)
def init(output: str) -> None:
    """Initialize a new configuration file."""
    console.print(
        Panel.fit(
            '[bold green]Tree Migrate[/bold green]\nInitializing configuration...',
            border_style='green',
        )
    )

    try:
        Config.create_template(output)

        console.print(f'[green]✓[/green] Configuration template created at: {output}')
        console.print(f'[yellow]Please edit {output} to match your migration[/yellow]')

    except Exception as e:
        console.print(f'[red]✗[/red] Failed to create configuration: {e}')
        sys.exit(1)


@cli.command()
@click.argument('left', type=click.Path(exists=True, file_okay=False))
@click.argument('right', type=click.Path(exists=True, file_okay=False))
@click.option(
    '--output',
    '-o',
    type=click.Path(dir_okay=False),
    help='Write the diff to a file instead of stdout',
)
@click.pass_context
def diff(ctx: click.Context, left: str, right: str, output: Optional[str]) -> None:
    """Diff two sibling directories LEFT and RIGHT."""
    try:
        config = _load_config(ctx)
        _setup_logging_with_config(ctx, config)
        engine = GitDiffEngine(config.diff)

        contents = engine.diff(left, right, _verbose(ctx, config))

        if output:
            Path(output).write_bytes(contents)
            console.print(f'[green]✓[/green] Diff written to: {output}')
        else:
            click.echo(contents, nl=False)

    except Exception as e:
        console.print(f'[red]✗[/red] Diff failed: {e}')
        sys.exit(1)


@cli.command()
@click.argument('target', type=click.Path(exists=True, file_okay=False))
@click.argument('diff_file', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--exclude',
    '-e',
    multiple=True,
    help='Glob pattern of paths to leave untouched (repeatable)',
)
@click.option(
    '--strip',
    '-p',
    type=int,
    default=None,
    help='Leading path components to drop from diff paths',
)
@click.option(
    '--reverse',
    '-R',
    is_flag=True,
    help='Undo a previously applied diff',
)
@click.pass_context
def patch(
    ctx: click.Context,
    target: str,
    diff_file: str,
    exclude: Tuple[str, ...],
    strip: Optional[int],
    reverse: bool,
) -> None:
    """Apply DIFF_FILE to the TARGET directory."""
    try:
        config = _load_config(ctx)
        _setup_logging_with_config(ctx, config)
        engine = GitDiffEngine(config.diff)

        excluded = list(config.diff.excluded_paths) + list(exclude)
        strip_slashes = config.diff.strip_slashes if strip is None else strip

        engine.patch(
            target,
            Path(diff_file).read_bytes(),
            excluded,
            strip_slashes,
            _verbose(ctx, config),
            reverse,
        )
        console.print(
            f'[green]✓[/green] {"Reverted" if reverse else "Applied"} '
            f'{diff_file} on {target}'
        )

    except PatchConflictError as e:
        console.print(f'[red]✗[/red] Patch does not apply to {e.path}: {e.stderr}')
        sys.exit(1)
    except Exception as e:
        console.print(f'[red]✗[/red] Patch failed: {e}')
        sys.exit(1)


@cli.command()
def modes() -> None:
    """List the available workflow modes."""
    table = Table(title='Workflow Modes')
    table.add_column('Mode', style='cyan')
    table.add_column('Description', style='green')

    for mode in WorkflowMode:
        table.add_row(mode.value, mode.description)

    console.print(table)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the loaded configuration."""
    try:
        config = _load_config(ctx)

        table = Table(title='Migration Configuration')
        table.add_column('Setting', style='cyan')
        table.add_column('Value', style='green')

        table.add_row('Workflow Mode', config.workflow.mode)
        table.add_row('Change Baseline', config.workflow.change_baseline or '-')
        table.add_row('Default Author', config.authoring.default_author)
        table.add_row('Git Binary', config.diff.git_binary)
        table.add_row('Strip Slashes', str(config.diff.strip_slashes))
        table.add_row(
            'Excluded Paths', ', '.join(config.diff.excluded_paths) or '-'
        )
        table.add_row('Log Level', config.logging.level)

        console.print(table)

    except Exception as e:
        console.print(f'[red]✗[/red] Failed to load status: {e}')
        if (ctx.obj or {}).get('verbose'):
            console.print_exception()
        sys.exit(1)


def _load_config(ctx: click.Context) -> Config:
    """Load configuration from file or environment."""
    config_path = (ctx.obj or {}).get('config_path')

    if config_path:
        return Config.from_file(config_path)

    default_paths = ['tree-migrate.yaml', 'tree-migrate.yml', '.tree-migrate.yaml']
    for path in default_paths:
        if Path(path).exists():
            return Config.from_file(path)

    return Config.from_env()


def _setup_logging_with_config(ctx: click.Context, config: Config) -> None:
    """Setup logging with configuration from config file."""
    configure_logging(config.logging, verbose=(ctx.obj or {}).get('verbose', False))


def _verbose(ctx: click.Context, config: Config) -> bool:
    return bool((ctx.obj or {}).get('verbose')) or config.diff.verbose


def main() -> None:
    """Main entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print('\n[red]Interrupted by user[/red]')
        sys.exit(1)


if __name__ == '__main__':
    main()
