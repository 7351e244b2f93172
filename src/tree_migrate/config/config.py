"""Configuration management for Tree Migrate."""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, validator

from ..models.change import Author

CHANGE_REQUEST_PARENT_FLAG = '--change-request-parent'

DEFAULT_SQUASH_MESSAGE = 'Project import generated by tree-migrate.\n'
DEFAULT_AUTHOR = 'Tree Migrate <migrate@localhost>'

WORKFLOW_MODES = ['SQUASH', 'ITERATIVE', 'CHANGE_REQUEST', 'MIRROR']

LOG_FORMAT = (
    '{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[component]} | {message}'
)


class WorkflowConfig(BaseModel):
    """Workflow selection and per-run overrides."""

    mode: str = Field(default='SQUASH', description='Workflow mode to run')
    change_baseline: Optional[str] = Field(
        default=None,
        description=(
            'Destination change to use as baseline in CHANGE_REQUEST mode '
            f'(same as {CHANGE_REQUEST_PARENT_FLAG})'
        ),
    )
    squash_message: str = Field(
        default=DEFAULT_SQUASH_MESSAGE,
        description='Commit message used for SQUASH imports',
    )

    @validator('mode')
    def validate_mode(cls, v):
        """Validate workflow mode name."""
        if v.upper() not in WORKFLOW_MODES:
            raise ValueError(f'Workflow mode must be one of: {WORKFLOW_MODES}')
        return v.upper()

    @validator('change_baseline')
    def validate_change_baseline(cls, v):
        """Treat a blank baseline as unset."""
        if v is not None and not v.strip():
            return None
        return v


class AuthoringConfig(BaseModel):
    """Authoring defaults for produced destination changes."""

    default_author: str = Field(
        default=DEFAULT_AUTHOR, description='Default author as "Name <email>"'
    )

    @validator('default_author')
    def validate_default_author(cls, v):
        """Validate author identity format."""
        return str(Author.parse(v))


class DiffConfig(BaseModel):
    """Tree diff/patch configuration."""

    git_binary: str = Field(default='git', description='Git executable to invoke')
    excluded_paths: List[str] = Field(
        default_factory=list,
        description='Glob patterns left untouched when patching',
    )
    strip_slashes: int = Field(
        default=2, description='Leading path components dropped when patching'
    )
    verbose: bool = Field(default=False, description='Log diff tool output')
    timeout: int = Field(
        default=600, description='Diff/patch command timeout in seconds'
    )

    @validator('strip_slashes')
    def validate_strip_slashes(cls, v):
        """Validate strip count is not negative."""
        if v < 0:
            raise ValueError('stripSlashes must be >= 0.')
        return v

    @validator('timeout')
    def validate_timeout(cls, v):
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError('Diff timeout must be positive')
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default='INFO', description='Log level')
    file: Optional[str] = Field(default=None, description='Log file path')
    format: str = Field(
        default=LOG_FORMAT,
        description='Log format',
    )

    @validator('level')
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Log level must be one of: {valid_levels}')
        return v.upper()


class Config(BaseModel):
    """Main configuration class for Tree Migrate."""

    workflow: WorkflowConfig = Field(
        default_factory=WorkflowConfig, description='Workflow settings'
    )
    authoring: AuthoringConfig = Field(
        default_factory=AuthoringConfig, description='Authoring settings'
    )
    diff: DiffConfig = Field(
        default_factory=DiffConfig, description='Diff/patch settings'
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description='Logging settings'
    )

    class Config:
        """Pydantic configuration."""

        extra = 'forbid'

    @classmethod
    def from_file(cls, config_path: str) -> 'Config':
        """Load configuration from YAML file."""
        config_file = Path(config_path)

        if not config_file.exists():
            raise FileNotFoundError(f'Configuration file not found: {config_path}')

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)

        return cls(**(config_data or {}))

    @classmethod
    def from_env(cls) -> 'Config':
        """Load configuration from environment variables."""
        load_dotenv()

        excluded = os.getenv('DIFF_EXCLUDED_PATHS')
        strip_slashes = os.getenv('DIFF_STRIP_SLASHES')

        config_data = {
            'workflow': {
                'mode': os.getenv('MIGRATE_MODE'),
                'change_baseline': os.getenv('MIGRATE_CHANGE_BASELINE'),
            },
            'authoring': {
                'default_author': os.getenv('MIGRATE_DEFAULT_AUTHOR'),
            },
            'diff': {
                'git_binary': os.getenv('GIT_BINARY'),
                'strip_slashes': int(strip_slashes) if strip_slashes else None,
                'excluded_paths': (
                    [p.strip() for p in excluded.split(',') if p.strip()]
                    if excluded
                    else None
                ),
                'verbose': os.getenv('DIFF_VERBOSE', 'false').lower() == 'true',
            },
            'logging': {
                'level': os.getenv('LOG_LEVEL', 'INFO'),
                'file': os.getenv('LOG_FILE'),
            },
        }

        config_data = cls._remove_none_values(config_data)

        return cls(**config_data)

    @staticmethod
    def _remove_none_values(data: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively remove None values from dictionary."""
        if isinstance(data, dict):
            return {
                k: Config._remove_none_values(v)
                for k, v in data.items()
                if v is not None
            }
        return data

    def to_file(self, config_path: str) -> None:
        """Save configuration to YAML file."""
        config_file = Path(config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.dump(
                self.dict(), f, default_flow_style=False, indent=2, sort_keys=False
            )

    @staticmethod
    def create_template(output_path: str) -> None:
        """Create a configuration template file."""
        template_config = {
            'workflow': {
                'mode': 'ITERATIVE',
                'change_baseline': None,
                'squash_message': DEFAULT_SQUASH_MESSAGE,
            },
            'authoring': {
                'default_author': DEFAULT_AUTHOR,
            },
            'diff': {
                'git_binary': 'git',
                'excluded_paths': [],
                'strip_slashes': 2,
                'verbose': False,
                'timeout': 600,
            },
            'logging': {
                'level': 'INFO',
                'file': 'migration.log',
                'format': LOG_FORMAT,
            },
        }

        config_file = Path(output_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.dump(
                template_config, f, default_flow_style=False, indent=2, sort_keys=False
            )
