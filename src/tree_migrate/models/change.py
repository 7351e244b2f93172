"""Origin change models."""

import re
from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field, validator

_AUTHOR_RE = re.compile(r'^(?P<name>[^<>]*?)\s*<(?P<email>[^<>]*)>$')


class WriterResult(str, Enum):
    """Outcome of a single migrate-and-write call."""

    OK = 'ok'
    PROMPT_TO_CONTINUE = 'prompt_to_continue'


class Author(BaseModel):
    """Change author identity."""

    name: str = Field(..., description='Author name')
    email: str = Field(default='', description='Author email')

    class Config:
        """Pydantic configuration."""

        frozen = True

    @classmethod
    def parse(cls, identity: str) -> 'Author':
        """Parse an identity in the form "Name <email>".

        Raises:
            ValueError: If the identity is malformed
        """
        match = _AUTHOR_RE.match(identity.strip())
        if not match:
            raise ValueError(f'Author must be in the form "Name <email>": {identity!r}')
        return cls(name=match.group('name'), email=match.group('email'))

    def __str__(self) -> str:
        return f'{self.name} <{self.email}>'


class Change(BaseModel):
    """A single change read from the origin."""

    ref: str = Field(..., description='Origin reference of the change')
    author: Author = Field(..., description='Change author')
    message: str = Field(..., description='Change message')
    labels: Dict[str, str] = Field(
        default_factory=dict, description='Labels found in the change'
    )
    date: Optional[datetime] = Field(default=None, description='Change timestamp')

    class Config:
        """Pydantic configuration."""

        frozen = True
        json_encoders = {datetime: lambda v: v.isoformat() if v else None}

    @validator('ref')
    def validate_ref(cls, v):
        """Validate reference is not blank."""
        if not v or not v.strip():
            raise ValueError('Change reference cannot be empty')
        return v

    @validator('labels')
    def copy_labels(cls, v):
        """Detach labels from the caller's mapping."""
        return dict(v)

    @property
    def first_line(self) -> str:
        """First line of the change message."""
        return self.message.split('\n', 1)[0]

    def __str__(self) -> str:
        return f'{self.ref}: {self.first_line}'


class Metadata(BaseModel):
    """Message and author attached to the produced destination change."""

    message: str = Field(..., description='Destination change message')
    author: Author = Field(..., description='Destination change author')

    class Config:
        """Pydantic configuration."""

        frozen = True
