"""
Configuration models for lando-pull.

This module defines Pydantic models for the pull configuration: the
remote endpoint, the local endpoint, post-import database updates,
and per-run options. Field names accept both snake_case and the
camelCase keys used by ``.landorc`` files.
"""

import re
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_IDENTIFIER = re.compile(r'^[A-Za-z0-9_$.]+$')

SUPPORTED_OPERATORS = frozenset({
    "=", "!=", "<>", "<", ">", "<=", ">=", "LIKE", "NOT LIKE", "IN",
})

Scalar = Union[str, int, float]


class AuthMethod(str, Enum):
    """SSH authentication methods."""
    KEY = "key"
    PASSWORD = "password"


class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )


def _check_identifier(value: str) -> str:
    if not _IDENTIFIER.match(value):
        raise ValueError(f"Invalid SQL identifier: {value!r}")
    return value


class Condition(_FrozenModel):
    """A single WHERE condition of a database update."""
    column: str
    operator: str = "="
    value: Union[List[Scalar], Scalar]

    @field_validator('column')
    @classmethod
    def validate_column(cls, v):
        return _check_identifier(v)

    @field_validator('operator')
    @classmethod
    def validate_operator(cls, v):
        normalized = " ".join(v.split()).upper()
        if normalized not in SUPPORTED_OPERATORS:
            raise ValueError(
                f"Unsupported operator {v!r}; expected one of: {', '.join(sorted(SUPPORTED_OPERATORS))}"
            )
        return normalized

    @property
    def is_set_operator(self) -> bool:
        return self.operator == "IN"


class DatabaseUpdate(_FrozenModel):
    """A column update applied to the local database after import."""
    table: str
    column: str
    conditions: List[Condition] = Field(default_factory=list)
    value: Scalar

    @field_validator('table', 'column')
    @classmethod
    def validate_identifiers(cls, v):
        return _check_identifier(v)


class RemoteEndpoint(_FrozenModel):
    """Remote server, database credentials and scratch directory."""
    host: str
    user: str
    port: int = Field(default=22, ge=1, le=65535)
    auth_method: AuthMethod = AuthMethod.KEY
    password: Optional[str] = None
    key_path: Optional[str] = None
    db_name: str
    db_user: str
    db_password: str
    remote_files: str
    temp_folder: str = "/tmp"

    @field_validator('host', 'user', 'db_name', 'db_user')
    @classmethod
    def must_not_be_empty(cls, v):
        if not v or not v.strip():
            raise ValueError('Value cannot be empty')
        return v.strip()


class LocalEndpoint(_FrozenModel):
    """Local database connection, file destination and scratch directory."""
    db_host: str = "127.0.0.1"
    db_port: int = Field(default=3306, ge=1, le=65535)
    db_name: str
    db_user: str
    db_password: str
    local_files: str
    temp_folder: str = ".lando-pull"
    database_updates: List[DatabaseUpdate] = Field(default_factory=list)


class PullConfig(_FrozenModel):
    """Complete configuration for a pull."""
    remote: RemoteEndpoint
    local: LocalEndpoint


class PullOptions(_FrozenModel):
    """Per-run options supplied by the CLI."""
    skip_db: bool = False
    skip_files: bool = False
    debug: bool = False
    import_retries: int = Field(default=3, ge=1, le=20)
    import_timeout: float = Field(default=300.0, gt=0)
