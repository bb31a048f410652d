"""Configuration models for the MIME database."""

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator

from .common import ConfigLoader, LoggingConfig
from .icons import DEFAULT_GENERIC_ICON

# Upper bound on the number of leading bytes ever read for sniffing
DEFAULT_MAX_SNIFF_BYTES = 65536


class DatabaseConfig(BaseModel):
    """Database loading and query configuration."""

    model_config = ConfigDict(extra='forbid')

    data_dirs: List[str] = Field(
        default_factory=list,
        description="Explicit mime/ directories to load, highest precedence first "
                    "(default: XDG_DATA_HOME and XDG_DATA_DIRS)"
    )
    max_sniff_bytes: int = Field(
        default=DEFAULT_MAX_SNIFF_BYTES,
        gt=0,
        description="Ceiling on the read-ahead used for content sniffing"
    )
    alias_max_depth: int = Field(
        default=8,
        ge=1,
        description="Maximum number of alias hops followed before giving up"
    )
    default_generic_icon: str = Field(
        default=DEFAULT_GENERIC_ICON,
        min_length=1,
        description="Generic icon used when nothing else can be derived"
    )

    @field_validator('data_dirs', mode='before')
    @classmethod
    def split_data_dirs(cls, v):
        """Accept a single path string as a one-element list."""
        if isinstance(v, str):
            return [v]
        return v


class SharedMimeConfig(BaseModel):
    """Root configuration."""

    model_config = ConfigDict(extra='forbid')

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)


def load_config(defaults_path: Optional[Path] = None) -> SharedMimeConfig:
    """Load configuration from defaults, system, user and environment sources."""
    return ConfigLoader(SharedMimeConfig).load(defaults_path)
