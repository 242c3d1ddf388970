"""Pydantic models describing cloudroot configuration."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChannelConfig(BaseModel):
    """Method channel settings shared with the application shell."""

    model_config = ConfigDict(extra="allow")

    name: str = "com.draexl.project-manager/iCloud"


class ResolverConfig(BaseModel):
    """Container lookup and provisioning settings."""

    model_config = ConfigDict(extra="allow")

    default_container: Optional[str] = None
    subpath: str = "Documents"
    mobile_documents_root: Path = Path("~/Library/Mobile Documents")
    container_roots: Dict[str, Path] = Field(default_factory=dict)
    default_container_root: Optional[Path] = None
    max_workers: int = Field(default=4, ge=1)

    @field_validator("subpath")
    @classmethod
    def _validate_subpath(cls, value: str) -> str:
        parts = PurePosixPath(value).parts
        if not parts or PurePosixPath(value).is_absolute() or ".." in parts:
            raise ValueError("subpath must be a relative path inside the container.")
        return value


class LoggingConfig(BaseModel):
    """Handlers installed on the ``cloudroot`` logger."""

    model_config = ConfigDict(extra="allow")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_path: Optional[Path] = None


class CloudRootConfig(BaseModel):
    """Root configuration object."""

    model_config = ConfigDict(extra="allow")

    channel: ChannelConfig = Field(default_factory=ChannelConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


__all__ = [
    "ChannelConfig",
    "CloudRootConfig",
    "LoggingConfig",
    "ResolverConfig",
]
