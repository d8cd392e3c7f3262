"""
diskpart configuration management.

Provides centralized configuration with validation using Pydantic.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

SUPPORTED_FILESYSTEMS: tuple[str, ...] = (
    "ext2",
    "ext3",
    "ext4",
    "xfs",
    "btrfs",
    "fat32",
    "exfat",
    "ntfs",
    "swap",
)


def default_config_path() -> Path:
    return Path.home() / ".diskpart" / "config.json"


class LoggingConfig(BaseModel):
    """Configuration for structured logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    file_enabled: bool = True
    console_enabled: bool = True
    json_format: bool = False
    log_directory: Path = Field(default_factory=lambda: Path.home() / ".diskpart" / "logs")

    @field_validator("log_directory", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        return Path(v).expanduser().resolve()


class ShellConfig(BaseModel):
    """Configuration for the command interpreter."""

    prompt: str = "DISKPART> "
    device_root: str = "/dev"
    max_tokens: int = Field(default=32, ge=1, le=1024)
    show_banner: bool = True
    default_filesystem: str = "ext4"
    command_timeout_seconds: int = Field(default=3600, ge=1)

    @field_validator("device_root", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        value = str(v).rstrip("/")
        return value or "/"

    @field_validator("default_filesystem")
    @classmethod
    def check_filesystem(cls, v: str) -> str:
        value = v.lower()
        if value not in SUPPORTED_FILESYSTEMS:
            raise ValueError(f"unsupported filesystem: {v}")
        return value


class DiskPartConfig(BaseModel):
    """Main diskpart configuration."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    shell: ShellConfig = Field(default_factory=ShellConfig)

    @classmethod
    def load(cls, config_path: Path | None = None) -> DiskPartConfig:
        """Load configuration from file or create default."""
        if config_path is None:
            config_path = default_config_path()

        if config_path.exists():
            with open(config_path) as f:
                data = json.load(f)
            return cls.model_validate(data)

        return cls()

    def save(self, config_path: Path | None = None) -> None:
        """Save configuration to file."""
        if config_path is None:
            config_path = default_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2, default=str)

    def ensure_directories(self) -> None:
        """Create all required directories."""
        if self.logging.file_enabled:
            self.logging.log_directory.mkdir(parents=True, exist_ok=True)


def load_config(config_path: Path | None = None) -> DiskPartConfig:
    """Load or create configuration."""
    config = DiskPartConfig.load(config_path)
    config.ensure_directories()
    return config
