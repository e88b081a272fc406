"""Configuration for the markdown-db index, read from environment variables."""

import os
import logging
from pathlib import Path
from typing import Any, Optional, Union
from pydantic import BaseModel, Field

from .constants import (
    SCHEMA_VERSION,
    DEFAULT_DATA_DIRECTORY,
    DEFAULT_MAX_PARALLEL_READS,
    ERROR_MESSAGES,
)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

TRUTHY = ("true", "1", "yes", "on")


class IndexConfig(BaseModel):
    """Settings consumed by the indexing engine."""

    vault_root: Path
    data_directory: Path = Field(default_factory=lambda: Path(DEFAULT_DATA_DIRECTORY).expanduser())
    in_memory: bool = False
    expected_schema_version: Any = SCHEMA_VERSION
    max_parallel_reads: int = Field(default=DEFAULT_MAX_PARALLEL_READS, ge=1)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, vault_root: Optional[Union[str, Path]] = None, **overrides: Any) -> "IndexConfig":
        """
        Build configuration from MARKDOWN_DB_* environment variables.

        Args:
            vault_root: Vault path. If not provided, uses MARKDOWN_DB_VAULT_PATH.
            **overrides: Explicit values that win over the environment
        """
        vault_root = vault_root or os.getenv("MARKDOWN_DB_VAULT_PATH", "")
        if not vault_root:
            raise ValueError(ERROR_MESSAGES["vault_path_missing"])

        values = {
            "vault_root": Path(vault_root).expanduser(),
            "data_directory": Path(
                os.getenv("MARKDOWN_DB_DATA_DIR", DEFAULT_DATA_DIRECTORY)
            ).expanduser(),
            "in_memory": os.getenv("MARKDOWN_DB_IN_MEMORY", "false").lower() in TRUTHY,
            "max_parallel_reads": int(
                os.getenv("MARKDOWN_DB_MAX_PARALLEL_READS", str(DEFAULT_MAX_PARALLEL_READS))
            ),
            "log_level": os.getenv("MARKDOWN_DB_LOG_LEVEL", "INFO"),
        }
        values.update(overrides)
        return cls(**values)

    def validate_vault(self) -> Path:
        """
        Check that the vault root exists and is a directory.

        Returns:
            The resolved vault path

        Raises:
            ValueError: with a message saying how to fix the path
        """
        if not self.vault_root.exists():
            raise ValueError(ERROR_MESSAGES["vault_not_found"].format(path=self.vault_root))
        if not self.vault_root.is_dir():
            raise ValueError(ERROR_MESSAGES["vault_not_directory"].format(path=self.vault_root))
        return self.vault_root.resolve()


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging the same way for every entry point."""
    logging.basicConfig(
        level=(level or os.getenv("MARKDOWN_DB_LOG_LEVEL", "INFO")).upper(),
        format=LOG_FORMAT
    )
