"""Settings for csvdb taken from CSVDB_* environment variables.

The shell and the logging setup read their defaults from ``CsvDbConfig``;
nothing else in the package looks at the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from csvdb.errors import ConfigError

DEFAULT_BASE_DIR = "~/.local/csvdb"
DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(frozen=True)
class CsvDbConfig:
    """Validated runtime configuration.

    Attributes:
        base_dir: Directory holding one sub-directory per database.
        log_level: Minimum level of emitted log events.
    """

    base_dir: Path
    log_level: str

    @classmethod
    def from_env(cls) -> CsvDbConfig:
        """Read CSVDB_HOME and CSVDB_LOG_LEVEL, falling back to the defaults.

        Raises:
            ConfigError: If CSVDB_LOG_LEVEL is not a known level name.
        """
        base_dir_value = os.getenv("CSVDB_HOME", DEFAULT_BASE_DIR)
        log_level = _parse_log_level(os.getenv("CSVDB_LOG_LEVEL", DEFAULT_LOG_LEVEL))
        return cls(
            base_dir=Path(base_dir_value).expanduser(),
            log_level=log_level,
        )


def _parse_log_level(raw_value: str) -> str:
    """Normalize and validate a log level name."""
    level = raw_value.strip().upper()
    if level not in LOG_LEVELS:
        raise ConfigError(
            "Invalid CSVDB_LOG_LEVEL value: "
            f"expected one of {', '.join(LOG_LEVELS)}, got '{raw_value}'."
        )
    return level
