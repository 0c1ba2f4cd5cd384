"""Configuration management for Search Aggregator."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 300
# Raw ripgrep lines read per search; each result spans a few lines of output
LINES_PER_RESULT = 5


class SearchConfig(BaseModel):
    """Limits and defaults applied to every search call."""

    max_results: int = Field(
        default=DEFAULT_MAX_RESULTS,
        description="Maximum number of match groups rendered in a report",
    )
    max_lines: Optional[int] = Field(
        default=None,
        description="Maximum raw output lines read from ripgrep before it is killed "
        "(defaults to max_results * 5)",
    )
    max_line_length: int = Field(
        default=500, description="Characters kept per result line before truncation"
    )
    context_lines: int = Field(
        default=1, description="Context lines ripgrep emits around each match"
    )
    default_file_glob: str = Field(
        default="*", description="Glob used when a request does not name one"
    )
    ignore_file_name: str = Field(
        default=".searchignore",
        description="Gitignore-syntax file listing paths hidden from results",
    )
    install_root: Optional[Path] = Field(
        default=None,
        description="Installation root holding a bundled ripgrep (PATH is used otherwise)",
    )
    stream_limit_bytes: int = Field(
        default=8 * 1024 * 1024,
        description="Buffer limit for a single line read from ripgrep",
    )

    @field_validator("install_root", mode="before")
    @classmethod
    def convert_path(cls, v: Any) -> Optional[Path]:
        """Convert string paths to Path objects."""
        if v is None or isinstance(v, Path):
            return v
        if isinstance(v, str):
            return Path(v)
        raise ValueError(f"Expected str or Path, got {type(v)}")

    @field_validator(
        "max_results", "max_line_length", "stream_limit_bytes", "max_lines"
    )
    @classmethod
    def require_positive(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("context_lines")
    @classmethod
    def require_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must not be negative")
        return v

    @model_validator(mode="after")
    def default_line_cap(self) -> "SearchConfig":
        if self.max_lines is None:
            self.max_lines = self.max_results * LINES_PER_RESULT
            # Derived, not user-set: keep it out of model_fields_set
            self.model_fields_set.discard("max_lines")
        return self


class ConfigManager:
    """Loads and saves the JSON configuration file."""

    CONFIG_DIR_NAME = ".search-aggregator"
    DEFAULT_CONFIG_PATH = Path(CONFIG_DIR_NAME) / "config.json"

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH
        self._config: Optional[SearchConfig] = None

    def load(self) -> SearchConfig:
        """Load configuration from file, or defaults when the file is absent."""
        if self.config_path.exists():
            try:
                with open(self.config_path, "r") as f:
                    data = json.load(f)
                self._config = SearchConfig(**data)
            except Exception as e:
                raise ValueError(f"Failed to load config from {self.config_path}: {e}")
            logger.debug(f"Loaded search config from {self.config_path}")
        else:
            self._config = SearchConfig()

        return self._config

    def save(self, config: Optional[SearchConfig] = None) -> None:
        """Save configuration to file."""
        if config is None:
            config = self._config

        if config is None:
            raise ValueError("No configuration to save")

        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = config.model_dump(mode="json")
        if "max_lines" not in config.model_fields_set:
            # Derived from max_results; leave it to be recomputed on load
            config_dict.pop("max_lines", None)
        with open(self.config_path, "w") as f:
            json.dump(config_dict, f, indent=2, sort_keys=True)

    def get_config(self) -> SearchConfig:
        """Get current configuration, loading if necessary."""
        if self._config is None:
            self.load()
        if self._config is None:
            raise RuntimeError("Failed to load configuration")
        return self._config

    def create_default_config(self) -> SearchConfig:
        """Write a default configuration to config_path."""
        config = SearchConfig()
        self._config = config
        self.save()
        return config

    @classmethod
    def find_config_path(cls, start_dir: Optional[Path] = None) -> Optional[Path]:
        """Find .search-aggregator/config.json by walking up the directory tree.

        Args:
            start_dir: Directory to start searching from (default: current directory)

        Returns:
            Path to config.json if found, None otherwise
        """
        current = (start_dir or Path.cwd()).resolve()

        for path in [current] + list(current.parents):
            config_path = path / cls.CONFIG_DIR_NAME / "config.json"
            if config_path.exists():
                return config_path

        return None

    @classmethod
    def create_with_backtrack(cls, start_dir: Optional[Path] = None) -> "ConfigManager":
        """Create ConfigManager by finding config through directory backtracking.

        Falls back to the default location under start_dir when nothing is found.
        """
        config_path = cls.find_config_path(start_dir)
        if config_path is None:
            start = start_dir or Path.cwd()
            config_path = start / cls.CONFIG_DIR_NAME / "config.json"
        return cls(config_path)
