"""
Configuration management for scratchnet training runs.
TOML-based defaults that CLI flags can override.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:  # Python < 3.11
    import tomli as tomllib  # type: ignore

from .network import DEFAULT_LEARNING_RATE, DEFAULT_LOG_INTERVAL, UpdateRule
from .sampling import SampleOrder

logger = logging.getLogger(__name__)

DEFAULT_STRUCTURE = (784, 512, 256, 128, 10)
DEFAULT_ITERATIONS = 1000


def parse_structure(value: str | list[int] | tuple[int, ...]) -> list[int]:
    """Parse a layer structure given as ``"784,128,10"`` or a list of ints."""
    if isinstance(value, str):
        parts = [part.strip() for part in value.split(",") if part.strip()]
        try:
            return [int(part) for part in parts]
        except ValueError as exc:
            raise ValueError(f"Invalid layer structure {value!r}: {exc}") from exc
    return [int(size) for size in value]


@dataclass
class TrainingConfig:
    """Configuration for a training run."""

    structure: list[int] = field(default_factory=lambda: list(DEFAULT_STRUCTURE))
    iterations: int = DEFAULT_ITERATIONS
    learning_rate: float = DEFAULT_LEARNING_RATE
    sampling: SampleOrder = SampleOrder.SEQUENTIAL
    index: int = 0
    update_rule: UpdateRule = UpdateRule.STANDARD
    seed: int | None = None
    log_interval: int = DEFAULT_LOG_INTERVAL
    limit: int | None = None

    @classmethod
    def load(cls, path: Path | None = None) -> TrainingConfig:
        """
        Load configuration from file or use defaults.

        Search order:
        1. Specified path (if provided)
        2. .scratchnet.toml in current directory
        3. pyproject.toml [tool.scratchnet] section
        4. Default config
        """
        config = cls()

        if path and path.exists():
            config._load_from_file(path)
            return config

        scratchnet_toml = Path(".scratchnet.toml")
        if scratchnet_toml.exists():
            config._load_from_file(scratchnet_toml)
            return config

        pyproject_toml = Path("pyproject.toml")
        if pyproject_toml.exists():
            config._load_from_pyproject(pyproject_toml)
            return config

        return config

    def _load_from_file(self, path: Path) -> None:
        """Load configuration from a TOML file."""
        try:
            with path.open("rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            logger.debug("Failed to load config from %s: %s", path, exc)
            return
        self._parse_config(data)

    def _load_from_pyproject(self, path: Path) -> None:
        """Load configuration from pyproject.toml [tool.scratchnet] section."""
        try:
            with path.open("rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            logger.debug("Failed to load config from pyproject.toml: %s", exc)
            return
        section = data.get("tool", {}).get("scratchnet")
        if section:
            self._parse_config(section)

    def _parse_config(self, data: dict[str, Any]) -> None:
        """Parse configuration dictionary into this object."""
        known = {f.name for f in fields(self)}
        for key, value in data.items():
            name = key.replace("-", "_")
            if name not in known:
                logger.warning("Unknown configuration key %r; ignoring", key)
                continue
            self._set(name, value)

    def _set(self, name: str, value: Any) -> None:
        if name == "structure":
            value = parse_structure(value)
        elif name == "sampling":
            value = value if isinstance(value, SampleOrder) else SampleOrder(str(value).lower())
        elif name == "update_rule":
            value = value if isinstance(value, UpdateRule) else UpdateRule(str(value).lower())
        elif name == "learning_rate":
            value = float(value)
        elif value is not None and name in ("iterations", "index", "seed", "log_interval", "limit"):
            value = int(value)
        setattr(self, name, value)

    def validate(self) -> None:
        """Raise ValueError if any setting is out of range."""
        if len(self.structure) < 2:
            raise ValueError("structure must have at least two layers")
        if any(size < 1 for size in self.structure):
            raise ValueError("structure sizes must be positive integers")
        if self.iterations < 1:
            raise ValueError("iterations must be a positive integer")
        if self.learning_rate <= 0:
            raise ValueError("learning_rate must be positive")
        if self.index < 0:
            raise ValueError("index must be non-negative")
        if self.log_interval < 1:
            raise ValueError("log_interval must be a positive integer")
        if self.limit is not None and self.limit < 1:
            raise ValueError("limit must be a positive integer")

    @classmethod
    def from_cli_args(cls, path: Path | None = None, **overrides: Any) -> TrainingConfig:
        """
        Create config from CLI arguments merged with file config.

        Overrides whose value is None are ignored so unset flags keep the file value.
        """
        config = cls.load(path)
        for name, value in overrides.items():
            if value is not None:
                config._set(name, value)
        config.validate()
        return config

