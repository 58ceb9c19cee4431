"""Engine configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

import yaml
from loguru import logger

DEFAULT_BOARD_SIZE = 5
DEFAULT_MAX_MOVES = 16
DEFAULT_TARGET_LINES = 4
DEFAULT_TRIALS = 1000
DEFAULT_RESET_DELAY_SECONDS = 2.0


@dataclass(frozen=True)
class EngineConfig:
    """
    Named, overridable options shared by every engine component.

    Attributes:
        board_size: Side length of the square board.
        max_moves: Number of cells marked in one play-through.
        target_lines: Completed lines that count as a successful rollout.
        trials: Random rollouts per heuristic evaluation.
        reset_delay_seconds: How long a host waits after the last move before resetting.
        advised_starts: Whether the advised player owns the first move.
        seed: Seed for the rollout generator. None leaves it unseeded.
    """
    board_size: int = DEFAULT_BOARD_SIZE
    max_moves: int = DEFAULT_MAX_MOVES
    target_lines: int = DEFAULT_TARGET_LINES
    trials: int = DEFAULT_TRIALS
    reset_delay_seconds: float = DEFAULT_RESET_DELAY_SECONDS
    advised_starts: bool = True
    seed: Optional[int] = None

    def __post_init__(self):
        for name in ("board_size", "max_moves", "target_lines", "trials"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        if isinstance(self.reset_delay_seconds, bool) or not isinstance(
            self.reset_delay_seconds, (int, float)
        ):
            raise ValueError(
                f"reset_delay_seconds must be a number, got {self.reset_delay_seconds!r}"
            )
        if not isinstance(self.advised_starts, bool):
            raise ValueError(f"advised_starts must be true or false, got {self.advised_starts!r}")
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            raise ValueError(f"seed must be an integer or empty, got {self.seed!r}")

        if self.board_size < 2:
            raise ValueError("Board size must be at least 2")
        if not 0 <= self.max_moves <= self.cell_count:
            raise ValueError(
                f"Move cap must be between 0 and {self.cell_count}, got {self.max_moves}"
            )
        if self.target_lines < 0:
            raise ValueError("Target line count cannot be negative")
        if self.trials < 1:
            raise ValueError("Rollout trial count must be positive")
        if self.reset_delay_seconds < 0:
            raise ValueError("Reset delay cannot be negative")

    @property
    def cell_count(self) -> int:
        """Number of cells on the board."""
        return self.board_size * self.board_size

    @classmethod
    def for_size(cls, board_size: int) -> EngineConfig:
        """Defaults for another board size, with the move cap clamped to fit."""
        return cls(
            board_size=board_size,
            max_moves=min(DEFAULT_MAX_MOVES, board_size * board_size),
        )

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]]) -> EngineConfig:
        """Build a config from a flat mapping or one nested under ``engine``."""
        if not mapping:
            return cls()
        if isinstance(mapping.get("engine"), Mapping):
            mapping = mapping["engine"]

        known = {f.name for f in fields(cls)}
        overrides = {}
        for key, value in mapping.items():
            if key not in known:
                logger.warning(f"Ignoring unknown config option: {key}")
                continue
            overrides[key] = value
        return cls(**overrides)


def load_config(config_path: Optional[str] = None) -> EngineConfig:
    """
    Load engine options from a YAML file, falling back to defaults.

    Args:
        config_path: Path to a YAML file. None means defaults only.

    Returns:
        The merged configuration.

    Raises:
        ValueError: If the file holds values that fail validation.
    """
    if config_path is None:
        return EngineConfig()

    path = os.path.expanduser(config_path)
    if not os.path.exists(path):
        logger.warning(f"Configuration file not found at {path}")
        logger.info("Using default configuration")
        return EngineConfig()

    try:
        with open(path, "r", encoding="utf-8") as config_file:
            user_config = yaml.safe_load(config_file)
    except (OSError, yaml.YAMLError) as error:
        logger.error(f"Error loading configuration from {path}: {error}")
        logger.info("Using default configuration")
        return EngineConfig()

    if user_config is not None and not isinstance(user_config, Mapping):
        logger.error(f"Configuration in {path} must be a mapping")
        return EngineConfig()

    config = EngineConfig.from_mapping(user_config)
    logger.info(f"Loaded configuration from {path}")
    return config
