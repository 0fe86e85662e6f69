"""
Solver configuration and logging setup.

A run is described by a frozen SolverConfig. Configs can be loaded from YAML;
keys missing from the file take the dataclass defaults:

    game: kuhn
    game_options: {deck_size: 3}
    iterations: 50000
    chance_sampling: cycle
    seed: 0
    convergence_check_every: 10000
    exploitability_threshold: null
    log_every: 10000
    log_level: INFO
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

from cfr_solver.games.factory import available_games
from cfr_solver.solvers.cfr import CHANCE_MODES

logger = logging.getLogger(__name__)

LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class SolverConfig:
    """Parameters for one CFR training run.

    Attributes:
        game:                     Game name (see games.factory.available_games()).
        game_options:             Keyword arguments for the game constructor.
        iterations:               Number of CFR iterations.
        chance_sampling:          ``"cycle"``, ``"sample"`` or ``"enumerate"``.
        seed:                     Generator seed for sampled chance.
        convergence_check_every:  Exploitability check interval, or None.
        exploitability_threshold: Early-stopping threshold, or None.
        log_every:                Progress logging interval, or None.
        log_level:                Logging level name.
    """

    game: str = "kuhn"
    game_options: dict[str, Any] = field(default_factory=dict)
    iterations: int = 10_000
    chance_sampling: str = "cycle"
    seed: int | None = None
    convergence_check_every: int | None = None
    exploitability_threshold: float | None = None
    log_every: int | None = None
    log_level: str = "INFO"

    def validate(self) -> SolverConfig:
        """Return self if every field is usable.

        Raises:
            ValueError: On an unknown game, chance mode, or log level, or a
                        non-positive interval / iteration count.
        """
        if self.game not in available_games():
            raise ValueError(f"Unknown game: {self.game!r}. Available games: {available_games()}")
        if self.chance_sampling not in CHANCE_MODES:
            raise ValueError(
                f"Unknown chance sampling mode: {self.chance_sampling!r}. Expected one of {CHANCE_MODES}"
            )
        if self.iterations <= 0:
            raise ValueError(f"iterations must be positive, got {self.iterations}")
        for name in ("convergence_check_every", "log_every"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.exploitability_threshold is not None and self.exploitability_threshold <= 0:
            raise ValueError(
                f"exploitability_threshold must be positive, got {self.exploitability_threshold}"
            )
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level!r}")
        return self

    def with_overrides(self, **overrides: Any) -> SolverConfig:
        """Copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes).validate()


def config_to_dict(config: SolverConfig) -> dict[str, Any]:
    return asdict(config)


def load_config(config_path: str | Path) -> SolverConfig:
    """Load a SolverConfig from a YAML file, filling in defaults.

    Args:
        config_path: Path to the YAML file.

    Returns:
        Validated SolverConfig.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError:        On YAML syntax errors, unknown keys, or invalid values.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML configuration: {e}") from e

    raw = raw or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Configuration must be a mapping, got {type(raw).__name__}")

    known = {f.name for f in fields(SolverConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {unknown}")

    config = SolverConfig(**raw).validate()
    logger.info("Loaded configuration from %s", config_path)
    return config


def save_config(config: SolverConfig, config_path: str | Path) -> None:
    """Write *config* as YAML, creating parent directories as needed."""
    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(config_to_dict(config), f, default_flow_style=False, sort_keys=False)
    logger.info("Saved configuration to %s", config_path)


def configure_logging(level: str = "INFO") -> None:
    """Route log records to stderr with timestamps."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, force=True)
