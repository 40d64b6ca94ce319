"""Configuration system for grid-SIRD.

Hierarchical YAML configuration with deep-merge support:
  base.yaml → scenario override → programmatic overrides

YAML top-level keys map 1:1 to ExperimentConfig sections:
  simulation: SimulationConfig (population, disease, grid, run control)
  sweep:      SweepSection (infectious-period sweep)

Every constructed SimulationConfig is validated; invalid parameters fail
fast with ConfigurationError before any agent is allocated.
"""

from __future__ import annotations

import dataclasses
import math
import numbers
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml


class ConfigurationError(ValueError):
    """Invalid construction parameters. Not retryable; fix and reconstruct."""


# ═══════════════════════════════════════════════════════════════════════
# DEFAULT SCENARIO
# ═══════════════════════════════════════════════════════════════════════

DEFAULT_N_AGENTS = 2000
DEFAULT_INITIAL_INFECTED = 10
DEFAULT_DURATION = 21          # ticks an agent stays infectious
DEFAULT_P_DEATH = 0.05
DEFAULT_WIDTH = 100
DEFAULT_HEIGHT = 100

DEFAULT_SWEEP_DURATIONS = list(range(5, 31))
DEFAULT_SWEEP_RUNS = 16


# ═══════════════════════════════════════════════════════════════════════
# CONFIGURATION DATACLASSES
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SimulationConfig:
    """Immutable parameters of one simulation run."""
    n_agents: int = DEFAULT_N_AGENTS               # N
    initial_infected: int = DEFAULT_INITIAL_INFECTED  # k, first k agents start infected
    duration: int = DEFAULT_DURATION               # D
    p_death: float = DEFAULT_P_DEATH               # death probability once D elapses
    width: int = DEFAULT_WIDTH                     # W
    height: int = DEFAULT_HEIGHT                   # H
    seed: Optional[int] = None                     # None = fresh OS entropy
    max_ticks: Optional[int] = None                # safety valve; None = run to termination

    @property
    def grid_size(self) -> Tuple[int, int]:
        return self.width, self.height

    def replace(self, **changes: Any) -> 'SimulationConfig':
        """Return a validated copy with `changes` applied."""
        updated = dataclasses.replace(self, **changes)
        validate_simulation(updated)
        return updated


@dataclass
class SweepSection:
    """Infectious-period sweep: fraction infected as a function of D."""
    durations: List[int] = field(
        default_factory=lambda: list(DEFAULT_SWEEP_DURATIONS)
    )
    runs: int = DEFAULT_SWEEP_RUNS   # replicates per duration
    seed: Optional[int] = 42         # master seed for replicate streams; None = OS entropy


@dataclass
class ExperimentConfig:
    """Complete configuration.

    Load from YAML via `load_config()`. Sections map 1:1 to YAML top-level keys.
    """
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    sweep: SweepSection = field(default_factory=SweepSection)


# ═══════════════════════════════════════════════════════════════════════
# VALIDATION
# ═══════════════════════════════════════════════════════════════════════

def _is_int(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _require_int(name: str, value: Any, minimum: int) -> None:
    if not _is_int(value):
        raise ConfigurationError(
            f"{name} must be an integer, got {value!r} ({type(value).__name__})"
        )
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")


def validate_simulation(config: SimulationConfig) -> None:
    """Validate a SimulationConfig. Raises ConfigurationError on failure.

    Checks:
      - N >= 0, 0 <= k <= N, D >= 0
      - 0 <= p_death <= 1 (finite)
      - grid is at least 1 × 1
      - seed (if given) non-negative, max_ticks (if given) positive
    """
    _require_int('n_agents', config.n_agents, 0)
    _require_int('initial_infected', config.initial_infected, 0)
    if config.initial_infected > config.n_agents:
        raise ConfigurationError(
            f"initial_infected ({config.initial_infected}) must be <= "
            f"n_agents ({config.n_agents})"
        )
    _require_int('duration', config.duration, 0)

    p = config.p_death
    if not isinstance(p, numbers.Real) or isinstance(p, bool):
        raise ConfigurationError(f"p_death must be a real number, got {p!r}")
    if not math.isfinite(p) or not (0.0 <= p <= 1.0):
        raise ConfigurationError(f"p_death must be in [0, 1], got {p}")

    _require_int('width', config.width, 1)
    _require_int('height', config.height, 1)

    if config.seed is not None:
        _require_int('seed', config.seed, 0)
    if config.max_ticks is not None:
        _require_int('max_ticks', config.max_ticks, 1)

    if config.initial_infected == 0:
        warnings.warn(
            "initial_infected is 0: the simulation starts terminated and "
            "run() returns only the initial snapshot.",
            UserWarning,
            stacklevel=3,
        )


def validate_sweep(sweep: SweepSection) -> None:
    if len(sweep.durations) == 0:
        raise ConfigurationError("sweep.durations must not be empty")
    for i, d in enumerate(sweep.durations):
        _require_int(f"sweep.durations[{i}]", d, 0)
    _require_int('sweep.runs', sweep.runs, 1)
    if sweep.seed is not None:
        _require_int('sweep.seed', sweep.seed, 0)


def validate_config(config: Union[ExperimentConfig, SimulationConfig]) -> None:
    """Validate a full ExperimentConfig (or a bare SimulationConfig)."""
    if isinstance(config, SimulationConfig):
        validate_simulation(config)
        return
    validate_simulation(config.simulation)
    validate_sweep(config.sweep)


# ═══════════════════════════════════════════════════════════════════════
# YAML LOADING & MERGING
# ═══════════════════════════════════════════════════════════════════════

def deep_merge(base: Dict, override: Dict) -> Dict:
    """Recursively merge override into base. Modifies base in place.

    - Dict values are merged recursively
    - Non-dict values are replaced
    - Keys in override but not base are added

    Returns:
        The merged base dictionary.
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _dict_to_section(section_cls, data: Dict) -> Any:
    """Convert a dict to a dataclass, ignoring unknown keys."""
    valid_fields = {f.name for f in dataclasses.fields(section_cls)}
    filtered = {k: v for k, v in data.items() if k in valid_fields}
    return section_cls(**filtered)


def _yaml_to_config(data: Dict) -> ExperimentConfig:
    """Convert a merged YAML dict to an ExperimentConfig."""
    section_map = {
        'simulation': SimulationConfig,
        'sweep': SweepSection,
    }
    sections = {}
    for key, cls in section_map.items():
        if key in data and isinstance(data[key], dict):
            sections[key] = _dict_to_section(cls, data[key])
        else:
            sections[key] = cls()
    return ExperimentConfig(**sections)


def _read_yaml(path: Path) -> Dict:
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"{path}: top level must be a mapping, got {type(data).__name__}"
        )
    return data


def load_config(
    base_path: Union[str, Path],
    scenario_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict] = None,
) -> ExperimentConfig:
    """Load and merge hierarchical YAML configuration.

    Merge order: base → scenario → overrides.
    Each layer overrides only the fields it specifies.

    Args:
        base_path: Path to base configuration YAML.
        scenario_path: Optional scenario override YAML (skipped if absent).
        overrides: Optional dict of overrides, e.g.
            ``{'simulation': {'duration': 14}}``.

    Returns:
        Validated ExperimentConfig.

    Raises:
        FileNotFoundError: If base_path doesn't exist.
        ConfigurationError: If validation fails.
    """
    base_path = Path(base_path)
    if not base_path.exists():
        raise FileNotFoundError(f"Config file not found: {base_path}")

    config_dict = _read_yaml(base_path)

    if scenario_path is not None:
        scenario_path = Path(scenario_path)
        if scenario_path.exists():
            deep_merge(config_dict, _read_yaml(scenario_path))

    if overrides is not None:
        deep_merge(config_dict, overrides)

    config = _yaml_to_config(config_dict)
    validate_config(config)
    return config


def default_config() -> ExperimentConfig:
    """Return an ExperimentConfig with all default values."""
    config = ExperimentConfig()
    validate_config(config)
    return config
