# mini_fdm/config.py
"""
Solver configuration and defaults.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass
class SolverConfig:
    """Defaults applied when an EquilibriumSolver is created."""

    # Uniform load applied to every unknown node (unit load, -z)
    default_load: Tuple[float, float, float] = (0.0, 0.0, -1.0)

    # Force density assigned to every branch until set explicitly
    default_force_density: float = 1.0

    # Max condition number of Dn before the solve is rejected
    cond_limit: float = 1e12

    def __post_init__(self):
        if len(self.default_load) != 3:
            raise ValueError(f"default_load must have 3 components, got {len(self.default_load)}")
        if self.default_force_density < 0:
            raise ValueError(
                f"default_force_density must be non-negative, got {self.default_force_density}"
            )
        if self.cond_limit <= 0:
            raise ValueError(f"cond_limit must be positive, got {self.cond_limit}")


# Global config instance
CONFIG = SolverConfig()
