# mini_fdm/sweep.py
"""
SWEEP: Batch Evaluation of Load Cases
=====================================

PURPOSE:
--------
Re-solve one network for many uniform load vectors and collect the key
figures in a DataFrame, e.g. to see how ΣFL changes as the load tilts
away from vertical.

A case whose reduced system is singular is recorded with ok=False and the
sweep moves on. The cases are solved on a copy of the solver, so the
caller's solver keeps its inputs and its last result.
"""

import logging
from typing import Iterable, Sequence

import numpy as np
import pandas as pd
from tqdm import tqdm

from .fdm import EquilibriumSolver
from .kernel.solve import SingularSystemError

logger = logging.getLogger(__name__)


def run_load_sweep(
    solver: EquilibriumSolver,
    loads: Iterable[Sequence[float]],
    show_progress: bool = False
) -> pd.DataFrame:
    """
    Solve once per load vector and tabulate the results.

    Parameters:
    -----------
    solver : EquilibriumSolver
        Solver with boundary conditions already set
    loads : iterable of 3-vectors
        Uniform load vectors to evaluate
    show_progress : bool
        Show a tqdm progress bar

    Returns:
    --------
    pd.DataFrame
        One row per load case with columns
        load_x, load_y, load_z, ok, sigma_fl, max_force, min_z, error
    """
    loads = [np.asarray(p, dtype=float) for p in loads]
    case_solver = solver.copy()

    rows = []
    iterator = tqdm(loads, desc="Solving") if show_progress else loads
    for p in iterator:
        case_solver.set_load(p)
        row = {'load_x': p[0], 'load_y': p[1], 'load_z': p[2]}
        try:
            result = case_solver.solve()
        except SingularSystemError as e:
            logger.warning("Load case %s failed: %s", p.tolist(), e)
            row.update({
                'ok': False,
                'sigma_fl': np.nan,
                'max_force': np.nan,
                'min_z': np.nan,
                'error': str(e),
            })
        else:
            unknown_z = result.state_unknown()[:, 2]
            row.update({
                'ok': True,
                'sigma_fl': result.sigma_fl,
                'max_force': float(np.max(result.forces)) if len(result.forces) else 0.0,
                'min_z': float(np.min(unknown_z)) if len(unknown_z) else np.nan,
                'error': '',
            })
        rows.append(row)

    return pd.DataFrame(
        rows,
        columns=['load_x', 'load_y', 'load_z', 'ok', 'sigma_fl', 'max_force', 'min_z', 'error'],
    )
