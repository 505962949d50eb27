# mini_fdm - Force Density Method form finding
"""
MINI-FDM: Form Finding with the Force Density Method
====================================================

This package computes the equilibrium shape of grid-like networks of axial
branches (cable nets, grid shell approximations):

- Topology encoding: branch-node incidence matrix C and its fixed/unknown
  column blocks Cn, Cf
- Direct linear solve of the equilibrium per axis
- Branch lengths, tension forces and the ΣFL performance measure

ARCHITECTURE:
-------------
    kernel/         Topology graph, matrix assembly, reduced solve
    model.py        Node3D, Branch
    config.py       Solver defaults (load, force density, conditioning)
    fdm.py          EquilibriumSolver
    post.py         Branch table, support reactions, cut list, summary
    sweep.py        Batch evaluation of load cases
    generative/     Regular grid generator

Rendering, cameras and widgets belong to a front end; this package takes and
returns plain numpy data.
"""

from .kernel import TopologyGraph, IndexMap, SingularSystemError
from .fdm import EquilibriumSolver, EquilibriumResult, ShapeMismatchError
from .config import SolverConfig, CONFIG
from .model import Node3D, Branch

__version__ = "0.1.0"

__all__ = [
    'TopologyGraph', 'IndexMap', 'SingularSystemError',
    'EquilibriumSolver', 'EquilibriumResult', 'ShapeMismatchError',
    'SolverConfig', 'CONFIG', 'Node3D', 'Branch',
]
