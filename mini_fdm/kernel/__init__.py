# mini_fdm/kernel - Topology encoding and linear-system core
"""
KERNEL: TOPOLOGY, ASSEMBLY, SOLVE
=================================

This package contains the algorithmic core of the Force Density Method:

- topology.py   TopologyGraph: branches, fixed/unknown partition, C / Cn / Cf
- assemble.py   Dn = Cnᵀ Q Cn, Df = Cnᵀ Q Cf and the per-axis right-hand sides
- solve.py      Reduced solve Dn · X = B with singularity detection

It knows nothing about loads being uniform or force densities being one;
those choices live in the solver (mini_fdm.fdm).
"""

from .topology import TopologyGraph, IndexMap
from .assemble import assemble_reduced, assemble_rhs, force_density_matrix
from .solve import solve_reduced, SingularSystemError

__all__ = [
    'TopologyGraph', 'IndexMap',
    'assemble_reduced', 'assemble_rhs', 'force_density_matrix',
    'solve_reduced', 'SingularSystemError',
]
