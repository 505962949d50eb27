# mini_fdm/fdm.py
"""
FORCE DENSITY METHOD: Equilibrium Solver
========================================

PURPOSE:
--------
Finds the equilibrium shape of a network of axial branches (a cable net or
a grid shell approximation) for a given load, using the Force Density
Method (Linkwitz & Schek).

For each branch the force density q = F / L is prescribed. The equilibrium
of the unknown nodes then becomes LINEAR in the coordinates:

    Dn · xn = px - Df · xf        (same for y and z)

    Dn = Cnᵀ Q Cn,   Df = Cnᵀ Q Cf,   Q = diag(q)

Once the coordinates are known, each branch gets

    (u, v, w) = C · (x, y, z)        coordinate differences
    L = sqrt(u² + v² + w²)           length
    F = q · L                        tension force

and the structure as a whole gets the performance measure

    ΣFL = Σ F_i · L_i

a proxy for the material effort (load path) of the form.

WORKFLOW:
---------
    graph = TopologyGraph(n_nodes, fixed)     # topology, once
    graph.add_branch(...) ...
    graph.build()

    solver = EquilibriumSolver(graph)
    solver.set_boundary_conditions(x, y, z)   # original node order
    solver.set_load((0, 0, -1))               # uniform load on unknown nodes
    result = solver.solve()                   # direct solve, no iteration

    result.state()        # (N, 3) points in original order
    result.forces         # per-branch tension forces
    result.sigma_fl       # ΣFL

Load and boundary conditions can be changed and solve() called again as
often as needed; every call recomputes everything from the current inputs.

REFERENCE:
----------
K. Linkwitz, "Force Density Method", ch. 6 in Adriaenssens, Block,
Veenendaal & Williams (eds.), Shell Structures for Architecture:
Form Finding and Optimization, Taylor & Francis, 2014.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from .config import CONFIG, SolverConfig
from .model import Node3D
from .kernel.topology import TopologyGraph, IndexMap
from .kernel.assemble import assemble_reduced, assemble_rhs
from .kernel.solve import solve_reduced

logger = logging.getLogger(__name__)


class ShapeMismatchError(ValueError):
    """Raised when an input array does not match the size of the topology."""
    pass


@dataclass(frozen=True)
class EquilibriumResult:
    """
    Solution of one solve() call.

    Coordinates are stored in PARTITIONED order (unknown nodes first, then
    fixed nodes); use state() for original node order.

    Attributes:
    -----------
    xyz : np.ndarray
        Node coordinates, partitioned order, shape (N, 3)
    index_map : IndexMap
        Map between original and partitioned order
    n_unknown : int
        Number of unknown nodes (first n_unknown rows of xyz)
    q : np.ndarray
        Force densities used, shape (n_branches,)
    loads : np.ndarray
        Loads applied to the unknown nodes, shape (n_unknown, 3)
    lengths : np.ndarray
        Branch lengths L, shape (n_branches,)
    forces : np.ndarray
        Branch tension forces F = q · L, shape (n_branches,)
    sigma_fl : float
        Performance measure Σ F_i · L_i
    residual : float
        Max absolute equilibrium residual |Dn·Xn + Df·Xf - P|
    """
    xyz: np.ndarray
    index_map: IndexMap
    n_unknown: int
    q: np.ndarray
    loads: np.ndarray
    lengths: np.ndarray
    forces: np.ndarray
    sigma_fl: float
    residual: float

    def state(self) -> np.ndarray:
        """All node coordinates in original order, shape (N, 3)."""
        return self.index_map.to_original(self.xyz)

    def state_unknown(self) -> np.ndarray:
        """Unknown node coordinates in partitioned order, shape (n_unknown, 3)."""
        return self.xyz[:self.n_unknown]

    def state_fixed(self) -> np.ndarray:
        """Fixed node coordinates in partitioned order, shape (n_fixed, 3)."""
        return self.xyz[self.n_unknown:]

    def nodes(self) -> Dict[int, Node3D]:
        """Solved positions as {id: Node3D}, in original order."""
        return {
            i: Node3D(id=i, x=float(p[0]), y=float(p[1]), z=float(p[2]))
            for i, p in enumerate(self.state())
        }


class EquilibriumSolver:
    """
    Force Density Method solver bound to one built TopologyGraph.

    Holds the current inputs (boundary positions, load, force densities)
    and the result of the last successful solve(). The graph itself is never
    modified. Not thread-safe: use one solver per session.

    Parameters:
    -----------
    graph : TopologyGraph
        Topology; build() must already have been called
    config : SolverConfig, optional
        Defaults for load, force density and conditioning limit.
        Falls back to the module-level CONFIG.
    """

    def __init__(self, graph: TopologyGraph, config: Optional[SolverConfig] = None):
        if not graph.is_built:
            raise RuntimeError("EquilibriumSolver needs a built TopologyGraph (call graph.build())")
        self._graph = graph
        self._config = config if config is not None else CONFIG

        self._load = np.array(self._config.default_load, dtype=float)
        self._nodal_loads = None
        self._q = np.full(graph.n_branches, float(self._config.default_force_density))

        self._x = None
        self._y = None
        self._z = None

        self._result: Optional[EquilibriumResult] = None

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    @property
    def graph(self) -> TopologyGraph:
        return self._graph

    @property
    def config(self) -> SolverConfig:
        return self._config

    def _as_node_vector(self, values, name: str) -> np.ndarray:
        arr = np.array(values, dtype=float)
        n = self._graph.n_nodes
        if arr.ndim != 1 or arr.shape[0] != n:
            raise ShapeMismatchError(
                f"{name} must have exactly {n} entries (one per node), got shape {arr.shape}"
            )
        return arr

    def set_boundary_conditions(self, x, y, z) -> None:
        """
        Set node positions per axis, in original node order.

        Only the entries of fixed nodes act as constraints; entries of unknown
        nodes are overwritten by the solve.

        Raises:
        -------
        ShapeMismatchError
            If any array does not have exactly N entries
        ValueError
            If a fixed node position is not finite
        """
        xs = self._as_node_vector(x, "x")
        ys = self._as_node_vector(y, "y")
        zs = self._as_node_vector(z, "z")

        fixed = self._graph.fixed
        for name, arr in (("x", xs), ("y", ys), ("z", zs)):
            if not np.all(np.isfinite(arr[fixed])):
                raise ValueError(f"{name} has non-finite positions at fixed nodes")

        self._x, self._y, self._z = xs, ys, zs

    @property
    def has_boundary_conditions(self) -> bool:
        return self._x is not None

    def set_load(self, vector) -> None:
        """Set the uniform load applied to every unknown node. Clears per-node loads."""
        p = np.array(vector, dtype=float)
        if p.shape != (3,):
            raise ShapeMismatchError(f"Load must be a 3-vector, got shape {p.shape}")
        if not np.all(np.isfinite(p)):
            raise ValueError(f"Load must be finite, got {p}")
        self._load = p
        self._nodal_loads = None

    def get_load(self) -> np.ndarray:
        """Current uniform load vector (copy)."""
        return self._load.copy()

    @property
    def load(self) -> np.ndarray:
        return self.get_load()

    def set_nodal_loads(self, loads) -> None:
        """
        Set one load vector per node, shape (N, 3), original order.

        Rows belonging to fixed nodes are ignored. While per-node loads are
        set they replace the uniform load; pass None to go back to it.
        """
        if loads is None:
            self._nodal_loads = None
            return
        P = np.array(loads, dtype=float)
        n = self._graph.n_nodes
        if P.shape != (n, 3):
            raise ShapeMismatchError(f"Nodal loads must have shape ({n}, 3), got {P.shape}")
        if not np.all(np.isfinite(P)):
            raise ValueError("Nodal loads must be finite")
        self._nodal_loads = P

    @property
    def nodal_loads(self) -> Optional[np.ndarray]:
        return None if self._nodal_loads is None else self._nodal_loads.copy()

    def set_force_densities(self, q) -> None:
        """
        Set the force density of every branch (branch insertion order).

        A scalar applies the same value to all branches.

        Raises:
        -------
        ShapeMismatchError
            If q does not have one entry per branch
        ValueError
            If any value is negative or not finite
        """
        nb = self._graph.n_branches
        q = np.array(q, dtype=float)
        if q.ndim == 0:
            q = np.full(nb, float(q))
        if q.shape != (nb,):
            raise ShapeMismatchError(f"Force densities must have {nb} entries, got shape {q.shape}")
        if not np.all(np.isfinite(q)):
            raise ValueError("Force densities must be finite")
        if np.any(q < 0):
            raise ValueError(f"Force densities must be non-negative, min is {q.min()}")
        self._q = q

    @property
    def force_densities(self) -> np.ndarray:
        return self._q.copy()

    def copy(self) -> "EquilibriumSolver":
        """New solver on the same graph with the same inputs and no result."""
        other = EquilibriumSolver(self._graph, self._config)
        other._load = self._load.copy()
        other._nodal_loads = self.nodal_loads
        other._q = self._q.copy()
        other._x, other._y, other._z = self._x, self._y, self._z
        return other

    def _unknown_loads(self) -> np.ndarray:
        graph = self._graph
        if self._nodal_loads is not None:
            return self._nodal_loads[graph.unknown]
        return np.tile(self._load, (graph.n_unknown, 1))

    # ------------------------------------------------------------------
    # Solve
    # ------------------------------------------------------------------

    def solve(self) -> EquilibriumResult:
        """
        Compute the equilibrium state for the current inputs.

        Direct solve, no iteration. On failure the previous result is kept.

        Returns:
        --------
        EquilibriumResult

        Raises:
        -------
        RuntimeError
            If no boundary conditions have been set
        SingularSystemError
            If Dn is singular (e.g. an unknown node not connected to any
            fixed node through branches with q > 0)
        """
        if not self.has_boundary_conditions:
            raise RuntimeError("Boundary conditions must be set before solve()")

        graph = self._graph
        imap = graph.index_map
        nu = graph.n_unknown
        q = self._q.copy()

        # Position vectors, original order -> unknown-first order
        xyz = imap.to_partitioned(np.column_stack([self._x, self._y, self._z]))
        Xf = xyz[nu:]

        Dn, Df = assemble_reduced(graph.Cn, graph.Cf, q)
        P = self._unknown_loads()
        B = assemble_rhs(Df, Xf, P)

        Xn = solve_reduced(Dn, B, cond_limit=self._config.cond_limit)

        xyz = np.vstack([Xn, Xf])

        # Branch coordinate differences, lengths, forces
        uvw = graph.C @ xyz
        lengths = np.sqrt(np.sum(uvw * uvw, axis=1))
        forces = q * lengths
        sigma_fl = float(forces @ lengths)

        residual = float(np.max(np.abs(Dn @ Xn + Df @ Xf - P))) if nu > 0 else 0.0

        for arr in (xyz, q, P, lengths, forces):
            arr.flags.writeable = False

        result = EquilibriumResult(
            xyz=xyz,
            index_map=imap,
            n_unknown=nu,
            q=q,
            loads=P,
            lengths=lengths,
            forces=forces,
            sigma_fl=sigma_fl,
            residual=residual,
        )
        self._result = result

        logger.debug("Solved %d unknown nodes: sigma_fl=%.6g, residual=%.3e", nu, sigma_fl, residual)
        return result

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    @property
    def has_solution(self) -> bool:
        return self._result is not None

    @property
    def result(self) -> Optional[EquilibriumResult]:
        return self._result

    def _require_result(self) -> EquilibriumResult:
        if self._result is None:
            raise RuntimeError("No solution yet; call solve() first")
        return self._result

    def state(self) -> np.ndarray:
        """Solved coordinates in original node order, shape (N, 3)."""
        return self._require_result().state()

    def state_unknown(self) -> np.ndarray:
        return self._require_result().state_unknown()

    def state_fixed(self) -> np.ndarray:
        return self._require_result().state_fixed()

    def branch_forces(self) -> np.ndarray:
        """Tension force per branch, branch insertion order."""
        return self._require_result().forces

    def branch_lengths(self) -> np.ndarray:
        return self._require_result().lengths

    def sigma_fl(self) -> float:
        """Σ F_i · L_i of the last solve, 0.0 if nothing has been solved."""
        if self._result is None:
            return 0.0
        return self._result.sigma_fl
