# mini_fdm/kernel/topology.py
"""
TOPOLOGY: Branch-Node Graph and Incidence Matrix
================================================

PURPOSE:
--------
This module encodes the topology of a network as a set of node indices and
a list of directed branches, and builds the branch-node (incidence) matrix
C together with its sub-matrices:

    Cn : columns of C belonging to UNKNOWN nodes (positions to solve for)
    Cf : columns of C belonging to FIXED nodes (supports, prescribed)

INCIDENCE RULE:
---------------
Row i of C describes branch i = (ni, nj):

    C[i, ni] = +1     (branch starts at ni)
    C[i, nj] = -1     (branch ends at nj)
    C[i, k]  =  0     otherwise

Every row therefore sums to zero.

TWO INDEX SPACES:
-----------------
Nodes live in two index spaces at the same time:

    original     : 0 .. N-1, the indices the caller uses
    partitioned  : unknown nodes first, then fixed nodes

After build(), C is stored in PARTITIONED column order, i.e. C = [Cn | Cf].
The IndexMap holds the permutation between the two spaces so nothing has
to be searched for again later.

USAGE:
------
    graph = TopologyGraph(n_nodes=9, fixed=[0, 2, 6, 8])
    graph.add_branch(0, 1)
    graph.add_branch(1, 2)
    ...
    graph.build()

    graph.Cn   # (n_branches, n_unknown)
    graph.Cf   # (n_branches, n_fixed)
    graph.C    # (n_branches, n_nodes) == [Cn | Cf]
"""

import logging
import operator
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from ..model import Branch

logger = logging.getLogger(__name__)


def _as_index(value, what: str) -> int:
    """Integer value of an index argument; 2.0 is accepted, 1.7 is not."""
    try:
        return operator.index(value)
    except TypeError:
        pass
    v = float(value)
    if not v.is_integer():
        raise ValueError(f"{what} must be an integer, got {value!r}")
    return int(v)


@dataclass(frozen=True)
class IndexMap:
    """
    Bidirectional map between original and partitioned node order.

    Attributes:
    -----------
    order : np.ndarray
        Partitioned position -> original index. This is simply
        concat(unknown, fixed).
    position : np.ndarray
        Original index -> partitioned position (inverse of order).

    Examples:
    ---------
    >>> m = IndexMap.from_partition(unknown=np.array([1, 3]), fixed=np.array([0, 2]))
    >>> m.order
    array([1, 3, 0, 2])
    >>> m.position
    array([2, 0, 3, 1])
    """
    order: np.ndarray
    position: np.ndarray

    @classmethod
    def from_partition(cls, unknown: np.ndarray, fixed: np.ndarray) -> "IndexMap":
        order = np.concatenate([unknown, fixed]).astype(int)
        position = np.empty(len(order), dtype=int)
        position[order] = np.arange(len(order), dtype=int)
        order.flags.writeable = False
        position.flags.writeable = False
        return cls(order=order, position=position)

    @property
    def n_nodes(self) -> int:
        return len(self.order)

    def to_partitioned(self, values) -> np.ndarray:
        """Reorder rows given in original order into unknown-first order."""
        values = np.asarray(values)
        return values[self.order]

    def to_original(self, values) -> np.ndarray:
        """Reorder rows given in partitioned order back to original order."""
        values = np.asarray(values)
        return values[self.position]


class TopologyGraph:
    """
    Directed branch-node graph with a fixed/unknown node partition.

    The partition is computed at construction. Branches are appended with
    add_branch() and the incidence matrices are produced once by build().
    After build() the graph is read-only and may be shared between solvers.

    Parameters:
    -----------
    n_nodes : int
        Number of nodes N (must be >= 0)
    fixed : sequence of int
        Indices of fixed (supported) nodes. Sorted and de-duplicated on the
        way in; every entry must lie in [0, N).

    Raises:
    -------
    ValueError
        If n_nodes is negative, or n_nodes or a fixed index is not integral
    IndexError
        If a fixed index is outside [0, N)
    """

    def __init__(self, n_nodes: int, fixed: Sequence[int] = ()):
        n_nodes = _as_index(n_nodes, "Number of nodes")
        if n_nodes < 0:
            raise ValueError(f"Number of nodes must be nonnegative, got {n_nodes}")
        self._n_nodes = n_nodes

        fixed = np.array(
            [_as_index(v, "Fixed node index") for v in np.asarray(fixed).ravel()], dtype=int
        )
        for v in fixed:
            self._validate(int(v))
        self._fixed = np.unique(fixed)
        self._unknown = np.setdiff1d(np.arange(n_nodes, dtype=int), self._fixed)
        self._fixed.flags.writeable = False
        self._unknown.flags.writeable = False

        self._index_map = IndexMap.from_partition(self._unknown, self._fixed)

        self._branches: List[Branch] = []
        self._C = None
        self._Cn = None
        self._Cf = None

    def _validate(self, v: int) -> None:
        if v < 0 or v >= self._n_nodes:
            raise IndexError(f"index {v} is not between 0 and {self._n_nodes}")

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def add_branch(self, ni: int, nj: int) -> Branch:
        """
        Append the directed branch ni -> nj.

        Self-loops and duplicate branches are accepted; keeping the topology
        meaningful is up to the caller.

        Returns:
        --------
        Branch
            The stored branch (its id is its row in C)

        Raises:
        -------
        ValueError
            If an endpoint is not integral (1.7 is rejected, not truncated)
        IndexError
            If either endpoint is outside [0, N)
        RuntimeError
            If the graph has already been built
        """
        if self.is_built:
            raise RuntimeError("Cannot add branches after build()")
        ni, nj = _as_index(ni, "Branch endpoint"), _as_index(nj, "Branch endpoint")
        self._validate(ni)
        self._validate(nj)

        branch = Branch(id=len(self._branches), ni=ni, nj=nj)
        self._branches.append(branch)
        return branch

    def add_branches(self, pairs: Iterable[Tuple[int, int]]) -> List[Branch]:
        """Append several branches; nothing is added if any pair is invalid."""
        if self.is_built:
            raise RuntimeError("Cannot add branches after build()")
        pairs = [
            (_as_index(ni, "Branch endpoint"), _as_index(nj, "Branch endpoint"))
            for ni, nj in pairs
        ]
        for ni, nj in pairs:
            self._validate(ni)
            self._validate(nj)
        return [self.add_branch(ni, nj) for ni, nj in pairs]

    def build(self) -> None:
        """
        Build C, Cn and Cf.

        ALGORITHM:
        ----------
        1. C = zeros(B x N), then for each branch in insertion order:
               C[i, ni] = +1, C[i, nj] = -1
        2. Cn = C[:, unknown], Cf = C[:, fixed]
        3. C = [Cn | Cf]   (C is in partitioned column order from here on)

        Must be called exactly once, after the last add_branch().
        """
        if self.is_built:
            raise RuntimeError("TopologyGraph.build() has already been called")

        C = np.zeros((self.n_branches, self._n_nodes), dtype=float)
        for b in self._branches:
            C[b.id, b.ni] = 1.0
            C[b.id, b.nj] = -1.0

        Cn = C[:, self._unknown]
        Cf = C[:, self._fixed]
        C = np.hstack([Cn, Cf])

        for m in (C, Cn, Cf):
            m.flags.writeable = False
        self._C, self._Cn, self._Cf = C, Cn, Cf

        logger.debug(
            "Built incidence matrix: %d branches x %d nodes (%d unknown, %d fixed)",
            self.n_branches, self._n_nodes, self.n_unknown, self.n_fixed,
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def n_nodes(self) -> int:
        return self._n_nodes

    @property
    def n_branches(self) -> int:
        return len(self._branches)

    @property
    def branches(self) -> Tuple[Branch, ...]:
        return tuple(self._branches)

    @property
    def fixed(self) -> np.ndarray:
        return self._fixed

    @property
    def unknown(self) -> np.ndarray:
        return self._unknown

    @property
    def n_fixed(self) -> int:
        return len(self._fixed)

    @property
    def n_unknown(self) -> int:
        return len(self._unknown)

    @property
    def index_map(self) -> IndexMap:
        return self._index_map

    @property
    def is_built(self) -> bool:
        return self._C is not None

    def _require_built(self) -> None:
        if not self.is_built:
            raise RuntimeError("TopologyGraph.build() must be called first")

    @property
    def C(self) -> np.ndarray:
        """Incidence matrix in partitioned column order, [Cn | Cf]."""
        self._require_built()
        return self._C

    @property
    def Cn(self) -> np.ndarray:
        self._require_built()
        return self._Cn

    @property
    def Cf(self) -> np.ndarray:
        self._require_built()
        return self._Cf

    def incidence_original(self) -> np.ndarray:
        """Incidence matrix with columns back in original node order."""
        self._require_built()
        return self._index_map.to_original(self._C.T).T

    def describe(self) -> str:
        """Text dump of C, Cn and Cf as integer grids."""
        self._require_built()

        def grid(m: np.ndarray) -> str:
            return "\n".join(" ".join(f"{int(v):2d}" for v in row) for row in m)

        return "\n".join([
            f"Branch-Node Matrix ({self.n_branches} x {self.n_nodes})",
            grid(self._C),
            "",
            f"New nodes sub-Matrix ({self.n_branches} x {self.n_unknown})",
            grid(self._Cn),
            "",
            f"Fixed nodes sub-Matrix ({self.n_branches} x {self.n_fixed})",
            grid(self._Cf),
        ])

    def __repr__(self) -> str:
        return (
            f"TopologyGraph(n_nodes={self._n_nodes}, n_branches={self.n_branches}, "
            f"n_fixed={self.n_fixed}, built={self.is_built})"
        )
