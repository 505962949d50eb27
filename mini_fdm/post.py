# mini_fdm/post.py
# branch table, support reactions, cut list, summary

import numpy as np
import pandas as pd
from typing import Dict, List, Tuple

from .fdm import EquilibriumResult
from .kernel.topology import TopologyGraph


def branch_table(graph: TopologyGraph, result: EquilibriumResult) -> pd.DataFrame:
    """
    One row per branch, in insertion order.

    Columns:
    --------
    branch, ni, nj : branch id and end nodes (original indices)
    q              : force density
    length         : branch length L
    force          : tension force F = q · L
    dx, dy, dz     : coordinate differences of the end nodes (u, v, w)
    """
    uvw = graph.C @ result.xyz
    return pd.DataFrame({
        'branch': [b.id for b in graph.branches],
        'ni': [b.ni for b in graph.branches],
        'nj': [b.nj for b in graph.branches],
        'q': result.q,
        'length': result.lengths,
        'force': result.forces,
        'dx': uvw[:, 0],
        'dy': uvw[:, 1],
        'dz': uvw[:, 2],
    })


def support_reactions(graph: TopologyGraph, result: EquilibriumResult) -> np.ndarray:
    """
    Reaction forces at the fixed nodes, partitioned (fixed array) order.

    The branch force vectors acting on node k sum to (Cᵀ Q C X)[k]. At an
    unknown node that sum equals the applied load; at a fixed node it is the
    reaction R. Because every row of C sums to zero, the reactions and the
    applied loads balance:

        Σ R + Σ P = 0

    Returns:
    --------
    np.ndarray
        Shape (n_fixed, 3)
    """
    uvw = graph.C @ result.xyz
    return graph.Cf.T @ (result.q[:, None] * uvw)


def compute_length_bins(
    lengths,
    tolerance: float = 0.5
) -> Dict[str, List[int]]:
    """
    Group branches into length bins for a cut list.

    Branches within `tolerance` of a bin's reference length (the first, i.e.
    shortest, branch that opened it) share the bin.

    Parameters:
    -----------
    lengths : sequence of float
        Branch lengths in branch order (e.g. result.lengths)
    tolerance : float
        Max length difference within a bin, same unit as the coordinates

    Returns:
    --------
    Dict mapping bin label "L<k> (<ref length>)" to the branch ids in that bin
    """
    ordered: List[Tuple[int, float]] = sorted(
        enumerate(float(L) for L in lengths), key=lambda item: item[1]
    )

    bins: List[Tuple[float, List[int]]] = []
    for branch_id, length in ordered:
        for ref_length, ids in bins:
            if abs(length - ref_length) <= tolerance:
                ids.append(branch_id)
                break
        else:
            bins.append((length, [branch_id]))

    return {
        f"L{k + 1} ({ref_length:.2f})": ids
        for k, (ref_length, ids) in enumerate(bins)
    }


def summarize(graph: TopologyGraph, result: EquilibriumResult) -> dict:
    """Key figures of a solved network, suitable for a HUD or a results table."""
    unknown_z = result.state_unknown()[:, 2]
    has_branches = graph.n_branches > 0
    return {
        'n_nodes': graph.n_nodes,
        'n_branches': graph.n_branches,
        'n_fixed': graph.n_fixed,
        'n_unknown': graph.n_unknown,
        'sigma_fl': result.sigma_fl,
        'total_length': float(np.sum(result.lengths)),
        'max_force': float(np.max(result.forces)) if has_branches else 0.0,
        'min_force': float(np.min(result.forces)) if has_branches else 0.0,
        'min_z': float(np.min(unknown_z)) if len(unknown_z) else float('nan'),
        'residual': result.residual,
    }
