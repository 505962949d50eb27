# mini_fdm/kernel/assemble.py
"""
ASSEMBLY: Force Density Equilibrium Matrices
============================================

PURPOSE:
--------
Builds the linear system of the Force Density Method from the partitioned
incidence matrices of a TopologyGraph.

With Q = diag(q), the equilibrium of the unknown nodes along one axis is

    Cnᵀ Q Cn · xn  +  Cnᵀ Q Cf · xf  =  px

or, with Dn = Cnᵀ Q Cn and Df = Cnᵀ Q Cf,

    Dn · xn = px - Df · xf

The same Dn serves all three axes; only the right-hand side changes.

Dn is symmetric. For a connected network with at least one fixed node and
strictly positive force densities it is positive definite.
"""

import logging
from typing import Tuple

import numpy as np

logger = logging.getLogger(__name__)


def force_density_matrix(q: np.ndarray) -> np.ndarray:
    """
    Diagonal matrix Q of per-branch force densities.

    Parameters:
    -----------
    q : np.ndarray
        Force densities, shape (n_branches,)

    Returns:
    --------
    np.ndarray
        Q = diag(q), shape (n_branches, n_branches)
    """
    q = np.asarray(q, dtype=float).ravel()
    return np.diag(q)


def assemble_reduced(
    Cn: np.ndarray,
    Cf: np.ndarray,
    q: np.ndarray
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Assemble the reduced matrices Dn = Cnᵀ Q Cn and Df = Cnᵀ Q Cf.

    Parameters:
    -----------
    Cn : np.ndarray
        Incidence columns of unknown nodes, shape (n_branches, n_unknown)
    Cf : np.ndarray
        Incidence columns of fixed nodes, shape (n_branches, n_fixed)
    q : np.ndarray
        Force densities, shape (n_branches,)

    Returns:
    --------
    Dn : np.ndarray
        Unknown-unknown coupling, shape (n_unknown, n_unknown)
    Df : np.ndarray
        Unknown-fixed coupling, shape (n_unknown, n_fixed)
    """
    Q = force_density_matrix(q)
    assert Q.shape[0] == Cn.shape[0] == Cf.shape[0], \
        f"q has {Q.shape[0]} entries but C has {Cn.shape[0]} rows"

    CnT_Q = Cn.T @ Q
    Dn = CnT_Q @ Cn
    Df = CnT_Q @ Cf

    logger.debug("Assembled Dn %s and Df %s", Dn.shape, Df.shape)
    return Dn, Df


def assemble_rhs(
    Df: np.ndarray,
    fixed_xyz: np.ndarray,
    loads: np.ndarray
) -> np.ndarray:
    """
    Right-hand side B = -(Df · Xf) + P for all three axes at once.

    Parameters:
    -----------
    Df : np.ndarray
        Unknown-fixed coupling, shape (n_unknown, n_fixed)
    fixed_xyz : np.ndarray
        Fixed node coordinates in partitioned order, shape (n_fixed, 3)
    loads : np.ndarray
        Either one load vector of shape (3,), applied to every unknown node,
        or one row per unknown node, shape (n_unknown, 3)

    Returns:
    --------
    np.ndarray
        B, shape (n_unknown, 3); column k is the right-hand side of axis k
    """
    n_unknown = Df.shape[0]
    loads = np.asarray(loads, dtype=float)
    if loads.shape == (3,):
        P = np.ones((n_unknown, 1)) * loads
    elif loads.shape == (n_unknown, 3):
        P = loads
    else:
        raise ValueError(
            f"loads must have shape (3,) or ({n_unknown}, 3), got {loads.shape}"
        )

    return -(Df @ fixed_xyz) + P
