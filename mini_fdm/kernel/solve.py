# mini_fdm/kernel/solve.py
"""Reduced linear solve for the force density equilibrium, with singularity detection."""

import logging

import numpy as np
import scipy.linalg

logger = logging.getLogger(__name__)


class SingularSystemError(RuntimeError):
    """Raised when Dn is singular or ill-conditioned (e.g. a node with no path to a support)."""
    pass


def solve_reduced(
    Dn: np.ndarray,
    B: np.ndarray,
    cond_limit: float = 1e12
) -> np.ndarray:
    """
    Solve Dn · X = B for the unknown-node coordinates.

    All columns of B (one per axis) share a single Cholesky factorisation
    of Dn.

    Args:
        Dn: Reduced matrix Cnᵀ Q Cn (n_unknown x n_unknown)
        B: Right-hand sides (n_unknown x k), usually k = 3
        cond_limit: Max condition number before raising SingularSystemError

    Returns:
        X: Solution (n_unknown x k)

    Raises:
        SingularSystemError: If Dn is singular, ill-conditioned or not
            positive definite
    """
    n = Dn.shape[0]
    B = np.asarray(B, dtype=float)
    if n == 0:
        return np.zeros((0,) + B.shape[1:], dtype=float)

    # Check conditioning
    cond = np.linalg.cond(Dn)
    logger.debug("Reduced system: n=%d, cond=%.3e", n, cond)
    if not np.isfinite(cond) or cond > cond_limit:
        raise SingularSystemError(
            f"Singular system (cond={cond:.2e}). Every unknown node needs a path "
            f"to a fixed node through branches with q > 0. Need cond < {cond_limit:.0e}."
        )

    try:
        factor = scipy.linalg.cho_factor(Dn)
    except np.linalg.LinAlgError as e:
        raise SingularSystemError(f"Dn is not positive definite: {e}") from e

    return scipy.linalg.cho_solve(factor, B)
