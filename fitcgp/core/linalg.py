# fitcgp/core/linalg.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Triangular linear-algebra helpers used by the FITC posterior.

Factors follow the upper convention: ``A = Uᵀ U``. Every inverse is
obtained through triangular solves; no general inverse is formed.
"""
import fitcgp.num as gnp
from .errors import DecompositionError


def cholesky_upper(A, name="matrix"):
    """Return the upper Cholesky factor U of A, with A = Uᵀ U.

    Parameters
    ----------
    A : array_like, shape (m, m)
        Symmetric positive-definite matrix.
    name : str, optional
        Label used in the error message.

    Returns
    -------
    U : array_like, shape (m, m)
        Upper-triangular factor with a positive diagonal.

    Raises
    ------
    DecompositionError
        If A is not positive definite or contains non-finite values.
    """
    if not gnp.all(gnp.isfinite(A)):
        raise DecompositionError(f"Cholesky of {name} failed: non-finite entries")
    try:
        C = gnp.cholesky(A)
    except gnp.LinAlgError as exc:
        raise DecompositionError(
            f"Cholesky of {name} failed: matrix is not positive definite"
        ) from exc
    return C.T


def solve_upper(U, b):
    """Solve U x = b with U upper triangular."""
    return gnp.solve_triangular(U, b, lower=False)


def solve_upper_transposed(U, b):
    """Solve Uᵀ x = b with U upper triangular (a lower solve)."""
    return gnp.solve_triangular(U, b, trans="T", lower=False)


def chol_inverse(U):
    """Return A^{-1} from the upper factor U of A = Uᵀ U.

    Notes
    -----
    A^{-1} = U^{-1} U^{-T}, computed as two triangular solves against
    the identity, O(m^3) with m = U.shape[0].
    """
    I = gnp.eye(U.shape[0])
    return solve_upper(U, solve_upper_transposed(U, I))


def column_sq_norms(V):
    """Return the column-wise sum of squares of V, i.e. diag(Vᵀ V)."""
    return gnp.sum(V * V, axis=0)
