# fitcgp/core/posterior.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
FITC posterior computations.

This module implements the numerical routines used by
`fitcgp.core.FITCInferenceMethod`: the Cholesky-based factorization of
the FITC covariance, the quantities supporting the gradient with
respect to the noise parameter, the negative log marginal likelihood,
and the predictive equations.

Notation
--------
n training points, m inducing points, s2 = exp(2 log_scale) the
covariance scale, snu2 = exp(log_inducing_noise) the inducing jitter,
sn2 = sigma^2 the observation noise variance.

    Kuu + snu2 I        = Luuᵀ Luu
    V                   = Luu^{-T} Kuf                     (V'V = Q)
    dg                  = diag(K) + sn2 - diag(Q),  t = 1 / dg
    I + V diag(t) Vᵀ    = Luᵀ Lu

Kuu, Kuf and diag(K) above are already multiplied by s2. All the
functions run in O(n m^2) except `posterior_covariance` (O(m n^2)).
"""
from collections import namedtuple

import fitcgp.num as gnp
from .errors import NumericalError
from .linalg import (
    cholesky_upper,
    solve_upper,
    solve_upper_transposed,
    chol_inverse,
    column_sq_norms,
)

Factorization = namedtuple(
    "Factorization", ["chol_uu", "V", "t", "chol_utr", "r", "be", "L", "alpha"]
)
Factorization.__doc__ = """Cached FITC factorization (output of `factorize`).

chol_uu : (m, m) upper factor of s2 Kuu + snu2 I
V : (m, n) Luu^{-T} (s2 Kuf)
t : (n,) inverse of the FITC diagonal dg
chol_utr : (m, m) upper factor of V diag(t) Vᵀ + I
r : (n,) whitened residual (y - mean) sqrt(t)
be : (m,) Lu^{-T} V (r sqrt(t))
L : (m, m) posterior precision correction
alpha : (m,) posterior weights on the inducing points
"""

GradientSupport = namedtuple("GradientSupport", ["al", "iKuu", "B", "w", "Rvdd"])
GradientSupport.__doc__ = """Quantities supporting the derivatives (output of `update_deriv`)."""


# --------------------------------------------------------------------------
# Factorization
# --------------------------------------------------------------------------
def update_chol(kuu, ktru, ktrtr_diag, scale2, ind_noise, sigma, residual):
    """Compute the Cholesky factors of the FITC covariance structure.

    Parameters
    ----------
    kuu : array_like, shape (m, m)
        Raw covariance of the inducing features.
    ktru : array_like, shape (m, n)
        Raw cross-covariance between inducing and training features.
    ktrtr_diag : array_like, shape (n,)
        Raw prior variances at the training features.
    scale2 : float
        Covariance scale exp(2 log_scale).
    ind_noise : float
        Inducing jitter exp(log_inducing_noise).
    sigma : float
        Standard deviation of the Gaussian observation noise.
    residual : array_like, shape (n,)
        Centered observations y - mean.

    Returns
    -------
    chol_uu, V, t, chol_utr, r, be, L : tuple of arrays
        See `Factorization`.

    Raises
    ------
    DecompositionError
        If s2 Kuu + snu2 I or V diag(t) Vᵀ + I is not positive definite.
    NumericalError
        If some FITC diagonal entry dg is not strictly positive.
    """
    m = kuu.shape[0]
    I = gnp.eye(m)

    # Kuu + snu2 I = Luu' Luu
    chol_uu = cholesky_upper(kuu * scale2 + ind_noise * I, name="Kuu + snu2*I")

    # V = Luu' \ Ku, O(n m^2)
    V = solve_upper_transposed(chol_uu, ktru * scale2)

    # dg = diag(K) + sn2 - diag(Q)
    dg = ktrtr_diag * scale2 + sigma**2 - column_sq_norms(V)
    if not gnp.all(dg > 0.0):
        nbad = int(gnp.sum(~(dg > 0.0)))
        raise NumericalError(
            f"FITC diagonal is not strictly positive at {nbad} training point(s) "
            f"(min {float(gnp.min(dg)):.3e}); increase the noise or the inducing jitter"
        )
    t = 1.0 / dg

    # Lu' Lu = I + V diag(t) V'
    chol_utr = cholesky_upper(gnp.matmul(V * t, V.T) + I, name="V*diag(t)*V' + I")

    sqrt_t = gnp.sqrt(t)
    r = residual * sqrt_t
    be = solve_upper_transposed(chol_utr, gnp.matmul(V, r * sqrt_t))

    # L = solve_chol(Lu*Luu, I) - iKuu
    prod = gnp.matmul(chol_utr, chol_uu)
    L = solve_upper(prod, solve_upper_transposed(prod, I)) - chol_inverse(chol_uu)

    return chol_uu, V, t, chol_utr, r, be, L


def update_alpha(chol_uu, chol_utr, be):
    """Return alpha = Luu^{-1} Lu^{-1} be (two O(m^2) triangular solves)."""
    return solve_upper(chol_uu, solve_upper(chol_utr, be))


def factorize(kuu, ktru, ktrtr_diag, scale2, ind_noise, sigma, residual):
    """Run `update_chol` then `update_alpha` and return a `Factorization`."""
    chol_uu, V, t, chol_utr, r, be, L = update_chol(
        kuu, ktru, ktrtr_diag, scale2, ind_noise, sigma, residual
    )
    alpha = update_alpha(chol_uu, chol_utr, be)
    return Factorization(chol_uu, V, t, chol_utr, r, be, L, alpha)


def update_deriv(fact, ktru, scale2, residual):
    """Compute the quantities used by the derivatives.

    Parameters
    ----------
    fact : Factorization
    ktru : array_like, shape (m, n)
        Raw cross-covariance between inducing and training features.
    scale2 : float
        Covariance scale exp(2 log_scale).
    residual : array_like, shape (n,)
        Centered observations y - mean.

    Returns
    -------
    GradientSupport
        al = (Kt + sn2 I)^{-1} (y - mean) under the FITC prior,
        iKuu = (s2 Kuu + snu2 I)^{-1}, B = iKuu s2 Kuf, w = B al and
        Rvdd = Lu^{-T} V diag(t).
    """
    t = fact.t
    V = fact.V

    al = (residual - gnp.matmul(V.T, solve_upper(fact.chol_utr, fact.be))) * t
    iKuu = chol_inverse(fact.chol_uu)
    B = gnp.matmul(iKuu, ktru) * scale2
    w = gnp.matmul(B, al)
    Rvdd = solve_upper_transposed(fact.chol_utr, V * t)

    return GradientSupport(al, iKuu, B, w, Rvdd)


# --------------------------------------------------------------------------
# Marginal likelihood and derivatives
# --------------------------------------------------------------------------
def negative_log_marginal_likelihood(fact):
    """FITC negative log marginal likelihood, O(m + n).

    nlZ = sum(log(diag(Lu))) + (-sum(log(t)) + r'r - be'be + n log(2 pi)) / 2
    """
    n = fact.t.shape[0]
    nlZ = gnp.sum(gnp.log(gnp.diag(fact.chol_utr))) + 0.5 * (
        -gnp.sum(gnp.log(fact.t))
        + gnp.einsum("i, i", fact.r, fact.r)
        - gnp.einsum("i, i", fact.be, fact.be)
        + n * gnp.log(2.0 * gnp.pi)
    )
    return float(nlZ)


def derivative_wrt_log_sigma(fact, grad, sigma):
    """Derivative of the negative log marginal likelihood wrt log(sigma).

    dnlZ = sn2 * (sum(t) - sum(Rvdd .* Rvdd) - al'al), O(m n).
    """
    return sigma**2 * (
        gnp.sum(fact.t)
        - gnp.sum(grad.Rvdd * grad.Rvdd)
        - gnp.einsum("i, i", grad.al, grad.al)
    )


# --------------------------------------------------------------------------
# Predictive equations
# --------------------------------------------------------------------------
def posterior_mean(fact, ktru, scale2):
    """FITC approximated posterior mean at the training features, O(m n)."""
    return scale2 * gnp.matmul(ktru.T, fact.alpha)


def posterior_covariance(fact, ktrtr_diag, scale2):
    """FITC approximated posterior covariance at the training features.

    Sigma = Vᵀ Lu^{-1} (Vᵀ Lu^{-1})ᵀ + diag(s2 diag(K) - diag(Q)).

    Warning: O(m n^2) time and O(n^2) memory, against O(n m^2) for
    the factorization.
    """
    m = fact.chol_utr.shape[0]
    part1 = gnp.matmul(fact.V.T, solve_upper(fact.chol_utr, gnp.eye(m)))
    Sigma = gnp.matmul(part1, part1.T)
    part2 = ktrtr_diag * scale2 - column_sq_norms(fact.V)
    return Sigma + gnp.diag(part2)


def predictive_moments(fact, ksu, kss, scale2, return_type=0):
    """Latent predictive moments at new points.

    Parameters
    ----------
    fact : Factorization
    ksu : array_like, shape (m, nt)
        Raw cross-covariance between inducing features and targets.
    kss : array_like
        Raw prior variances (nt,) if return_type == 0, raw prior
        covariance (nt, nt) if return_type == 1.
    scale2 : float
    return_type : int, optional
        -1: no variance, 0: variances (default), 1: full covariance.

    Returns
    -------
    zt_mean : array_like, shape (nt,)
        Centered posterior mean Ksᵀ alpha.
    zt_var : array_like or None
        s2 kss + Ksᵀ L Ks (diagonal only when return_type == 0).
    """
    Ks = ksu * scale2
    zt_mean = gnp.matmul(Ks.T, fact.alpha)
    if return_type == -1:
        return zt_mean, None
    LKs = gnp.matmul(fact.L, Ks)
    if return_type == 0:
        return zt_mean, kss * scale2 + gnp.sum(Ks * LKs, axis=0)
    elif return_type == 1:
        return zt_mean, kss * scale2 + gnp.matmul(Ks.T, LKs)
    else:
        raise ValueError("return_type must be in {-1, 0, 1}")
