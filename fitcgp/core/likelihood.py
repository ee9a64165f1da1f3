# fitcgp/core/likelihood.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Exact Gaussian process negative log-likelihood.

Reference criterion for FITC: with inducing features equal to the
training features (and a vanishing inducing jitter), the FITC negative
log marginal likelihood reduces to this quantity.
"""
import fitcgp.num as gnp
from .linalg import cholesky_upper


def exact_negative_log_likelihood_zero_mean(K, zi):
    """Negative log-likelihood of zi ~ N(0, K).

    Parameters
    ----------
    K : array_like, shape (n, n)
        Covariance matrix of the observations (noise included).
    zi : array_like, shape (n,)
        Centered observations.

    Returns
    -------
    nll : float

    Raises
    ------
    DecompositionError
        If K is not positive definite.
    """
    n = K.shape[0]
    C = cholesky_upper(K, name="K")
    # K^{-1} z = C^{-1} C^{-T} z, only the half solve is needed for the norm
    w = gnp.solve_triangular(C, zi, trans="T", lower=False)
    norm2 = gnp.einsum("i, i", w, w)
    ldetK = 2.0 * gnp.sum(gnp.log(gnp.diag(C)))
    return float(0.5 * (n * gnp.log(2.0 * gnp.pi) + ldetK + norm2))


def exact_negative_log_likelihood(model):
    """Exact-GP negative log-likelihood with the hyperparameters of `model`.

    The covariance of the observations is s2 K(xi, xi) + sigma^2 I, with
    s2 = exp(2 log_scale), and the data are centered with the prior mean.

    Parameters
    ----------
    model : fitcgp.core.FITCInferenceMethod
        Provides the data, the covariance, the mean and the likelihood.

    Returns
    -------
    nll : float
    """
    xi = model.xi
    K = model.covariance(xi, xi, model.covparam) * model.scale2()
    n = K.shape[0]
    K = K + model.likelihood.sigma() ** 2 * gnp.eye(n)
    centered_zi = model.zi - model.prior_mean(xi)
    return exact_negative_log_likelihood_zero_mean(K, centered_zi)
