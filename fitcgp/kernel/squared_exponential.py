# fitcgp/kernel/squared_exponential.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
import fitcgp.num as gnp
from .utils import stationary_covariance


def squared_exponential_kernel(h):
    """Squared exponential (Gaussian) kernel.

    .. math::
        k(h) = \\exp(-h^2 / 2)
    """
    return gnp.exp(-0.5 * h**2)


def squared_exponential_covariance(x, y, param, pairwise=False):
    """Squared exponential covariance.

    Parameters
    ----------
    x : gnp.array, shape (nx, d)
    y : gnp.array or None
    param : gnp.array, shape (1 + d,)
        [log(sigma2), log(1/rho_j)].
    pairwise : bool

    Returns
    -------
    gnp.array
    """
    return stationary_covariance(x, y, squared_exponential_kernel, param, pairwise)


def exponential_kernel(h):
    """Exponential kernel, :math:`k(h) = \\exp(-h)`."""
    return gnp.exp(-h)


def exponential_covariance(x, y, param, pairwise=False):
    """Exponential covariance (Matérn 1/2)."""
    return stationary_covariance(x, y, exponential_kernel, param, pairwise)
