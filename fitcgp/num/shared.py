# fitcgp/num/shared.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""Backend-independent helpers re-exported by fitcgp.num."""

from fitcgp.config import get_config


def compute_gammaln(p):
    """Table of log Gamma(k) for k = 0, ..., 2p + 1.

    Used by the Matérn p + 1/2 kernel. The table lives in the config
    cache "gammaln" and is only extended when a larger p is requested.

    Parameters
    ----------
    p : int
        Matérn regularity index.

    Returns
    -------
    gnp.array, shape (2p + 2,)
    """
    import fitcgp.num as gnp

    size = 2 * p + 2
    cache = get_config().caches.setdefault("gammaln", {})
    table = cache.get("table")
    start = 0 if table is None else table.shape[0]
    if start < size:
        tail = gnp.asarray(gnp.gammaln(gnp.arange(start, size)))
        table = tail if table is None else gnp.concatenate((table, tail))
        cache["table"] = table
    return table[:size]


def derivative_finite_diff(f, x, h):
    """Five-point central difference approximation of f'(x).

    Parameters
    ----------
    f : callable
        Function of a scalar; may return a scalar or an array.
    x : float
        Point of differentiation.
    h : float
        Step.

    Returns
    -------
    Derivative estimate, O(h^4) truncation error.
    """
    weights = ((-2, 1.0), (-1, -8.0), (1, 8.0), (2, -1.0))
    return sum(w * f(x + k * h) for k, w in weights) / (12.0 * h)
