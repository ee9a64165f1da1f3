# fitcgp/misc/designs.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Designs for placing inducing features.

Inducing features can be laid out on a regular grid, either in a given
box or in the bounding box of the training features (`databox`), or
taken from the training features themselves (`subset_of_data`).

Boxes are given as [[lower bounds], [upper bounds]].
"""
import numpy as np
from scipy.stats import qmc

import fitcgp.num as gnp


def scale(sample_standard, box):
    """Map points of [0, 1]^dim to the box."""
    return qmc.scale(sample_standard, box[0], box[1])


def databox(xi):
    """Bounding box of the training features xi (n, d)."""
    xi = np.asarray(xi)
    return [list(np.min(xi, axis=0)), list(np.max(xi, axis=0))]


def regulargrid(dim, n, box):
    """
    Regular grid in a dim-dimensional box.

    Parameters
    ----------
    dim : int
        Number of dimensions.
    n : int or list of int
        Number of levels, common to all coordinates or one per coordinate.
    box : list of lists
        [[lower bounds], [upper bounds]].

    Returns
    -------
    x : numpy.ndarray, shape (prod(n), dim)
        Grid points, the last coordinate varying fastest.
    """
    levels = [n] * dim if np.isscalar(n) else list(n)
    axes = [np.linspace(lo, hi, k) for lo, hi, k in zip(box[0], box[1], levels)]
    mesh = np.meshgrid(*axes, indexing="ij")
    return np.stack([g.reshape(-1) for g in mesh], axis=1)


def subset_of_data(xi, m, seed=None):
    """
    Select m distinct training features at random as inducing features.

    Parameters
    ----------
    xi : array_like, shape (n, d)
        Training features.
    m : int
        Number of inducing features, 1 <= m <= n.
    seed : int, optional
        If given, reseeds the fitcgp.num generator first.

    Returns
    -------
    xu : array_like, shape (m, d)
    """
    n = xi.shape[0]
    if not 1 <= m <= n:
        raise ValueError(f"m must be between 1 and {n}, got {m}")
    if seed is not None:
        gnp.set_seed(seed)
    ind = np.sort(gnp.choice(n, size=m, replace=False))
    return gnp.asarray(xi)[ind]
