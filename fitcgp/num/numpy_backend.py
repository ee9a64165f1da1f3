# fitcgp/num/numpy_backend.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""NumPy numerical backend for fitcgp.

This module defines the NumPy/SciPy implementation of the fitcgp.num API.
"""

import hashlib
from typing import Any, Optional, Union
from fitcgp.config import get_config, init_backend, get_logger

Scalar = Union[int, float]
ArrayLike = Any

_fitcgp_backend_: str = init_backend()
_config = get_config()
_logger = get_logger()
_logger.info("Using backend: %s", _fitcgp_backend_)


# -----------------------------------------------------
#
#                      NUMPY
#
# -----------------------------------------------------

import numpy
from numpy.typing import NDArray

_np_dtype = numpy.float64

ndarray = NDArray[numpy.floating]
from numpy import (
    copy,
    array_equal,
    reshape,
    where,
    any,
    all,
    isscalar,
    isnan,
    isinf,
    isfinite,
    isclose,
    allclose,
    hstack,
    vstack,
    concatenate,
    zeros_like,
    ones_like,
    diag,
    triu,
    tril,
    arange,
    abs,
    sqrt,
    exp,
    log,
    sum,
    mean,
    min,
    max,
    argmin,
    minimum,
    maximum,
    einsum,
    matmul,
    outer,
    trace,
)
from numpy.linalg import norm, cholesky, LinAlgError
from numpy import pi, inf
from numpy import finfo, float64
from scipy.special import gammaln
from scipy.linalg import solve_triangular
from scipy.spatial.distance import cdist

# ..................................................

eps = finfo(_np_dtype).eps
fmax = numpy.finfo(_np_dtype).max

# ..................................................


def array(x, dtype=None):
    if dtype is not None:
        return numpy.array(x, dtype=dtype)
    out = numpy.array(x)
    if numpy.issubdtype(out.dtype, numpy.floating):
        return out.astype(_np_dtype, copy=False)
    return out


def asarray(x, dtype=None):
    if dtype is not None:
        return numpy.asarray(x, dtype=dtype)
    if isinstance(x, numpy.ndarray):
        if numpy.issubdtype(x.dtype, numpy.floating):
            return x.astype(_np_dtype, copy=False)
        return x
    elif isinstance(x, (int, float)):
        dt = _np_dtype if isinstance(x, float) else None
        return numpy.array([x], dtype=dt)
    else:
        out = numpy.asarray(x)
        if numpy.issubdtype(out.dtype, numpy.floating):
            return out.astype(_np_dtype, copy=False)
        return out


def zeros(shape, dtype=None):
    return numpy.zeros(shape, dtype=_np_dtype if dtype is None else dtype)


def ones(shape, dtype=None):
    return numpy.ones(shape, dtype=_np_dtype if dtype is None else dtype)


def full(shape, fill_value, dtype=None):
    return numpy.full(
        shape, fill_value, dtype=_np_dtype if dtype is None else dtype
    )


def eye(n, m=None, k=0, dtype=None):
    return numpy.eye(n, M=m, k=k, dtype=_np_dtype if dtype is None else dtype)


def linspace(start, stop, num=50, endpoint=True, dtype=None):
    return numpy.linspace(
        start, stop, num=num, endpoint=endpoint,
        dtype=_np_dtype if dtype is None else dtype,
    )


def isfloating(x):
    return numpy.issubdtype(numpy.asarray(x).dtype, numpy.floating)


def inftobigf(a, bigf=fmax / 1000.0):
    a = where(numpy.isinf(a), numpy.full_like(a, bigf), a)
    return a


def array_digest(*arrays):
    """Return a bytes digest of the values of several arrays (None allowed)."""
    h = hashlib.blake2b(digest_size=16)
    for a in arrays:
        if a is None:
            h.update(b"\x00none")
            continue
        a = numpy.ascontiguousarray(numpy.asarray(a, dtype=_np_dtype))
        h.update(str(a.shape).encode())
        h.update(a.tobytes())
    return h.digest()


# ..................................................


def scaled_distance(loginvrho: ArrayLike, x: ArrayLike, y: ArrayLike) -> ArrayLike:
    invrho = exp(loginvrho)
    xs = invrho * x
    ys = invrho * y
    return cdist(xs, ys)


def scaled_distance_elementwise(
    loginvrho: ArrayLike, x: ArrayLike, y: Optional[ArrayLike]
) -> ArrayLike:
    if x is y or y is None:
        d = zeros((x.shape[0],))
    else:
        invrho = exp(loginvrho)
        d = sqrt(sum((invrho * (x - y)) ** 2, axis=1))
    return d


# ..................................................


# Build one global RNG (or let the user set the seed somewhere):
_np_rng = numpy.random.default_rng(seed=_config.seed)


def set_seed(seed: int) -> None:
    """Set the global NumPy generator seed."""
    global _np_rng
    _np_rng = numpy.random.default_rng(seed=seed)


def rand(*shape: int) -> ArrayLike:
    return _np_rng.random(shape, dtype=_np_dtype)


def randn(*shape: int) -> ArrayLike:
    return _np_rng.normal(loc=0, scale=1, size=shape).astype(_np_dtype, copy=False)


def choice(
    a: ArrayLike,
    size: Optional[int] = None,
    replace: bool = True,
    p: Optional[ArrayLike] = None,
) -> ArrayLike:
    return _np_rng.choice(a, size=size, replace=replace, p=p)
