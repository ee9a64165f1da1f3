# fitcgp/core/utils.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Small utilities used across `fitcgp.core` modules.

This file hosts:
- Shape/type validation & conversion helpers for (xi, zi, xu)
- Model mean and likelihood validation
"""
import fitcgp.num as gnp
from .errors import PreconditionError
from .gaussian import LikelihoodType


def ensure_shapes_and_type(*, xi=None, zi=None, xu=None, convert=True):
    """Validate and adjust shapes/types of input arrays.

    Parameters
    ----------
    xi : array_like, optional
        Training features (n, d).
    zi : array_like, optional
        Regression targets (n,) or (n, 1).
    xu : array_like, optional
        Inducing features (m, d).
    convert : bool, optional
        Convert arrays to backend type (default True).

    Returns
    -------
    tuple
        (xi, zi, xu) with proper shapes and types.

    Raises
    ------
    PreconditionError
        If a dimensionality check fails, if zi is not real-valued or if
        xu is empty.
    """
    if convert:
        if xi is not None:
            xi = gnp.asarray(xi)
        if zi is not None:
            zi = gnp.asarray(zi)
        if xu is not None:
            xu = gnp.asarray(xu)

    if xi is not None and len(xi.shape) != 2:
        raise PreconditionError(f"xi should be a 2D array, got shape {xi.shape}")

    if zi is not None:
        if len(zi.shape) == 2:
            if zi.shape[1] != 1:
                raise PreconditionError(
                    "zi should only have one column if it's a 2D array"
                )
            zi = zi.reshape(-1)  # (n,1) -> (n,)
        elif len(zi.shape) != 1:
            raise PreconditionError("zi should be 1D or a 2D column array")
        if not gnp.isfloating(zi):
            raise PreconditionError(
                "Labels must be real-valued regression targets, "
                f"got dtype {zi.dtype}"
            )

    if xu is not None:
        if len(xu.shape) != 2:
            raise PreconditionError(f"xu should be a 2D array, got shape {xu.shape}")
        if xu.shape[0] == 0:
            raise PreconditionError("The set of inducing features is empty")

    if xi is not None and zi is not None and xi.shape[0] != zi.shape[0]:
        raise PreconditionError(
            f"xi and zi must have the same number of rows, got {xi.shape[0]} "
            f"and {zi.shape[0]}"
        )
    if xi is not None and xu is not None and xi.shape[1] != xu.shape[1]:
        raise PreconditionError(
            f"xi and xu must have the same number of columns, got {xi.shape[1]} "
            f"and {xu.shape[1]}"
        )

    return xi, zi, xu


def validate_model_mean(meantype: str, mean, meanparam):
    """Validate model initialization inputs for the mean component.

    Parameters
    ----------
    meantype : {'zero', 'parameterized'}
        Type of mean to be used by the model.
    mean : callable or None
        Mean function (ignored if meantype == 'zero').
    meanparam : array_like or None
        Parameters of the mean function.

    Raises
    ------
    PreconditionError
        If `meantype` is invalid or inconsistent with `mean`.
    """
    if meantype not in {"zero", "parameterized"}:
        raise PreconditionError(
            f"meantype must be 'zero' or 'parameterized', got {meantype!r}"
        )

    if meantype == "zero" and mean is not None:
        raise PreconditionError("For meantype 'zero', mean must be None")

    if meantype == "parameterized" and not callable(mean):
        raise PreconditionError(
            "For meantype 'parameterized', mean must be a callable function"
        )


def validate_likelihood(likelihood):
    """Check that `likelihood` is a Gaussian observation model.

    Raises
    ------
    PreconditionError
        If `likelihood` does not carry the Gaussian model type.
    """
    if getattr(likelihood, "model_type", None) != LikelihoodType.GAUSSIAN:
        raise PreconditionError(
            "FITC inference method can only use Gaussian likelihood function, "
            f"got {type(likelihood).__name__}"
        )
