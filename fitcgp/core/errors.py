# fitcgp/core/errors.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Exceptions raised by the FITC inference core.

Precondition errors derive from ValueError and numerical errors derive
from numpy.linalg.LinAlgError, so callers already catching those keep
working.
"""
import fitcgp.num as gnp


class FITCError(Exception):
    """Base class of all fitcgp errors."""


class PreconditionError(FITCError, ValueError):
    """Inputs or collaborators do not satisfy the inference preconditions."""


class UnsupportedParameterError(PreconditionError):
    """A derivative was requested with respect to an unknown parameter."""

    def __init__(self, parameter, owner=None):
        self.parameter = parameter
        self.owner = owner
        where = f"{owner}.{parameter}" if owner else parameter
        super().__init__(
            "Can't compute derivative of the negative log marginal "
            f"likelihood wrt {where} parameter"
        )


class NumericalError(FITCError, gnp.LinAlgError):
    """Numerical degeneracy of the FITC factorization."""


class DecompositionError(NumericalError):
    """Cholesky decomposition of a non positive-definite matrix."""
