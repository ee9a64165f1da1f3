# fitcgp/core/__init__.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Core components of the fitcgp package.

This subpackage contains the FITC inference engine and its numerical
routines: Cholesky factorization of the sparse covariance structure,
negative log marginal likelihood and its noise derivative, posterior
predictive equations, and the exact-GP reference criterion.

Public API
----------
FITCInferenceMethod : class
    FITC inference engine with hyperparameter-hash guarded caching.
GaussianLikelihood : class
    Gaussian observation model (log_sigma hyperparameter).
"""

from . import posterior
from . import likelihood
from .base import InferenceMethod, InferenceType
from .errors import (
    FITCError,
    PreconditionError,
    UnsupportedParameterError,
    NumericalError,
    DecompositionError,
)
from .gaussian import LikelihoodModel, LikelihoodType, GaussianLikelihood
from .model import FITCInferenceMethod

__all__ = [
    "FITCInferenceMethod",
    "InferenceMethod",
    "InferenceType",
    "LikelihoodModel",
    "LikelihoodType",
    "GaussianLikelihood",
    "FITCError",
    "PreconditionError",
    "UnsupportedParameterError",
    "NumericalError",
    "DecompositionError",
]
