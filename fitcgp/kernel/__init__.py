# fitcgp/kernel/__init__.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Covariance functions for fitcgp.

Every covariance follows the calling convention expected by
`fitcgp.core.FITCInferenceMethod`:

    K = covariance(x, y, param, pairwise=False)

with param = [log(sigma2), log(1/rho_1), ..., log(1/rho_d)]. Matérn
covariances take the regularity index p as an extra argument and are
usually wrapped in a closure.
"""

from .squared_exponential import (
    squared_exponential_kernel,
    squared_exponential_covariance,
    exponential_kernel,
    exponential_covariance,
)
from .matern import maternp_kernel, maternp_covariance
from .utils import stationary_covariance

__all__ = [
    "squared_exponential_kernel",
    "squared_exponential_covariance",
    "exponential_kernel",
    "exponential_covariance",
    "maternp_kernel",
    "maternp_covariance",
    "stationary_covariance",
]
