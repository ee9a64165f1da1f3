# fitcgp/core/gaussian.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Likelihood models.

Only the Gaussian observation model is implemented; the base class
carries the type tag checked by inference methods.
"""
import enum
import math


class LikelihoodType(enum.Enum):
    GAUSSIAN = "gaussian"
    OTHER = "other"


class LikelihoodModel:
    """Base likelihood model, identified by its `model_type` tag."""

    model_type = LikelihoodType.OTHER

    def get_name(self):
        return type(self).__name__

    def parameter_values(self):
        """Return the tuple of hyperparameter values of the model."""
        return ()


class GaussianLikelihood(LikelihoodModel):
    """Gaussian observation noise with standard deviation sigma.

    The free hyperparameter is ``log_sigma``.

    Parameters
    ----------
    sigma : float, optional
        Noise standard deviation (default 1.0). Must be positive.
    """

    model_type = LikelihoodType.GAUSSIAN

    def __init__(self, sigma=1.0):
        self.set_sigma(sigma)

    def __repr__(self):
        return f"GaussianLikelihood(sigma={self.sigma()!r})"

    def sigma(self):
        return math.exp(self.log_sigma)

    def set_sigma(self, sigma):
        if not sigma > 0.0:
            raise ValueError(f"sigma must be positive, got {sigma}")
        self.log_sigma = math.log(sigma)

    def parameter_values(self):
        return (float(self.log_sigma),)
