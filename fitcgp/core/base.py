# fitcgp/core/base.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Base class of inference methods.

An inference method owns cached state derived from its hyperparameters.
Staleness is tracked with two flags, one per computation stage:

- ``factorization_stale``: cleared by `update`,
- ``gradient_stale``: cleared by the gradient-support computation.

Both are set whenever the hyperparameter hash differs from the one
recorded at the last computation. Public accessors call
`recompute_if_needed` before reading the cache.

Instances are not thread-safe: accessors mutate the cache, so
concurrent use of one instance must be serialized by the caller.
"""
import enum
import warnings

import fitcgp.num as gnp
from .errors import PreconditionError


class InferenceType(enum.Enum):
    UNKNOWN = "unknown"
    EXACT_REGRESSION = "exact_regression"
    FITC_REGRESSION = "fitc_regression"


class InferenceMethod:
    """Hyperparameter-hash guarded cache of an inference method.

    Subclasses set `inference_type` and implement `parameter_values`,
    `update` (calling ``super().update()`` last) and `update_deriv`.
    """

    inference_type = InferenceType.UNKNOWN

    def __init__(self):
        self._parameter_hash = None
        self._factorization_stale = True
        self._gradient_stale = True

    @property
    def factorization_stale(self):
        return self._factorization_stale

    @property
    def gradient_stale(self):
        return self._gradient_stale

    # ------------------------------------------------------------------
    # Hyperparameter hash
    # ------------------------------------------------------------------
    def parameter_values(self):
        """Return the hyperparameters as a sequence of arrays/scalars."""
        raise NotImplementedError

    def parameter_hash(self):
        return gnp.array_digest(*self.parameter_values())

    def parameter_hash_changed(self):
        return self._parameter_hash != self.parameter_hash()

    def update_parameter_hash(self):
        self._parameter_hash = self.parameter_hash()

    def invalidate(self):
        """Mark every cached stage as stale (e.g. after a data change)."""
        self._parameter_hash = None
        self._factorization_stale = True
        self._gradient_stale = True

    # ------------------------------------------------------------------
    # Computation stages
    # ------------------------------------------------------------------
    def recompute_if_needed(self, gradient=False):
        """Bring the cache up to date with the current hyperparameters.

        Parameters
        ----------
        gradient : bool, optional
            Also refresh the gradient-support quantities (default False).
        """
        if self.parameter_hash_changed():
            self._factorization_stale = True
            self._gradient_stale = True
        if self._factorization_stale:
            self.update()
        if gradient and self._gradient_stale:
            self.update_deriv()
            self._gradient_stale = False
            self.update_parameter_hash()

    def check_members(self):
        """Check preconditions before a factorization."""

    def update(self):
        """Recompute the factorization; subclasses call this at the end."""
        self._factorization_stale = False
        self._gradient_stale = True
        self.update_parameter_hash()

    def update_deriv(self):
        """Recompute the quantities supporting the derivatives."""
        raise NotImplementedError

    def compute_gradient(self):
        """Ensure the gradient-support quantities are current.

        No-op when nothing changed since the last call.
        """
        self.recompute_if_needed(gradient=True)

    def register_minimizer(self, minimizer):
        """Accepted for interface compatibility; the minimizer is not used."""
        warnings.warn(
            "The method does not require a minimizer. "
            "The provided minimizer will not be used.",
            UserWarning,
        )

    # ------------------------------------------------------------------
    # Checked downcast
    # ------------------------------------------------------------------
    @classmethod
    def obtain_from_generic(cls, inference):
        """Return `inference` viewed as a `cls` instance.

        Returns None if `inference` is None. Raises PreconditionError if
        its inference type does not match `cls.inference_type`.
        """
        if inference is None:
            return None
        actual = getattr(inference, "inference_type", None)
        if actual != cls.inference_type or not isinstance(inference, cls):
            raise PreconditionError(
                f"Provided inference is not of type {cls.__name__} "
                f"(expected {cls.inference_type}, got {actual})"
            )
        return inference
