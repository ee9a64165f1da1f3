# fitcgp/core/model.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
FITC inference method for Gaussian process regression.
"""
import math
import warnings

import fitcgp.num as gnp
from fitcgp.config import get_logger

from . import posterior
from . import likelihood
from . import utils
from .base import InferenceMethod, InferenceType
from .errors import PreconditionError, UnsupportedParameterError
from .gaussian import GaussianLikelihood

_logger = get_logger()


class FITCInferenceMethod(InferenceMethod):
    """Fully Independent Training Conditional (FITC) inference.

    Sparse approximation of GP regression with Gaussian noise, based on
    m inducing features. The training covariance is approximated by
    Q + diag(K - Q), with Q = Kfu Kuu^{-1} Kuf, which brings the cost
    of the factorization down to O(n m^2).

    Attributes
    ----------
    covariance : callable
        Covariance of the GP, called as

        K = self.covariance(x, y, self.covparam, pairwise),

        where x is (n x d) and y is either an (m x d) array or None,
        meaning y := x. The engine requests Kuu = covariance(xu, xu),
        Ktru = covariance(xu, xi) (shape (m, n)) and the prior variances
        covariance(xi, None, pairwise=True) (shape (n,)).
    likelihood : GaussianLikelihood
        Observation model; its `log_sigma` is a hyperparameter.
    mean : callable or None
        Prior mean, called as ``mean(x, meanparam)`` when meantype is
        "parameterized". Must be None when meantype is "zero".
    covparam, meanparam : array_like or None
        Parameters of the covariance and mean functions.
    log_scale : float
        Log of the scale applied to the covariance (K -> exp(2 log_scale) K).
    log_inducing_noise : float
        Log of the jitter added to the diagonal of the scaled Kuu.

    Assigning any hyperparameter attribute is enough: accessors compare
    a hash of the hyperparameters with the one recorded at the last
    factorization and recompute only on change. Use `set_data` and
    `set_inducing_features` to change the data.

    Examples
    --------
    >>> import numpy as np
    >>> import fitcgp as fg
    >>> xi = np.linspace(0.0, 1.0, 50).reshape(-1, 1)
    >>> zi = np.sin(6.0 * xi).reshape(-1)
    >>> xu = np.linspace(0.0, 1.0, 8).reshape(-1, 1)
    >>> model = fg.FITCInferenceMethod(
    ...     fg.kernel.squared_exponential_covariance, xi, zi, xu,
    ...     likelihood=fg.core.GaussianLikelihood(sigma=0.1),
    ...     covparam=np.array([0.0, np.log(1 / 0.2)]))
    >>> nlZ = model.get_negative_log_marginal_likelihood()
    """

    inference_type = InferenceType.FITC_REGRESSION

    def __init__(
        self,
        covariance,
        xi,
        zi,
        xu,
        likelihood=None,
        mean=None,
        covparam=None,
        meanparam=None,
        meantype="zero",
        scale=1.0,
        inducing_noise=1e-10,
    ):
        super().__init__()
        utils.validate_model_mean(meantype, mean, meanparam)
        self.meantype = meantype
        self.mean = mean
        self.meanparam = meanparam
        self.covariance = covariance
        self.covparam = covparam
        self.likelihood = GaussianLikelihood() if likelihood is None else likelihood
        self.log_scale = math.log(scale)
        self.log_inducing_noise = math.log(inducing_noise)

        self.xi, self.zi, self.xu = None, None, None
        self.set_data(xi, zi)
        self.set_inducing_features(xu)

        self._ktru = None
        self._ktrtr_diag = None
        self._residual = None
        self._fact = None
        self._grad = None

    def __repr__(self):
        output = str("<fitcgp.core.FITCInferenceMethod object> " + hex(id(self)))
        return output

    def __str__(self):
        try:
            cov_desc = self.covariance.__name__
        except AttributeError:
            cov_desc = str(self.covariance)
        return (
            f"FITC inference:\n"
            f"  Training points: {self.xi.shape[0]}\n"
            f"  Inducing points: {self.xu.shape[0]}\n"
            f"  Mean Type: {self.meantype}\n"
            f"  Covariance Function: {cov_desc}\n"
            f"  Covariance Parameters: {self.covparam}\n"
            f"  Scale: {self.scale2() ** 0.5}\n"
            f"  Inducing Noise: {self.inducing_noise()}\n"
            f"  Likelihood: {self.likelihood!r}"
        )

    # ------------------------------------------------------------------
    # Data and hyperparameters
    # ------------------------------------------------------------------
    def set_data(self, xi, zi):
        """Set the training features xi (n, d) and the targets zi (n,)."""
        xi, zi, _ = utils.ensure_shapes_and_type(xi=xi, zi=zi)
        if self.xu is not None:
            utils.ensure_shapes_and_type(xi=xi, xu=self.xu, convert=False)
        self.xi, self.zi = xi, zi
        self.invalidate()

    def set_inducing_features(self, xu):
        """Set the inducing features xu (m, d), m >= 1."""
        _, _, xu = utils.ensure_shapes_and_type(xi=self.xi, xu=xu)
        self.xu = xu
        self.invalidate()

    def get_inducing_features(self):
        return self.xu

    @property
    def likelihood(self):
        """Observation model; must be a Gaussian likelihood."""
        return self._likelihood

    @likelihood.setter
    def likelihood(self, likelihood):
        utils.validate_likelihood(likelihood)
        self._likelihood = likelihood
        self.invalidate()

    def scale2(self):
        """Return the covariance scale exp(2 log_scale)."""
        return math.exp(2.0 * self.log_scale)

    def inducing_noise(self):
        return math.exp(self.log_inducing_noise)

    def parameter_values(self):
        return (
            self.log_scale,
            self.log_inducing_noise,
            *self.likelihood.parameter_values(),
            self.covparam,
            self.meanparam,
        )

    def prior_mean(self, x):
        """Prior mean vector at x, shape (n,)."""
        if self.meantype == "zero":
            return gnp.zeros((x.shape[0],))
        return gnp.asarray(self.mean(x, self.meanparam)).reshape(-1)

    def check_members(self):
        super().check_members()
        utils.validate_likelihood(self.likelihood)
        utils.validate_model_mean(self.meantype, self.mean, self.meanparam)
        utils.ensure_shapes_and_type(xi=self.xi, zi=self.zi, xu=self.xu, convert=False)

    # ------------------------------------------------------------------
    # Computation stages
    # ------------------------------------------------------------------
    def update(self):
        """Recompute the covariance blocks, the Cholesky factors and alpha.

        Raises
        ------
        DecompositionError
            If a Cholesky factorization fails.
        NumericalError
            If the FITC diagonal has non-positive entries.
        """
        _logger.debug("FITC update: entering")
        self.check_members()

        n, m = self.xi.shape[0], self.xu.shape[0]
        kuu = gnp.asarray(self.covariance(self.xu, self.xu, self.covparam))
        ktru = gnp.asarray(self.covariance(self.xu, self.xi, self.covparam))
        ktrtr_diag = gnp.asarray(
            self.covariance(self.xi, None, self.covparam, pairwise=True)
        ).reshape(-1)
        if kuu.shape != (m, m) or ktru.shape != (m, n) or ktrtr_diag.shape != (n,):
            raise PreconditionError(
                f"Covariance returned blocks of shapes {kuu.shape}, {ktru.shape}, "
                f"{ktrtr_diag.shape}; expected {(m, m)}, {(m, n)}, {(n,)}"
            )
        residual = self.zi - self.prior_mean(self.xi)

        self._fact = posterior.factorize(
            kuu,
            ktru,
            ktrtr_diag,
            self.scale2(),
            self.inducing_noise(),
            self.likelihood.sigma(),
            residual,
        )
        self._ktru, self._ktrtr_diag = ktru, ktrtr_diag
        self._residual = residual
        self._grad = None

        super().update()
        _logger.debug("FITC update: leaving (n=%d, m=%d)", n, m)

    def update_deriv(self):
        self._grad = posterior.update_deriv(
            self._fact, self._ktru, self.scale2(), self._residual
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def get_diagonal_vector(self):
        """Return the n-vector sW = 1/sigma (noise precision square root)."""
        self.recompute_if_needed()
        sigma = self.likelihood.sigma()
        return gnp.full((self.xi.shape[0],), 1.0 / sigma)

    def get_negative_log_marginal_likelihood(self):
        """FITC negative log marginal likelihood.

        Returns
        -------
        nlZ : float
            sum(log(diag(Lu))) + (-sum(log(t)) + r'r - be'be + n log(2 pi)) / 2
        """
        self.recompute_if_needed()
        return posterior.negative_log_marginal_likelihood(self._fact)

    def get_derivative_wrt_likelihood_model(self, parameter_name):
        """Derivative of the negative log marginal likelihood wrt a
        parameter of the likelihood model.

        Parameters
        ----------
        parameter_name : str
            Only "log_sigma" is supported.

        Returns
        -------
        array_like, shape (1,)

        Raises
        ------
        UnsupportedParameterError
            For any other parameter name.
        """
        if parameter_name != "log_sigma":
            raise UnsupportedParameterError(
                parameter_name, owner=self.likelihood.get_name()
            )
        self.compute_gradient()
        d = posterior.derivative_wrt_log_sigma(
            self._fact, self._grad, self.likelihood.sigma()
        )
        return gnp.array([float(d)])

    def get_posterior_mean(self):
        """FITC approximated posterior mean at the training features.

        Returns exp(2 log_scale) Ktruᵀ alpha, shape (n,). The prior mean
        is not added.
        """
        self.compute_gradient()
        return posterior.posterior_mean(self._fact, self._ktru, self.scale2())

    def get_posterior_covariance(self):
        """FITC approximated posterior covariance at the training features.

        Warning: this costs O(m n^2) time and O(n^2) memory, much more
        than the O(n m^2) factorization. Use sparingly.

        Returns
        -------
        Sigma : array_like, shape (n, n)
        """
        self.compute_gradient()
        return posterior.posterior_covariance(
            self._fact, self._ktrtr_diag, self.scale2()
        )

    def predict(
        self, xt, return_type=0, include_noise=False, zero_neg_variances=True
    ):
        """Posterior predictive moments at target points xt.

        Parameters
        ----------
        xt : array_like, shape (nt, d)
            Target points.
        return_type : int, optional
            -1: no variance, 0: variances (default), 1: full covariance.
        include_noise : bool, optional
            Add the observation noise variance sigma^2 (default False).
        zero_neg_variances : bool, optional
            Replace negative variances with zeros (default True).

        Returns
        -------
        zt_mean : array_like, shape (nt,)
            Posterior mean, prior mean included.
        zt_var : array_like or None
            Posterior variances (nt,) or covariance (nt, nt).
        """
        xt, _, _ = utils.ensure_shapes_and_type(xi=xt)
        if xt.shape[1] != self.xu.shape[1]:
            raise PreconditionError(
                f"xt must have {self.xu.shape[1]} columns, got {xt.shape[1]}"
            )
        self.recompute_if_needed()
        ksu = gnp.asarray(self.covariance(self.xu, xt, self.covparam))
        if return_type == -1:
            kss = None
        else:
            kss = gnp.asarray(
                self.covariance(xt, None, self.covparam, pairwise=(return_type == 0))
            )
        zt_mean, zt_var = posterior.predictive_moments(
            self._fact, ksu, kss, self.scale2(), return_type
        )
        zt_mean = zt_mean + self.prior_mean(xt)
        if zt_var is None:
            return zt_mean, None
        if include_noise:
            sn2 = self.likelihood.sigma() ** 2
            if return_type == 0:
                zt_var = zt_var + sn2
            else:
                zt_var = zt_var + sn2 * gnp.eye(xt.shape[0])
        if return_type == 0:
            if gnp.any(zt_var < 0.0):
                warnings.warn(
                    "Negative variances detected. Consider increasing the inducing noise.",
                    RuntimeWarning,
                )
            if zero_neg_variances:
                zt_var = gnp.maximum(zt_var, 0.0)
        return zt_mean, zt_var

    def get_alpha(self):
        """Posterior weights on the inducing points, shape (m,)."""
        self.recompute_if_needed()
        return self._fact.alpha

    def get_cholesky(self):
        """Posterior precision correction L, shape (m, m).

        L = (Luuᵀ Luᵀ Lu Luu)^{-1} - (s2 Kuu + snu2 I)^{-1}; the latent
        predictive covariance is s2 Kss + Ksᵀ L Ks.
        """
        self.recompute_if_needed()
        return self._fact.L

    def get_inducing_cholesky(self):
        """Upper Cholesky factor of s2 Kuu + snu2 I, shape (m, m)."""
        self.recompute_if_needed()
        return self._fact.chol_uu

    def exact_negative_log_likelihood(self):
        """Exact-GP negative log-likelihood with the same hyperparameters.

        Costs O(n^3); meant for checks on small data sets.
        """
        self.check_members()
        return likelihood.exact_negative_log_likelihood(self)
