"""
Unit tests for FITCInferenceMethod.

Covers caching behavior, preconditions, error reporting, agreement with
exact GP regression when the inducing features are the training
features, and consistency between the public accessors.
"""
import math
import unittest

import numpy as np

import fitcgp.num as gnp
from fitcgp.core import (
    FITCInferenceMethod,
    InferenceMethod,
    InferenceType,
    GaussianLikelihood,
    LikelihoodModel,
    PreconditionError,
    UnsupportedParameterError,
    NumericalError,
    DecompositionError,
)
from fitcgp.kernel import squared_exponential_covariance


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------
COVPARAM = np.array([0.0, math.log(1 / 0.3)])


def generate_data(n=30, m=6, seed=0):
    gnp.set_seed(seed)
    xi = gnp.linspace(-1.0, 1.0, n).reshape(-1, 1)
    zi = np.sin(4.0 * xi[:, 0]) + 0.1 * gnp.randn(n)
    xu = gnp.linspace(-0.9, 0.9, m).reshape(-1, 1)
    return xi, zi, xu


def build_model(n=30, m=6, sigma=0.2, **kwargs):
    xi, zi, xu = generate_data(n, m)
    kwargs.setdefault("covparam", COVPARAM.copy())
    return FITCInferenceMethod(
        squared_exponential_covariance,
        xi,
        zi,
        xu,
        likelihood=GaussianLikelihood(sigma=sigma),
        **kwargs,
    )


class CountingCovariance:
    """Squared exponential covariance recording its number of calls."""

    __name__ = "counting_covariance"

    def __init__(self):
        self.calls = 0

    def __call__(self, x, y, param, pairwise=False):
        self.calls += 1
        return squared_exponential_covariance(x, y, param, pairwise)


class CountingFITC(FITCInferenceMethod):
    def __init__(self, *args, **kwargs):
        self.n_update = 0
        self.n_update_deriv = 0
        super().__init__(*args, **kwargs)

    def update(self):
        self.n_update += 1
        super().update()

    def update_deriv(self):
        self.n_update_deriv += 1
        super().update_deriv()


def lookup_covariance(C):
    """Covariance reading entries of a fixed matrix C, features are row indices."""

    def covariance(x, y, param, pairwise=False):
        ix = x[:, 0].astype(int)
        if y is None:
            if pairwise:
                return np.diag(C)[ix]
            y = x
        iy = y[:, 0].astype(int)
        if pairwise:
            return C[ix, iy]
        return C[np.ix_(ix, iy)]

    return covariance


class LaplaceLikelihood(LikelihoodModel):
    pass


class NoiseOnly:
    """Object exposing a noise level without the likelihood interface."""

    def sigma(self):
        return 0.1


class OtherInference(InferenceMethod):
    inference_type = InferenceType.EXACT_REGRESSION

    def parameter_values(self):
        return ()


# ======================================================================
#                           Test cases
# ======================================================================
class TestCaching(unittest.TestCase):
    def test_repeated_calls_do_not_recompute(self):
        cov = CountingCovariance()
        xi, zi, xu = generate_data()
        model = FITCInferenceMethod(cov, xi, zi, xu, covparam=COVPARAM.copy())
        nlZ1 = model.get_negative_log_marginal_likelihood()
        calls = cov.calls
        self.assertEqual(calls, 3)
        nlZ2 = model.get_negative_log_marginal_likelihood()
        model.get_alpha()
        model.get_cholesky()
        self.assertEqual(cov.calls, calls)
        self.assertEqual(nlZ1, nlZ2)

    def test_hyperparameter_change_triggers_recomputation(self):
        cov = CountingCovariance()
        xi, zi, xu = generate_data()
        model = FITCInferenceMethod(cov, xi, zi, xu, covparam=COVPARAM.copy())
        nlZ1 = model.get_negative_log_marginal_likelihood()
        model.likelihood.log_sigma = math.log(0.5)
        nlZ2 = model.get_negative_log_marginal_likelihood()
        self.assertEqual(cov.calls, 6)
        self.assertNotEqual(nlZ1, nlZ2)

        model.covparam[1] += 0.1
        model.get_negative_log_marginal_likelihood()
        self.assertEqual(cov.calls, 9)

    def test_gradient_support_computed_once(self):
        xi, zi, xu = generate_data()
        model = CountingFITC(
            squared_exponential_covariance, xi, zi, xu, covparam=COVPARAM.copy()
        )
        model.compute_gradient()
        model.compute_gradient()
        model.get_derivative_wrt_likelihood_model("log_sigma")
        model.get_posterior_mean()
        self.assertEqual(model.n_update, 1)
        self.assertEqual(model.n_update_deriv, 1)
        self.assertFalse(model.factorization_stale)
        self.assertFalse(model.gradient_stale)

        model.log_scale = 0.1
        model.get_negative_log_marginal_likelihood()
        self.assertEqual(model.n_update, 2)
        self.assertTrue(model.gradient_stale)
        model.compute_gradient()
        self.assertEqual(model.n_update, 2)
        self.assertEqual(model.n_update_deriv, 2)

    def test_set_data_invalidates_cache(self):
        model = build_model()
        nlZ1 = model.get_negative_log_marginal_likelihood()
        xi, zi, _ = generate_data(n=30, seed=1)
        model.set_data(xi, zi)
        self.assertTrue(model.factorization_stale)
        nlZ2 = model.get_negative_log_marginal_likelihood()
        self.assertNotEqual(nlZ1, nlZ2)

    def test_determinism(self):
        m1 = build_model()
        m2 = build_model()
        self.assertEqual(
            m1.get_negative_log_marginal_likelihood(),
            m2.get_negative_log_marginal_likelihood(),
        )
        self.assertTrue(gnp.array_equal(m1.get_posterior_mean(), m2.get_posterior_mean()))
        self.assertTrue(gnp.array_equal(
            m1.get_derivative_wrt_likelihood_model("log_sigma"),
            m2.get_derivative_wrt_likelihood_model("log_sigma"),
        ))


class TestAgainstExactRegression(unittest.TestCase):
    def setUp(self):
        xi = gnp.linspace(0.0, 4.0, 5).reshape(-1, 1)
        zi = gnp.array([0.3, -0.2, 1.1, 0.4, -0.7])
        self.covparam = np.array([0.0, 0.0])
        self.sigma = 0.1
        self.model = FITCInferenceMethod(
            squared_exponential_covariance,
            xi,
            zi,
            gnp.copy(xi),
            likelihood=GaussianLikelihood(sigma=self.sigma),
            covparam=self.covparam,
            inducing_noise=1e-10,
        )
        self.K = squared_exponential_covariance(xi, xi, self.covparam)
        self.zi = zi

    def test_nll_matches_exact_gp(self):
        nlZ = self.model.get_negative_log_marginal_likelihood()
        exact = self.model.exact_negative_log_likelihood()
        self.assertAlmostEqual(nlZ, exact, places=5)

    def test_posterior_mean_matches_exact_gp(self):
        Kn = self.K + self.sigma**2 * np.eye(5)
        exact_mean = self.K @ np.linalg.solve(Kn, self.zi)
        mean = self.model.get_posterior_mean()
        self.assertTrue(np.allclose(mean, exact_mean, atol=1e-6))

    def test_posterior_covariance_matches_exact_gp(self):
        Kn = self.K + self.sigma**2 * np.eye(5)
        exact_cov = self.K - self.K @ np.linalg.solve(Kn, self.K)
        cov = self.model.get_posterior_covariance()
        self.assertTrue(np.allclose(cov, exact_cov, atol=1e-6))


class TestSmallLookupProblem(unittest.TestCase):
    """Three training points and two inducing points over a fixed covariance."""

    def setUp(self):
        A = np.array(
            [
                [1.0, 0.2, 0.0, 0.3, 0.1],
                [0.4, 1.0, 0.2, 0.0, 0.3],
                [0.1, 0.5, 1.0, 0.2, 0.0],
                [0.3, 0.0, 0.4, 1.0, 0.2],
                [0.0, 0.2, 0.1, 0.5, 1.0],
            ]
        )
        self.C = A @ A.T + 0.5 * np.eye(5)
        self.xi = np.array([[0.0], [1.0], [2.0]])
        self.xu = np.array([[3.0], [4.0]])
        self.zi = np.array([0.5, -1.0, 0.25])
        self.sigma = 0.1
        self.model = FITCInferenceMethod(
            lookup_covariance(self.C),
            self.xi,
            self.zi,
            self.xu,
            likelihood=GaussianLikelihood(sigma=self.sigma),
        )

    def dense_covariance(self):
        Kuu = self.C[3:, 3:] + 1e-10 * np.eye(2)
        Kuf = self.C[3:, :3]
        Q = Kuf.T @ np.linalg.solve(Kuu, Kuf)
        return Q + np.diag(np.diag(self.C[:3, :3]) - np.diag(Q)) + self.sigma**2 * np.eye(3)

    def test_nll_matches_dense_computation(self):
        S = self.dense_covariance()
        _, logdet = np.linalg.slogdet(S)
        ref = 0.5 * (logdet + self.zi @ np.linalg.solve(S, self.zi) + 3 * math.log(2 * math.pi))
        self.assertAlmostEqual(self.model.get_negative_log_marginal_likelihood(), ref, places=6)

    def test_log_sigma_derivative_matches_dense_computation(self):
        S = self.dense_covariance()
        Si = np.linalg.inv(S)
        a = Si @ self.zi
        # d/dlog(sigma) of S is 2 sigma^2 I
        ref = self.sigma**2 * (np.trace(Si) - a @ a)
        d = self.model.get_derivative_wrt_likelihood_model("log_sigma")
        self.assertEqual(d.shape, (1,))
        self.assertAlmostEqual(float(d[0]), ref, places=8)

    def test_alpha_and_inducing_cholesky(self):
        U = self.model.get_inducing_cholesky()
        self.assertTrue(np.allclose(U.T @ U, self.C[3:, 3:] + 1e-10 * np.eye(2)))
        self.assertEqual(self.model.get_alpha().shape, (2,))
        self.assertEqual(self.model.get_cholesky().shape, (2, 2))


class TestAccessors(unittest.TestCase):
    def test_diagonal_vector(self):
        model = build_model(n=4, m=2, sigma=2.0)
        sW = model.get_diagonal_vector()
        self.assertEqual(sW.shape, (4,))
        self.assertTrue(np.allclose(sW, 0.5))

    def test_posterior_covariance_is_symmetric(self):
        model = build_model()
        Sigma = model.get_posterior_covariance()
        self.assertEqual(Sigma.shape, (30, 30))
        asym = np.max(np.abs(Sigma - Sigma.T))
        self.assertLessEqual(asym, 1e-10 * np.max(np.abs(Sigma)))

    def test_derivative_matches_finite_differences(self):
        model = build_model(sigma=0.3)
        log_sigma0 = model.likelihood.log_sigma
        d = model.get_derivative_wrt_likelihood_model("log_sigma")

        def f(log_sigma):
            model.likelihood.log_sigma = log_sigma
            return model.get_negative_log_marginal_likelihood()

        d_fd = gnp.derivative_finite_diff(f, log_sigma0, 1e-4)
        model.likelihood.log_sigma = log_sigma0
        self.assertAlmostEqual(float(d[0]), d_fd, delta=1e-6 * max(1.0, abs(d_fd)))

    def test_predict_at_training_features(self):
        model = build_model()
        zt_mean, zt_var = model.predict(model.xi)
        self.assertTrue(np.allclose(zt_mean, model.get_posterior_mean(), atol=1e-8))
        self.assertTrue(
            np.allclose(zt_var, np.diag(model.get_posterior_covariance()), atol=1e-8)
        )

    def test_predict_return_types(self):
        model = build_model()
        xt = gnp.linspace(-1.2, 1.2, 7).reshape(-1, 1)
        mean_only, none = model.predict(xt, return_type=-1)
        self.assertIsNone(none)
        mean0, var0 = model.predict(xt, return_type=0)
        mean1, cov1 = model.predict(xt, return_type=1, zero_neg_variances=False)
        self.assertTrue(np.allclose(mean_only, mean0))
        self.assertTrue(np.allclose(mean0, mean1))
        self.assertTrue(np.allclose(var0, np.diag(cov1), atol=1e-10))
        _, var_noisy = model.predict(xt, include_noise=True)
        self.assertTrue(np.allclose(var_noisy - var0, model.likelihood.sigma() ** 2))

    def test_predict_rejects_wrong_dimension(self):
        model = build_model()
        with self.assertRaises(PreconditionError):
            model.predict(np.zeros((3, 2)))

    def test_parameterized_mean(self):
        c = 2.5
        xi, zi, xu = generate_data()
        zero = FITCInferenceMethod(
            squared_exponential_covariance, xi, zi, xu, covparam=COVPARAM.copy()
        )
        shifted = FITCInferenceMethod(
            squared_exponential_covariance,
            xi,
            zi + c,
            xu,
            covparam=COVPARAM.copy(),
            mean=lambda x, param: param[0] * gnp.ones((x.shape[0],)),
            meanparam=np.array([c]),
            meantype="parameterized",
        )
        self.assertAlmostEqual(
            zero.get_negative_log_marginal_likelihood(),
            shifted.get_negative_log_marginal_likelihood(),
            places=10,
        )
        self.assertTrue(np.allclose(zero.get_posterior_mean(), shifted.get_posterior_mean()))
        xt = np.array([[0.0], [0.5]])
        self.assertTrue(np.allclose(zero.predict(xt)[0] + c, shifted.predict(xt)[0]))

    def test_register_minimizer_warns_and_is_ignored(self):
        model = build_model()
        nlZ = model.get_negative_log_marginal_likelihood()
        with self.assertWarns(UserWarning):
            model.register_minimizer(object())
        self.assertFalse(hasattr(model, "minimizer"))
        model.invalidate()
        self.assertTrue(model.factorization_stale)
        self.assertEqual(model.get_negative_log_marginal_likelihood(), nlZ)

    def test_base_register_minimizer_warns(self):
        with self.assertWarns(UserWarning):
            OtherInference().register_minimizer(object())

    def test_cached_blocks(self):
        model = build_model(n=30, m=6)
        model.get_negative_log_marginal_likelihood()
        self.assertEqual(model._ktru.shape, (6, 30))
        self.assertEqual(model._ktrtr_diag.shape, (30,))

    def test_str_describes_model(self):
        s = str(build_model())
        self.assertIn("Inducing points: 6", s)
        self.assertIn("squared_exponential_covariance", s)


class TestErrors(unittest.TestCase):
    def test_unsupported_parameter(self):
        model = build_model()
        with self.assertRaises(UnsupportedParameterError) as cm:
            model.get_derivative_wrt_likelihood_model("wrong_name")
        self.assertEqual(cm.exception.parameter, "wrong_name")
        self.assertIn("wrong_name", str(cm.exception))
        self.assertIsInstance(cm.exception, ValueError)

    def test_non_gaussian_likelihood(self):
        xi, zi, xu = generate_data()
        with self.assertRaises(PreconditionError) as cm:
            FITCInferenceMethod(
                squared_exponential_covariance, xi, zi, xu,
                likelihood=LaplaceLikelihood(), covparam=COVPARAM.copy(),
            )
        self.assertIn("LaplaceLikelihood", str(cm.exception))

    def test_foreign_likelihood_object(self):
        xi, zi, xu = generate_data()
        with self.assertRaises(PreconditionError) as cm:
            FITCInferenceMethod(
                squared_exponential_covariance, xi, zi, xu,
                likelihood=NoiseOnly(), covparam=COVPARAM.copy(),
            )
        self.assertIn("NoiseOnly", str(cm.exception))

    def test_likelihood_reassignment_is_checked(self):
        model = build_model()
        nlZ = model.get_negative_log_marginal_likelihood()
        for bad in (NoiseOnly(), LaplaceLikelihood()):
            with self.assertRaises(PreconditionError):
                model.likelihood = bad
        self.assertIsInstance(model.likelihood, GaussianLikelihood)
        self.assertEqual(model.get_negative_log_marginal_likelihood(), nlZ)
        d = model.get_derivative_wrt_likelihood_model("log_sigma")
        self.assertEqual(d.shape, (1,))

        model.likelihood = GaussianLikelihood(sigma=0.5)
        self.assertTrue(model.factorization_stale)
        self.assertNotEqual(model.get_negative_log_marginal_likelihood(), nlZ)

    def test_integer_labels_rejected(self):
        xi, _, xu = generate_data()
        with self.assertRaises(PreconditionError):
            FITCInferenceMethod(
                squared_exponential_covariance, xi, np.arange(30), xu,
                covparam=COVPARAM.copy(),
            )

    def test_shape_mismatches_rejected(self):
        xi, zi, xu = generate_data()
        with self.assertRaises(PreconditionError):
            FITCInferenceMethod(squared_exponential_covariance, xi, zi[:-1], xu)
        with self.assertRaises(PreconditionError):
            FITCInferenceMethod(squared_exponential_covariance, xi, zi, np.zeros((0, 1)))
        with self.assertRaises(PreconditionError):
            FITCInferenceMethod(squared_exponential_covariance, xi, zi, np.zeros((3, 2)))
        with self.assertRaises(PreconditionError):
            FITCInferenceMethod(squared_exponential_covariance, xi.reshape(-1), zi, xu)

    def test_invalid_meantype(self):
        xi, zi, xu = generate_data()
        with self.assertRaises(PreconditionError):
            FITCInferenceMethod(squared_exponential_covariance, xi, zi, xu, meantype="linear")
        with self.assertRaises(PreconditionError):
            FITCInferenceMethod(
                squared_exponential_covariance, xi, zi, xu, mean=lambda x, p: x[:, 0]
            )

    def test_indefinite_inducing_covariance(self):
        def indefinite_covariance(x, y, param, pairwise=False):
            K = squared_exponential_covariance(x, y, param, pairwise)
            if y is x and not pairwise:
                K = K - 2.0 * np.eye(x.shape[0])
            return K

        xi, zi, xu = generate_data()
        model = FITCInferenceMethod(indefinite_covariance, xi, zi, xu, covparam=COVPARAM.copy())
        with self.assertRaises(DecompositionError):
            model.get_negative_log_marginal_likelihood()

    def test_degenerate_fitc_diagonal(self):
        def zero_variance_covariance(x, y, param, pairwise=False):
            K = squared_exponential_covariance(x, y, param, pairwise)
            return np.zeros_like(K) if pairwise else K

        xi, zi, xu = generate_data()
        model = FITCInferenceMethod(
            zero_variance_covariance, xi, zi, xu,
            likelihood=GaussianLikelihood(sigma=math.exp(-20.0)),
            covparam=COVPARAM.copy(),
        )
        with self.assertRaises(NumericalError):
            model.get_negative_log_marginal_likelihood()

    def test_wrong_block_shape(self):
        def bad_covariance(x, y, param, pairwise=False):
            K = squared_exponential_covariance(x, y, param, pairwise)
            return K if pairwise else K.T

        xi, zi, xu = generate_data()
        model = FITCInferenceMethod(bad_covariance, xi, zi, xu, covparam=COVPARAM.copy())
        with self.assertRaises(PreconditionError):
            model.get_negative_log_marginal_likelihood()


class TestDowncast(unittest.TestCase):
    def test_none(self):
        self.assertIsNone(FITCInferenceMethod.obtain_from_generic(None))

    def test_same_type(self):
        model = build_model()
        self.assertIs(FITCInferenceMethod.obtain_from_generic(model), model)

    def test_wrong_type(self):
        with self.assertRaises(PreconditionError):
            FITCInferenceMethod.obtain_from_generic(OtherInference())
        with self.assertRaises(PreconditionError):
            FITCInferenceMethod.obtain_from_generic(object())


class TestGaussianLikelihood(unittest.TestCase):
    def test_sigma(self):
        lik = GaussianLikelihood(sigma=0.25)
        self.assertAlmostEqual(lik.sigma(), 0.25)
        self.assertAlmostEqual(lik.log_sigma, math.log(0.25))
        self.assertEqual(lik.parameter_values(), (math.log(0.25),))

    def test_invalid_sigma(self):
        with self.assertRaises(ValueError):
            GaussianLikelihood(sigma=0.0)
        with self.assertRaises(ValueError):
            GaussianLikelihood().set_sigma(-1.0)


if __name__ == "__main__":
    unittest.main()
