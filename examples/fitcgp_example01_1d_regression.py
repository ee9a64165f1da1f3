'''
Sparse GP regression in 1D with the FITC approximation.

A noisy test function is observed at n = 400 points. The posterior is
computed with m = 15 inducing features laid out on a regular grid, and
the noise standard deviation is adjusted by a few gradient steps on
the FITC negative log marginal likelihood wrt log(sigma).

----
License: GPLv3 (see LICENSE)
'''
import math
import numpy as np
import fitcgp as fg
import fitcgp.num as gnp


def generate_data(n, noise_std):
    """Create a 1D dataset with noisy observed values."""
    gnp.set_seed(0)
    box = [[-1.0], [1.0]]
    xt = fg.misc.designs.regulargrid(1, 300, box)
    xi = fg.misc.designs.scale(gnp.rand(n, 1), box)
    f = lambda x: np.sin(5.0 * x[:, 0]) + 0.5 * x[:, 0] ** 2
    zi = f(xi) + noise_std * gnp.randn(n)
    return xt, f(xt), xi, zi


def main():
    """Fit the FITC model and predict on a grid."""
    noise_std = 0.2
    xt, zt, xi, zi = generate_data(400, noise_std)
    xu = fg.misc.designs.regulargrid(1, 15, fg.misc.designs.databox(xi))

    covparam = np.array([0.0, math.log(1 / 0.3)])
    model = fg.FITCInferenceMethod(
        fg.kernel.squared_exponential_covariance,
        xi,
        zi,
        xu,
        likelihood=fg.core.GaussianLikelihood(sigma=1.0),
        covparam=covparam,
        inducing_noise=1e-8,
    )

    step = 0.5 / xi.shape[0]
    for _ in range(50):
        d = model.get_derivative_wrt_likelihood_model("log_sigma")[0]
        model.likelihood.log_sigma -= step * d

    nlZ = model.get_negative_log_marginal_likelihood()
    print(f"sigma = {model.likelihood.sigma():.4f}, nlZ = {nlZ:.4f}")

    zpm, zpv = model.predict(xt)
    return xt, zt, xi, zi, xu, zpm, zpv


def visualize(xt, zt, xi, zi, xu, zpm, zpv):
    """Plot reference function, observations, and FITC posterior."""
    import fitcgp.misc.plotutils as plotutils

    fig = plotutils.Figure(isinteractive=True)
    fig.plot(xt, zt, "C0", linestyle=(0, (5, 5)), linewidth=1)
    fig.plot(xi, zi, "k.", markersize=2)
    fig.plotgp(xt, zpm, zpv)
    fig.plotinducing(xu, float(np.min(zi)) - 0.5)
    fig.xylabels("x", "z")
    fig.title("FITC regression")
    fig.show(grid=True)


if __name__ == "__main__":
    xt, zt, xi, zi, xu, zpm, zpv = main()
    visualize(xt, zt, xi, zi, xu, zpm, zpv)
