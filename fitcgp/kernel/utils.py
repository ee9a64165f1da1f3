# fitcgp/kernel/utils.py
"""Shared construction of stationary covariance functions."""
import fitcgp.num as gnp


def stationary_covariance(x, y, kernel, param, pairwise=False):
    """Stationary anisotropic covariance built from a radial kernel.

    .. math::
        K_{ij} = \\sigma^2 k(\\|(x_i - y_j) / \\rho\\|)

    Parameters
    ----------
    x : gnp.array, shape (nx, d)
    y : gnp.array, shape (ny, d), or None
        None (or y is x) selects the (x, x) block.
    kernel : callable
        Radial kernel h -> k(h) with k(0) = 1.
    param : gnp.array, shape (1 + d,)
        [log(sigma2), log(1/rho_1), ..., log(1/rho_d)].
    pairwise : bool
        If True, return the vector k(x_i, y_i) (the prior variances
        when y is None); else the (nx, ny) matrix.

    Returns
    -------
    gnp.array
    """
    param = gnp.asarray(param)
    sigma2 = gnp.exp(param[0])
    loginvrho = param[1:]
    if y is None or y is x:
        if pairwise:
            return sigma2 * gnp.ones((x.shape[0],))
        y = x
    if pairwise:
        D = gnp.scaled_distance_elementwise(loginvrho, x, y)
    else:
        D = gnp.scaled_distance(loginvrho, x, y)
    return sigma2 * kernel(D)
