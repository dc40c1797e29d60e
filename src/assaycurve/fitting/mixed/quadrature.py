"""
Approximations to the marginal likelihood of one group's data when a scalar
random offset b ~ Normal(0, re_std^2) is added to one curve parameter and
integrated out:

    L = integral prod_i Normal(y_i | f(x_i; theta + b*e_k), sigma^2)
                 * Normal(b | 0, re_std^2) db
"""

import numpy as np
from numpy.polynomial.hermite import hermgauss
from scipy.special import logsumexp

from assaycurve.util import check_number

LOG_2PI = np.log(2*np.pi)

# Gauss-Newton iterations for the conditional mode
MODE_MAX_ITER = 100
MODE_TOL = 1e-12


class _GroupDensity:
    """
    Negative log joint density of one group's data and its random effect,
    as a function of the random effect b.
    """

    def __init__(self, curve, theta, effect_idx, re_std, sigma, x, y):

        self.curve = curve
        self.theta = theta
        self.effect_idx = effect_idx
        self.re_var = re_std**2
        self.sigma2 = sigma**2
        self.x = x
        self.y = y

        self._const = 0.5*len(y)*(LOG_2PI + np.log(self.sigma2)) + \
                      0.5*(LOG_2PI + np.log(self.re_var))

    def _shifted(self, b):
        params = self.theta.copy()
        params[self.effect_idx] += b
        return params

    def residuals(self, b):
        return self.y - self.curve.model_func(self._shifted(b), self.x)

    def effect_jacobian(self, b):
        J = self.curve.jacobian_func(self._shifted(b), self.x)
        return J[:, self.effect_idx]

    def penalized_ss(self, b):
        """
        Part of the negative log density that depends on b.
        """
        r = self.residuals(b)
        return 0.5*np.sum(r**2)/self.sigma2 + 0.5*b**2/self.re_var

    def neg_log(self, b):
        return self.penalized_ss(b) + self._const

    def curvature(self, b):
        """
        Gauss-Newton second derivative of the negative log density in b.
        """
        j = self.effect_jacobian(b)
        return np.sum(j**2)/self.sigma2 + 1.0/self.re_var

    def mode(self):
        """
        Conditional mode of b by damped Gauss-Newton, started at zero.
        """

        b = 0.0
        current = self.penalized_ss(b)
        for _ in range(MODE_MAX_ITER):

            r = self.residuals(b)
            j = self.effect_jacobian(b)

            grad = -np.dot(j, r)/self.sigma2 + b/self.re_var
            H = np.dot(j, j)/self.sigma2 + 1.0/self.re_var
            step = -grad/H

            # Halve the step until the density does not get worse
            t = 1.0
            while True:
                b_new = b + t*step
                new = self.penalized_ss(b_new)
                if new <= current or t < 1e-10:
                    break
                t /= 2

            if not np.isfinite(new):
                break

            converged = abs(b_new - b) <= MODE_TOL*(1 + abs(b))
            b = b_new
            current = new
            if converged:
                break

        return b


class MarginalApproximation:
    """
    Approximate marginal log-likelihood of a group for a given quadrature
    order.

    - order 0: first-order linearization of the curve in b around b = 0.
      The marginal is then Gaussian with covariance
      sigma^2 I + re_std^2 j j^T, j = df/db at b = 0. Fastest; exact when
      the curve is linear in the shifted parameter.
    - order 1: Laplace approximation at the conditional mode of b.
    - order > 1: adaptive Gauss-Hermite quadrature with `order` nodes,
      centered on the conditional mode and scaled by the Gauss-Newton
      curvature there. Order 1 is identical to the Laplace approximation.

    Parameters
    ----------
    order : int, default 1
        Number of quadrature nodes (0 for the first-order approximation).
    """

    def __init__(self, order=1):

        self.order = check_number(order,
                                  param_name="order",
                                  cast_type=int,
                                  min_allowed=0)

        if self.order > 0:
            self._nodes, weights = hermgauss(self.order)
            self._log_weights = np.log(weights)

    @property
    def name(self):
        if self.order == 0:
            return "first-order"
        if self.order == 1:
            return "laplace"
        return f"adaptive-gauss-hermite({self.order})"

    def __call__(self, curve, theta, effect_idx, re_std, sigma, x, y):
        """
        Approximate the marginal log-likelihood of one group.

        Parameters
        ----------
        curve : CurveModel
            The curve.
        theta : np.ndarray
            Fixed-effect parameters.
        effect_idx : int
            Index of the parameter carrying the random effect.
        re_std, sigma : float
            Random-effect and residual standard deviations.
        x, y : np.ndarray
            The group's concentrations and densities.

        Returns
        -------
        log_lik : float
            Approximate marginal log-likelihood.
        b_hat : float
            Estimate of the group's random effect (conditional mode, or the
            conditional mean of the linearized model for order 0).
        cond_std : float
            Conditional standard deviation of b from the curvature at
            `b_hat`.
        """

        density = _GroupDensity(curve, theta, effect_idx, re_std, sigma, x, y)

        if self.order == 0:
            return self._first_order(density)

        b_hat = density.mode()
        H = density.curvature(b_hat)
        scale = np.sqrt(2.0/H)

        log_f = np.array([-density.neg_log(b_hat + scale*z)
                          for z in self._nodes])
        log_lik = np.log(scale) + logsumexp(self._log_weights +
                                            self._nodes**2 +
                                            log_f)

        return float(log_lik), float(b_hat), float(1/np.sqrt(H))

    def _first_order(self, density):

        r = density.residuals(0.0)
        j = density.effect_jacobian(0.0)
        n = len(r)

        jj = np.dot(j, j)
        jr = np.dot(j, r)
        denom = density.sigma2 + density.re_var*jj

        # Matrix determinant lemma and Sherman-Morrison for
        # V = sigma^2 I + re_var j j^T
        log_det = n*np.log(density.sigma2) + np.log(denom/density.sigma2)
        quad = (np.dot(r, r) - density.re_var*jr**2/denom)/density.sigma2

        log_lik = -0.5*(n*LOG_2PI + log_det + quad)
        b_hat = density.re_var*jr/denom
        cond_std = np.sqrt(density.re_var*density.sigma2/denom)

        return float(log_lik), float(b_hat), float(cond_std)

    def __repr__(self) -> str:
        return f"<MarginalApproximation({self.name})>"
