"""
Nonlinear mixed-effects fit: a saturating curve whose parameters are shared
by all groups except for one parameter (by default the asymptote), which
gets a per-group random offset drawn from Normal(0, re_std^2).
"""

from assaycurve.errors import InsufficientDataError
from assaycurve.models import get_curve
from assaycurve.util import check_columns, check_number

from ..group_index import GroupIndex
from .quadrature import MarginalApproximation

import numpy as np
import pandas as pd
import scipy.optimize

from dataclasses import dataclass, asdict
import warnings

# Bounds on log(re_std) and log(sigma) during optimization
LOG_SCALE_BOUNDS = (-25.0, 10.0)

# re_std below this fraction of sigma is reported as a boundary solution
BOUNDARY_FRACTION = 1e-2

# L-BFGS-B stopping tolerances
OPT_FTOL = 1e-13
OPT_GTOL = 1e-8

# Newton refinement of the fixed effects after L-BFGS-B
REFINE_MAX_ITER = 5


@dataclass(frozen=True)
class RandomEffectEstimate:
    """
    Estimated random offset of one group.

    Attributes
    ----------
    group : object
        Group label as it appears in the data.
    index : int
        Internal index of the group (see GroupIndex).
    estimate : float
        Offset added to the fixed value of the effect parameter.
    sigma : float
        Shared residual standard deviation of the model, used as the error
        bar of every group's estimate.
    cond_std : float
        Conditional standard deviation of this group's offset given the
        fitted model.
    """

    group: object
    index: int
    estimate: float
    sigma: float
    cond_std: float


@dataclass(frozen=True, eq=False)
class MixedFitResult:
    """
    Outcome of a nonlinear mixed-effects fit.

    Attributes
    ----------
    curve : CurveModel
        The fitted curve.
    effect_on : str
        Name of the parameter carrying the random effect.
    params : np.ndarray
        Fixed-effect parameter estimates.
    std_errors : np.ndarray
        Standard errors of the fixed effects (nan if the Hessian of the
        objective is not positive definite).
    cov_matrix : np.ndarray
        Covariance matrix of the fixed effects.
    re_std : float
        Standard deviation of the random-effect distribution.
    sigma : float
        Residual standard deviation.
    random_effects : tuple of RandomEffectEstimate
        One entry per group, in group index order.
    groups : GroupIndex
        Group label <-> index map used for the fit.
    log_likelihood : float
        Approximate marginal log-likelihood at the estimates.
    aic, bic : float
        Information criteria counting fixed effects, re_std and sigma.
    approximation : str
        Name of the marginal likelihood approximation.
    order : int
        Quadrature order used.
    num_obs : int
        Number of observations.
    converged : bool
        Whether the optimizer reported success.
    boundary : bool
        Whether re_std collapsed to (numerically) zero.
    message : str
        Termination message from the optimizer.
    data : pandas.DataFrame
        The data subset used.
    x_column, y_column, group_key : str
        Columns of `data` used for the fit.
    """

    curve: object
    effect_on: str
    params: np.ndarray
    std_errors: np.ndarray
    cov_matrix: np.ndarray
    re_std: float
    sigma: float
    random_effects: tuple
    groups: GroupIndex
    log_likelihood: float
    aic: float
    bic: float
    approximation: str
    order: int
    num_obs: int
    converged: bool
    boundary: bool
    message: str
    data: pd.DataFrame
    x_column: str = "conc"
    y_column: str = "density"
    group_key: str = "run"

    @property
    def param_dict(self):
        return self.curve.to_dict(self.params)

    @property
    def random_effect_dict(self):
        return {r.group: r.estimate for r in self.random_effects}

    def group_params(self, group):
        """
        Curve parameters of one group: the fixed effects with the group's
        offset added to the effect parameter.
        """

        idx = self.curve.param_index(self.effect_on)
        params = self.params.copy()
        params[idx] += self.random_effects[self.groups.index_of(group)].estimate

        return params

    def predict(self, x, group=None):
        """
        Evaluate the population curve (group=None) or a group's curve at x.
        """

        if group is None:
            return self.curve.evaluate(self.params, x)

        return self.curve.evaluate(self.group_params(group), x)

    def random_effects_frame(self):
        """
        Random-effect estimates as a DataFrame with columns 'group', 'index',
        'estimate', 'sigma' and 'cond_std'.
        """
        return pd.DataFrame([asdict(r) for r in self.random_effects],
                            columns=["group", "index", "estimate",
                                     "sigma", "cond_std"])

    def __repr__(self) -> str:
        est = ", ".join(f"{k}={v:.4g}" for k, v in self.param_dict.items())
        return (f"<MixedFitResult({self.curve.name}: {est}; "
                f"re_std({self.effect_on})={self.re_std:.4g}, "
                f"sigma={self.sigma:.4g}, num_groups={len(self.groups)})>")


def random_effect_mean(result):
    """
    Mean of the per-group random-effect estimates. Under the zero-mean
    random-effect distribution this should be close to zero.
    """

    return float(np.mean([r.estimate for r in result.random_effects]))


def _numerical_hessian(fcn, z, rel_step=1e-4):
    """
    Hessian of a scalar function by central differences.
    """

    z = np.asarray(z, dtype=float)
    n = len(z)
    h = rel_step*(1 + np.abs(z))

    hess = np.zeros((n, n))
    for i in range(n):
        for j in range(i, n):

            ei = np.zeros(n)
            ei[i] = h[i]
            ej = np.zeros(n)
            ej[j] = h[j]

            value = (fcn(z + ei + ej) - fcn(z + ei - ej)
                     - fcn(z - ei + ej) + fcn(z - ei - ej))/(4*h[i]*h[j])

            hess[i, j] = value
            hess[j, i] = value

    return hess


def _invert_positive_definite(hess):
    """
    Inverse of a symmetric matrix, or None if it is not positive definite.
    """

    if not np.all(np.isfinite(hess)):
        return None

    try:
        np.linalg.cholesky(hess)
        return np.linalg.inv(hess)
    except np.linalg.LinAlgError:
        return None


def _central_gradient(fcn, z, rel_step=1e-6):
    """
    Gradient of a scalar function by central differences.
    """

    z = np.asarray(z, dtype=float)
    h = rel_step*(1 + np.abs(z))

    grad = np.zeros(len(z))
    for i in range(len(z)):
        e = np.zeros(len(z))
        e[i] = h[i]
        grad[i] = (fcn(z + e) - fcn(z - e))/(2*h[i])

    return grad


def _refine_fixed(fcn, z, num_fixed):
    """
    Newton steps on the first `num_fixed` entries of `z` with the remaining
    entries held fixed. Stops when the fixed-effect Hessian is not positive
    definite or a step would increase `fcn`.

    At a stationary point in the fixed effects, the gradient with respect to
    a linearly entering effect parameter is -sum(b_hat)/re_std^2, so this
    brings the random-effect estimates to a zero mean.
    """

    z = np.array(z, dtype=float)
    current = fcn(z)

    for _ in range(REFINE_MAX_ITER):

        rest = z[num_fixed:]

        def _fixed_only(theta):
            return fcn(np.concatenate([theta, rest]))

        theta = z[:num_fixed]
        hess = _numerical_hessian(_fixed_only, theta)
        if _invert_positive_definite(hess) is None:
            break

        step = np.linalg.solve(hess, _central_gradient(_fixed_only, theta))

        z_new = z.copy()
        z_new[:num_fixed] = theta - step
        new = fcn(z_new)
        if not np.isfinite(new) or new > current:
            break

        z = z_new
        current = new
        if np.max(np.abs(step)) <= 1e-12*(1 + np.max(np.abs(theta))):
            break

    return z


def fit_mixed(curve,
              initial_fixed_params,
              df,
              group_key="run",
              effect_on="Asym",
              order=1,
              x_column="conc",
              y_column="density",
              max_iter=1000):
    """
    Fit a nonlinear mixed-effects model with a random effect on one curve
    parameter.

    For group g the curve parameters are theta with theta[effect_on]
    replaced by theta[effect_on] + b_g, b_g ~ Normal(0, re_std^2). The fixed
    effects theta, log(re_std) and log(sigma) are estimated jointly by
    maximizing an approximate marginal likelihood (see
    MarginalApproximation) with L-BFGS-B, followed by Newton steps on the
    fixed effects alone.

    Parameters
    ----------
    curve : str or CurveModel
        The curve to fit.
    initial_fixed_params : array-like, dict or None
        Starting values of the fixed effects. If None, use
        `curve.initial_guess` on the pooled data.
    df : pandas.DataFrame
        Data to fit.
    group_key : str, default "run"
        Column holding the group label. Labels may be of any hashable type;
        they are mapped to internal indexes with a GroupIndex.
    effect_on : str, default "Asym"
        Parameter carrying the random effect. Must be one of
        `curve.param_names`.
    order : int, default 1
        Quadrature order: 0 first-order, 1 Laplace, >1 adaptive
        Gauss-Hermite.
    x_column, y_column : str
        Columns holding concentration and density.
    max_iter : int, default 1000
        Iteration budget for the optimizer.

    Returns
    -------
    MixedFitResult
        Non-convergence (`converged=False`) and a vanishing random-effect
        variance (`boundary=True`) are reported with warnings, not raised.

    Raises
    ------
    InsufficientDataError
        If there are fewer observations than fixed effects plus the two
        variance parameters.
    ValueError
        If `effect_on` is not a curve parameter or `order` is invalid.
    """

    curve = get_curve(curve)
    effect_idx = curve.param_index(effect_on)
    approx = MarginalApproximation(order)
    max_iter = check_number(max_iter,
                            param_name="max_iter",
                            cast_type=int,
                            min_allowed=1)

    check_columns(df, [group_key, x_column, y_column])
    x_all = df[x_column].to_numpy(dtype=float)
    y_all = df[y_column].to_numpy(dtype=float)
    finite_mask = np.isfinite(x_all) & np.isfinite(y_all)
    fit_df = df.loc[finite_mask]

    num_obs = int(np.sum(finite_mask))
    num_fixed = curve.num_params
    num_estimated = num_fixed + 2
    if num_obs < num_estimated:
        err = f"{num_obs} observations cannot constrain {num_fixed} fixed "
        err += "effects plus the random-effect and residual variances."
        raise InsufficientDataError(err)

    groups = GroupIndex(fit_df[group_key])
    codes = groups.codes(fit_df[group_key])
    x_all = x_all[finite_mask]
    y_all = y_all[finite_mask]
    group_data = [(x_all[codes == i], y_all[codes == i])
                  for i in range(len(groups))]

    if initial_fixed_params is None:
        theta0 = curve.initial_guess(x_all, y_all)
    else:
        theta0 = curve._check_params(initial_fixed_params)

    # Starting scales from the pooled residuals at theta0
    resid = y_all - curve.model_func(theta0, x_all)
    sigma0 = np.sqrt(np.mean(resid**2))
    if not np.isfinite(sigma0) or sigma0 <= 0:
        sigma0 = max(1e-3*np.std(y_all), 1e-6)
    re_std0 = max(sigma0, 0.1*abs(theta0[effect_idx]))

    def _unpack(z):
        theta = np.asarray(z[:num_fixed], dtype=float)
        re_std = np.exp(np.clip(z[num_fixed], *LOG_SCALE_BOUNDS))
        sigma = np.exp(np.clip(z[num_fixed + 1], *LOG_SCALE_BOUNDS))
        return theta, re_std, sigma

    def _group_terms(z):
        theta, re_std, sigma = _unpack(z)
        return [approx(curve, theta, effect_idx, re_std, sigma, x, y)
                for x, y in group_data]

    def _objective(z):
        total = -np.sum([t[0] for t in _group_terms(z)])
        if not np.isfinite(total):
            return 1e12
        return total

    z0 = np.concatenate([theta0, [np.log(re_std0), np.log(sigma0)]])
    bounds = [(None, None)]*num_fixed + [LOG_SCALE_BOUNDS]*2

    result = scipy.optimize.minimize(_objective,
                                     x0=z0,
                                     method="L-BFGS-B",
                                     jac=lambda z: _central_gradient(_objective, z),
                                     bounds=bounds,
                                     options={"maxiter": max_iter,
                                              "ftol": OPT_FTOL,
                                              "gtol": OPT_GTOL})

    z_hat = _refine_fixed(_objective, result.x, num_fixed)
    theta, re_std, sigma = _unpack(z_hat)
    terms = _group_terms(z_hat)
    log_lik = float(np.sum([t[0] for t in terms]))

    converged = bool(result.success)
    if not converged:
        warnings.warn(f"Mixed-effects fit did not converge: {result.message}")

    boundary = bool(re_std < BOUNDARY_FRACTION*sigma)
    if boundary:
        warnings.warn(f"Random-effect standard deviation on '{effect_on}' "
                      "collapsed to zero; group-level variation is "
                      "negligible.")

    # Fixed-effect covariance from the Hessian of the objective. When the
    # full Hessian is not invertible (e.g. at the re_std boundary), use the
    # fixed-effect block alone.
    hess = _numerical_hessian(_objective, z_hat)
    cov = _invert_positive_definite(hess)
    if cov is not None:
        cov_matrix = cov[:num_fixed, :num_fixed]
    else:
        cov = _invert_positive_definite(hess[:num_fixed, :num_fixed])
        if cov is not None:
            cov_matrix = cov
        else:
            cov_matrix = np.full((num_fixed, num_fixed), np.nan)

    with np.errstate(invalid='ignore'):
        std_errors = np.sqrt(np.diagonal(cov_matrix))

    random_effects = tuple(RandomEffectEstimate(group=groups[i],
                                                index=i,
                                                estimate=t[1],
                                                sigma=float(sigma),
                                                cond_std=t[2])
                           for i, t in enumerate(terms))

    return MixedFitResult(curve=curve,
                          effect_on=effect_on,
                          params=theta,
                          std_errors=std_errors,
                          cov_matrix=cov_matrix,
                          re_std=float(re_std),
                          sigma=float(sigma),
                          random_effects=random_effects,
                          groups=groups,
                          log_likelihood=log_lik,
                          aic=2*num_estimated - 2*log_lik,
                          bic=num_estimated*np.log(num_obs) - 2*log_lik,
                          approximation=approx.name,
                          order=approx.order,
                          num_obs=num_obs,
                          converged=converged,
                          boundary=boundary,
                          message=str(result.message),
                          data=fit_df,
                          x_column=x_column,
                          y_column=y_column,
                          group_key=group_key)
