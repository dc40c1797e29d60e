import numpy as np
from scipy.optimize import least_squares

# Residual returned for every point when the model produces nan/inf
BAD_RESIDUAL = 1e12

def _weighted_residuals(params, some_model, obs, obs_std, args):
    """
    Residuals of a curve scaled by the measurement standard deviations.

    Passed to `scipy.optimize.least_squares` as the residual function.

    Parameters
    ----------
    params : np.ndarray
        A 1D array of parameters to be optimized, passed to `some_model`.
    some_model : callable
        The model function to be fitted. It must have the signature
        `some_model(params, *args)`.
    obs : np.ndarray
        An array of the observed data points.
    obs_std : np.ndarray
        An array of the standard deviations for each observed data point.
    args : tuple
        Additional fixed arguments (the concentrations) for `some_model`.

    Returns
    -------
    np.ndarray
        A 1D array of flattened, weighted residuals. If any residual is nan
        or infinite, every residual is set to BAD_RESIDUAL.
    """

    calc = some_model(params, *args)
    residuals = ((obs - calc) / obs_std).flatten()

    # Non-finite predictions push the optimizer out of this region
    if np.any(~np.isfinite(residuals)):
        return np.full(len(residuals), BAD_RESIDUAL)

    return residuals

def _weighted_jacobian(params, some_jac, obs, obs_std, args):
    """
    Jacobian of `_weighted_residuals` given the model Jacobian `some_jac`.
    """

    J = -some_jac(params, *args) / obs_std[:, np.newaxis]

    return np.where(np.isfinite(J), J, 0.0)


def _covariance(J, residuals, num_obs):
    """
    Covariance and standard errors of least-squares estimates from the
    residual Jacobian at the solution.

    cov = s^2 (J^T J)^-1 with s^2 = SSR/(num_obs - num_params); the degrees
    of freedom are floored at 1 so an exactly determined fit still gets a
    finite scale. If J^T J is singular every entry is NaN.
    """

    num_params = J.shape[1]
    dof = max(num_obs - num_params, 1)
    s2 = np.sum(residuals**2)/dof

    try:
        cov_matrix = s2*np.linalg.inv(J.T @ J)
    except np.linalg.LinAlgError:
        cov_matrix = np.full((num_params, num_params), np.nan)

    with np.errstate(invalid='ignore'):
        std_errors = np.sqrt(np.diagonal(cov_matrix))

    return cov_matrix, std_errors


def run_least_squares(some_model,
                      obs,
                      obs_std,
                      guesses,
                      lower_bounds=None,
                      upper_bounds=None,
                      args=None,
                      jac=None,
                      max_nfev=None):
    """
    Perform a nonlinear least-squares fit for a generic model.

    This function wraps `scipy.optimize.least_squares` (trust region
    reflective) and calculates parameter standard errors and the covariance
    matrix from the Jacobian at the solution.

    Parameters
    ----------
    some_model : callable
        The model function to fit, with a signature `some_model(params, *args)`.
    obs : np.ndarray
        The array of observed data.
    obs_std : np.ndarray
        The array of standard deviations of the observations.
    guesses : np.ndarray
        A 1D array of initial guesses for the model parameters.
    lower_bounds : np.ndarray, optional
        A 1D array of lower bounds for each parameter. Defaults to -inf.
    upper_bounds : np.ndarray, optional
        A 1D array of upper bounds for each parameter. Defaults to +inf.
    args : tuple, optional
        A tuple of additional arguments to pass to `some_model`.
    jac : callable, optional
        Analytic Jacobian of the model, `jac(params, *args)`, returning an
        array of shape (len(obs), len(params)). If None, the Jacobian is
        estimated by finite differences.
    max_nfev : int, optional
        Maximum number of function evaluations. None uses scipy's default.

    Returns
    -------
    params : np.ndarray
        The array of best-fit parameter values.
    std_errors : np.ndarray
        The array of standard errors for each fitted parameter.
    cov_matrix : np.ndarray
        The full covariance matrix of the fitted parameters.
    fit : scipy.optimize.OptimizeResult
        result from least_squares call
    """
    if args is None:
        args = ()

    obs = np.asarray(obs, dtype=float)
    obs_std = np.asarray(obs_std, dtype=float)
    guesses = np.asarray(guesses, dtype=float)

    # Set default unbounded limits if none are provided
    if lower_bounds is None:
        lower_bounds = np.full_like(guesses, -np.inf)
    if upper_bounds is None:
        upper_bounds = np.full_like(guesses, np.inf)

    if jac is None:
        jac_arg = '2-point'
    else:
        def jac_arg(params, *_):
            return _weighted_jacobian(params, jac, obs, obs_std, args)

    # Run the regression
    fit = least_squares(
        _weighted_residuals,
        x0=guesses,
        jac=jac_arg,
        bounds=(lower_bounds, upper_bounds),
        args=(some_model, obs, obs_std, args),
        method='trf',
        max_nfev=max_nfev
    )

    params = fit.x
    cov_matrix, std_errors = _covariance(fit.jac,
                                         fit.fun,
                                         np.sum(np.isfinite(obs)))

    return params, std_errors, cov_matrix, fit
