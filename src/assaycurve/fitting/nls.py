"""
Nonlinear least-squares fits of a saturating curve to density vs.
concentration data, pooled or one group at a time.
"""

from assaycurve.errors import (
    FitError,
    FitDivergenceError,
    SingularGradientError,
    InsufficientDataError
)
from assaycurve.models import get_curve
from assaycurve.util import check_columns

from .fitters import run_least_squares
from .fitters.least_squares import BAD_RESIDUAL
from .group_index import GroupIndex
from .predict_with_error import predict_with_error

import numpy as np
import pandas as pd
from tqdm.auto import tqdm

from dataclasses import dataclass
import warnings


@dataclass(frozen=True, eq=False)
class FitResult:
    """
    Outcome of a nonlinear least-squares fit.

    Attributes
    ----------
    curve : CurveModel
        The fitted curve.
    params : np.ndarray
        Parameter estimates in the order of `curve.param_names`.
    std_errors : np.ndarray
        Standard errors of the estimates.
    cov_matrix : np.ndarray
        Covariance matrix of the estimates.
    sigma : float
        Residual standard error, sqrt(SSR/dof).
    num_obs : int
        Number of observations used.
    dof : int
        Residual degrees of freedom.
    data : pandas.DataFrame
        The data subset the curve was fit to.
    x_column, y_column : str
        Columns of `data` holding concentration and density.
    nfev : int
        Number of function evaluations used by the optimizer.
    message : str
        Termination message from the optimizer.
    """

    curve: object
    params: np.ndarray
    std_errors: np.ndarray
    cov_matrix: np.ndarray
    sigma: float
    num_obs: int
    dof: int
    data: pd.DataFrame
    x_column: str = "conc"
    y_column: str = "density"
    nfev: int = 0
    message: str = ""

    @property
    def param_dict(self):
        return self.curve.to_dict(self.params)

    @property
    def std_error_dict(self):
        return {k: float(v) for k, v in zip(self.curve.param_names,
                                            self.std_errors)}

    @property
    def x_range(self):
        """
        (min, max) of the concentrations the curve was fit to.
        """
        x = self.data[self.x_column].to_numpy(dtype=float)
        return float(np.nanmin(x)), float(np.nanmax(x))

    @property
    def rss(self):
        return float(self.sigma**2*max(self.dof, 1))

    def predict(self, x, with_error=False):
        """
        Evaluate the fitted curve at `x`. See `assaycurve.fitting.predict`.
        """
        return predict(self, x, with_error=with_error)

    def __repr__(self) -> str:
        est = ", ".join(f"{k}={v:.4g}" for k, v in self.param_dict.items())
        return (f"<FitResult({self.curve.name}: {est}; "
                f"sigma={self.sigma:.4g}, num_obs={self.num_obs})>")


def _get_xy(df, x_column, y_column):
    """
    Concentration and density arrays with non-finite rows removed.
    """

    check_columns(df, [x_column, y_column])

    x = df[x_column].to_numpy(dtype=float)
    y = df[y_column].to_numpy(dtype=float)

    finite_mask = np.isfinite(x) & np.isfinite(y)

    return x[finite_mask], y[finite_mask]


def fit_curve(curve,
              initial_params,
              df,
              x_column="conc",
              y_column="density",
              max_nfev=None):
    """
    Fit a curve to data by nonlinear least squares.

    Minimizes the sum of squared differences between `df[y_column]` and the
    curve evaluated at `df[x_column]`, starting from `initial_params`. No
    global search is attempted; the starting values must be reasonable.

    Parameters
    ----------
    curve : str or CurveModel
        The curve to fit ("tanh", "logistic" or a CurveModel instance).
    initial_params : array-like, dict or None
        Starting parameter values. If None, use `curve.initial_guess`.
    df : pandas.DataFrame
        Data subset to fit.
    x_column : str, default "conc"
        Column holding concentrations.
    y_column : str, default "density"
        Column holding densities.
    max_nfev : int, optional
        Evaluation budget for the optimizer. None uses scipy's default.

    Returns
    -------
    FitResult

    Raises
    ------
    InsufficientDataError
        If there are fewer observations than parameters.
    FitDivergenceError
        If the optimizer runs out of evaluations or does not report success.
        Also raised when the fit ends at non-finite values or above the
        starting residual.
    SingularGradientError
        If the Jacobian at the solution is rank deficient.
    """

    curve = get_curve(curve)
    x, y = _get_xy(df, x_column, y_column)

    num_obs = len(x)
    num_params = curve.num_params
    if num_obs < num_params:
        err = f"{num_obs} observations cannot constrain the "
        err += f"{num_params} parameters of the {curve.name} curve."
        raise InsufficientDataError(err)

    if initial_params is None:
        guesses = curve.initial_guess(x, y)
    else:
        guesses = curve._check_params(initial_params)

    lower_bounds, upper_bounds = curve.bounds
    params, std_errors, cov_matrix, fit = run_least_squares(
        curve.model_func,
        y,
        np.ones(num_obs),
        guesses,
        lower_bounds,
        upper_bounds,
        args=(x,),
        jac=curve.jacobian_func,
        max_nfev=max_nfev
    )

    # status 0 means the evaluation budget ran out
    if fit.status == 0:
        err = f"{curve.name} fit did not converge within {fit.nfev} "
        err += "function evaluations. Try better starting values."
        raise FitDivergenceError(err)

    if not fit.success:
        raise FitDivergenceError(f"{curve.name} fit failed: {fit.message}")

    if not np.all(np.isfinite(params)) or np.any(fit.fun == BAD_RESIDUAL):
        err = f"{curve.name} fit diverged to non-finite values "
        err += f"(params: {params})"
        raise FitDivergenceError(err)

    start_cost = 0.5*np.sum((y - curve.model_func(guesses, x))**2)
    if np.isfinite(start_cost) and fit.cost > start_cost:
        err = f"{curve.name} fit ended with a larger residual than its "
        err += "starting values."
        raise FitDivergenceError(err)

    rank = np.linalg.matrix_rank(fit.jac)
    if rank < num_params or np.any(~np.isfinite(std_errors)):
        err = f"{curve.name} fit has a singular gradient (Jacobian rank "
        err += f"{rank} for {num_params} parameters). The parameters are "
        err += "not identifiable from these data."
        raise SingularGradientError(err)

    dof = num_obs - num_params
    sigma = np.sqrt(np.sum(fit.fun**2)/max(dof, 1))

    return FitResult(curve=curve,
                     params=params,
                     std_errors=std_errors,
                     cov_matrix=cov_matrix,
                     sigma=float(sigma),
                     num_obs=num_obs,
                     dof=dof,
                     data=df,
                     x_column=x_column,
                     y_column=y_column,
                     nfev=fit.nfev,
                     message=fit.message)


def fit_per_group(curve,
                  initial_params,
                  df,
                  group_key="run",
                  errors="raise",
                  x_column="conc",
                  y_column="density",
                  max_nfev=None,
                  verbose=False):
    """
    Fit a curve separately to each group of the data.

    Every group's fit starts from the same `initial_params` and shares
    nothing with the other groups, giving a non-pooled baseline. All groups
    are attempted even if some fail.

    Parameters
    ----------
    curve : str or CurveModel
        The curve to fit.
    initial_params : array-like, dict or None
        Starting values used for every group. If None, a single guess is
        made from the pooled data and used for every group.
    df : pandas.DataFrame
        Data to fit.
    group_key : str, default "run"
        Column holding the group label.
    errors : {"raise", "warn"}, default "raise"
        What to do once all groups have been attempted and some failed.
        "raise" raises the exception of the first failed group (in group
        index order) with two extra attributes: `results` (dict of the
        successful FitResults) and `failures` (dict of group -> exception).
        "warn" emits a warning per failure and returns the successful fits.
    x_column, y_column : str
        Columns holding concentration and density.
    max_nfev : int, optional
        Evaluation budget for each group's optimizer.
    verbose : bool, default False
        Show a progress bar over groups.

    Returns
    -------
    dict
        Group label -> FitResult, in group index order.
    """

    if errors not in ["raise", "warn"]:
        raise ValueError(f"errors should be 'raise' or 'warn', not '{errors}'")

    curve = get_curve(curve)
    check_columns(df, [group_key, x_column, y_column])

    if initial_params is None:
        initial_params = curve.initial_guess(*_get_xy(df, x_column, y_column))
    initial_params = curve._check_params(initial_params)

    groups = GroupIndex(df[group_key])
    codes = groups.codes(df[group_key])

    results = {}
    failures = {}
    for i, group in enumerate(tqdm(groups,
                                   desc="fitting groups",
                                   disable=not verbose)):

        sub_df = df.loc[codes == i]
        try:
            results[group] = fit_curve(curve,
                                       initial_params.copy(),
                                       sub_df,
                                       x_column=x_column,
                                       y_column=y_column,
                                       max_nfev=max_nfev)
        except FitError as e:
            failures[group] = e

    if len(failures) > 0:

        if errors == "raise":
            first = next(iter(failures))
            err = failures[first]
            err.results = results
            err.failures = failures
            raise err

        for group, e in failures.items():
            warnings.warn(f"Fit of group '{group}' failed ({type(e).__name__}): {e}")

    return results


def predict(fit_result, x, with_error=False):
    """
    Evaluate a fitted curve at arbitrary concentrations.

    No restriction is placed on `x`; see `prediction_frame` for flagging
    values outside the range used for fitting.

    Parameters
    ----------
    fit_result : FitResult
        A fitted curve.
    x : float or array-like
        Concentrations.
    with_error : bool, default False
        Also return first-order standard errors of the predictions.

    Returns
    -------
    y : float or np.ndarray
        Predicted densities, same shape as `x`.
    y_std : float or np.ndarray
        Standard errors, only if `with_error` is True.
    """

    curve = fit_result.curve

    if not with_error:
        return curve.evaluate(fit_result.params, x)

    y, y_std = predict_with_error(curve.model_func,
                                  fit_result.params,
                                  fit_result.cov_matrix,
                                  args=(np.atleast_1d(np.asarray(x, dtype=float)),),
                                  jac=curve.jacobian_func)
    if np.ndim(x) == 0:
        return float(y[0]), float(y_std[0])

    return y.reshape(np.shape(x)), y_std.reshape(np.shape(x))


def summary_frame(fits):
    """
    Tabulate a set of fits, one row per fit.

    Parameters
    ----------
    fits : dict or FitResult
        Group label -> FitResult (as returned by `fit_per_group`), or a
        single FitResult.

    Returns
    -------
    pandas.DataFrame
        Indexed by group label, with columns `{param}|est`, `{param}|std`,
        `sigma` and `num_obs`.
    """

    if isinstance(fits, FitResult):
        fits = {fits.curve.name: fits}

    rows = []
    for group, fit in fits.items():
        row = {"group": group}
        for i, p_name in enumerate(fit.curve.param_names):
            row[f"{p_name}|est"] = fit.params[i]
            row[f"{p_name}|std"] = fit.std_errors[i]
        row["sigma"] = fit.sigma
        row["num_obs"] = fit.num_obs
        rows.append(row)

    if len(rows) == 0:
        return pd.DataFrame()

    return pd.DataFrame(rows).set_index("group")
