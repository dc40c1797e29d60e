"""
Comparing a fitted curve against held-out data.
"""

from assaycurve.util import xfill

from .nls import predict, _get_xy

import numpy as np
import pandas as pd


def _is_extrapolated(fit_result, x):

    x_min, x_max = fit_result.x_range

    return (x < x_min) | (x > x_max)


def prediction_frame(fit_result, x=None, num_points=100):
    """
    Predictions of a fitted curve with standard errors and an extrapolation
    flag.

    Parameters
    ----------
    fit_result : FitResult
        A fitted curve.
    x : array-like, optional
        Concentrations at which to predict. If None, fill `num_points`
        values across the concentration range used for fitting.
    num_points : int, default 100
        Number of filled points when `x` is None.

    Returns
    -------
    pandas.DataFrame
        Columns:
        - 'x': concentration
        - 'y': predicted density
        - 'y_std': standard error of the prediction (nan if the covariance
          matrix is not finite)
        - 'extrapolated': True where x lies outside the concentration range
          the curve was fit to. These values are predicted, not removed.
    """

    if x is None:
        data_x = fit_result.data[fit_result.x_column].to_numpy(dtype=float)
        x = xfill(data_x, num_points=num_points)

    x = np.atleast_1d(np.asarray(x, dtype=float))
    y, y_std = predict(fit_result, x, with_error=True)

    return pd.DataFrame({"x": x,
                         "y": y,
                         "y_std": y_std,
                         "extrapolated": _is_extrapolated(fit_result, x)})


def evaluate_fit(fit_result, df, x_column=None, y_column=None):
    """
    Goodness of fit of a curve on a (held-out) data subset.

    Parameters
    ----------
    fit_result : FitResult
        A fitted curve.
    df : pandas.DataFrame
        Data to score, usually the test subset from `split_duplicates`.
    x_column, y_column : str, optional
        Columns holding concentration and density. Default to those used in
        the fit.

    Returns
    -------
    dict
        - 'num_obs': number of finite observations scored
        - 'rmse': root mean squared prediction error
        - 'mae': mean absolute prediction error
        - 'r2': 1 - SSR/SST (nan if the densities do not vary)
        - 'num_extrapolated': observations outside the fitted x-range
    """

    if x_column is None:
        x_column = fit_result.x_column
    if y_column is None:
        y_column = fit_result.y_column

    x, y = _get_xy(df, x_column, y_column)

    out = {"num_obs": len(x),
           "rmse": np.nan,
           "mae": np.nan,
           "r2": np.nan,
           "num_extrapolated": 0}
    if len(x) == 0:
        return out

    resid = y - predict(fit_result, x)

    ss_res = np.sum(resid**2)
    ss_tot = np.sum((y - np.mean(y))**2)

    out["rmse"] = float(np.sqrt(np.mean(resid**2)))
    out["mae"] = float(np.mean(np.abs(resid)))
    if ss_tot > 0:
        out["r2"] = float(1 - ss_res/ss_tot)
    out["num_extrapolated"] = int(np.sum(_is_extrapolated(fit_result, x)))

    return out
