from assaycurve.plot.default_styles import (
    DEFAULT_TRAIN_SCATTER_KWARGS,
    DEFAULT_TEST_SCATTER_KWARGS,
    DEFAULT_FIT_LINE_KWARGS,
    X_LABEL,
    Y_LABEL,
    merge_kwargs
)
from assaycurve.fitting import prediction_frame

from matplotlib import pyplot as plt
import numpy as np


def curve_fit_plot(fit_result,
                   test_df=None,
                   x_pred=None,
                   train_kwargs=None,
                   test_kwargs=None,
                   fit_line_kwargs=None,
                   ax=None):
    """
    Plot the data a curve was fit to, the fitted curve with a one standard
    error band, and optionally held-out test data. Predictions outside the
    fitted concentration range are shaded.

    Parameters
    ----------
    fit_result : FitResult
        A fitted curve.
    test_df : pandas.DataFrame, optional
        Held-out data plotted with a separate marker.
    x_pred : array-like, optional
        Concentrations at which to draw the curve. Defaults to the range of
        the training and test data.
    train_kwargs, test_kwargs, fit_line_kwargs : dict, optional
        Overrides of the default marker/line styles.
    ax : matplotlib.axes.Axes, optional
        Axis to draw on. Created if None.

    Returns
    -------
    matplotlib.axes.Axes
    """

    if ax is None:
        _, ax = plt.subplots(1, figsize=(6, 6))

    x_col = fit_result.x_column
    y_col = fit_result.y_column

    if x_pred is None:
        x_all = [fit_result.data[x_col].to_numpy(dtype=float)]
        if test_df is not None:
            x_all.append(test_df[x_col].to_numpy(dtype=float))
        x_all = np.concatenate(x_all)
        x_pred = np.linspace(np.nanmin(x_all), np.nanmax(x_all), 200)

    pred_df = prediction_frame(fit_result, x_pred)

    ax.scatter(fit_result.data[x_col],
               fit_result.data[y_col],
               zorder=20,
               **merge_kwargs(DEFAULT_TRAIN_SCATTER_KWARGS, train_kwargs))

    if test_df is not None:
        ax.scatter(test_df[x_col],
                   test_df[y_col],
                   zorder=20,
                   **merge_kwargs(DEFAULT_TEST_SCATTER_KWARGS, test_kwargs))

    ax.plot(pred_df["x"],
            pred_df["y"],
            "-",
            zorder=30,
            **merge_kwargs(DEFAULT_FIT_LINE_KWARGS, fit_line_kwargs))

    ax.fill_between(pred_df["x"],
                    pred_df["y"] - pred_df["y_std"],
                    pred_df["y"] + pred_df["y_std"],
                    color="lightgray",
                    zorder=0)

    # Shade extrapolated regions
    x_min, x_max = fit_result.x_range
    if np.min(pred_df["x"]) < x_min:
        ax.axvspan(np.min(pred_df["x"]), x_min, color="gray", alpha=0.1)
    if np.max(pred_df["x"]) > x_max:
        ax.axvspan(x_max, np.max(pred_df["x"]), color="gray", alpha=0.1)

    ax.set_xlabel(X_LABEL)
    ax.set_ylabel(Y_LABEL)
    ax.set_title(fit_result.curve.name)
    ax.legend()

    return ax
