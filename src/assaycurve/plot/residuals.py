from assaycurve.plot.default_styles import (
    X_LABEL,
    merge_kwargs
)

from matplotlib import pyplot as plt


def residuals_plot(fit_result,
                   df=None,
                   scatter_kwargs=None,
                   ax=None):
    """
    Residuals (observed - predicted) vs. concentration.

    Parameters
    ----------
    fit_result : FitResult
        A fitted curve.
    df : pandas.DataFrame, optional
        Data to compute residuals on. Defaults to the data used for the fit.
    scatter_kwargs : dict, optional
        Overrides of the marker style.
    ax : matplotlib.axes.Axes, optional
        Axis to draw on. Created if None.

    Returns
    -------
    matplotlib.axes.Axes
    """

    if ax is None:
        _, ax = plt.subplots(1, figsize=(6, 4))

    if df is None:
        df = fit_result.data

    x = df[fit_result.x_column].to_numpy(dtype=float)
    resid = df[fit_result.y_column].to_numpy(dtype=float) - fit_result.predict(x)

    ax.scatter(x,
               resid,
               **merge_kwargs({"s":20, "color":"royalblue"}, scatter_kwargs))
    ax.axhline(0, color="gray", linestyle="--", zorder=0)

    ax.set_xlabel(X_LABEL)
    ax.set_ylabel("residual")

    return ax
