from assaycurve.plot.default_styles import (
    X_LABEL,
    Y_LABEL
)

from matplotlib import pyplot as plt
import numpy as np


def group_fits_plot(fits,
                    group_key="run",
                    mixed_result=None,
                    num_points=100,
                    ax=None):
    """
    Overlay per-group data and fitted curves on one axis, one color per
    group.

    Parameters
    ----------
    fits : dict
        Group label -> FitResult, as returned by `fit_per_group`.
    group_key : str, default "run"
        Column of each fit's data holding the group label. Only used for the
        legend title.
    mixed_result : MixedFitResult, optional
        If given, each group's mixed-model curve is drawn dashed in the same
        color and the population curve in black.
    num_points : int, default 100
        Number of points per curve.
    ax : matplotlib.axes.Axes, optional
        Axis to draw on. Created if None.

    Returns
    -------
    matplotlib.axes.Axes
    """

    if ax is None:
        _, ax = plt.subplots(1, figsize=(7, 6))

    cmap = plt.get_cmap("tab20")

    x_max = 0.0
    for i, (group, fit) in enumerate(fits.items()):

        color = cmap(i % cmap.N)
        x = fit.data[fit.x_column].to_numpy(dtype=float)
        x_max = max(x_max, np.nanmax(x))
        x_pred = np.linspace(np.nanmin(x), np.nanmax(x), num_points)

        ax.scatter(x, fit.data[fit.y_column], s=15, color=color)
        ax.plot(x_pred, fit.predict(x_pred), "-", color=color, label=str(group))

        if mixed_result is not None and group in mixed_result.groups:
            ax.plot(x_pred,
                    mixed_result.predict(x_pred, group=group),
                    "--",
                    color=color)

    if mixed_result is not None:
        x_pred = np.linspace(0, x_max, num_points)
        ax.plot(x_pred,
                mixed_result.predict(x_pred),
                "-",
                lw=3,
                color="black",
                label="population")

    ax.set_xlabel(X_LABEL)
    ax.set_ylabel(Y_LABEL)
    ax.legend(title=group_key, fontsize=8, ncol=2)

    return ax
