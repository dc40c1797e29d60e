from assaycurve.plot.default_styles import (
    DEFAULT_ERROR_KWARGS,
    merge_kwargs
)

from matplotlib import pyplot as plt
import numpy as np


def random_effects_plot(mixed_result,
                        error_kwargs=None,
                        ax=None):
    """
    Per-group random-effect estimates with the model's shared residual
    standard deviation (`sigma`) as error bars, and a line at zero.

    Parameters
    ----------
    mixed_result : MixedFitResult
        A fitted mixed-effects model.
    error_kwargs : dict, optional
        Overrides of the default error bar style.
    ax : matplotlib.axes.Axes, optional
        Axis to draw on. Created if None.

    Returns
    -------
    matplotlib.axes.Axes
    """

    if ax is None:
        _, ax = plt.subplots(1, figsize=(6, 4))

    re_df = mixed_result.random_effects_frame()
    pos = np.arange(len(re_df))

    ax.errorbar(pos,
                re_df["estimate"],
                yerr=re_df["sigma"],
                zorder=10,
                **merge_kwargs(DEFAULT_ERROR_KWARGS, error_kwargs))
    ax.scatter(pos, re_df["estimate"], s=40, color="black", zorder=20)
    ax.axhline(0, color="gray", linestyle="--", zorder=0)

    ax.set_xticks(pos)
    ax.set_xticklabels([str(g) for g in re_df["group"]])
    ax.set_xlabel(mixed_result.group_key)
    ax.set_ylabel(f"random effect on {mixed_result.effect_on}")

    return ax
