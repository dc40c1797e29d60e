import numpy as np
import pytest
from matplotlib import pyplot as plt

from assaycurve.data import split_duplicates
from assaycurve.fitting import fit_curve, fit_per_group, fit_mixed
from assaycurve.plot import (
    curve_fit_plot,
    group_fits_plot,
    random_effects_plot,
    residuals_plot
)
from assaycurve.plot.default_styles import merge_kwargs

@pytest.fixture
def mixed_result(assay_df):
    return fit_mixed("logistic", [2.3, 3.0, 1.5], assay_df)

def test_merge_kwargs():

    defaults = {"s": 30, "color": "red"}
    assert merge_kwargs(defaults, None) == defaults
    assert merge_kwargs(defaults, {"color": "blue"}) == {"s": 30,
                                                          "color": "blue"}
    # defaults are not modified
    assert defaults["color"] == "red"

def test_curve_fit_plot(recovery_df):

    train, test = split_duplicates(recovery_df)
    fit = fit_curve("logistic", None, train)

    plt.close("all")
    ax = curve_fit_plot(fit, test_df=test)

    # train and test scatter, error band
    assert len(ax.collections) >= 3
    assert len(ax.lines) >= 1
    assert ax.get_title() == "logistic"
    labels = [t.get_text() for t in ax.get_legend().get_texts()]
    assert "train" in labels
    assert "test" in labels

def test_curve_fit_plot_extrapolation(recovery_df):

    fit = fit_curve("logistic", None, recovery_df)

    plt.close("all")
    fig, ax = plt.subplots()
    out = curve_fit_plot(fit,
                         x_pred=np.linspace(0, 16, 50),
                         fit_line_kwargs={"color": "green"},
                         ax=ax)

    assert out is ax
    assert ax.lines[0].get_color() == "green"
    assert np.isclose(np.max(ax.lines[0].get_xdata()), 16)

    # shaded region beyond the fitted range
    assert len(ax.patches) >= 1

def test_residuals_plot(recovery_df):

    fit = fit_curve("logistic", None, recovery_df)

    plt.close("all")
    ax = residuals_plot(fit)

    offsets = ax.collections[0].get_offsets()
    assert len(offsets) == len(recovery_df)
    assert np.all(np.abs(offsets[:, 1]) < 0.1)
    assert ax.get_ylabel() == "residual"

def test_group_fits_plot(assay_df, mixed_result):

    fits = fit_per_group("logistic", None, assay_df)

    plt.close("all")
    ax = group_fits_plot(fits)
    assert len(ax.collections) == 6
    assert len(ax.lines) == 6

    plt.close("all")
    ax = group_fits_plot(fits, mixed_result=mixed_result)

    # group curves, mixed group curves and the population curve
    assert len(ax.lines) == 13
    labels = [t.get_text() for t in ax.get_legend().get_texts()]
    assert "population" in labels

def test_random_effects_plot(mixed_result):

    plt.close("all")
    ax = random_effects_plot(mixed_result)
    ax.figure.canvas.draw()

    ticks = [t.get_text() for t in ax.get_xticklabels()]
    assert ticks == ["1", "2", "3", "4", "5", "6"]
    assert ax.get_xlabel() == "run"
    assert ax.get_ylabel() == "random effect on Asym"
