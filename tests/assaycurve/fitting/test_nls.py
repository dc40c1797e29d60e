import numpy as np
import pandas as pd
import pytest

from assaycurve.errors import (
    FitError,
    FitDivergenceError,
    SingularGradientError,
    InsufficientDataError
)
from assaycurve.fitting import (
    FitResult,
    fit_curve,
    fit_per_group,
    predict,
    summary_frame
)
from assaycurve.models import LogisticCurve
from assaycurve.simulate import simulate_assay

def _with_small_groups(assay_df):
    """
    assay_df with string labels plus two groups too small to fit ("0" and
    "7").
    """
    df = assay_df.copy()
    df["run"] = df["run"].astype(str)
    small = pd.DataFrame({"run": ["0", "0", "7", "7"],
                          "conc": [1.0, 2.0, 1.0, 2.0],
                          "density": [0.5, 0.9, 0.5, 0.9]})
    return pd.concat([df, small], ignore_index=True)

def test_fit_curve_recovers_parameters(recovery_df, logistic_true):

    fit = fit_curve("logistic", [2.5, 1.0, 1.0], recovery_df)

    assert isinstance(fit, FitResult)
    assert isinstance(fit.curve, LogisticCurve)
    assert np.allclose(fit.params, logistic_true, rtol=0.05)
    assert np.all(fit.std_errors > 0)
    assert fit.num_obs == 10
    assert fit.dof == 7
    assert fit.sigma < 0.05
    assert fit.x_range == (0.0, 8.0)
    assert np.isclose(fit.rss, fit.sigma**2*fit.dof)

def test_fit_curve_default_guess(recovery_df, logistic_true):

    fit = fit_curve("logistic", None, recovery_df)
    assert np.allclose(fit.params, logistic_true, rtol=0.05)

def test_fit_curve_dict_params(recovery_df, logistic_true):

    fit = fit_curve("logistic", {"Asym": 2.5, "xmid": 1.0, "scal": 1.0},
                    recovery_df)
    assert np.allclose(fit.params, logistic_true, rtol=0.05)
    assert set(fit.param_dict) == {"Asym", "xmid", "scal"}
    assert set(fit.std_error_dict) == {"Asym", "xmid", "scal"}

def test_fit_curve_ignores_row_order(recovery_df):

    fit_a = fit_curve("logistic", [2.5, 1.0, 1.0], recovery_df)
    fit_b = fit_curve("logistic", [2.5, 1.0, 1.0], recovery_df.iloc[::-1])

    assert np.allclose(fit_a.params, fit_b.params, rtol=1e-6)

def test_fit_curve_skips_nan_rows(recovery_df):

    df = recovery_df.copy()
    df.loc[df.index[0], "density"] = np.nan

    fit = fit_curve("logistic", [2.5, 1.0, 1.0], df)
    assert fit.num_obs == 9

def test_tanh_and_logistic_agree_on_asymptote():

    df = simulate_assay("tanh",
                        [2.0, 0.3, 0.1],
                        [0.05, 0.2, 0.4, 0.8, 1.6, 3.1, 6.2, 12.5],
                        noise_std=0.01,
                        seed=3)

    tanh_fit = fit_curve("tanh", None, df)
    logistic_fit = fit_curve("logistic", None, df)

    tanh_asym = tanh_fit.curve.asymptote(tanh_fit.params)
    logistic_asym = logistic_fit.curve.asymptote(logistic_fit.params)

    assert np.isclose(tanh_asym, 2.0, rtol=0.05)
    assert np.isclose(tanh_asym, logistic_asym, rtol=0.15)

def test_fit_curve_insufficient_data(recovery_df):

    with pytest.raises(InsufficientDataError):
        fit_curve("logistic", [2.5, 1.0, 1.0], recovery_df.iloc[:2])

def test_fit_curve_divergence(recovery_df):

    with pytest.raises(FitDivergenceError):
        fit_curve("logistic", [1.0, 10.0, 5.0], recovery_df, max_nfev=1)

def test_fit_curve_singular_gradient():

    # at x = 0 the tanh curve does not depend on b2
    df = pd.DataFrame({"conc": np.zeros(4),
                       "density": np.full(4, 0.5)})

    with pytest.raises(SingularGradientError):
        fit_curve("tanh", [1.0, 1.0, 0.5], df)

def test_fit_errors_are_fit_errors():

    for err in [FitDivergenceError, SingularGradientError,
                InsufficientDataError]:
        assert issubclass(err, FitError)
        assert issubclass(err, RuntimeError)

def test_fit_curve_bad_inputs(recovery_df):

    with pytest.raises(ValueError):
        fit_curve("not_a_curve", None, recovery_df)

    with pytest.raises(ValueError):
        fit_curve("logistic", [1.0, 2.0], recovery_df)

    with pytest.raises(ValueError):
        fit_curve("logistic", None, recovery_df, x_column="not_a_column")

def test_fit_per_group(assay_df):

    fits = fit_per_group("logistic", None, assay_df)

    assert list(fits) == ["1", "2", "3", "4", "5", "6"]
    for group, fit in fits.items():
        assert fit.num_obs == 16
        assert set(fit.data["run"]) == {group}

    # Asymptotes follow the simulated offsets
    asym = np.array([fits[g].params[0] for g in fits])
    offsets = np.array([-0.3, -0.2, -0.1, 0.1, 0.2, 0.3])
    assert np.allclose(asym, 2.3 + offsets, atol=0.15)

def test_fit_per_group_ignores_row_order(assay_df):

    start = [2.3, 3.0, 1.5]
    fits_a = fit_per_group("logistic", start, assay_df)
    fits_b = fit_per_group("logistic", start,
                           assay_df.sample(frac=1, random_state=11))

    assert list(fits_a) == list(fits_b)
    for group in fits_a:
        assert np.allclose(fits_a[group].params, fits_b[group].params,
                           rtol=1e-5)

def test_fit_per_group_raise(assay_df):

    df = _with_small_groups(assay_df)

    with pytest.raises(InsufficientDataError) as excinfo:
        fit_per_group("logistic", [2.3, 3.0, 1.5], df, errors="raise")

    err = excinfo.value
    assert "2 observations" in str(err)
    assert list(err.failures) == ["0", "7"]
    assert list(err.results) == ["1", "2", "3", "4", "5", "6"]

def test_fit_per_group_warn(assay_df):

    df = _with_small_groups(assay_df)

    with pytest.warns(UserWarning, match="Fit of group '0' failed"):
        fits = fit_per_group("logistic", [2.3, 3.0, 1.5], df, errors="warn")

    assert list(fits) == ["1", "2", "3", "4", "5", "6"]

def test_fit_per_group_bad_errors_arg(assay_df):

    with pytest.raises(ValueError, match="errors"):
        fit_per_group("logistic", None, assay_df, errors="ignore")

def test_predict(recovery_df):

    fit = fit_curve("logistic", [2.5, 1.0, 1.0], recovery_df)

    y = predict(fit, 2.0)
    assert isinstance(y, float)
    assert np.isclose(y, fit.curve.evaluate(fit.params, 2.0))

    x = np.array([[0.0, 1.0], [2.0, 100.0]])
    y, y_std = predict(fit, x, with_error=True)
    assert y.shape == (2, 2)
    assert y_std.shape == (2, 2)
    assert np.all(y_std > 0)

    # far past the data the curve sits at its asymptote
    assert np.isclose(y[1, 1], fit.params[0])

    y, y_std = fit.predict(1.0, with_error=True)
    assert isinstance(y, float)
    assert isinstance(y_std, float)

def test_summary_frame(assay_df):

    fits = fit_per_group("logistic", None, assay_df)
    out = summary_frame(fits)

    assert list(out.index) == ["1", "2", "3", "4", "5", "6"]
    for p in ["Asym", "xmid", "scal"]:
        assert f"{p}|est" in out.columns
        assert f"{p}|std" in out.columns
    assert np.allclose(out["num_obs"], 16)

    single = summary_frame(fits["1"])
    assert list(single.index) == ["logistic"]

    assert summary_frame({}).empty

def test_fit_result_repr(recovery_df):
    fit = fit_curve("logistic", None, recovery_df)
    assert "logistic" in repr(fit)
