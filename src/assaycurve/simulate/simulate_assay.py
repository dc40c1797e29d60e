import numpy as np
import pandas as pd

from assaycurve.models import get_curve

def simulate_assay(curve,
                   params,
                   conc,
                   groups=("1",),
                   re_values=None,
                   effect_on=None,
                   noise_std=0.01,
                   replicates=2,
                   seed=None):
    """
    Simulate an assay table in the same layout as a loaded dataset.

    Every group measures every concentration `replicates` times, in
    consecutive rows, so `split_duplicates` pairs them as it would real
    duplicates.

    Parameters
    ----------
    curve : str or CurveModel
        Curve used to generate densities.
    params : array-like or dict
        True curve parameters shared by all groups.
    conc : array-like
        Concentrations measured in each group.
    groups : iterable, default ("1",)
        Group labels. The `run` column is categorical in this order.
    re_values : array-like or dict, optional
        Per-group offsets added to the parameter named by `effect_on`. A
        sequence is matched to `groups` by position.
    effect_on : str, optional
        Parameter shifted by `re_values`. Required if `re_values` is given.
    noise_std : float, default 0.01
        Standard deviation of Gaussian noise added to each density.
    replicates : int, default 2
        Number of measurements per (group, concentration).
    seed : int or numpy.random.Generator, optional
        Seed for the noise.

    Returns
    -------
    pandas.DataFrame
        Columns `run`, `conc`, `density`.
    """

    curve = get_curve(curve)
    params = curve._check_params(params)
    conc = np.asarray(conc, dtype=float)
    groups = list(groups)

    if re_values is None:
        re_values = np.zeros(len(groups))
        effect_idx = None
    else:
        if effect_on is None:
            raise ValueError("effect_on must be specified with re_values")
        effect_idx = curve.param_index(effect_on)
        if isinstance(re_values, dict):
            re_values = [re_values[g] for g in groups]
        re_values = np.asarray(re_values, dtype=float)
        if len(re_values) != len(groups):
            raise ValueError("re_values must have one entry per group")

    rng = np.random.default_rng(seed)

    x = np.repeat(conc, replicates)

    out = []
    for g, offset in zip(groups, re_values):

        group_params = params.copy()
        if effect_idx is not None:
            group_params[effect_idx] += offset

        y = curve.evaluate(group_params, x)
        if noise_std > 0:
            y = y + rng.normal(0, noise_std, size=len(y))

        out.append(pd.DataFrame({"run": g, "conc": x, "density": y}))

    df = pd.concat(out, ignore_index=True)
    df["run"] = pd.Categorical(df["run"], categories=groups)

    return df
