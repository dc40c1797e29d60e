import numpy as np
import pandas as pd

import warnings

from assaycurve.util import (
    read_dataframe,
    check_columns
)

def load_assay_data(source,
                    run_column="Run",
                    conc_column="conc",
                    density_column="density"):
    """
    Load an assay table of optical density vs. protein concentration grouped
    by experimental run.

    Parameters
    ----------
    source : pandas.DataFrame or str
        DataFrame or path to a csv/tsv/xlsx file.
    run_column : str, default "Run"
        Column holding the run (group) label.
    conc_column : str, default "conc"
        Column holding concentrations.
    density_column : str, default "density"
        Column holding measured optical densities.

    Returns
    -------
    pandas.DataFrame
        Table with columns `run` (categorical), `conc` and `density` (float)
        plus any extra columns in `source`, in the original row order. Rows
        with a missing or non-numeric conc/density are dropped together with
        their duplicate partner, with a warning.

    Raises
    ------
    ValueError
        If a required column is missing or a concentration is negative.
    """

    df = read_dataframe(source)
    check_columns(df, [run_column, conc_column, density_column])

    df = df.rename(columns={run_column: "run",
                            conc_column: "conc",
                            density_column: "density"})

    df["conc"] = pd.to_numeric(df["conc"], errors="coerce").astype(float)
    df["density"] = pd.to_numeric(df["density"], errors="coerce").astype(float)

    # Rows 2k and 2k+1 are a duplicate pair (see split_duplicates). A bad
    # value removes both members so the pairing of later rows is kept.
    finite_mask = (np.isfinite(df["conc"]) & np.isfinite(df["density"])).to_numpy()
    if not np.all(finite_mask):
        pair = np.arange(len(df))//2
        keep_mask = ~np.isin(pair, pair[~finite_mask])
        warnings.warn(f"Dropping {np.sum(~keep_mask)} rows: "
                      f"{np.sum(~finite_mask)} missing or non-numeric "
                      "conc/density values and their duplicate partners")
        df = df.loc[keep_mask].copy()

    if np.any(df["conc"] < 0):
        raise ValueError("Concentrations must be non-negative.")

    # Keep an existing categorical's category order
    if not isinstance(df["run"].dtype, pd.CategoricalDtype):
        df["run"] = pd.Categorical(df["run"])

    return df


def check_duplicates(df, group_key="run", x_column="conc"):
    """
    Check that measurements come in duplicate pairs.

    Grouping by (group_key, x_column) should give groups of exactly two
    rows, with at most one unpaired row in the whole table.

    Parameters
    ----------
    df : pandas.DataFrame
        Observations.
    group_key : str, default "run"
        Column holding the group label.
    x_column : str, default "conc"
        Column holding concentrations.

    Returns
    -------
    bool
        True if the layout holds. If not, a warning lists the offending
        (group, concentration) pairs.
    """

    check_columns(df, [group_key, x_column])

    sizes = df.groupby([group_key, x_column], observed=True).size()

    unpaired = sizes[sizes == 1]
    oversized = sizes[sizes > 2]

    bad = list(oversized.index)
    if len(unpaired) > 1:
        bad.extend(unpaired.index)

    if len(bad) > 0:
        err = "Measurements are not in duplicate pairs. Offending groups:\n"
        for b in bad:
            err += f"    {b}\n"
        warnings.warn(err)
        return False

    return True
