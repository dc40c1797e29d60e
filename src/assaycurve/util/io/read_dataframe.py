import pandas as pd

import warnings

def read_dataframe(source):
    """
    Read a table from a file path or DataFrame.

    Handles .csv, .tsv and .xlsx/.xls files. A spurious 'Unnamed: 0' column
    (written by `df.to_csv()` without `index=False`) holding 0, 1, 2, ... is
    dropped.

    Parameters
    ----------
    source : pandas.DataFrame or str
        A pandas DataFrame (copied) or the file path to read.

    Returns
    -------
    pandas.DataFrame
    """

    if isinstance(source, str):
        ext = source.split(".")[-1].strip().lower()
        try:
            if ext in ["xlsx", "xls"]:
                df = pd.read_excel(source)
            elif ext == "csv":
                df = pd.read_csv(source)
            elif ext == "tsv":
                df = pd.read_csv(source, sep="\t")
            else:
                df = pd.read_csv(source, sep=None, engine="python")
        except FileNotFoundError as e:
            raise ValueError(f"File not found at path: {source}") from e

    elif isinstance(source, pd.DataFrame):
        df = source.copy()
    else:
        raise TypeError("`source` must be a file path (str) or pandas DataFrame.")

    unnamed_col = "Unnamed: 0"
    if unnamed_col in df.columns:
        col_data = df[unnamed_col]
        is_spurious = pd.api.types.is_integer_dtype(col_data) and \
            (col_data.to_numpy() == pd.RangeIndex(len(df)).to_numpy()).all()
        if is_spurious:
            df = df.drop(columns=unnamed_col)
        else:
            warnings.warn(f"Keeping non-index column '{unnamed_col}'")

    return df
