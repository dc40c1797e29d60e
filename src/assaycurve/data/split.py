import numpy as np

def split_duplicates(df):
    """
    Split duplicate measurements into training and test subsets.

    Rows are assigned by position, counting from 1: odd positions (1, 3, 5,
    ...) go to `train` and even positions (2, 4, 6, ...) go to `test`. When
    the row count is odd the final row has no duplicate partner and lands in
    `train`, so `len(train) - len(test)` is 0 or 1.

    Parameters
    ----------
    df : pandas.DataFrame
        Observations ordered so that each pair of duplicate measurements
        occupies consecutive rows.

    Returns
    -------
    train : pandas.DataFrame
    test : pandas.DataFrame
        Copies of the selected rows. The original index is kept, so
        `pd.concat([train, test]).sort_index()` reconstructs `df`.
    """

    # 0-indexed even positions are the 1-indexed odd positions
    position = np.arange(len(df))
    is_train = position % 2 == 0

    train = df.iloc[is_train].copy()
    test = df.iloc[~is_train].copy()

    return train, test
