import numpy as np
import pandas as pd
import pytest

from assaycurve.data import load_assay_data, check_duplicates, split_duplicates

def _raw_df():
    return pd.DataFrame({"Run": [1, 1, 2, 2],
                         "conc": [0.05, 0.05, 0.05, 0.05],
                         "density": [0.017, 0.018, 0.045, 0.050]})

def test_load_assay_data_renames_and_casts():
    df = load_assay_data(_raw_df())

    assert list(df.columns) == ["run", "conc", "density"]
    assert isinstance(df["run"].dtype, pd.CategoricalDtype)
    assert df["conc"].dtype == float
    assert df["density"].dtype == float

def test_load_assay_data_keeps_category_order():
    raw = _raw_df()
    raw["Run"] = pd.Categorical(raw["Run"], categories=[2, 1])
    df = load_assay_data(raw)
    assert list(df["run"].cat.categories) == [2, 1]

def test_load_assay_data_custom_columns():
    raw = _raw_df().rename(columns={"Run": "plate", "density": "od"})
    df = load_assay_data(raw, run_column="plate", density_column="od")
    assert list(df.columns) == ["run", "conc", "density"]

def test_load_assay_data_from_file(tmp_path):
    path = tmp_path / "assay.csv"
    _raw_df().to_csv(path, index=False)
    df = load_assay_data(str(path))
    assert len(df) == 4

def test_load_assay_data_missing_column():
    with pytest.raises(ValueError, match="density"):
        load_assay_data(_raw_df().drop(columns="density"))

def test_load_assay_data_drops_non_numeric():
    raw = _raw_df()
    raw["density"] = raw["density"].astype(object)
    raw.loc[3, "density"] = "n/a"
    with pytest.warns(UserWarning, match="Dropping 2 rows"):
        df = load_assay_data(raw)

    # the bad row and its duplicate partner
    assert list(df.index) == [0, 1]

def test_load_assay_data_keeps_duplicate_pairs_aligned():
    raw = pd.DataFrame({"Run": ["A"]*6,
                        "conc": [0.0, 0.0, 1.0, 1.0, 2.0, 2.0],
                        "density": [0.1, 0.1, np.nan, 0.5, 0.9, 0.9]})

    with pytest.warns(UserWarning, match="duplicate partners"):
        df = load_assay_data(raw)

    train, test = split_duplicates(df)
    assert list(train["conc"]) == [0.0, 2.0]
    assert list(test["conc"]) == [0.0, 2.0]

def test_load_assay_data_negative_conc():
    raw = _raw_df()
    raw.loc[0, "conc"] = -1.0
    with pytest.raises(ValueError, match="non-negative"):
        load_assay_data(raw)

def test_check_duplicates(assay_df):
    assert check_duplicates(assay_df)

    # one unpaired row is allowed
    assert check_duplicates(assay_df.iloc[:-1])

def test_check_duplicates_violations(assay_df):
    # two unpaired rows
    df = assay_df.drop(index=[0, 2])
    with pytest.warns(UserWarning, match="duplicate pairs"):
        assert not check_duplicates(df)

    # triplicate
    df = pd.concat([assay_df, assay_df.iloc[[0]]])
    with pytest.warns(UserWarning):
        assert not check_duplicates(df)
