import numpy as np
import pandas as pd
import pytest

from assaycurve.util.validation.check import check_number, check_columns

def test_check_number_casts():
    assert check_number(3, cast_type=float) == 3.0
    assert isinstance(check_number(3.0, cast_type=int), int)
    assert check_number(np.float64(2.5)) == 2.5

def test_check_number_rejects_strings_and_arrays():
    with pytest.raises(ValueError):
        check_number("3", param_name="x")
    with pytest.raises(ValueError):
        check_number(np.array([1, 2]), param_name="x")

def test_check_number_int_truncation():
    # 2.5 cannot be an order or an evaluation budget
    with pytest.raises(ValueError):
        check_number(2.5, param_name="order", cast_type=int)

def test_check_number_bounds():
    assert check_number(0, min_allowed=0) == 0
    with pytest.raises(ValueError):
        check_number(0, min_allowed=0, inclusive_min=False)
    with pytest.raises(ValueError):
        check_number(-1, min_allowed=0)
    with pytest.raises(ValueError):
        check_number(11, max_allowed=10)

def test_check_number_none():
    assert check_number(None, allow_none=True) is None
    with pytest.raises(ValueError):
        check_number(None, param_name="x")

def test_check_columns():
    df = pd.DataFrame({"run": [1], "conc": [0.1]})
    check_columns(df, ["run", "conc"])

    with pytest.raises(ValueError, match="density"):
        check_columns(df, ["run", "conc", "density"])
