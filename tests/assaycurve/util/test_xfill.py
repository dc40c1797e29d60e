import numpy as np

from assaycurve.util.numerical.xfill import xfill

def test_xfill_contains_original_values():
    x = np.array([0.0, 0.05, 0.2, 0.8, 3.1, 12.5])
    out = xfill(x, num_points=50)

    assert len(out) >= 50
    assert np.all(np.diff(out) >= 0)
    for v in x:
        assert np.any(np.isclose(out, v))
    assert out[0] == 0.0
    assert out[-1] == 12.5

def test_xfill_log_spacing():
    x = np.array([0.1, 1.0, 10.0])
    out = xfill(x, num_points=21, use_log=True)

    for v in x:
        assert np.any(np.isclose(out, v))
    # log spacing puts half the points below 1
    assert np.sum(out < 1.0) >= 9

def test_xfill_edge_cases():
    assert len(xfill(np.array([]))) == 0
    assert len(xfill(np.array([np.nan]))) == 0
    assert np.all(xfill(np.array([2.0]), num_points=5) == 2.0)

def test_xfill_more_values_than_points():
    x = np.arange(20, dtype=float)
    out = xfill(x, num_points=5)
    assert np.allclose(out, x)
