import numpy as np

def xfill(x,
          num_points=100,
          use_log=False,
          pad_by=0.0):
    """
    Smoothly fill points between the minimum and maximum values in x.

    All original finite values of `x` are present in the output, so measured
    values can be compared one-to-one with a curve evaluated on the filled
    grid.

    Parameters
    ----------
    x : np.ndarray
        1D array of values (e.g. concentrations).
    num_points : int, optional
        Number of points in the final array, by default 100. Raised to the
        number of unique values in `x` if smaller.
    use_log : bool, optional
        Space points on a log scale. Only positive values of `x` are used to
        set the range; a zero concentration is re-inserted afterwards.
    pad_by : float, optional
        Expand the range beyond the min/max of x by this fraction of the span.

    Returns
    -------
    np.ndarray
        Sorted array of filled values.
    """

    x = np.asarray(x, dtype=float)
    x_finite = np.unique(x[np.isfinite(x)])

    if x_finite.size == 0:
        return np.array([])
    if x_finite.size == 1:
        return np.full(num_points, x_finite[0])

    num_points = max(num_points, x_finite.size)

    x_pos = x_finite[x_finite > 0]
    if use_log and x_pos.size > 1:
        log_span = np.log(x_pos[-1]) - np.log(x_pos[0])
        x_min_log = np.log(x_pos[0]) - log_span * pad_by
        x_max_log = np.log(x_pos[-1]) + log_span * pad_by
        x_filled = np.exp(np.linspace(x_min_log, x_max_log, num_points))
    else:
        span = x_finite[-1] - x_finite[0]
        x_filled = np.linspace(x_finite[0] - span * pad_by,
                               x_finite[-1] + span * pad_by,
                               num_points)

    # Overwrite the closest grid points with the original values. Values
    # sharing a closest grid point are appended instead.
    indices = np.argmin(np.abs(x_filled[:, np.newaxis] - x_finite), axis=0)
    unique_idx, first = np.unique(indices, return_index=True)
    x_filled[unique_idx] = x_finite[first]
    leftover = np.setdiff1d(x_finite, x_filled)

    return np.sort(np.concatenate([x_filled, leftover]))
