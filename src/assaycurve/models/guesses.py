"""
Functions generating starting values for the curves in curves.py. Each
function adheres to the signature `guess_func(x, y)`:
- `x`: A NumPy array of concentrations.
- `y`: A NumPy array of measured densities.

Both guesses linearize the curve (arctanh or logit of the density scaled by
the guessed asymptote) and fit a straight line to the transformed values.
"""

import numpy as np
from scipy.special import logit

# Over-shoot of the observed maximum used as the asymptote guess
ASYM_PAD = 1.05

# Transformed densities are clipped to this fraction of the asymptote
CLIP_LOW = 0.05
CLIP_HIGH = 0.95

# Smallest change in the linearized curve across the data treated as a slope
MIN_SLOPE = 1e-8

def _line_fit(x, u):
    """
    Least-squares slope and intercept of u vs. x. Returns (nan, nan) if x
    has no spread.
    """
    if len(x) < 2 or np.ptp(x) == 0:
        return np.nan, np.nan

    X = np.vander(x, 2)
    slope, intercept = np.linalg.lstsq(X, u, rcond=None)[0]

    return slope, intercept

def _asym_guess(y):

    y_max = np.max(y)
    if y_max > 0:
        return ASYM_PAD*y_max

    # Nothing positive observed. Fall back to a unit-scale asymptote.
    return 1.0

def guess_tanh(x, y):
    """
    Generates guesses for the tanh model.

    Parameters
    ----------
    x, y : np.ndarray
        Input data arrays.

    Returns
    -------
    np.ndarray
        Guesses for parameters [b1, b2, b3]
    """

    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)

    b1 = _asym_guess(y)
    u = np.arctanh(np.clip(y/b1, -CLIP_HIGH, CLIP_HIGH))

    b2, b3 = _line_fit(x, u)
    if not np.isfinite(b2) or b2*np.ptp(x) <= MIN_SLOPE:
        span = np.ptp(x) if np.ptp(x) > 0 else 1.0
        b2 = 2.0/span
        b3 = 0.0

    return np.array([b1, b2, b3])

def guess_logistic(x, y):
    """
    Generates guesses for the logistic model.

    Parameters
    ----------
    x, y : np.ndarray
        Input data arrays.

    Returns
    -------
    np.ndarray
        Guesses for parameters [Asym, xmid, scal]
    """

    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)

    Asym = _asym_guess(y)
    u = logit(np.clip(y/Asym, CLIP_LOW, CLIP_HIGH))

    slope, intercept = _line_fit(x, u)
    if not np.isfinite(slope) or slope*np.ptp(x) <= MIN_SLOPE:
        span = np.ptp(x) if np.ptp(x) > 0 else 1.0
        return np.array([Asym, np.mean(x), span/4])

    return np.array([Asym, -intercept/slope, 1.0/slope])
