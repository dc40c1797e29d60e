"""
Saturating growth curves for optical density vs. protein concentration. Each
function adheres to the signature `model_func(params, x)`:
- `params`: A list or NumPy array of the model's parameters.
- `x`: A NumPy array (or scalar) of concentrations.

The matching `jacobian_*` functions return the partial derivatives of the
curve with respect to each parameter as an array of shape (len(x), 3).
"""
import numpy as np
from scipy.special import expit

def model_tanh(params, x):
    """
    Hyperbolic-tangent saturating curve.

    Parameters
    ----------
    params : array-like
        A three-element array: [b1, b2, b3].
        - b1: scale. The curve saturates at b1 for large x when b2 > 0.
        - b2: rate at which the curve approaches saturation.
        - b3: shift along the concentration axis.
    x : np.ndarray
        Concentrations.

    Returns
    -------
    np.ndarray
        The calculated densities.

    Notes
    -----
    - Mathematical Form: y = b1 * tanh(b2*x + b3)
    - The curve is bounded by |b1|.
    """

    b1, b2, b3 = params

    return b1*np.tanh(b2*np.asarray(x, dtype=float) + b3)

def jacobian_tanh(params, x):
    """
    Partial derivatives of `model_tanh` with respect to [b1, b2, b3].
    """

    b1, b2, b3 = params
    x = np.atleast_1d(np.asarray(x, dtype=float))

    t = np.tanh(b2*x + b3)
    sech2 = 1.0 - t**2

    return np.stack([t, b1*x*sech2, b1*sech2], axis=-1)

def model_logistic(params, x):
    """
    Three-parameter logistic growth curve.

    Parameters
    ----------
    params : array-like
        A three-element array: [Asym, xmid, scal].
        - Asym: the asymptote approached as concentration grows.
        - xmid: the inflection point, where the curve equals Asym/2.
        - scal: concentration scale of the transition from low to high.
    x : np.ndarray
        Concentrations.

    Returns
    -------
    np.ndarray
        The calculated densities.

    Notes
    -----
    - Mathematical Form: y = Asym / (1 + exp((xmid - x)/scal))
    - Evaluated as Asym*expit((x - xmid)/scal), which does not overflow for
      x far from xmid.
    - For Asym > 0 and scal > 0 the curve is strictly increasing, tends to
      Asym as x -> inf and to 0 as x -> -inf.
    """

    Asym, xmid, scal = params

    with np.errstate(divide='ignore', invalid='ignore'):
        z = (np.asarray(x, dtype=float) - xmid)/scal

    return Asym*expit(z)

def jacobian_logistic(params, x):
    """
    Partial derivatives of `model_logistic` with respect to
    [Asym, xmid, scal].
    """

    Asym, xmid, scal = params
    x = np.atleast_1d(np.asarray(x, dtype=float))

    with np.errstate(divide='ignore', invalid='ignore'):
        z = (x - xmid)/scal
        g = expit(z)
        dg = g*(1.0 - g)
        d_xmid = -Asym*dg/scal
        d_scal = -Asym*dg*z/scal

    return np.stack([g, d_xmid, d_scal], axis=-1)
