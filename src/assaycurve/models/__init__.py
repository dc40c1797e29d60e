"""
Saturating curves fit to density vs. concentration data. The core data
structure defined here is CURVE_LIBRARY, which keys curve names to a
CurveModel instance holding the curve function, its Jacobian, its guess
function and its parameter names.
"""

from .curves import (
    model_tanh,
    jacobian_tanh,
    model_logistic,
    jacobian_logistic
)

from .guesses import (
    guess_tanh,
    guess_logistic
)

from .curve_model import (
    CurveModel,
    TanhCurve,
    LogisticCurve
)

CURVE_LIBRARY = {
    "tanh": TanhCurve(),
    "logistic": LogisticCurve(),
}

def get_curve(curve):
    """
    Resolve a curve name (key of CURVE_LIBRARY) or pass a CurveModel
    instance through.
    """

    if isinstance(curve, CurveModel):
        return curve

    if curve not in CURVE_LIBRARY:
        err = f"curve '{curve}' not recognized. Should be one of:\n"
        for k in CURVE_LIBRARY:
            err += f"    {k}\n"
        raise ValueError(err)

    return CURVE_LIBRARY[curve]
