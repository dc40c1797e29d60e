"""
Nonlinear mixed-effects fits with a single scalar random effect per group.
"""

from .quadrature import (
    MarginalApproximation
)

from .nlme import (
    RandomEffectEstimate,
    MixedFitResult,
    fit_mixed,
    random_effect_mean
)
