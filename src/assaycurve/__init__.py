"""
assaycurve package initialization.

Nonlinear curve and nonlinear mixed-effects fits of optical density vs.
protein concentration for assays grouped by experimental run.
"""

from . import errors
from . import util
from . import models
from . import data
from . import simulate
from . import fitting
from . import analysis
from . import plot

from .errors import (
    FitError,
    FitDivergenceError,
    SingularGradientError,
    InsufficientDataError
)

__version__ = "0.1.0"
