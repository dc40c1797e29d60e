
from .curve_fit import (
    curve_fit_plot
)

from .group_fits import (
    group_fits_plot
)

from .random_effects import (
    random_effects_plot
)

from .residuals import (
    residuals_plot
)
