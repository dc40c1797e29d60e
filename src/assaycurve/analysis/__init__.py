"""
End-to-end workflow: split, pooled fit, per-group fits and mixed-effects fit
driven by a YAML configuration.
"""

from .config import (
    DEFAULT_CONFIG,
    load_config
)

from .run_analysis import (
    run_analysis
)
