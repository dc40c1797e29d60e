import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest

from assaycurve.simulate import simulate_assay

# True parameters used for synthetic logistic data
LOGISTIC_TRUE = np.array([3.0, 1.5, 0.8])
RECOVERY_CONC = np.array([0.0, 1.0, 2.0, 4.0, 8.0])
ASSAY_CONC = np.array([0.05, 0.2, 0.4, 0.8, 1.6, 3.1, 6.2, 12.5])

@pytest.fixture
def logistic_true():
    return LOGISTIC_TRUE.copy()

@pytest.fixture
def recovery_df():
    """
    One group of logistic data with small noise over [0, 1, 2, 4, 8].
    """
    return simulate_assay("logistic",
                          LOGISTIC_TRUE,
                          RECOVERY_CONC,
                          noise_std=0.01,
                          seed=42)

@pytest.fixture
def assay_df():
    """
    Six runs of duplicate logistic measurements with zero-sum offsets on the
    asymptote.
    """
    return simulate_assay("logistic",
                          [2.3, 3.0, 1.5],
                          ASSAY_CONC,
                          groups=["1", "2", "3", "4", "5", "6"],
                          re_values=[-0.3, -0.2, -0.1, 0.1, 0.2, 0.3],
                          effect_on="Asym",
                          noise_std=0.02,
                          seed=7)
