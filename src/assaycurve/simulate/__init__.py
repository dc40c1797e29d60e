
from .simulate_assay import (
    simulate_assay
)
