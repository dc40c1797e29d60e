"""
Loading assay tables and partitioning duplicate measurements into training
and test subsets.
"""

from .load import (
    load_assay_data,
    check_duplicates
)

from .split import (
    split_duplicates
)
