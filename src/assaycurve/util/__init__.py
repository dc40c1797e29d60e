
from .validation import (
    check_number,
    check_columns
)

from .io import (
    read_yaml,
    read_dataframe
)

from .numerical import (
    xfill
)
