from .xfill import (
    xfill
)
