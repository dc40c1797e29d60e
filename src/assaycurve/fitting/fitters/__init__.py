
from .least_squares import run_least_squares
