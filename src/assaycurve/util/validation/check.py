import numpy as np
from typing import Any, Callable, Optional, TypeVar

# Define a generic Numeric type for hinting
_Numeric = TypeVar("_Numeric", int, float)

def check_number(
    value: Any,
    param_name: Optional[str] = None,
    cast_type: Callable[[Any], _Numeric] = float,
    min_allowed: Optional[_Numeric] = None,
    max_allowed: Optional[_Numeric] = None,
    inclusive_min: bool = True,
    allow_none: bool = False,
) -> Optional[_Numeric]:
    """
    Validate and cast a scalar numerical value.

    Parameters
    ----------
    value : Any
        The value to validate.
    param_name : str, optional
        The name of the parameter being checked, used in error messages.
    cast_type : Callable, default: float
        A function to cast the value to (e.g., `int`, `float`).
    min_allowed : int or float, optional
        The minimum allowed value. If None, no minimum is enforced.
    max_allowed : int or float, optional
        The maximum allowed value (inclusive). If None, no maximum is enforced.
    inclusive_min : bool, default: True
        Whether the minimum bound is inclusive (value >= min_allowed).
    allow_none : bool, default: False
        If True, a `value` of None is returned as None.

    Returns
    -------
    _Numeric or None
        The cast and validated value.

    Raises
    ------
    ValueError
        If the value is None (and not `allow_none`), is not a scalar, cannot
        be cast, is a non-integral float being cast to int, or falls outside
        the allowed range.
    """

    if value is None:
        if allow_none:
            return None
        raise ValueError(f"{param_name} cannot be None")

    try:
        if not np.isscalar(value) or isinstance(value, (str, bytes)):
            raise TypeError("Value must be a numeric scalar.")

        # int(2.5) silently truncates; refuse instead
        if cast_type is int and float(value) != int(value):
            raise ValueError("Value must be an integer.")

        v_cast = cast_type(value)

        if min_allowed is not None:
            if inclusive_min and v_cast < min_allowed:
                raise ValueError(f"Value must be >= {min_allowed}.")
            if not inclusive_min and v_cast <= min_allowed:
                raise ValueError(f"Value must be > {min_allowed}.")
        if max_allowed is not None and v_cast > max_allowed:
            raise ValueError(f"Value must be <= {max_allowed}.")

    except (ValueError, TypeError) as e:
        raise ValueError(
            f"Could not process parameter '{param_name}' with value '{value}'.\n"
            f"Reason: {e}"
        ) from e

    return v_cast


def check_columns(df, required_columns):
    """
    Check that a DataFrame contains all required columns.

    Parameters
    ----------
    df : pandas.DataFrame
        The DataFrame to check.
    required_columns : list of str
        Column names that must be present in `df`.

    Raises
    ------
    ValueError
        If any required column is missing. The message lists the missing
        columns.
    """

    missing = [c for c in required_columns if c not in df.columns]
    if len(missing) > 0:
        err = "Not all required columns seen. Missing columns:\n"
        for c in missing:
            err += f"    {c}\n"
        err += "\n"
        raise ValueError(err)
