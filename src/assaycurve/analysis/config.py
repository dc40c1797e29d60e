from assaycurve.models import get_curve
from assaycurve.util import read_yaml, check_number

DEFAULT_CONFIG = {
    "curve": "logistic",
    "initial_params": None,
    "group_key": "run",
    "effect_on": None,
    "order": 1,
    "x_column": "conc",
    "y_column": "density",
    "max_nfev": None,
    "mixed_max_iter": 1000,
    "per_group_errors": "warn",
}


def load_config(cf=None, override_keys=None):
    """
    Build an analysis configuration.

    Parameters
    ----------
    cf : str or dict, optional
        Path to a YAML configuration file or a dict. Keys not given take
        their values from DEFAULT_CONFIG. An `effect_on` of None becomes the
        curve's `asymptote_param` ("Asym" for logistic, "b1" for tanh).
    override_keys : dict, optional
        Values replacing entries of the configuration.

    Returns
    -------
    dict
        Validated configuration.

    Raises
    ------
    ValueError
        If the file cannot be read, has keys that are not configuration
        keys, or holds invalid values.
    """

    if cf is None:
        cf = {}

    config = read_yaml(cf)

    unknown = set(config) - set(DEFAULT_CONFIG)
    if len(unknown) > 0:
        err = "Unrecognized configuration keys:\n"
        for k in sorted(unknown):
            err += f"    {k}\n"
        raise ValueError(err)

    config = read_yaml({**DEFAULT_CONFIG, **config}, override_keys=override_keys)

    # Raises ValueError for unknown curves and parameters
    curve = get_curve(config["curve"])
    if config["effect_on"] is None:
        config["effect_on"] = curve.asymptote_param
    curve.param_index(config["effect_on"])

    if config["initial_params"] is not None:
        if isinstance(config["initial_params"], dict):
            config["initial_params"] = curve.to_dict(config["initial_params"])
        else:
            config["initial_params"] = [float(v) for v in
                                        curve._check_params(config["initial_params"])]

    config["order"] = check_number(config["order"],
                                   param_name="order",
                                   cast_type=int,
                                   min_allowed=0)
    config["max_nfev"] = check_number(config["max_nfev"],
                                      param_name="max_nfev",
                                      cast_type=int,
                                      min_allowed=1,
                                      allow_none=True)
    config["mixed_max_iter"] = check_number(config["mixed_max_iter"],
                                            param_name="mixed_max_iter",
                                            cast_type=int,
                                            min_allowed=1)

    if config["per_group_errors"] not in ["raise", "warn"]:
        err = "per_group_errors should be 'raise' or 'warn', not "
        err += f"'{config['per_group_errors']}'"
        raise ValueError(err)

    return config
