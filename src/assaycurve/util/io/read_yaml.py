import yaml
import re

# Strings like "1e-3" that yaml.safe_load leaves as strings
_SCI_NOTATION = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)$')

def _normalize_types(node):
    """
    Recursively convert scientific-notation strings to numbers and
    whole-number floats to integers.
    """

    if isinstance(node, dict):
        return {k: _normalize_types(v) for k, v in node.items()}
    if isinstance(node, list):
        return [_normalize_types(elem) for elem in node]

    if isinstance(node, str):
        if not _SCI_NOTATION.match(node):
            return node
        node = float(node)

    if isinstance(node, float):
        if node.is_integer():
            return int(node)
        return node

    return node


def read_yaml(cf: str | dict,
              override_keys: dict | None=None) -> dict:
    """
    Load an analysis configuration from a YAML file.

    Parameters
    ----------
    cf : str or dict
        Path to the YAML configuration file. A dict is treated as an
        already-loaded configuration and copied.
    override_keys : dict, optional
        Values that replace entries of the configuration. Every key must
        already be present in the configuration.

    Returns
    -------
    config : dict
        The configuration, with numeric values normalized.

    Raises
    ------
    ValueError
        If the file does not exist, cannot be parsed, does not hold a
        mapping, or an override key is not in the configuration.
    """

    if isinstance(cf, dict):
        config = dict(cf)
    else:
        try:
            with open(cf, 'r') as f:
                config = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ValueError(f"Configuration file not found at '{cf}'") from e
        except yaml.YAMLError as e:
            raise ValueError(f"Error parsing YAML file '{cf}': {e}") from e

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ValueError(f"Configuration file '{cf}' must hold a mapping.")

    config = _normalize_types(config)

    if override_keys is not None:
        for k in override_keys:
            if k not in config:
                err = f"override_keys has a key '{k}' that was not in configuration."
                raise ValueError(err)
            config[k] = override_keys[k]

    return config
