import numpy as np
import pandas as pd

from .curves import (
    model_tanh,
    jacobian_tanh,
    model_logistic,
    jacobian_logistic
)

from .guesses import (
    guess_tanh,
    guess_logistic
)

class CurveModel:
    """
    A parametric saturating curve: its function, analytic Jacobian, starting
    value generator, parameter names and fit bounds.

    Subclasses set the class attributes `name`, `param_names`, `model_func`,
    `jacobian_func` and `guess_func`, plus `asymptote_param`, the parameter
    that scales the curve's plateau (the default carrier of a per-group
    random effect). Instances hold no state, so a single instance can be
    shared between fits.
    """

    name = None
    param_names = ()
    asymptote_param = None

    model_func = None
    jacobian_func = None
    guess_func = None

    @property
    def num_params(self) -> int:
        return len(self.param_names)

    @property
    def bounds(self):
        """
        (lower, upper) bound arrays used by the least-squares fitter.
        """
        return (np.full(self.num_params, -np.inf),
                np.full(self.num_params, np.inf))

    def evaluate(self, params, x):
        """
        Evaluate the curve at concentration(s) `x`. Returns a float for a
        scalar `x` and an array of the same shape otherwise.
        """
        params = self._check_params(params)
        y = type(self).model_func(params, x)
        if np.ndim(x) == 0:
            return float(y)
        return y

    def jacobian(self, params, x):
        """
        Partial derivatives of the curve with respect to each parameter,
        shape (len(x), num_params).
        """
        params = self._check_params(params)
        return type(self).jacobian_func(params, x)

    def initial_guess(self, x, y):
        """
        Data-driven starting values for a fit of this curve.
        """
        return type(self).guess_func(x, y)

    def asymptote(self, params):
        """
        Value approached by the curve as concentration grows without bound.
        """
        raise NotImplementedError

    def param_index(self, param_name) -> int:
        """
        Position of `param_name` in the parameter array.
        """
        if param_name not in self.param_names:
            err = f"'{param_name}' is not a parameter of the {self.name} curve. "
            err += f"Parameters are: {', '.join(self.param_names)}"
            raise ValueError(err)
        return self.param_names.index(param_name)

    def to_dict(self, params):
        params = self._check_params(params)
        return {k: float(v) for k, v in zip(self.param_names, params)}

    def to_series(self, params):
        return pd.Series(self.to_dict(params), name=self.name)

    def _check_params(self, params):

        if isinstance(params, dict):
            params = [params[k] for k in self.param_names]

        params = np.asarray(params, dtype=float)
        if params.shape != (self.num_params,):
            err = f"{self.name} curve takes {self.num_params} parameters "
            err += f"({', '.join(self.param_names)}); got shape {params.shape}"
            raise ValueError(err)

        return params

    def __repr__(self) -> str:
        return f"<{type(self).__name__}({', '.join(self.param_names)})>"

    def __eq__(self, other):
        return type(self) is type(other)

    def __hash__(self):
        return hash(type(self))


class TanhCurve(CurveModel):
    """
    y = b1 * tanh(b2*x + b3)
    """

    name = "tanh"
    param_names = ("b1", "b2", "b3")
    asymptote_param = "b1"

    model_func = staticmethod(model_tanh)
    jacobian_func = staticmethod(jacobian_tanh)
    guess_func = staticmethod(guess_tanh)

    def asymptote(self, params):
        b1, b2, b3 = self._check_params(params)
        if b2 == 0:
            return float(b1*np.tanh(b3))
        return float(np.sign(b2)*b1)


class LogisticCurve(CurveModel):
    """
    y = Asym / (1 + exp((xmid - x)/scal))
    """

    name = "logistic"
    param_names = ("Asym", "xmid", "scal")
    asymptote_param = "Asym"

    model_func = staticmethod(model_logistic)
    jacobian_func = staticmethod(jacobian_logistic)
    guess_func = staticmethod(guess_logistic)

    def asymptote(self, params):
        Asym, _, scal = self._check_params(params)
        if scal < 0:
            return 0.0
        return float(Asym)
