"""
Exceptions raised by the curve and mixed-model fitters.
"""

class FitError(RuntimeError):
    """
    Base class for failures of a nonlinear fit.
    """

class FitDivergenceError(FitError):
    """
    The optimizer did not reach a finite minimum from the starting values.
    Better starting values or a simpler model are needed.
    """

class SingularGradientError(FitError):
    """
    The Jacobian at the solution is rank deficient, so the parameters are not
    identifiable from the data.
    """

class InsufficientDataError(FitError):
    """
    A (group of) data has fewer observations than free parameters.
    """
