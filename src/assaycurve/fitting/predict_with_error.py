import numpy as np

def predict_with_error(some_model,
                       params,
                       cov_matrix,
                       args=None,
                       jac=None,
                       epsilon=1e-6):
    """
    Calculate model predictions and their standard errors.

    Uses linear error propagation from a first-order Taylor expansion of the
    model: Var(y) = J Cov(p) J^T, where J is the Jacobian of the predictions
    with respect to the parameters.

    Parameters
    ----------
    some_model : callable
        The model function, `some_model(params, *args)`.
    params : np.ndarray
        The array of best-fit parameters for the model.
    cov_matrix : np.ndarray
        The covariance matrix of the fitted parameters.
    args : tuple, optional
        Additional fixed arguments (e.g., x-values) required by `some_model`.
    jac : callable, optional
        Analytic Jacobian, `jac(params, *args)`. If None, the Jacobian is
        calculated by central differences with step `epsilon`.
    epsilon : float, optional
        Step size for the central-difference Jacobian.

    Returns
    -------
    calc_values : np.ndarray
        The predicted values from the model.
    calc_se : np.ndarray
        The standard error for each predicted value. All NaN if the
        covariance matrix has NaN entries.
    """

    params = np.asarray(params, dtype=float)
    num_params = len(params)
    if args is None:
        args = ()

    calc_values = np.atleast_1d(some_model(params, *args))

    # If the covariance matrix is invalid, we can't propagate error.
    if np.any(np.isnan(cov_matrix)):
        calc_se = np.full(calc_values.shape, np.nan)
        return calc_values, calc_se

    if jac is not None:
        J_pred = np.asarray(jac(params, *args)).reshape(calc_values.size,
                                                        num_params)
    else:
        J_pred = np.zeros((calc_values.size, num_params))
        for i in range(num_params):

            params_plus = params.copy()
            params_plus[i] += epsilon
            pred_plus = some_model(params_plus, *args)

            params_minus = params.copy()
            params_minus[i] -= epsilon
            pred_minus = some_model(params_minus, *args)

            J_pred[:, i] = np.ravel((pred_plus - pred_minus) / (2 * epsilon))

    # Only the diagonal of J @ Cov @ J.T is needed
    calc_var = np.sum((J_pred @ cov_matrix) * J_pred, axis=1)

    with np.errstate(invalid='ignore'):  # sqrt of potential negative variance
        calc_se = np.sqrt(calc_var).reshape(calc_values.shape)

    return calc_values, calc_se
