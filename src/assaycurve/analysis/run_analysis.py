from assaycurve.data import split_duplicates
from assaycurve.fitting import (
    fit_curve,
    fit_per_group,
    fit_mixed,
    summary_frame,
    prediction_frame,
    evaluate_fit
)
from assaycurve.util import check_columns

from .config import load_config


def run_analysis(df, config=None, override_keys=None):
    """
    Run the full workflow on a loaded assay table.

    1. Split duplicate measurements into training and test subsets.
    2. Fit the curve to the pooled training data and score it on the test
       subset.
    3. Fit the curve to each group of the training data separately.
    4. Fit a mixed-effects model with a random effect on `effect_on` to the
       training data.

    Parameters
    ----------
    df : pandas.DataFrame
        Assay table (see `assaycurve.data.load_assay_data`), ordered so that
        duplicate measurements occupy consecutive rows.
    config : str or dict, optional
        Configuration file or dict (see `load_config`).
    override_keys : dict, optional
        Values replacing entries of the configuration.

    Returns
    -------
    dict
        - 'config': the validated configuration
        - 'train', 'test': the data subsets
        - 'fit': pooled FitResult
        - 'test_metrics': `evaluate_fit` of the pooled fit on 'test'
        - 'prediction': `prediction_frame` of the pooled fit at the test
          concentrations (with the extrapolation flag)
        - 'group_fits': group -> FitResult
        - 'group_summary': `summary_frame` of 'group_fits'
        - 'mixed': MixedFitResult
    """

    config = load_config(config, override_keys=override_keys)
    check_columns(df, [config["group_key"], config["x_column"], config["y_column"]])

    columns = {"x_column": config["x_column"],
               "y_column": config["y_column"]}

    train, test = split_duplicates(df)

    fit = fit_curve(config["curve"],
                    config["initial_params"],
                    train,
                    max_nfev=config["max_nfev"],
                    **columns)

    group_fits = fit_per_group(config["curve"],
                               fit.params,
                               train,
                               group_key=config["group_key"],
                               errors=config["per_group_errors"],
                               max_nfev=config["max_nfev"],
                               **columns)

    mixed = fit_mixed(config["curve"],
                      fit.params,
                      train,
                      group_key=config["group_key"],
                      effect_on=config["effect_on"],
                      order=config["order"],
                      max_iter=config["mixed_max_iter"],
                      **columns)

    return {"config": config,
            "train": train,
            "test": test,
            "fit": fit,
            "test_metrics": evaluate_fit(fit, test),
            "prediction": prediction_frame(fit, test[config["x_column"]].unique()),
            "group_fits": group_fits,
            "group_summary": summary_frame(group_fits),
            "mixed": mixed}
