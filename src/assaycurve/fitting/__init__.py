from .fitters import (
    run_least_squares
)

from .predict_with_error import (
    predict_with_error
)

from .group_index import (
    GroupIndex
)

from .nls import (
    FitResult,
    fit_curve,
    fit_per_group,
    predict,
    summary_frame
)

from .evaluate import (
    prediction_frame,
    evaluate_fit
)

from .mixed import (
    MarginalApproximation,
    RandomEffectEstimate,
    MixedFitResult,
    fit_mixed,
    random_effect_mean
)
