from matplotlib import pyplot as plt

SMALL_SIZE = 14
MEDIUM_SIZE = 16
BIGGER_SIZE = 18

plt.rc('font', size=SMALL_SIZE)          # controls default text sizes
plt.rc('axes', titlesize=SMALL_SIZE)     # fontsize of the axes title
plt.rc('axes', labelsize=MEDIUM_SIZE)    # fontsize of the x and y labels
plt.rc('legend', fontsize=SMALL_SIZE)    # legend fontsize


DEFAULT_TRAIN_SCATTER_KWARGS = {
    "s":30,
    "edgecolor":"royalblue",
    "facecolor":"none",
    "label":"train"
}

DEFAULT_TEST_SCATTER_KWARGS = {
    "s":30,
    "marker":"x",
    "color":"darkorange",
    "label":"test"
}

DEFAULT_FIT_LINE_KWARGS = {
    "lw":2,
    "color":"firebrick"
}

DEFAULT_ERROR_KWARGS = {
    "color":"black",
    "lw":0,
    "elinewidth":1,
    "capsize":5
}

X_LABEL = "protein concentration"
Y_LABEL = "optical density"


def merge_kwargs(defaults, overrides):
    """
    Copy of `defaults` updated with `overrides` (which may be None).
    """
    final = dict(defaults)
    if overrides is not None:
        for k in overrides:
            final[k] = overrides[k]
    return final
