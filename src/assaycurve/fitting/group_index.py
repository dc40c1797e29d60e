import numpy as np
import pandas as pd

class GroupIndex:
    """
    Stable map between group labels and integer indexes 0..num_groups-1.

    Built once from the group column of a fit's data. The order is:

    - categorical column: category order, skipping categories with no rows;
    - any other column: sorted labels, or order of first appearance if the
      labels cannot be sorted against one another.

    Parameters
    ----------
    labels : array-like or pandas.Series
        Group label of every observation. Missing labels are not allowed.
    """

    def __init__(self, labels):

        labels = pd.Series(labels)
        if labels.isna().any():
            raise ValueError("group labels cannot be missing (nan/None)")

        if isinstance(labels.dtype, pd.CategoricalDtype):
            present = set(labels.unique())
            ordered = [c for c in labels.cat.categories if c in present]
        else:
            ordered = list(pd.unique(labels))
            try:
                ordered = sorted(ordered)
            except TypeError:
                pass

        self._labels = tuple(ordered)
        self._lookup = {label: i for i, label in enumerate(self._labels)}

    @property
    def labels(self):
        return self._labels

    def codes(self, values) -> np.ndarray:
        """
        Integer index of each label in `values`. Raises KeyError for labels
        not seen when the index was built.
        """
        values = pd.Series(values)
        return np.array([self._lookup[v] for v in values], dtype=int)

    def index_of(self, label) -> int:
        return self._lookup[label]

    def __len__(self):
        return len(self._labels)

    def __iter__(self):
        return iter(self._labels)

    def __getitem__(self, i):
        return self._labels[i]

    def __contains__(self, label):
        return label in self._lookup

    def __repr__(self) -> str:
        return f"<GroupIndex(num_groups={len(self)})>"
