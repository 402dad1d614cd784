import numpy as np
import pandas as pd
from harness.ml.dataset_preparation import Dataset


def make_dataset(n, label_values=None) -> Dataset:
    """n records with an `id` feature, a numeric feature and a label."""
    labels = list(label_values) if label_values is not None else [float(i % 7) for i in range(n)]
    frame = pd.DataFrame({"id": range(n), "x": np.linspace(0.0, 1.0, n), "y": labels})
    return Dataset(frame, "y")


def make_linear_dataset(n=60, seed=0, noise=0.5) -> Dataset:
    rng = np.random.default_rng(seed)
    x1 = rng.normal(size=n)
    x2 = rng.normal(size=n)
    y = 3.0 * x1 - 2.0 * x2 + 10.0 + rng.normal(scale=noise, size=n)
    return Dataset(pd.DataFrame({"x1": x1, "x2": x2, "y": y}), "y")


def make_blobs_dataset(n_per_class=30, seed=0) -> Dataset:
    rng = np.random.default_rng(seed)
    negative = rng.normal(loc=-2.0, scale=0.7, size=(n_per_class, 2))
    positive = rng.normal(loc=2.0, scale=0.7, size=(n_per_class, 2))
    frame = pd.DataFrame(np.vstack([negative, positive]), columns=["a", "b"])
    frame["label"] = [-1] * n_per_class + [1] * n_per_class
    return Dataset(frame, "label")


def assert_partition(split, n):
    train, holdout = set(split.train_indices), set(split.holdout_indices)
    assert not train & holdout, "train and holdout overlap"
    assert train | holdout == set(range(n)), "split does not cover every record"
