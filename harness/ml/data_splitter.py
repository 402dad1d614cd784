from dataclasses import dataclass
from typing import Literal, Optional, Tuple
import numpy as np
from sklearn.model_selection import train_test_split
from config import settings
from harness.ml.dataset_preparation import Dataset
from harness.utils.exceptions import ConfigurationError, DataLeakageError

SampledSide = Literal["holdout", "train"]


@dataclass(frozen=True)
class Split:
    """Disjoint train/holdout row positions covering a dataset exactly once."""
    train_indices: Tuple[int, ...]
    holdout_indices: Tuple[int, ...]
    sampled_side: SampledSide
    random_seed: Optional[int]

    def train(self, dataset: Dataset) -> Dataset:
        return dataset.subset(self.train_indices)

    def holdout(self, dataset: Dataset) -> Dataset:
        return dataset.subset(self.holdout_indices)


class DataSplitter:
    def __init__(self, holdout_fraction: Optional[float] = None, random_seed: Optional[int] = None,
                 sampled_side: Optional[SampledSide] = None, stratify: bool = False) -> None:
        self.holdout_fraction = settings.holdout_fraction if holdout_fraction is None else holdout_fraction
        self.random_seed = settings.random_state if random_seed is None else random_seed
        self.sampled_side = settings.sampled_side if sampled_side is None else sampled_side
        self.stratify = stratify

    def _sizes(self, n: int, holdout_fraction: float) -> Tuple[int, int]:
        if n == 0:
            raise ConfigurationError("Cannot split an empty dataset")
        if not 0 < holdout_fraction < 1:
            raise ConfigurationError(f"holdout_fraction must be strictly between 0 and 1, got {holdout_fraction}")
        n_holdout = int(round(n * holdout_fraction))
        n_train = n - n_holdout
        if n_holdout == 0 or n_train == 0:
            raise ConfigurationError(
                f"holdout_fraction {holdout_fraction} on {n} records leaves "
                f"{n_train} training and {n_holdout} holdout records"
            )
        return n_train, n_holdout

    def _check_data_leakage(self, train_indices, holdout_indices, n):
        overlap = set(train_indices) & set(holdout_indices)
        if overlap:
            raise DataLeakageError(f"Data leakage detected between training and holdout data: {sorted(overlap)}")
        if len(train_indices) + len(holdout_indices) != n:
            raise DataLeakageError("Split does not cover every record exactly once")

    def split(self, dataset: Dataset, holdout_fraction: Optional[float] = None,
              random_seed: Optional[int] = None, sampled_side: Optional[SampledSide] = None) -> Split:
        holdout_fraction = self.holdout_fraction if holdout_fraction is None else holdout_fraction
        random_seed = self.random_seed if random_seed is None else random_seed
        sampled_side = self.sampled_side if sampled_side is None else sampled_side
        if sampled_side not in ("holdout", "train"):
            raise ConfigurationError(f"sampled_side must be 'holdout' or 'train', got {sampled_side!r}")

        n = len(dataset)
        n_train, n_holdout = self._sizes(n, holdout_fraction)
        n_sampled = n_holdout if sampled_side == "holdout" else n_train

        try:
            remainder, sampled = train_test_split(
                np.arange(n),
                test_size=n_sampled,
                random_state=random_seed,
                stratify=dataset.y if self.stratify else None,
            )
        except ValueError as e:
            raise ConfigurationError(f"Could not split dataset: {e}") from e

        if sampled_side == "holdout":
            train_indices, holdout_indices = remainder, sampled
        else:
            train_indices, holdout_indices = sampled, remainder

        train_indices = tuple(int(i) for i in sorted(train_indices))
        holdout_indices = tuple(int(i) for i in sorted(holdout_indices))
        self._check_data_leakage(train_indices, holdout_indices, n)
        return Split(train_indices, holdout_indices, sampled_side, random_seed)
