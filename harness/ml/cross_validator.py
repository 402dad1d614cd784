from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union
import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from sklearn.model_selection import KFold
from config import settings
from harness.ml.dataset_preparation import Dataset
from harness.ml.parameter_grid import HyperparameterGrid, ParameterCombination
from harness.ml.scoring import Direction, Scorer
from harness.utils.exceptions import ConfigurationError, ScoringError, TrainingFailure

TrainerFn = Callable[[Dataset, ParameterCombination], object]
ScorerFn = Union[Scorer, Callable[[Sequence, Sequence], float]]


@dataclass(frozen=True)
class ScoreRecord:
    """One combination's cross-validation outcome."""
    combination: ParameterCombination
    mean_score: float
    fold_scores: Tuple[float, ...]

    @property
    def std_score(self) -> float:
        return float(np.std(self.fold_scores))


def select_best(records: Iterable[ScoreRecord], direction: Direction = "minimize") -> ScoreRecord:
    """Best record by mean score. Ties go to the first record encountered."""
    if direction not in ("minimize", "maximize"):
        raise ConfigurationError(f"direction must be 'minimize' or 'maximize', got {direction!r}")
    best = None
    for record in records:
        if best is None:
            best = record
        elif direction == "minimize" and record.mean_score < best.mean_score:
            best = record
        elif direction == "maximize" and record.mean_score > best.mean_score:
            best = record
    if best is None:
        raise ConfigurationError("No score records to select from")
    return best


def results_frame(records: Sequence[ScoreRecord], direction: Direction = "minimize") -> pd.DataFrame:
    """Score records laid out like scikit-learn's cv_results_."""
    rows = []
    for record in records:
        row = {f"param_{name}": value for name, value in record.combination.items()}
        row["params"] = record.combination.as_dict()
        for i, score in enumerate(record.fold_scores):
            row[f"split{i}_test_score"] = score
        row["mean_test_score"] = record.mean_score
        row["std_test_score"] = record.std_score
        rows.append(row)
    frame = pd.DataFrame(rows)
    if not frame.empty:
        ascending = direction == "minimize"
        frame["rank_test_score"] = frame["mean_test_score"].rank(method="min", ascending=ascending).astype(int)
    return frame


class CrossValidator:
    def __init__(self, n_splits: Optional[int] = None, shuffle: Optional[bool] = None,
                 random_state: Optional[int] = None, n_jobs: Optional[int] = None) -> None:
        self.n_splits = settings.n_folds if n_splits is None else n_splits
        self.shuffle = settings.shuffle_folds if shuffle is None else shuffle
        self.random_state = settings.random_state if random_state is None else random_state
        self.n_jobs = settings.n_jobs if n_jobs is None else n_jobs
        self.score_records: List[ScoreRecord] = []
        self.best: Optional[ScoreRecord] = None
        self.direction: Direction = "minimize"

    def _check_folds(self, k: int, n_records: int):
        if not isinstance(k, (int, np.integer)) or isinstance(k, bool):
            raise ConfigurationError(f"Number of folds must be an integer, got {k!r}")
        if k < 2:
            raise ConfigurationError(f"Cross-validation needs at least 2 folds, got {k}")
        if k > n_records:
            raise ConfigurationError(f"Cannot make {k} folds from {n_records} training records")

    def fold_assignments(self, n_records: int, k: Optional[int] = None) -> List[Tuple[np.ndarray, np.ndarray]]:
        """(fit positions, validation positions) for each of the k folds."""
        k = self.n_splits if k is None else k
        self._check_folds(k, n_records)
        kfold = KFold(
            n_splits=k,
            shuffle=self.shuffle,
            random_state=self.random_state if self.shuffle else None,
        )
        return list(kfold.split(np.arange(n_records)))

    def _score_fold(self, training_set: Dataset, combination, fold, fit_idx, val_idx, trainer_fn, scorer_fn):
        """Train on every fold but one and score the held-out one. `fold` counts from 1."""
        fit_set = training_set.subset(fit_idx)
        val_set = training_set.subset(val_idx)
        try:
            predictor = trainer_fn(fit_set, combination)
        except Exception as e:
            raise TrainingFailure(
                f"Training failed for {combination!r} on fold {fold}: {e}",
                combination=combination,
                fold=fold,
            ) from e
        predictions = predictor.predict(val_set.X)
        try:
            return float(scorer_fn(predictions, val_set.y.to_numpy()))
        except ScoringError as e:
            raise ScoringError(
                f"Scoring failed for {combination!r} on fold {fold}: {e}",
                combination=combination,
                fold=fold,
            ) from e

    def evaluate(self, training_set: Dataset, parameter_grid, k: Optional[int] = None,
                 trainer_fn: Optional[TrainerFn] = None, scorer_fn: Optional[ScorerFn] = None,
                 direction: Optional[Direction] = None) -> Tuple[ParameterCombination, List[ScoreRecord]]:
        self.score_records = []
        self.best = None
        if trainer_fn is None or scorer_fn is None:
            raise ConfigurationError("Both trainer_fn and scorer_fn are required")
        if direction is None:
            direction = scorer_fn.direction if isinstance(scorer_fn, Scorer) else "minimize"
        if direction not in ("minimize", "maximize"):
            raise ConfigurationError(f"direction must be 'minimize' or 'maximize', got {direction!r}")
        if not isinstance(parameter_grid, HyperparameterGrid):
            parameter_grid = HyperparameterGrid(parameter_grid)
        combinations = parameter_grid.expand()

        k = self.n_splits if k is None else k
        folds = self.fold_assignments(len(training_set), k)

        self.direction = direction
        for combination in combinations:
            fold_scores = Parallel(n_jobs=self.n_jobs, prefer="threads")(
                delayed(self._score_fold)(training_set, combination, i, fit_idx, val_idx, trainer_fn, scorer_fn)
                for i, (fit_idx, val_idx) in enumerate(folds, start=1)
            )
            mean_score = float(np.mean(fold_scores))
            if not np.isfinite(mean_score):
                raise ScoringError(
                    f"Non-finite cross-validated score {mean_score} for {combination!r}: {fold_scores}",
                    combination=combination,
                )
            record = ScoreRecord(combination, mean_score, tuple(fold_scores))
            self.score_records.append(record)

        self.best = select_best(self.score_records, direction)
        return self.best.combination, list(self.score_records)

    def results_frame(self) -> pd.DataFrame:
        return results_frame(self.score_records, self.direction)
