from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional
import numpy as np
import pandas as pd
from harness.ml.base_model import Predictor
from harness.ml.cross_validator import CrossValidator, ScoreRecord, results_frame
from harness.ml.data_splitter import DataSplitter, Split
from harness.ml.dataset_preparation import Dataset
from harness.ml.parameter_grid import HyperparameterGrid, ParameterCombination
from harness.ml.scoring import MSE, Direction, Scorer
from harness.utils.exceptions import ConfigurationError, PipelineStateError


class EvaluationState(Enum):
    INITIALIZED = "initialized"
    SPLIT = "split"
    GRID_SEARCHED = "grid_searched"
    REFIT = "refit"
    EVALUATED = "evaluated"
    FAILED = "failed"


@dataclass(frozen=True)
class EvaluationResult:
    """Structured output of one evaluation run, handed to reporting."""
    name: str
    scorer: str
    best_parameters: ParameterCombination
    best_cv_score: float
    score_records: List[ScoreRecord]
    train_score: float
    holdout_score: float
    split: Split
    predictions: np.ndarray
    actuals: np.ndarray
    direction: Direction
    feature_effects: Optional[pd.Series] = None

    def cv_results(self) -> pd.DataFrame:
        return results_frame(self.score_records, self.direction)


class HoldoutEvaluation:
    """Split, grid search, refit on the whole training set, then score the holdout once."""

    def __init__(self, dataset: Dataset, trainer, parameter_grid, scorer: Scorer = MSE,
                 n_folds: Optional[int] = None, splitter: Optional[DataSplitter] = None,
                 cross_validator: Optional[CrossValidator] = None, direction: Optional[Direction] = None,
                 name: str = "") -> None:
        self.name = name or getattr(trainer, "name", "model")
        self.dataset = dataset
        self.trainer = trainer
        self.grid = parameter_grid if isinstance(parameter_grid, HyperparameterGrid) else HyperparameterGrid(parameter_grid)
        self.scorer = scorer
        self.direction = direction or scorer.direction
        self.splitter = splitter or DataSplitter()
        self.cross_validator = cross_validator or CrossValidator()
        self.n_folds = self.cross_validator.n_splits if n_folds is None else n_folds

        self.state = EvaluationState.INITIALIZED
        self.error: Optional[BaseException] = None
        self.split_: Optional[Split] = None
        self.train_set: Optional[Dataset] = None
        self.holdout_set: Optional[Dataset] = None
        self.best_parameters: Optional[ParameterCombination] = None
        self.best_cv_score: Optional[float] = None
        self.score_records: List[ScoreRecord] = []
        self.predictor = None
        self.train_score, self.holdout_score = None, None
        self.predictions = None

    def _require(self, state: EvaluationState, step: str):
        if self.state is EvaluationState.FAILED:
            raise PipelineStateError(f"Evaluation {self.name!r} failed earlier: {self.error}")
        if self.state is not state:
            raise PipelineStateError(f"Cannot {step} from state {self.state.value}; expected {state.value}")

    @contextmanager
    def _step(self, required: EvaluationState, step: str, reached: EvaluationState):
        self._require(required, step)
        try:
            yield
        except Exception as e:
            self.state = EvaluationState.FAILED
            self.error = e
            raise
        self.state = reached

    def split(self) -> Split:
        with self._step(EvaluationState.INITIALIZED, "split", EvaluationState.SPLIT):
            self.split_ = self.splitter.split(self.dataset)
            self.train_set = self.split_.train(self.dataset)
            self.holdout_set = self.split_.holdout(self.dataset)
        return self.split_

    def tune(self) -> ParameterCombination:
        with self._step(EvaluationState.SPLIT, "tune", EvaluationState.GRID_SEARCHED):
            try:
                best, records = self.cross_validator.evaluate(
                    self.train_set, self.grid, self.n_folds, self.trainer, self.scorer, self.direction
                )
            finally:
                self.score_records = list(self.cross_validator.score_records)
            self.best_parameters = best
            self.best_cv_score = self.cross_validator.best.mean_score
        return self.best_parameters

    def refit(self):
        with self._step(EvaluationState.GRID_SEARCHED, "refit", EvaluationState.REFIT):
            self.predictor = self.trainer(self.train_set, self.best_parameters)
            self.train_score = self.scorer(self.predictor.predict(self.train_set.X), self.train_set.y.to_numpy())
        return self.predictor

    def evaluate(self) -> EvaluationResult:
        with self._step(EvaluationState.REFIT, "evaluate", EvaluationState.EVALUATED):
            self.predictions = np.asarray(self.predictor.predict(self.holdout_set.X))
            self.holdout_score = self.scorer(self.predictions, self.holdout_set.y.to_numpy())
        return self.result()

    def run(self) -> EvaluationResult:
        self.split()
        self.tune()
        self.refit()
        return self.evaluate()

    def feature_effects(self):
        return self.predictor.feature_effects() if isinstance(self.predictor, Predictor) else None

    def result(self) -> EvaluationResult:
        if self.state is not EvaluationState.EVALUATED:
            raise PipelineStateError(f"No result yet, evaluation is in state {self.state.value}")
        return EvaluationResult(
            name=self.name,
            scorer=self.scorer.name,
            best_parameters=self.best_parameters,
            best_cv_score=self.best_cv_score,
            score_records=list(self.score_records),
            train_score=self.train_score,
            holdout_score=self.holdout_score,
            split=self.split_,
            predictions=self.predictions,
            actuals=self.holdout_set.y.to_numpy(),
            direction=self.direction,
            feature_effects=self.feature_effects(),
        )


def evaluate_holdout(dataset: Dataset, trainer, parameter_grid, scorer: Scorer = MSE,
                     holdout_fraction: Optional[float] = None, n_folds: Optional[int] = None,
                     random_seed: Optional[int] = None, sampled_side=None) -> EvaluationResult:
    if parameter_grid is None:
        raise ConfigurationError("A parameter grid is required; use HyperparameterGrid.single for a plain fit")
    splitter = DataSplitter(holdout_fraction=holdout_fraction, random_seed=random_seed, sampled_side=sampled_side)
    cross_validator = CrossValidator(n_splits=n_folds, random_state=random_seed)
    evaluation = HoldoutEvaluation(dataset, trainer, parameter_grid, scorer=scorer,
                                   splitter=splitter, cross_validator=cross_validator)
    return evaluation.run()
