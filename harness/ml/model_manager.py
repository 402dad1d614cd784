import joblib
import pandas as pd
from typing import List, Optional
from config import settings
from harness.ml.cross_validator import CrossValidator
from harness.ml.data_splitter import DataSplitter, Split
from harness.ml.dataset_preparation import Dataset
from harness.ml.holdout_evaluation import HoldoutEvaluation
from harness.ml.model_record import ModelRecord
from harness.ml.parameter_grid import HyperparameterGrid
from harness.ml.scoring import MSE, Scorer
from harness.ml.tune_config import TuneConfig
from harness.utils.exceptions import ConfigurationError
from harness.utils.file_utils import create_dated_directory


class FixedSplitter(DataSplitter):
    """Hands every candidate the same, already computed split."""

    def __init__(self, split: Split) -> None:
        super().__init__(sampled_side=split.sampled_side, random_seed=split.random_seed)
        self.fixed = split

    def split(self, dataset, *args, **kwargs) -> Split:
        return self.fixed


class Manager:
    """Evaluates several candidate models on one shared split and compares their holdout scores.

    `n_folds`, when given, overrides the fold count each candidate brings with its tuning entry.
    """

    def __init__(self, dataset: Dataset, scorer: Scorer = MSE, splitter: Optional[DataSplitter] = None,
                 n_folds: Optional[int] = None, manager_name="comparison", output_directory=None,
                 verbose: Optional[bool] = None):
        self.dataset = dataset
        self.scorer = scorer
        self.splitter = splitter or DataSplitter()
        self.n_folds = n_folds
        self.records: List[ModelRecord] = []
        self.output_directory = output_directory if output_directory is not None else settings.models_directory
        self.manager_name = manager_name
        self.model_directory = None
        self.verbose = settings.verbose if verbose is None else verbose
        self.split_: Optional[Split] = None

    def add_candidate(self, name: str, trainer, parameter_grid,
                      cross_validator: Optional[CrossValidator] = None) -> ModelRecord:
        if any(record.name == name for record in self.records):
            raise ConfigurationError(f"Candidate {name!r} already added")
        grid = parameter_grid if isinstance(parameter_grid, HyperparameterGrid) else HyperparameterGrid(parameter_grid)
        record = ModelRecord(name=name, trainer=trainer, grid=grid, cross_validator=cross_validator)
        self.records.append(record)
        return record

    def add_tune_config(self, name: str, tune_config: TuneConfig) -> ModelRecord:
        return self.add_candidate(name, tune_config.trainer(), tune_config.grid(),
                                  cross_validator=tune_config.cross_validator())

    def shared_split(self) -> Split:
        if self.split_ is None:
            self.split_ = self.splitter.split(self.dataset)
        return self.split_

    def train_candidate(self, record: ModelRecord):
        evaluation = HoldoutEvaluation(
            self.dataset,
            record.trainer,
            record.grid,
            scorer=self.scorer,
            n_folds=self.n_folds,
            splitter=FixedSplitter(self.shared_split()),
            cross_validator=record.cross_validator or CrossValidator(),
            name=record.name,
        )
        record.evaluation = evaluation
        record.result = evaluation.run()
        if self.verbose:
            print(f"{record.name}: best {dict(record.result.best_parameters)} "
                  f"cv {self.scorer.name}={record.result.best_cv_score:.4f} "
                  f"holdout {self.scorer.name}={record.result.holdout_score:.4f}")

    def train_all(self):
        if not self.records:
            raise ConfigurationError("No candidates to compare")
        for record in self.records:
            self.train_candidate(record)
        if self.verbose:
            print("\n Training complete.")

    def comparison(self) -> pd.DataFrame:
        rows = []
        for record in self.records:
            if record.result is None:
                continue
            rows.append({
                "model": record.name,
                "best_parameters": dict(record.result.best_parameters),
                f"cv_{self.scorer.name}": record.result.best_cv_score,
                f"train_{self.scorer.name}": record.result.train_score,
                f"holdout_{self.scorer.name}": record.result.holdout_score,
            })
        frame = pd.DataFrame(rows)
        if not frame.empty:
            frame = frame.sort_values(
                f"holdout_{self.scorer.name}",
                ascending=self.scorer.direction == "minimize",
                kind="stable",
            ).reset_index(drop=True)
        return frame

    def best_candidate(self) -> ModelRecord:
        ranked = self.comparison()
        if ranked.empty:
            raise ConfigurationError("No candidate has been evaluated")
        best_name = ranked.iloc[0]["model"]
        return next(record for record in self.records if record.name == best_name)

    def save_evaluation(self, record: ModelRecord):
        result = record.result
        with open(self.model_directory / "z_evaluation.txt", 'a') as file:
            file.write(f"\n=== {record.name} ===\n")
            file.write(f"best parameters: {dict(result.best_parameters)}\n")
            file.write(f"cv {result.scorer}: {result.best_cv_score}\n")
            file.write(f"train {result.scorer}: {result.train_score}\n")
            file.write(f"holdout {result.scorer}: {result.holdout_score}\n")
            file.write(f"train records: {len(result.split.train_indices)}, "
                       f"holdout records: {len(result.split.holdout_indices)}\n")
            if result.feature_effects is not None:
                file.write(f"feature effects:\n{result.feature_effects.round(4).to_string()}\n")

    def save_all(self):
        self.model_directory = create_dated_directory(self.output_directory, self.manager_name)
        for record in self.records:
            if record.result is None:
                continue
            joblib.dump(record.evaluation.predictor, self.model_directory / f"{record.name}.pkl")
            if self.verbose:
                print(f"saved {record.name} to {self.model_directory}/{record.name}.pkl")
            self.save_evaluation(record)
            record.result.cv_results().to_csv(self.model_directory / f"{record.name}_cross_validation.csv", index=False)
        self.comparison().to_csv(self.model_directory / "comparison.csv", index=False)
        return self.model_directory
