from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional
import numpy as np
import pandas as pd
from sklearn.base import clone
from sklearn.compose import ColumnTransformer
from sklearn.dummy import DummyClassifier, DummyRegressor
from sklearn.ensemble import GradientBoostingRegressor, RandomForestClassifier, RandomForestRegressor
from sklearn.linear_model import Lasso, LinearRegression, QuantileRegressor, Ridge
from sklearn.neural_network import MLPClassifier, MLPRegressor
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder, StandardScaler
from sklearn.svm import SVC
from sklearn.tree import DecisionTreeRegressor
from config import ModelArchitecture, settings
from harness.ml.dataset_preparation import Dataset

ESTIMATORS = {
    "dummy_regressor": DummyRegressor,
    "dummy_classifier": DummyClassifier,
    "linear_regression": LinearRegression,
    "ridge": Ridge,
    "lasso": Lasso,
    "quantile_regressor": QuantileRegressor,
    "svc": SVC,
    "decision_tree_regressor": DecisionTreeRegressor,
    "random_forest_regressor": RandomForestRegressor,
    "random_forest_classifier": RandomForestClassifier,
    "gradient_boosting_regressor": GradientBoostingRegressor,
    "mlp_regressor": MLPRegressor,
    "mlp_classifier": MLPClassifier,
}


class Predictor(ABC):
    """Produces predictions for new records."""

    @abstractmethod
    def predict(self, X: pd.DataFrame) -> np.ndarray:
        pass

    def predict_one(self, record: Mapping[str, Any]):
        return self.predict(pd.DataFrame([dict(record)]))[0]

    def feature_effects(self):
        """Per-feature coefficients or importances of the fitted model, None if it has none."""
        return None


class ModelTrainer(ABC):
    """Fits a model on a training dataset with one parameter combination."""

    @abstractmethod
    def train(self, dataset: Dataset, parameters: Mapping[str, Any]) -> Predictor:
        pass

    def __call__(self, dataset: Dataset, parameters: Mapping[str, Any]) -> Predictor:
        return self.train(dataset, parameters)


class EstimatorPredictor(Predictor):
    def __init__(self, pipeline: Pipeline, feature_names) -> None:
        self.pipeline = pipeline
        self.feature_names = list(feature_names)

    def _select(self, X: pd.DataFrame) -> pd.DataFrame:
        missing = [col for col in self.feature_names if col not in X.columns]
        if missing:
            raise KeyError(f"Records are missing features {missing}")
        return X[self.feature_names]

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        return self.pipeline.predict(self._select(X))

    def decision_scores(self, X: pd.DataFrame) -> np.ndarray:
        """Continuous scores for ROC analysis: decision function, else positive-class probability."""
        X = self._select(X)
        if hasattr(self.pipeline, "decision_function"):
            return self.pipeline.decision_function(X)
        return self.pipeline.predict_proba(X)[:, -1]

    @property
    def estimator(self):
        return self.pipeline[-1]

    def feature_effects(self) -> Optional[pd.Series]:
        """Coefficients, else impurity importances, keyed by the preprocessed feature names.

        None when the fitted model exposes neither (e.g. a radial SVM or a neural network).
        Multi-row coefficients (several classes) come back as a DataFrame, one column per row.
        """
        estimator = self.estimator
        if hasattr(estimator, "coef_"):
            values = estimator.coef_
            values = np.asarray(values.toarray() if hasattr(values, "toarray") else values)
        elif hasattr(estimator, "feature_importances_"):
            values = np.asarray(estimator.feature_importances_)
        else:
            return None
        names = self.pipeline[:-1].get_feature_names_out()
        if values.ndim == 2 and values.shape[0] > 1:
            return pd.DataFrame(values.T, index=names)
        return pd.Series(values.ravel(), index=names, name="effect")


class EstimatorTrainer(ModelTrainer):
    """Wraps a scikit-learn estimator family; numeric columns are standardised and categoricals one-hot encoded."""

    def __init__(self, architecture: ModelArchitecture, name: Optional[str] = None) -> None:
        if architecture.estimator not in ESTIMATORS:
            raise KeyError(f"Unknown estimator {architecture.estimator!r}, choose from {sorted(ESTIMATORS)}")
        self.architecture = architecture
        self.name = name or architecture.estimator
        self.task = architecture.task
        self.model = ESTIMATORS[architecture.estimator](**architecture.params)

    @classmethod
    def from_settings(cls, architecture_name: str) -> "EstimatorTrainer":
        return cls(settings.model_architectures[architecture_name], name=architecture_name)

    def _preprocessor(self, X: pd.DataFrame) -> ColumnTransformer:
        categorical = [col for col in X.columns if not pd.api.types.is_numeric_dtype(X[col])]
        numeric = [col for col in X.columns if col not in categorical]
        transformers = []
        if numeric:
            transformers.append(("numeric", StandardScaler() if self.architecture.scale else "passthrough", numeric))
        if categorical:
            transformers.append(("categorical", OneHotEncoder(handle_unknown="ignore"), categorical))
        return ColumnTransformer(transformers, verbose_feature_names_out=False)

    def build_pipeline(self, X: pd.DataFrame, parameters: Mapping[str, Any]) -> Pipeline:
        estimator = clone(self.model).set_params(**dict(parameters))
        return Pipeline([("preprocess", self._preprocessor(X)), ("model", estimator)])

    def train(self, dataset: Dataset, parameters: Mapping[str, Any]) -> EstimatorPredictor:
        X, y = dataset.X, dataset.y
        pipeline = self.build_pipeline(X, parameters)
        pipeline.fit(X, y)
        return EstimatorPredictor(pipeline, X.columns)

