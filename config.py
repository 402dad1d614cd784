from pathlib import Path
from typing import Any, Dict, Literal
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parent

class ModelArchitecture(BaseModel):
    estimator: str
    task: Literal["regression", "classification"] = "regression"
    params: Dict[str, Any] = {}
    scale: bool = True

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="HARNESS_", env_nested_delimiter="__", protected_namespaces=())

    models_directory: str = "models"
    grid_config_path: str = "grids.yml"
    random_state: int = 42
    holdout_fraction: float = 0.2
    sampled_side: Literal["holdout", "train"] = "holdout"
    n_folds: int = 10
    shuffle_folds: bool = True
    n_jobs: int = 1
    missing_markers: list[str] = ["?", "NA"]
    model_architectures: Dict[str, ModelArchitecture] = {
        "mean": ModelArchitecture(estimator="dummy_regressor", params={"strategy": "mean"}, scale=False),
        "ols": ModelArchitecture(estimator="linear_regression"),
        "ridge": ModelArchitecture(estimator="ridge", params={"max_iter": 10000}),
        "lasso": ModelArchitecture(estimator="lasso", params={"max_iter": 10000}),
        "quantile_regression": ModelArchitecture(
            estimator="quantile_regressor",
            params={"quantile": 0.5, "alpha": 0.0, "solver": "highs"},
        ),
        "linear_svm": ModelArchitecture(estimator="svc", task="classification", params={"kernel": "linear"}),
        "radial_svm": ModelArchitecture(estimator="svc", task="classification", params={"kernel": "rbf"}),
        "regression_tree": ModelArchitecture(estimator="decision_tree_regressor", params={"random_state": 42}, scale=False),
        "bagged_trees": ModelArchitecture(
            estimator="random_forest_regressor",
            params={"max_features": None, "random_state": 42},
            scale=False,
        ),
        "random_forest": ModelArchitecture(
            estimator="random_forest_regressor",
            params={"max_features": 1 / 3, "random_state": 42},
            scale=False,
        ),
        "boosted_trees": ModelArchitecture(
            estimator="gradient_boosting_regressor",
            params={"n_estimators": 100, "learning_rate": 0.1, "random_state": 42},
            scale=False,
        ),
        "neural_network": ModelArchitecture(
            estimator="mlp_regressor",
            params={"hidden_layer_sizes": (16,), "max_iter": 2000, "random_state": 42},
        ),
        "neural_network_classifier": ModelArchitecture(
            estimator="mlp_classifier",
            task="classification",
            params={"hidden_layer_sizes": (16,), "max_iter": 2000, "random_state": 42},
        ),
    }
    verbose: bool = True

settings = Settings()
