from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import numpy as np
from config import settings
from harness.ml.base_model import EstimatorTrainer
from harness.ml.cross_validator import CrossValidator
from harness.ml.parameter_grid import HyperparameterGrid
from harness.ml.scoring import Scorer, get_scorer
from harness.utils.exceptions import ConfigurationError
from harness.utils.file_utils import load_yaml


def powers_of(base: float, start: int, stop: int) -> List[float]:
    """base**start .. base**stop, both ends included."""
    step = 1 if stop >= start else -1
    return [float(base) ** exponent for exponent in range(start, stop + step, step)]


def log_sequence(start: float, stop: float, length: int, base: float = 10.0) -> List[float]:
    """`length` values evenly spaced in exponent from base**start to base**stop."""
    if length < 1:
        raise ConfigurationError(f"length must be positive, got {length}")
    return np.logspace(start, stop, num=length, base=base).tolist()


def parse_range(name: str, spec: Any) -> List[Any]:
    """A literal list, or {"powers": {...}} / {"logspace": {...}} shorthand."""
    if isinstance(spec, list):
        return spec
    if isinstance(spec, dict) and len(spec) == 1:
        kind, args = next(iter(spec.items()))
        if kind == "powers":
            return powers_of(args.get("base", 2), args["start"], args["stop"])
        if kind == "logspace":
            return log_sequence(args["start"], args["stop"], args["length"], args.get("base", 10.0))
    raise ConfigurationError(f"Cannot interpret candidates for {name!r}: {spec!r}")


@dataclass
class TuneConfig:
    """Configuration for a cross-validated grid search over one model family."""
    architecture: str
    parameter_ranges: Dict[str, List[Any]]
    scoring: str = "mse"
    n_folds: int = field(default_factory=lambda: settings.n_folds)
    shuffle: bool = field(default_factory=lambda: settings.shuffle_folds)
    n_jobs: int = field(default_factory=lambda: settings.n_jobs)
    random_state: int = field(default_factory=lambda: settings.random_state)

    def grid(self) -> HyperparameterGrid:
        return HyperparameterGrid(self.parameter_ranges)

    def scorer(self) -> Scorer:
        return get_scorer(self.scoring)

    def trainer(self) -> EstimatorTrainer:
        if self.architecture not in settings.model_architectures:
            raise ConfigurationError(f"Unknown architecture {self.architecture!r}")
        return EstimatorTrainer.from_settings(self.architecture)

    def cross_validator(self) -> CrossValidator:
        return CrossValidator(n_splits=self.n_folds, shuffle=self.shuffle,
                              random_state=self.random_state, n_jobs=self.n_jobs)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TuneConfig":
        data = dict(data)
        try:
            architecture = data.pop("architecture")
            raw_ranges = data.pop("parameters")
        except KeyError as e:
            raise ConfigurationError(f"Tuning entry is missing {e}") from e
        ranges = {name: parse_range(name, spec) for name, spec in raw_ranges.items()}
        return cls(architecture=architecture, parameter_ranges=ranges, **data)


# Ranges as the original analyses sweep them
LINEAR_SVM_COSTS = [0.001, 0.01, 0.1, 1, 5, 10, 100, 1000]
RADIAL_SVM_COSTS = powers_of(2, -5, 15)
RADIAL_SVM_GAMMAS = powers_of(2, -15, 3)
SHRINKAGE_LAMBDAS = log_sequence(10, -2, 100)

PRESETS: Dict[str, TuneConfig] = {
    "linear_svm": TuneConfig("linear_svm", {"C": LINEAR_SVM_COSTS}, scoring="error_rate"),
    "radial_svm": TuneConfig("radial_svm", {"C": RADIAL_SVM_COSTS, "gamma": RADIAL_SVM_GAMMAS}, scoring="error_rate"),
    "ridge": TuneConfig("ridge", {"alpha": SHRINKAGE_LAMBDAS}),
    "lasso": TuneConfig("lasso", {"alpha": SHRINKAGE_LAMBDAS}),
    "ols": TuneConfig("ols", {"fit_intercept": [True]}),
    "regression_tree": TuneConfig("regression_tree", {"max_leaf_nodes": [4, 8, 16, None]}),
    "bagged_trees": TuneConfig("bagged_trees", {"n_estimators": [500]}),
    "random_forest": TuneConfig("random_forest", {"n_estimators": [500]}),
    "boosted_trees": TuneConfig("boosted_trees", {"learning_rate": [0.01, 0.1, 1.0]}),
    "neural_network": TuneConfig("neural_network", {"hidden_layer_sizes": [(4,), (16,), (16, 8)]}),
    "quantile_regression": TuneConfig("quantile_regression", {"alpha": [0.0, 0.001, 0.01, 0.1]}, scoring="pinball_0.5"),
}


def get_preset(name: str) -> TuneConfig:
    if name not in PRESETS:
        raise ConfigurationError(f"Unknown tuning preset {name!r}, choose from {sorted(PRESETS)}")
    preset = PRESETS[name]
    return TuneConfig(preset.architecture, dict(preset.parameter_ranges), scoring=preset.scoring)


def load_tune_configs(path: Optional[str] = None) -> Dict[str, TuneConfig]:
    """Read named tuning entries from a YAML file."""
    data = load_yaml(path or settings.grid_config_path)
    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected a mapping of tuning entries in {path}")
    return {name: TuneConfig.from_dict(entry) for name, entry in data.items()}
