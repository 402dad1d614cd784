from dataclasses import dataclass
from typing import Any, Optional
from harness.ml.cross_validator import CrossValidator
from harness.ml.holdout_evaluation import EvaluationResult, HoldoutEvaluation
from harness.ml.parameter_grid import HyperparameterGrid

@dataclass
class ModelRecord:
    """Container for one candidate's trainer, grid, evaluation run and result."""
    name: str
    trainer: Any
    grid: HyperparameterGrid
    cross_validator: Optional[CrossValidator] = None
    evaluation: Optional[HoldoutEvaluation] = None
    result: Optional[EvaluationResult] = None
