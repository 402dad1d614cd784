from dataclasses import dataclass
from functools import partial
from typing import Callable, Literal, Sequence
import numpy as np
import pandas as pd
from sklearn.metrics import accuracy_score, confusion_matrix, mean_pinball_loss, mean_squared_error
from harness.utils.exceptions import ConfigurationError, ScoringError

Direction = Literal["minimize", "maximize"]


def _as_arrays(predictions, actuals):
    predictions = np.asarray(predictions)
    actuals = np.asarray(actuals)
    if predictions.ndim != 1:
        if predictions.ndim == 2 and predictions.shape[1] == 1:
            predictions = predictions.ravel()
        else:
            raise ScoringError(f"Expected one prediction per record, got array of shape {predictions.shape}")
    if len(predictions) != len(actuals):
        raise ScoringError(f"Got {len(predictions)} predictions for {len(actuals)} records")
    if len(actuals) == 0:
        raise ScoringError("Cannot score an empty set of records")
    if pd.isna(predictions).any():
        raise ScoringError("Predictions contain missing values")
    return predictions, actuals


def squared_error(predictions, actuals) -> float:
    predictions, actuals = _as_arrays(predictions, actuals)
    try:
        return float(mean_squared_error(actuals.astype(float), predictions.astype(float)))
    except (TypeError, ValueError) as e:
        raise ScoringError(f"Regression scoring needs numeric predictions: {e}") from e


def misclassification_count(predictions, actuals) -> int:
    predictions, actuals = _as_arrays(predictions, actuals)
    return int(np.sum(predictions != actuals))


def misclassification_rate(predictions, actuals) -> float:
    predictions, actuals = _as_arrays(predictions, actuals)
    return float(np.mean(predictions != actuals))


def accuracy(predictions, actuals) -> float:
    predictions, actuals = _as_arrays(predictions, actuals)
    return float(accuracy_score(actuals, predictions))


def pinball_loss(predictions, actuals, quantile: float = 0.5) -> float:
    """Mean check loss of a `quantile` prediction; 0.5 gives half the mean absolute error."""
    predictions, actuals = _as_arrays(predictions, actuals)
    try:
        return float(mean_pinball_loss(actuals.astype(float), predictions.astype(float), alpha=quantile))
    except (TypeError, ValueError) as e:
        raise ScoringError(f"Quantile scoring needs numeric predictions: {e}") from e


@dataclass(frozen=True)
class Scorer:
    """A metric plus the direction in which it improves."""
    name: str
    metric: Callable[[Sequence, Sequence], float]
    direction: Direction = "minimize"

    def __call__(self, predictions, actuals) -> float:
        return self.metric(predictions, actuals)


MSE = Scorer("mse", squared_error, "minimize")
MISCLASSIFICATIONS = Scorer("misclassifications", misclassification_count, "minimize")
ERROR_RATE = Scorer("error_rate", misclassification_rate, "minimize")
ACCURACY = Scorer("accuracy", accuracy, "maximize")


def pinball_scorer(quantile: float) -> Scorer:
    if not 0 < quantile < 1:
        raise ConfigurationError(f"quantile must be strictly between 0 and 1, got {quantile}")
    return Scorer(f"pinball_{quantile:g}", partial(pinball_loss, quantile=quantile), "minimize")


PINBALL_MEDIAN = pinball_scorer(0.5)
CLASSIFICATION_SCORERS = (MISCLASSIFICATIONS, ERROR_RATE, ACCURACY)

SCORERS = {scorer.name: scorer for scorer in (MSE, PINBALL_MEDIAN) + CLASSIFICATION_SCORERS}


def get_scorer(name: str) -> Scorer:
    """Scorer by name; `pinball_<q>` builds the check loss for any quantile q."""
    if name in SCORERS:
        return SCORERS[name]
    if name.startswith("pinball_"):
        try:
            quantile = float(name[len("pinball_"):])
        except ValueError:
            raise KeyError(f"Cannot read a quantile from scorer name {name!r}") from None
        return pinball_scorer(quantile)
    raise KeyError(f"Unknown scorer {name!r}, choose from {sorted(SCORERS)} or pinball_<quantile>")


def contingency_table(predictions, actuals) -> pd.DataFrame:
    """Predicted labels as rows, true labels as columns."""
    predictions, actuals = _as_arrays(predictions, actuals)
    labels = sorted(set(predictions.tolist()) | set(actuals.tolist()), key=str)
    table = confusion_matrix(actuals, predictions, labels=labels).T
    return pd.DataFrame(
        table,
        index=pd.Index(labels, name="predict"),
        columns=pd.Index(labels, name="truth"),
    )


def binarize(scores, threshold: float = 0.0, positive=1, negative=-1) -> np.ndarray:
    """Map continuous decision scores to a positive/negative label pair."""
    scores = np.asarray(scores, dtype=float)
    return np.where(scores >= threshold, positive, negative)


def argmax_labels(probabilities, classes) -> np.ndarray:
    """Pick the most probable class for each row of a probability matrix."""
    probabilities = np.asarray(probabilities)
    if probabilities.ndim != 2 or probabilities.shape[1] != len(classes):
        raise ScoringError(
            f"Expected a (n, {len(classes)}) probability matrix, got shape {probabilities.shape}"
        )
    return np.asarray(classes)[probabilities.argmax(axis=1)]
