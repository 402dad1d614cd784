from dataclasses import dataclass
import numpy as np
import matplotlib.pyplot as plt
from scipy import stats
from sklearn.metrics import roc_auc_score, roc_curve
from harness.ml.scoring import contingency_table
from harness.utils.exceptions import ScoringError

MIN_CORRELATION_RECORDS = 4


@dataclass(frozen=True)
class CorrelationTest:
    estimate: float
    p_value: float
    conf_int: tuple


def correlation_test(predictions, actuals, confidence: float = 0.95) -> CorrelationTest:
    """Pearson correlation between predictions and truth with a Fisher-z confidence interval."""
    predictions = np.asarray(predictions, dtype=float).ravel()
    actuals = np.asarray(actuals, dtype=float).ravel()
    if len(predictions) != len(actuals):
        raise ScoringError(f"Got {len(predictions)} predictions for {len(actuals)} records")
    if len(actuals) < MIN_CORRELATION_RECORDS:
        raise ScoringError(f"Correlation test needs at least {MIN_CORRELATION_RECORDS} records")
    r, p_value = stats.pearsonr(predictions, actuals)
    z = np.arctanh(np.clip(r, -0.999999, 0.999999))
    half_width = stats.norm.ppf(0.5 + confidence / 2) / np.sqrt(len(actuals) - 3)
    return CorrelationTest(float(r), float(p_value), (float(np.tanh(z - half_width)), float(np.tanh(z + half_width))))


def roc_points(actuals, scores, positive=1):
    """False positive rates, true positive rates and AUC for thresholded binary output."""
    actuals = np.asarray(actuals)
    if positive not in set(actuals.tolist()):
        raise ScoringError(f"Positive label {positive!r} never occurs in the truth")
    fpr, tpr, _ = roc_curve(actuals, scores, pos_label=positive)
    auc = roc_auc_score(actuals == positive, scores)
    return fpr, tpr, float(auc)


def format_report(result, classification=False) -> str:
    lines = [
        f"=== {result.name} ===",
        f"best parameters: {dict(result.best_parameters)}",
        f"cross-validated {result.scorer}: {result.best_cv_score:.4f}",
        f"train {result.scorer}: {result.train_score:.4f}",
        f"holdout {result.scorer}: {result.holdout_score:.4f}",
        f"train records: {len(result.split.train_indices)}, holdout records: {len(result.split.holdout_indices)}",
    ]
    if classification:
        lines.append("Contingency table (holdout):")
        lines.append(contingency_table(result.predictions, result.actuals).to_string())
    elif len(result.actuals) < MIN_CORRELATION_RECORDS:
        lines.append(f"correlation (holdout): n/a, needs at least {MIN_CORRELATION_RECORDS} records")
    else:
        test = correlation_test(result.predictions, result.actuals)
        lines.append(
            f"correlation (holdout): {test.estimate:.4f}, p={test.p_value:.3g}, "
            f"95% CI [{test.conf_int[0]:.4f}, {test.conf_int[1]:.4f}]"
        )
    if result.feature_effects is not None:
        lines.append("Feature effects (refit model):")
        lines.append(result.feature_effects.round(4).to_string())
    return "\n".join(lines)


def print_report(result, classification=False, verbose=True):
    report = format_report(result, classification=classification)
    if verbose:
        print(report)
    return report


def plot_cv_scores(result, parameter: str, log_scale: bool = True, ax=None):
    """Mean CV score against one parameter; other parameters held at their best values."""
    frame = result.cv_results()
    column = f"param_{parameter}"
    if column not in frame.columns:
        raise KeyError(f"{parameter!r} was not part of the grid")
    for name, value in result.best_parameters.items():
        other = f"param_{name}"
        if name != parameter:
            frame = frame[frame[other].apply(lambda v: v == value)]
    frame = frame.sort_values(column)
    if ax is None:
        _, ax = plt.subplots()
    ax.errorbar(frame[column], frame["mean_test_score"], yerr=frame["std_test_score"], marker="o")
    if log_scale:
        ax.set_xscale("log")
    ax.set_xlabel(parameter)
    ax.set_ylabel(f"cross-validated {result.scorer}")
    ax.set_title(result.name)
    return ax


def plot_roc(actuals, scores, positive=1, label=None, ax=None):
    fpr, tpr, auc = roc_points(actuals, scores, positive=positive)
    if ax is None:
        _, ax = plt.subplots()
    ax.plot(fpr, tpr, label=f"{label or 'model'} (AUC={auc:.3f})")
    ax.plot([0, 1], [0, 1], linestyle="--", color="grey")
    ax.set_xlabel("False positive rate")
    ax.set_ylabel("True positive rate")
    ax.legend()
    return ax
