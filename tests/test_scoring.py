import numpy as np
import pytest
from harness.ml.scoring import (
    ACCURACY,
    ERROR_RATE,
    MISCLASSIFICATIONS,
    MSE,
    argmax_labels,
    binarize,
    contingency_table,
    get_scorer,
    pinball_loss,
)
from harness.utils.exceptions import ConfigurationError, ScoringError

def test_mse():
    assert MSE([1, 2, 3], [1, 2, 5]) == pytest.approx(4 / 3)

def test_mse_symmetric_and_zero_on_perfect_fit():
    assert MSE([1.0, 4.0], [2.0, 2.0]) == MSE([2.0, 2.0], [1.0, 4.0])
    assert MSE([1.5, 2.5], [1.5, 2.5]) == 0.0

def test_mse_accepts_column_vector():
    assert MSE(np.array([[1.0], [3.0]]), [1.0, 1.0]) == pytest.approx(2.0)

def test_misclassification_count_multiclass():
    predictions = ["a", "b", "c", "a", "c"]
    truth = ["a", "c", "c", "b", "c"]
    assert MISCLASSIFICATIONS(predictions, truth) == 2
    assert ERROR_RATE(predictions, truth) == pytest.approx(0.4)
    assert ACCURACY(predictions, truth) == pytest.approx(0.6)

def test_directions():
    assert MSE.direction == "minimize"
    assert MISCLASSIFICATIONS.direction == "minimize"
    assert ACCURACY.direction == "maximize"

def test_length_mismatch_raises():
    with pytest.raises(ScoringError):
        MSE([1, 2], [1, 2, 3])

def test_matrix_predictions_raise():
    with pytest.raises(ScoringError):
        ACCURACY(np.zeros((3, 2)), [0, 1, 1])

def test_missing_predictions_raise():
    with pytest.raises(ScoringError):
        MSE([1.0, float("nan")], [1.0, 2.0])

def test_non_numeric_regression_predictions_raise():
    with pytest.raises(ScoringError):
        MSE(["a", "b"], [1.0, 2.0])

def test_contingency_table():
    table = contingency_table([1, 1, -1, -1], [1, -1, -1, -1])
    assert table.loc[1, 1] == 1
    assert table.loc[1, -1] == 1
    assert table.loc[-1, -1] == 2
    assert table.loc[-1, 1] == 0
    assert table.index.name == "predict"
    assert table.columns.name == "truth"

def test_binarize():
    assert binarize([-0.5, 0.0, 2.0]).tolist() == [-1, 1, 1]
    assert binarize([0.2, 0.8], threshold=0.5, positive="Yes", negative="No").tolist() == ["No", "Yes"]

def test_argmax_labels():
    probabilities = [[0.1, 0.7, 0.2], [0.8, 0.1, 0.1]]
    assert argmax_labels(probabilities, [0, 1, 2]).tolist() == [1, 0]

def test_argmax_labels_wrong_width():
    with pytest.raises(ScoringError):
        argmax_labels([[0.5, 0.5]], [0, 1, 2])

def test_get_scorer():
    assert get_scorer("mse") is MSE
    with pytest.raises(KeyError):
        get_scorer("r2")

def test_pinball_loss_weights_sides_by_quantile():
    # under-prediction costs the quantile, over-prediction its complement
    assert pinball_loss([0.0], [1.0], quantile=0.8) == pytest.approx(0.8)
    assert pinball_loss([2.0], [1.0], quantile=0.8) == pytest.approx(0.2)
    assert pinball_loss([0.0, 2.0], [1.0, 1.0]) == pytest.approx(0.5)

def test_pinball_scorer_by_name():
    scorer = get_scorer("pinball_0.8")
    assert scorer.name == "pinball_0.8"
    assert scorer.direction == "minimize"
    assert scorer([0.0], [1.0]) == pytest.approx(0.8)
    assert get_scorer("pinball_0.5") is get_scorer("pinball_0.5")

def test_pinball_scorer_rejects_bad_quantile():
    with pytest.raises(KeyError):
        get_scorer("pinball_high")
    with pytest.raises(ConfigurationError):
        get_scorer("pinball_1.5")
