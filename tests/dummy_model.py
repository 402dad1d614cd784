import itertools
import threading
import numpy as np
from harness.ml.base_model import ModelTrainer, Predictor


class ConstantPredictor(Predictor):
    def __init__(self, value):
        self.value = value

    def predict(self, X):
        return np.full(len(X), self.value, dtype=float)


class MeanTrainer(ModelTrainer):
    """Predicts the training-set mean label; remembers every training set it saw."""

    def __init__(self):
        self.calls = []
        self._lock = threading.Lock()

    def train(self, dataset, parameters):
        with self._lock:
            self.calls.append((dataset, dict(parameters)))
        return ConstantPredictor(float(dataset.y.mean()))


class OffsetTrainer(ModelTrainer):
    """Ignores the data and predicts the `offset` parameter."""

    name = "offset"

    def train(self, dataset, parameters):
        return ConstantPredictor(float(parameters["offset"]))


class IdRecordingPredictor(Predictor):
    def __init__(self, log):
        self.log = log

    def predict(self, X):
        self.log.append(set(X["id"].tolist()))
        return np.zeros(len(X))


class IdRecordingTrainer(ModelTrainer):
    """Logs which record ids each fold trained on and was validated on."""

    def __init__(self):
        self.fit_ids = []
        self.validation_ids = []

    def train(self, dataset, parameters):
        self.fit_ids.append(set(dataset.X["id"].tolist()))
        return IdRecordingPredictor(self.validation_ids)


class FailingTrainer(ModelTrainer):
    """Fails for one offset value, otherwise behaves like OffsetTrainer."""

    def __init__(self, failing_offset):
        self.failing_offset = failing_offset

    def train(self, dataset, parameters):
        if parameters["offset"] == self.failing_offset:
            raise RuntimeError("solver did not converge")
        return ConstantPredictor(float(parameters["offset"]))


class WrongLengthPredictor(Predictor):
    def predict(self, X):
        return np.zeros(len(X) + 1)


def wrong_length_trainer(dataset, parameters):
    return WrongLengthPredictor()


class SequenceScorer:
    """Returns preset scores in call order, regardless of the predictions."""

    def __init__(self, scores):
        self._scores = itertools.cycle(scores)

    def __call__(self, predictions, actuals):
        return next(self._scores)
