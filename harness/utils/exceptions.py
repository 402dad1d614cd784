"""
File containing custom errors related strictly to the evaluation harness.
"""

class ConfigurationError(ValueError):
    """Raised when a split fraction, fold count, parameter grid or dataset is invalid. Detected before any training."""
    pass

class TrainingFailure(Exception):
    """Raised when a trainer fails for a given parameter combination and fold (folds count from 1)"""

    def __init__(self, message, combination=None, fold=None):
        super().__init__(message)
        self.combination = combination
        self.fold = fold

    def __reduce__(self):
        return (self.__class__, (self.args[0], self.combination, self.fold))

class ScoringError(Exception):
    """Raised when predictions are incompatible with what the scorer expects (folds count from 1)"""

    def __init__(self, message, combination=None, fold=None):
        super().__init__(message)
        self.combination = combination
        self.fold = fold

    def __reduce__(self):
        return (self.__class__, (self.args[0], self.combination, self.fold))

class DataLeakageError(Exception):
    """Raised when the training and holdout sets share records."""
    pass

class PipelineStateError(Exception):
    """Raised when an evaluation step is called before the steps it depends on have run"""
    pass
