from collections.abc import Mapping, Sequence
from typing import Any, Dict, List
import numpy as np
from sklearn.model_selection import ParameterGrid
from harness.utils.exceptions import ConfigurationError


def _hashable(value):
    """Hashable stand-in for a candidate value; equal values map to equal stand-ins."""
    if isinstance(value, np.ndarray):
        value = value.tolist()
    if isinstance(value, (list, tuple)):
        return tuple(_hashable(v) for v in value)
    if isinstance(value, dict):
        return frozenset((k, _hashable(v)) for k, v in value.items())
    return value


class ParameterCombination(Mapping):
    """Immutable, hashable mapping from parameter name to one candidate value."""

    def __init__(self, values: Dict[str, Any]):
        self._values = dict(values)

    def __getitem__(self, key):
        return self._values[key]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __hash__(self):
        return hash(frozenset((k, _hashable(v)) for k, v in self._values.items()))

    def __eq__(self, other):
        if isinstance(other, Mapping):
            return dict(self._values) == dict(other)
        return NotImplemented

    def __repr__(self):
        inner = ", ".join(f"{k}={v!r}" for k, v in self._values.items())
        return f"ParameterCombination({inner})"

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)


class HyperparameterGrid:
    """Cartesian product of candidate values. Names vary slowest in sorted order."""

    def __init__(self, parameter_ranges: Dict[str, Sequence]):
        self.parameter_ranges = self._validate(parameter_ranges)

    @staticmethod
    def _validate(parameter_ranges):
        if not isinstance(parameter_ranges, Mapping) or not parameter_ranges:
            raise ConfigurationError("Parameter grid must be a non-empty mapping of name -> candidate values")
        validated = {}
        for name, candidates in parameter_ranges.items():
            if isinstance(candidates, np.ndarray):
                candidates = candidates.tolist()
            if isinstance(candidates, (str, bytes)) or not isinstance(candidates, Sequence):
                raise ConfigurationError(f"Candidates for {name!r} must be a sequence, got {type(candidates).__name__}")
            if len(candidates) == 0:
                raise ConfigurationError(f"Candidates for {name!r} are empty")
            validated[name] = list(candidates)
        return validated

    @classmethod
    def single(cls, **parameters) -> "HyperparameterGrid":
        """Degenerate grid: exactly one combination, for a plain fit without tuning."""
        return cls({name: [value] for name, value in parameters.items()})

    def expand(self) -> List[ParameterCombination]:
        return [ParameterCombination(params) for params in ParameterGrid(self.parameter_ranges)]

    def __len__(self):
        return len(ParameterGrid(self.parameter_ranges))

    def __iter__(self):
        return iter(self.expand())


def expand(parameter_ranges: Dict[str, Sequence]) -> List[ParameterCombination]:
    return HyperparameterGrid(parameter_ranges).expand()
