import numpy as np
import pytest
from harness.ml.parameter_grid import HyperparameterGrid, ParameterCombination, expand
from harness.utils.exceptions import ConfigurationError

def test_cartesian_product_order():
    combinations = expand({"a": [1, 2], "b": [10, 20]})
    assert [dict(c) for c in combinations] == [
        {"a": 1, "b": 10},
        {"a": 1, "b": 20},
        {"a": 2, "b": 10},
        {"a": 2, "b": 20},
    ]

def test_names_sorted_regardless_of_insertion_order():
    combinations = expand({"b": [10, 20], "a": [1, 2]})
    assert [(c["a"], c["b"]) for c in combinations] == [(1, 10), (1, 20), (2, 10), (2, 20)]

def test_values_keep_given_order():
    combinations = expand({"cost": [100, 0.1, 5]})
    assert [c["cost"] for c in combinations] == [100, 0.1, 5]

def test_single_candidate_is_one_combination():
    grid = HyperparameterGrid.single(alpha=0.5)
    assert len(grid) == 1
    assert grid.expand() == [{"alpha": 0.5}]

def test_numpy_candidates_accepted():
    combinations = expand({"alpha": np.array([0.1, 1.0])})
    assert [c["alpha"] for c in combinations] == [0.1, 1.0]

def test_none_is_a_valid_candidate():
    combinations = expand({"max_depth": [None, 3]})
    assert combinations[0]["max_depth"] is None

@pytest.mark.parametrize("ranges", [{}, {"a": []}, {"a": 3}, {"a": "abc"}, None])
def test_invalid_ranges(ranges):
    with pytest.raises(ConfigurationError):
        HyperparameterGrid(ranges)

def test_combination_is_immutable_and_hashable():
    combination = ParameterCombination({"a": 1, "b": (4,)})
    with pytest.raises(TypeError):
        combination["a"] = 2
    assert combination == {"a": 1, "b": (4,)}
    assert len({combination, ParameterCombination({"a": 1, "b": (4,)})}) == 1

def test_combination_unpacks_as_keywords():
    combination = ParameterCombination({"C": 1.0, "gamma": 0.5})

    def fit(C, gamma):
        return C + gamma

    assert fit(**combination) == 1.5

def test_equal_combinations_hash_equal():
    forward = ParameterCombination({"a": 1, "b": 2})
    backward = ParameterCombination({"b": 2, "a": 1})
    assert forward == backward
    assert hash(forward) == hash(backward)
    assert len({forward, backward}) == 1

    plain = ParameterCombination({"alpha": 1})
    numpy_valued = ParameterCombination({"alpha": np.float64(1.0)})
    assert plain == numpy_valued
    assert hash(plain) == hash(numpy_valued)

def test_list_valued_combinations_are_hashable():
    first = ParameterCombination({"hidden_layer_sizes": [16, 8]})
    second = ParameterCombination({"hidden_layer_sizes": [16, 8]})
    assert hash(first) == hash(second)
    assert {first: "network"}[second] == "network"
