import numpy as np
import pandas as pd
import pytest
from harness.ml.dataset_preparation import Dataset, DatasetPreparation
from harness.utils.exceptions import ConfigurationError
from conftest import AUTO_MPG_COLUMNS

def test_load_whitespace_table_drops_missing(auto_mpg_file, capsys):
    prep = DatasetPreparation(verbose=True)
    dataset = prep.load(
        auto_mpg_file,
        label="mpg",
        names=AUTO_MPG_COLUMNS,
        sep=None,
        drop=["carname"],
        numeric=AUTO_MPG_COLUMNS[:-1],
    )
    assert len(dataset) == 4
    assert "carname" not in dataset.feature_names
    assert dataset.frame["horsepower"].dtype == np.float64
    assert "Dropped 1 rows" in capsys.readouterr().out

def test_categorical_columns(auto_mpg_file):
    prep = DatasetPreparation()
    frame = prep.read_table(auto_mpg_file, names=AUTO_MPG_COLUMNS, sep=None)
    dataset = prep.prepare(frame, "mpg", drop=["carname"], categorical=["origin"])
    assert isinstance(dataset.frame["origin"].dtype, pd.CategoricalDtype)

def test_keep_selects_columns_in_order():
    frame = pd.DataFrame({"a": [1, 2], "b": [3, 4], "c": [5, 6]})
    pruned = DatasetPreparation().prune_features(frame, keep=["c", "a"])
    assert list(pruned.columns) == ["c", "a"]

def test_keep_with_unknown_column():
    frame = pd.DataFrame({"a": [1, 2]})
    with pytest.raises(ConfigurationError):
        DatasetPreparation().prune_features(frame, keep=["a", "zzz"])

def test_recode_label():
    frame = pd.DataFrame({"x": [1.0, 2.0, 3.0], "AHD": ["No", "Yes", "No"]})
    dataset = DatasetPreparation().prepare(frame, "AHD", label_mapping={"No": -1, "Yes": 1})
    assert dataset.y.tolist() == [-1, 1, -1]

def test_recode_label_unknown_value():
    frame = pd.DataFrame({"x": [1.0, 2.0], "AHD": ["No", "Maybe"]})
    with pytest.raises(ConfigurationError):
        DatasetPreparation().prepare(frame, "AHD", label_mapping={"No": -1, "Yes": 1})

def test_missing_label_column():
    frame = pd.DataFrame({"x": [1.0, 2.0]})
    with pytest.raises(ConfigurationError):
        DatasetPreparation().prepare(frame, "y")

def test_clean_up_empty():
    with pytest.raises(ConfigurationError):
        DatasetPreparation().clean_up(pd.DataFrame())

@pytest.mark.parametrize("frame", [
    pd.DataFrame({"x": [], "y": []}),
    pd.DataFrame({"x": [1.0, None], "y": [1.0, 2.0]}),
    pd.DataFrame({"y": [1.0, 2.0]}),
])
def test_dataset_rejects_unclean_frames(frame):
    with pytest.raises(ConfigurationError):
        Dataset(frame, "y")

def test_dataset_rejects_non_frames():
    with pytest.raises(TypeError):
        Dataset([[1, 2]], "y")

def test_subset_renumbers_rows(ten_records):
    subset = ten_records.subset([7, 2])
    assert subset.frame.index.tolist() == [0, 1]
    assert subset.frame["id"].tolist() == [7, 2]
    assert subset.label == "y"
