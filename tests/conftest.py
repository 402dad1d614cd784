import matplotlib
matplotlib.use("Agg")

import pandas as pd
import pytest
from harness.ml.dataset_preparation import Dataset
from tests.dummy_model import MeanTrainer, OffsetTrainer
from tests.helpers import make_blobs_dataset, make_linear_dataset

@pytest.fixture
def ten_records():
    """The ten-record regression dataset used across the harness tests."""
    frame = pd.DataFrame({
        "id": range(10),
        "x": [0.5, 1.5, 2.0, 3.5, 4.0, 5.5, 6.0, 7.5, 8.0, 9.5],
        "y": [3.0, 1.0, 4.0, 1.0, 5.0, 9.0, 2.0, 6.0, 5.0, 3.0],
    })
    return Dataset(frame, "y")

@pytest.fixture
def mean_trainer():
    return MeanTrainer()

@pytest.fixture
def offset_trainer():
    return OffsetTrainer()

@pytest.fixture
def linear_dataset():
    return make_linear_dataset()

@pytest.fixture
def blobs_dataset():
    return make_blobs_dataset()

@pytest.fixture
def auto_mpg_file(tmp_path):
    """Whitespace-separated, headerless file in the auto-mpg layout, one row with a '?' horsepower."""
    rows = [
        '18.0   8   307.0      130.0      3504.      12.0   70  1\t"chevrolet chevelle malibu"',
        '15.0   8   350.0      165.0      3693.      11.5   70  1\t"buick skylark 320"',
        '25.0   4   98.00      ?          2046.      19.0   71  1\t"ford pinto"',
        '24.0   4   113.0      95.00      2372.      15.0   70  3\t"toyota corona mark ii"',
        '26.0   4   97.00      46.00      1835.      20.5   70  2\t"volkswagen 1131 deluxe sedan"',
    ]
    path = tmp_path / "auto-mpg.data"
    path.write_text("\n".join(rows) + "\n")
    return path

AUTO_MPG_COLUMNS = [
    "mpg", "cylinders", "displacement", "horsepower", "weight", "acceleration",
    "modelyear", "origin", "carname",
]
