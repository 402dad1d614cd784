import os
from datetime import datetime
from pathlib import Path
import yaml
from config import PROJECT_ROOT


def resolve_path(path) -> Path:
    path = Path(path)
    return path if path.is_absolute() else PROJECT_ROOT / path


def load_yaml(path):
    with open(resolve_path(path), "r") as f:
        return yaml.safe_load(f)


def create_dated_directory(output_directory, name) -> Path:
    """<output_directory>/<YYYY-MM-DD>/<name>N, N counting earlier runs that day."""
    if os.path.isfile(output_directory):
        raise ValueError("output_directory is a file")
    current_date = datetime.today().strftime('%Y-%m-%d')
    current_directory = Path(output_directory) / current_date
    os.makedirs(current_directory, exist_ok=True)
    model_ref = str(len(os.listdir(current_directory)))
    if model_ref == '0': model_ref = ''
    current_model_dir = current_directory / f"{name}{model_ref}"
    os.makedirs(current_model_dir)
    return current_model_dir
