from dataclasses import dataclass
from typing import Iterable, List, Optional
import pandas as pd
from config import settings
from harness.utils.exceptions import ConfigurationError


@dataclass(frozen=True)
class Dataset:
    """A clean, labelled table. Rows are records, `label` names the response column."""
    frame: pd.DataFrame
    label: str

    def __post_init__(self):
        if not isinstance(self.frame, pd.DataFrame):
            raise TypeError(f"`frame` must be a pandas DataFrame, not {type(self.frame)}")
        if self.frame.empty:
            raise ConfigurationError("Dataset is empty")
        if self.label not in self.frame.columns:
            raise ConfigurationError(f"Label column {self.label!r} not in {list(self.frame.columns)}")
        if self.frame.isna().any().any():
            missing = self.frame.columns[self.frame.isna().any()].tolist()
            raise ConfigurationError(f"Dataset has missing values in columns {missing}")
        if len(self.frame.columns) < 2:
            raise ConfigurationError("Dataset needs at least one feature column besides the label")

    def __len__(self):
        return len(self.frame)

    @property
    def feature_names(self) -> List[str]:
        return [col for col in self.frame.columns if col != self.label]

    @property
    def X(self) -> pd.DataFrame:
        return self.frame.drop(columns=[self.label])

    @property
    def y(self) -> pd.Series:
        return self.frame[self.label]

    def subset(self, indices) -> "Dataset":
        """Rows at the given positions, renumbered from zero."""
        return Dataset(self.frame.iloc[list(indices)].reset_index(drop=True), self.label)


class DatasetPreparation:
    def __init__(self, missing_markers: Optional[Iterable[str]] = None, verbose: bool = False) -> None:
        self.missing_markers = list(missing_markers) if missing_markers is not None else list(settings.missing_markers)
        self.verbose = verbose

    def read_table(self, path, names=None, sep=",", header="infer") -> pd.DataFrame:
        """Read a delimited file. `sep=None` splits on runs of whitespace."""
        return pd.read_csv(
            path,
            sep=r"\s+" if sep is None else sep,
            names=names,
            header=None if names else header,
            na_values=self.missing_markers,
        )

    def prune_features(self, df: pd.DataFrame, keep=None, drop=None) -> pd.DataFrame:
        keep_cols = list(df.columns) if keep is None else [col for col in keep if col in df.columns]
        if keep is not None and len(keep_cols) < len(list(keep)):
            absent = [col for col in keep if col not in df.columns]
            raise ConfigurationError(f"Columns not found: {absent}")
        drop = set(drop or [])
        return df[[col for col in keep_cols if col not in drop]].copy()

    def set_types(self, df: pd.DataFrame, numeric=None, categorical=None) -> pd.DataFrame:
        numeric = [col for col in (numeric or []) if col in df.columns]
        categorical = [col for col in (categorical or []) if col in df.columns]
        if numeric:
            df[numeric] = df[numeric].apply(pd.to_numeric, errors="coerce")
        for col in categorical:
            df[col] = df[col].astype("category")
        return df

    def clean_up(self, df: pd.DataFrame) -> pd.DataFrame:
        if df is None or df.empty:
            raise ConfigurationError("Input DataFrame is empty.")

        before_rows = len(df)
        df = df.dropna().reset_index(drop=True)

        if len(df) < before_rows and self.verbose:
            print(f"Warning: Dropped {before_rows - len(df)} rows with invalid or missing values.")
        return df

    def recode_label(self, df: pd.DataFrame, label: str, mapping: dict) -> pd.DataFrame:
        unknown = set(df[label].dropna().unique()) - set(mapping)
        if unknown:
            raise ConfigurationError(f"Label values without a mapping: {sorted(map(str, unknown))}")
        df[label] = df[label].map(mapping)
        return df

    def prepare(self, df: pd.DataFrame, label: str, keep=None, drop=None, numeric=None, categorical=None,
                label_mapping: Optional[dict] = None) -> Dataset:
        pruned = self.prune_features(df, keep=keep, drop=drop)
        if label not in pruned.columns:
            raise ConfigurationError(f"Label column {label!r} was pruned or is absent")
        typed = self.set_types(pruned, numeric=numeric, categorical=categorical)
        if label_mapping is not None:
            typed = self.recode_label(typed, label, label_mapping)
        return Dataset(self.clean_up(typed), label)

    def load(self, path, label: str, names=None, sep=",", **kwargs) -> Dataset:
        return self.prepare(self.read_table(path, names=names, sep=sep), label, **kwargs)
