"""
Example datasets: the Rotterdam breast cancer cohort, a simulated cohort with
the same schema, and the IUD discontinuation data.
"""

import warnings
from io import StringIO
from typing import Dict, List, Optional, Tuple, Union

import numpy as np
import pandas as pd
import requests

from .data import Survival
from .data_validator import DataValidator

ROTTERDAM_URL = (
    "https://raw.githubusercontent.com/vincentarelbundock/Rdatasets/master/csv/survival/rotterdam.csv"
)

# dtime is in days, death is 1 for death and 0 for censored
ROTTERDAM_SCHEMA = {
    "time_col": "dtime",
    "event_col": "death",
    "covariates": ["age", "nodes", "size", "grade"],
    "categorical": ["size"],
    "levels": {"size": ["<=20", "20-50", ">50"]},
}

_ROW_NAME_COLUMNS = ["rownames", "unnamed: 0"]


def encode_covariates(df: pd.DataFrame,
                      covariates: List[str],
                      categorical: Optional[List[str]] = None,
                      levels: Optional[Dict[str, List]] = None) -> pd.DataFrame:
    """One-hot encode categorical covariates, dropping the first level.

    The dropped level becomes the reference category, so each remaining
    dummy's coefficient is a contrast against it. ``levels`` fixes the level
    order per column; otherwise levels are sorted.
    """
    categorical = list(categorical or [])
    levels = levels or {}
    unknown = [col for col in categorical if col not in covariates]
    if unknown:
        raise ValueError(f"Categorical columns must be listed as covariates: {unknown}")

    X = df[covariates].copy()
    for col in categorical:
        if col in levels:
            X[col] = pd.Categorical(X[col], categories=levels[col])
            if X[col].isna().any():
                raise ValueError(f"Column {col!r} has values outside {levels[col]}")
    if categorical:
        X = pd.get_dummies(X, columns=categorical, drop_first=True, dtype=float)
    return X.astype(float)


def load_cohort(path_or_buffer,
                time_col: str,
                event_col: str,
                covariates: List[str],
                categorical: Optional[List[str]] = None,
                levels: Optional[Dict[str, List]] = None) -> Tuple[pd.DataFrame, Survival]:
    """
    Read a one-row-per-subject CSV into covariates and survival outcomes

    Parameters
    ----------
    path_or_buffer : str, path or file-like
        CSV source accepted by ``pandas.read_csv``
    time_col : str
        Follow-up time column
    event_col : str
        Event indicator column (1 event, 0 censored)
    covariates : list of str
        Covariate columns
    categorical : list of str, optional
        Covariates to one-hot encode
    levels : dict, optional
        Level order per categorical column; the first level is the reference

    Returns
    -------
    X : pd.DataFrame
        Encoded covariates
    y : Survival
        Follow-up times and event indicators
    """
    data = pd.read_csv(path_or_buffer)

    # Exported R data frames carry their row names as the first column
    data = data.rename(columns=lambda x: x.lower())
    data = data.drop(columns=[c for c in _ROW_NAME_COLUMNS if c in data.columns])

    time_col, event_col = time_col.lower(), event_col.lower()
    covariates = [c.lower() for c in covariates]
    categorical = [c.lower() for c in (categorical or [])]
    levels = {k.lower(): v for k, v in (levels or {}).items()}

    used = [time_col, event_col] + covariates
    absent = [c for c in used if c not in data.columns]
    if absent:
        raise ValueError(f"Columns not found in data: {absent}")

    complete = data[used].notna().all(axis=1)
    n_dropped = int((~complete).sum())
    if n_dropped:
        warnings.warn(f"Dropped {n_dropped} rows with missing values in {used}")
    data = data.loc[complete].reset_index(drop=True)

    DataValidator().validate_survival(data[time_col], data[event_col])

    X = encode_covariates(data, covariates, categorical, levels)
    y = Survival(time=data[time_col].values, event=data[event_col].values)
    return X, y


def fetch_rotterdam(url: str = ROTTERDAM_URL,
                    timeout: float = 30) -> Tuple[pd.DataFrame, Survival]:
    """Download the Rotterdam breast cancer cohort and load it with its schema."""
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return load_cohort(StringIO(response.text), **ROTTERDAM_SCHEMA)


def simulate_cohort(n_samples: int = 500,
                    random_state: Optional[int] = None,
                    coefficients: Optional[Dict[str, float]] = None,
                    as_frame: bool = False) -> Union[Tuple[pd.DataFrame, Survival], pd.DataFrame]:
    """
    Simulate a cohort with the Rotterdam schema

    Event times are exponential with a log-hazard linear in age, nodes,
    size and grade. Censoring times are uniform over the follow-up window.

    Parameters
    ----------
    n_samples : int, default=500
        Number of subjects
    random_state : int, optional
        Seed for the generator
    coefficients : dict, optional
        Log-hazard coefficients keyed by age, nodes, size_20-50, size_>50, grade
    as_frame : bool, default=False
        Return the raw CSV-shaped frame instead of ``(X, y)``

    Returns
    -------
    (X, y) or pd.DataFrame
    """
    rng = np.random.RandomState(random_state)
    beta = {"age": 0.01, "nodes": 0.08, "size_20-50": 0.4, "size_>50": 0.7, "grade": 0.35}
    if coefficients is not None:
        beta.update(coefficients)

    age = np.clip(rng.normal(55, 13, n_samples), 24, 90).round()
    nodes = rng.poisson(2.5, n_samples) * rng.binomial(1, 0.5, n_samples)
    size = rng.choice(["<=20", "20-50", ">50"], size=n_samples, p=[0.45, 0.45, 0.10])
    grade = rng.choice([2, 3], size=n_samples, p=[0.3, 0.7])

    lp = (beta["age"] * (age - 55)
          + beta["nodes"] * nodes
          + beta["size_20-50"] * (size == "20-50")
          + beta["size_>50"] * (size == ">50")
          + beta["grade"] * (grade - 2))
    event_time = rng.exponential(scale=4000 / np.exp(lp))
    censor_time = rng.uniform(300, 7000, n_samples)

    dtime = np.ceil(np.minimum(event_time, censor_time))
    death = (event_time <= censor_time).astype(int)

    frame = pd.DataFrame({
        "pid": np.arange(1, n_samples + 1),
        "age": age,
        "nodes": nodes,
        "size": size,
        "grade": grade,
        "dtime": dtime,
        "death": death,
    })
    if as_frame:
        return frame

    covariates = ROTTERDAM_SCHEMA["covariates"]
    X = encode_covariates(frame, covariates, ROTTERDAM_SCHEMA["categorical"],
                          ROTTERDAM_SCHEMA["levels"])
    y = Survival(time=frame["dtime"].values, event=frame["death"].values)
    return X, y


def iud_example() -> Survival:
    """
    Times to discontinuation of an intrauterine device for eighteen women

    Nine of the eighteen discontinuation times are observed events; the
    other nine are right-censored.
    """
    time = np.array([10, 13, 18, 19, 23, 30, 36, 38, 54,
                     56, 59, 75, 93, 97, 104, 107, 107, 107])
    event = np.array([1, 0, 0, 1, 0, 1, 1, 0, 0,
                      0, 1, 1, 1, 1, 0, 1, 0, 0])
    return Survival(time=time, event=event)
