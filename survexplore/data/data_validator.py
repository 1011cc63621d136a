"""
Data validation utilities for survival data and covariates
"""

import numpy as np
import pandas as pd
from typing import Union

class DataValidator:
    """Validator for survival outcomes and regression covariates"""

    def validate_survival(self,
                         time: Union[np.ndarray, pd.Series],
                         event: Union[np.ndarray, pd.Series]) -> bool:
        """Validate survival data

        Args:
            time: Array of event/censoring times
            event: Array of event indicators (0=censored, 1=event)

        Returns:
            True if data is valid, raises ValueError otherwise
        """
        # Convert to numpy arrays
        time = np.asarray(time, dtype=float)
        event = np.asarray(event)

        # Check lengths match
        if len(time) != len(event):
            raise ValueError("Time and event arrays must have same length")

        if len(time) == 0:
            raise ValueError("Survival data must contain at least one subject")

        if np.any(np.isnan(time)):
            raise ValueError("Event times cannot be missing")

        # Check for negative times
        if np.any(time < 0):
            raise ValueError("Event times cannot be negative")

        # Check event indicators are valid
        if not np.all(np.isin(event, [0, 1])):
            raise ValueError("Event indicators must be 0 or 1")

        return True

    def validate_covariates(self, X: pd.DataFrame, n_samples: int = None) -> bool:
        """Validate a covariate matrix for Cox regression

        Args:
            X: DataFrame of covariates, one row per subject
            n_samples: Expected number of rows, if known

        Returns:
            True if data is valid, raises ValueError otherwise
        """
        if not isinstance(X, pd.DataFrame):
            raise ValueError("Covariates must be a pandas DataFrame")

        if X.shape[1] == 0:
            raise ValueError("At least one covariate is required")

        if n_samples is not None and len(X) != n_samples:
            raise ValueError(
                f"Covariates have {len(X)} rows but survival data has {n_samples} subjects"
            )

        non_numeric = [col for col in X.columns if not pd.api.types.is_numeric_dtype(X[col])]
        if non_numeric:
            raise ValueError(f"Covariates must be numeric; encode these first: {non_numeric}")

        missing = X.columns[X.isna().any()].tolist()
        if missing:
            raise ValueError(f"Covariates contain missing values: {missing}")

        # A constant column makes the information matrix singular
        constant = X.columns[X.nunique() <= 1].tolist()
        if constant:
            raise ValueError(f"Covariates have no variation: {constant}")

        return True
