"""
Data structures for survival analysis
"""

import numpy as np
import pandas as pd
from typing import Union

class Survival:
    """Class for right-censored survival data"""

    def __init__(self, time: Union[np.ndarray, pd.Series],
                 event: Union[np.ndarray, pd.Series]):
        """
        Initialize survival data

        Parameters
        ----------
        time : array-like
            Follow-up time to event or censoring
        event : array-like
            Event indicator (1 for event, 0 for censored)
        """
        self.time = np.asarray(time, dtype=float)
        event = np.asarray(event)
        self._validate(event)
        self.event = event.astype(int)

    def _validate(self, event):
        """Validate the survival data"""
        if self.time.ndim != 1 or event.ndim != 1:
            raise ValueError("Time and event must be one-dimensional")
        if len(self.time) != len(event):
            raise ValueError("Time and event arrays must have the same length")
        if np.any(np.isnan(self.time)):
            raise ValueError("Times must not contain missing values")
        if not np.all(self.time >= 0):
            raise ValueError("All times must be non-negative")
        if not np.all(np.isin(event, [0, 1])):
            raise ValueError("Event indicators must be 0 or 1")

    def __len__(self):
        return len(self.time)

    def __getitem__(self, idx):
        return Survival(np.atleast_1d(self.time[idx]), np.atleast_1d(self.event[idx]))

    @property
    def n_events(self) -> int:
        return int(self.event.sum())

    def to_frame(self, time_col: str = "time", event_col: str = "event") -> pd.DataFrame:
        """Return the data as a two-column DataFrame"""
        return pd.DataFrame({time_col: self.time, event_col: self.event})

    def __repr__(self):
        return f"Survival(n={len(self)}, events={self.n_events})"
