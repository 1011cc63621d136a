"""
Kaplan-Meier survival curves and their Nelson-Aalen cumulative hazards.
"""
from typing import Dict, Optional, Union
import numpy as np
import pandas as pd
from lifelines import KaplanMeierFitter, NelsonAalenFitter
from survexplore.data import Survival


class KaplanMeierCurve:
    """
    Kaplan-Meier survival curve with the quantities a survival table reports.

    The estimation itself is done by lifelines; this class lays the result
    out as one row per unique observed time, events and censorings alike.

    Parameters
    ----------
    alpha : float, default=0.05
        The confidence band is ``1 - alpha``

    Attributes
    ----------
    time_ : ndarray
        Unique observed times, ascending
    n_risk_ : ndarray
        Number at risk just before each time
    n_event_ : ndarray
        Number of events at each time
    n_censor_ : ndarray
        Number censored at each time
    surv_ : ndarray
        Kaplan-Meier survival estimate at each time
    cumhaz_ : ndarray
        Nelson-Aalen cumulative hazard at each time
    lower_, upper_ : ndarray
        Pointwise confidence band of ``surv_``
    median_survival_time_ : float
        First time the survival estimate drops to 0.5 or below; ``inf`` if never

    Examples
    --------
    >>> from survexplore.data import iud_example
    >>> from survexplore.models import KaplanMeierCurve
    >>> curve = KaplanMeierCurve().fit(iud_example())
    >>> curve.to_frame().head()
    """

    def __init__(self, alpha: float = 0.05):
        if not 0 < alpha < 1:
            raise ValueError("alpha must be between 0 and 1")
        self.alpha = alpha

    def fit(self, y: Survival, label: Optional[str] = None) -> 'KaplanMeierCurve':
        """
        Fit the curve.

        Parameters
        ----------
        y : Survival
            Follow-up times and event indicators
        label : str, optional
            Name of the curve, used in plots

        Returns
        -------
        self : KaplanMeierCurve
        """
        if not isinstance(y, Survival):
            raise ValueError("y must be a Survival object")
        if len(y) == 0:
            raise ValueError("Cannot fit a curve to an empty sample")

        self.label = label or "KM_estimate"
        self.kmf_ = KaplanMeierFitter(alpha=self.alpha)
        self.kmf_.fit(y.time, event_observed=y.event, label=self.label)

        # Plain d/n increments, the textbook Nelson-Aalen estimator
        self.naf_ = NelsonAalenFitter(alpha=self.alpha, nelson_aalen_smoothing=False)
        self.naf_.fit(y.time, event_observed=y.event, label=self.label)

        table = self.kmf_.event_table
        table = table[table["removed"] > 0]

        self.time_ = table.index.values.astype(float)
        self.n_risk_ = table["at_risk"].values.astype(int)
        self.n_event_ = table["observed"].values.astype(int)
        self.n_censor_ = table["censored"].values.astype(int)
        self.surv_ = self.kmf_.survival_function_at_times(self.time_).values
        self.cumhaz_ = self.naf_.cumulative_hazard_at_times(self.time_).values

        band = self.kmf_.confidence_interval_survival_function_
        band = band.reindex(self.time_, method="ffill")
        self.lower_ = band.iloc[:, 0].values
        self.upper_ = band.iloc[:, 1].values

        self.median_survival_time_ = float(self.kmf_.median_survival_time_)
        self._y = y
        self.is_fitted_ = True
        return self

    def _check_fitted(self):
        if not getattr(self, "is_fitted_", False):
            raise ValueError("Curve not fitted. Call fit() first.")

    def to_frame(self) -> pd.DataFrame:
        """Return the survival table, one row per unique observed time."""
        self._check_fitted()
        return pd.DataFrame({
            "time": self.time_,
            "n_risk": self.n_risk_,
            "n_event": self.n_event_,
            "n_censor": self.n_censor_,
            "surv": self.surv_,
            "cumhaz": self.cumhaz_,
            "lower": self.lower_,
            "upper": self.upper_,
        })

    def _step_lookup(self, values: np.ndarray, times, before: float) -> np.ndarray:
        times = np.atleast_1d(np.asarray(times, dtype=float))
        idx = np.searchsorted(self.time_, times, side="right") - 1
        out = np.where(idx >= 0, values[np.clip(idx, 0, None)], before)
        return out.astype(float)

    def survival_at(self, times) -> np.ndarray:
        """
        Survival estimate at arbitrary times.

        The estimate is right-continuous: at an event time it already
        includes that time's drop. Before the first observed time it is 1.
        """
        self._check_fitted()
        return self._step_lookup(self.surv_, times, before=1.0)

    def cumulative_hazard_at(self, times) -> np.ndarray:
        """Nelson-Aalen cumulative hazard at arbitrary times."""
        self._check_fitted()
        return self._step_lookup(self.cumhaz_, times, before=0.0)

    def summary(self, times) -> pd.DataFrame:
        """
        Survival at selected times.

        Parameters
        ----------
        times : array-like
            Times to report at; sorted before use

        Returns
        -------
        pd.DataFrame
            Columns time, n_risk (subjects still followed at the time),
            n_event (events since the previous reported time), surv,
            lower and upper
        """
        self._check_fitted()
        times = np.sort(np.atleast_1d(np.asarray(times, dtype=float)))
        if np.any(times < 0):
            raise ValueError("Times cannot be negative")

        event_times = self._y.time[self._y.event == 1]
        previous = np.concatenate([[-np.inf], times[:-1]])
        n_event = [int(np.sum((event_times > lo) & (event_times <= hi)))
                   for lo, hi in zip(previous, times)]

        return pd.DataFrame({
            "time": times,
            "n_risk": [int(np.sum(self._y.time >= t)) for t in times],
            "n_event": n_event,
            "surv": self.survival_at(times),
            "lower": self._step_lookup(self.lower_, times, before=1.0),
            "upper": self._step_lookup(self.upper_, times, before=1.0),
        })

    def __repr__(self):
        if getattr(self, "is_fitted_", False):
            return (f"KaplanMeierCurve(label={self.label!r}, n={len(self._y)}, "
                    f"events={self._y.n_events}, median={self.median_survival_time_})")
        return f"KaplanMeierCurve(alpha={self.alpha})"


def fit_groups(y: Survival,
               groups: Union[np.ndarray, pd.Series],
               alpha: float = 0.05) -> Dict[object, KaplanMeierCurve]:
    """
    Fit one Kaplan-Meier curve per group level.

    Parameters
    ----------
    y : Survival
        Follow-up times and event indicators
    groups : array-like
        Group label for each subject
    alpha : float, default=0.05
        Confidence level of each curve's band is ``1 - alpha``

    Returns
    -------
    dict
        Curves keyed by group level, in sorted level order
    """
    groups = np.asarray(groups)
    if len(groups) != len(y):
        raise ValueError("groups must have one label per subject")

    curves = {}
    for level in np.unique(groups):
        mask = groups == level
        curves[level] = KaplanMeierCurve(alpha=alpha).fit(y[mask], label=str(level))
    return curves
