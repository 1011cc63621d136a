"""
Cox proportional-hazards regression.
"""
from typing import Dict, Optional, Union
import numpy as np
import pandas as pd
from scipy.stats import chi2
from lifelines import CoxPHFitter
from lifelines.statistics import proportional_hazard_test
from survexplore.data import Survival, DataValidator
from survexplore.utils.concordance import concordance_counts

PREDICTION_TYPES = ("lp", "risk", "expected", "survival", "terms")


class CoxModel:
    """
    Cox proportional-hazards model fitted by partial likelihood.

    Fitting is delegated to lifelines' ``CoxPHFitter`` (Efron's method for
    tied event times). After ``fit`` the model exposes the fields a
    regression printout is built from.

    Parameters
    ----------
    penalizer : float, default=0.0
        L2 penalty on the coefficients
    alpha : float, default=0.05
        Confidence intervals are ``1 - alpha``

    Attributes
    ----------
    coef_ : pd.Series
        Coefficient estimates indexed by covariate
    loglik_ : tuple of float
        ``(initial, final)`` log partial likelihood; the initial value is
        that of the model with no covariates
    linear_predictors_ : pd.Series
        Centred linear predictor ``(x - mean(x)) . beta`` for each training subject
    means_ : pd.Series
        Training covariate means used for centring
    concordance_ : ConcordanceCounts
        Pair counts of the linear predictor on the training data

    Examples
    --------
    >>> from survexplore.data import simulate_cohort
    >>> from survexplore.models import CoxModel
    >>> X, y = simulate_cohort(500, random_state=0)
    >>> model = CoxModel().fit(X, y)
    >>> model.likelihood_ratio_test()
    """

    duration_col = "T"
    event_col = "E"

    def __init__(self, penalizer: float = 0.0, alpha: float = 0.05):
        if penalizer < 0:
            raise ValueError("penalizer must be non-negative")
        if not 0 < alpha < 1:
            raise ValueError("alpha must be between 0 and 1")
        self.penalizer = penalizer
        self.alpha = alpha

    def fit(self, X: pd.DataFrame, y: Survival) -> 'CoxModel':
        """
        Fit the model.

        Parameters
        ----------
        X : pd.DataFrame
            Numeric covariates, one row per subject
        y : Survival
            Follow-up times and event indicators

        Returns
        -------
        self : CoxModel
        """
        if not isinstance(y, Survival):
            raise ValueError("y must be a Survival object")
        DataValidator().validate_covariates(X, n_samples=len(y))
        if y.n_events == 0:
            raise ValueError("At least one event is required to fit a Cox model")
        clash = {self.duration_col, self.event_col} & set(X.columns)
        if clash:
            raise ValueError(f"Covariate names clash with reserved columns: {sorted(clash)}")

        df = X.reset_index(drop=True).astype(float)
        df[self.duration_col] = y.time
        df[self.event_col] = y.event

        self.cph_ = CoxPHFitter(penalizer=self.penalizer, alpha=self.alpha)
        self.cph_.fit(df, duration_col=self.duration_col, event_col=self.event_col)

        self.feature_names_ = list(X.columns)
        self.coef_ = self.cph_.params_.reindex(self.feature_names_).rename("coef")
        self.means_ = df[self.feature_names_].mean()

        lrt = self.cph_.log_likelihood_ratio_test()
        final = float(self.cph_.log_likelihood_)
        self.loglik_ = (final - lrt.test_statistic / 2.0, final)

        self.linear_predictors_ = pd.Series(
            self._centred(X).values @ self.coef_.values, index=X.index, name="lp"
        )
        self.concordance_ = concordance_counts(y.time, self.linear_predictors_, y.event)

        self._training_df = df
        self.y_ = y
        self.is_fitted_ = True
        return self

    def _check_fitted(self):
        if not getattr(self, "is_fitted_", False):
            raise ValueError("Model not fitted. Call fit() first.")

    def _centred(self, X: pd.DataFrame) -> pd.DataFrame:
        missing = [c for c in self.feature_names_ if c not in X.columns]
        if missing:
            raise ValueError(f"Covariates missing from X: {missing}")
        return X[self.feature_names_].astype(float) - self.means_

    @property
    def summary(self) -> pd.DataFrame:
        """Coefficient table: coef, exp(coef), standard errors, z, p and intervals"""
        self._check_fitted()
        return self.cph_.summary

    @property
    def hazard_ratios_(self) -> pd.Series:
        self._check_fitted()
        return np.exp(self.coef_)

    @property
    def confidence_intervals_(self) -> pd.DataFrame:
        """Confidence limits of the coefficients, on the log-hazard scale"""
        self._check_fitted()
        return self.cph_.confidence_intervals_

    def likelihood_ratio_test(self) -> Dict[str, float]:
        """
        Likelihood ratio test against the model with no covariates.

        Returns
        -------
        dict
            statistic ``2 * (final - initial)``, degrees of freedom and the
            chi-squared p-value
        """
        self._check_fitted()
        initial, final = self.loglik_
        statistic = 2.0 * (final - initial)
        dof = len(self.coef_)
        return {
            "statistic": statistic,
            "df": dof,
            "p_value": float(chi2.sf(statistic, dof)),
        }

    def _baseline_cumulative_hazard_at(self, times: np.ndarray) -> np.ndarray:
        baseline = self.cph_.baseline_cumulative_hazard_.iloc[:, 0]
        grid = baseline.index.values.astype(float)
        idx = np.searchsorted(grid, times, side="right") - 1
        return np.where(idx >= 0, baseline.values[np.clip(idx, 0, None)], 0.0)

    def predict(self,
                X: pd.DataFrame,
                type: str = "lp",
                y: Optional[Survival] = None) -> Union[pd.Series, pd.DataFrame]:
        """
        Predict for new or training subjects.

        Parameters
        ----------
        X : pd.DataFrame
            Covariates with the training columns
        type : {"lp", "risk", "expected", "survival", "terms"}
            * ``lp``: centred linear predictor
            * ``risk``: ``exp(lp)``
            * ``expected``: expected number of events over each subject's own
              follow-up, ``H0(t) * exp(lp)``
            * ``survival``: ``exp(-expected)``
            * ``terms``: per-covariate contributions ``(x_j - mean_j) * beta_j``
        y : Survival, optional
            Follow-up of each subject; required for ``expected`` and ``survival``

        Returns
        -------
        pd.Series, or pd.DataFrame for ``terms``
        """
        self._check_fitted()
        if type not in PREDICTION_TYPES:
            raise ValueError(f"type must be one of {PREDICTION_TYPES}, got {type!r}")

        centred = self._centred(X)
        if type == "terms":
            return centred * self.coef_

        lp = pd.Series(centred.values @ self.coef_.values, index=X.index)
        if type == "lp":
            return lp.rename("lp")
        if type == "risk":
            return np.exp(lp).rename("risk")

        if y is None:
            raise ValueError(f"Prediction type {type!r} needs the follow-up times y")
        if len(y) != len(X):
            raise ValueError("y must have one entry per row of X")

        expected = pd.Series(
            self._baseline_cumulative_hazard_at(y.time) * np.exp(lp.values),
            index=X.index,
        )
        if type == "expected":
            return expected.rename("expected")
        return np.exp(-expected).rename("survival")

    def survival_function(self, X: pd.DataFrame, times=None) -> pd.DataFrame:
        """Predicted survival curves, one column per subject and one row per time."""
        self._check_fitted()
        return self.cph_.predict_survival_function(X[self.feature_names_], times=times)

    def proportional_hazards_test(self, time_transform: str = "km") -> pd.DataFrame:
        """
        Test each covariate for non-proportional hazards.

        Correlates scaled Schoenfeld residuals with transformed time.

        Returns
        -------
        pd.DataFrame
            One row per covariate with the test statistic and p-value
        """
        self._check_fitted()
        result = proportional_hazard_test(self.cph_, self._training_df, time_transform=time_transform)
        return result.summary

    def __repr__(self):
        if getattr(self, "is_fitted_", False):
            return (f"CoxModel(n={len(self.y_)}, events={self.y_.n_events}, "
                    f"covariates={self.feature_names_})")
        return f"CoxModel(penalizer={self.penalizer}, alpha={self.alpha})"
