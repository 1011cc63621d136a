"""
Model evaluation utilities for survival models
"""

import numpy as np
import pandas as pd
from typing import Union, Optional, Dict, Any
from sklearn.metrics import roc_auc_score
from sklearn.model_selection import train_test_split
from lifelines.utils import concordance_index
from lifelines.statistics import multivariate_logrank_test
from ..data import Survival
from ..models import CoxModel
from ..utils.concordance import concordance_counts

class ModelEvaluator:
    """Evaluator for survival risk scores and group comparisons"""

    def evaluate_survival(self,
                         y_true: Survival,
                         risk_scores: Union[np.ndarray, pd.Series],
                         time_points: Optional[np.ndarray] = None) -> Dict[str, Any]:
        """Evaluate risk score predictions

        Args:
            y_true: True survival outcomes
            risk_scores: Predicted risk scores, higher meaning earlier events
            time_points: Optional horizons for time-dependent AUC

        Returns:
            Dictionary of evaluation metrics
        """
        risk_scores = np.asarray(risk_scores, dtype=float)
        if len(risk_scores) != len(y_true):
            raise ValueError("risk_scores must have one entry per subject")

        metrics = {}

        # Concordance index
        metrics['c_index'] = concordance_index(
            y_true.time,
            -risk_scores,  # Higher risk score = lower survival time
            y_true.event
        )
        metrics['pairs'] = concordance_counts(y_true.time, risk_scores, y_true.event)

        # Cumulative/dynamic AUC: cases failed by t, controls still followed after t
        if time_points is not None:
            metrics['time_auc'] = {}
            for t in np.atleast_1d(time_points):
                case = (y_true.time <= t) & (y_true.event == 1)
                control = y_true.time > t
                mask = case | control
                if case.sum() > 0 and control.sum() > 0:
                    metrics['time_auc'][t] = roc_auc_score(
                        case[mask].astype(int),
                        risk_scores[mask]
                    )
                else:
                    metrics['time_auc'][t] = np.nan

        return metrics

    def holdout_concordance(self,
                            X: pd.DataFrame,
                            y: Survival,
                            test_size: float = 0.3,
                            random_state: Optional[int] = None,
                            **model_params) -> Dict[str, Any]:
        """Fit a Cox model on a training split and score both splits

        Args:
            X: Covariates
            y: Survival outcomes
            test_size: Fraction of subjects held out
            random_state: Seed for the split
            **model_params: Passed to CoxModel

        Returns:
            Dictionary with the fitted model and train/test concordance
        """
        idx_train, idx_test = train_test_split(
            np.arange(len(y)),
            test_size=test_size,
            random_state=random_state,
            stratify=y.event
        )
        X_train, X_test = X.iloc[idx_train], X.iloc[idx_test]
        y_train, y_test = y[idx_train], y[idx_test]

        model = CoxModel(**model_params).fit(X_train, y_train)
        test_lp = model.predict(X_test, type="lp")

        return {
            'model': model,
            'n_train': len(y_train),
            'n_test': len(y_test),
            'train_c_index': model.concordance_.index,
            'test_c_index': concordance_index(y_test.time, -test_lp.values, y_test.event),
        }

    def compare_groups(self,
                       y: Survival,
                       groups: Union[np.ndarray, pd.Series]) -> Dict[str, float]:
        """Log-rank test of equal survival across groups

        Args:
            y: Survival outcomes
            groups: Group label per subject

        Returns:
            Dictionary with the chi-squared statistic, degrees of freedom and p-value
        """
        groups = np.asarray(groups)
        if len(groups) != len(y):
            raise ValueError("groups must have one label per subject")
        if len(np.unique(groups)) < 2:
            raise ValueError("At least two groups are required")

        result = multivariate_logrank_test(y.time, groups, y.event)
        return {
            'statistic': float(result.test_statistic),
            'df': int(result.degrees_of_freedom),
            'p_value': float(result.p_value),
        }
