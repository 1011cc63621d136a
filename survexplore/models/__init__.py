"""
Survival curve and regression models
"""

from .kaplan_meier import KaplanMeierCurve, fit_groups
from .cox import CoxModel, PREDICTION_TYPES

__all__ = [
    "KaplanMeierCurve",
    "fit_groups",
    "CoxModel",
    "PREDICTION_TYPES"
]
