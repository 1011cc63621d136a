"""
SurvExplore: Kaplan-Meier curves, Cox regression and hazard tabulations on top of lifelines
"""

__version__ = "0.1.0"

from .data import Survival, load_cohort, fetch_rotterdam, simulate_cohort, iud_example
from .models import KaplanMeierCurve, CoxModel, fit_groups
from .utils import HazardEstimator, concordance_counts
from .evaluation import ModelEvaluator
from .visualization import (
    plot_survival_curve,
    plot_hazard_table,
    plot_hazard_ratios
)

__all__ = [
    "Survival",
    "load_cohort",
    "fetch_rotterdam",
    "simulate_cohort",
    "iud_example",
    "KaplanMeierCurve",
    "CoxModel",
    "fit_groups",
    "HazardEstimator",
    "concordance_counts",
    "ModelEvaluator",
    "plot_survival_curve",
    "plot_hazard_table",
    "plot_hazard_ratios"
]
