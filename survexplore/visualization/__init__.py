"""
Visualization module
"""

from .visualization import (
    plot_survival_curve,
    plot_group_curves,
    plot_cumulative_hazard,
    plot_hazard_table,
    plot_survival_comparison,
    plot_hazard_ratios,
    plot_risk_distribution
)

__all__ = [
    'plot_survival_curve',
    'plot_group_curves',
    'plot_cumulative_hazard',
    'plot_hazard_table',
    'plot_survival_comparison',
    'plot_hazard_ratios',
    'plot_risk_distribution'
]
