"""
Utility classes and functions
"""

from .concordance import ConcordanceCounts, concordance_counts
from .hazard_estimation import HazardEstimator

__all__ = [
    "ConcordanceCounts",
    "concordance_counts",
    "HazardEstimator"
]
