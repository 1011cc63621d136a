"""
Data structures and example datasets for survival analysis
"""

from .data import Survival
from .data_validator import DataValidator
from .datasets import (
    ROTTERDAM_SCHEMA,
    ROTTERDAM_URL,
    encode_covariates,
    fetch_rotterdam,
    iud_example,
    load_cohort,
    simulate_cohort
)

__all__ = [
    "Survival",
    "DataValidator",
    "ROTTERDAM_SCHEMA",
    "ROTTERDAM_URL",
    "encode_covariates",
    "fetch_rotterdam",
    "iud_example",
    "load_cohort",
    "simulate_cohort"
]
