"""
Evaluation module for survival models
"""

from .evaluator import ModelEvaluator

__all__ = ["ModelEvaluator"]
