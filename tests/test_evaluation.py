"""
Tests for the model evaluator
"""

import numpy as np
import pytest
from lifelines.statistics import logrank_test
from lifelines.utils import concordance_index
from survexplore.data import Survival, simulate_cohort
from survexplore.evaluation import ModelEvaluator
from survexplore.models import CoxModel


@pytest.fixture
def evaluator():
    return ModelEvaluator()


@pytest.fixture
def cohort():
    return simulate_cohort(n_samples=600, random_state=7)


def test_evaluate_survival(evaluator, cohort):
    """Concordance and pair counts for a fitted model's risk scores"""
    X, y = cohort
    model = CoxModel().fit(X, y)
    metrics = evaluator.evaluate_survival(y, model.linear_predictors_)

    assert 0.5 < metrics['c_index'] <= 1.0
    assert np.isclose(metrics['c_index'], metrics['pairs'].index)
    assert 'time_auc' not in metrics


def test_evaluate_survival_time_auc(evaluator, cohort):
    """Time-dependent AUC is reported per horizon"""
    X, y = cohort
    risk = CoxModel().fit(X, y).linear_predictors_
    horizons = [1000, 3000]
    metrics = evaluator.evaluate_survival(y, risk, time_points=horizons)

    assert set(metrics['time_auc'].keys()) == set(horizons)
    for auc in metrics['time_auc'].values():
        assert 0.0 <= auc <= 1.0

    # No events by the horizon: undefined
    early = evaluator.evaluate_survival(y, risk, time_points=[0])
    assert np.isnan(early['time_auc'][0])


def test_evaluate_survival_risk_direction(evaluator):
    """Higher risk for earlier events scores 1"""
    y = Survival(np.array([1, 2, 3, 4]), np.array([1, 1, 1, 1]))
    metrics = evaluator.evaluate_survival(y, np.array([4, 3, 2, 1]))
    assert metrics['c_index'] == 1.0

    with pytest.raises(ValueError):
        evaluator.evaluate_survival(y, np.array([1, 2]))


def test_holdout_concordance(evaluator, cohort):
    """Model is fitted on the training split and scored on both"""
    X, y = cohort
    result = evaluator.holdout_concordance(X, y, test_size=0.25, random_state=0)

    assert result['n_train'] + result['n_test'] == len(y)
    assert result['n_test'] == 150
    assert isinstance(result['model'], CoxModel)
    assert len(result['model'].linear_predictors_) == result['n_train']
    assert 0.5 < result['train_c_index'] <= 1.0
    assert 0.5 < result['test_c_index'] <= 1.0


def test_compare_groups_two_levels(evaluator):
    """Two-group comparison equals the two-sample log-rank test"""
    np.random.seed(0)
    time = np.concatenate([np.random.exponential(5, 60), np.random.exponential(10, 60)])
    event = np.random.binomial(1, 0.8, 120)
    groups = np.repeat(["a", "b"], 60)
    y = Survival(time, event)

    result = evaluator.compare_groups(y, groups)
    reference = logrank_test(time[:60], time[60:], event[:60], event[60:])
    assert np.isclose(result['statistic'], reference.test_statistic)
    assert np.isclose(result['p_value'], reference.p_value)
    assert result['df'] == 1


def test_compare_groups_by_grade(evaluator, cohort):
    """Grade affects survival in the simulated cohort"""
    X, y = cohort
    result = evaluator.compare_groups(y, X['grade'].values)
    assert result['df'] == 1
    assert result['statistic'] > 0


def test_compare_groups_small_sample(evaluator):
    """Alternating labels on six subjects give a one degree of freedom test"""
    y = Survival(np.arange(1, 7), np.array([1, 1, 0, 1, 1, 1]))
    result = evaluator.compare_groups(y, ["a", "b"] * 3)
    assert result['df'] == 1
    assert isinstance(result['df'], int)
    assert 0 <= result['p_value'] <= 1


def test_compare_groups_errors(evaluator):
    y = Survival(np.array([1, 2, 3]), np.array([1, 0, 1]))
    with pytest.raises(ValueError):
        evaluator.compare_groups(y, np.array(["a", "a", "a"]))
    with pytest.raises(ValueError):
        evaluator.compare_groups(y, np.array(["a", "b"]))
