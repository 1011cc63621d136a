"""
Tests for Cox proportional-hazards regression
"""

import numpy as np
import pandas as pd
import pytest
from lifelines import CoxPHFitter
from lifelines.utils import concordance_index
from survexplore.data import Survival, simulate_cohort
from survexplore.models import CoxModel, PREDICTION_TYPES


@pytest.fixture(scope="module")
def cohort():
    return simulate_cohort(n_samples=800, random_state=42)


@pytest.fixture(scope="module")
def model(cohort):
    X, y = cohort
    return CoxModel().fit(X, y)


def test_fit_attributes(model, cohort):
    """Fitted fields have one entry per covariate or per subject"""
    X, y = cohort
    assert list(model.coef_.index) == list(X.columns)
    assert len(model.linear_predictors_) == len(y)
    assert list(model.means_.index) == list(X.columns)
    assert np.allclose(model.means_, X.mean())
    assert model.y_ is y
    assert model.summary.shape[0] == X.shape[1]
    assert {"coef", "exp(coef)", "se(coef)", "p"} <= set(model.summary.columns)


def test_recovers_coefficients(model):
    """Simulated effects are recovered in sign and rough size"""
    assert model.coef_["nodes"] > 0
    assert model.coef_["grade"] > 0
    assert abs(model.coef_["nodes"] - 0.08) < 0.1
    assert np.allclose(model.hazard_ratios_, np.exp(model.coef_))


def test_log_likelihoods(model):
    """Final log partial likelihood improves on the initial one"""
    initial, final = model.loglik_
    assert final > initial
    assert initial < 0


def test_likelihood_ratio_test(model):
    """Likelihood ratio test agrees with lifelines"""
    lrt = model.likelihood_ratio_test()
    reference = model.cph_.log_likelihood_ratio_test()
    assert np.isclose(lrt["statistic"], reference.test_statistic)
    assert lrt["df"] == len(model.coef_)
    assert np.isclose(lrt["p_value"], reference.p_value)
    assert lrt["p_value"] < 0.05


def test_linear_predictors_are_centred(model, cohort):
    """Linear predictors equal lifelines' log partial hazards and average zero"""
    X, _ = cohort
    assert np.isclose(model.linear_predictors_.mean(), 0.0, atol=1e-8)
    reference = model.cph_.predict_log_partial_hazard(X)
    assert np.allclose(model.linear_predictors_.values, reference.values)


def test_concordance(model, cohort):
    """Pair counts reproduce lifelines' concordance index"""
    _, y = cohort
    counts = model.concordance_
    expected = concordance_index(y.time, -model.linear_predictors_.values, y.event)
    assert np.isclose(counts.index, expected)
    assert counts.concordant > counts.discordant
    assert counts.comparable > 0


def test_predict_types(model, cohort):
    """Prediction types relate to each other as documented"""
    X, y = cohort
    lp = model.predict(X, type="lp")
    risk = model.predict(X, type="risk")
    expected = model.predict(X, type="expected", y=y)
    survival = model.predict(X, type="survival", y=y)
    terms = model.predict(X, type="terms")

    assert np.allclose(lp.values, model.linear_predictors_.values)
    assert np.allclose(risk, np.exp(lp))
    assert np.allclose(survival, np.exp(-expected))
    assert np.all(expected >= 0)
    assert list(terms.columns) == list(X.columns)
    assert np.allclose(terms.sum(axis=1), lp)

    # Breslow baseline: expected events over the training data equal the observed count
    assert np.isclose(expected.sum(), y.n_events, rtol=1e-4)


def test_expected_matches_cumulative_hazard(model, cohort):
    """Expected counts equal each subject's predicted cumulative hazard at its own time"""
    X, y = cohort
    subset = X.iloc[:10]
    times = np.unique(y.time[:10])
    cumhaz = model.cph_.predict_cumulative_hazard(subset, times=times)
    expected = model.predict(subset, type="expected", y=y[:10])
    for i, t in enumerate(y.time[:10]):
        assert np.isclose(expected.iloc[i], cumhaz.loc[t].iloc[i])


def test_predict_errors(model, cohort):
    """Unknown types and missing follow-up are rejected"""
    X, y = cohort
    with pytest.raises(ValueError):
        model.predict(X, type="quantile")
    with pytest.raises(ValueError):
        model.predict(X, type="expected")
    with pytest.raises(ValueError):
        model.predict(X.iloc[:5], type="survival", y=y)
    with pytest.raises(ValueError):
        model.predict(X.drop(columns=["age"]))
    assert set(PREDICTION_TYPES) == {"lp", "risk", "expected", "survival", "terms"}


def test_predict_new_subjects(model):
    """A subject at the covariate means has a zero linear predictor"""
    at_mean = model.means_.to_frame().T
    assert np.isclose(model.predict(at_mean, type="lp").iloc[0], 0.0)
    assert np.isclose(model.predict(at_mean, type="risk").iloc[0], 1.0)


def test_survival_function(model, cohort):
    """Predicted curves start near one and never increase"""
    X, _ = cohort
    curves = model.survival_function(X.iloc[:3], times=[0, 500, 1000, 3000])
    assert curves.shape == (4, 3)
    assert np.all(np.diff(curves.values, axis=0) <= 1e-12)
    assert np.all((curves.values >= 0) & (curves.values <= 1))


def test_proportional_hazards_test(model, cohort):
    """One test row per covariate"""
    X, _ = cohort
    table = model.proportional_hazards_test()
    assert len(table) == X.shape[1]
    assert "p" in table.columns
    assert np.all((table["p"] >= 0) & (table["p"] <= 1))


def test_matches_lifelines_directly(cohort):
    """Coefficients equal a direct lifelines fit"""
    X, y = cohort
    df = X.assign(T=y.time, E=y.event)
    cph = CoxPHFitter().fit(df, duration_col="T", event_col="E")
    model = CoxModel().fit(X, y)
    assert np.allclose(model.coef_.values, cph.params_.reindex(X.columns).values)


def test_fit_validation():
    """Invalid inputs raise before fitting"""
    X = pd.DataFrame({"age": [50.0, 60.0, 70.0, 65.0]})
    y = Survival([1, 2, 3, 4], [1, 0, 1, 1])

    with pytest.raises(ValueError):
        CoxModel().fit(X.values, y)
    with pytest.raises(ValueError):
        CoxModel().fit(X, (y.time, y.event))
    with pytest.raises(ValueError):
        CoxModel().fit(X.assign(const=1.0), y)
    with pytest.raises(ValueError):
        CoxModel().fit(X, Survival([1, 2, 3, 4], [0, 0, 0, 0]))
    with pytest.raises(ValueError):
        CoxModel().fit(X.assign(T=[1.0, 2.0, 3.0, 4.0]), y)
    with pytest.raises(ValueError):
        CoxModel(penalizer=-1)


def test_unfitted_model():
    """Using a model before fit is an error"""
    with pytest.raises(ValueError):
        CoxModel().likelihood_ratio_test()
    with pytest.raises(ValueError):
        CoxModel().predict(pd.DataFrame({"age": [1.0]}))
