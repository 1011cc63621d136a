"""
Walkthrough of Kaplan-Meier and Cox regression on the Rotterdam breast cancer cohort
"""

import os
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import requests
import seaborn as sns
from survexplore.data import fetch_rotterdam, simulate_cohort
from survexplore.models import KaplanMeierCurve, CoxModel, fit_groups
from survexplore.evaluation import ModelEvaluator
from survexplore.visualization import (
    plot_survival_curve,
    plot_group_curves,
    plot_cumulative_hazard,
    plot_hazard_ratios,
    plot_risk_distribution
)

pd.set_option("display.width", 120)
pd.set_option("display.max_columns", 12)

# ---- Data ----

print("Downloading Rotterdam dataset...")
try:
    X, y = fetch_rotterdam()
except requests.RequestException as exc:
    print(f"Download failed ({exc}); using a simulated cohort with the same columns")
    X, y = simulate_cohort(n_samples=2982, random_state=42)

print(f"Dataset loaded with {len(y)} patients and {X.shape[1]} covariates")
print(f"Deaths: {y.n_events}, censored: {len(y) - y.n_events}")
print("Covariates:", list(X.columns))
print(X.describe().T[["mean", "min", "max"]])

# ---- PART 1: KAPLAN-MEIER ----

# One row per unique follow-up time: events and censorings both appear
curve = KaplanMeierCurve().fit(y, label="All patients")
table = curve.to_frame()
print("\nFirst rows of the survival table:")
print(table.head(10))

# Times with censoring but no deaths leave the survival estimate unchanged
flat = table[(table["n_event"] == 0) & (table["n_censor"] > 0)]
print(f"\n{len(flat)} of {len(table)} rows are censoring-only; surv does not move at them")

# n_risk drops by the events and censorings of the previous row
drops = table["n_risk"].values[:-1] - table["n_risk"].values[1:]
removed = (table["n_event"] + table["n_censor"]).values[:-1]
print("Risk set bookkeeping consistent:", bool(np.all(drops == removed)))

print(f"\nMedian survival: {curve.median_survival_time_:.0f} days")
years = np.array([1, 2, 5, 10]) * 365.25
print(curve.summary(years).assign(years=[1, 2, 5, 10]))

# ---- PART 2: GROUP COMPARISONS ----

evaluator = ModelEvaluator()
grade = np.where(X["grade"] >= 3, "grade 3", "grade 1-2")
by_grade = fit_groups(y, grade)
for level, group_curve in by_grade.items():
    print(f"{level}: median survival {group_curve.median_survival_time_:.0f} days")
logrank = evaluator.compare_groups(y, grade)
print(f"Log-rank test by grade: chi2={logrank['statistic']:.2f}, "
      f"df={logrank['df']}, p={logrank['p_value']:.3g}")

# ---- PART 3: COX REGRESSION ----

model = CoxModel().fit(X, y)
print("\nCoefficients:")
print(model.summary[["coef", "exp(coef)", "se(coef)", "z", "p"]])

initial, final = model.loglik_
print(f"\nLog partial likelihood: initial {initial:.2f}, final {final:.2f}")
lrt = model.likelihood_ratio_test()
print(f"Likelihood ratio test = {lrt['statistic']:.1f} on {lrt['df']} df, p={lrt['p_value']:.3g}")

# The linear predictors are centred on the covariate means, so they average zero
print(f"Mean linear predictor: {model.linear_predictors_.mean():.2e}")

pairs = model.concordance_
print(f"\nConcordance = {pairs.index:.4f}")
print(f"  concordant {pairs.concordant}, discordant {pairs.discordant}, "
      f"tied risk {pairs.tied_risk}, tied time {pairs.tied_time}")

# ---- PART 4: PREDICTION TYPES ----

first = X.iloc[:5]
print("\nPredictions for the first five patients:")
predictions = pd.DataFrame({
    kind: model.predict(first, type=kind, y=y[:5])
    for kind in ["lp", "risk", "expected", "survival"]
})
predictions["time"] = y.time[:5]
predictions["event"] = y.event[:5]
print(predictions)
print("\nPer-covariate terms (they sum to lp):")
print(model.predict(first, type="terms"))

# Over the whole cohort the expected counts add up to the number of deaths
expected = model.predict(X, type="expected", y=y)
print(f"\nSum of expected events {expected.sum():.1f} vs observed {y.n_events}")

print("\nProportional hazards test:")
print(model.proportional_hazards_test())

holdout = evaluator.holdout_concordance(X, y, test_size=0.3, random_state=42)
print(f"\nTrain concordance {holdout['train_c_index']:.3f}, "
      f"held-out concordance {holdout['test_c_index']:.3f}")

# ---- Plots ----

plt.ioff()
os.makedirs('examples/plots', exist_ok=True)
sns.set_style("whitegrid")

figures = {
    'km_overall.png': plot_survival_curve(curve),
    'km_by_grade.png': plot_group_curves(by_grade, title="Survival by Grade"),
    'cumulative_hazard.png': plot_cumulative_hazard(curve),
    'hazard_ratios.png': plot_hazard_ratios(model),
    'linear_predictors.png': plot_risk_distribution(model),
}
for name, fig in figures.items():
    fig.savefig(os.path.join('examples/plots', name), dpi=150, bbox_inches='tight')
    plt.close(fig)

print("\nPlots saved to examples/plots")
