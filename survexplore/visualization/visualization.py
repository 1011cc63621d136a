"""
Visualization functions
"""

import numpy as np
import matplotlib.pyplot as plt
import seaborn as sns
from typing import Dict, Optional
import pandas as pd
from ..data import Survival
from ..models.kaplan_meier import KaplanMeierCurve
from ..models.cox import CoxModel
from ..utils.hazard_estimation import HazardEstimator

COLORS = ['#FF6B6B', '#4ECDC4', '#45B7D1', '#96CEB4', '#FFEEAD']


def _axes(ax, figsize):
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure
    return fig, ax


def _with_origin(curve: KaplanMeierCurve, values: np.ndarray, origin: float):
    """Prepend time 0 so the step starts at the origin"""
    return np.concatenate([[0.0], curve.time_]), np.concatenate([[origin], values])


def plot_survival_curve(curve: KaplanMeierCurve,
                        show_ci: bool = True,
                        mark_censored: bool = True,
                        color: str = COLORS[0],
                        ax=None,
                        figsize: tuple = (10, 6)):
    """
    Plot a Kaplan-Meier curve as a right-continuous step function

    Parameters
    ----------
    curve : KaplanMeierCurve
        Fitted curve
    show_ci : bool, default=True
        Shade the confidence band
    mark_censored : bool, default=True
        Draw a tick at each time with censorings
    color : str
        Line color
    ax : matplotlib.axes.Axes, optional
        Axes to draw on; a new figure is created if omitted
    figsize : tuple, default=(10, 6)
        Figure size

    Returns
    -------
    matplotlib.figure.Figure
        The figure object
    """
    fig, ax = _axes(ax, figsize)
    times, surv = _with_origin(curve, curve.surv_, 1.0)

    ax.step(times, surv, where="post", color=color, label=curve.label)
    if show_ci:
        _, lower = _with_origin(curve, curve.lower_, 1.0)
        _, upper = _with_origin(curve, curve.upper_, 1.0)
        ax.fill_between(times, lower, upper, step="post", alpha=0.2, color=color)
    if mark_censored:
        censored = curve.n_censor_ > 0
        ax.plot(curve.time_[censored], curve.surv_[censored], "|",
                color=color, markersize=8)

    ax.set_xlabel("Time")
    ax.set_ylabel("Survival Probability")
    ax.set_ylim(0, 1.05)
    ax.set_title("Kaplan-Meier Estimate")
    ax.grid(True, alpha=0.3)
    ax.legend()
    fig.tight_layout()
    return fig


def plot_group_curves(curves: Dict[object, KaplanMeierCurve],
                      show_ci: bool = False,
                      title: str = "Kaplan-Meier Estimate by Group",
                      figsize: tuple = (10, 6)):
    """
    Plot one Kaplan-Meier curve per group

    Parameters
    ----------
    curves : dict
        Fitted curves keyed by group, as returned by ``fit_groups``
    show_ci : bool, default=False
        Shade each curve's confidence band
    title : str
        Plot title
    figsize : tuple, default=(10, 6)
        Figure size

    Returns
    -------
    matplotlib.figure.Figure
        The figure object
    """
    if not curves:
        raise ValueError("At least one curve is required")

    fig, ax = plt.subplots(figsize=figsize)
    for i, curve in enumerate(curves.values()):
        plot_survival_curve(curve, show_ci=show_ci, color=COLORS[i % len(COLORS)], ax=ax)
    ax.set_title(title)
    return fig


def plot_cumulative_hazard(curve: KaplanMeierCurve,
                           ax=None,
                           figsize: tuple = (10, 6)):
    """
    Plot the Nelson-Aalen cumulative hazard against ``-log`` of the
    Kaplan-Meier estimate

    Returns
    -------
    matplotlib.figure.Figure
        The figure object
    """
    fig, ax = _axes(ax, figsize)
    times, cumhaz = _with_origin(curve, curve.cumhaz_, 0.0)
    ax.step(times, cumhaz, where="post", color=COLORS[1], label="Nelson-Aalen")

    with np.errstate(divide="ignore"):
        km_cumhaz = -np.log(curve.surv_)
    # undefined once the estimate reaches zero
    km_cumhaz[np.isinf(km_cumhaz)] = np.nan
    _, km_cumhaz = _with_origin(curve, km_cumhaz, 0.0)
    ax.step(times, km_cumhaz, where="post", color=COLORS[2], linestyle="--",
            label="-log Kaplan-Meier")

    ax.set_xlabel("Time")
    ax.set_ylabel("Cumulative Hazard")
    ax.set_title("Cumulative Hazard")
    ax.grid(True, alpha=0.3)
    ax.legend()
    fig.tight_layout()
    return fig


def plot_hazard_table(table: pd.DataFrame,
                      ax=None,
                      figsize: tuple = (10, 6)):
    """
    Plot a tabulated hazard as a piecewise-constant step function

    Parameters
    ----------
    table : pd.DataFrame
        Output of ``HazardEstimator.interval_hazard_table``
    ax : matplotlib.axes.Axes, optional
        Axes to draw on
    figsize : tuple, default=(10, 6)
        Figure size

    Returns
    -------
    matplotlib.figure.Figure
        The figure object
    """
    if table.empty:
        raise ValueError("Hazard table is empty")

    fig, ax = _axes(ax, figsize)
    ax.hlines(table["hazard"], table["start"], table["end"], color=COLORS[0], linewidth=2)
    ax.plot(table["start"], table["hazard"], "o", color=COLORS[0], markersize=4)

    ax.set_xlabel("Time")
    ax.set_ylabel("Hazard Rate")
    ax.set_ylim(bottom=0)
    ax.set_title("Estimated Hazard Function")
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    return fig


def plot_survival_comparison(curve: KaplanMeierCurve,
                             ax=None,
                             figsize: tuple = (10, 6)):
    """
    Overlay the Kaplan-Meier estimate and ``exp(-H)`` of the Nelson-Aalen
    cumulative hazard

    Returns
    -------
    matplotlib.figure.Figure
        The figure object
    """
    fig, ax = _axes(ax, figsize)
    plot_survival_curve(curve, show_ci=False, mark_censored=False, ax=ax)

    na_surv = HazardEstimator.transform_hazard(curve.cumhaz_, transform="exp")
    times, na_surv = _with_origin(curve, na_surv, 1.0)
    ax.step(times, na_surv, where="post", color=COLORS[2], linestyle="--",
            label="exp(-Nelson-Aalen)")
    ax.legend()
    return fig


def plot_hazard_ratios(model: CoxModel,
                       figsize: tuple = (8, 5)):
    """
    Forest plot of hazard ratios with their confidence intervals

    Parameters
    ----------
    model : CoxModel
        Fitted model
    figsize : tuple, default=(8, 5)
        Figure size

    Returns
    -------
    matplotlib.figure.Figure
        The figure object
    """
    hr = model.hazard_ratios_
    ci = np.exp(model.confidence_intervals_.reindex(hr.index))
    lower, upper = ci.iloc[:, 0].values, ci.iloc[:, 1].values

    order = np.argsort(hr.values)
    y_pos = np.arange(len(hr))

    fig, ax = plt.subplots(figsize=figsize)
    ax.errorbar(hr.values[order], y_pos,
                xerr=[hr.values[order] - lower[order], upper[order] - hr.values[order]],
                fmt="o", color=COLORS[2], capsize=3)
    ax.axvline(1.0, color="black", linestyle="--", linewidth=1)
    ax.set_yticks(y_pos)
    ax.set_yticklabels(hr.index[order])
    ax.set_xscale("log")
    ax.set_xlabel("Hazard Ratio (log scale)")
    ax.set_title("Cox Model Hazard Ratios")
    fig.tight_layout()
    return fig


def plot_risk_distribution(model: CoxModel,
                           y: Optional[Survival] = None,
                           bins: int = 30,
                           figsize: tuple = (10, 6)):
    """
    Histogram of training linear predictors split by event status

    Parameters
    ----------
    model : CoxModel
        Fitted model
    y : Survival, optional
        Outcomes matching the training rows; defaults to the training outcomes
    bins : int, default=30
        Number of histogram bins
    figsize : tuple, default=(10, 6)
        Figure size

    Returns
    -------
    matplotlib.figure.Figure
        The figure object
    """
    if not getattr(model, "is_fitted_", False):
        raise ValueError("Model not fitted. Call fit() first.")
    y = model.y_ if y is None else y
    data = pd.DataFrame({
        "Linear Predictor": model.linear_predictors_.values,
        "Status": np.where(y.event == 1, "Event", "Censored"),
    })

    fig, ax = plt.subplots(figsize=figsize)
    sns.histplot(data=data, x="Linear Predictor", hue="Status", multiple="stack",
                 bins=bins, palette=[COLORS[0], COLORS[1]],
                 hue_order=["Event", "Censored"], ax=ax)
    ax.axvline(0.0, color="black", linestyle="--", linewidth=1)
    ax.set_title("Distribution of Centred Linear Predictors")
    fig.tight_layout()
    return fig
