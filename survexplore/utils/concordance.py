"""
Pair counts behind the concordance index.
"""
from typing import NamedTuple, Union
import numpy as np
import pandas as pd


class ConcordanceCounts(NamedTuple):
    """Comparable-pair counts for a risk score."""

    concordant: int
    discordant: int
    tied_risk: int
    tied_time: int

    @property
    def comparable(self) -> int:
        return self.concordant + self.discordant + self.tied_risk

    @property
    def index(self) -> float:
        """Harrell's C: concordant pairs plus half the risk ties, over comparable pairs"""
        if self.comparable == 0:
            raise ZeroDivisionError("No comparable pairs; all subjects are censored")
        return (self.concordant + 0.5 * self.tied_risk) / self.comparable


def concordance_counts(time: Union[np.ndarray, pd.Series],
                       risk: Union[np.ndarray, pd.Series],
                       event: Union[np.ndarray, pd.Series]) -> ConcordanceCounts:
    """
    Count concordant, discordant and tied pairs of a risk score.

    A pair is comparable when the member with the shorter follow-up had an
    event. Equal follow-up times are comparable only if exactly one member
    had an event, that member counting as the earlier one. A comparable pair
    is concordant when the earlier member has the higher risk.

    Pairs with equal times where both had an event are not comparable and are
    counted in ``tied_time``.

    Parameters
    ----------
    time : array-like
        Follow-up times
    risk : array-like
        Risk scores, higher meaning an earlier expected event
    event : array-like
        Event indicators (1 event, 0 censored)

    Returns
    -------
    ConcordanceCounts
    """
    time = np.asarray(time, dtype=float)
    risk = np.asarray(risk, dtype=float)
    event = np.asarray(event).astype(bool)
    if not (len(time) == len(risk) == len(event)):
        raise ValueError("time, risk and event must have the same length")

    concordant = discordant = tied_risk = tied_time = 0
    # Pairs are counted one event subject at a time
    for i in np.flatnonzero(event):
        same_time = time == time[i]
        later = (time > time[i]) | (same_time & ~event)
        concordant += int(np.sum(later & (risk[i] > risk)))
        discordant += int(np.sum(later & (risk[i] < risk)))
        tied_risk += int(np.sum(later & (risk[i] == risk)))
        tied_time += int(np.sum(same_time & event)) - 1

    # Each tied-time pair was seen from both members
    return ConcordanceCounts(concordant, discordant, tied_risk, tied_time // 2)
