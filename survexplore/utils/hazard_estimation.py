"""
Discrete-time hazard estimates derived from a fitted survival table.
"""
from typing import Union
import numpy as np
import pandas as pd

class HazardEstimator:
    """Hazard tabulations computed from Kaplan-Meier survival tables."""

    @staticmethod
    def interval_hazard_table(curve) -> pd.DataFrame:
        """
        Tabulate the hazard rate over the intervals between event times.

        The interval starting at event time ``t_j`` runs to the next event
        time ``t_{j+1}``. Over it the hazard is taken to be constant,

            h_j = d_j / (n_j * tau_j),   tau_j = t_{j+1} - t_j

        with ``d_j`` events among ``n_j`` at risk at ``t_j``. Intervals whose
        starting time also has censorings are left out, as is the last event
        time, which has no closing event time.

        Parameters
        ----------
        curve : KaplanMeierCurve or pd.DataFrame
            A fitted curve, or its ``to_frame()`` table with columns time,
            n_risk, n_event and n_censor

        Returns
        -------
        pd.DataFrame
            Columns start, end, width, n_risk, n_event, n_censor, hazard
        """
        table = curve if isinstance(curve, pd.DataFrame) else curve.to_frame()
        required = ["time", "n_risk", "n_event", "n_censor"]
        missing = [c for c in required if c not in table.columns]
        if missing:
            raise ValueError(f"Survival table is missing columns: {missing}")

        events = table.loc[table["n_event"] > 0, required].sort_values("time")
        events = events.reset_index(drop=True)

        start = events["time"].values.astype(float)
        end = np.append(start[1:], np.nan)
        width = end - start

        hazard = pd.DataFrame({
            "start": start,
            "end": end,
            "width": width,
            "n_risk": events["n_risk"].values,
            "n_event": events["n_event"].values,
            "n_censor": events["n_censor"].values,
        })
        hazard["hazard"] = hazard["n_event"] / (hazard["n_risk"] * hazard["width"])

        keep = (hazard["n_censor"] == 0) & hazard["end"].notna()
        return hazard.loc[keep].reset_index(drop=True)

    @staticmethod
    def transform_hazard(
        cumulative_hazard: Union[np.ndarray, pd.Series],
        transform: str = "exp"
    ) -> np.ndarray:
        """
        Transform cumulative hazard to survival or cumulative incidence.

        Parameters
        ----------
        cumulative_hazard : array-like
            Cumulative hazard values
        transform : str
            Transformation type: "exp" for survival, "cif" for the
            cumulative incidence ``1 - exp(-H)``

        Returns
        -------
        np.ndarray
            Transformed values
        """
        cumulative_hazard = np.asarray(cumulative_hazard, dtype=float)
        if transform == "exp":
            return np.exp(-cumulative_hazard)
        elif transform == "cif":
            return 1 - np.exp(-cumulative_hazard)
        else:
            raise ValueError("Transform must be 'exp' or 'cif'")
