"""
Hand-computed hazard rates for the IUD discontinuation data
"""

import os
import matplotlib.pyplot as plt
from survexplore.data import iud_example
from survexplore.models import KaplanMeierCurve
from survexplore.utils import HazardEstimator
from survexplore.visualization import plot_survival_curve, plot_hazard_table

y = iud_example()
print(f"{len(y)} women, {y.n_events} discontinuations")

curve = KaplanMeierCurve().fit(y, label="IUD use")
print("\nSurvival table:")
print(curve.to_frame().round(4))

# Hazard over each interval between discontinuations: d / (n * width)
hazard = HazardEstimator.interval_hazard_table(curve)
print("\nHazard estimates:")
print(hazard.round(4))

plt.ioff()
os.makedirs('examples/plots', exist_ok=True)

fig, (left, right) = plt.subplots(1, 2, figsize=(14, 5))
plot_survival_curve(curve, ax=left)
plot_hazard_table(hazard, ax=right)
fig.savefig('examples/plots/iud_hazard.png', dpi=150, bbox_inches='tight')
plt.close(fig)

print("\nPlot saved to examples/plots/iud_hazard.png")
