# projectlib
from pv_energy_forecasting.utils.typing import HoltWintersVariant, Levels

# Calendar period of monthly data (annual seasonality)
SEASONAL_PERIOD = 12
# Number of months forecast by every model
HORIZON = 12
# Confidence levels of prediction intervals (percent)
LEVELS: Levels = (80, 95)
# Networks averaged by the NNAR ensemble
NN_REPEATS = 20
# Simulated sample paths for NNAR prediction intervals
NN_PATHS = 1000
# Holt-Winters variant kept after visually comparing the three fits
FINAL_HOLT_WINTERS: HoltWintersVariant = "damped"
# Operator-supplied balance forecast (kWh) for the 12 months after the
# last observation. Fixed input of the NNAR model with regressor; it is
# not recomputed from the data.
OPERATOR_BALANCE_FORECAST = (
    -964.29, -588.84, 213.32, 638.36, 923.74, 789.57,
    698.11, 361.37, -363.04, -827.66, -1507.65, -1375.54,
)
