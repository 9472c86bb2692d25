# stdlib
import warnings
from pathlib import Path
from typing import Dict, Optional, Tuple
# thirdpartylib
import numpy as np
import pandas as pd
from statsmodels.tsa.exponential_smoothing.ets import ( # pyright: ignore
    ETSModel,
    ETSResults,
)
# projectlib
from pv_energy_forecasting.utils.typing import (
    Address,
    HoltWintersVariant,
    Levels,
    SeasonalMode,
    Verbosity,
)
from pv_energy_forecasting.utils.errors import ModelFitError
from pv_energy_forecasting.models.base import (
    Forecaster,
    interval_alpha,
    to_series,
)
from pv_energy_forecasting.models.results import (
    ForecastResult,
    future_periods,
)
from pv_energy_forecasting.config.defaults import (
    SEASONAL_PERIOD,
    HORIZON,
    LEVELS,
)

# Sample paths used for intervals of multiplicative-error models
SIMULATION_REPETITIONS = 1000
# Variants compared by the operator: (seasonal, damped)
VARIANTS: Dict[HoltWintersVariant, Tuple[SeasonalMode, bool]] = {
    "additive": ("additive", False),
    "multiplicative": ("multiplicative", False),
    "damped": ("multiplicative", True),
}

class HoltWinters(Forecaster):
    """
    Holt-Winters exponential smoothing in its ETS state space form.

    Additive seasonality is ETS(A,A,A); multiplicative seasonality is
    ETS(M,A,M), with a damped trend ETS(M,Ad,M) when ``damped`` is set.
    Multiplicative variants require strictly positive data.
    """
    def __init__(
            self,
            seasonal: SeasonalMode = "additive",
            *,
            damped: bool = False,
            period: int = SEASONAL_PERIOD,
            seed: int = 0,
            verbose: Verbosity = 0,
            log_dir: Address = Path.cwd(),
            write_log: bool = False,
        ) -> None:
        super().__init__(
            period, verbose=verbose, log_dir=log_dir, write_log=write_log
        )
        if seasonal not in ("additive", "multiplicative"):
            raise ValueError(f"Unknown seasonal mode '{seasonal}'.")
        self.seasonal = seasonal
        self.damped = damped
        self.seed = seed
        self.results: Optional[ETSResults] = None

    @property
    def error(self) -> str:
        return "add" if self.seasonal == "additive" else "mul"

    @property
    def name(self) -> str:
        e = "A" if self.error == "add" else "M"
        s = "A" if self.seasonal == "additive" else "M"
        t = "Ad" if self.damped else "A"
        return f"ETS({e},{t},{s})"

    def _fit(self, series: pd.Series) -> None:
        values = series.to_numpy(dtype=float)
        if self.seasonal == "multiplicative" and (values <= 0).any():
            raise ModelFitError(
                "Multiplicative Holt-Winters requires strictly positive "
                f"data; '{series.name}' has non-positive values."
            )
        # Indexed endog; predictions past the sample are built on its index
        model = ETSModel(
            pd.Series(values),
            error=self.error,
            trend="add",
            damped_trend=self.damped,
            seasonal="add" if self.seasonal == "additive" else "mul",
            seasonal_periods=self.period,
        )
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore")
                self.results = model.fit( # pyright: ignore
                    disp=False
                )
        except (ValueError, np.linalg.LinAlgError) as e:
            raise ModelFitError(f"{self.name} failed to fit: {e}") from e
        self.fitted_values = to_series(
            self.results.fittedvalues, series.index, "fitted"
        )

    def _forecast(self, h: int, levels: Levels) -> ForecastResult:
        if self.results is None or self.series is None:
            raise RuntimeError("Model has not been fit.")
        n = len(self.series)
        index = future_periods(self.series.index, h)
        prediction = self.results.get_prediction(
            start=n,
            end=n + h - 1,
            simulate_repetitions=SIMULATION_REPETITIONS,
            random_state=self.seed,
        )
        mean = to_series(prediction.predicted_mean, index, "point_forecast")
        lower: Dict[int, np.ndarray] = {}
        upper: Dict[int, np.ndarray] = {}
        for level in levels:
            frame = prediction.summary_frame(alpha=interval_alpha(level))
            lower[level] = frame["pi_lower"].to_numpy()
            upper[level] = frame["pi_upper"].to_numpy()

        return ForecastResult(
            model_identifier=self.name,
            point_forecast=mean,
            lower_bound=pd.DataFrame(lower, index=index),
            upper_bound=pd.DataFrame(upper, index=index),
        )

def fit_holt_winters_variants(
        series: pd.Series,
        *,
        period: int = SEASONAL_PERIOD,
        verbose: Verbosity = 0,
    ) -> Dict[HoltWintersVariant, HoltWinters]:
    """
    Fit the additive, multiplicative and damped multiplicative variants
    side by side. No variant is selected automatically.
    """
    models: Dict[HoltWintersVariant, HoltWinters] = {}
    for variant, (seasonal, damped) in VARIANTS.items():
        models[variant] = HoltWinters(
            seasonal,
            damped=damped,
            period=period,
            verbose=verbose,
        ).fit(series)
    return models

def forecast_holt_winters_variants(
        models: Dict[HoltWintersVariant, HoltWinters],
        h: int = HORIZON,
        levels: Levels = LEVELS,
    ) -> Dict[HoltWintersVariant, ForecastResult]:
    """Forecast every fitted variant over the same horizon."""
    return {
        variant: model.forecast(h, levels)
        for variant, model in models.items()
    }
