# stdlib
from pathlib import Path
from typing import Optional
# thirdpartylib
import numpy as np
import pandas as pd
# projectlib
from pv_energy_forecasting.utils.typing import Address, Levels, Verbosity
from pv_energy_forecasting.utils.logging import Logger
from pv_energy_forecasting.utils.errors import InsufficientDataError
from pv_energy_forecasting.models.results import ForecastResult
from pv_energy_forecasting.config.defaults import (
    SEASONAL_PERIOD,
    HORIZON,
    LEVELS,
)

class Forecaster(object):
    """
    Parent class of the monthly forecasters.

    Responsibilities:
    - Validating the training series (complete, long enough)
    - Holding the training series, fitted values and a logger
    - Guarding ``forecast`` against use before ``fit``

    Subclasses implement ``_fit``, ``_forecast`` and ``name``.
    """
    def __init__(
            self,
            period: int = SEASONAL_PERIOD,
            *,
            verbose: Verbosity = 0,
            log_dir: Address = Path.cwd(),
            write_log: bool = False,
        ) -> None:
        self.period = period
        self.logger = Logger(
            verbose, log_dir, write_log, name=type(self).__name__
        )
        self.series: Optional[pd.Series] = None
        self.fitted_values: Optional[pd.Series] = None

    @property
    def name(self) -> str:
        raise NotImplementedError

    @property
    def is_fitted(self) -> bool:
        return self.series is not None

    def _validate(self, series: pd.Series) -> pd.Series:
        """Check completeness and length of a training series."""
        if series.isna().any():
            raise ValueError(
                f"Series '{series.name}' contains missing values; "
                "impute it before fitting."
            )
        if len(series) < 2 * self.period:
            msg = (
                f"{type(self).__name__} needs at least {2 * self.period} "
                f"observations (two seasonal cycles), got {len(series)}."
            )
            raise InsufficientDataError(msg)
        return series.astype(float)

    def fit(self, series: pd.Series) -> "Forecaster":
        """
        Fit the model to a complete, period-indexed series.

        Raises
        ------
        InsufficientDataError
            If the series spans fewer than two seasonal cycles.
        ModelFitError
            If the underlying estimation routine fails.
        """
        series = self._validate(series)
        self._fit(series)
        self.series = series
        self.logger(f"Fitted {self.name}", verbosity=1)
        return self

    def forecast(
            self,
            h: int = HORIZON,
            levels: Levels = LEVELS,
        ) -> ForecastResult:
        """
        Forecast ``h`` months ahead with prediction intervals at each of
        ``levels`` (percent).
        """
        if not self.is_fitted:
            raise RuntimeError(
                f"{type(self).__name__} must be fit before forecasting."
            )
        if h < 1:
            raise ValueError("Forecast horizon must be at least 1.")
        for level in levels:
            if not 0 < level < 100:
                raise ValueError(f"Invalid confidence level {level}.")
        result = self._forecast(h, tuple(levels))
        self.logger(
            f"Forecast {len(result)} months with {result.model_identifier}",
            verbosity=2,
        )
        return result

    @property
    def residuals(self) -> pd.Series:
        """In-sample one-step residuals (observed minus fitted)."""
        if self.series is None or self.fitted_values is None:
            raise RuntimeError("Model has not been fit.")
        return self.series - self.fitted_values

    def _fit(self, series: pd.Series) -> None:
        raise NotImplementedError

    def _forecast(self, h: int, levels: Levels) -> ForecastResult:
        raise NotImplementedError

def interval_alpha(level: int) -> float:
    """Two-sided significance for a confidence level in percent."""
    return 1.0 - level / 100.0

def to_series(values: np.ndarray, index: pd.Index, name: str) -> pd.Series:
    return pd.Series(np.asarray(values, dtype=float), index=index, name=name)
