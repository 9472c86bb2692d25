# stdlib
import warnings
import itertools
from pathlib import Path
from typing import Dict, List, Literal, Optional, Tuple, Any
# thirdpartylib
import numpy as np
import pandas as pd
from statsmodels.tsa.arima.model import ( # pyright: ignore
    ARIMA,
    ARIMAResults,
)
from statsmodels.tsa.stattools import kpss # pyright: ignore
# projectlib
from pv_energy_forecasting.utils.typing import Address, Levels, Verbosity
from pv_energy_forecasting.utils.errors import ModelFitError
from pv_energy_forecasting.analysis.decomposition import (
    stl_decompose,
    seasonal_strength,
)
from pv_energy_forecasting.models.base import (
    Forecaster,
    interval_alpha,
    to_series,
)
from pv_energy_forecasting.models.results import (
    ForecastResult,
    future_periods,
)
from pv_energy_forecasting.config.defaults import SEASONAL_PERIOD

Criterion = Literal["aicc", "aic", "bic"]
Order = Tuple[int, int, int]

# Seasonal strength above which one seasonal difference is taken
SEASONAL_STRENGTH_THRESHOLD = 0.64
# Significance of the KPSS unit-root test
KPSS_ALPHA = 0.05

def seasonal_diffs(
        values: np.ndarray,
        period: int,
        max_D: int = 1,
    ) -> int:
    """
    Number of seasonal differences, from the STL seasonal strength of
    the series.
    """
    if max_D == 0 or len(values) < 2 * period:
        return 0
    components = stl_decompose(pd.Series(values), period)
    strength = seasonal_strength(components)
    return int(strength > SEASONAL_STRENGTH_THRESHOLD)

def ndiffs(values: np.ndarray, max_d: int = 2) -> int:
    """
    Number of first differences needed for level stationarity, using
    repeated KPSS tests at ``KPSS_ALPHA``.
    """
    x = np.asarray(values, dtype=float)
    d = 0
    while d < max_d:
        if len(x) < 4 or np.allclose(x, x[0]):
            break
        with warnings.catch_warnings():
            # p-values outside the lookup table only trigger a warning
            warnings.simplefilter("ignore")
            _, p_value, _, _ = kpss(x, regression="c", nlags="auto")
        if p_value >= KPSS_ALPHA:
            break
        x = np.diff(x)
        d += 1
    return d

def describe_arima(
        order: Order,
        seasonal_order: Tuple[int, int, int, int],
        trend: str,
    ) -> str:
    """Return an identifier such as ``ARIMA(1,0,0)(0,1,1)[12] w/ drift``."""
    p, d, q = order
    P, D, Q, m = seasonal_order
    label = f"ARIMA({p},{d},{q})"
    if P or D or Q:
        label += f"({P},{D},{Q})[{m}]"
    if trend == "t":
        label += " w/ drift"
    elif trend == "c":
        label += " w/ mean"
    return label

class AutoARIMA(Forecaster):
    """
    Automatic seasonal ARIMA selection.

    The differencing orders are fixed first (seasonal strength for
    ``D``, KPSS tests for ``d``); every remaining combination of
    ``(p, q)(P, Q)`` within the bounds, with and without a constant or
    drift term where the differencing allows it, is then fitted by
    exact maximum likelihood and the one minimising the information
    criterion is kept. There is no stepwise shortcut and no likelihood
    approximation.
    """
    def __init__(
            self,
            period: int = SEASONAL_PERIOD,
            *,
            max_p: int = 5,
            max_q: int = 5,
            max_P: int = 2,
            max_Q: int = 2,
            max_order: int = 5,
            max_d: int = 2,
            max_D: int = 1,
            allow_drift: bool = True,
            allow_mean: bool = True,
            criterion: Criterion = "aicc",
            verbose: Verbosity = 0,
            log_dir: Address = Path.cwd(),
            write_log: bool = False,
        ) -> None:
        super().__init__(
            period, verbose=verbose, log_dir=log_dir, write_log=write_log
        )
        self.max_p, self.max_q = max_p, max_q
        self.max_P, self.max_Q = max_P, max_Q
        self.max_order = max_order
        self.max_d, self.max_D = max_d, max_D
        self.allow_drift = allow_drift
        self.allow_mean = allow_mean
        self.criterion = criterion
        self.order: Optional[Order] = None
        self.seasonal_order: Optional[Tuple[int, int, int, int]] = None
        self.trend: str = "n"
        self.results: Optional[ARIMAResults] = None
        self.candidates: Optional[pd.DataFrame] = None

    @property
    def name(self) -> str:
        if self.order is None or self.seasonal_order is None:
            return "ARIMA"
        return describe_arima(self.order, self.seasonal_order, self.trend)

    def _trend_options(self, d: int, D: int) -> List[str]:
        """Deterministic terms admissible for the differencing orders."""
        options = ["n"]
        if d + D == 0 and self.allow_mean:
            options.append("c")
        # With one difference a linear trend survives as drift
        elif d + D == 1 and self.allow_drift:
            options.append("t")
        return options

    def _grid(self, d: int, D: int):
        """Yield every ``(order, seasonal_order, trend)`` candidate."""
        seasonal = self.period > 1
        for p, q, P, Q in itertools.product(
            range(self.max_p + 1),
            range(self.max_q + 1),
            range(self.max_P + 1 if seasonal else 1),
            range(self.max_Q + 1 if seasonal else 1),
        ):
            if p + q + P + Q > self.max_order:
                continue
            for trend in self._trend_options(d, D):
                yield (p, d, q), (P, D, Q, self.period), trend

    def _fit_candidate(
            self,
            values: np.ndarray,
            order: Order,
            seasonal_order: Tuple[int, int, int, int],
            trend: str,
        ) -> Optional[ARIMAResults]:
        """Fit one candidate; return None if estimation fails."""
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore")
                model = ARIMA(
                    values,
                    order=order,
                    seasonal_order=seasonal_order,
                    trend=trend,
                )
                return model.fit() # pyright: ignore[reportUnknownMemberType]
        except (ValueError, np.linalg.LinAlgError, IndexError) as e:
            label = describe_arima(order, seasonal_order, trend)
            self.logger(f"{label} failed: {e}", verbosity=2)
            return None

    def _fit(self, series: pd.Series) -> None:
        values = series.to_numpy(dtype=float)
        D = seasonal_diffs(values, self.period, self.max_D)
        x = values[self.period:] - values[:-self.period] if D else values
        d = ndiffs(x, self.max_d)
        self.logger(f"Differencing orders: d={d}, D={D}", verbosity=1)

        rows: List[Dict[str, Any]] = []
        best: Optional[ARIMAResults] = None
        best_score = np.inf
        for order, seasonal_order, trend in self._grid(d, D):
            res = self._fit_candidate(values, order, seasonal_order, trend)
            if res is None:
                continue
            score = float(getattr(res, self.criterion))
            label = describe_arima(order, seasonal_order, trend)
            rows.append({"model": label, self.criterion: score})
            self.logger(f"{label}: {self.criterion}={score:.2f}", 2)
            if np.isfinite(score) and score < best_score:
                best, best_score = res, score
                self.order, self.seasonal_order = order, seasonal_order
                self.trend = trend

        if best is None:
            raise ModelFitError(
                "No ARIMA candidate could be estimated for "
                f"'{series.name}'."
            )
        self.results = best
        self.candidates = (
            pd.DataFrame(rows)
            .sort_values(self.criterion)
            .reset_index(drop=True)
        )
        self.fitted_values = to_series(
            best.fittedvalues, series.index, "fitted"
        )
        self.logger(
            f"Selected {self.name} ({self.criterion}={best_score:.2f}) "
            f"from {len(rows)} candidates",
            verbosity=1,
        )

    def _forecast(self, h: int, levels: Levels) -> ForecastResult:
        if self.results is None or self.series is None:
            raise RuntimeError("Model has not been fit.")
        index = future_periods(self.series.index, h)
        prediction = self.results.get_forecast(steps=h)
        mean = to_series(prediction.predicted_mean, index, "point_forecast")
        lower: Dict[int, np.ndarray] = {}
        upper: Dict[int, np.ndarray] = {}
        for level in levels:
            ci = np.asarray(prediction.conf_int(alpha=interval_alpha(level)))
            lower[level], upper[level] = ci[:, 0], ci[:, 1]

        return ForecastResult(
            model_identifier=self.name,
            point_forecast=mean,
            lower_bound=pd.DataFrame(lower, index=index),
            upper_bound=pd.DataFrame(upper, index=index),
        )
