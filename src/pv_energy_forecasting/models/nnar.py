# stdlib
import warnings
from pathlib import Path
from typing import Dict, List, Optional, Union
# thirdpartylib
import numpy as np
import pandas as pd
import torch
from statsmodels.tsa.ar_model import ( # pyright: ignore
    ar_select_order,
)
# projectlib
from pv_energy_forecasting.utils.typing import (
    Address,
    ArrayLike1D,
    Levels,
    Verbosity,
)
from pv_energy_forecasting.utils.errors import ModelFitError
from pv_energy_forecasting.analysis.decomposition import seasonally_adjust
from pv_energy_forecasting.models.base import Forecaster, to_series
from pv_energy_forecasting.models.networks import (
    AutoregressiveNetwork,
    train_network,
)
from pv_energy_forecasting.models.results import (
    ForecastResult,
    future_periods,
)
from pv_energy_forecasting.config.defaults import (
    SEASONAL_PERIOD,
    HORIZON,
    LEVELS,
    NN_REPEATS,
    NN_PATHS,
)

Regressor = Union[ArrayLike1D, pd.DataFrame]

def _as_matrix(xreg: Regressor) -> np.ndarray:
    """Return regressors as a float matrix of shape (n, k)."""
    matrix = np.asarray(xreg, dtype=float)
    if matrix.ndim == 1:
        matrix = matrix.reshape(-1, 1)
    if matrix.ndim != 2:
        raise ValueError("Regressors must be one or two dimensional.")
    if np.isnan(matrix).any():
        raise ValueError("Regressors contain missing values.")
    return matrix

def select_ar_order(values: np.ndarray) -> int:
    """
    Order of the AIC-best linear autoregression, used as the number of
    non-seasonal lags of the network (at least 1).
    """
    n = len(values)
    max_lag = max(1, min(int(10 * np.log10(n)), n // 2 - 1))
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        selection = ar_select_order(values, maxlag=max_lag, ic="aic")
    lags = selection.ar_lags
    if not lags:
        return 1
    return int(max(lags))

class NNAR(Forecaster):
    """
    Neural network autoregression.

    Inputs are the lagged values ``y[t-1] .. y[t-p]`` and the seasonal
    lags ``y[t-m] .. y[t-P*m]`` (plus optional exogenous regressors at
    time ``t``), all standardised. An ensemble of ``repeats`` networks
    with one hidden layer of ``size`` units is trained from different
    random starts and averaged. Forecasts are produced recursively;
    prediction intervals come from simulated sample paths with Gaussian
    innovations scaled to the in-sample residuals.

    Parameters
    ----------
    period : int, default 12
        Seasonal period ``m``.
    p : int, optional
        Non-seasonal lags. Chosen by AIC on the seasonally adjusted
        series if None.
    P : int, default 1
        Seasonal lags.
    size : int, optional
        Hidden units, ``round((p + P + n_regressors) / 2)`` if None.
    repeats : int, default 20
        Networks in the ensemble.
    n_paths : int, default 1000
        Simulated paths for prediction intervals.
    decay : float, default 0.0
        Weight decay of each network.
    max_iter : int, default 100
        Training iterations of each network.
    seed : int, default 0
        Base seed for weight initialisation and simulation.
    """
    def __init__(
            self,
            period: int = SEASONAL_PERIOD,
            *,
            p: Optional[int] = None,
            P: int = 1,
            size: Optional[int] = None,
            repeats: int = NN_REPEATS,
            n_paths: int = NN_PATHS,
            decay: float = 0.0,
            max_iter: int = 100,
            seed: int = 0,
            verbose: Verbosity = 0,
            log_dir: Address = Path.cwd(),
            write_log: bool = False,
        ) -> None:
        super().__init__(
            period, verbose=verbose, log_dir=log_dir, write_log=write_log
        )
        if repeats < 1:
            raise ValueError("At least one network is required.")
        self.p_init, self.size_init = p, size
        self.p = p
        self.P = P
        self.size = size
        self.repeats = repeats
        self.n_paths = n_paths
        self.decay = decay
        self.max_iter = max_iter
        self.seed = seed
        self.lags: List[int] = []
        self.networks: List[AutoregressiveNetwork] = []
        self.sigma: float = 0.0
        self._xreg: Optional[np.ndarray] = None
        self._future_xreg: Optional[np.ndarray] = None
        self._scale: Dict[str, np.ndarray] = {}

    @property
    def has_regressor(self) -> bool:
        return self._xreg is not None

    @property
    def name(self) -> str:
        if self.p is None or self.size is None:
            return "NNAR"
        label = f"NNAR({self.p},{self.P},{self.size})[{self.period}]"
        if self.has_regressor:
            label += " with regressor"
        return label

    def fit(
            self,
            series: pd.Series,
            xreg: Optional[Regressor] = None,
        ) -> "NNAR":
        """
        Fit the ensemble, optionally with exogenous regressors aligned
        row by row with ``series``.
        """
        if xreg is not None:
            matrix = _as_matrix(xreg)
            if len(matrix) != len(series):
                msg = (
                    f"Regressor has {len(matrix)} rows but the series has "
                    f"{len(series)}."
                )
                raise ValueError(msg)
            self._xreg = matrix
        else:
            self._xreg = None
        self._future_xreg = None
        super().fit(series)
        return self

    def forecast(
            self,
            h: Optional[int] = None,
            levels: Levels = LEVELS,
            xreg: Optional[Regressor] = None,
        ) -> ForecastResult:
        """
        Forecast recursively.

        For a model fitted with regressors, ``xreg`` must hold their
        future values; the horizon equals its number of rows and each
        forecast is aligned with the corresponding row.

        Raises
        ------
        ValueError
            If regressor values are missing, superfluous, of the wrong
            width, or inconsistent with ``h``.
        """
        self._future_xreg = None
        if self._xreg is not None:
            if xreg is None:
                raise ValueError(
                    "Future regressor values are required to forecast a "
                    "model fitted with regressors."
                )
            future = _as_matrix(xreg)
            if future.shape[1] != self._xreg.shape[1]:
                raise ValueError(
                    f"Expected {self._xreg.shape[1]} regressor column(s), "
                    f"got {future.shape[1]}."
                )
            if h is not None and h != len(future):
                raise ValueError(
                    f"Horizon {h} does not match the {len(future)} future "
                    "regressor values."
                )
            self._future_xreg = future
            h = len(future)
        elif xreg is not None:
            raise ValueError("Model was fitted without regressors.")
        return super().forecast(HORIZON if h is None else h, levels)

    def _scaled(self, key: str, values: np.ndarray) -> np.ndarray:
        mean, sd = self._scale[key]
        return (values - mean) / sd

    def _design(self, y: np.ndarray, t: int) -> List[float]:
        """Lagged inputs for target index ``t`` of the scaled history."""
        return [y[t - lag] for lag in self.lags]

    def _ensemble(self, x: np.ndarray) -> np.ndarray:
        """Average prediction of all networks (scaled units)."""
        inputs = torch.as_tensor(x, dtype=torch.float32)
        with torch.no_grad():
            outputs = torch.stack([net(inputs) for net in self.networks])
        return outputs.mean(dim=0).numpy().astype(float)

    def _fit(self, series: pd.Series) -> None:
        values = series.to_numpy(dtype=float)
        n = len(values)
        sd = values.std()
        if sd == 0:
            raise ModelFitError(
                f"Series '{series.name}' is constant; nothing to learn."
            )
        self._scale["y"] = np.array([values.mean(), sd])
        self.p, self.size = self.p_init, self.size_init
        y = self._scaled("y", values)
        if self.p is None:
            adjusted = seasonally_adjust(series, self.period).to_numpy()
            self.p = select_ar_order(adjusted)
        seasonal_lags = [self.period * i for i in range(1, self.P + 1)]
        self.lags = sorted(set(range(1, self.p + 1)) | set(seasonal_lags))
        max_lag = max(self.lags)
        if n - max_lag < 2:
            msg = (
                f"Only {n - max_lag} training rows remain after lagging "
                f"by {max_lag}."
            )
            raise ModelFitError(msg)

        rows = [self._design(y, t) for t in range(max_lag, n)]
        x = np.asarray(rows, dtype=float)
        n_xreg = 0
        if self._xreg is not None:
            xreg_sd = self._xreg.std(axis=0)
            xreg_sd[xreg_sd == 0] = 1.0
            self._scale["xreg"] = np.vstack([self._xreg.mean(axis=0), xreg_sd])
            x = np.hstack([x, self._scaled("xreg", self._xreg)[max_lag:]])
            n_xreg = self._xreg.shape[1]
        if self.size is None:
            self.size = max(1, int(round((self.p + self.P + n_xreg) / 2)))
        self.logger(
            f"Lags {self.lags}, {n_xreg} regressor(s), "
            f"{self.size} hidden units, {self.repeats} networks",
            verbosity=2,
        )

        x_t = torch.as_tensor(x, dtype=torch.float32)
        y_t = torch.as_tensor(y[max_lag:], dtype=torch.float32)
        try:
            self.networks = [
                train_network(
                    x_t,
                    y_t,
                    self.size,
                    max_iter=self.max_iter,
                    decay=self.decay,
                    seed=self.seed + i,
                )
                for i in range(self.repeats)
            ]
        except RuntimeError as e:
            raise ModelFitError(f"{self.name} training failed: {e}") from e

        fitted_scaled = np.full(n, np.nan)
        fitted_scaled[max_lag:] = self._ensemble(x)
        if not np.isfinite(fitted_scaled[max_lag:]).all():
            raise ModelFitError(f"{self.name} produced non-finite fits.")
        mean, sd = self._scale["y"]
        self.fitted_values = to_series(
            fitted_scaled * sd + mean, series.index, "fitted"
        )
        self.sigma = float(np.std(y[max_lag:] - fitted_scaled[max_lag:]))

    def _step_inputs(
            self,
            paths: np.ndarray,
            step: int,
        ) -> np.ndarray:
        """Inputs for the next value of every path at forecast ``step``."""
        t = paths.shape[1]
        x = np.column_stack([paths[:, t - lag] for lag in self.lags])
        if self._future_xreg is not None:
            future = self._scaled("xreg", self._future_xreg)[step]
            x = np.hstack([x, np.tile(future, (len(paths), 1))])
        return x

    def _simulate(self, y: np.ndarray, h: int, noise: bool) -> np.ndarray:
        """
        Extend the scaled history ``h`` steps for a batch of paths; the
        deterministic forecast is the single path without innovations.
        """
        n_paths = self.n_paths if noise else 1
        rng = np.random.default_rng(self.seed)
        paths = np.tile(y, (n_paths, 1))
        for step in range(h):
            nxt = self._ensemble(self._step_inputs(paths, step))
            if noise:
                nxt = nxt + rng.normal(0.0, self.sigma, size=n_paths)
            paths = np.column_stack([paths, nxt])
        return paths[:, len(y):]

    def _forecast(self, h: int, levels: Levels) -> ForecastResult:
        if self.series is None:
            raise RuntimeError("Model has not been fit.")
        index = future_periods(self.series.index, h)
        mean, sd = self._scale["y"]
        y = self._scaled("y", self.series.to_numpy(dtype=float))
        point = self._simulate(y, h, noise=False)[0] * sd + mean
        sims = self._simulate(y, h, noise=True) * sd + mean
        lower: Dict[int, np.ndarray] = {}
        upper: Dict[int, np.ndarray] = {}
        for level in levels:
            tail = (100 - level) / 200
            lower[level] = np.quantile(sims, tail, axis=0)
            upper[level] = np.quantile(sims, 1 - tail, axis=0)

        return ForecastResult(
            model_identifier=self.name,
            point_forecast=to_series(point, index, "point_forecast"),
            lower_bound=pd.DataFrame(lower, index=index),
            upper_bound=pd.DataFrame(upper, index=index),
        )
