# stdlib
from pathlib import Path
from typing import Optional, Iterable, Dict
# thirdpartylib
import numpy as np
import pandas as pd
from statsmodels.tsa.seasonal import ( # pyright: ignore[reportMissingTypeStubs]
    seasonal_decompose,
)
from statsmodels.tsa.stattools import acf # pyright: ignore
# projectlib
from pv_energy_forecasting.utils.typing import (
    Address,
    ImputeStrategy,
    Verbosity,
)
from pv_energy_forecasting.utils.logging import Logger
from pv_energy_forecasting.utils.errors import InsufficientDataError
from pv_energy_forecasting.data.schemas import RAW_SERIES
from pv_energy_forecasting.config.defaults import SEASONAL_PERIOD

# Share of spectral power the dominant frequency must carry before a
# detected period overrides the calendar default
MIN_PEAK_SHARE = 0.2

def _provisional_fill(values: np.ndarray) -> np.ndarray:
    """Linearly interpolate NaNs, extending edge values outward."""
    out = values.astype(float).copy()
    mask = np.isnan(out)
    if mask.all():
        raise InsufficientDataError("Series has no observed values.")
    if mask.any():
        idx = np.arange(len(out))
        out[mask] = np.interp(idx[mask], idx[~mask], out[~mask])
    return out

def detect_period(
        series: pd.Series,
        default: int = SEASONAL_PERIOD,
    ) -> int:
    """
    Return the dominant seasonal period (in samples) of a series.

    The series is provisionally interpolated and linearly detrended.
    The strongest non-zero frequency bin of its FFT brackets the period
    between the periods of the neighbouring bins. If ``default`` falls
    in that bracket it is returned; otherwise the period is the lag
    with the highest autocorrelation inside the bracket, limited to
    ``[2, n // 2]``. A peak carrying less than ``MIN_PEAK_SHARE`` of
    the spectral power also yields ``default``.
    """
    values = _provisional_fill(series.to_numpy(dtype=float))
    n = len(values)
    if n < 4:
        return default
    # Remove a linear trend so the zero frequency does not dominate
    t = np.arange(n)
    slope, intercept = np.polyfit(t, values, 1)
    detrended = values - (slope * t + intercept)
    spec = np.abs(np.fft.rfft(detrended)) ** 2
    # Ignore zero frequency
    if len(spec) < 3 or spec[1:].sum() == 0:
        return default
    k = int(np.argmax(spec[1:])) + 1
    share = spec[k] / spec[1:].sum()
    if share < MIN_PEAK_SHARE:
        return default
    shortest = max(2, int(np.floor(n / (k + 1))))
    longest = n // 2
    if k > 1:
        longest = min(longest, int(np.ceil(n / (k - 1))))
    if shortest > longest:
        return default
    if shortest <= default <= longest:
        return default
    corr = acf(detrended, nlags=longest, fft=True)
    lags = np.arange(shortest, longest + 1)

    return int(lags[np.argmax(corr[lags])])

def _require_cycles(series: pd.Series, period: int) -> None:
    """Raise if the series spans fewer than two full seasonal cycles."""
    if len(series) < 2 * period:
        msg = (
            f"Series '{series.name}' has {len(series)} observations; "
            f"at least {2 * period} (two cycles of period {period}) "
            "are required."
        )
        raise InsufficientDataError(msg)

def _impute_decompose(series: pd.Series, period: int) -> pd.Series:
    """
    Remove the seasonal component, interpolate the remainder and add
    the seasonal component back.
    """
    values = series.to_numpy(dtype=float)
    filled = _provisional_fill(values)
    decomposition = seasonal_decompose(
        filled,
        model="additive",
        period=period,
        extrapolate_trend="freq",
    )
    seasonal = np.asarray(decomposition.seasonal)
    remainder = pd.Series(values - seasonal)
    remainder = remainder.interpolate(
        method="linear",
        limit_direction="both",
    )

    return pd.Series(
        remainder.to_numpy() + seasonal,
        index=series.index,
        name=series.name,
    )

def _impute_split(series: pd.Series, period: int) -> pd.Series:
    """
    Split the series into one subseries per season position and
    interpolate each subseries on its own.
    """
    values = series.to_numpy(dtype=float)
    out = values.copy()
    for season in range(period):
        positions = np.arange(season, len(values), period)
        sub = pd.Series(values[positions])
        if sub.isna().all():
            # Nothing observed in this season; borrow from neighbours
            continue
        out[positions] = sub.interpolate(
            method="linear",
            limit_direction="both",
        ).to_numpy()
    if np.isnan(out).any():
        out = _provisional_fill(out)

    return pd.Series(out, index=series.index, name=series.name)

def impute_seasonal(
        series: pd.Series,
        *,
        period: Optional[int] = None,
        find_frequency: bool = True,
        strategy: ImputeStrategy = "decompose",
    ) -> pd.Series:
    """
    Fill missing values of a seasonal series.

    Parameters
    ----------
    series : pandas.Series
        Series with NaN where observations are missing.
    period : int, optional
        Seasonal period. If None, it is detected with
        :func:`detect_period` when ``find_frequency`` is True, otherwise
        ``SEASONAL_PERIOD`` is used.
    find_frequency : bool, default True
        Whether to detect the period from the data.
    strategy : {"decompose", "split"}, default "decompose"
        ``"decompose"`` interpolates the de-seasonalised remainder and
        adds the seasonal component back; ``"split"`` interpolates each
        season's subseries separately.

    Returns
    -------
    pandas.Series
        Series of the same length with no missing values. Observed
        values are returned unchanged.

    Raises
    ------
    InsufficientDataError
        If the series spans fewer than two seasonal cycles or has no
        observed values.
    """
    if series.notna().sum() == 0:
        raise InsufficientDataError(
            f"Series '{series.name}' has no observed values."
        )
    if period is None:
        # Never guess a period from less than two calendar cycles
        _require_cycles(series, SEASONAL_PERIOD)
        period = detect_period(series) if find_frequency else SEASONAL_PERIOD
    _require_cycles(series, period)
    if not series.isna().any():
        return series.copy()

    match strategy:
        case "decompose":
            imputed = _impute_decompose(series, period)
        case "split":
            imputed = _impute_split(series, period)
        case _:
            raise ValueError(f"Unknown imputation strategy '{strategy}'.")
    # Observed values are kept exactly
    return series.where(series.notna(), imputed)

def impute_frame(
        frame: pd.DataFrame,
        columns: Iterable[str] = RAW_SERIES,
        *,
        period: Optional[int] = None,
        find_frequency: bool = True,
        strategy: ImputeStrategy = "decompose",
        verbose: Verbosity = 0,
        log_dir: Address = Path.cwd(),
        write_log: bool = False,
    ) -> pd.DataFrame:
    """
    Impute each of ``columns`` independently with
    :func:`impute_seasonal` and return a new frame.
    """
    logger = Logger(verbose, log_dir, write_log, name="imputer")
    out = frame.copy()
    filled: Dict[str, int] = {}
    for col in columns:
        series = frame[col]
        n_missing = int(series.isna().sum())
        out[col] = impute_seasonal(
            series,
            period=period,
            find_frequency=find_frequency,
            strategy=strategy,
        )
        filled[col] = n_missing
        logger(f"{col}: filled {n_missing} value(s)", verbosity=1)
    logger(f"Imputed {sum(filled.values())} value(s) in total", verbosity=2)

    return out
