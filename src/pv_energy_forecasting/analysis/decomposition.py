# thirdpartylib
import numpy as np
import pandas as pd
from statsmodels.tsa.seasonal import STL # pyright: ignore[reportMissingTypeStubs]
# projectlib
from pv_energy_forecasting.utils.errors import InsufficientDataError
from pv_energy_forecasting.config.defaults import SEASONAL_PERIOD

def periodic_window(n: int) -> int:
    """
    Seasonal smoother length emulating a periodic seasonal window.

    A window far longer than the series makes every cycle share the
    same seasonal shape; the length is odd as STL requires.
    """
    return 10 * n + 1

def stl_decompose(
        series: pd.Series,
        period: int = SEASONAL_PERIOD,
        *,
        robust: bool = True,
    ) -> pd.DataFrame:
    """
    Additive STL decomposition with a periodic seasonal window.

    Parameters
    ----------
    series : pandas.Series
        Complete (imputed) series, e.g. total production.
    period : int, default 12
        Seasonal period in samples.
    robust : bool, default True
        Use robust LOESS weights so single outlying months do not bend
        the trend.

    Returns
    -------
    pandas.DataFrame
        Columns ``observed``, ``trend``, ``seasonal`` and ``remainder``
        sharing the index of ``series``.

    Raises
    ------
    InsufficientDataError
        If the series spans fewer than two seasonal cycles.
    ValueError
        If the series contains missing values.
    """
    if len(series) < 2 * period:
        msg = (
            f"STL needs at least {2 * period} observations, "
            f"got {len(series)}."
        )
        raise InsufficientDataError(msg)
    if series.isna().any():
        raise ValueError("STL decomposition requires a complete series.")

    values = series.to_numpy(dtype=float)
    result = STL(
        values,
        period=period,
        seasonal=periodic_window(len(values)),
        seasonal_deg=0,
        robust=robust,
    ).fit()

    return pd.DataFrame(
        {
            "observed": values,
            "trend": np.asarray(result.trend),
            "seasonal": np.asarray(result.seasonal),
            "remainder": np.asarray(result.resid),
        },
        index=series.index,
    )

def seasonal_strength(components: pd.DataFrame) -> float:
    """
    Strength of seasonality ``max(0, 1 - Var(R) / Var(S + R))`` of an
    STL decomposition, between 0 (none) and 1 (purely seasonal).
    """
    remainder = components["remainder"].to_numpy()
    detrended = components["seasonal"].to_numpy() + remainder
    denom = np.var(detrended)
    if denom == 0:
        return 0.0
    return float(max(0.0, 1.0 - np.var(remainder) / denom))

def seasonally_adjust(
        series: pd.Series,
        period: int = SEASONAL_PERIOD,
    ) -> pd.Series:
    """Return ``series`` minus its STL seasonal component."""
    components = stl_decompose(series, period)
    return series - components["seasonal"]

def seasonal_profile(series: pd.Series) -> pd.DataFrame:
    """
    Pivot a monthly series into a year x month table (one row per year,
    columns 1..12), as drawn by the seasonal plot.
    """
    index = pd.PeriodIndex(series.index)
    frame = pd.DataFrame({
        "year": index.year,
        "month": index.month,
        "value": series.to_numpy(),
    })
    profile = frame.pivot(index="year", columns="month", values="value")

    return profile.reindex(columns=range(1, 13))

def subseries_means(series: pd.Series) -> pd.Series:
    """Mean of each calendar month across years."""
    index = pd.PeriodIndex(series.index)
    means = series.groupby( # pyright: ignore[reportUnknownMemberType]
        index.month
    ).mean()
    means.index.name = "month"
    return means
