# stdlib
from typing import Mapping, Optional, Sequence, Tuple
# thirdpartylib
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import matplotlib as mpl
from cycler import cycler
from matplotlib.axes import Axes
from matplotlib.figure import Figure
# projectlib
from pv_energy_forecasting.models.results import ForecastResult
from pv_energy_forecasting.analysis.decomposition import (
    seasonal_profile,
    subseries_means,
)

MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def use_dark_theme() -> None:
    """
    Apply a shadcn-inspired dark theme to Matplotlib.

    This function updates Matplotlib's global rcParams to use a dark
    color palette with subtle gridlines, muted text, and a modern line
    color cycle suitable for monthly energy charts.
    """
    mpl.rcParams.update({
        "figure.facecolor": "#0a0a0a",
        "axes.facecolor": "#171717",
        "axes.edgecolor": "#ffffff1a",
        "axes.labelcolor": "#fafafa",
        "axes.titlecolor": "#fafafa",
        "grid.color": "#ffffff1a",
        "grid.alpha": 0.4,
        "grid.linewidth": 0.2,
        "xtick.color": "#a1a1a1",
        "ytick.color": "#a1a1a1",
        "lines.linewidth": 1.6,
        "text.color": "#e5e7eb",
        "legend.edgecolor": "#ffffff1a",
        "legend.facecolor": "#171717",
        "legend.fontsize": 9,
        "legend.frameon": True,
        "axes.grid": True,
        "axes.prop_cycle": cycler(color=[
            "#1447e6",
            "#00bc7d",
            "#fe9a00",
            "#ad46ff",
            "#ff2056",
        ]),
    })


def _timestamps(index: pd.Index) -> pd.DatetimeIndex:
    """Convert a monthly PeriodIndex to timestamps Matplotlib can draw."""
    if isinstance(index, pd.PeriodIndex):
        return index.to_timestamp()
    return pd.DatetimeIndex(index)


def _new_axes(ax: Optional[Axes], figsize: Tuple[int, int] = (12, 5)) -> Axes:
    use_dark_theme()
    if ax is None:
        _, ax = plt.subplots( # pyright: ignore[reportUnknownMemberType]
            figsize=figsize
        )
    return ax


def plot_series(
        frame: pd.DataFrame,
        columns: Sequence[str],
        *,
        title: str,
        ylabel: str = "kWh",
        ax: Optional[Axes] = None,
    ) -> Axes:
    """
    Plot one or more monthly series of ``frame`` on a shared time axis,
    shading the area under each line.
    """
    ax = _new_axes(ax)
    x = _timestamps(frame.index)
    baseline = float(np.nanmin(frame[list(columns)].to_numpy()))
    for col in columns:
        line, = ax.plot( # pyright: ignore[reportUnknownMemberType]
            x, frame[col].to_numpy(), label=col
        )
        ax.fill_between( # pyright: ignore[reportUnknownMemberType]
            x,
            frame[col].to_numpy(),
            baseline,
            color=line.get_color(),
            alpha=0.15,
        )
    ax.set_title(title) # pyright: ignore[reportUnknownMemberType]
    ax.set_xlabel("Month") # pyright: ignore[reportUnknownMemberType]
    ax.set_ylabel(ylabel) # pyright: ignore[reportUnknownMemberType]
    ax.legend() # pyright: ignore[reportUnknownMemberType]
    return ax


def plot_seasonal(
        series: pd.Series,
        *,
        title: Optional[str] = None,
        ylabel: str = "kWh",
        ax: Optional[Axes] = None,
    ) -> Axes:
    """Seasonal plot: one line per year across the twelve months."""
    ax = _new_axes(ax)
    profile = seasonal_profile(series)
    months = np.arange(1, 13)
    for year, row in profile.iterrows():
        ax.plot( # pyright: ignore[reportUnknownMemberType]
            months, row.to_numpy(), marker="o", markersize=3,
            label=str(year),
        )
    ax.set_xticks(months, MONTH_LABELS) # pyright: ignore
    ax.set_title( # pyright: ignore[reportUnknownMemberType]
        title or f"Seasonal plot: {series.name}"
    )
    ax.set_ylabel(ylabel) # pyright: ignore[reportUnknownMemberType]
    ax.legend(title="Year") # pyright: ignore[reportUnknownMemberType]
    return ax


def plot_subseries(
        series: pd.Series,
        *,
        title: Optional[str] = None,
        ylabel: str = "kWh",
    ) -> Figure:
    """
    Seasonal subseries plot: one panel per calendar month showing that
    month across years, with its mean as a horizontal line.
    """
    use_dark_theme()
    fig, axes = plt.subplots( # pyright: ignore[reportUnknownMemberType]
        1, 12, figsize=(14, 4), sharey=True
    )
    profile = seasonal_profile(series)
    means = subseries_means(series)
    for month, ax in zip(range(1, 13), axes):
        values = profile[month]
        ax.plot(profile.index, values.to_numpy()) # pyright: ignore
        if month in means.index:
            ax.axhline( # pyright: ignore[reportUnknownMemberType]
                means[month], color="#fe9a00", linewidth=1.0
            )
        ax.set_title(MONTH_LABELS[month - 1]) # pyright: ignore
        ax.set_xticks([]) # pyright: ignore[reportUnknownMemberType]
    axes[0].set_ylabel(ylabel) # pyright: ignore[reportUnknownMemberType]
    fig.suptitle( # pyright: ignore[reportUnknownMemberType]
        title or f"Subseries plot: {series.name}"
    )
    fig.tight_layout()
    return fig


def plot_decomposition(
        components: pd.DataFrame,
        *,
        title: str = "STL decomposition",
    ) -> Figure:
    """Stacked panels of the observed, trend, seasonal and remainder."""
    use_dark_theme()
    names = ["observed", "trend", "seasonal", "remainder"]
    fig, axes = plt.subplots( # pyright: ignore[reportUnknownMemberType]
        len(names), 1, figsize=(12, 8), sharex=True
    )
    x = _timestamps(components.index)
    for name, ax in zip(names, axes):
        if name == "remainder":
            ax.bar( # pyright: ignore[reportUnknownMemberType]
                x, components[name].to_numpy(), width=20
            )
        else:
            ax.plot(x, components[name].to_numpy()) # pyright: ignore
        ax.set_ylabel(name) # pyright: ignore[reportUnknownMemberType]
    fig.suptitle(title) # pyright: ignore[reportUnknownMemberType]
    fig.tight_layout()
    return fig


def plot_forecast(
        history: pd.Series,
        result: ForecastResult,
        *,
        ylabel: str = "kWh",
        ax: Optional[Axes] = None,
    ) -> Axes:
    """
    Plot the observed history followed by the point forecast and its
    prediction intervals, widest level drawn lightest.
    """
    ax = _new_axes(ax)
    ax.plot( # pyright: ignore[reportUnknownMemberType]
        _timestamps(history.index), history.to_numpy(), label="observed"
    )
    x = _timestamps(result.point_forecast.index)
    line, = ax.plot( # pyright: ignore[reportUnknownMemberType]
        x, result.point_forecast.to_numpy(), label="forecast"
    )
    for level in sorted(result.levels, reverse=True):
        ax.fill_between( # pyright: ignore[reportUnknownMemberType]
            x,
            result.lower_bound[level].to_numpy(),
            result.upper_bound[level].to_numpy(),
            color=line.get_color(),
            alpha=0.15 if level == max(result.levels) else 0.3,
            label=f"{level}% interval",
        )
    ax.set_title( # pyright: ignore[reportUnknownMemberType]
        f"Forecasts from {result.model_identifier}"
    )
    ax.set_xlabel("Month") # pyright: ignore[reportUnknownMemberType]
    ax.set_ylabel(ylabel) # pyright: ignore[reportUnknownMemberType]
    ax.legend() # pyright: ignore[reportUnknownMemberType]
    return ax


def plot_forecast_comparison(
        history: pd.Series,
        results: Mapping[str, ForecastResult],
        *,
        title: str = "Total energy production",
        ylabel: str = "kWh",
        ax: Optional[Axes] = None,
    ) -> Axes:
    """
    Overlay the point forecasts of several models (no intervals) on the
    observed history.
    """
    ax = _new_axes(ax)
    ax.plot( # pyright: ignore[reportUnknownMemberType]
        _timestamps(history.index), history.to_numpy(),
        color="#a1a1a1", label="observed",
    )
    for label, result in results.items():
        ax.plot( # pyright: ignore[reportUnknownMemberType]
            _timestamps(result.point_forecast.index),
            result.point_forecast.to_numpy(),
            label=label,
        )
    ax.set_title(title) # pyright: ignore[reportUnknownMemberType]
    ax.set_xlabel("Month") # pyright: ignore[reportUnknownMemberType]
    ax.set_ylabel(ylabel) # pyright: ignore[reportUnknownMemberType]
    ax.legend(title="Method") # pyright: ignore[reportUnknownMemberType]
    return ax
