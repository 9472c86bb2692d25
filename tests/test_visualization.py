# thirdpartylib
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest
from matplotlib.axes import Axes
from matplotlib.figure import Figure
# projectlib
from pv_energy_forecasting.data.schemas import Column
from pv_energy_forecasting.analysis.decomposition import stl_decompose
from pv_energy_forecasting.models.results import (
    ForecastResult,
    future_periods,
)
from pv_energy_forecasting.visualization.timeseries import (
    plot_series,
    plot_seasonal,
    plot_subseries,
    plot_decomposition,
    plot_forecast,
    plot_forecast_comparison,
)


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


@pytest.fixture
def result(total):
    index = future_periods(total.index, 12)
    point = pd.Series(np.full(12, total.mean()), index=index)
    lower = pd.DataFrame({80: point - 50, 95: point - 90})
    upper = pd.DataFrame({80: point + 50, 95: point + 90})
    return ForecastResult("Mean", point, lower, upper)


def test_plot_series(frame):
    ax = plot_series(
        frame,
        [Column.INVERTER_1.value, Column.INVERTER_2.value],
        title="Production",
    )
    assert isinstance(ax, Axes)
    assert len(ax.get_lines()) == 2
    assert ax.get_title() == "Production"


def test_plot_seasonal_has_one_line_per_year(frame):
    ax = plot_seasonal(frame[Column.INVERTER_1.value])
    assert len(ax.get_lines()) == 4


def test_plot_subseries_has_twelve_panels(frame):
    fig = plot_subseries(frame[Column.INVERTER_1.value])
    assert isinstance(fig, Figure)
    assert len(fig.axes) == 12


def test_plot_decomposition(total):
    fig = plot_decomposition(stl_decompose(total))
    assert len(fig.axes) == 4


def test_plot_forecast(total, result):
    ax = plot_forecast(total, result)
    assert "Mean" in ax.get_title()
    assert len(ax.get_lines()) == 2


def test_plot_forecast_comparison(total, result):
    ax = plot_forecast_comparison(total, {"a": result, "b": result})
    assert len(ax.get_lines()) == 3
