# thirdpartylib
import numpy as np
import pandas as pd
import pytest
# projectlib
from pv_energy_forecasting.models.results import (
    ForecastResult,
    future_periods,
)


def make_result(h: int = 3) -> ForecastResult:
    index = future_periods(pd.period_range("2021-01", "2021-12", freq="M"), h)
    point = pd.Series(np.arange(h, dtype=float) + 10, index=index)
    lower = pd.DataFrame({80: point - 1, 95: point - 2}, index=index)
    upper = pd.DataFrame({80: point + 1, 95: point + 2}, index=index)
    return ForecastResult("Dummy", point, lower, upper)


def test_future_periods_follow_last_month():
    index = pd.period_range("2021-01", "2021-12", freq="M")
    periods = future_periods(index, 12)
    assert periods[0] == pd.Period("2022-01", freq="M")
    assert periods[-1] == pd.Period("2022-12", freq="M")
    assert periods.name == "period"


def test_to_frame_layout():
    result = make_result()
    table = result.to_frame()

    assert len(result) == 3
    assert result.levels == (80, 95)
    assert list(table.columns) == [
        "point_forecast", "lo_80", "hi_80", "lo_95", "hi_95"
    ]
    assert table.attrs["model"] == "Dummy"
    assert (table["lo_95"] < table["lo_80"]).all()


def test_misaligned_bounds_rejected():
    result = make_result()
    shifted = result.upper_bound.copy()
    shifted.index = shifted.index + 1
    with pytest.raises(ValueError, match="aligned"):
        ForecastResult(
            "Dummy", result.point_forecast, result.lower_bound, shifted
        )


def test_mismatched_levels_rejected():
    result = make_result()
    with pytest.raises(ValueError, match="levels"):
        ForecastResult(
            "Dummy",
            result.point_forecast,
            result.lower_bound[[80]],
            result.upper_bound,
        )
