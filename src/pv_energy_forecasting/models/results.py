# stdlib
from dataclasses import dataclass
from typing import Tuple
# thirdpartylib
import pandas as pd
# projectlib
from pv_energy_forecasting.data.schemas import Column, PERIOD_FREQ

def future_periods(index: pd.Index, h: int) -> pd.PeriodIndex:
    """Return the ``h`` monthly periods following the last of ``index``."""
    last = pd.PeriodIndex(index, freq=PERIOD_FREQ)[-1]
    periods = pd.period_range(last + 1, periods=h, freq=PERIOD_FREQ)
    periods.name = Column.PERIOD.value
    return periods

@dataclass(frozen=True)
class ForecastResult:
    """
    Point forecasts and prediction intervals of one model run.

    Attributes
    ----------
    model_identifier : str
        Human readable model description, e.g.
        ``"ARIMA(1,0,0)(0,1,1)[12] w/ drift"``.
    point_forecast : pandas.Series
        Point forecast per future period.
    lower_bound : pandas.DataFrame
        Lower interval bounds, one column per confidence level.
    upper_bound : pandas.DataFrame
        Upper interval bounds, one column per confidence level.
    """
    model_identifier: str
    point_forecast: pd.Series
    lower_bound: pd.DataFrame
    upper_bound: pd.DataFrame

    def __post_init__(self) -> None:
        index = self.point_forecast.index
        for name, bound in (
            ("lower_bound", self.lower_bound),
            ("upper_bound", self.upper_bound),
        ):
            if not bound.index.equals(index):
                raise ValueError(
                    f"{name} is not aligned with the point forecast."
                )
        if list(self.lower_bound.columns) != list(self.upper_bound.columns):
            raise ValueError("Lower and upper bounds use different levels.")

    def __len__(self) -> int:
        return len(self.point_forecast)

    @property
    def levels(self) -> Tuple[int, ...]:
        return tuple(int(c) for c in self.lower_bound.columns)

    def to_frame(self) -> pd.DataFrame:
        """
        Forecast table: one row per period with the point forecast and
        ``lo_<level>`` / ``hi_<level>`` columns per confidence level.
        """
        table = pd.DataFrame({"point_forecast": self.point_forecast})
        for level in self.levels:
            table[f"lo_{level}"] = self.lower_bound[level]
            table[f"hi_{level}"] = self.upper_bound[level]
        table.attrs["model"] = self.model_identifier
        return table
