# stdlib
from pathlib import Path
from typing import Callable, Iterable, Optional, Tuple
# thirdpartylib
import matplotlib
matplotlib.use("Agg")
import numpy as np
import pandas as pd
import pytest
# projectlib
from pv_energy_forecasting.data.schemas import Column, RAW_SERIES
from pv_energy_forecasting.config.column_map import REVERSE_ENTITY_MAP

RAW_HEADER = ["Data"] + [REVERSE_ENTITY_MAP[col] for col in RAW_SERIES]


def make_frame(
        start: str = "2018-01",
        periods: int = 48,
        seed: int = 0,
    ) -> pd.DataFrame:
    """Synthetic monthly table with annual seasonality peaking in June."""
    index = pd.period_range(start, periods=periods, freq="M")
    index.name = Column.PERIOD.value
    rng = np.random.default_rng(seed)
    season = np.sin(2 * np.pi * (index.month.to_numpy() - 3) / 12)
    t = np.arange(periods)
    inverter_1 = 400 + 300 * season + 0.5 * t + rng.normal(0, 15, periods)
    inverter_2 = 0.8 * inverter_1 + rng.normal(0, 10, periods)
    bought = 350 - 200 * season + rng.normal(0, 15, periods)
    sold = 0.5 * (inverter_1 + inverter_2) + rng.normal(0, 10, periods)
    frame = pd.DataFrame(
        {
            Column.INVERTER_1.value: inverter_1,
            Column.INVERTER_2.value: inverter_2,
            Column.BOUGHT.value: bought,
            Column.SOLD.value: sold,
        },
        index=index,
    )
    return frame.round(2)


def write_csv(
        path: Path,
        frame: pd.DataFrame,
        missing: Iterable[Tuple[int, str]] = (),
        na_token: str = "NA",
    ) -> Path:
    """Write ``frame`` in the raw export format, blanking ``missing`` cells."""
    blank = set(missing)
    lines = [";".join(RAW_HEADER)]
    for i, (period, row) in enumerate(frame.iterrows()):
        cells = [f"{period}-01"]
        for col in RAW_SERIES:
            cells.append(na_token if (i, col) in blank else f"{row[col]:.2f}")
        lines.append(";".join(cells))
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def frame() -> pd.DataFrame:
    return make_frame()


@pytest.fixture
def total(frame: pd.DataFrame) -> pd.Series:
    series = (
        frame[Column.INVERTER_1.value] + frame[Column.INVERTER_2.value]
    )
    return series.rename(Column.TOTAL_PRODUCTION.value)


@pytest.fixture
def balance(frame: pd.DataFrame) -> pd.Series:
    series = frame[Column.SOLD.value] - frame[Column.BOUGHT.value]
    return series.rename(Column.BALANCE.value)


@pytest.fixture
def csv_factory(tmp_path: Path) -> Callable[..., Path]:
    def factory(
            frame: Optional[pd.DataFrame] = None,
            missing: Iterable[Tuple[int, str]] = (),
            name: str = "energia.csv",
            na_token: str = "NA",
        ) -> Path:
        data = make_frame() if frame is None else frame
        return write_csv(tmp_path / name, data, missing, na_token)
    return factory


@pytest.fixture
def raw_csv(tmp_path: Path) -> Callable[[str], Path]:
    """Write literal file content and return its path."""
    def factory(content: str, name: str = "energia.csv") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path
    return factory
