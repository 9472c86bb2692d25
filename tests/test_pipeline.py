# stdlib
from functools import partial
# thirdpartylib
import numpy as np
import pandas as pd
import pytest
# projectlib
from pv_energy_forecasting import pipeline
from pv_energy_forecasting.data.schemas import Column
from pv_energy_forecasting.config.defaults import OPERATOR_BALANCE_FORECAST
from pv_energy_forecasting.utils.errors import ParseError

RUNS = {
    "arima",
    "hw_additive",
    "hw_multiplicative",
    "hw_damped",
    "nnar",
    "nnar_balance",
}


@pytest.fixture
def fast_models(monkeypatch):
    monkeypatch.setattr(
        pipeline,
        "AutoARIMA",
        partial(
            pipeline.AutoARIMA,
            max_p=1, max_q=1, max_P=1, max_Q=1, max_order=2,
        ),
    )
    monkeypatch.setattr(
        pipeline, "NNAR", partial(pipeline.NNAR, repeats=2, n_paths=100)
    )


def test_prepare_frame_imputes_and_derives(csv_factory):
    path = csv_factory(
        missing=[(5, Column.INVERTER_1.value), (30, Column.BOUGHT.value)]
    )
    frame = pipeline.prepare_frame(path)

    assert not frame.isna().any().any()
    assert Column.TOTAL_PRODUCTION.value in frame.columns
    assert Column.BALANCE.value in frame.columns
    assert isinstance(frame.index, pd.PeriodIndex)


def test_run_forecasts(fast_models, frame):
    from pv_energy_forecasting.preprocessing.features import derive_features

    results = pipeline.run_forecasts(derive_features(frame))

    assert set(results) == RUNS
    expected = pd.period_range("2022-01", "2022-12", freq="M")
    for result in results.values():
        assert result.point_forecast.index.equals(expected)
        assert np.isfinite(result.point_forecast).all()
    assert len(results["nnar_balance"]) == len(OPERATOR_BALANCE_FORECAST)


def test_run_pipeline_saves_figures(fast_models, csv_factory, tmp_path):
    out = tmp_path / "outputs"
    results = pipeline.run_pipeline(csv_factory(), out, verbose=0)

    assert set(results) == RUNS
    saved = {path.stem for path in out.glob("*.png")}
    assert {"stl", "seasonal", "subseries"} <= saved
    assert {f"forecast_{name}" for name in RUNS} <= saved
    assert "forecast_hw_comparison" in saved


def test_run_pipeline_logs_errors(tmp_path, raw_csv):
    path = raw_csv("Data;Produkcja1\n2021-01-01;1.0\n")
    with pytest.raises(ParseError):
        pipeline.run_pipeline(path, tmp_path, verbose=0, write_log=True)
    log = (tmp_path / "log.txt").read_text(encoding="utf-8")
    assert "Aborted with ParseError" in log
