# thirdpartylib
import numpy as np
import pandas as pd
import pytest
# projectlib
from pv_energy_forecasting.models.nnar import NNAR, select_ar_order
from pv_energy_forecasting.config.defaults import OPERATOR_BALANCE_FORECAST
from pv_energy_forecasting.utils.errors import InsufficientDataError
from conftest import make_frame

# Fewer networks and paths than the defaults keep the tests fast
FAST = dict(repeats=3, n_paths=200, seed=7)


@pytest.fixture(scope="module")
def series():
    frame = make_frame()
    total = (frame.iloc[:, 0] + frame.iloc[:, 1]).rename("total_production")
    balance = (frame.iloc[:, 3] - frame.iloc[:, 2]).rename("balance")
    return total, balance


@pytest.fixture(scope="module")
def nnar(series):
    total, _ = series
    return NNAR(**FAST).fit(total)


@pytest.fixture(scope="module")
def nnar_balance(series):
    total, balance = series
    return NNAR(**FAST).fit(total, xreg=balance)


def test_lags_include_the_seasonal_lag(nnar):
    assert 12 in nnar.lags
    assert nnar.lags[0] == 1
    assert nnar.p >= 1
    assert len(nnar.networks) == 3
    assert nnar.name == f"NNAR({nnar.p},1,{nnar.size})[12]"


def test_forecasts_twelve_months_with_intervals(nnar):
    result = nnar.forecast()

    expected = pd.period_range("2022-01", periods=12, freq="M")
    assert result.point_forecast.index.equals(expected)
    assert np.isfinite(result.point_forecast).all()
    for level in (80, 95):
        assert (
            result.lower_bound[level] <= result.upper_bound[level]
        ).all()
    assert (result.lower_bound[95] <= result.lower_bound[80]).all()
    assert (result.upper_bound[80] <= result.upper_bound[95]).all()


def test_fitted_values_start_after_the_largest_lag(nnar):
    fitted = nnar.fitted_values
    max_lag = max(nnar.lags)
    assert fitted.iloc[:max_lag].isna().all()
    assert fitted.iloc[max_lag:].notna().all()


def test_same_seed_gives_same_forecast(series, nnar):
    total, _ = series
    again = NNAR(**FAST).fit(total).forecast()
    np.testing.assert_allclose(
        again.point_forecast, nnar.forecast().point_forecast, rtol=1e-5
    )


def test_regressor_forecast_aligns_with_supplied_vector(nnar_balance):
    result = nnar_balance.forecast(xreg=OPERATOR_BALANCE_FORECAST)

    assert len(result) == len(OPERATOR_BALANCE_FORECAST) == 12
    expected = pd.period_range("2022-01", periods=12, freq="M")
    assert result.point_forecast.index.equals(expected)
    assert np.isfinite(result.point_forecast).all()
    assert "with regressor" in result.model_identifier


def test_regressor_horizon_follows_vector_length(nnar_balance):
    result = nnar_balance.forecast(xreg=OPERATOR_BALANCE_FORECAST[:6])
    assert len(result) == 6


def test_regressor_model_requires_future_values(nnar_balance):
    with pytest.raises(ValueError, match="required"):
        nnar_balance.forecast()


def test_regressor_horizon_mismatch(nnar_balance):
    with pytest.raises(ValueError, match="Horizon"):
        nnar_balance.forecast(h=10, xreg=OPERATOR_BALANCE_FORECAST)


def test_regressor_rejected_for_plain_model(nnar):
    with pytest.raises(ValueError):
        nnar.forecast(xreg=OPERATOR_BALANCE_FORECAST)


def test_regressor_length_must_match_series(series):
    total, balance = series
    with pytest.raises(ValueError, match="rows"):
        NNAR(**FAST).fit(total, xreg=balance.iloc[:-1])


def test_short_series_raises():
    index = pd.period_range("2021-01", periods=12, freq="M")
    series = pd.Series(np.linspace(100, 200, 12), index=index)
    with pytest.raises(InsufficientDataError):
        NNAR(**FAST).fit(series)


def test_select_ar_order_on_ar_process():
    rng = np.random.default_rng(5)
    x = np.zeros(200)
    for t in range(2, 200):
        x[t] = 0.6 * x[t - 1] - 0.3 * x[t - 2] + rng.normal()
    assert select_ar_order(x) >= 2


def test_refit_without_regressor_forgets_future_values(series):
    total, balance = series
    model = NNAR(**FAST).fit(total, xreg=balance)
    model.forecast(xreg=OPERATOR_BALANCE_FORECAST)

    result = model.fit(total).forecast()

    assert not model.has_regressor
    assert len(result) == 12
    assert np.isfinite(result.point_forecast).all()
    assert "with regressor" not in result.model_identifier


def test_internal_forecast_requires_series():
    with pytest.raises(RuntimeError, match="not been fit"):
        NNAR(**FAST)._forecast(12, (80,))
