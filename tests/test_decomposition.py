# thirdpartylib
import numpy as np
import pandas as pd
import pytest
# projectlib
from pv_energy_forecasting.analysis.decomposition import (
    stl_decompose,
    seasonal_strength,
    seasonally_adjust,
    seasonal_profile,
    subseries_means,
)
from pv_energy_forecasting.utils.errors import InsufficientDataError
from conftest import make_frame


def test_components_add_up(total):
    components = stl_decompose(total)

    assert list(components.columns) == [
        "observed", "trend", "seasonal", "remainder"
    ]
    assert components.index.equals(total.index)
    np.testing.assert_allclose(components["observed"], total.to_numpy())
    np.testing.assert_allclose(
        components[["trend", "seasonal", "remainder"]].sum(axis=1),
        total.to_numpy(),
    )


def test_periodic_window_repeats_seasonal_shape(total):
    seasonal = stl_decompose(total)["seasonal"].to_numpy()
    amplitude = np.ptp(seasonal)
    np.testing.assert_allclose(
        seasonal[:12], seasonal[24:36], atol=0.05 * amplitude
    )


def test_short_series_raises():
    series = make_frame(periods=23).iloc[:, 0]
    with pytest.raises(InsufficientDataError):
        stl_decompose(series)


def test_incomplete_series_rejected(total):
    total = total.copy()
    total.iloc[3] = np.nan
    with pytest.raises(ValueError):
        stl_decompose(total)


def test_seasonal_strength(total):
    assert seasonal_strength(stl_decompose(total)) > 0.64
    rng = np.random.default_rng(1)
    noise = pd.Series(rng.normal(size=48))
    assert seasonal_strength(stl_decompose(noise)) < 0.64


def test_seasonally_adjusted_series_is_flatter(total):
    adjusted = seasonally_adjust(total)
    assert adjusted.std() < total.std() / 2


def test_seasonal_profile_layout():
    series = make_frame(start="2016-03", periods=30).iloc[:, 0]
    profile = seasonal_profile(series)

    assert list(profile.index) == [2016, 2017, 2018]
    assert list(profile.columns) == list(range(1, 13))
    assert profile.loc[2016, [1, 2]].isna().all()
    assert profile.loc[2016, 3] == series.iloc[0]
    assert profile.loc[2018, 8] == series.iloc[-1]


def test_subseries_means():
    series = make_frame(periods=24).iloc[:, 0]
    means = subseries_means(series)
    assert list(means.index) == list(range(1, 13))
    assert means[1] == pytest.approx((series.iloc[0] + series.iloc[12]) / 2)
