# thirdpartylib
import numpy as np
import pandas as pd
import pytest
# projectlib
from pv_energy_forecasting.evaluation.metrics import (
    accuracy,
    accuracy_table,
    safe_mape,
)
from pv_energy_forecasting.models.exponential_smoothing import HoltWinters


def test_accuracy_values():
    scores = accuracy([100.0, 200.0, 300.0], [110.0, 190.0, 300.0])
    assert scores["MAE"] == pytest.approx(20 / 3)
    assert scores["RMSE"] == pytest.approx(np.sqrt(200 / 3))
    assert scores["MAPE"] == pytest.approx((10.0 + 5.0 + 0.0) / 3)


def test_accuracy_skips_missing_pairs():
    scores = accuracy([np.nan, 100.0, 50.0], [1.0, 90.0, np.nan])
    assert scores["MAE"] == pytest.approx(10.0)


def test_accuracy_without_pairs():
    with pytest.raises(ValueError):
        accuracy([np.nan], [1.0])


def test_safe_mape_handles_negative_and_zero_truth():
    assert safe_mape([-100.0], [-90.0]) == pytest.approx(10.0)
    assert np.isfinite(safe_mape([0.0], [1.0]))


def test_accuracy_table(total):
    models = {
        "additive": HoltWinters("additive").fit(total),
        "multiplicative": HoltWinters("multiplicative").fit(total),
    }
    table = accuracy_table(models)

    assert list(table.index) == ["additive", "multiplicative"]
    assert list(table.columns) == ["spec", "MAE", "RMSE", "MAPE"]
    assert table.loc["additive", "spec"] == "ETS(A,A,A)"
    assert (table[["MAE", "RMSE", "MAPE"]] >= 0).all().all()


def test_accuracy_table_requires_fitted_models():
    with pytest.raises(RuntimeError):
        accuracy_table({"unfitted": HoltWinters()})


def test_mae_not_above_rmse(total):
    model = HoltWinters().fit(total)
    scores = accuracy(model.series, model.fitted_values)
    assert scores["MAE"] <= scores["RMSE"]
    assert isinstance(model.fitted_values, pd.Series)
