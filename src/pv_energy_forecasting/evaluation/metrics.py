# stdlib
from typing import Dict, Mapping
# thirdpartylib
import numpy as np
import pandas as pd
from sklearn.metrics import (
    mean_absolute_error,
    root_mean_squared_error,
)
# projectlib
from pv_energy_forecasting.utils.typing import ArrayLike1D
from pv_energy_forecasting.models.base import Forecaster

def safe_mape(
        y_true: ArrayLike1D,
        y_pred: ArrayLike1D,
        eps: float = 1e-6
    ) -> float:
    """
    Numerically safe Mean Absolute Percentage Error (MAPE).

    This variant clamps the denominator to `eps` to avoid division
    by zero and excessive inflation when y_true is near zero. Absolute
    values are used in the denominator because the balance series
    changes sign.

    Parameters
    ----------
    y_true : array-like
        Ground truth values.
    y_pred : array-like
        Predicted values.
    eps : float, default=1e-6
        Minimum value for the denominator.

    Returns
    -------
    float
        MAPE expressed as a percentage.
    """
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    return float(
        np.mean(
            np.abs((y_true - y_pred) / np.maximum(eps, np.abs(y_true)))
        ) * 100.0
    )

def accuracy(y_true: ArrayLike1D, y_pred: ArrayLike1D) -> Dict[str, float]:
    """
    MAE, RMSE and MAPE of paired observations, ignoring pairs where
    either value is missing.
    """
    true = np.asarray(y_true, dtype=float)
    pred = np.asarray(y_pred, dtype=float)
    mask = ~(np.isnan(true) | np.isnan(pred))
    if not mask.any():
        raise ValueError("No paired observations to score.")
    true, pred = true[mask], pred[mask]
    return {
        "MAE": float(mean_absolute_error(true, pred)),
        "RMSE": float(root_mean_squared_error(true, pred)),
        "MAPE": safe_mape(true, pred),
    }

def accuracy_table(models: Mapping[str, Forecaster]) -> pd.DataFrame:
    """
    In-sample accuracy of fitted models, one row per model, so the
    operator can compare the candidates (e.g. the Holt-Winters
    variants) side by side.
    """
    rows = []
    for label, model in models.items():
        if model.series is None or model.fitted_values is None:
            raise RuntimeError(f"Model '{label}' has not been fit.")
        scores = accuracy(model.series, model.fitted_values)
        rows.append({"model": label, "spec": model.name, **scores})
    return pd.DataFrame(rows).set_index("model")
