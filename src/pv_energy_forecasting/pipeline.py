# stdlib
from pathlib import Path
from typing import Dict, Optional
# thirdpartylib
import pandas as pd
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
# projectlib
from pv_energy_forecasting.utils.typing import (
    Address,
    ArrayLike1D,
    ImputeStrategy,
    Verbosity,
)
from pv_energy_forecasting.utils.paths import validate_address
from pv_energy_forecasting.utils.logging import Logger
from pv_energy_forecasting.data.schemas import Column, RAW_SERIES
from pv_energy_forecasting.data.loaders import load_energy
from pv_energy_forecasting.preprocessing.interpolation import impute_frame
from pv_energy_forecasting.preprocessing.features import derive_features
from pv_energy_forecasting.analysis.decomposition import stl_decompose
from pv_energy_forecasting.models.results import ForecastResult
from pv_energy_forecasting.models.arima import AutoARIMA
from pv_energy_forecasting.models.exponential_smoothing import (
    fit_holt_winters_variants,
    forecast_holt_winters_variants,
)
from pv_energy_forecasting.models.nnar import NNAR
from pv_energy_forecasting.evaluation.metrics import accuracy_table
from pv_energy_forecasting.visualization.timeseries import (
    plot_series,
    plot_seasonal,
    plot_subseries,
    plot_decomposition,
    plot_forecast,
    plot_forecast_comparison,
)
from pv_energy_forecasting.config.defaults import (
    HORIZON,
    LEVELS,
    FINAL_HOLT_WINTERS,
    OPERATOR_BALANCE_FORECAST,
)

TITLES = {
    Column.INVERTER_1.value: "Production of inverter 1",
    Column.INVERTER_2.value: "Production of inverter 2",
    Column.BOUGHT.value: "Energy bought from the grid",
    Column.SOLD.value: "Energy sold to the grid",
    Column.BALANCE.value: "Balance of sold and bought energy",
}

def prepare_frame(
        source: Address,
        *,
        strategy: ImputeStrategy = "decompose",
        verbose: Verbosity = 0,
        log_dir: Address = Path.cwd(),
        write_log: bool = False,
    ) -> pd.DataFrame:
    """Load, impute and derive features: the analysis-ready table."""
    frame = load_energy(
        source, verbose=verbose, log_dir=log_dir, write_log=write_log
    )
    frame = impute_frame(
        frame,
        RAW_SERIES,
        strategy=strategy,
        verbose=verbose,
        log_dir=log_dir,
        write_log=write_log,
    )
    return derive_features(frame)

def exploratory_figures(frame: pd.DataFrame) -> Dict[str, Figure]:
    """Build the exploratory charts of the raw and derived series."""
    figures: Dict[str, Figure] = {}
    for col, title in TITLES.items():
        ax = plot_series(frame, [col], title=title)
        figures[col] = ax.get_figure() # pyright: ignore[reportAttributeAccessIssue]
    inverter_1 = frame[Column.INVERTER_1.value]
    figures["seasonal"] = plot_seasonal(
        inverter_1
    ).get_figure() # pyright: ignore[reportAttributeAccessIssue]
    figures["subseries"] = plot_subseries(inverter_1)
    components = stl_decompose(frame[Column.TOTAL_PRODUCTION.value])
    figures["stl"] = plot_decomposition(
        components, title="STL decomposition of total production"
    )
    return figures

def run_forecasts(
        frame: pd.DataFrame,
        *,
        balance_forecast: ArrayLike1D = OPERATOR_BALANCE_FORECAST,
        h: int = HORIZON,
        verbose: Verbosity = 0,
        logger: Optional[Logger] = None,
    ) -> Dict[str, ForecastResult]:
    """
    Fit the four forecasting runs on total production and return their
    forecasts keyed by run name.

    Runs: ``arima``; ``hw_additive``, ``hw_multiplicative`` and
    ``hw_damped`` (compared side by side); ``nnar``; and
    ``nnar_balance``, which uses the balance series as a regressor and
    the operator-supplied ``balance_forecast`` as its future values.
    """
    log = logger or Logger(verbose, name="pipeline")
    total = frame[Column.TOTAL_PRODUCTION.value]
    balance = frame[Column.BALANCE.value]
    results: Dict[str, ForecastResult] = {}

    log("Fitting automatic ARIMA", verbosity=1)
    arima = AutoARIMA(verbose=verbose).fit(total)
    results["arima"] = arima.forecast(h, LEVELS)

    log("Fitting Holt-Winters variants", verbosity=1)
    holt_winters = fit_holt_winters_variants(total, verbose=verbose)
    for variant, result in forecast_holt_winters_variants(
        holt_winters, h, LEVELS
    ).items():
        results[f"hw_{variant}"] = result
    log(
        "In-sample accuracy of Holt-Winters variants:\n"
        f"{accuracy_table(holt_winters).to_string()}",
        verbosity=1,
    )
    log(f"Operator choice: hw_{FINAL_HOLT_WINTERS}", verbosity=1)

    log("Fitting NNAR", verbosity=1)
    nnar = NNAR(verbose=verbose).fit(total)
    results["nnar"] = nnar.forecast(h, LEVELS)

    log("Fitting NNAR with balance regressor", verbosity=1)
    nnar_balance = NNAR(verbose=verbose).fit(total, xreg=balance)
    results["nnar_balance"] = nnar_balance.forecast(
        levels=LEVELS, xreg=balance_forecast
    )
    return results

def forecast_figures(
        history: pd.Series,
        results: Dict[str, ForecastResult],
    ) -> Dict[str, Figure]:
    """One chart per run plus the Holt-Winters comparison chart."""
    figures: Dict[str, Figure] = {}
    for name, result in results.items():
        ax = plot_forecast(history, result)
        figures[f"forecast_{name}"] = ax.get_figure() # pyright: ignore
    comparison = {
        name.removeprefix("hw_"): result
        for name, result in results.items()
        if name.startswith("hw_")
    }
    ax = plot_forecast_comparison(history, comparison)
    figures["forecast_hw_comparison"] = ax.get_figure() # pyright: ignore
    return figures

def save_figures(figures: Dict[str, Figure], output_dir: Address) -> None:
    """Write every figure to ``output_dir/<name>.png`` and close it."""
    out = validate_address(output_dir, mkdir=True)
    for name, fig in figures.items():
        path = validate_address(out / name, extension=".png", mode="w")
        fig.savefig(path, dpi=150) # pyright: ignore[reportUnknownMemberType]
        plt.close(fig)

def run_pipeline(
        source: Address,
        output_dir: Address,
        *,
        show: bool = False,
        verbose: Verbosity = 1,
        write_log: bool = False,
    ) -> Dict[str, ForecastResult]:
    """
    Run the analysis end to end: load, impute, derive, explore,
    forecast, report.

    Forecast tables are logged; figures are saved under ``output_dir``
    or shown interactively when ``show`` is True. Any error aborts the
    run after being logged.
    """
    out = validate_address(output_dir, mkdir=True)
    with Logger(verbose, out, write_log, name="pipeline") as log:
        frame = prepare_frame(
            source, verbose=verbose, log_dir=out, write_log=write_log
        )
        figures = exploratory_figures(frame)
        results = run_forecasts(frame, verbose=verbose, logger=log)
        for name, result in results.items():
            log(
                f"{name}: {result.model_identifier}\n"
                f"{result.to_frame().round(2).to_string()}",
                verbosity=0,
            )
        figures |= forecast_figures(
            frame[Column.TOTAL_PRODUCTION.value], results
        )
        if show:
            plt.show() # pyright: ignore[reportUnknownMemberType]
        else:
            save_figures(figures, out)
            log(f"Figures saved in: {out}", verbosity=1)
    return results
