# stdlib
import argparse
# thirdpartylib
import matplotlib
# projectlib
from pv_energy_forecasting.config.env import ENERGY_DATA, OUTPUT_ROOT

def parse_args() -> argparse.Namespace:
    """Parse input arguments for the solar forecast."""
    parser = argparse.ArgumentParser(
        description=(
            "Impute, explore and forecast monthly solar production and "
            "the sold/bought energy balance."
        ),
    )
    parser.add_argument(
        "--data",
        type=str,
        default=str(ENERGY_DATA),
        help="Semicolon-delimited monthly export (default: $ENERGY_DATA).",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=str(OUTPUT_ROOT / "solar_forecast"),
        help="Directory for figures and the log file.",
    )
    parser.add_argument(
        "--verbosity",
        type=int,
        default=1,
        choices=(0, 1, 2),
        help=(
            "Verbosity level: "
            "0 = silent, "
            "1 = info, "
            "2 = debug"
        ),
    )
    parser.add_argument(
        "--write_log",
        action="store_true",
        help="Whether to store message/info outputs to a log file.",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Show figures interactively instead of saving them.",
    )

    return parser.parse_args()

def main() -> None:
    """
    Execute the end-to-end solar forecast.

    Loads the monthly export, imputes missing months per series, derives
    total production and the energy balance, draws the exploratory
    charts and STL decomposition, and prints 12-month forecasts of
    total production from automatic ARIMA, the three Holt-Winters
    variants, NNAR and NNAR with the operator's balance forecast as a
    regressor.
    """
    args = parse_args()
    if not args.show:
        matplotlib.use("Agg")
    # Imported after the backend is chosen
    from pv_energy_forecasting.pipeline import run_pipeline

    run_pipeline(
        args.data,
        args.output_dir,
        show=args.show,
        verbose=args.verbosity,
        write_log=args.write_log,
    )

if __name__ == "__main__":
    main()
