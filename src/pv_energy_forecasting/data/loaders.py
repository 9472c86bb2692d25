# stdlib
from pathlib import Path
from typing import List
# thirdpartylib
import numpy as np
import pandas as pd
import polars as pl
# projectlib
from pv_energy_forecasting.utils.typing import Address, Verbosity
from pv_energy_forecasting.utils.paths import validate_address
from pv_energy_forecasting.utils.logging import Logger
from pv_energy_forecasting.utils.errors import ParseError
from pv_energy_forecasting.data.schemas import (
    Column,
    RAW_SERIES,
    PERIOD_FREQ,
)
from pv_energy_forecasting.config.column_map import (
    ENTITY_MAP,
    PRIVATE_NAMES,
)

# Tokens treated as missing observations
NULL_TOKENS = ["", "NA", "NaN", "nan"]
DATE_FORMAT = "%Y-%m-%d"

def map_names(df: pl.DataFrame) -> pl.DataFrame:
    """
    Map raw column names to public names and drop unused columns.

    Raises
    ------
    ParseError
        If any of the required raw columns is absent.
    """
    missing = [name for name in PRIVATE_NAMES if name not in df.columns]
    if missing:
        msg = (
            f"Input table is missing required column(s) {missing}; "
            f"found {df.columns}."
        )
        raise ParseError(msg)

    return df.select(PRIVATE_NAMES).rename(ENTITY_MAP)

def read_energy_csv(
        source: Address,
        *,
        separator: str = ";",
        decimal_comma: bool = False,
    ) -> pl.DataFrame:
    """
    Read the monthly energy export into a typed polars DataFrame.

    All cells are read as strings first and then cast strictly, so that
    a malformed date or number surfaces as a ``ParseError`` instead of
    being coerced to null.

    Parameters
    ----------
    source : Address
        Path to the delimited text file.
    separator : str, default ";"
        Field delimiter.
    decimal_comma : bool, default False
        Whether numeric cells use ``,`` as the decimal separator.

    Returns
    -------
    polars.DataFrame
        Columns ``date`` (``pl.Date``) and the four raw measurement
        series (``pl.Float64``, nulls where missing), in file order.

    Raises
    ------
    FileNotFoundError
        If ``source`` does not exist.
    ParseError
        If the file cannot be read, a required column is absent, or a
        date or numeric cell cannot be parsed.
    """
    path = validate_address(source, extension=Path(source).suffix or ".csv")
    try:
        raw = pl.read_csv(
            path,
            separator=separator,
            null_values=NULL_TOKENS,
            infer_schema=False,
        )
    except pl.exceptions.PolarsError as e:
        raise ParseError(f"Could not read {path}: {e}") from e

    df = map_names(raw)
    date = Column.DATE.value
    if df[date].null_count() > 0:
        rows = df.with_row_index().filter(pl.col(date).is_null())["index"]
        raise ParseError(f"Missing date in row(s) {rows.to_list()}.")

    numeric = []
    for col in RAW_SERIES:
        expr = pl.col(col).str.strip_chars()
        if decimal_comma:
            expr = expr.str.replace_all(",", ".", literal=True)
        numeric.append(expr.cast(pl.Float64, strict=True))
    try:
        df = df.with_columns(
            pl.col(date)
            .str.strip_chars()
            .str.strptime(pl.Date, DATE_FORMAT, strict=True),
            *numeric,
        )
    except pl.exceptions.PolarsError as e:
        raise ParseError(f"Malformed value in {path}: {e}") from e

    return df

def validate_periods(index: pd.PeriodIndex) -> None:
    """
    Enforce a strictly increasing monthly sequence without duplicates
    or gaps.

    Raises
    ------
    ParseError
        On an empty table, duplicate months, unsorted rows or missing
        months.
    """
    if len(index) == 0:
        raise ParseError("Input table contains no rows.")
    duplicated = index[index.duplicated()]
    if len(duplicated) > 0:
        months = sorted({str(p) for p in duplicated})
        raise ParseError(f"Duplicate period(s): {months}.")
    if not index.is_monotonic_increasing:
        raise ParseError("Periods are not in chronological order.")
    expected = pd.period_range(index[0], index[-1], freq=PERIOD_FREQ)
    if len(expected) != len(index):
        gaps: List[str] = [str(p) for p in expected.difference(index)]
        raise ParseError(f"Missing period(s) in monthly sequence: {gaps}.")

def to_period_frame(df: pl.DataFrame) -> pd.DataFrame:
    """
    Convert the typed polars table into a pandas DataFrame indexed by a
    monthly ``PeriodIndex`` named ``period``.
    """
    dates = pd.DatetimeIndex(df[Column.DATE.value].to_numpy())
    index = dates.to_period(PERIOD_FREQ)
    index.name = Column.PERIOD.value
    validate_periods(index)
    data = {
        col: df[col].to_numpy().astype(np.float64)
        for col in RAW_SERIES
    }

    return pd.DataFrame(data, index=index)

def load_energy(
        source: Address,
        *,
        separator: str = ";",
        decimal_comma: bool = False,
        verbose: Verbosity = 0,
        log_dir: Address = Path.cwd(),
        write_log: bool = False,
    ) -> pd.DataFrame:
    """
    Load the monthly energy table as observation rows.

    Parameters
    ----------
    source : Address
        Path to the semicolon-delimited export.
    separator : str, default ";"
        Field delimiter.
    decimal_comma : bool, default False
        Whether numeric cells use ``,`` as the decimal separator.
    verbose : Verbosity, default 0
        Logging verbosity.
    log_dir : Address, default Path.cwd()
        Directory of ``log.txt`` when ``write_log`` is True.
    write_log : bool, default False
        Append messages to a log file instead of printing them.

    Returns
    -------
    pandas.DataFrame
        One row per month, columns ``RAW_SERIES`` (NaN where missing),
        indexed by ``period``.

    Raises
    ------
    ParseError
        If the file is malformed or the periods are not a strictly
        increasing, gap-free monthly sequence.
    """
    logger = Logger(verbose, log_dir, write_log, name="loader")
    df = read_energy_csv(
        source,
        separator=separator,
        decimal_comma=decimal_comma,
    )
    frame = to_period_frame(df)
    logger(
        f"Loaded {len(frame)} months "
        f"({frame.index[0]} to {frame.index[-1]}) from {source}",
        verbosity=1,
    )
    missing = frame.isna().sum()
    for col, count in missing.items():
        if count:
            logger(f"{col}: {count} missing value(s)", verbosity=2)

    return frame
