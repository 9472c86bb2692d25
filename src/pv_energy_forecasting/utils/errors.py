class ForecastingError(Exception):
    """Base class for failures raised by the forecasting pipeline."""


class ParseError(ForecastingError):
    """
    Raised when the input table cannot be turned into a valid monthly
    series: malformed or missing dates, unreadable numeric cells,
    missing columns, unsorted, duplicated or gapped periods.
    """


class InsufficientDataError(ForecastingError):
    """
    Raised when a series is too short for seasonal decomposition or
    model fitting (fewer than two full seasonal cycles).
    """


class ModelFitError(ForecastingError):
    """Raised when an underlying estimation routine fails."""
