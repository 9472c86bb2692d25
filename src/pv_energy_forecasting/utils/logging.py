# stdlib
from pathlib import Path
from datetime import datetime
from typing import Optional
from types import TracebackType
# projectlib
from pv_energy_forecasting.utils.paths import validate_address
from pv_energy_forecasting.utils.typing import Verbosity, Address

class Logger(object):
    """
    Lightweight callable logger with optional file persistence.

    Messages are filtered by verbosity and either printed to stdout or
    appended to ``log.txt``. Used by the loader, the imputer, every
    forecaster and the pipeline script.
    """

    def __init__(
        self,
        verbose: Verbosity = 0,
        log_dir: Address = Path.cwd(),
        write_log: bool = False,
        *,
        name: Optional[str] = None,
    ) -> None:
        """
        Initialize the logger.

        Parameters
        ----------
        verbose : Verbosity, default 0
            Verbosity threshold. Messages with a verbosity level less
            than or equal to this value will be emitted.
        log_dir : Address, default Path.cwd()
            Directory in which the log file will be written if
            `write_log` is True. The file name is fixed as `log.txt`.
        write_log : bool, default False
            If True, messages are appended to a log file. If False,
            messages are printed to stdout.
        name : str, optional
            Component name prefixed to every message, e.g. ``"arima"``.
        """
        self.verbose = verbose
        self.name = name
        # Toggle between stdout printing and file logging
        self.write_log = write_log
        # Only resolve the log file when it will actually be written
        self.log_path = (
            validate_address(log_dir, mkdir=True) / "log.txt"
            if write_log else None
        )

    def __call__(self, msg: str, verbosity: int = 0) -> None:
        """
        Emit a log message if the verbosity threshold is met.

        Parameters
        ----------
        msg : str
            Message to be logged.
        verbosity : int, default 0
            Verbosity level associated with the message. The message
            is emitted only if `self.verbose >= verbosity`.
        """
        if self.verbose >= verbosity:
            formatted = self._format(msg)
            if self.write_log:
                self.write(formatted)
            else:
                print(formatted)

    def child(self, name: str) -> "Logger":
        """Return a logger sharing this one's settings under a new name."""
        logger = Logger(self.verbose, write_log=False, name=name)
        logger.write_log = self.write_log
        logger.log_path = self.log_path
        return logger

    def write(self, msg: str) -> None:
        """Append a formatted message to the log file."""
        if self.log_path is None:
            raise RuntimeError("Logger was not configured to write a log.")
        with open(self.log_path, "a", encoding="utf-8") as file:
            file.write(msg + "\n")

    def _format(self, msg: str) -> str:
        """Prefix a message with a timestamp and the component name."""
        ts = datetime.now().isoformat(timespec="seconds")
        if self.name:
            return f"[{ts}] [{self.name}] {msg}"
        return f"[{ts}] {msg}"

    def __enter__(self) -> "Logger":
        return self

    def __exit__(
            self,
            exc_type: Optional[type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType]
        ) -> None:
        if exc is not None:
            self(f"Aborted with {type(exc).__name__}: {exc}")
