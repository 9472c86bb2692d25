# stdlib
from typing import Literal, Union, Sequence, Tuple
from pathlib import Path
# thirdpartylib
import numpy as np
import pandas as pd

# Verbosity for classes, functions, methods, etc.
Verbosity = Literal[0, 1, 2]
# Mode for opening documents
ReadMode = Literal["r"]
WriteMode = Literal["w"]
OpenMode = Literal[ReadMode, WriteMode]
# Type alias for file/folder paths
Address = Union[str, Path]
# One dimensional numeric input accepted by metrics and models
ArrayLike1D = Union[Sequence[float], np.ndarray, pd.Series]
# Confidence levels for prediction intervals, in percent
Levels = Tuple[int, ...]
# Strategies for seasonal imputation
ImputeStrategy = Literal["decompose", "split"]
# Holt-Winters seasonal component
SeasonalMode = Literal["additive", "multiplicative"]
# Names of the Holt-Winters variants compared by the operator
HoltWintersVariant = Literal["additive", "multiplicative", "damped"]
