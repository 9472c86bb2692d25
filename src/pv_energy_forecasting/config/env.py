# stdlib
import os
from pathlib import Path
from typing import Optional
# thirdpartylib
from dotenv import load_dotenv

def fetch_var(name: str, default: Optional[str] = None) -> str:
    """
    Fetch an environment variable, falling back to ``default``, or fail
    loudly when neither is available.
    """
    try:
        value = os.environ[name].strip()
        if not value:
            raise RuntimeError(
                f"Environment variable '{name}' is empty."
            )
        return value
    except KeyError as e:
        if default is not None:
            return default
        raise RuntimeError(
            f"Environment variable '{name}' is not set. "
            "Create a .env file or define the variable."
        ) from e


# Load env variables
load_dotenv()

ENERGY_DATA = Path(fetch_var("ENERGY_DATA", default="energia.csv"))
OUTPUT_ROOT = Path(fetch_var("OUTPUT_ROOT", default="outputs"))
