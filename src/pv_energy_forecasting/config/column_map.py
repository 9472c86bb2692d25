"""
Raw-to-public column mapping configuration.

The monitoring export of the installation uses Polish headers. This
module defines how those raw names are mapped to the project's public
schema so that loaders, models and plots never depend on the raw
spelling.
"""

# stdlib
from typing import Dict
# projectlib
from pv_energy_forecasting.data.schemas import Column

# ---------------------------------------------------------------------
# Raw column name to public schema mapping
# ---------------------------------------------------------------------
RAW_COLUMN_MAP = {
    "Data": Column.DATE.value,
    # Monthly production of each inverter (kWh)
    "Produkcja1": Column.INVERTER_1.value,
    "Produkcja2": Column.INVERTER_2.value,
    # Grid exchange (kWh)
    "Zakup": Column.BOUGHT.value,
    "Sprzedaz": Column.SOLD.value,
}

# ---------------------------------------------------------------------
# Derived helper mappings
# ---------------------------------------------------------------------
# Ensure Dict[str, str] for polars rename operations
ENTITY_MAP: Dict[str, str] = {
    key: str(value) for key, value in RAW_COLUMN_MAP.items()
}
# Reverse lookup (public to raw)
REVERSE_ENTITY_MAP = {
    value: key for key, value in ENTITY_MAP.items()
}
# Raw headers the loader requires
PRIVATE_NAMES = list(RAW_COLUMN_MAP.keys())
