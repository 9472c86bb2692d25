from enum import Enum

class Column(str, Enum):
    """
    Public column identifiers of the monthly energy table.

    Note:
        Raw (site-specific, Polish) headers are mapped onto these names
        in ``config.column_map``; the rest of the package only ever
        refers to the public names.
    """
    DATE = 'date'
    PERIOD = 'period'
    INVERTER_1 = 'production_inverter_1'
    INVERTER_2 = 'production_inverter_2'
    BOUGHT = 'energy_bought'
    SOLD = 'energy_sold'
    TOTAL_PRODUCTION = 'total_production'
    BALANCE = 'balance'

# Raw measurement series, imputed independently
RAW_SERIES = (
    Column.INVERTER_1.value,
    Column.INVERTER_2.value,
    Column.BOUGHT.value,
    Column.SOLD.value,
)
# Series computed from the imputed measurements
DERIVED_SERIES = (Column.TOTAL_PRODUCTION.value, Column.BALANCE.value)
# Pandas frequency of the period index
PERIOD_FREQ = "M"
