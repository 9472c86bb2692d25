# thirdpartylib
import pandas as pd
# projectlib
from pv_energy_forecasting.data.schemas import Column, RAW_SERIES

def derive_features(frame: pd.DataFrame) -> pd.DataFrame:
    """
    Add total production and the sold/bought balance to an imputed
    frame.

    ``total_production = production_inverter_1 + production_inverter_2``
    and ``balance = energy_sold - energy_bought``, row by row. The
    derived columns are computed once; they do not follow later changes
    to the source columns.

    Raises
    ------
    ValueError
        If any source value is still missing.
    """
    missing = [col for col in RAW_SERIES if frame[col].isna().any()]
    if missing:
        msg = (
            f"Cannot derive features: column(s) {missing} still contain "
            "missing values. Impute the frame first."
        )
        raise ValueError(msg)

    return frame.assign(**{
        Column.TOTAL_PRODUCTION.value: (
            frame[Column.INVERTER_1.value] + frame[Column.INVERTER_2.value]
        ),
        Column.BALANCE.value: (
            frame[Column.SOLD.value] - frame[Column.BOUGHT.value]
        ),
    })
