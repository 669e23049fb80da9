# obra/services/amounts.py
from decimal import Decimal

ZERO = Decimal("0")


def to_decimal(value) -> Decimal:
    '''
    Normalize a DB aggregate / user number to Decimal.
    Aggregates over no rows come back as None and are treated as 0; floats go
    through str() so 0.1 stays 0.1.
    '''
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
