"""
Argument checks shared by the services.

Ids and quantities arrive from forms and JSON bodies as ints, strings or
floats. Only whole numbers are accepted; anything else is an
InvalidArgument, never a silent truncation.
"""

from decimal import Decimal, InvalidOperation

from ..exceptions import InvalidArgument


def _whole_number(value):
    if isinstance(value, bool):
        raise ValueError(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(value)
        return int(value)
    if isinstance(value, Decimal):
        if not value.is_finite() or value != value.to_integral_value():
            raise ValueError(value)
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise TypeError(value)


def check_id(value, name='id'):
    try:
        value = _whole_number(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"Invalid {name} {value!r}")
    if value <= 0:
        raise InvalidArgument(f"Invalid {name} {value!r}")
    return value


def check_ids(values, name='id'):
    """Validate a list of ids, dropping repeats but keeping their order."""
    if not isinstance(values, (list, tuple)):
        raise InvalidArgument(f"Expected a list of {name}s, got {values!r}")
    return list(dict.fromkeys(check_id(value, name) for value in values))


def check_quantity(quantity):
    try:
        value = _whole_number(quantity)
    except (TypeError, ValueError):
        raise InvalidArgument(f"Quantity must be a whole number, got {quantity!r}")
    if value <= 0:
        raise InvalidArgument(f"Quantity must be positive, got {value}")
    return value


def check_count(value, name='stock'):
    """Whole number that may be zero, such as a stock level."""
    try:
        count = _whole_number(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"{name.capitalize()} must be a whole number, got {value!r}")
    if count < 0:
        raise InvalidArgument(f"{name.capitalize()} cannot be negative, got {count}")
    return count


def check_decimal(value, name='amount', allow_zero=True):
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidArgument(f"Invalid {name} {value!r}")
    if isinstance(value, bool) or not amount.is_finite() or amount < 0 or (amount == 0 and not allow_zero):
        raise InvalidArgument(f"Invalid {name} {value!r}")
    return amount
