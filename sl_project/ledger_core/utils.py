from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.exceptions import ValidationError

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value, field="amount"):
    """Coerce form/JSON input (str, int, float, Decimal) into a finite Decimal."""
    if value is None or value == "":
        raise ValidationError({field: "This field is required."})
    if isinstance(value, Decimal):
        number = value
    else:
        try:
            # go through str() so floats like 0.1 don't drag binary noise along
            number = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise ValidationError({field: f"'{value}' is not a number."})
    # NaN and Infinity parse fine but can't be compared or rounded
    if not number.is_finite():
        raise ValidationError({field: f"'{value}' is not a number."})
    return number


def money(value, field="amount"):
    """Round to cents the way the ledger book does (half up)."""
    try:
        return to_decimal(value, field).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # exponent too large to carry two decimal places
        raise ValidationError({field: f"'{value}' is out of range."})


def format_money(value):
    # 1234.5 -> "1,234.50"
    return f"{money(value or ZERO):,.2f}"
