"""
Amount formatting for display.

Form fields and the calculator preview show amounts with thousands
separators and up to 10 fraction digits. Stored values never contain
separators; they are stripped again before a value is edited.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

Amount = Union[Decimal, int, float, str]


def to_decimal(value: Amount) -> Decimal:
    """
    Convert a form value to Decimal, ignoring thousands separators.

    Raises:
        InvalidOperation: If the value is not numeric
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(str(value).replace(",", "").strip())


def format_amount(
    value: Amount,
    thousands_separator: bool = True,
    max_fraction_digits: int = 10,
) -> Amount:
    """
    Format an amount for display.

    Returns the input unchanged when it is not a finite number, so
    half-typed text is never replaced by something the user did not write.

    Examples:
        >>> format_amount("1234567.5")
        '1,234,567.5'
        >>> format_amount(Decimal("0.30000"), thousands_separator=False)
        '0.3'
    """
    try:
        number = to_decimal(value)
    except InvalidOperation:
        return value
    if not number.is_finite():
        return value

    try:
        number = number.quantize(
            Decimal(1).scaleb(-max_fraction_digits),
            rounding=ROUND_HALF_UP,
        )
    except InvalidOperation:
        # Too many integer digits to quantize; show as is.
        pass

    if number == 0:
        return "0"
    text = format(number, ",f" if thousands_separator else "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
