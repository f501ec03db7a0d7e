"""
Money helpers

Amounts and balances stay ``Decimal`` from request parsing to the database.
Conversion to a display form happens once, in the response schemas.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal("0.01")
# 16 integer digits, the widest value that fits the cents column
MAX_AMOUNT = Decimal("9999999999999999.99")


def to_decimal(value: object) -> Decimal:
    """
    Coerce a numeric-looking value to a 2-place ``Decimal``.

    Floats go through ``str`` so binary noise is not carried over.

    Args:
        value: int, float, str or Decimal

    Returns:
        Quantized Decimal

    Raises:
        ValueError: if the value is not a finite number or exceeds MAX_AMOUNT

    Example:
        >>> to_decimal("150")
        Decimal('150.00')
        >>> to_decimal(0.1)
        Decimal('0.10')
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"not a number: {value!r}")
    try:
        if isinstance(value, Decimal):
            number = value
        elif isinstance(value, float):
            number = Decimal(repr(value))
        else:
            number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"not a number: {value!r}") from exc
    if not number.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    if abs(number) > MAX_AMOUNT:
        raise ValueError(f"amount out of range: {value!r}")
    try:
        return quantize(number)
    except ArithmeticError as exc:
        raise ValueError(f"amount out of range: {value!r}") from exc


def quantize(value: Decimal) -> Decimal:
    """Round half-up to cents."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def signed_delta(txn_type: str, amount: Decimal) -> Decimal:
    """
    Signed balance change of an amount for a transaction type.

    Example:
        >>> signed_delta("INCOME", Decimal("10.00"))
        Decimal('10.00')
        >>> signed_delta("EXPENSE", Decimal("10.00"))
        Decimal('-10.00')
    """
    magnitude = abs(Decimal(amount))
    return magnitude if str(getattr(txn_type, "value", txn_type)) == "INCOME" else -magnitude


def format_amount(value: Decimal | None) -> str | None:
    """Fixed-point string used on the wire."""
    if value is None:
        return None
    return str(quantize(Decimal(value)))


def to_cents(value: object) -> int:
    """Integer minor units of ``value``; the storage form of every amount."""
    amount = value if isinstance(value, Decimal) else to_decimal(value)
    return int(quantize(amount).scaleb(2))


def from_cents(value: int) -> Decimal:
    """
    Inverse of ``to_cents``.

    Example:
        >>> from_cents(123456)
        Decimal('1234.56')
    """
    return Decimal(int(value)).scaleb(-2)
