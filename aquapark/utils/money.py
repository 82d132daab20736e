# aquapark/utils/money.py

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

Money = Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0")

def D(x) -> Money:
    return x if isinstance(x, Decimal) else Decimal(str(x or "0"))

def round_money(x: Money) -> Money:
    return D(x).quantize(CENT, rounding=ROUND_HALF_UP)

def parse_money(x) -> Money:
    """Lenient parse for operator input: anything unparsable, non-finite or negative is 0."""
    try:
        value = D(x)
    except (InvalidOperation, ValueError, TypeError):
        return ZERO
    if not value.is_finite() or value < 0:
        return ZERO
    return value

def money_sum(values) -> Money:
    return round_money(sum((D(v) for v in values), ZERO))

def to_float(x) -> float:
    return float(round_money(x))
