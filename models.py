# Row models plus the small conversions the screens need.

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

# Price column is DECIMAL(10,2): up to 8 digits before the point, 2 after
PRICE_MAX_DIGITS = 8
PRICE_STEP = Decimal("0.01")


class ValidationError(ValueError):
    """Form input rejected before anything is sent to the database."""


@dataclass
class User:
    id: int
    username: str
    password: str

    @classmethod
    def from_row(cls, row):
        return cls(id=int(row["id"]), username=row["username"] or "", password=row["password"] or "")


@dataclass
class Product:
    id: int
    name: str
    price: float

    @classmethod
    def from_row(cls, row):
        return cls(id=int(row["id"]), name=row["name"] or "", price=to_price(row["price"]))


def price_from_unscaled(raw: int, scale: int) -> float:
    """Rebuild a fixed-point amount from its unscaled integer and scale."""
    return raw / 10 ** scale


def to_price(value) -> float:
    """
    Read a Price column value as float.
    DECIMAL columns come back as Decimal; those are taken apart into
    unscaled digits + scale rather than trusting float() on them.
    """
    if value is None:
        return 0.0
    if isinstance(value, (float, int)):
        return float(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Price is not a finite number: {value}")
        sign, digits, exponent = value.as_tuple()
        raw = int("".join(str(d) for d in digits) or "0")
        if sign:
            raw = -raw
        if exponent >= 0:
            return float(raw * 10 ** exponent)
        return price_from_unscaled(raw, -exponent)
    return float(value)


def parse_price(text: str) -> float:
    text = (text or "").strip()
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise ValidationError("Invalid price format")
    if not value.is_finite() or value.adjusted() >= PRICE_MAX_DIGITS:
        raise ValidationError("Invalid price format")
    # what the DECIMAL column will actually hold
    value = value.quantize(PRICE_STEP)
    if value <= 0:
        raise ValidationError("Price must be greater than 0")
    return to_price(value)


def format_price(price: float) -> str:
    return f"${price:.2f}"
