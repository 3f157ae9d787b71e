from __future__ import annotations

from decimal import Decimal, ROUND_CEILING, ROUND_HALF_UP


VOLUME_QUANT = Decimal("0.000001")
WEIGHT_QUANT = Decimal("0.001")


def round_decimal(value: Decimal, quant: Decimal) -> Decimal:
    return value.quantize(quant, rounding=ROUND_HALF_UP)


def round_volume(value: Decimal) -> Decimal:
    return round_decimal(value, VOLUME_QUANT)


def round_weight(value: Decimal) -> Decimal:
    return round_decimal(value, WEIGHT_QUANT)


def ceil_ratio(numerator: Decimal, denominator: Decimal) -> int:
    return int((numerator / denominator).to_integral_value(rounding=ROUND_CEILING))


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError(f"boolean is not a quantity: {value!r}")
    return Decimal(str(value).strip())
