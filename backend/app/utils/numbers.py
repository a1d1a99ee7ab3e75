from decimal import Decimal, ROUND_HALF_UP


def round_half_up(value: float, places: int = 1) -> float:
    """Round like a calculator does: 4.25 -> 4.3, not banker's rounding."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
