from decimal import Decimal, ROUND_HALF_UP
from typing import Optional


def round_half_up(value: Optional[float], places: int = 2) -> Optional[float]:
    """Round like a grade sheet does (1.1875 -> 1.19), not banker's rounding."""
    if value is None:
        return None
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def format_score(value: Optional[float], missing: str = "N/A") -> str:
    """1.0 -> "1.0", 1.25 -> "1.25", 1.1875 -> "1.19", None -> "N/A"."""
    if value is None:
        return missing
    text = f"{round_half_up(value, 2):.2f}".rstrip("0")
    if text.endswith("."):
        text += "0"
    return text
