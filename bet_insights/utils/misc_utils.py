# bet_insights/utils/misc_utils.py
import math
from typing import Any, Dict, Optional


def build_cache_key(endpoint: str, params: Optional[Dict[str, Any]] = None) -> str:
    """Generates a consistent cache key from an endpoint and its query params."""
    if not params:
        return f"football:{endpoint}"
    # Sorted so that dict ordering never splits one request into two cache entries
    query = "&".join(f"{k}={params[k]}" for k in sorted(params) if params[k] is not None)
    return f"football:{endpoint}?{query}"


def percentage(part: float, whole: float) -> float:
    """part / whole as a percentage, 0 when whole is 0."""
    if not whole:
        return 0.0
    return part / whole * 100


def round_half_up(value: float) -> int:
    """Rounds .5 away from zero for positive values (round() uses banker's rounding)."""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
