"""Progress value normalization.

The status endpoint reports progress as ``"42"``, ``"42%"`` or free text
depending on the upstream platform. Everything shown to the user goes through
``normalize_progress`` so there is a single ``"<n>%"`` format.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal

# Leading numeric prefix, same acceptance as a lenient float parse ("12.5abc" -> 12.5)
_NUMERIC_PREFIX = re.compile(
    r"^\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))"
)


def _parse_number(raw: str) -> float | None:
    match = _NUMERIC_PREFIX.match(raw)
    if not match:
        return None
    return float(match.group(1).replace("Infinity", "inf"))


def _format_number(value: float) -> str:
    """Shortest round-trip text, laid out like a JavaScript number ("1e-7", "1e+21")."""
    if math.isinf(value):
        return "-Infinity" if value < 0 else "Infinity"
    if value == 0:
        return "0"
    sign, digits, exponent = Decimal(repr(value)).as_tuple()
    text = "".join(map(str, digits)).rstrip("0")
    exponent += len(digits) - len(text)
    k = len(text)
    n = exponent + k  # decimal point position relative to the first digit
    if k <= n <= 21:
        body = text + "0" * (n - k)
    elif 0 < n <= 21:
        body = text[:n] + "." + text[n:]
    elif -6 < n <= 0:
        body = "0." + "0" * -n + text
    else:
        e = n - 1
        mantissa = text[0] + ("." + text[1:] if k > 1 else "")
        body = f"{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"
    return ("-" if sign else "") + body


def normalize_progress(raw: str | None) -> str:
    """Return ``raw`` as a percentage string.

    - empty or missing -> ``""``
    - already contains ``%`` -> unchanged
    - numeric -> ``"<number>%"`` (no rounding or clamping)
    - anything else -> unchanged
    """
    if not raw:
        return ""
    if "%" in raw:
        return raw
    value = _parse_number(raw)
    if value is None:
        return raw
    return f"{_format_number(value)}%"
