"""Locale-independent decimal parsing shared by the URDF and STL readers."""

import re
from typing import List, Optional

# '.' decimal separator, optional sign, optional exponent. No inf/nan,
# no digit grouping.
_DECIMAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_decimal(text: Optional[str]) -> Optional[float]:
    """Parse ``text`` as a decimal number, or return None if it is not one."""
    if text is None:
        return None
    text = text.strip()
    if not _DECIMAL.fullmatch(text):
        return None
    return float(text)


def float_or(text: Optional[str], default: float) -> float:
    value = parse_decimal(text)
    return default if value is None else value


def vector_or(text: Optional[str], size: int, default: float) -> List[float]:
    """Whitespace-split ``text`` into ``size`` floats.

    Missing or unparsable components take ``default``; extra components are
    ignored.
    """
    tokens = (text or "").split()
    return [
        float_or(tokens[i], default) if i < len(tokens) else default
        for i in range(size)
    ]
