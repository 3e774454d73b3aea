from __future__ import annotations


def fmt_number(v: float) -> str:
    """Shortest round-tripping form without a trailing ``.0``: 1.5 -> "1.5", 2.0 -> "2"."""
    text = repr(float(v))
    return text[:-2] if text.endswith(".0") else text


def fmt_amount(v: float) -> str:
    """Token amounts for balance listings: no float noise, at most 6 decimals."""
    if v == 0:
        return "0"
    if abs(v) >= 1_000:
        return f"{v:,.2f}"
    text = f"{v:.6f}".rstrip("0").rstrip(".")
    return text or "0"
