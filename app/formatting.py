"""Rupee formatting for display. The core hands out plain floats."""

RUPEE = "₹"
LAKH = 100_000
CRORE = 10_000_000


def _indian_grouping(digits: str) -> str:
    # last three digits, then groups of two: 12,34,56,789
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_inr(amount: float) -> str:
    """``1234567.5`` -> ``₹12,34,567.50``; negatives get a leading minus."""
    sign = "-" if amount < 0 else ""
    whole, frac = f"{abs(amount):.2f}".split(".")
    return f"{sign}{RUPEE}{_indian_grouping(whole)}.{frac}"


def format_inr_short(amount: float) -> str:
    """Compact card figure: ``₹1.50 Cr``, ``₹2.30 L``, ``₹4.50K`` or ``₹999.00``."""
    if amount >= CRORE:
        return f"{RUPEE}{amount / CRORE:.2f} Cr"
    if amount >= LAKH:
        return f"{RUPEE}{amount / LAKH:.2f} L"
    if amount >= 1000:
        return f"{RUPEE}{amount / 1000:.2f}K"
    return f"{RUPEE}{amount:.2f}"


def format_percent(value: float) -> str:
    return f"{value:.1f}%"
