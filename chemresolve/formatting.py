# chemresolve/formatting.py
"""Text rendering of results for the expression evaluator."""

UNDEFINED_TEXT = "Undefined"


def format_formula(counts):
    """
    Formats a count mapping in Hill order (C, H, then alphabetical).

    Args:
        counts (dict): Symbol -> count.

    Returns:
        str, e.g. "C2H4O2". Empty mapping gives "".
    """
    if not counts:
        return ""
    order = []
    if "C" in counts:
        order.append("C")
        if "H" in counts:
            order.append("H")
    order.extend(sorted(k for k in counts if k not in order))

    parts = []
    for symbol in order:
        count = counts[symbol]
        if count <= 0:
            continue
        parts.append(symbol if count == 1 else f"{symbol}{count}")
    return "".join(parts)


def format_mass(result, unit=None):
    """Molar mass at its significant figures, or "Undefined"."""
    if result.molar_mass is None:
        return UNDEFINED_TEXT
    text = format(result.molar_mass, 'f')
    return f"{text} {unit}" if unit else text


def _signed(charge):
    return f"+{charge}" if charge > 0 else str(charge)


def format_charge(result):
    """Net charge ("+3", "0", "-2"), a candidate set ("{-2, -1, 0, +1}"), or "Undefined"."""
    if result.total_charge is not None:
        return _signed(result.total_charge)
    if result.charge_candidates:
        return "{" + ", ".join(_signed(c) for c in result.charge_candidates) + "}"
    return UNDEFINED_TEXT
