# chemresolve/measured.py
"""
Decimal values that remember how many significant figures they carry.

A value read from a ``sigfig`` table section keeps the significant figures
of its literal text ("16.00" -> 4). A value from a ``raw`` section is exact
and never limits the precision of a result.

Arithmetic follows the evaluator's rules:
  - scaling by an exact integer keeps the sig-fig count and rounds the product,
  - addition rounds at the coarsest least-significant digit of the
    sig-fig-limited operands (the one with the largest rounding error).
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN
from enum import Enum
from typing import Optional


class PrecisionMode(Enum):
    RAW = "raw"
    SIGFIG = "sigfig"


def count_sig_figs(text):
    """
    Count the significant figures in a numeric literal.

    Leading zeros never count. Trailing zeros count only when the literal has
    a decimal point, so "200" has 1 and "200." has 3.

    Args:
        text (str): Numeric literal, optionally signed or in e-notation.

    Returns:
        int: Number of significant figures (at least 1).
    """
    mantissa = text.strip().lower().split('e')[0].lstrip('+-')
    if not any(ch.isdigit() for ch in mantissa):
        raise ValueError(f"Not a numeric literal: '{text}'")
    digits = mantissa.replace('.', '').lstrip('0')
    if not digits:
        # A literal zero: only the digits after the point say anything.
        return max(1, len(mantissa.partition('.')[2]))
    if '.' not in mantissa:
        digits = digits.rstrip('0') or digits[:1]
    return len(digits)


def _round_at(value: Decimal, digit: int) -> Decimal:
    """Round ``value`` so its last kept digit sits at 10**digit."""
    return value.quantize(Decimal(1).scaleb(digit), rounding=ROUND_HALF_EVEN)


@dataclass(frozen=True)
class MeasuredValue:
    """A Decimal plus its significant-figure budget (None = exact)."""

    value: Decimal
    sig_figs: Optional[int] = None
    mode: PrecisionMode = PrecisionMode.RAW

    @property
    def is_exact(self) -> bool:
        return self.sig_figs is None

    @property
    def least_sig_digit(self) -> Optional[int]:
        """Decimal position (power of ten) of the last significant digit."""
        if self.sig_figs is None:
            return None
        if self.value.is_zero():
            return -self.sig_figs + 1
        return self.value.adjusted() - self.sig_figs + 1

    def rounded(self) -> Decimal:
        """The value cut to its significant figures."""
        if self.sig_figs is None:
            return self.value
        return _round_at(self.value, self.least_sig_digit)

    def scale(self, factor: int) -> "MeasuredValue":
        """Multiply by an exact integer count."""
        product = self.value * factor
        if self.sig_figs is None:
            return MeasuredValue(product, None, self.mode)
        result = MeasuredValue(product, self.sig_figs, self.mode)
        return MeasuredValue(result.rounded(), self.sig_figs, self.mode)

    def __add__(self, other):
        if not isinstance(other, MeasuredValue):
            return NotImplemented
        return measured_sum((self, other))

    def __float__(self):
        return float(self.value)

    def __str__(self):
        return str(self.rounded())


def measured_from_text(text, mode=PrecisionMode.SIGFIG):
    """
    Build a MeasuredValue from a table literal.

    Args:
        text (str): Numeric literal such as "16.00" or "1.8e-5".
        mode (PrecisionMode): RAW keeps the value exact, SIGFIG counts figures.

    Returns:
        MeasuredValue

    Raises:
        ValueError: If the text is not a finite number.
    """
    literal = str(text).strip()
    try:
        value = Decimal(literal)
    except InvalidOperation as e:
        raise ValueError(f"Not a numeric literal: '{text}'") from e
    if not value.is_finite():
        raise ValueError(f"Not a finite number: '{text}'")
    if mode is PrecisionMode.RAW:
        return MeasuredValue(value, None, mode)
    return MeasuredValue(value, count_sig_figs(literal), mode)


def measured_sum(values):
    """
    Add MeasuredValues, rounding once at the end.

    The result keeps digits down to the coarsest least-significant digit of
    the sig-fig-limited operands. Exact operands never limit it; if every
    operand is exact the sum is exact too.

    Args:
        values: Iterable of MeasuredValue.

    Returns:
        MeasuredValue, or None for an empty iterable.
    """
    values = list(values)
    if not values:
        return None
    total = sum((v.value for v in values), Decimal(0))
    digits = [v.least_sig_digit for v in values if v.sig_figs is not None]
    if not digits:
        return MeasuredValue(total, None, PrecisionMode.RAW)
    digit = max(digits)
    total = _round_at(total, digit)
    if total.is_zero():
        sig_figs = 1
    else:
        sig_figs = max(1, total.adjusted() - digit + 1)
    return MeasuredValue(total, sig_figs, PrecisionMode.SIGFIG)
