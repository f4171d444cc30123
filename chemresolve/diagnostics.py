# chemresolve/diagnostics.py
"""
Non-fatal findings collected while resolving a formula.

Unknown symbols, undefined quantities and ambiguous charges never abort a
resolution; they are recorded here and the matching result field is left
absent.
"""

import logging
from collections import namedtuple
from enum import Enum

logger = logging.getLogger(__name__)


class DiagnosticKind(Enum):
    UNRESOLVED_SYMBOL = "unresolved_symbol"
    UNDEFINED_QUANTITY = "undefined_quantity"
    AMBIGUOUS_CHARGE = "ambiguous_charge"


class Diagnostic(namedtuple('Diagnostic', ['kind', 'subject', 'message'])):
    __slots__ = ()

    def __str__(self):
        return f"{self.kind.value}: {self.message}"


class DiagnosticLog:
    """Ordered, de-duplicated collection of diagnostics for one resolution."""

    def __init__(self, formula=None):
        self.formula = formula
        self._items = []
        self._seen = set()

    def add(self, kind, subject, message):
        key = (kind, subject, message)
        if key in self._seen:
            return
        self._seen.add(key)
        self._items.append(Diagnostic(kind, subject, message))
        if kind is DiagnosticKind.UNRESOLVED_SYMBOL:
            logger.warning(f"{message} (formula: {self.formula})")
        else:
            logger.debug(f"{kind.value}: {message} (formula: {self.formula})")

    def unresolved(self, symbol):
        self.add(DiagnosticKind.UNRESOLVED_SYMBOL, symbol, f"Unknown symbol '{symbol}'")

    def undefined(self, subject, quantity):
        self.add(DiagnosticKind.UNDEFINED_QUANTITY, subject,
                 f"{quantity} is undefined for '{subject}'")

    def ambiguous_charge(self, candidates):
        listed = ', '.join(str(c) for c in candidates)
        self.add(DiagnosticKind.AMBIGUOUS_CHARGE, self.formula or '',
                 f"net charge is ambiguous: {{{listed}}}")

    def of_kind(self, kind):
        return tuple(d for d in self._items if d.kind is kind)

    def freeze(self):
        return tuple(self._items)

    def __len__(self):
        return len(self._items)

    def __iter__(self):
        return iter(self._items)
