# chemresolve/errors.py
"""
Exception types raised by chemresolve.

Only malformed formula text and broken reference data are hard errors.
Chemistry gaps (unknown symbols, undefined masses, ambiguous charges) are
reported as diagnostics on the result instead.
"""


class ChemResolveError(Exception):
    """Base class for every error raised by this package."""


class FormulaParseError(ChemResolveError, ValueError):
    """A formula string could not be parsed.

    Attributes:
        formula: The text that was being parsed.
        position: 0-based index of the offending character, or None.
    """

    def __init__(self, message, formula=None, position=None):
        self.formula = formula
        self.position = position
        if formula is not None and position is not None:
            message = f"{message} (at position {position} in '{formula}')"
        super().__init__(message)


class EmptyFormula(FormulaParseError):
    pass


class UnbalancedGroup(FormulaParseError):
    pass


class InvalidMultiplier(FormulaParseError):
    pass


class IllegalCharacter(FormulaParseError):
    pass


class TableLoadError(ChemResolveError):
    """Reference table data is malformed or inconsistent."""

    def __init__(self, message, path=None):
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)


class ConfigError(ChemResolveError, ValueError):
    """Engine configuration is invalid."""
