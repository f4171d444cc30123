"""chemresolve: chemical formula resolution for the expression evaluator."""

from .diagnostics import Diagnostic, DiagnosticKind
from .engine import FormulaEngine, analyze
from .errors import (
    ChemResolveError,
    ConfigError,
    EmptyFormula,
    FormulaParseError,
    IllegalCharacter,
    InvalidMultiplier,
    TableLoadError,
    UnbalancedGroup,
)
from .formula_parser import Group, Leaf, parse
from .measured import MeasuredValue, PrecisionMode
from .properties import AcidBaseTier, classify_acid_base, compute_mass
from .resolver import ElementCount, ResolutionMode, ResolutionResult, resolve
from .tables import AcidBaseKind, ReferenceTables, get_default_tables, load_tables

__all__ = [
    "AcidBaseKind",
    "AcidBaseTier",
    "ChemResolveError",
    "ConfigError",
    "Diagnostic",
    "DiagnosticKind",
    "ElementCount",
    "EmptyFormula",
    "FormulaEngine",
    "FormulaParseError",
    "Group",
    "IllegalCharacter",
    "InvalidMultiplier",
    "Leaf",
    "MeasuredValue",
    "PrecisionMode",
    "ReferenceTables",
    "ResolutionMode",
    "ResolutionResult",
    "TableLoadError",
    "UnbalancedGroup",
    "analyze",
    "classify_acid_base",
    "compute_mass",
    "get_default_tables",
    "load_tables",
    "parse",
    "resolve",
]
