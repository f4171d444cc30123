# chemresolve/resolver.py
"""
Composition resolver.

Flattens a parsed formula tree into element (and polyatomic ion) counts,
then attaches the derived properties. Every call returns a result; missing
chemistry data only leaves fields absent and adds diagnostics.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Optional, Tuple

from .diagnostics import Diagnostic, DiagnosticLog
from .formula_parser import Group, iter_leaves, parse
from .properties import (
    AcidBaseTier,
    MolarMass,
    candidate_charges,
    classify_acid_base,
    compute_mass,
)
from .tables import DEFAULT_SENTINEL_EXPONENT, AcidBaseKind, get_default_tables


class ResolutionMode(Enum):
    ELEMENTAL = "elemental"  # every symbol resolves through the element table
    IONIC = "ionic"          # polyatomic ions are kept as charged units


class ElementCount(Mapping):
    """Immutable symbol -> count mapping in first-seen order. Counts are >= 1."""

    def __init__(self, counts=None):
        self._counts = {k: v for k, v in dict(counts or {}).items() if v > 0}

    def __getitem__(self, symbol):
        return self._counts[symbol]

    def __iter__(self):
        return iter(self._counts)

    def __len__(self):
        return len(self._counts)

    def __hash__(self):
        return hash(frozenset(self._counts.items()))

    def __repr__(self):
        inner = ', '.join(f"{k}: {v}" for k, v in self._counts.items())
        return f"ElementCount({{{inner}}})"


@dataclass(frozen=True)
class ResolutionResult:
    formula: Optional[str]
    mode: ResolutionMode
    element_count: ElementCount
    ion_count: ElementCount
    unresolved_symbols: Tuple[str, ...]
    molar_mass: Optional[Decimal]
    precision_digits: Optional[int]
    total_charge: Optional[int]
    charge_candidates: Tuple[int, ...]
    acid_tier: AcidBaseTier
    base_tier: AcidBaseTier
    diagnostics: Tuple[Diagnostic, ...]
    mass_detail: Optional[MolarMass] = None

    @property
    def acid_base_tier(self):
        """Acid tier when the species has a Ka entry, otherwise its base tier."""
        if self.acid_tier is not AcidBaseTier.UNKNOWN:
            return self.acid_tier
        return self.base_tier

    @property
    def has_mass(self):
        return self.molar_mass is not None

    @property
    def charge_is_ambiguous(self):
        return len(self.charge_candidates) > 1

    @property
    def is_complete(self):
        return not self.unresolved_symbols and self.molar_mass is not None

    def diagnostics_of(self, kind):
        return tuple(d for d in self.diagnostics if d.kind is kind)


@lru_cache(maxsize=None)
def _ion_elements(formula_key):
    """Element breakdown spelled out by an ion key, e.g. 'SO4' -> (('S', 1), ('O', 4))."""
    counts = {}
    for leaf, total in iter_leaves(parse(formula_key)):
        counts[leaf.symbol] = counts.get(leaf.symbol, 0) + total
    return tuple(counts.items())


def _add(counts, key, amount):
    counts[key] = counts.get(key, 0) + amount


def resolve(tree, tables=None, mode=ResolutionMode.ELEMENTAL, decompose_ions=True,
            charge_hints=None, threshold=DEFAULT_SENTINEL_EXPONENT):
    """
    Resolve a composition tree against the reference tables.

    Args:
        tree: Root node returned by ``parse``.
        tables: Reference tables (packaged tables by default).
        mode: ELEMENTAL resolves every leaf as an element (ion leaves are
            expanded into their elements). IONIC keeps ion leaves as units
            carrying their tabulated charge.
        decompose_ions (bool): In IONIC mode, also add each ion's elements
            to ``element_count`` so a molar mass can be computed. When
            False the ions stay opaque and the molar mass is absent.
        charge_hints: Optional symbol -> charge overrides for elements with
            several common charges.
        threshold (int): Exponent magnitude for the acid/base sentinels.

    Returns:
        ResolutionResult
    """
    tables = tables or get_default_tables()
    formula = tree.source if isinstance(tree, Group) else None
    log = DiagnosticLog(formula)

    element_counts = {}
    free_counts = {}   # elements outside ion units, for charge
    ion_counts = {}
    unresolved = []

    for leaf, total in iter_leaves(tree):
        key = leaf.symbol
        ion = tables.ion(key) if (leaf.is_ion or mode is ResolutionMode.IONIC) else None
        if ion is not None and mode is ResolutionMode.IONIC:
            _add(ion_counts, key, total)
            if decompose_ions:
                for symbol, count in _ion_elements(key):
                    _add(element_counts, symbol, total * count)
        elif ion is not None:
            for symbol, count in _ion_elements(key):
                _add(element_counts, symbol, total * count)
                _add(free_counts, symbol, total * count)
        elif tables.element(key) is not None:
            _add(element_counts, key, total)
            _add(free_counts, key, total)
        else:
            if key not in unresolved:
                unresolved.append(key)
            log.unresolved(key)

    mass = None
    if unresolved:
        log.undefined(formula or '', "molar mass")
    elif ion_counts and not decompose_ions:
        for key in ion_counts:
            log.undefined(key, "molar mass")
    else:
        mass = compute_mass(element_counts, tables, log)

    candidates = ()
    total_charge = None
    if unresolved:
        log.undefined(formula or '', "net charge")
    else:
        found = candidate_charges(free_counts, ion_counts, tables, charge_hints, log)
        if found is not None:
            candidates = found
            if len(found) == 1:
                total_charge = found[0]
            else:
                log.ambiguous_charge(found)

    acid_tier = base_tier = AcidBaseTier.UNKNOWN
    if formula:
        acid_tier = classify_acid_base(formula, tables, AcidBaseKind.KA, threshold)
        base_tier = classify_acid_base(formula, tables, AcidBaseKind.KB, threshold)

    return ResolutionResult(
        formula=formula,
        mode=mode,
        element_count=ElementCount(element_counts),
        ion_count=ElementCount(ion_counts),
        unresolved_symbols=tuple(unresolved),
        molar_mass=mass.value if mass else None,
        precision_digits=mass.precision_digits if mass else None,
        total_charge=total_charge,
        charge_candidates=candidates,
        acid_tier=acid_tier,
        base_tier=base_tier,
        diagnostics=log.freeze(),
        mass_detail=mass,
    )
