# chemresolve/properties.py
"""
Derived properties of a resolved composition: molar mass, net charge
candidates and acid/base strength.
"""

from decimal import Decimal
from enum import Enum
from typing import Mapping, NamedTuple, Optional, Tuple

from .diagnostics import DiagnosticLog
from .measured import MeasuredValue, measured_sum
from .tables import (
    DEFAULT_SENTINEL_EXPONENT,
    AcidBaseKind,
    Dissociation,
    DissociationKind,
    ReferenceTables,
    dissociation_exponent,
    get_default_tables,
)


class MolarMass(NamedTuple):
    value: Decimal                     # rounded to its significant figures
    precision_digits: Optional[int]    # None when every contributor is exact
    measured: MeasuredValue


class AcidBaseTier(Enum):
    STRONG = "strong"
    WEAK = "weak"
    NEGLIGIBLE = "negligible"
    UNKNOWN = "unknown"


def compute_mass(counts: Mapping[str, int], tables: Optional[ReferenceTables] = None,
                 diagnostics: Optional[DiagnosticLog] = None) -> Optional[MolarMass]:
    """
    Molar mass of an element count mapping, in g/mol.

    Each count x atomic-mass product keeps the mass's significant figures;
    the sum is rounded at the coarsest last significant digit among them.

    Args:
        counts: Element symbol -> count.
        tables: Reference tables (packaged tables by default).
        diagnostics: Optional log that receives unknown-symbol and
            undefined-mass findings.

    Returns:
        MolarMass, or None when the mapping is empty, holds an unknown
        symbol, or holds an element without a defined mass. A partial sum
        is never returned.
    """
    tables = tables or get_default_tables()
    terms = []
    complete = bool(counts)
    for symbol, count in counts.items():
        element = tables.element(symbol)
        if element is None:
            if diagnostics is not None:
                diagnostics.unresolved(symbol)
            complete = False
        elif element.atomic_mass is None:
            if diagnostics is not None:
                diagnostics.undefined(symbol, "atomic mass")
            complete = False
        else:
            terms.append(element.atomic_mass.scale(count))
    if not complete:
        return None
    total = measured_sum(terms)
    return MolarMass(total.rounded(), total.sig_figs, total)


def _atom_charge_sums(charges, count):
    """Distinct totals of `count` atoms, each taking any of `charges`."""
    sums = {0}
    for _ in range(count):
        sums = {s + q for s in sums for q in charges}
    return sums


def candidate_charges(element_counts: Mapping[str, int], ion_counts: Mapping[str, int],
                      tables: Optional[ReferenceTables] = None,
                      hints: Optional[Mapping[str, int]] = None,
                      diagnostics: Optional[DiagnosticLog] = None) -> Optional[Tuple[int, ...]]:
    """
    All net charges the composition can carry.

    Each atom picks its own charge from the element's common charges, so
    mixed-valence compounds such as Fe3O4 (Fe2+ with two Fe3+) are covered.
    A ``hints`` entry fixes the charge for every atom of that element.
    Polyatomic ions contribute their tabulated charge.

    Returns:
        Sorted tuple of distinct net charges, or None when some element has
        no common charge or a symbol is unknown.
    """
    tables = tables or get_default_tables()
    hints = hints or {}
    sums = {0}
    defined = True

    for key, count in ion_counts.items():
        ion = tables.ion(key)
        if ion is None:
            if diagnostics is not None:
                diagnostics.unresolved(key)
            defined = False
            continue
        sums = {s + count * ion.charge for s in sums}

    for symbol, count in element_counts.items():
        if symbol in hints:
            charges = (int(hints[symbol]),)
        else:
            element = tables.element(symbol)
            if element is None:
                if diagnostics is not None:
                    diagnostics.unresolved(symbol)
                defined = False
                continue
            charges = element.common_charges
        if not charges:
            if diagnostics is not None:
                diagnostics.undefined(symbol, "ionic charge")
            defined = False
            continue
        reachable = _atom_charge_sums(charges, count)
        sums = {s + r for s in sums for r in reachable}

    if not defined:
        return None
    return tuple(sorted(sums))


def tier_of(constant: Dissociation, threshold=DEFAULT_SENTINEL_EXPONENT) -> AcidBaseTier:
    if constant.kind is DissociationKind.COMPLETE:
        return AcidBaseTier.STRONG
    if constant.kind is DissociationKind.NEGLIGIBLE:
        return AcidBaseTier.NEGLIGIBLE
    exponent = dissociation_exponent(constant)
    if exponent >= threshold:
        return AcidBaseTier.STRONG
    if exponent <= -threshold:
        return AcidBaseTier.NEGLIGIBLE
    return AcidBaseTier.WEAK


def classify_acid_base(species, tables: Optional[ReferenceTables] = None,
                       kind: Optional[AcidBaseKind] = None,
                       threshold=DEFAULT_SENTINEL_EXPONENT) -> AcidBaseTier:
    """
    Strength tier of a species from its Ka or Kb entry.

    Args:
        species (str): Table key, e.g. 'HCl', 'CH3COOH', 'NH3'.
        tables: Reference tables (packaged tables by default).
        kind: Look only in the Ka or only in the Kb table. When None, Ka is
            checked first, then Kb.
        threshold (int): Exponent magnitude treated as complete/negligible.

    Returns:
        AcidBaseTier; UNKNOWN when the species has no entry.
    """
    tables = tables or get_default_tables()
    key = str(species).strip()
    kinds = (kind,) if kind is not None else (AcidBaseKind.KA, AcidBaseKind.KB)
    for k in kinds:
        entry = tables.constant(key, k)
        if entry is not None:
            return tier_of(entry.constant, threshold)
    return AcidBaseTier.UNKNOWN
