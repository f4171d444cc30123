# chemresolve/tables.py
"""
Reference tables: elements, polyatomic ions and acid/base constants.

The tables are read from one YAML document whose layout mirrors the
evaluator's data source:

    symbols:  ["H", "He", ...]         # positionally aligned with names/charges
    names:    [Hydrogen, Helium, ...]
    charges:  [[1, -1], [], ...]
    masses:   {precision: sigfig, values: {"H": "1.008", ...}}
    polyatomic_ions: {SO4: {charge: -2, name: sulfate}, ...}
    ka:       {precision: raw, values: {HCl: complete, CH3COOH: "1.8e-5"}}
    kb:       {precision: raw, values: {...}}

Every loaded entry is frozen; ReferenceTables can be shared freely between
threads once built.
"""

import json
import logging
import os
import threading
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

import jsonschema
import yaml

from .errors import TableLoadError
from .measured import MeasuredValue, PrecisionMode, measured_from_text

logger = logging.getLogger(__name__)

DATA_DIR = os.path.join(os.path.dirname(__file__), 'data')
DEFAULT_TABLES_PATH = os.path.join(DATA_DIR, 'reference_tables.yml')
SCHEMA_PATH = os.path.join(os.path.dirname(__file__), 'table_schema.json')

UNDEFINED_LITERAL = 'Undefined'
DEFAULT_SENTINEL_EXPONENT = 100


class AcidBaseKind(Enum):
    KA = "Ka"
    KB = "Kb"


class DissociationKind(Enum):
    COMPLETE = "complete"
    NEGLIGIBLE = "negligible"
    MEASURED = "measured"


@dataclass(frozen=True)
class Dissociation:
    """Tagged dissociation constant: complete, negligible, or a measured value."""

    kind: DissociationKind
    value: Optional[MeasuredValue] = None

    @classmethod
    def complete(cls):
        return cls(DissociationKind.COMPLETE)

    @classmethod
    def negligible(cls):
        return cls(DissociationKind.NEGLIGIBLE)

    @classmethod
    def measured(cls, value: MeasuredValue):
        return cls(DissociationKind.MEASURED, value)


@dataclass(frozen=True)
class Element:
    symbol: str
    name: str
    atomic_mass: Optional[MeasuredValue]  # None: no standard atomic mass
    common_charges: Tuple[int, ...] = ()

    @property
    def has_mass(self) -> bool:
        return self.atomic_mass is not None


@dataclass(frozen=True)
class PolyatomicIon:
    formula_key: str
    charge: int
    names: Tuple[str, ...]

    @property
    def name(self) -> str:
        return '/'.join(self.names)


@dataclass(frozen=True)
class AcidBaseConstant:
    species_key: str
    kind: AcidBaseKind
    constant: Dissociation


class ReferenceTables:
    """Read-only lookup over the loaded reference data."""

    def __init__(self, elements, ions, ka, kb, source=None):
        self.elements: Mapping[str, Element] = MappingProxyType(dict(elements))
        self.ions: Mapping[str, PolyatomicIon] = MappingProxyType(dict(ions))
        self.ka: Mapping[str, AcidBaseConstant] = MappingProxyType(dict(ka))
        self.kb: Mapping[str, AcidBaseConstant] = MappingProxyType(dict(kb))
        self.source = source

        # Longest key first, so "ClO4" wins over "ClO" when scanning a formula.
        self.ion_keys_by_length: Tuple[str, ...] = tuple(
            sorted(self.ions, key=lambda k: (-len(k), k))
        )
        self._elements_by_name = {e.name.lower(): e for e in self.elements.values()}
        self._ions_by_name: Dict[str, PolyatomicIon] = {}
        for ion in self.ions.values():
            for name in ion.names:
                self._ions_by_name.setdefault(name.lower(), ion)

    def element(self, symbol) -> Optional[Element]:
        return self.elements.get(symbol)

    def ion(self, formula_key) -> Optional[PolyatomicIon]:
        return self.ions.get(formula_key)

    def element_by_name(self, name) -> Optional[Element]:
        return self._elements_by_name.get(name.strip().lower())

    def ion_by_name(self, name) -> Optional[PolyatomicIon]:
        """Find an ion by any of its slash-separated synonyms."""
        return self._ions_by_name.get(name.strip().lower())

    def constant(self, species, kind: AcidBaseKind) -> Optional[AcidBaseConstant]:
        table = self.ka if kind is AcidBaseKind.KA else self.kb
        return table.get(species)

    def __repr__(self):
        return (f"ReferenceTables({len(self.elements)} elements, {len(self.ions)} ions, "
                f"{len(self.ka)} Ka, {len(self.kb)} Kb)")


def load_schema():
    """Load the reference table schema from table_schema.json"""
    with open(SCHEMA_PATH, 'r') as f:
        return json.load(f)


def _split_entry(raw, section_mode):
    """Return (literal, PrecisionMode) for a plain or {value, precision} entry."""
    if isinstance(raw, dict):
        mode = PrecisionMode(raw.get('precision', section_mode.value))
        return str(raw['value']).strip(), mode
    return str(raw).strip(), section_mode


def _parse_dissociation(literal, mode, sentinel_exponent):
    if literal == 'complete':
        return Dissociation.complete()
    if literal == 'negligible':
        return Dissociation.negligible()
    value = measured_from_text(literal, mode)
    if value.value <= 0:
        raise ValueError(f"dissociation constant must be positive, got '{literal}'")
    exponent = value.value.adjusted()
    # Legacy sentinels such as 1e1000 / 1e-1000
    if exponent >= sentinel_exponent:
        return Dissociation.complete()
    if exponent <= -sentinel_exponent:
        return Dissociation.negligible()
    return Dissociation.measured(value)


def build_tables(data, source=None, sentinel_exponent=DEFAULT_SENTINEL_EXPONENT):
    """
    Build ReferenceTables from an already-parsed table document.

    Args:
        data (dict): Parsed YAML document (see module docstring).
        source (str): Where the data came from, used in error messages.
        sentinel_exponent (int): Exponent magnitude at which a numeric
            constant is read as a complete/negligible sentinel.

    Returns:
        ReferenceTables

    Raises:
        TableLoadError: If the document fails schema or consistency checks.
    """
    if not isinstance(data, dict):
        raise TableLoadError("table document must be a mapping", source)
    try:
        jsonschema.validate(instance=data, schema=load_schema())
    except jsonschema.ValidationError as e:
        location = ' -> '.join(str(p) for p in e.path) or '<root>'
        raise TableLoadError(f"schema validation failed at {location}: {e.message}", source) from e

    symbols = data['symbols']
    names = data['names']
    charges = data['charges']
    if not (len(symbols) == len(names) == len(charges)):
        raise TableLoadError(
            f"symbols/names/charges are not aligned: "
            f"{len(symbols)} symbols, {len(names)} names, {len(charges)} charge sets", source)
    if len(set(symbols)) != len(symbols):
        duplicates = sorted({s for s in symbols if symbols.count(s) > 1})
        raise TableLoadError(f"duplicate element symbols: {duplicates}", source)

    mass_section = data['masses']
    mass_mode = PrecisionMode(mass_section.get('precision', 'sigfig'))
    mass_values = mass_section['values']
    unknown = [key for key in mass_values if key not in symbols]
    if unknown:
        raise TableLoadError(f"masses given for unknown symbols: {unknown}", source)

    elements = {}
    for symbol, name, charge_set in zip(symbols, names, charges):
        mass = None
        if symbol in mass_values:
            literal, mode = _split_entry(mass_values[symbol], mass_mode)
            if literal != UNDEFINED_LITERAL:
                mass = measured_from_text(literal, mode)
        elements[symbol] = Element(symbol, name, mass, tuple(charge_set))

    ions = {}
    for key, entry in (data.get('polyatomic_ions') or {}).items():
        synonyms = tuple(part.strip() for part in entry['name'].split('/') if part.strip())
        ions[key] = PolyatomicIon(key, int(entry['charge']), synonyms)

    constants = {AcidBaseKind.KA: {}, AcidBaseKind.KB: {}}
    for kind, section_name in ((AcidBaseKind.KA, 'ka'), (AcidBaseKind.KB, 'kb')):
        section = data.get(section_name)
        if not section:
            continue
        section_mode = PrecisionMode(section.get('precision', 'raw'))
        for species, raw in section['values'].items():
            literal, mode = _split_entry(raw, section_mode)
            try:
                constant = _parse_dissociation(literal, mode, sentinel_exponent)
            except ValueError as e:
                raise TableLoadError(f"{section_name}[{species}]: {e}", source) from e
            constants[kind][str(species)] = AcidBaseConstant(str(species), kind, constant)

    return ReferenceTables(elements, ions, constants[AcidBaseKind.KA],
                           constants[AcidBaseKind.KB], source=source)


def load_tables(tables_path=None, sentinel_exponent=DEFAULT_SENTINEL_EXPONENT):
    """
    Loads a reference table YAML file.

    Args:
        tables_path: Path to the YAML file. None loads the packaged tables.
        sentinel_exponent: See build_tables.

    Returns:
        ReferenceTables
    """
    path = tables_path or DEFAULT_TABLES_PATH
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Reference tables not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise TableLoadError(f"invalid YAML: {e}", path) from e

    tables = build_tables(data, source=path, sentinel_exponent=sentinel_exponent)
    logger.info(f"Loaded reference tables from {path}: {tables!r}")
    return tables


_default_tables: Optional[ReferenceTables] = None
_default_lock = threading.Lock()


def get_default_tables() -> ReferenceTables:
    """Packaged tables, loaded on first use. Safe to call from any thread."""
    global _default_tables
    tables = _default_tables
    if tables is not None:
        return tables
    with _default_lock:
        if _default_tables is None:
            _default_tables = load_tables()
        return _default_tables


def dissociation_exponent(constant: Dissociation) -> Optional[int]:
    """Power of ten of a measured constant (None for the tagged sentinels)."""
    if constant.kind is not DissociationKind.MEASURED:
        return None
    return Decimal(constant.value.value).adjusted()
