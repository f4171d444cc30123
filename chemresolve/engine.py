# chemresolve/engine.py
"""
FormulaEngine: the entry point the expression evaluator calls.

    engine = FormulaEngine()
    result = engine.analyze("Al2(SO4)3", mode=ResolutionMode.IONIC)
    result.total_charge   # 0
"""

import logging
import threading
from collections import OrderedDict

from .config_loader import EngineConfig, load_config
from .formula_parser import parse
from .properties import classify_acid_base
from .resolver import ResolutionMode, resolve
from .tables import get_default_tables, load_tables

logger = logging.getLogger(__name__)


class FormulaEngine:
    def __init__(self, tables=None, config=None):
        self.config = config or EngineConfig()
        if tables is None:
            if self.config.tables_path:
                tables = load_tables(self.config.tables_path, self.config.sentinel_exponent)
            else:
                tables = get_default_tables()
        self.tables = tables
        self._memo = OrderedDict()
        self._memo_lock = threading.Lock()

    @classmethod
    def from_config_file(cls, config_path):
        return cls(config=load_config(config_path))

    def parse(self, formula, mode=None):
        mode = mode or self.config.default_mode
        return parse(formula, self.tables, match_ions=mode is ResolutionMode.IONIC)

    def resolve(self, tree, mode=None, charge_hints=None, decompose_ions=None):
        mode = mode or self.config.default_mode
        if decompose_ions is None:
            decompose_ions = self.config.decompose_ions
        return resolve(tree, self.tables, mode, decompose_ions, charge_hints,
                       self.config.sentinel_exponent)

    def analyze(self, formula, mode=None, charge_hints=None, decompose_ions=None):
        """
        Parse and resolve a formula in one step.

        Args:
            formula (str): Formula text, e.g. 'Fe(H2O)6'.
            mode: ELEMENTAL or IONIC; defaults to the configured mode.
            charge_hints: Optional symbol -> charge choices.
            decompose_ions: Overrides the configured decompose_ions flag.

        Returns:
            ResolutionResult

        Raises:
            FormulaParseError: For malformed formula text only.
        """
        mode = mode or self.config.default_mode
        if decompose_ions is None:
            decompose_ions = self.config.decompose_ions
        if not self.config.memoize:
            return self.resolve(self.parse(formula, mode), mode, charge_hints, decompose_ions)

        key = (str(formula).strip(), mode, decompose_ions,
               tuple(sorted((charge_hints or {}).items())))
        with self._memo_lock:
            cached = self._memo.get(key)
            if cached is not None:
                self._memo.move_to_end(key)
                logger.debug(f"Memo hit for '{key[0]}'")
                return cached

        result = self.resolve(self.parse(formula, mode), mode, charge_hints, decompose_ions)
        with self._memo_lock:
            self._memo[key] = result
            while len(self._memo) > self.config.memo_size:
                self._memo.popitem(last=False)
        return result

    def acid_base_tier(self, species, kind=None):
        return classify_acid_base(species, self.tables, kind, self.config.sentinel_exponent)

    def clear_memo(self):
        with self._memo_lock:
            self._memo.clear()


_default_engine = None
_default_engine_lock = threading.Lock()


def default_engine():
    global _default_engine
    if _default_engine is None:
        with _default_engine_lock:
            if _default_engine is None:
                _default_engine = FormulaEngine()
    return _default_engine


def analyze(formula, mode=None, charge_hints=None, decompose_ions=None):
    """Analyze a formula with the packaged tables and default settings."""
    return default_engine().analyze(formula, mode, charge_hints, decompose_ions)
