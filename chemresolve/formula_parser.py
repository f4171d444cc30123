# chemresolve/formula_parser.py
"""
Chemical formula parser.

Turns text such as 'Al2(SO4)3', 'K4[Fe(CN)6]' or 'CuSO4·5H2O' into a tree of
Leaf and Group nodes. The parser only checks syntax: symbols it does not know
are kept as leaves and reported later by the resolver.

Grammar (informal):
    formula  := part (SEP part)*            SEP is '·', '.' or '*'
    part     := [coefficient] unit+
    unit     := symbol [count] | OPEN unit+ CLOSE [count]
    symbol   := uppercase letter + up to two lowercase letters
              | polyatomic ion key (only when match_ions=True)

Parsing is iterative, so nesting depth is bounded by input length only.
"""

from collections import namedtuple

from .errors import EmptyFormula, IllegalCharacter, InvalidMultiplier, UnbalancedGroup
from .tables import get_default_tables

MAX_SYMBOL_LENGTH = 3
GROUP_PAIRS = {'(': ')', '[': ']', '{': '}'}
CLOSERS = {v: k for k, v in GROUP_PAIRS.items()}
HYDRATE_SEPARATORS = ('·', '•', '.', '*')
DIGITS = frozenset('0123456789')
UPPER = frozenset('ABCDEFGHIJKLMNOPQRSTUVWXYZ')
LOWER = frozenset('abcdefghijklmnopqrstuvwxyz')


# A symbol key with its count, e.g. 'O' in 'H2O' or 'SO4' in ion mode.
Leaf = namedtuple('Leaf', ['symbol', 'multiplier', 'is_ion', 'position'],
                  defaults=[1, False, 0])

# A parenthesised (or top-level) run of Leaf/Group nodes with a multiplier.
Group = namedtuple('Group', ['children', 'multiplier', 'source'], defaults=[1, None])


def iter_leaves(node):
    """
    Walk a tree depth-first, left to right.

    Yields:
        (leaf, total) where total is the leaf's count multiplied by every
        enclosing group's multiplier.
    """
    stack = [(node, 1)]
    while stack:
        current, factor = stack.pop()
        if isinstance(current, Leaf):
            yield current, factor * current.multiplier
            continue
        factor *= current.multiplier
        # Reversed so the leftmost child is visited first.
        for child in reversed(current.children):
            stack.append((child, factor))


class _Frame:
    __slots__ = ('opener', 'position', 'children')

    def __init__(self, opener=None, position=0):
        self.opener = opener
        self.position = position
        self.children = []


class FormulaParser:
    """Single-use scanner over one formula string."""

    def __init__(self, formula, tables=None, match_ions=False):
        self.formula = formula
        self.match_ions = match_ions
        self.tables = tables
        if match_ions and tables is None:
            self.tables = get_default_tables()
        self.pos = 0

    # --- small readers -------------------------------------------------

    def _peek(self, offset=0):
        index = self.pos + offset
        if index < len(self.formula):
            return self.formula[index]
        return ''

    def _read_digits(self):
        start = self.pos
        while self._peek() in DIGITS:
            self.pos += 1
        return self.formula[start:self.pos], start

    def _read_count(self):
        """Optional count after a symbol or group; 1 when absent."""
        if self._peek() == '-' and self._peek(1) in DIGITS:
            raise InvalidMultiplier("Negative multiplier", self.formula, self.pos)
        digits, start = self._read_digits()
        if not digits:
            return 1
        value = int(digits)
        if value == 0:
            raise InvalidMultiplier("Multiplier must be at least 1", self.formula, start)
        return value

    def _read_symbol(self):
        start = self.pos
        if self.match_ions:
            for key in self.tables.ion_keys_by_length:
                if not self.formula.startswith(key, start):
                    continue
                end = start + len(key)
                # Never split an element symbol: 'CN' must not match inside 'CNa'.
                if end < len(self.formula) and self.formula[end] in LOWER:
                    continue
                self.pos = end
                return key, True
        self.pos += 1
        while self._peek() in LOWER and self.pos - start < MAX_SYMBOL_LENGTH:
            self.pos += 1
        if self._peek() in LOWER:
            raise IllegalCharacter(
                f"Element symbols have at most {MAX_SYMBOL_LENGTH} letters",
                self.formula, self.pos)
        return self.formula[start:self.pos], False

    # --- driver ----------------------------------------------------------

    def parse(self):
        stack = [_Frame()]
        parts = []
        coefficient = self._read_part_coefficient()

        while self.pos < len(self.formula):
            ch = self._peek()
            if ch in GROUP_PAIRS:
                stack.append(_Frame(ch, self.pos))
                self.pos += 1
            elif ch in CLOSERS:
                self._close_group(stack, ch)
            elif ch in HYDRATE_SEPARATORS:
                if len(stack) > 1:
                    frame = stack[-1]
                    raise UnbalancedGroup(f"Unclosed '{frame.opener}'", self.formula, frame.position)
                parts.append(self._finish_part(stack[0], coefficient))
                stack = [_Frame()]
                self.pos += 1
                coefficient = self._read_part_coefficient()
            elif ch in UPPER:
                position = self.pos
                symbol, is_ion = self._read_symbol()
                count = self._read_count()
                stack[-1].children.append(Leaf(symbol, count, is_ion, position))
            elif ch in DIGITS:
                raise InvalidMultiplier("Multiplier does not follow an element or group",
                                        self.formula, self.pos)
            elif ch == '-' and self._peek(1) in DIGITS:
                raise InvalidMultiplier("Negative multiplier", self.formula, self.pos)
            else:
                raise IllegalCharacter(f"Unexpected character '{ch}'", self.formula, self.pos)

        if len(stack) > 1:
            frame = stack[-1]
            raise UnbalancedGroup(f"Unclosed '{frame.opener}'", self.formula, frame.position)
        parts.append(self._finish_part(stack[0], coefficient))

        if len(parts) == 1 and parts[0].multiplier == 1:
            return Group(parts[0].children, 1, source=self.formula)
        return Group(tuple(parts), 1, source=self.formula)

    def _read_part_coefficient(self):
        digits, start = self._read_digits()
        if not digits:
            return 1
        value = int(digits)
        if value == 0:
            raise InvalidMultiplier("Coefficient must be at least 1", self.formula, start)
        return value

    def _finish_part(self, frame, coefficient):
        if not frame.children:
            raise EmptyFormula("Formula part contains no elements", self.formula, self.pos)
        return Group(tuple(frame.children), coefficient)

    def _close_group(self, stack, closer):
        if len(stack) == 1:
            raise UnbalancedGroup(f"Unexpected '{closer}'", self.formula, self.pos)
        frame = stack.pop()
        if GROUP_PAIRS[frame.opener] != closer:
            raise UnbalancedGroup(
                f"'{closer}' does not close '{frame.opener}' opened at position {frame.position}",
                self.formula, self.pos)
        if not frame.children:
            raise EmptyFormula("Empty group", self.formula, frame.position)
        self.pos += 1
        count = self._read_count()
        stack[-1].children.append(Group(tuple(frame.children), count))


def parse(formula_text, tables=None, match_ions=False):
    """
    Parse a chemical formula into a composition tree.

    Args:
        formula_text (str): Formula such as 'Fe(H2O)6' or 'Al2(SO4)3'.
        tables: Reference tables used for polyatomic ion keys. Only needed
            when match_ions is True; defaults to the packaged tables.
        match_ions (bool): Match polyatomic ion keys (longest first) before
            reading element symbols.

    Returns:
        Group: The root node; its ``source`` holds the stripped formula text.

    Raises:
        EmptyFormula, UnbalancedGroup, InvalidMultiplier, IllegalCharacter
    """
    if formula_text is None:
        raise EmptyFormula("Empty formula")
    formula = str(formula_text).strip()
    if not formula:
        raise EmptyFormula("Empty formula", formula, 0)
    return FormulaParser(formula, tables, match_ions).parse()
