"""
test_formula_parser.py - Tests for formula syntax and tree construction
"""
import unittest

from chemresolve.errors import (
    EmptyFormula,
    FormulaParseError,
    IllegalCharacter,
    InvalidMultiplier,
    UnbalancedGroup,
)
from chemresolve.formula_parser import Group, Leaf, iter_leaves, parse


def flat_counts(tree):
    counts = {}
    for leaf, total in iter_leaves(tree):
        counts[leaf.symbol] = counts.get(leaf.symbol, 0) + total
    return counts


class TestParseStructure(unittest.TestCase):
    def test_simple_formula(self):
        tree = parse("H2O")
        self.assertEqual(tree, Group((Leaf('H', 2, False, 0), Leaf('O', 1, False, 2)), 1, source='H2O'))

    def test_source_is_stripped(self):
        self.assertEqual(parse("  NaCl \n").source, "NaCl")

    def test_two_and_three_letter_symbols(self):
        self.assertEqual(flat_counts(parse("CoCl2")), {'Co': 1, 'Cl': 2})
        self.assertEqual(flat_counts(parse("CO")), {'C': 1, 'O': 1})
        self.assertEqual(flat_counts(parse("Uut")), {'Uut': 1})

    def test_unknown_symbols_are_kept(self):
        self.assertEqual(flat_counts(parse("Xx2")), {'Xx': 2})

    def test_nested_groups_multiply(self):
        tree = parse("Fe(H2O)6")
        self.assertEqual(flat_counts(tree), {'Fe': 1, 'H': 12, 'O': 6})
        self.assertEqual(flat_counts(parse("K4[Fe(CN)6]")), {'K': 4, 'Fe': 1, 'C': 6, 'N': 6})
        self.assertEqual(flat_counts(parse("{[(OH)2]3}2")), {'O': 12, 'H': 12})

    def test_multiplier_distributes(self):
        self.assertEqual(flat_counts(parse("(H2O)2")), flat_counts(parse("H4O2")))

    def test_multi_digit_counts(self):
        self.assertEqual(flat_counts(parse("C12H22O11")), {'C': 12, 'H': 22, 'O': 11})

    def test_hydrate_parts(self):
        tree = parse("CuSO4·5H2O")
        self.assertEqual(len(tree.children), 2)
        self.assertEqual(tree.children[1].multiplier, 5)
        self.assertEqual(flat_counts(tree), {'Cu': 1, 'S': 1, 'O': 9, 'H': 10})
        self.assertEqual(flat_counts(parse("CaSO4*2H2O")), flat_counts(parse("CaSO4.2H2O")))

    def test_leading_coefficient(self):
        self.assertEqual(flat_counts(parse("2H2O")), {'H': 4, 'O': 2})

    def test_deep_nesting_is_iterative(self):
        depth = 5000
        tree = parse("(" * depth + "H" + ")" * depth)
        self.assertEqual(flat_counts(tree), {'H': 1})

    def test_leaf_positions(self):
        leaves = [leaf for leaf, _ in iter_leaves(parse("Al2(SO4)3"))]
        self.assertEqual([leaf.position for leaf in leaves], [0, 4, 5])

    def test_first_seen_order(self):
        leaves = [leaf.symbol for leaf, _ in iter_leaves(parse("OHNaO"))]
        self.assertEqual(leaves, ['O', 'H', 'Na', 'O'])


class TestParseIons(unittest.TestCase):
    def test_ion_keys_matched_first(self):
        leaves = [(leaf.symbol, leaf.is_ion) for leaf, _ in iter_leaves(parse("Al2(SO4)3", match_ions=True))]
        self.assertEqual(leaves, [('Al', False), ('SO4', True)])

    def test_longest_ion_key_wins(self):
        leaves = [leaf.symbol for leaf, _ in iter_leaves(parse("KClO4", match_ions=True))]
        self.assertEqual(leaves, ['K', 'ClO4'])

    def test_ion_match_never_splits_symbols(self):
        leaves = [leaf.symbol for leaf, _ in iter_leaves(parse("CNa", match_ions=True))]
        self.assertEqual(leaves, ['C', 'Na'])

    def test_ion_count(self):
        tree = parse("Ca(OH)2", match_ions=True)
        counts = flat_counts(tree)
        self.assertEqual(counts, {'Ca': 1, 'OH': 2})

    def test_elemental_mode_ignores_ion_keys(self):
        leaves = [leaf.symbol for leaf, _ in iter_leaves(parse("NH4"))]
        self.assertEqual(leaves, ['N', 'H'])


class TestParseErrors(unittest.TestCase):
    def test_empty(self):
        for text in ("", "   ", None):
            with self.assertRaises(EmptyFormula):
                parse(text)

    def test_empty_group(self):
        with self.assertRaises(EmptyFormula):
            parse("Na()")

    def test_empty_hydrate_part(self):
        with self.assertRaises(EmptyFormula):
            parse("H2O·")

    def test_unbalanced(self):
        for text in ("(", ")", "(H2O", "H2O)", "(H2O]", "[(H)]]"):
            with self.assertRaises(UnbalancedGroup, msg=text):
                parse(text)

    def test_invalid_multiplier(self):
        for text in ("H0", "(OH)0", "H-2", "0H2O", "Na2O·0H2O"):
            with self.assertRaises(InvalidMultiplier, msg=text):
                parse(text)

    def test_illegal_character(self):
        for text in ("H2 O", "h2o", "H2O$", "Abcd"):
            with self.assertRaises(IllegalCharacter, msg=text):
                parse(text)

    def test_error_reports_position(self):
        with self.assertRaises(IllegalCharacter) as ctx:
            parse("NaCl#")
        self.assertEqual(ctx.exception.position, 4)
        self.assertEqual(ctx.exception.formula, "NaCl#")

    def test_parse_errors_are_value_errors(self):
        with self.assertRaises(ValueError):
            parse("(")
        self.assertTrue(issubclass(UnbalancedGroup, FormulaParseError))


if __name__ == '__main__':
    unittest.main()
