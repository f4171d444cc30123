import unittest
from decimal import Decimal

from chemresolve.diagnostics import DiagnosticKind, DiagnosticLog
from chemresolve.measured import measured_from_text
from chemresolve.properties import (
    AcidBaseTier,
    candidate_charges,
    classify_acid_base,
    compute_mass,
    tier_of,
)
from chemresolve.tables import AcidBaseKind, Dissociation, get_default_tables


class TestComputeMass(unittest.TestCase):
    def setUp(self):
        self.tables = get_default_tables()

    def test_mass_and_precision(self):
        mass = compute_mass({'H': 2, 'O': 1}, self.tables)
        self.assertEqual(mass.value, Decimal("18.02"))
        self.assertEqual(mass.precision_digits, 4)

    def test_least_precise_entry_limits_result(self):
        # Tc is tabulated as "98": two significant figures, last digit in the units place
        mass = compute_mass({'Tc': 1, 'O': 4}, self.tables)
        self.assertEqual(mass.value, Decimal("162"))
        self.assertEqual(mass.precision_digits, 3)

    def test_undefined_mass_gives_none(self):
        log = DiagnosticLog("FmCl3")
        self.assertIsNone(compute_mass({'Fm': 1, 'Cl': 3}, self.tables, log))
        self.assertEqual(log.of_kind(DiagnosticKind.UNDEFINED_QUANTITY)[0].subject, 'Fm')

    def test_unknown_symbol_gives_none(self):
        log = DiagnosticLog()
        self.assertIsNone(compute_mass({'Xx': 1, 'H': 1}, self.tables, log))
        self.assertEqual(len(log.of_kind(DiagnosticKind.UNRESOLVED_SYMBOL)), 1)

    def test_empty_counts(self):
        self.assertIsNone(compute_mass({}, self.tables))


class TestCandidateCharges(unittest.TestCase):
    def setUp(self):
        self.tables = get_default_tables()

    def test_all_combinations(self):
        self.assertEqual(candidate_charges({'Fe': 1, 'Cl': 3}, {}, self.tables), (-1, 0))

    def test_mixed_valence(self):
        # Fe3O4 is one Fe2+ and two Fe3+
        self.assertEqual(candidate_charges({'Fe': 3, 'O': 4}, {}, self.tables), (-2, -1, 0, 1))
        self.assertIn(0, candidate_charges({'Pb': 3, 'O': 4}, {}, self.tables))

    def test_hint_applies_to_every_atom(self):
        self.assertEqual(candidate_charges({'Fe': 3, 'O': 4}, {}, self.tables, hints={'Fe': 3}), (1,))

    def test_ions_contribute_tabulated_charge(self):
        self.assertEqual(candidate_charges({'Na': 2}, {'SO4': 1}, self.tables), (0,))

    def test_hint_overrides_table(self):
        self.assertEqual(candidate_charges({'Fe': 1}, {}, self.tables, hints={'Fe': 2}), (2,))

    def test_no_common_charge(self):
        log = DiagnosticLog("XeF2")
        self.assertIsNone(candidate_charges({'Xe': 1, 'F': 2}, {}, self.tables, diagnostics=log))
        self.assertTrue(log.of_kind(DiagnosticKind.UNDEFINED_QUANTITY))


class TestAcidBaseTier(unittest.TestCase):
    def setUp(self):
        self.tables = get_default_tables()

    def test_strong_and_weak_acids(self):
        self.assertEqual(classify_acid_base("HCl", self.tables), AcidBaseTier.STRONG)
        self.assertEqual(classify_acid_base("CH3COOH", self.tables), AcidBaseTier.WEAK)

    def test_legacy_sentinel_entry(self):
        self.assertEqual(classify_acid_base("HI", self.tables), AcidBaseTier.STRONG)
        self.assertEqual(classify_acid_base("CH4", self.tables), AcidBaseTier.NEGLIGIBLE)

    def test_unknown_species(self):
        self.assertEqual(classify_acid_base("NaCl", self.tables), AcidBaseTier.UNKNOWN)

    def test_tables_are_keyed_independently(self):
        self.assertEqual(classify_acid_base("NH3", self.tables, AcidBaseKind.KA), AcidBaseTier.NEGLIGIBLE)
        self.assertEqual(classify_acid_base("NH3", self.tables, AcidBaseKind.KB), AcidBaseTier.WEAK)
        self.assertEqual(classify_acid_base("HCl", self.tables, AcidBaseKind.KB), AcidBaseTier.UNKNOWN)

    def test_threshold_boundary(self):
        at_threshold = Dissociation.measured(measured_from_text("1e100"))
        below = Dissociation.measured(measured_from_text("1e99"))
        self.assertEqual(tier_of(at_threshold, 100), AcidBaseTier.STRONG)
        self.assertEqual(tier_of(below, 100), AcidBaseTier.WEAK)
        tiny = Dissociation.measured(measured_from_text("1e-100"))
        self.assertEqual(tier_of(tiny, 100), AcidBaseTier.NEGLIGIBLE)


if __name__ == '__main__':
    unittest.main()
