import unittest
from decimal import Decimal

from chemresolve.measured import (
    MeasuredValue,
    PrecisionMode,
    count_sig_figs,
    measured_from_text,
    measured_sum,
)


class TestCountSigFigs(unittest.TestCase):
    def test_decimal_literals(self):
        self.assertEqual(count_sig_figs("16.00"), 4)
        self.assertEqual(count_sig_figs("1.008"), 4)
        self.assertEqual(count_sig_figs("0.0050"), 2)
        self.assertEqual(count_sig_figs("200."), 3)

    def test_integers_drop_trailing_zeros(self):
        self.assertEqual(count_sig_figs("200"), 1)
        self.assertEqual(count_sig_figs("98"), 2)
        self.assertEqual(count_sig_figs("1020"), 3)

    def test_scientific_notation(self):
        self.assertEqual(count_sig_figs("1.8e-5"), 2)
        self.assertEqual(count_sig_figs("6.02E23"), 3)

    def test_rejects_non_numbers(self):
        with self.assertRaises(ValueError):
            count_sig_figs("abc")


class TestMeasuredArithmetic(unittest.TestCase):
    def test_raw_values_are_exact(self):
        value = measured_from_text("1.8e-5", PrecisionMode.RAW)
        self.assertTrue(value.is_exact)
        self.assertEqual(value.value, Decimal("1.8e-5"))

    def test_scale_keeps_sig_figs(self):
        oxygen = measured_from_text("16.00")
        scaled = oxygen.scale(12)
        self.assertEqual(scaled.sig_figs, 4)
        self.assertEqual(scaled.rounded(), Decimal("192.0"))

    def test_sum_rounds_at_coarsest_digit(self):
        hydrogen = measured_from_text("1.008").scale(2)
        oxygen = measured_from_text("16.00")
        total = hydrogen + oxygen
        self.assertEqual(total.rounded(), Decimal("18.02"))
        self.assertEqual(total.sig_figs, 4)

    def test_exact_operand_does_not_limit_precision(self):
        exact = measured_from_text("1.23456", PrecisionMode.RAW)
        limited = measured_from_text("10.0")
        total = measured_sum([exact, limited])
        self.assertEqual(total.rounded(), Decimal("11.2"))
        self.assertEqual(total.sig_figs, 3)

    def test_all_exact_sum_is_exact(self):
        total = measured_sum([MeasuredValue(Decimal("1.5")), MeasuredValue(Decimal("2.25"))])
        self.assertIsNone(total.sig_figs)
        self.assertEqual(total.value, Decimal("3.75"))

    def test_empty_sum(self):
        self.assertIsNone(measured_sum([]))

    def test_carry_adds_a_sig_fig(self):
        total = measured_from_text("9.9") + measured_from_text("0.15")
        self.assertEqual(total.rounded(), Decimal("10.0"))
        self.assertEqual(total.sig_figs, 3)


if __name__ == '__main__':
    unittest.main()
