from __future__ import annotations

import math
import unittest

from avm import allocation, array
from avm.errors import LengthMismatchError, MissingArgumentError, OutOfRangeError


class ArithmeticTests(unittest.TestCase):
    def test_binary_whole_arrays(self) -> None:
        a, b = [1, 2, 3], [4, 5, 6]
        cases = [
            (array.add, [5, 7, 9]),
            (array.sub, [-3, -3, -3]),
            (array.mul, [4, 10, 18]),
            (array.div, [0.25, 0.4, 0.5]),
            (array.mod, [1, 2, 3]),
            (array.pow, [1, 32, 729]),
            (array.minimum, [1, 2, 3]),
            (array.maximum, [4, 5, 6]),
        ]
        for fn, expected in cases:
            with self.subTest(op=fn.__name__):
                self.assertEqual(fn(a, b), expected)

    def test_short_form_broadcasts_scalars(self) -> None:
        self.assertEqual(array.add([1, 2, 3], 10), [11, 12, 13])
        self.assertEqual(array.add([1, 2, 3], 10), array.add_constant([1, 2, 3], 10))
        self.assertEqual(array.sub_constant([5, 6], 1), [4, 5])
        self.assertEqual(array.maximum_constant([1, 5, 3], 2), [2, 5, 3])

    def test_length_mismatch(self) -> None:
        with self.assertRaises(LengthMismatchError):
            array.add([1, 2, 3], [1, 2])

    def test_constant_must_be_a_number(self) -> None:
        with self.assertRaises(MissingArgumentError):
            array.add_constant([1, 2], None)
        with self.assertRaises(TypeError):
            array.mul_constant([1, 2], "x")

    def test_ex_form_with_destination(self) -> None:
        dest = [0, 0, 0, 0, 0]
        out = array.add_ex([1, 2, 3], 0, 3, [2, 3, 4], 0, dest, 1)
        self.assertIs(out, dest)
        self.assertEqual(dest, [0, 3, 5, 7, 0])

    def test_ex_form_allocates_without_destination(self) -> None:
        self.assertEqual(array.mul_ex([1, 2, 3, 4], 1, 2, [10, 20], 0), [20, 60])
        self.assertEqual(array.mul_constant_ex([1, 2, 3, 4], 2, 2, 3), [9, 12])
        self.assertEqual(array.sub_ex([5, 6, 7], 1, 2, 1), [5, 6])

    def test_ex_form_validates_before_writing(self) -> None:
        dest = [0, 0, 0]
        with self.assertRaises(OutOfRangeError):
            array.add_ex([1, 2, 3], 0, 3, [1, 2], 0, dest, 0)
        with self.assertRaises(OutOfRangeError):
            array.add_ex([1, 2, 3], 0, 3, [1, 2, 3], 0, dest, 1)
        self.assertEqual(dest, [0, 0, 0])

    def test_in_place_on_coinciding_range(self) -> None:
        data = list(range(40))
        array.add_ex(data, 0, 40, data, 0, data, 0)
        self.assertEqual(data, [2 * i for i in range(40)])

    def test_division_by_zero_propagates(self) -> None:
        with self.assertRaises(ZeroDivisionError):
            array.div([1, 2], [1, 0])

    def test_empty_arrays(self) -> None:
        self.assertEqual(array.add([], []), [])
        self.assertEqual(array.add_constant([], 1), [])

    def test_results_use_the_allocation_hook(self) -> None:
        calls = []

        def tracking(kind, n):
            calls.append((kind.value, n))
            return [None] * n

        with allocation.using_allocator(tracking):
            array.add([1, 2, 3], [4, 5, 6])
            array.less_than(list(range(20)), 10)
        self.assertEqual(calls, [("number", 3), ("boolean", 20)])

    def test_destination_forms_do_not_allocate(self) -> None:
        def failing(kind, n):
            raise AssertionError("unexpected allocation")

        dest = [0] * 3
        with allocation.using_allocator(failing):
            array.mul_ex([1, 2, 3], 0, 3, 2, None, dest, 0)
        self.assertEqual(dest, [2, 4, 6])


class ComparisonTests(unittest.TestCase):
    def test_comparisons(self) -> None:
        a, b = [1, 2, 3], [3, 2, 1]
        cases = [
            (array.equal, [False, True, False]),
            (array.not_equal, [True, False, True]),
            (array.less_than, [True, False, False]),
            (array.less_than_or_equal, [True, True, False]),
            (array.greater_than, [False, False, True]),
            (array.greater_than_or_equal, [False, True, True]),
        ]
        for fn, expected in cases:
            with self.subTest(op=fn.__name__):
                self.assertEqual(fn(a, b), expected)

    def test_comparison_against_constant(self) -> None:
        self.assertEqual(array.greater_than_constant([1, 5, 3], 2), [False, True, True])
        dest = [None] * 4
        array.equal_constant_ex([1, 2, 1], 0, 3, 1, dest, 1)
        self.assertEqual(dest, [None, True, False, True])

    def test_almost_equal(self) -> None:
        self.assertEqual(array.almost_equal([0.1 + 0.2, 1.0], [0.3, 1.1]), [True, False])
        self.assertEqual(array.almost_equal_constant([1.0, 1.0 + 1e-12], 1.0), [True, True])

    def test_almost_equal_with_nan(self) -> None:
        nan = float("nan")
        self.assertEqual(array.almost_equal([nan], [nan]), [False])
        self.assertEqual(array.almost_equal_with_nan([nan, 1.0, nan], [nan, 1.0, 0.0]), [True, True, False])
        dest = [None]
        array.almost_equal_with_nan_ex([0.0, nan], 1, 1, [nan], 0, dest, 0)
        self.assertEqual(dest, [True])


class CompoundTests(unittest.TestCase):
    def test_mul_add(self) -> None:
        self.assertEqual(array.mul_add([1, 2], [3, 4], [5, 6]), [16, 26])
        self.assertEqual(array.mul_add([1, 2], [3, 4], 2), [7, 10])
        self.assertEqual(array.mul_add_constant([1, 2], [3, 4], 2), [7, 10])

    def test_mul_add_ex(self) -> None:
        dest = [0, 0, 0]
        array.mul_add_ex([0, 1, 2], 1, 2, [3, 4], 0, [1, 1], 0, dest, 1)
        self.assertEqual(dest, [0, 4, 6])
        self.assertEqual(array.mul_add_constant_ex([1, 1], 0, 2, [2, 3], 0, 10), [21, 31])

    def test_lerp(self) -> None:
        self.assertEqual(array.lerp([0.0, 10.0], [10.0, 20.0], 0.5), [5.0, 15.0])
        self.assertEqual(array.lerp([1, 2], [3, 4], 0), [1, 2])
        self.assertEqual(array.lerp_ex([0.0, 0.0, 4.0], 1, 2, [2.0, 8.0], 0, 0.25), [0.5, 5.0])


class PredicateTests(unittest.TestCase):
    def test_all_equal(self) -> None:
        self.assertTrue(array.all_equal([1, 2, 3], [1, 2, 3]))
        self.assertFalse(array.all_equal([1, 2, 3], [1, 2, 4]))
        self.assertFalse(array.all_equal([1, 2], [1, 2, 3]))
        self.assertTrue(array.all_equal([], []))
        self.assertTrue(array.all_equal_ex([0, 1, 2], 1, 2, [1, 2]))

    def test_all_equal_constant(self) -> None:
        self.assertTrue(array.all_equal_constant([4] * 30, 4))
        self.assertFalse(array.all_equal_constant([4, 4, 5], 4))
        self.assertTrue(array.all_equal_constant_ex([1, 4, 4], 1, 2, 4))

    def test_all_almost_equal(self) -> None:
        self.assertTrue(array.all_almost_equal([0.1 + 0.2], [0.3]))
        self.assertFalse(array.all_almost_equal([1.0], [1.1]))
        self.assertTrue(array.all_almost_equal([1.0], [1.1], 0.2))
        self.assertTrue(array.all_almost_equal_ex([9.0, 1.0], 1, 1, [1.0]))
        self.assertTrue(array.all_almost_equal_constant([1.0, 1.0 + 1e-10], 1.0))
        self.assertFalse(array.all_almost_equal_constant_ex([1.0, 2.0], 0, 2, 1.0))

    def test_all_almost_equal_with_nan(self) -> None:
        nan = math.nan
        self.assertTrue(array.all_almost_equal_with_nan([nan, 1.0], [nan, 1.0]))
        self.assertFalse(array.all_almost_equal([nan, 1.0], [nan, 1.0]))


if __name__ == "__main__":
    unittest.main()
