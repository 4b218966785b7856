from __future__ import annotations

import random
import unittest

from avm import array, linalg


class ArrayLawTests(unittest.TestCase):
    def setUp(self) -> None:
        rng = random.Random(7)
        self.samples = [[rng.randint(-50, 50) for _ in range(n)] for n in (0, 1, 2, 5, 12, 16, 17, 40)]

    def test_copy_is_idempotent(self) -> None:
        for a in self.samples:
            with self.subTest(n=len(a)):
                self.assertEqual(array.copy(array.copy(a)), array.copy(a))

    def test_reshape_round_trip(self) -> None:
        shapes = {12: [(3, 4), (2, 2, 3), (12,)], 16: [(4, 4), (2, 8)], 40: [(5, 8), (2, 4, 5)]}
        for a in self.samples:
            for shape in shapes.get(len(a), []):
                with self.subTest(n=len(a), shape=shape):
                    self.assertEqual(array.reshape(array.reshape(a, shape), [len(a)]), a)

    def test_add_constant_matches_add_of_fill(self) -> None:
        for a in self.samples:
            for k in (0, 3, -2.5):
                with self.subTest(n=len(a), k=k):
                    self.assertEqual(array.add_constant(a, k), array.add(a, array.fill(k, len(a))))

    def test_join_length_law(self) -> None:
        for a in self.samples:
            for b in self.samples[:4]:
                joined = array.join(a, b)
                self.assertEqual(len(joined), len(a) + len(b))
                for i, value in enumerate(joined):
                    self.assertEqual(value, a[i] if i < len(a) else b[i - len(a)])

    def test_reverse_twice_restores(self) -> None:
        for a in self.samples:
            with self.subTest(n=len(a)):
                self.assertEqual(array.reverse(array.reverse(a)), a)


class ScenarioTests(unittest.TestCase):
    def test_add_of_opposite_ranges(self) -> None:
        a = array.arange(1, 10)
        b = array.arange(10, 1, -1)
        out = array.add(a, b)
        self.assertEqual(len(out), 10)
        self.assertTrue(array.all_equal_constant(out, 11))

    def test_join(self) -> None:
        self.assertEqual(array.join([1, 2, 3], [4, 5, 6]), [1, 2, 3, 4, 5, 6])

    def test_reshape_row_major(self) -> None:
        self.assertEqual(array.reshape([1, 2, 3, 4, 5, 6], [3, 2]), [[1, 2], [3, 4], [5, 6]])

    def test_normalize(self) -> None:
        v = (3, 4, 0)
        self.assertEqual(linalg.length(v), 5)
        self.assertTrue(linalg.equals(linalg.normalize(v), (0.6, 0.8, 0)))

    def test_matmul_identity(self) -> None:
        self.assertEqual(linalg.matmul_mat2(linalg.identity(2), (1, 2, 3, 4)), (1, 2, 3, 4))
        for n in range(2, 5):
            m = tuple(range(1, n * n + 1))
            with self.subTest(n=n):
                self.assertEqual(linalg.matmul(linalg.identity(n), m, n, n, n), m)
                self.assertEqual(linalg.matmul(m, linalg.identity(n), n, n, n), m)

    def test_reverse(self) -> None:
        self.assertEqual(array.reverse([1, 2, 3]), [3, 2, 1])
        self.assertEqual(array.reverse(array.reverse([1, 2, 3])), [1, 2, 3])


if __name__ == "__main__":
    unittest.main()
