from __future__ import annotations

import unittest

from avm import array, view
from avm.errors import MissingArgumentError, OutOfRangeError, ReadOnlyViewError


class ViewIndexingTests(unittest.TestCase):
    def test_offset_slice_tracks_source_length(self) -> None:
        data = [0, 1, 2]
        v = view.slice(data, 1)
        self.assertEqual(list(v), [1, 2])
        data.append(3)
        self.assertEqual(len(v), 3)
        self.assertEqual(v[2], 3)

    def test_stride(self) -> None:
        data = [1, 2, 3, 4, 5, 6]
        self.assertEqual(list(view.stride(data, 0, 2)), [1, 3, 5])
        self.assertEqual(list(view.stride(data, 1, 2)), [2, 4, 6])
        self.assertEqual(list(view.stride(data, 5, -2)), [6, 4, 2])
        self.assertEqual(list(view.stride(data, 0, 3, 2)), [1, 4])

    def test_stride_zero_rejected(self) -> None:
        with self.assertRaises(ValueError):
            view.stride([1, 2], 0, 0)

    def test_stride_count_beyond_source(self) -> None:
        v = view.stride([1, 2, 3], 0, 2, 3)
        self.assertEqual(v[1], 3)
        with self.assertRaises(OutOfRangeError):
            v[2]

    def test_reverse(self) -> None:
        data = [1, 2, 3, 4, 5]
        self.assertEqual(list(view.reverse(data)), [5, 4, 3, 2, 1])
        self.assertEqual(list(view.reverse(data, 1, 3)), [4, 3, 2])

    def test_reverse_with_default_start(self) -> None:
        data = [1, 2, 3]
        self.assertEqual(list(view.reverse(data, None)), [3, 2, 1])
        self.assertEqual(list(view.reverse(data, None, 2)), [2, 1])
        self.assertEqual(list(view.slice(data, None)), [1, 2, 3])

    def test_interleave(self) -> None:
        data = [1, 2, 0, 5, 6, 0, 9, 10, 0]
        v = view.interleave(data, 0, 2, 3, 6)
        self.assertEqual(list(v), [1, 2, 5, 6, 9, 10])
        with self.assertRaises(MissingArgumentError):
            view.interleave(data, 0, 2, 3, None)

    def test_join(self) -> None:
        a, b = [1, 2], [3, 4, 5]
        v = view.join(a, b)
        self.assertEqual(len(v), 5)
        self.assertEqual(list(v), [1, 2, 3, 4, 5])
        with self.assertRaises(OutOfRangeError):
            v[5]

    def test_negative_index_is_out_of_range(self) -> None:
        with self.assertRaises(OutOfRangeError):
            view.slice([1, 2, 3])[-1]

    def test_views_compose(self) -> None:
        data = list(range(10))
        v = view.reverse(view.stride(data, 0, 2))
        self.assertEqual(list(v), [8, 6, 4, 2, 0])

    def test_missing_source(self) -> None:
        with self.assertRaises(MissingArgumentError):
            view.slice(None)


class ViewWriteTests(unittest.TestCase):
    def test_writes_go_through_to_source(self) -> None:
        data = [1, 2, 3, 4]
        v = view.reverse(data)
        v[0] = 40
        self.assertEqual(data, [1, 2, 3, 40])

    def test_join_of_distinct_sources_is_writable(self) -> None:
        a, b = [1, 2], [3, 4]
        v = view.join(a, b)
        self.assertTrue(v.writable)
        v[2] = 30
        self.assertEqual(b, [30, 4])

    def test_join_over_same_source_is_read_only(self) -> None:
        a = [1, 2]
        v = view.join(a, a)
        self.assertFalse(v.writable)
        self.assertEqual(list(v), [1, 2, 1, 2])
        with self.assertRaises(ReadOnlyViewError):
            v[0] = 5

    def test_join_over_nested_view_of_same_source_is_read_only(self) -> None:
        data = [0] * 8
        v = view.join(data, view.slice(data, 2))
        self.assertFalse(v.writable)
        with self.assertRaises(ReadOnlyViewError):
            v[6] = 99
        self.assertEqual(data, [0] * 8)

    def test_join_over_views_of_distinct_sources_is_writable(self) -> None:
        a, b = [1, 2, 3], [4, 5, 6]
        v = view.join(view.reverse(a), view.join(view.slice(b, 1), [7]))
        self.assertTrue(v.writable)
        v[4] = 50
        self.assertEqual(b, [4, 5, 50])

    def test_join_shared_source_deep_in_both_sides_is_read_only(self) -> None:
        data = [1, 2, 3, 4]
        left = view.stride(data, 0, 2)
        right = view.join([9], view.reverse(data))
        self.assertFalse(view.join(left, right).writable)

    def test_view_over_tuple_is_read_only(self) -> None:
        with self.assertRaises(ReadOnlyViewError):
            view.slice((1, 2))[0] = 3


class ViewTypeTests(unittest.TestCase):
    def test_view_base_classes_are_abstract(self) -> None:
        with self.assertRaises(TypeError):
            view._View([1, 2])
        with self.assertRaises(TypeError):
            view._MappedView([1, 2])

    def test_sources(self) -> None:
        a, b = [1], [2]
        self.assertEqual(view.slice(a).sources, (a,))
        joined = view.join(a, b)
        self.assertIs(joined.sources[0], a)
        self.assertIs(joined.sources[1], b)


class ViewEngineTests(unittest.TestCase):
    def test_views_as_operands(self) -> None:
        data = [1, 2, 3, 4, 5, 6]
        evens = view.stride(data, 1, 2)
        odds = view.stride(data, 0, 2)
        self.assertEqual(array.add(evens, odds), [3, 7, 11])

    def test_view_as_destination(self) -> None:
        data = [0] * 6
        array.fill_ex(7, 3, view.stride(data, 0, 2))
        self.assertEqual(data, [7, 0, 7, 0, 7, 0])

    def test_offset_view_maps_one_based_containers(self) -> None:
        one_based = [None, 10, 20, 30]
        self.assertEqual(array.unpack(view.slice(one_based, 1)), (10, 20, 30))

    def test_interleaved_columns(self) -> None:
        xyz = [1, 2, 3, 4, 5, 6]
        xs = view.stride(xyz, 0, 3)
        self.assertEqual(array.mul_constant(xs, 2), [2, 8])


if __name__ == "__main__":
    unittest.main()
