import pytest
from lazy import FilterMapView, filter_map
from utils import to_int


class TestFilterMap:
    """Test the lazy filtering map"""

    def test_parses_all_numbers(self):
        """Test that every parseable entry comes through in order"""
        result = list(filter_map(["1", "2", "3"], to_int))
        assert result == [1, 2, 3], f"Unexpected result: {result}"

    def test_drops_entries_that_do_not_parse(self):
        """Test that None results are elided, not replaced"""
        result = list(filter_map(["1", "blah", "2", "3"], to_int))
        assert result == [1, 2, 3], f"Unexpected result: {result}"

    def test_empty_source(self):
        """Test that an empty base is immediately exhausted"""
        assert list(filter_map([], to_int)) == []

    def test_all_absent(self):
        """Test that an all-None transform yields nothing"""
        assert list(filter_map(["a", "b", "c"], to_int)) == []

    def test_matches_map_then_discard(self):
        """Test equivalence with mapping and discarding None"""
        source = list(range(-10, 30))

        def half_if_even(x):
            return x // 2 if x % 2 == 0 else None

        expected = [y for y in map(half_if_even, source) if y is not None]
        assert list(filter_map(source, half_if_even)) == expected

    def test_keeps_falsy_results(self):
        """Test that only None is treated as absent"""
        result = list(filter_map([0, 1, 2], lambda x: x - 1 if x else 0))
        assert result == [0, 0, 1], f"Unexpected result: {result}"

    def test_returns_view(self):
        view = filter_map([1], lambda x: x)
        assert isinstance(view, FilterMapView)
        assert view.base == [1]


class TestFilterMapLaziness:
    """Test that work is driven by demand"""

    def test_no_work_at_construction(self, counting):
        """Test that construction neither iterates the base nor calls the transform"""
        calls = 0

        def track(x):
            nonlocal calls
            calls += 1
            return x

        source = counting(range(10))
        filter_map(source, track)
        assert calls == 0, "Transform should not run during construction"
        assert source.passes == 0, "Base should not be iterated during construction"

    def test_pulls_only_until_first_match(self, counting):
        """Test that one advance pulls through skipped elements and stops at a match"""
        source = counting(["x", "y", "1", "z", "2"])
        it = iter(filter_map(source, to_int))

        assert next(it) == 1
        assert source.pulled == 3, f"Expected 3 pulls, got {source.pulled}"
        assert next(it) == 2
        assert source.pulled == 5, f"Expected 5 pulls, got {source.pulled}"

    def test_transform_called_once_per_element(self):
        """Test that the transform runs exactly once for each base element, in order"""
        seen = []

        def track(x):
            seen.append(x)
            return x if x % 3 == 0 else None

        result = list(filter_map(range(10), track))
        assert result == [0, 3, 6, 9]
        assert seen == list(range(10)), f"Unexpected calls: {seen}"

    def test_restartable_over_multi_pass_base(self):
        """Test that each iteration starts a fresh traversal"""
        view = filter_map(["1", "a", "2"], to_int)
        assert list(view) == list(view) == [1, 2]

    def test_independent_iterators(self):
        """Test that two iterators over one view do not share state"""
        view = filter_map(["1", "a", "2", "3"], to_int)
        first, second = iter(view), iter(view)
        assert next(first) == 1
        assert next(first) == 2
        assert next(second) == 1
        assert list(first) == [3]
        assert list(second) == [2, 3]

    def test_single_pass_base_is_consumed(self):
        """Test that a generator base only supports one traversal"""
        view = filter_map((s for s in ["1", "2"]), to_int)
        assert list(view) == [1, 2]
        assert list(view) == []

    def test_never_advances_spent_base(self, strict):
        """Test that the base is not advanced again once it is exhausted"""
        base = strict(["1", "a"])
        it = iter(filter_map(base, to_int))
        assert list(it) == [1]
        assert list(it) == []
        assert base.calls == 3, f"Expected 3 base calls, got {base.calls}"


class TestFilterMapValidation:
    """Test argument validation"""

    def test_transform_must_be_callable(self):
        with pytest.raises(TypeError):
            filter_map([1, 2], "not callable")

    def test_base_must_not_be_none(self):
        with pytest.raises(TypeError):
            filter_map(None, to_int)

    def test_transform_errors_propagate(self):
        """Test that a failing transform surfaces and ends the traversal"""
        def boom(x):
            if x == 2:
                raise KeyError(x)
            return x

        it = iter(filter_map([1, 2, 3], boom))
        assert next(it) == 1
        with pytest.raises(KeyError):
            next(it)
        with pytest.raises(StopIteration):
            next(it)

    def test_stop_iteration_from_transform_is_an_error(self):
        """Test that a transform raising StopIteration does not end the view quietly"""
        def stop_at_two(x):
            if x == 2:
                raise StopIteration
            return x

        it = iter(filter_map([1, 2, 3], stop_at_two))
        assert next(it) == 1
        with pytest.raises(RuntimeError):
            next(it)
        with pytest.raises(StopIteration):
            next(it)

    def test_stop_iteration_from_transform_fails_list(self):
        def stop_at_two(x):
            if x == 2:
                raise StopIteration
            return x

        with pytest.raises(RuntimeError):
            list(filter_map([1, 2, 3], stop_at_two))
