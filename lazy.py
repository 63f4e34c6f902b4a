"""
Lazy sequence views.

Each view wraps a base iterable and defers all work until it is iterated.
Views hold no traversal state: every call to iter() builds a fresh adaptor
iterator that owns the base iterator, counters and running accumulator.
A view is restartable exactly when its base is (lists, ranges and other
views are; generators are not).

Adaptor iterators never advance a base iterator again once it has raised
StopIteration. What happens when the adaptor itself is advanced after
exhaustion is controlled by ``models.LazySettings.exhaustion_policy``.
"""

import logging
from typing import Any, Callable, Iterable, Iterator, Optional, Tuple

from models import ExhaustionPolicy, get_settings

logger = logging.getLogger(__name__)

_MISSING = object()


class IteratorExhaustedError(RuntimeError):
    """Raised when an exhausted adaptor iterator is advanced under ExhaustionPolicy.RAISE"""


def _require_callable(fn, name):
    if not callable(fn):
        raise TypeError(f"{name} must be callable, got {type(fn).__name__}")


def _require_positive(n, name):
    if isinstance(n, bool) or not isinstance(n, int):
        raise TypeError(f"{name} must be an int, got {type(n).__name__}")
    if n < 1:
        raise ValueError(f"{name} must be >= 1, got {n}")


def is_every_nth(n: int) -> Callable[[int], bool]:
    """Index predicate selecting the n-th, 2n-th, ... element (zero-based indices n-1, 2n-1, ...)"""
    _require_positive(n, "n")
    return lambda index: (index + 1) % n == 0


# --------- adaptor iterators ----------

class LazyIterator:
    """
    Base class for adaptor iterators.

    Subclasses implement ``_advance`` which returns the next element, or
    ``_MISSING`` once the base is used up. This class records exhaustion so
    ``_advance`` is never called again afterwards, and applies the exhaustion
    policy captured at creation time. A StopIteration escaping ``_advance``
    can only come from a callback and is re-raised as RuntimeError, the same
    way generators treat it.
    """

    def __init__(self):
        settings = get_settings()
        self._policy = settings.exhaustion_policy
        self._log_traversals = settings.log_traversals
        self._exhausted = False
        self._produced = 0

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def __iter__(self):
        return self

    def __next__(self):
        if self._exhausted:
            if self._policy is ExhaustionPolicy.RAISE:
                raise IteratorExhaustedError(
                    f"{type(self).__name__} advanced after it was exhausted"
                )
            raise StopIteration
        try:
            value = self._advance()
        except StopIteration as e:
            self._exhausted = True
            raise RuntimeError(f"callback raised StopIteration inside {type(self).__name__}") from e
        except Exception:
            # A failing callback leaves the traversal unusable
            self._exhausted = True
            raise
        if value is _MISSING:
            self._finish()
            raise StopIteration
        self._produced += 1
        return value

    def _advance(self):
        raise NotImplementedError

    def _finish(self):
        self._exhausted = True
        if self._log_traversals:
            logger.debug(f"{type(self).__name__} exhausted after {self._produced} elements")


class FilterMapIterator(LazyIterator):
    """Pulls from the base until the transform gives a non-None result"""

    def __init__(self, base: Iterable, transform: Callable[[Any], Optional[Any]]):
        super().__init__()
        self._base = iter(base)
        self._transform = transform

    def _advance(self):
        while True:
            element = next(self._base, _MISSING)
            if element is _MISSING:
                return _MISSING
            result = self._transform(element)
            if result is not None:
                return result


class FoldScanIterator(LazyIterator):
    """Yields the initial value, then each running accumulator"""

    def __init__(self, base: Iterable, initial: Any, combine: Callable[[Any, Any], Any]):
        super().__init__()
        self._base = iter(base)
        self._accumulator = initial
        self._combine = combine
        self._started = False

    def _advance(self):
        if not self._started:
            self._started = True
            return self._accumulator
        element = next(self._base, _MISSING)
        if element is _MISSING:
            return _MISSING
        self._accumulator = self._combine(self._accumulator, element)
        return self._accumulator


class MapIfIndexIterator(LazyIterator):
    """Maps elements whose zero-based index matches a predicate, passes the rest through"""

    def __init__(self, base: Iterable, transform: Callable[[Any], Any],
                 index_predicate: Callable[[int], bool]):
        super().__init__()
        self._base = iter(base)
        self._transform = transform
        self._index_predicate = index_predicate
        self._index = 0

    def _advance(self):
        element = next(self._base, _MISSING)
        if element is _MISSING:
            return _MISSING
        index = self._index
        self._index += 1
        if self._index_predicate(index):
            return self._transform(element)
        return element


class PaddedZipIterator(LazyIterator):
    """
    Pairs two iterators index-wise, padding the shorter side with ``fillvalue``.

    Each side is advanced at most once per pair and is left alone for good
    after its first StopIteration.
    """

    def __init__(self, first: Iterable, second: Iterable, fillvalue: Any = None):
        super().__init__()
        self._first = iter(first)
        self._second = iter(second)
        self._fillvalue = fillvalue
        self._first_done = False
        self._second_done = False

    def _advance(self):
        left = right = _MISSING
        if not self._first_done:
            left = next(self._first, _MISSING)
            self._first_done = left is _MISSING
        if not self._second_done:
            right = next(self._second, _MISSING)
            self._second_done = right is _MISSING
        if left is _MISSING and right is _MISSING:
            return _MISSING
        return (
            self._fillvalue if left is _MISSING else left,
            self._fillvalue if right is _MISSING else right,
        )


class DropFirstIterator(LazyIterator):
    """Skips the first element of the base, then passes everything through"""

    def __init__(self, base: Iterable):
        super().__init__()
        self._base = iter(base)
        self._dropped = False

    def _advance(self):
        if not self._dropped:
            self._dropped = True
            if next(self._base, _MISSING) is _MISSING:
                return _MISSING
        return next(self._base, _MISSING)


# --------- views ----------

class LazyView:
    """Immutable, lazily evaluated sequence over a base iterable"""

    def __init__(self, base: Iterable):
        if base is None:
            raise TypeError("base must be an iterable, got None")
        self._base = base
        logger.debug(f"Created {type(self).__name__} over {type(base).__name__}")

    @property
    def base(self):
        return self._base

    def __iter__(self) -> Iterator:
        return self._make_iterator()

    def _make_iterator(self) -> LazyIterator:
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}(base={self._base!r})"


class FilterMapView(LazyView):
    """
    Elements of the base passed through ``transform``, keeping only results
    that are not None. The transform is called once per base element, in
    order, and only as iteration demands it.
    """

    def __init__(self, base: Iterable, transform: Callable[[Any], Optional[Any]]):
        super().__init__(base)
        _require_callable(transform, "transform")
        self._transform = transform

    @property
    def transform(self):
        return self._transform

    def _make_iterator(self):
        return FilterMapIterator(self._base, self._transform)


class FoldScanView(LazyView):
    """
    Running fold over the base: ``initial`` first, then each intermediate
    accumulator. Materialises to ``1 + len(base)`` elements.

    e.g. ``list(FoldScanView([1, 2, 3], 0, operator.add)) == [0, 1, 3, 6]``
    """

    def __init__(self, base: Iterable, initial: Any, combine: Callable[[Any, Any], Any]):
        super().__init__(base)
        _require_callable(combine, "combine")
        self._initial = initial
        self._combine = combine

    @property
    def initial(self):
        return self._initial

    @property
    def combine(self):
        return self._combine

    def _make_iterator(self):
        return FoldScanIterator(self._base, self._initial, self._combine)

    def __repr__(self):
        return f"FoldScanView(base={self._base!r}, initial={self._initial!r})"


class MapIfIndexView(LazyView):
    """Same length and order as the base; elements at matching indices are transformed"""

    def __init__(self, base: Iterable, transform: Callable[[Any], Any],
                 index_predicate: Callable[[int], bool]):
        super().__init__(base)
        _require_callable(transform, "transform")
        _require_callable(index_predicate, "index_predicate")
        self._transform = transform
        self._index_predicate = index_predicate

    def _make_iterator(self):
        return MapIfIndexIterator(self._base, self._transform, self._index_predicate)


class PaddedZipView(LazyView):
    """Pairs of ``(first[i], second[i])`` until both sides run out, padding with ``fillvalue``"""

    def __init__(self, first: Iterable, second: Iterable, fillvalue: Any = None):
        super().__init__(first)
        if second is None:
            raise TypeError("second must be an iterable, got None")
        self._second = second
        self._fillvalue = fillvalue

    def _make_iterator(self):
        return PaddedZipIterator(self._base, self._second, self._fillvalue)

    def __repr__(self):
        return f"PaddedZipView(first={self._base!r}, second={self._second!r})"


class DropFirstView(LazyView):
    """
    Every element of the base except the first. Iterating this over a
    single-pass base consumes the base.
    """

    def _make_iterator(self):
        return DropFirstIterator(self._base)


# --------- free functions ----------

def filter_map(source: Iterable, transform: Callable[[Any], Optional[Any]]) -> FilterMapView:
    """Lazily map ``transform`` over ``source``, dropping None results"""
    return FilterMapView(source, transform)


def scan(source: Iterable, initial: Any, combine: Callable[[Any, Any], Any]) -> FoldScanView:
    """Lazily fold ``source`` from ``initial``, yielding every intermediate accumulator"""
    return FoldScanView(source, initial, combine)


def map_if_index(source: Iterable, transform: Callable[[Any], Any],
                 index_predicate: Callable[[int], bool]) -> MapIfIndexView:
    """Lazily transform only the elements whose zero-based index satisfies ``index_predicate``"""
    return MapIfIndexView(source, transform, index_predicate)


def map_every_nth(source: Iterable, n: int, transform: Callable[[Any], Any]) -> MapIfIndexView:
    """
    Lazily transform every n-th element, leaving the others untouched.

    Counting starts at one, so with ``n == 2`` the second, fourth, ...
    elements (zero-based indices 1, 3, ...) are transformed.
    """
    return MapIfIndexView(source, transform, is_every_nth(n))


def padded_zip(first: Iterable, second: Iterable, fillvalue: Any = None) -> PaddedZipView:
    """Lazily zip two iterables, padding the shorter with ``fillvalue`` instead of truncating"""
    return PaddedZipView(first, second, fillvalue)


def drop_first(source: Iterable) -> DropFirstView:
    """Lazily skip the first element of any iterable"""
    return DropFirstView(source)


# --------- chainable collection ----------

class LazyCollection:
    """
    A chainable, lazy collection. Transformations are stored and applied
    only when you iterate; each chained call returns a new collection.
    """
    def __init__(self, source, ops=None):
        if source is None:
            raise TypeError("source must be an iterable, got None")
        self._source = source
        self._ops = ops or []          # sequence of ("op_name", arg)

    # --------- chainable operators (lazy) ----------
    def map(self, fn):
        _require_callable(fn, "fn")
        return self._with_op(("map", fn))

    def filter(self, pred):
        _require_callable(pred, "pred")
        return self._with_op(("filter", pred))

    def filter_map(self, transform):
        """Map and drop None results in one step"""
        _require_callable(transform, "transform")
        return self._with_op(("filter_map", transform))

    def scan(self, initial, combine):
        """Running fold; the first element is ``initial``"""
        _require_callable(combine, "combine")
        return self._with_op(("scan", (initial, combine)))

    def map_if_index(self, transform, index_predicate):
        _require_callable(transform, "transform")
        _require_callable(index_predicate, "index_predicate")
        return self._with_op(("map_if_index", (transform, index_predicate)))

    def map_every_nth(self, n, transform):
        _require_callable(transform, "transform")
        return self._with_op(("map_if_index", (transform, is_every_nth(n))))

    def padded_zip(self, other, fillvalue=None):
        return self._with_op(("padded_zip", (other, fillvalue)))

    def drop_first(self):
        return self._with_op(("drop_first", None))

    def take(self, n):
        return self._with_op(("take", int(n)))

    # --------- forcing evaluation ----------
    def to_list(self):
        return list(self)

    def sum(self, start=0):
        """Return the sum of all elements"""
        total = start
        for item in self:
            total += item
        return total

    def find_index(self, pred):
        """Return the position of the first element that satisfies the predicate, or None"""
        for index, item in enumerate(self):
            if pred(item):
                return index
        return None

    def equals(self, other, equivalence=None):
        """Element-wise comparison with another iterable; differing lengths are unequal"""
        eq = equivalence or (lambda a, b: a == b)
        for left, right in PaddedZipIterator(self, other, _MISSING):
            if left is _MISSING or right is _MISSING or not eq(left, right):
                return False
        return True

    # --------- iterator protocol ----------
    def __iter__(self):
        it = iter(self._source)
        for op, arg in self._ops:
            if op == "map":
                fn = arg
                it = (fn(x) for x in it)
            elif op == "filter":
                pred = arg
                it = (x for x in it if pred(x))
            elif op == "filter_map":
                it = FilterMapIterator(it, arg)
            elif op == "scan":
                initial, combine = arg
                it = FoldScanIterator(it, initial, combine)
            elif op == "map_if_index":
                transform, index_predicate = arg
                it = MapIfIndexIterator(it, transform, index_predicate)
            elif op == "padded_zip":
                other, fillvalue = arg
                it = PaddedZipIterator(it, other, fillvalue)
            elif op == "drop_first":
                it = DropFirstIterator(it)
            elif op == "take":
                n = arg
                def _take(gen, n=n):
                    if n <= 0:
                        return
                    taken = 0
                    for x in gen:
                        yield x
                        taken += 1
                        if taken >= n:
                            return
                it = _take(it)
            else:
                raise ValueError(f"Unknown op: {op}")
        yield from it

    # --------- helpers ----------
    def _with_op(self, op_tuple: Tuple[str, Any]):
        return LazyCollection(self._source, self._ops + [op_tuple])

    def __repr__(self):
        ops = ", ".join(op for op, _ in self._ops)
        return f"LazyCollection(ops=[{ops}])"
