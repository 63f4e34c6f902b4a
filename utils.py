"""
Collection helpers built around the lazy views.

Eager utilities: digit parsing, small integer functions and combinators,
in-place removal, index search, padded equality, dict merging, read-only
tuple and subrange views, a Luhn checksum pipeline, and helpers for
measuring time and memory of an operation.
"""

import gc
import logging
import operator
import time
import tracemalloc
from collections.abc import MutableSequence, Sequence
from functools import reduce
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from lazy import filter_map, map_every_nth, padded_zip
from models import ChecksumResult, PerformanceReport

logger = logging.getLogger(__name__)

DIGITS = "0123456789"

_MISSING = object()


# ---------- Parsing ----------

def to_int(s: Any) -> Optional[int]:
    """Parse a decimal integer with an optional sign, or return None"""
    if not isinstance(s, str):
        return None
    text = s.strip()
    body = text[1:] if text[:1] in ("+", "-") else text
    if not body or any(c not in DIGITS for c in body):
        return None
    return int(text)


def digit_value(c: Any) -> Optional[int]:
    """Value of a single ASCII digit character, or None for anything else"""
    if not isinstance(c, str) or len(c) != 1:
        return None
    index = DIGITS.find(c)
    return index if index >= 0 else None


def to_string(c: Any) -> str:
    return str(c)


# ---------- Small functions and combinators ----------

def is_multiple_of(n: int) -> Callable[[int], bool]:
    """Predicate that is true for multiples of n"""
    if n == 0:
        raise ValueError("n must be non-zero")
    return lambda i: i % n == 0


def inc(i: int) -> int:
    return i + 1


def double(i: int) -> int:
    return i * 2


def compose(*fns: Callable) -> Callable:
    """
    Right-to-left composition: ``compose(f, g)(x) == f(g(x))``.
    With no functions the result is the identity.
    """
    for fn in fns:
        if not callable(fn):
            raise TypeError(f"compose() arguments must be callable, got {type(fn).__name__}")
    if not fns:
        return lambda x: x
    return reduce(lambda f, g: lambda x: f(g(x)), fns)


def free_member_func(member) -> Callable[[Any], Any]:
    """
    Turn a zero-argument method into a free function of its receiver.

    Accepts an unbound method (``str.upper``) or a method name (``"upper"``).
    """
    if isinstance(member, str):
        return operator.methodcaller(member)
    if not callable(member):
        raise TypeError(f"member must be callable or a method name, got {type(member).__name__}")
    return lambda obj: member(obj)


# ---------- Searching and comparing ----------

def find_index(collection: Iterable, predicate: Callable[[Any], bool]) -> Optional[int]:
    """Position of the first element satisfying predicate, or None"""
    for index, item in enumerate(collection):
        if predicate(item):
            return index
    return None


def sequences_equal(a: Iterable, b: Iterable,
                    equivalence: Callable[[Any, Any], bool] = operator.eq) -> bool:
    """Element-wise equality; sequences of different length are never equal"""
    for left, right in padded_zip(a, b, _MISSING):
        if left is _MISSING or right is _MISSING:
            return False
        if not equivalence(left, right):
            return False
    return True


# ---------- In-place removal ----------

def remove_if(seq: MutableSequence, predicate: Callable[[Any], bool]) -> None:
    """
    Remove every element matching predicate, in place, keeping survivors in order.

    Keepers are copied left over removed elements in one forward pass and the
    tail is truncated once, so the predicate runs once per element and no
    extra storage is used.
    """
    write = find_index(seq, predicate)
    if write is None:
        return
    original_length = len(seq)
    for read in range(write + 1, original_length):
        item = seq[read]
        if not predicate(item):
            seq[write] = item
            write += 1
    del seq[write:]
    logger.debug(f"remove_if dropped {original_length - write} of {original_length} elements")


def remove_value(seq: MutableSequence, value: Any) -> None:
    """Remove every element equal to value, in place"""
    remove_if(seq, lambda item: item == value)


# ---------- Dictionaries ----------

def merge_pairs(mapping: Dict, pairs: Iterable[Tuple[Any, Any]]) -> None:
    """Update mapping from (key, value) pairs; later keys win"""
    for key, value in pairs:
        mapping[key] = value


def dict_from_pairs(pairs: Iterable[Tuple[Any, Any]]) -> Dict:
    result = {}
    merge_pairs(result, pairs)
    return result


# ---------- Read-only views ----------

class TupleView(Sequence):
    """
    Read-only collection over the fields of a tuple. Any other value is
    treated as a collection of one element.
    """

    def __init__(self, value):
        self._items = value if isinstance(value, tuple) else (value,)

    def __len__(self):
        return len(self._items)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return TupleView(self._items[index])
        return self._items[index]

    def __eq__(self, other):
        if not isinstance(other, TupleView):
            return NotImplemented
        return sequences_equal(self, other)

    def __hash__(self):
        return hash(self._items)

    def __repr__(self):
        return f"TupleView{self._items!r}"


class SubrangeView(Sequence):
    """Read-only window ``base[start:stop]`` that indexes into base without copying"""

    def __init__(self, base: Sequence, start: int, stop: int):
        if not 0 <= start <= stop <= len(base):
            raise ValueError(f"Invalid subrange [{start}:{stop}] for length {len(base)}")
        self._base = base
        self._start = start
        self._stop = stop

    def __len__(self):
        return self._stop - self._start

    def __getitem__(self, index):
        if isinstance(index, slice):
            start, stop, step = index.indices(len(self))
            if step != 1:
                return [self[i] for i in range(start, stop, step)]
            return SubrangeView(self._base, self._start + start, self._start + max(start, stop))
        if index < 0:
            index += len(self)
        if not 0 <= index < len(self):
            raise IndexError("SubrangeView index out of range")
        return self._base[self._start + index]

    def __repr__(self):
        return f"SubrangeView({list(self)!r})"


# ---------- Luhn checksum ----------

def fold_digit(i: int) -> int:
    """Sum the digits of a doubled digit (10..18 -> 1..9)"""
    return i - 9 if i > 9 else i


def luhn_digits(text: str):
    """Lazily extract the digit values of text, skipping everything else"""
    return filter_map(text, digit_value)


def luhn_total(digits: Iterable[int]) -> int:
    """Luhn sum: from the right, double every second digit and fold it back to one digit"""
    from_right = list(digits)[::-1]
    return sum(map_every_nth(from_right, 2, compose(fold_digit, double)))


def luhn_report(text: str) -> ChecksumResult:
    digits = list(luhn_digits(text))
    total = luhn_total(digits)
    valid = bool(digits) and is_multiple_of(10)(total)
    return ChecksumResult(text=text, digits=digits, total=total, valid=valid)


def is_luhn_valid(text: str) -> bool:
    """True when text holds at least one digit and passes the Luhn check"""
    return luhn_report(text).valid


# ---------- Performance measurement ----------

def measure_performance(operation_name: str, func, *args, **kwargs) -> PerformanceReport:
    """
    Run func under tracemalloc and report its wall time and peak memory.

    Exceptions from func are logged and re-raised.
    """
    tracemalloc.start()
    gc.collect()
    start_time = time.perf_counter()

    try:
        result = func(*args, **kwargs)
    except Exception as e:
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        logger.error(f"Error in {operation_name} after {execution_time_ms:.2f}ms: {e}")
        raise
    else:
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        _, peak = tracemalloc.get_traced_memory()
        logger.debug(f"Completed {operation_name} in {execution_time_ms:.2f}ms")
        return PerformanceReport(
            operation=operation_name,
            execution_time_ms=execution_time_ms,
            memory_usage_mb=peak / 1024 / 1024,
            success=True,
            result_size=len(result) if hasattr(result, "__len__") else None,
        )
    finally:
        tracemalloc.stop()
