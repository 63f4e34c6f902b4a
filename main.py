import logging
import operator
from itertools import islice
from time import perf_counter, sleep

from lazy import LazyCollection, filter_map, padded_zip, scan
from models import get_settings
from utils import is_luhn_valid, luhn_report, to_int

logger = logging.getLogger(__name__)


def expensive_parse(s):
    # Simulate a costly step so laziness is visible
    print(f"  parsing {s!r} ...")
    sleep(0.05)
    return to_int(s)


def main():
    print("\n--- Demo: filter_map (no work until iterated) ---")
    words = ["1", "blah", "2", "3", "x", "4", "5"]
    parsed = filter_map(words, expensive_parse)
    print("Constructed view. Nothing parsed yet.")
    t0 = perf_counter()
    first_two = list(islice(parsed, 2))
    t1 = perf_counter()
    print(f"First two: {first_two} (parsed only what was needed). Time: {t1 - t0:.2f}s\n")

    print("--- Demo: scan (running totals) ---")
    print(f"scan([1, 2, 3], 0, +) -> {list(scan([1, 2, 3], 0, operator.add))}")
    print(f"scan([], 0, +)        -> {list(scan([], 0, operator.add))}\n")

    print("--- Demo: padded_zip ---")
    print(f"padded_zip([1, 2, 3], ['a', 'b']) -> {list(padded_zip([1, 2, 3], ['a', 'b']))}\n")

    print("--- Demo: chained pipeline ---")
    totals = (
        LazyCollection(["10", "n/a", "20", "30", "oops", "40"])
        .filter_map(to_int)
        .scan(0, operator.add)
        .drop_first()
        .to_list()
    )
    print(f"Running totals of the numeric entries: {totals}\n")

    print("--- Demo: Luhn checksum ---")
    for number in ("4012 8888 8888 1881", "4012 8888 8888 1882"):
        report = luhn_report(number)
        print(f"  {number}: total={report.total} valid={is_luhn_valid(number)}")
    logger.debug("Demo finished")


if __name__ == "__main__":
    logging.basicConfig(level=get_settings().log_level)
    main()
