"""
This module contains data processing tools (e.g., sum, average, frequency...) to work on
performance evaluation results. Frequencies are kept in collections.Counter instances.
"""

import collections
from typing import Counter, Dict, Hashable, Iterable, List, TypeVar
import numpy
from data_types import InvalidInputError

KeyType = TypeVar("KeyType", bound=Hashable)  # pylint: disable=invalid-name


def merge_counters(counters: Iterable[Counter[KeyType]]) -> Counter[KeyType]:
    """
    This function adds up counters, key by key.

    >>> merge_counters([collections.Counter({1: 2, 3: 1}), collections.Counter({1: 1, 2: 5})])
    Counter({2: 5, 1: 3, 3: 1})

    :param counters: any number of counters.
    :return: a new counter holding the sums.
    """
    result: Counter[KeyType] = collections.Counter()
    for counter in counters:
        result.update(counter)
    return result


def average_by_key(
    sums: Counter[KeyType], occurrences: Counter[KeyType]
) -> Dict[KeyType, float]:
    """
    This function divides the sum of each key by its number of occurrences. Keys that never
    occurred are left out.

    >>> average_by_key(collections.Counter({0.5: 30, 2: 9}), collections.Counter({0.5: 3, 2: 0}))
    {0.5: 10.0}
    """
    return {
        key: value / occurrences[key]
        for key, value in sums.items()
        if occurrences[key] > 0
    }


def deviation_around(values: List[float], center: float, denominator: int) -> float:
    """
    This function returns the square root of the sum of squared distances from a center, divided
    by a denominator. With the mean as the center and n - 1 as the denominator, it is the sample
    standard deviation. The center and the denominator are given since the simulator measures the
    deviation around an ideal value rather than around the mean.

    >>> deviation_around([1.0, 3.0], 2.0, 1)
    1.4142135623730951

    :raise InvalidInputError: if the denominator is not positive.
    """
    if denominator <= 0:
        raise InvalidInputError("Denominator must be positive.")
    array = numpy.array(values, dtype=float)
    return float(numpy.sqrt(numpy.sum((array - center) ** 2) / denominator))


def format_counter(counter: Counter[KeyType]) -> str:
    r"""
    This function formats a counter as lines of tab-separated key and value, sorted by key.

    >>> format_counter(collections.Counter({2: 4, 1: 7}))
    '1\t7\n2\t4'
    """
    return "\n".join(f"{key}\t{counter[key]}" for key in sorted(counter))
