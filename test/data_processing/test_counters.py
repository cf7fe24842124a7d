"""
This module contains unit tests of the counter functions in data_processing.
"""

import collections
from typing import Counter, Dict, List, Tuple
import pytest
from data_processing import merge_counters, average_by_key, format_counter
from .__init__ import COUNTER_LIST


def test_merge_counters__normal() -> None:
    # Act.
    result = merge_counters(COUNTER_LIST)
    # Assert.
    assert result == collections.Counter({1: 3, 2: 3, 5: 4})
    # inputs are not changed
    assert COUNTER_LIST[0] == collections.Counter({1: 3, 2: 1})


def test_merge_counters__empty() -> None:
    assert merge_counters([]) == collections.Counter()


def test_merge_counters__generator() -> None:
    """
    Any iterable of counters is fine, e.g., the uploads of a generator of peers.
    """
    result = merge_counters(counter for counter in COUNTER_LIST[:2])
    assert sum(result.values()) == 10


CASES_AVERAGE_BY_KEY: List[Tuple[Counter[float], Counter[float], Dict[float, float]]] = [
    # tuple: (sums, occurrences, output)
    (
        collections.Counter({0.2: 10, 1.0: 30}),
        collections.Counter({0.2: 5, 1.0: 20}),
        {0.2: 2.0, 1.0: 1.5},
    ),
    # a key with no occurrence is left out
    (collections.Counter({0.2: 10}), collections.Counter(), {}),
    # a key that only occurred
    (collections.Counter(), collections.Counter({3.0: 4}), {}),
]


@pytest.mark.parametrize("sums, occurrences, expected_output", CASES_AVERAGE_BY_KEY)
def test_average_by_key(
    sums: Counter[float], occurrences: Counter[float], expected_output: Dict[float, float]
) -> None:
    assert average_by_key(sums, occurrences) == pytest.approx(expected_output)


def test_format_counter__sorted() -> None:
    # Arrange.
    counter = merge_counters(COUNTER_LIST)
    # Act.
    text = format_counter(counter)
    # Assert.
    assert text.split("\n") == ["1\t3", "2\t3", "5\t4"]


def test_format_counter__float_keys() -> None:
    """
    Float keys are sorted numerically, not as text.
    """
    text = format_counter(collections.Counter({2.0: 9, 0.5: 1, 1.0: 4}))
    assert text.split("\n") == ["0.5\t1", "1.0\t4", "2.0\t9"]


def test_format_counter__empty() -> None:
    assert format_counter(collections.Counter()) == ""
