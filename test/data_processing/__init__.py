"""
This __init__.py file contains sample counters for this sub-module.
"""

import collections
from typing import Counter, List

# uploads by piece of three peers.
COUNTER_LIST: List[Counter[int]] = [
    collections.Counter({1: 3, 2: 1}),
    collections.Counter({2: 2, 5: 4}),
    collections.Counter(),
]
