"""
This module contains unit tests of the SingleRun class.
"""

import random
from data_types import Strategy
from engine import Engine, engine_options_for
from scenario import Scenario
from single_run import SingleRun
from ..__init__ import SCENARIO_SAMPLE, PERFORMANCE_SAMPLE


def create_a_test_run(
    strategy: Strategy, scenario: Scenario = SCENARIO_SAMPLE, seed: int = 0
) -> SingleRun:
    """
    This function creates a single run of the sample performance, with a seeded random source.
    """
    return SingleRun(
        scenario=scenario,
        engine=Engine(engine_options_for(strategy)),
        performance=PERFORMANCE_SAMPLE,
        rng=random.Random(seed),
    )
