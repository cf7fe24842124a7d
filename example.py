"""
This module contains one test case by generating a point in engine, scenario, and performance.
"""

from typing import List
from engine import Engine, engine_options_for
from scenario import Scenario
from performance import Performance
from data_types import (
    Distribution,
    ScenarioParameters,
    SpecialPeers,
    EngineOptions,
    PerformanceParameters,
)


# ======
# The following is one example of a Scenario instance.
# parameters

# bandwidth of normal peers, in pieces per round.
DOWN_SLOTS = Distribution(mean=10, var=4)
UP_SLOTS = Distribution(mean=10, var=4)

S_PARAMETERS = ScenarioParameters(
    peers_num=10000,  # including the initial source
    pieces_num=200,
    down_slots=DOWN_SLOTS,
    up_slots=UP_SLOTS,
    source_up_slots=30,
    known_peers_max=20,
    down_pending_max=100,
    request_ttl=200,
    initial_known_peers_num=5,
    churn_seeder_leave_percents=0,
    rounds_per_peer_exchange=2,
    file_size_mb=250,
    slot_speed_kbps=500,
)

# Special peers. A count of 0 means that all peers are normal.
SPECIAL_PEERS = SpecialPeers(kind="FREE_RIDERS", count=0)

MY_SCENARIO = Scenario(S_PARAMETERS, SPECIAL_PEERS)

# ======
# The following is an example of Engine instance.
# Each P2P system maps to a choice of options. Options can also be put together by hand, e.g.,
# EngineOptions(weight=WeightOption(method="Butterfly"), ...).

E_OPTIONS: EngineOptions = engine_options_for("FAIRE9BUTTERFLY")

MY_ENGINE = Engine(E_OPTIONS)

# ======
# The following is an example of Performance instance.

PERFORMANCE_PARAMETERS = PerformanceParameters(behind_gaps=[20, 40])

MY_PERFORMANCE = Performance(PERFORMANCE_PARAMETERS)

SCENARIOS: List[Scenario] = [MY_SCENARIO]
ENGINES: List[Engine] = [MY_ENGINE]
PERFORMANCES: List[Performance] = [MY_PERFORMANCE]

# Seed of the random source. None gives a different run each time.
SEED = None
