"""
This module defines code specific data types for Scenario, Engine, and Performance.
It also contains the definitions of self-defined data types.
"""

from typing import NamedTuple, List, Dict, Counter
from mypy_extensions import TypedDict
from typing_extensions import Literal


# The same principle as in the rest of the simulator applies here: if it is possible to use a
# NamedTuple, use it. If we need (a) that the data type be mutable, or (b) to iterate over the
# keys, or (c) to inherit sub-types from a base type, then we use a TypedDict.


# ==================
# data types for Scenario
# ==================

# parameters, for Scenario. Parameters are values to represent the basic settings/assumptions of
# the swarm.


class Distribution(NamedTuple):
    """
    Distribution is a tuple of floats, mean and variance. They are used to generate a random
    number of slots following Gaussian distribution G(mean, var).
    """

    mean: float
    var: float


class ScenarioParameters(NamedTuple):
    """
    Putting all value parameters together and use a NamedTuple to represent all values for
    Scenario. Slot numbers are in pieces per round (piece-time).
    """

    peers_num: int  # including the initial source
    pieces_num: int
    down_slots: Distribution  # download slots of a normal peer
    up_slots: Distribution  # upload slots of a normal peer
    source_up_slots: int  # upload slots of the initial source, fixed
    known_peers_max: int
    down_pending_max: int  # max number of sent requests waiting for an upload
    request_ttl: int  # rounds before a pending request is abandoned
    initial_known_peers_num: int  # known peers acquired on join
    churn_seeder_leave_percents: int  # chance a seeder leaves on a round
    rounds_per_peer_exchange: int  # a peer exchange happens once per this many rounds on average
    # For display only. They decide how many seconds a round represents.
    file_size_mb: int = 250
    slot_speed_kbps: int = 500


# Types of special peers. A special peer is a normal peer with one property changed, used when a
# specific property is under test.
# PENDING_AND_KNOWN: aggressiveness, by multiplying max known peers and max pending requests.
# UP_SLOTS / DOWN_SLOTS: multiplying the number of upload/download slots.
# FREE_RIDERS: peers that never upload.
# NEW_COMERS: some peers become active later than others.

SpecialType = Literal[  # pylint: disable=invalid-name
    "PENDING_AND_KNOWN", "UP_SLOTS", "DOWN_SLOTS", "FREE_RIDERS", "NEW_COMERS"
]


class SpecialPeers(NamedTuple):
    """
    Special peers setting. count is the number of peers to turn into special peers. A count of 0
    means no special peers.
    """

    kind: SpecialType
    count: int


# ==================
# data types for Engine
# ==================

# The six P2P systems that can be simulated. Each may have a different strategy and algorithms.
# RANDOM: random selection of peers and pieces.
# FAIRE9: FairE9 protocol, without cleanup of known peers that time out.
# FAIRE9PLUS: FairE9 protocol, known peers that time out are dropped.
# FAIRE9BUTTERFLY: FairE9 protocol with butterfly permutations.
# EMULE: eMule style credit system.
# BT: BitTorrent style tit-for-tat.

Strategy = Literal[  # pylint: disable=invalid-name
    "RANDOM", "FAIRE9", "FAIRE9PLUS", "FAIRE9BUTTERFLY", "EMULE", "BT"
]

# Options, for Engine. They are TypedDict data types representing possible ways to implement
# functions in the design space. For each function there is a base class where there must be
# only one key "method". If an implementation needs more parameters, a sub-type inherits the base
# one, its name is exactly the value of "method", and it adds the extra keys.


class WeightOption(TypedDict):
    """
    Option for a peer to set its private piece weights (a permutation over pieces).
    "None" means the peer has no weights at all.
    """

    method: Literal["None", "Shuffle", "Butterfly"]


class RequestOption(TypedDict):
    """
    Option for a peer to send download requests.
    """

    method: Literal["AnyPiece", "FairE9"]


class FairE9(RequestOption):
    """
    Sub-type of RequestOption where requests are sent for specific pieces, lightest first.
    """

    # if True, a known peer that lets a request time out is removed from the known peers.
    evict_on_timeout: bool


class RankingOption(TypedDict):
    """
    Option for an uploader to weigh and order the pending upload requests.
    """

    method: Literal["Shuffle", "Weight", "EMule", "BitTorrent"]


class PieceOption(TypedDict):
    """
    Option for an uploader to pick the piece to upload when the request does not name one.
    """

    method: Literal["Random", "Lightest"]


class CreditOption(TypedDict):
    """
    Option for credit accounting between a giver and a receiver.
    """

    method: Literal["None", "Ledger"]


class Ledger(CreditOption):
    """
    Sub-type of CreditOption where every transfer adds credit_unit to both sides' ledgers.
    """

    credit_unit: int


class EngineOptions(NamedTuple):
    """
    Putting all options together and use a NamedTuple to represent all options for Engine.
    """

    weight: WeightOption
    request: RequestOption
    ranking: RankingOption
    piece: PieceOption
    credit: CreditOption


# ==================
# data types for Performance
# ==================


class PerformanceParameters(NamedTuple):
    """
    Parameters for performance evaluation. A peer is "behind" if it holds fewer pieces than the
    swarm average minus the gap. The standard report uses gaps of 20 and 40 pieces.
    """

    behind_gaps: List[int]


class RoundStatistics(NamedTuple):
    """
    Statistics of a single round (piece-time), one line of the per-round report.
    """

    round: int
    seconds: int
    progress: float  # completion percentage
    peers: int  # active peers
    seeders: int
    sources: int  # active peers that have at least one piece
    requests: int
    uploads: int
    exchanges: int
    known_average: float
    up_pending_average: float
    pieces_min: int
    behind: List[int]  # number of peers behind the average, one entry per gap


class RunSummary(NamedTuple):
    """
    End-of-run summary.
    """

    rounds: int
    latency_average: float
    latency_stdev: float
    uploads_stdev: float
    uploads_max: int
    uploads_distinct_average: float
    requests_specific_piece: int
    requests_any_piece: int
    bitmap_exchanges: int
    uploads_by_position: Counter[int]


class FactorSummary(NamedTuple):
    """
    Summary of one group of special peers, all having the same factor.
    """

    factor: float
    peers: int
    latency_sum: int
    latency_average: float
    uploads_sum: int
    uploads_average: float


# ===================
# Others
# ===================

# mapping from a peer serial to a value, for credit ledgers and known peers.
SerialMapping = Dict[int, int]


class InvalidInputError(ValueError):
    """
    Self defined error class in use of data processing functions. Raise such an error when the
    input is empty so that the processing cannot be done.
    """
