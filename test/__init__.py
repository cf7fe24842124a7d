"""
This module contains test functions.

We also put some constants and helper functions in this __init__ file for unit tests to use.
"""

import random
from typing import List, Optional
from context import SwarmContext
from node import Peer
from engine import Engine, engine_options_for
from scenario import Scenario
from performance import Performance
from data_types import (
    Distribution,
    ScenarioParameters,
    PerformanceParameters,
    SpecialPeers,
    Strategy,
)


# The small swarm that every end-to-end test plays: one initial source with 4 upload slots and
# 9 leechers with 2 download and 2 upload slots each, and a file of 5 pieces.

SCENARIO_PARAMETERS_SAMPLE = ScenarioParameters(
    peers_num=10,
    pieces_num=5,
    down_slots=Distribution(mean=2, var=0),
    up_slots=Distribution(mean=2, var=0),
    source_up_slots=4,
    known_peers_max=5,
    down_pending_max=5,
    request_ttl=50,
    initial_known_peers_num=1,
    churn_seeder_leave_percents=0,
    rounds_per_peer_exchange=1,
)

SCENARIO_SAMPLE = Scenario(SCENARIO_PARAMETERS_SAMPLE)

# the same swarm where every seeder leaves right away.
SCENARIO_SAMPLE_CHURN = Scenario(
    SCENARIO_PARAMETERS_SAMPLE._replace(churn_seeder_leave_percents=100)
)

PERFORMANCE_SAMPLE = Performance(PerformanceParameters(behind_gaps=[20, 40]))

# a cap on rounds for end-to-end tests, so that a broken run cannot hang the tests.
MAX_ROUNDS = 500


def create_a_test_context(
    strategy: Strategy, pieces_num: int = 5, seed: int = 0
) -> SwarmContext:
    """
    This function creates a context with an engine for a P2P system and a seeded random source.
    :param strategy: the P2P system.
    :param pieces_num: number of pieces.
    :param seed: seed of the random source.
    :return: the context, with no peers.
    """
    return SwarmContext(
        engine=Engine(engine_options_for(strategy)),
        pieces_num=pieces_num,
        rng=random.Random(seed),
    )


def create_initial_source(context: SwarmContext, up_slots: int = 4) -> Peer:
    """
    This function creates the initial source (serial 1) and registers it in the context.
    """
    source = Peer(
        context=context,
        serial=1,
        down_slots_max=0,
        up_slots_max=up_slots,
        down_pending_max=0,
        known_peers_max=0,
        request_ttl=0,
    )
    source.set_as_initial_source()
    source.active = True
    context.register(source)
    return source


def create_a_test_peer(
    context: SwarmContext,
    serial: int,
    down_slots: int = 2,
    up_slots: int = 2,
    down_pending_max: int = 5,
    known_peers_max: int = 5,
    request_ttl: int = 50,
) -> Peer:
    """
    This function creates an active normal peer and registers it in the context.
    Parameters are arbitrarily set and they are not important.
    """
    peer = Peer(
        context=context,
        serial=serial,
        down_slots_max=down_slots,
        up_slots_max=up_slots,
        down_pending_max=down_pending_max,
        known_peers_max=known_peers_max,
        request_ttl=request_ttl,
    )
    peer.active = True
    context.register(peer)
    return peer


def create_test_peers(
    context: SwarmContext, nums: int, first_serial: Optional[int] = None, **kwargs
) -> List[Peer]:
    """
    This function creates a number of normal peers with consecutive serial numbers, following
    the peers already registered.
    :param context: the context to register the peers in.
    :param nums: number of peers.
    :param first_serial: serial number of the first peer. Default is the next free one.
    :return: a list of peer instances.
    """
    if first_serial is None:
        first_serial = len(context.peers) + 1
    return [
        create_a_test_peer(context, serial, **kwargs)
        for serial in range(first_serial, first_serial + nums)
    ]


def give_pieces(peer: Peer, pieces: List[int], download_round: int = 0) -> None:
    """
    This function puts pieces into a peer directly, as if they were downloaded in a round.
    """
    for piece in pieces:
        peer.downloaded_pieces[piece] = download_round


def set_weights(peer: Peer, weights: List[int]) -> None:
    """
    This function sets the private weights of a peer.
    :param weights: weights of pieces 1..P, without the placeholder at index 0.
    """
    peer.weight_by_piece = [0] + list(weights)
    peer.piece_by_weight = [0] * len(peer.weight_by_piece)
    for piece, weight in enumerate(peer.weight_by_piece):
        if piece > 0:
            peer.piece_by_weight[weight] = piece


def special_scenario(kind, count: int, peers_num: int = 100) -> Scenario:
    """
    This function creates the sample scenario with more peers and some special peers.
    """
    return Scenario(
        SCENARIO_PARAMETERS_SAMPLE._replace(peers_num=peers_num),
        SpecialPeers(kind=kind, count=count),
    )
