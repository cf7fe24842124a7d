"""
This module contains test functions for the summary of a run and of special peers.
"""

import collections
import math
from typing import List
import pytest
from context import SwarmContext
from node import Peer
from performance import Performance
from ..__init__ import (
    PERFORMANCE_SAMPLE,
    create_a_test_context,
    create_initial_source,
    create_test_peers,
)


def create_finished_swarm(pieces_num: int = 4) -> SwarmContext:
    """
    This function creates the initial source and three normal peers: two completed, with
    latencies 4 and 6, and one that did not complete. They uploaded 3, 5 and 1 pieces.
    """
    context = create_a_test_context("RANDOM", pieces_num=pieces_num)
    source = create_initial_source(context)
    source.uploads = 100
    first, second, third = create_test_peers(context, 3)
    first.completed_round = 4
    second.start_round = 2
    second.completed_round = 7
    for peer, uploads in zip((first, second, third), (3, 5, 1)):
        peer.uploads = uploads
    first.uploads_pieces = collections.Counter({1: 2, 2: 1})
    second.uploads_pieces = collections.Counter({1: 1, 3: 2, 4: 2})
    third.uploads_pieces = collections.Counter({4: 1})
    return context


def test_latency() -> None:
    # Arrange.
    peers = list(create_finished_swarm().peers.values())

    # Act.
    average = Performance.latency_average(peers)
    deviation = Performance.latency_stdev(peers, average)

    # Assert.
    assert average == 5.0
    # latencies 4, 6 and 0 around 5
    assert deviation == pytest.approx(3.0)


def test_uploads() -> None:
    # Arrange.
    peers = list(create_finished_swarm().peers.values())

    # Act and Assert.
    # ideal share of each normal peer is 3 * 4 / 4 = 3
    assert Performance.uploads_stdev(peers, 4) == pytest.approx(math.sqrt(8 / 3))
    assert Performance.uploads_max(peers) == 5
    assert Performance.uploads_distinct_average(peers) == pytest.approx(6 / 3)


def test_run_summary() -> None:
    # Arrange.
    context = create_finished_swarm()
    context.requests_specific_piece = 11
    context.requests_any_piece = 12
    context.bitmap_exchanges = 13

    # Act.
    summary = PERFORMANCE_SAMPLE.run_summary(
        rounds=9, peers=list(context.peers.values()), context=context
    )

    # Assert.
    assert summary.rounds == 9
    assert summary.latency_average == 5.0
    assert summary.uploads_max == 5
    assert (
        summary.requests_specific_piece,
        summary.requests_any_piece,
        summary.bitmap_exchanges,
    ) == (11, 12, 13)
    assert summary.uploads_by_position == collections.Counter({1: 3, 2: 1, 3: 2, 4: 3})


def test_run_summary__no_normal_peers() -> None:
    # Arrange.
    context = create_a_test_context("RANDOM")
    create_initial_source(context)

    # Act.
    summary = PERFORMANCE_SAMPLE.run_summary(
        rounds=1, peers=list(context.peers.values()), context=context
    )

    # Assert.
    assert summary.latency_average == 0.0
    assert summary.latency_stdev == 0.0
    assert summary.uploads_stdev == 0.0
    assert summary.uploads_max == 0
    assert not summary.uploads_by_position


def set_up_slots(peers: List[Peer], values: List[int]) -> None:
    for peer, value in zip(peers, values):
        peer.up_slots_max = value


def test_special_peers_summary() -> None:
    # Arrange.
    context = create_a_test_context("RANDOM")
    create_initial_source(context)
    peers = create_test_peers(context, 5)
    set_up_slots(peers, [10, 10, 5, 20, 5])
    for peer, latency, uploads in zip(peers, [3, 5, 8, 2, 6], [4, 2, 0, 9, 1]):
        peer.completed_round = latency
        peer.uploads = uploads

    # Act.
    result = Performance.special_peers_summary(
        list(context.peers.values()), "UP_SLOTS", peers[0]
    )

    # Assert.
    assert [summary.factor for summary in result] == [0.5, 1.0, 2.0]
    assert [summary.peers for summary in result] == [2, 2, 1]
    assert [summary.latency_sum for summary in result] == [14, 8, 2]
    assert [summary.latency_average for summary in result] == [7.0, 4.0, 2.0]
    assert [summary.uploads_sum for summary in result] == [1, 6, 9]
    assert [summary.uploads_average for summary in result] == [0.5, 3.0, 9.0]


def test_special_peers_summary__free_riders() -> None:
    """
    A reference value of 0 puts every peer in the group of factor 0.
    """
    # Arrange.
    context = create_a_test_context("RANDOM")
    create_initial_source(context)
    peers = create_test_peers(context, 2)
    set_up_slots(peers, [0, 2])

    # Act.
    result = Performance.special_peers_summary(
        list(context.peers.values()), "FREE_RIDERS", peers[0]
    )

    # Assert.
    assert len(result) == 1
    assert (result[0].factor, result[0].peers) == (0.0, 2)
