"""
This module contains the class Performance only.
"""

import collections
from typing import TYPE_CHECKING, Counter, List
import data_processing
from data_types import (
    PerformanceParameters,
    RoundStatistics,
    RunSummary,
    FactorSummary,
    SpecialType,
)

if TYPE_CHECKING:
    from context import SwarmContext
    from node import Peer


class Performance:
    """
    This class contains parameters, measures, and methods to carry out performance evaluation.
    It reports statistics of every round and the summary of a run.
    """

    def __init__(self, parameters: PerformanceParameters) -> None:

        # unpacking and setting parameters

        # A peer is behind if it has fewer pieces than the average minus a gap. One count of
        # peers behind is reported per gap.
        self.behind_gaps: List[int] = parameters.behind_gaps

    # In what follows, averages are taken over all peers that were ever created, including those
    # that left and those that are not active yet. This is how the numbers have always been
    # reported, so they are comparable between runs.

    @staticmethod
    def downloaded_pieces_average(peers: List["Peer"]) -> float:
        """
        This method returns the average number of pieces per peer. The pieces of the initial source
        are not counted, but the initial source is still counted as a peer.
        """
        if not peers:
            return 0.0
        total = sum(len(peer.downloaded_pieces) for peer in peers)
        total -= sum(
            len(peer.downloaded_pieces) for peer in peers if peer.is_initial_source
        )
        return total / len(peers)

    @staticmethod
    def known_peers_average(peers: List["Peer"]) -> float:
        if not peers:
            return 0.0
        return sum(len(peer.known_peers) for peer in peers) / len(peers)

    @staticmethod
    def up_pending_average(peers: List["Peer"]) -> float:
        if not peers:
            return 0.0
        return sum(len(peer.up_pending) for peer in peers) / len(peers)

    @staticmethod
    def pieces_min(peers: List["Peer"], pieces_num: int) -> int:
        """Minimum number of pieces a peer has, no more than the number of pieces."""
        return min([pieces_num] + [len(peer.downloaded_pieces) for peer in peers])

    @staticmethod
    def peers_behind(peers: List["Peer"], min_pieces: int) -> int:
        """Number of peers that have fewer than min_pieces pieces."""
        return sum(1 for peer in peers if len(peer.downloaded_pieces) < min_pieces)

    @staticmethod
    def sources_count(peers: List["Peer"]) -> int:
        """Number of active peers that already have something to upload."""
        return sum(1 for peer in peers if peer.active and peer.is_source)

    def round_statistics(
        self,
        current_round: int,
        seconds: int,
        peers: List["Peer"],
        active_num: int,
        seeders: int,
        requests: int,
        uploads: int,
        exchanges: int,
        pieces_num: int,
    ) -> RoundStatistics:
        """
        This method collects the statistics of a round.
        :param current_round: current round.
        :param seconds: elapsed time in seconds, for display.
        :param peers: all peers.
        :param active_num: number of active peers.
        :param seeders: number of active seeders after churn.
        :param requests: number of requests sent in this round.
        :param uploads: number of uploads in this round.
        :param exchanges: number of relationships created by peer exchange in this round.
        :param pieces_num: number of pieces.
        :return: the statistics.
        """
        average = self.downloaded_pieces_average(peers)
        return RoundStatistics(
            round=current_round,
            seconds=seconds,
            progress=average * 100 / pieces_num if pieces_num else 0.0,
            peers=active_num,
            seeders=seeders,
            sources=self.sources_count(peers),
            requests=requests,
            uploads=uploads,
            exchanges=exchanges,
            known_average=self.known_peers_average(peers),
            up_pending_average=self.up_pending_average(peers),
            pieces_min=self.pieces_min(peers, pieces_num),
            behind=[self.peers_behind(peers, int(average - gap)) for gap in self.behind_gaps],
        )

    @staticmethod
    def latency_average(peers: List["Peer"]) -> float:
        """Average latency over the peers that completed (the initial source excluded)."""
        latencies = [peer.latency for peer in peers if peer.latency > 0]
        if not latencies:
            return 0.0
        return sum(latencies) / len(latencies)

    @staticmethod
    def latency_stdev(peers: List["Peer"], average: float) -> float:
        """
        Deviation of the latency around its average, over all normal peers. Peers that did not
        complete count with latency 0.
        """
        normal_peers = [peer for peer in peers if not peer.is_initial_source]
        if not normal_peers:
            return 0.0
        return data_processing.deviation_around(
            [peer.latency for peer in normal_peers], average, len(normal_peers)
        )

    @staticmethod
    def uploads_stdev(peers: List["Peer"], pieces_num: int) -> float:
        """
        Deviation of the uploads of normal peers around the ideal share, where every normal peer
        uploads as many pieces as it downloads.
        """
        normal_peers = [peer for peer in peers if not peer.is_initial_source]
        if not normal_peers:
            return 0.0
        ideal = len(normal_peers) * pieces_num / len(peers)
        return data_processing.deviation_around(
            [peer.uploads for peer in normal_peers], ideal, len(normal_peers)
        )

    @staticmethod
    def uploads_max(peers: List["Peer"]) -> int:
        return max(
            [0] + [peer.uploads for peer in peers if not peer.is_initial_source]
        )

    @staticmethod
    def uploads_distinct_average(peers: List["Peer"]) -> float:
        """Average number of distinct pieces (or weights) uploaded by a normal peer."""
        normal_peers = [peer for peer in peers if not peer.is_initial_source]
        if not normal_peers:
            return 0.0
        return sum(peer.uploads_distinct_pieces for peer in normal_peers) / len(
            normal_peers
        )

    def run_summary(
        self, rounds: int, peers: List["Peer"], context: "SwarmContext"
    ) -> RunSummary:
        """
        This method collects the summary of a run.
        :param rounds: number of rounds played.
        :param peers: all peers.
        :param context: the context of the run, holding the global counters.
        :return: the summary.
        """
        latency = self.latency_average(peers)
        return RunSummary(
            rounds=rounds,
            latency_average=latency,
            latency_stdev=self.latency_stdev(peers, latency),
            uploads_stdev=self.uploads_stdev(peers, context.pieces_num),
            uploads_max=self.uploads_max(peers),
            uploads_distinct_average=self.uploads_distinct_average(peers),
            requests_specific_piece=context.requests_specific_piece,
            requests_any_piece=context.requests_any_piece,
            bitmap_exchanges=context.bitmap_exchanges,
            uploads_by_position=data_processing.merge_counters(
                peer.uploads_pieces for peer in peers
            ),
        )

    @staticmethod
    def special_peers_summary(
        peers: List["Peer"], kind: SpecialType, reference: "Peer"
    ) -> List[FactorSummary]:
        """
        This method groups the normal peers by the factor of their special property relative to a
        normal peer, and sums up their latency and uploads.
        :param peers: all peers.
        :param kind: kind of special peers.
        :param reference: a normal peer.
        :return: one summary per factor, sorted by factor.
        """
        normal_value = reference.get_value(kind)

        latency_sums: Counter[float] = collections.Counter()
        uploads_sums: Counter[float] = collections.Counter()
        occurrences: Counter[float] = collections.Counter()

        for peer in peers:
            if peer.is_initial_source:
                continue
            factor = peer.get_value(kind) / normal_value if normal_value else 0.0
            latency_sums[factor] += peer.latency
            uploads_sums[factor] += peer.uploads
            occurrences[factor] += 1

        latency_averages = data_processing.average_by_key(latency_sums, occurrences)
        uploads_averages = data_processing.average_by_key(uploads_sums, occurrences)

        return [
            FactorSummary(
                factor=factor,
                peers=occurrences[factor],
                latency_sum=latency_sums[factor],
                latency_average=latency_averages.get(factor, 0.0),
                uploads_sum=uploads_sums[factor],
                uploads_average=uploads_averages.get(factor, 0.0),
            )
            for factor in sorted(occurrences)
        ]
