"""
This module contains the SingleRun class only.
"""

import logging
import random
from typing import List, Optional, TYPE_CHECKING
from context import SwarmContext, INITIAL_SOURCE_SERIAL
from node import Peer
from data_types import RoundStatistics, RunSummary


if TYPE_CHECKING:
    from engine import Engine
    from scenario import Scenario
    from performance import Performance

logger = logging.getLogger(__name__)


class SingleRun:
    """
    The SingleRun class contains all function that is directly called by the simulator to run one
    time. For example, initialization of the swarm, and operations in each round (piece-time).
    """

    def __init__(
        self,
        scenario: "Scenario",
        engine: "Engine",
        performance: "Performance",
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        This init function sets up the attribute values for the class instance. It does not
        really create the peers; instead, the method create_peers() creates them.
        """

        self.scenario: "Scenario" = scenario  # assumptions
        self.engine: "Engine" = engine  # design choices
        self.performance: "Performance" = performance  # performance evaluation measures

        # random source, peer registry and global counters shared by all peers of this run.
        self.context: SwarmContext = SwarmContext(
            engine=engine, pieces_num=scenario.pieces_num, rng=rng
        )

        # serial numbers of all peers that are active, and therefore can be added as known peers.
        # The order changes when peers are sampled as initial known peers.
        self.active_peers: List[int] = []

        self.cur_round: int = 0  # current round
        # per-round statistics, one element per round played.
        self.round_statistics: List[RoundStatistics] = []

    def create_peers(self) -> None:
        """
        This method creates the initial source (serial 1) and all the normal peers, and then sets
        the special peers if there are any. Bandwidth of normal peers is sampled for each peer.
        Peers are not active yet. They become active on their start round.
        :return: None
        """

        initial_source = Peer(
            context=self.context,
            serial=INITIAL_SOURCE_SERIAL,
            down_slots_max=0,
            up_slots_max=self.scenario.source_up_slots,
            down_pending_max=0,
            known_peers_max=0,
            request_ttl=0,
        )
        initial_source.set_as_initial_source()
        self.context.register(initial_source)

        for serial in range(INITIAL_SOURCE_SERIAL + 1, self.scenario.peers_num + 1):
            peer = Peer(
                context=self.context,
                serial=serial,
                down_slots_max=self.scenario.sample_slots(
                    self.scenario.down_slots, self.context.rng
                ),
                up_slots_max=self.scenario.sample_slots(
                    self.scenario.up_slots, self.context.rng
                ),
                down_pending_max=self.scenario.down_pending_max,
                known_peers_max=self.scenario.known_peers_max,
                request_ttl=self.scenario.request_ttl,
            )
            self.context.register(peer)

        self.scenario.set_special_peers(self.context.peers)

    def activate_peers(self, current_round: int) -> None:
        """
        This method activates the inactive peers that are supposed to start in this round. Each of
        them gets some of the active peers as its initial known peers.
        :param current_round: current round.
        :return: None
        """

        # all are already active
        if len(self.active_peers) == len(self.context.peers):
            return

        for peer in self.context.peers.values():
            if peer.start_round != current_round or peer.departed:
                continue
            peer.activate(current_round, self.sample_active_peers())
            # must be added after sampling, so a peer does not know itself
            self.active_peers.append(peer.serial)

    def sample_active_peers(self) -> List[int]:
        """
        This method samples initial known peers out of the active peers, without replacement.
        Each picked peer is moved to the end of the pool so it cannot be picked again.
        :return: list of serial numbers.
        """
        result: List[int] = []
        pool_size = len(self.active_peers)
        for i in range(min(self.scenario.initial_known_peers_num, pool_size)):
            position = self.context.rng.randrange(pool_size - i)
            serial = self.active_peers.pop(position)
            self.active_peers.append(serial)
            result.append(serial)
        return result

    def peer_departure(self, peer: Peer) -> None:
        """
        This method deals with a peer leaving. The peer becomes inactive and every other peer
        forgets it. The initial source never leaves.
        :param peer: the peer that leaves.
        :return: None
        """
        if peer.is_initial_source or peer.departed or peer.serial not in self.context.peers:
            raise ValueError("No such peer to depart.")

        peer.leave()
        if peer.serial in self.active_peers:
            self.active_peers.remove(peer.serial)
        for other in self.context.peers.values():
            other.cleanup_leaving_peer(peer.serial)

        logger.debug("Peer %d left in round %d.", peer.serial, self.cur_round)

    def perform_seeders_churn(self) -> int:
        """
        This method lets every active seeder (except the initial source) leave by chance.
        :return: number of active seeders after churn, the initial source included.
        """
        result = 0
        for peer in list(self.context.peers.values()):
            if not (peer.is_seeder and peer.active):
                continue
            if not peer.is_initial_source and self.should_churn():
                self.peer_departure(peer)
            else:
                result += 1
        return result

    def should_churn(self) -> bool:
        return (
            self.context.rng.randrange(100) < self.scenario.churn_seeder_leave_percents
        )

    def operations_in_a_time_round(self, current_round: int) -> RoundStatistics:
        """
        This method runs all operations in a round: activation of new peers, download requests and
        peer exchange, uploads, churn of seeders, and statistics.
        :param current_round: current round, starting from 1.
        :return: statistics of this round.
        """

        self.cur_round = current_round

        # activate the peers that start now
        self.activate_peers(current_round)

        # download requests, and a peer exchange with a probability
        requests = 0
        exchanges = 0
        for peer in self.context.peers.values():
            if not peer.active:
                continue
            requests += peer.send_requests(current_round)
            if self.context.rng.randrange(self.scenario.rounds_per_peer_exchange) == 0:
                exchanges += peer.perform_peer_exchange(current_round + 1)

        # uploads
        uploads = 0
        for peer in self.context.peers.values():
            if not peer.active:
                continue
            uploads += peer.upload(current_round)

        # count seeders and let some of them leave
        seeders = self.perform_seeders_churn()

        statistics = self.performance.round_statistics(
            current_round=current_round,
            seconds=current_round * self.scenario.piece_slot_time_sec,
            peers=list(self.context.peers.values()),
            active_num=len(self.active_peers),
            seeders=seeders,
            requests=requests,
            uploads=uploads,
            exchanges=exchanges,
            pieces_num=self.scenario.pieces_num,
        )
        self.round_statistics.append(statistics)
        return statistics

    def single_run_execution(self, max_rounds: Optional[int] = None) -> RunSummary:
        """
        This is the method that runs the simulator for one time: it creates the peers and plays
        rounds until every active peer is a seeder.
        :param max_rounds: optional cap on the number of rounds. If the swarm did not converge by
        then, the run stops with a warning.
        :return: summary of the run.
        """

        logger.info(
            "Starting a run with %d peers and %d pieces.",
            self.scenario.peers_num,
            self.scenario.pieces_num,
        )

        self.create_peers()

        current_round = 0
        while True:
            current_round += 1
            statistics = self.operations_in_a_time_round(current_round)
            if statistics.seeders == statistics.peers:
                break
            if max_rounds is not None and current_round >= max_rounds:
                logger.warning(
                    "Stopped after %d rounds, %d of %d active peers are seeders.",
                    current_round,
                    statistics.seeders,
                    statistics.peers,
                )
                break

        logger.info("Run finished after %d rounds.", current_round)

        return self.performance.run_summary(
            rounds=current_round,
            peers=list(self.context.peers.values()),
            context=self.context,
        )
