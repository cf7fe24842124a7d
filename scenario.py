"""
This module contains class Scenario only.
"""

import logging
import math
import random
from typing import Dict, Optional, TYPE_CHECKING
import scenario_candidates
from data_types import ScenarioParameters, SpecialPeers, Distribution

if TYPE_CHECKING:
    from node import Peer

logger = logging.getLogger(__name__)

# serial number of the normal peer whose values are the reference for special peers.
REFERENCE_PEER_SERIAL = 2


class Scenario:
    """
    The class Scenario describes our assumptions on the system setting.
    For examples, number of peers and pieces, the bandwidth of peers, churn, and special peers.
    They describe the feature of the system, but is NOT part of our design space.
    """

    def __init__(
        self, parameters: ScenarioParameters, special_peers: Optional[SpecialPeers] = None
    ) -> None:

        # unpacking parameters

        self.peers_num: int = parameters.peers_num
        self.pieces_num: int = parameters.pieces_num

        # bandwidth, in pieces per round. Normal peers get a random value following G(mean, var).
        self.down_slots: Distribution = parameters.down_slots
        self.up_slots: Distribution = parameters.up_slots
        self.source_up_slots: int = parameters.source_up_slots

        self.known_peers_max: int = parameters.known_peers_max
        self.down_pending_max: int = parameters.down_pending_max
        self.request_ttl: int = parameters.request_ttl
        self.initial_known_peers_num: int = parameters.initial_known_peers_num

        self.churn_seeder_leave_percents: int = parameters.churn_seeder_leave_percents
        self.rounds_per_peer_exchange: int = parameters.rounds_per_peer_exchange

        self.file_size_mb: int = parameters.file_size_mb
        self.slot_speed_kbps: int = parameters.slot_speed_kbps

        self.special_peers: Optional[SpecialPeers] = special_peers

        if self.peers_num < 1 or self.pieces_num < 1:
            raise ValueError("There must be at least one peer and one piece.")
        if self.rounds_per_peer_exchange < 1:
            raise ValueError("Rounds per peer exchange must be positive.")

    @property
    def piece_slot_time_sec(self) -> int:
        """
        Number of seconds a round (piece-time) represents. For display only.
        """
        piece_size_bytes = int(self.file_size_mb * 1000 * 1000 / self.pieces_num)
        return int(piece_size_bytes * 8 / (self.slot_speed_kbps * 1000))

    @staticmethod
    def sample_slots(distribution: Distribution, rng: random.Random) -> int:
        """
        This method samples a number of slots following Gaussian distribution G(mean, var).
        The result is truncated to an integer and is never negative.
        :param distribution: mean and variance.
        :param rng: random source.
        :return: number of slots.
        """
        value = distribution.mean + rng.gauss(0, 1) * math.sqrt(distribution.var)
        return max(0, int(value))

    def set_special_peers(self, peers: Dict[int, "Peer"]) -> None:
        """
        This method turns some of the normal peers into special peers. The special peers are in the
        middle of the serial numbers, and the reference values are taken from peer 2.
        The number of special peers must fit within the normal peers.
        :param peers: mapping from serial number to peer, the initial source included.
        :return: None
        """
        if self.special_peers is None or self.special_peers.count <= 0:
            return

        kind = self.special_peers.kind
        count = self.special_peers.count
        first_serial = (len(peers) - count) // 2

        if first_serial < REFERENCE_PEER_SERIAL or first_serial + count - 1 > len(peers):
            raise ValueError(
                f"Cannot set {count} special peers out of {len(peers)} peers."
            )

        reference = peers[REFERENCE_PEER_SERIAL]

        if kind == "PENDING_AND_KNOWN":
            changed = scenario_candidates.scale_pending_and_known(
                peers, first_serial, count, reference
            )
        elif kind == "NEW_COMERS":
            changed = scenario_candidates.new_comers(peers, first_serial, count)
        elif kind == "FREE_RIDERS":
            changed = scenario_candidates.free_riders(peers, first_serial, count)
        elif kind == "UP_SLOTS":
            changed = scenario_candidates.scale_value(
                peers,
                first_serial,
                count,
                reference,
                kind,
                scenario_candidates.UP_SLOTS_FACTORS,
            )
        elif kind == "DOWN_SLOTS":
            changed = scenario_candidates.scale_value(
                peers,
                first_serial,
                count,
                reference,
                kind,
                scenario_candidates.SPECIAL_FACTORS,
            )
        else:
            raise ValueError(f"No such option to set special peers: {kind}")

        logger.debug(
            "Set %d special peers of kind %s from serial %d.", changed, kind, first_serial
        )
