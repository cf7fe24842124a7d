"""
This module contains the SwarmContext class only.
"""

import random
from typing import Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from engine import Engine
    from node import Peer


# serial number of the initial source. It is always the first peer.
INITIAL_SOURCE_SERIAL = 1


class SwarmContext:
    """
    The SwarmContext holds what all peers of one simulation run share: the random source,
    the design choice (engine), the registry of peers and some global counters.
    Peers refer to each other only by serial number and resolve them through the registry here.
    Passing a seeded random.Random makes a run reproducible.
    """

    def __init__(
        self, engine: "Engine", pieces_num: int, rng: Optional[random.Random] = None
    ) -> None:

        self.engine: "Engine" = engine
        self.pieces_num: int = pieces_num
        self.rng: random.Random = rng if rng is not None else random.Random()

        # mapping from serial number to peer instance, including the initial source.
        # Peers are inserted in increasing serial order, and iteration follows this order.
        self.peers: Dict[int, "Peer"] = {}

        # global counters for the summary
        self.requests_specific_piece: int = 0
        self.requests_any_piece: int = 0
        self.bitmap_exchanges: int = 0

    def get_peer(self, serial: int) -> Optional["Peer"]:
        """
        Find a peer by its serial number.
        :return: the peer instance, or None if there is no such peer.
        """
        return self.peers.get(serial)

    def register(self, peer: "Peer") -> None:
        """
        Add a newly created peer to the registry.
        """
        if peer.serial in self.peers:
            raise ValueError(f"Peer {peer.serial} is already registered.")
        self.peers[peer.serial] = peer
