"""
This module contains contains all possible realizations for setting special peers in Scenario.
A special peer is a normal peer with one property changed. Special peers are consecutive in serial
numbers, starting from a given serial, and are usually split into equal groups, one per factor.
"""

from typing import Dict, List, TYPE_CHECKING
from data_types import SpecialType

if TYPE_CHECKING:
    from node import Peer


# factors applied on a property of the special peers, one group per factor.
SPECIAL_FACTORS: List[float] = [0.2, 0.4, 0.5, 2, 3, 5]
# for upload slots the last two groups are slow peers and free riders.
UP_SLOTS_FACTORS: List[float] = [0.2, 0.4, 0.5, 2, 0.75, 0]

# new comers are split into this many groups, group j starts on round 1 + NEW_COMERS_ROUND_GAP * j
NEW_COMERS_GROUPS = 10
NEW_COMERS_ROUND_GAP = 3


def scale_pending_and_known(
    peers: Dict[int, "Peer"], first_serial: int, count: int, reference: "Peer"
) -> int:
    """
    This is a candidate design for special peers, to test aggressiveness. Each group multiplies
    both the max number of known peers and the max number of pending requests by its factor.
    :param peers: mapping from serial number to peer.
    :param first_serial: serial number of the first special peer.
    :param count: total number of special peers.
    :param reference: a normal peer, whose values are multiplied.
    :return: number of peers changed.
    """
    group_size = count // len(SPECIAL_FACTORS)
    normal_pending = reference.down_pending_max
    normal_known = reference.known_peers_max

    serial = first_serial
    for factor in SPECIAL_FACTORS:
        for _ in range(group_size):
            peer = peers[serial]
            peer.known_peers_max = int(factor * normal_known)
            peer.down_pending_max = int(factor * normal_pending)
            serial += 1

    return serial - first_serial


def new_comers(peers: Dict[int, "Peer"], first_serial: int, count: int) -> int:
    """
    This is a candidate design for special peers that join late. They are split into groups, and
    each group becomes active a few rounds after the previous one.
    :return: number of peers changed.
    """
    group_size = count // NEW_COMERS_GROUPS

    serial = first_serial
    for group in range(1, NEW_COMERS_GROUPS + 1):
        start_round = 1 + group * NEW_COMERS_ROUND_GAP
        for _ in range(group_size):
            peer = peers[serial]
            peer.active = False
            peer.start_round = start_round
            serial += 1

    return serial - first_serial


def free_riders(peers: Dict[int, "Peer"], first_serial: int, count: int) -> int:
    """
    This is a candidate design for special peers that never upload.
    :return: number of peers changed.
    """
    for serial in range(first_serial, first_serial + count):
        peers[serial].up_slots_max = 0
    return count


def scale_value(
    peers: Dict[int, "Peer"],
    first_serial: int,
    count: int,
    reference: "Peer",
    kind: SpecialType,
    factors: List[float],
) -> int:
    """
    This is a candidate design for special peers where a single property is multiplied by a
    factor, one group per factor. It is used for upload slots and for download slots.
    :param kind: the kind of special peers, which decides the property.
    :param factors: list of factors.
    :return: number of peers changed.
    """
    group_size = count // len(factors)
    normal_value = reference.get_value(kind)

    serial = first_serial
    for factor in factors:
        for _ in range(group_size):
            peers[serial].set_value(kind, int(factor * normal_value))
            serial += 1

    return serial - first_serial
