"""
This module contains the Peer class, the representative of a node in the swarm.
Note that sometimes we use "node" and "peer" interchangeably in the comment.

A peer never holds a reference to another peer. All relationships (known peers, free peers,
pending requests, credit) are keyed by the serial number of the other peer, and the peer instance
is looked up in the SwarmContext when it is needed.
"""

import collections
import logging
from typing import Deque, Dict, List, Optional, TYPE_CHECKING
from message import PendingRequest, UpRequest
from data_types import SpecialType, SerialMapping
from context import INITIAL_SOURCE_SERIAL
from permutation import invert_permutation

if TYPE_CHECKING:
    from context import SwarmContext
    from engine import Engine

logger = logging.getLogger(__name__)

# Maximum number of peers to add on each peer exchange.
MAX_PEERS_TO_ADD_ON_EXCHANGE = 50


class Peer:

    """
    The Peer class is the main representation of a node in the swarm. It keeps the pieces it has,
    the peers it knows, the download requests it sent and the upload requests it received.
    """

    def __init__(
        self,
        context: "SwarmContext",
        serial: int,
        down_slots_max: int,
        up_slots_max: int,
        down_pending_max: int,
        known_peers_max: int,
        request_ttl: int,
        start_round: int = 1,
    ) -> None:

        # Note: initialization does not establish any relationship with other peers. This is done
        # by activate().

        self.context: "SwarmContext" = context
        self.engine: "Engine" = context.engine  # design choice

        self.serial: int = serial  # 1-based serial number, 1 is the initial source

        # A peer becomes active on its start round, and inactive again when it leaves.
        self.active: bool = False
        self.departed: bool = False
        self.start_round: int = start_round
        # 0 for a leecher, -1 for the initial source, or the round in which it became a seeder.
        self.completed_round: int = 0

        # capacities
        self.down_slots_max: int = down_slots_max
        self.down_slots_occupied: int = 0
        self.up_slots_max: int = up_slots_max
        # max number of pending download requests at once, each to a different peer.
        self.down_pending_max: int = down_pending_max
        self.known_peers_max: int = known_peers_max
        self.request_ttl: int = request_ttl

        # Private weights of pieces, FairE9 family only. Both lists are 1-based, index 0 unused.
        # weight_by_piece[piece] is the weight of a piece. piece_by_weight[weight] is the piece
        # that has this weight. Both are empty if the strategy does not use weights.
        self.weight_by_piece: List[int] = self.engine.init_piece_weights(
            context.pieces_num, context.rng
        )
        self.piece_by_weight: List[int] = (
            invert_permutation(self.weight_by_piece) if self.weight_by_piece else []
        )

        # pieces already downloaded. Key is piece serial, value is the round it was downloaded.
        # The order is kept for the rotation of pieces uploaded by the initial source.
        self.downloaded_pieces: Dict[int, int] = {}

        # Peers known to this peer (accumulative). Value is the first round to use the peer.
        # The order is kept so that a peer exchange returns the earliest known peers first.
        self.known_peers: SerialMapping = {}
        # the known peers that are not in down_pending, in the order to be used.
        self.free_peers: Deque[int] = collections.deque()
        # pending download requests sent to other peers. Key is the serial of the other peer.
        self.down_pending: Dict[int, PendingRequest] = {}
        # pending upload requests received from other peers, in the order of arrival.
        # Key is the serial of the requester.
        self.up_pending: Dict[int, UpRequest] = {}

        # positive credit, when the other peer uploaded to this one.
        self.credits_pos: SerialMapping = {}
        # negative credit, when the other peer downloaded from this one.
        self.credits_neg: SerialMapping = {}

        # number of uploads performed by this peer.
        self.uploads: int = 0
        # which pieces have been uploaded. Piece weight for FairE9 family, piece serial otherwise.
        self.uploads_pieces: collections.Counter = collections.Counter()

    def __repr__(self) -> str:
        return f"Peer({self.serial})"

    # ==================
    # State queries
    # ==================

    def has_piece(self, piece: int) -> bool:
        return piece in self.downloaded_pieces

    @property
    def is_seeder(self) -> bool:
        """True if this peer already downloaded everything (the initial source included)."""
        return self.completed_round != 0

    @property
    def is_source(self) -> bool:
        """True if this peer already downloaded at least one piece."""
        return bool(self.downloaded_pieces)

    @property
    def is_initial_source(self) -> bool:
        return self.serial == INITIAL_SOURCE_SERIAL

    def has_free_down_slot(self) -> bool:
        """True if there is at least one free download slot in this round."""
        return self.down_slots_occupied < self.down_slots_max

    @property
    def latency(self) -> int:
        """
        Latency in rounds, from the start round to the completion round, both included.
        0 for the initial source or a peer that did not complete.
        """
        if not self.is_seeder or self.is_initial_source:
            return 0
        return self.completed_round - self.start_round + 1

    @property
    def uploads_distinct_pieces(self) -> int:
        return len(self.uploads_pieces)

    def set_as_initial_source(self) -> None:
        """
        This method makes this peer the initial source: it holds all pieces from round 0 and is
        considered a seeder.
        """
        self.completed_round = -1
        for piece in range(1, self.context.pieces_num + 1):
            self.downloaded_pieces[piece] = 0

    # ==================
    # Known peers
    # ==================

    def activate(self, round_to_first_use: int, peer_sample: List[int]) -> None:
        """
        This method activates the peer and gives it its initial known peers.
        :param round_to_first_use: first round when the known peers can be used.
        :param peer_sample: serial numbers of the initial known peers.
        :return: None
        """
        self.active = True
        for serial in peer_sample:
            self.add_known_peer(serial, round_to_first_use)

    def add_known_peer(self, serial: int, round_to_first_use: int) -> bool:
        """
        This method adds a peer to the known peers, only if it was not known before and there is
        still room. A new known peer is also a free peer, unless this peer is a seeder already.
        :param serial: serial number of the peer to add.
        :param round_to_first_use: first round when the peer can be used.
        :return: True if the peer is new to the known peers.
        """
        if len(self.known_peers) >= self.known_peers_max:
            return False

        if serial in self.known_peers or serial == self.serial:
            return False

        self.known_peers[serial] = round_to_first_use
        if not self.is_seeder:
            self.free_peers.append(serial)

        return True

    def _get_random_known_peer(self) -> Optional[int]:
        if not self.known_peers:
            return None
        position = self.context.rng.randrange(len(self.known_peers))
        for serial in self.known_peers:
            if position <= 0:
                return serial
            position -= 1
        return None

    def _get_known_peers_from(
        self, other: "Peer", round_to_first_use: int, max_new_peers_to_add: int
    ) -> int:
        """
        This method copies the known peers of another peer into the known peers of this peer.
        :return: number of new known peers.
        """
        result = 0
        for serial in list(other.known_peers):
            if self.add_known_peer(serial, round_to_first_use):
                result += 1
                if result >= max_new_peers_to_add:
                    break
        return result

    def perform_peer_exchange(self, round_to_first_use: int) -> int:
        """
        This method performs a peer exchange with a random known peer: copy some of its known
        peers, and make it know this peer. If no peer is known, the initial source is used.
        Some of the peers acquired may have left already, this will be learnt later.
        :param round_to_first_use: first round when the newly acquired peers can be used.
        :return: number of new relationships.
        """
        # skip if already have enough known peers
        if len(self.known_peers) >= self.known_peers_max:
            return 0

        serial = self._get_random_known_peer()
        if serial is None:
            serial = INITIAL_SOURCE_SERIAL
            self.add_known_peer(serial, round_to_first_use)

        other = self.context.get_peer(serial)
        if other is None or other is self:
            return 0

        result = self._get_known_peers_from(
            other, round_to_first_use, MAX_PEERS_TO_ADD_ON_EXCHANGE
        )

        # add myself to the other side
        if other.add_known_peer(self.serial, round_to_first_use):
            result += 1

        return result

    # ==================
    # Requests
    # ==================

    def accept_request(self, from_serial: int, piece: int, before_round: int) -> None:
        """
        This method adds a request to the pending upload requests, and adds the requester to the
        known peers if it was not known before. A former request from the same peer is
        overridden if it was for another piece. There is no limit on the number of pending upload
        requests.
        :param from_serial: serial number of the requester.
        :param piece: requested piece, or 0 for any piece.
        :param before_round: round when the piece may be downloaded.
        :return: None
        """
        existing_request = self.up_pending.get(from_serial)

        if existing_request is None or existing_request.piece != piece:
            requester = self.context.get_peer(from_serial)
            if requester is None:
                raise ValueError(f"Request from an unknown peer {from_serial}.")
            weight = self.engine.accept_weight(self, requester, piece, before_round)
            self.up_pending[from_serial] = UpRequest(
                requester=from_serial,
                piece=piece,
                weight=weight,
                before_round=before_round,
            )

        self.add_known_peer(from_serial, before_round)

    def send_request(self, serial: int, piece: int, before_round: int) -> None:
        """
        This method sends a single download request to a peer that is currently free.
        :param serial: serial number of the peer to send the request to.
        :param piece: requested piece, or 0 for any piece.
        :param before_round: round when the piece may be downloaded.
        :return: None
        """
        other = self.context.get_peer(serial)
        if other is None:
            raise ValueError(f"No such peer {serial} to send a request to.")
        if serial in self.free_peers:
            self.free_peers.remove(serial)
        self.down_pending[serial] = PendingRequest(piece, before_round)
        other.accept_request(self.serial, piece, before_round)

    def send_requests(self, before_round: int) -> int:
        """
        This method cleans up expired download requests, frees the download slots, and sends
        download requests until the pending table is full.
        :param before_round: the round when the pieces may be downloaded.
        :return: number of requests sent.
        """
        if self.is_seeder:
            return 0

        self.cleanup_expired_down(before_round - self.request_ttl)

        self.down_slots_occupied = 0

        if len(self.down_pending) >= self.down_pending_max:
            return 0

        return self.engine.send_requests(self, before_round)

    def cleanup_expired_down(self, expire_round: int) -> None:
        """
        This method cancels the pending download requests that expired, or that are for a piece
        this peer already has, together with their matching pending upload requests on the other
        side. The other peer becomes free again, unless requests that time out lead to eviction.
        :param expire_round: requests sent in this round or before are expired.
        :return: None
        """
        for serial in list(self.down_pending):
            request = self.down_pending[serial]
            timed_out = request.round <= expire_round
            if not timed_out and not (request.piece > 0 and self.has_piece(request.piece)):
                continue

            del self.down_pending[serial]

            other = self.context.get_peer(serial)
            if other is not None:
                other.up_pending.pop(self.serial, None)

            if timed_out and self.engine.should_evict_on_timeout():
                # do not use it again
                self.known_peers.pop(serial, None)
            elif serial not in self.free_peers:
                self.free_peers.append(serial)

    # ==================
    # Transfers
    # ==================

    def upload(self, current_round: int) -> int:
        """
        This method performs the uploads of a round, by going over the relevant pending upload
        requests and serving a piece to each. If there are free slots left after the first pass,
        it tries over and over again until the slots or the requests are exhausted.
        :param current_round: the round of the uploads.
        :return: number of uploads performed.
        """
        if self.is_initial_source:
            return self.upload_from_initial_source(current_round)

        requests = self.get_relevant_up_requests()
        if not requests:
            return 0

        free_slots = self.up_slots_max
        result = 0
        first_pass = True

        while free_slots > 0:
            uploaded = False
            for request in requests:
                if free_slots <= 0:
                    break

                requester = self.context.get_peer(request.requester)
                if requester is None or not requester.has_free_down_slot():
                    continue

                if request.piece == 0 or not first_pass:
                    piece = self.engine.pick_piece(
                        self, requester, current_round, self.context.rng
                    )
                    self.context.bitmap_exchanges += 1
                    if piece == 0:
                        continue
                else:
                    piece = request.piece
                    download_round = self.downloaded_pieces.get(piece)
                    # this peer does not have the piece, or it is still in progress
                    if download_round is None or download_round == current_round:
                        continue
                    # the requester got it from somewhere else
                    if requester.has_piece(piece):
                        continue

                free_slots -= 1
                self.serve(requester, piece, current_round)
                uploaded = True
                result += 1

            if first_pass:
                # with no weights, a pass without uploads means there is nothing to do
                if not uploaded and not self.engine.uses_weights:
                    break
                first_pass = False
            elif not uploaded:
                break

        self.uploads += result
        return result

    def serve(self, requester: "Peer", piece: int, current_round: int) -> None:
        """
        This method uploads a single piece to a requester and updates the bookkeeping of this peer.
        """
        requester.complete_transfer(self.serial, piece, current_round)

        if self.engine.uses_credit:
            # learn the requester so the credit can be used, and use it first next time
            self.add_known_peer(requester.serial, current_round)
            if requester.serial in self.free_peers:
                self.free_peers.remove(requester.serial)
                self.free_peers.appendleft(requester.serial)

        if self.engine.uses_weights:
            self.uploads_pieces[self.weight_by_piece[piece]] += 1
        else:
            self.uploads_pieces[piece] += 1

        logger.debug("n%d <= n%d (%d)", requester.serial, self.serial, piece)

    def get_relevant_up_requests(self) -> List[UpRequest]:
        """
        This method returns the pending upload requests that can be served in this round, ordered
        by the strategy. Requests from peers that no longer wait for this peer are removed.
        :return: ordered list of requests, the first one to be served first.
        """
        if not self.downloaded_pieces or not self.up_pending:
            return []

        result: List[UpRequest] = []
        for serial in list(self.up_pending):
            request = self.up_pending[serial]
            requester = self.context.get_peer(serial)
            if requester is None:
                del self.up_pending[serial]
                continue

            # the requester is too busy in this round
            if not requester.has_free_down_slot():
                continue

            # the requester does not wait for this peer anymore
            if self.serial not in requester.down_pending:
                del self.up_pending[serial]
                continue

            result.append(request)

        # weights are updated even when there is nothing to order
        self.engine.rank_up_requests(self, result, self.context.rng)

        return result

    def upload_from_initial_source(self, current_round: int) -> int:
        """
        This method performs the uploads of the initial source. The pieces are rotated so that
        every round starts with other pieces, and each piece goes to the best requester that needs
        it. These uploads are not counted in self.uploads.
        :param current_round: the round of the uploads.
        :return: number of uploads performed.
        """
        free_slots = self.up_slots_max
        result = 0
        pieces_left_to_check = len(self.downloaded_pieces)

        while free_slots > 0 and self.up_pending and pieces_left_to_check > 0:
            pieces_left_to_check -= 1

            # rotate the pieces for the next time
            piece = next(iter(self.downloaded_pieces))
            del self.downloaded_pieces[piece]
            self.downloaded_pieces[piece] = 0

            serial = self._get_requester_for_initial_source_piece(piece)
            if serial is None:
                continue

            del self.up_pending[serial]
            requester = self.context.get_peer(serial)
            if requester is None:
                continue
            requester.complete_transfer(self.serial, piece, current_round)
            result += 1
            free_slots -= 1

            logger.debug("n%d <= s (%d)", serial, piece)

        return result

    def _get_requester_for_initial_source_piece(self, piece: int) -> Optional[int]:
        """
        Find the requester to get a piece from the initial source. With weights, the requester for
        which the piece is the lightest wins.
        :return: serial number of the requester, or None if no requester needs this piece now.
        """
        best_serial: Optional[int] = None
        lowest_weight: Optional[int] = None

        for serial in self.up_pending:
            requester = self.context.get_peer(serial)
            if requester is None:
                continue
            if requester.has_piece(piece) or not requester.has_free_down_slot():
                continue

            if not self.engine.uses_weights:
                return serial

            weight = requester.weight_by_piece[piece]
            if weight == 1:
                return serial
            if lowest_weight is None or weight < lowest_weight:
                best_serial = serial
                lowest_weight = weight

        return best_serial

    def complete_transfer(self, from_serial: int, piece: int, current_round: int) -> None:
        """
        This method is called on the downloader when a piece arrives from another peer.
        :param from_serial: serial number of the uploader.
        :param piece: the piece.
        :param current_round: the round of the upload.
        :return: None
        """
        self.down_slots_occupied += 1
        self.downloaded_pieces[piece] = current_round

        if self.down_pending.pop(from_serial, None) is not None:
            if from_serial not in self.free_peers:
                self.free_peers.append(from_serial)

        giver = self.context.get_peer(from_serial)
        if giver is not None:
            self.engine.record_credit(giver=giver, receiver=self)

        if len(self.downloaded_pieces) == self.context.pieces_num:
            self.completed_round = current_round
            self.remove_all_free_and_down_pending()

    def remove_all_free_and_down_pending(self) -> None:
        """
        This method is called when the peer becomes a seeder. Its pending requests are withdrawn
        from the other side.
        """
        self.free_peers.clear()
        for serial in self.down_pending:
            other = self.context.get_peer(serial)
            if other is not None:
                other.up_pending.pop(self.serial, None)
        self.down_pending.clear()

    # ==================
    # Leaving
    # ==================

    def leave(self) -> None:
        self.active = False
        self.departed = True

    def cleanup_leaving_peer(self, serial: int) -> None:
        """
        This method removes every trace of a peer that left.
        :param serial: serial number of the leaving peer.
        :return: None
        """
        self.down_pending.pop(serial, None)
        if serial in self.free_peers:
            self.free_peers.remove(serial)
        self.up_pending.pop(serial, None)
        self.known_peers.pop(serial, None)
        self.credits_pos.pop(serial, None)
        self.credits_neg.pop(serial, None)

    # ==================
    # Special peers
    # ==================

    def get_value(self, kind: SpecialType) -> int:
        """
        This method returns the property of this peer that a special-peer kind changes.
        """
        if kind == "PENDING_AND_KNOWN":
            return self.down_pending_max
        if kind in ("FREE_RIDERS", "UP_SLOTS"):
            return self.up_slots_max
        if kind == "NEW_COMERS":
            return self.start_round
        if kind == "DOWN_SLOTS":
            return self.down_slots_max
        raise ValueError(f"No such special peer kind: {kind}")

    def set_value(self, kind: SpecialType, value: int) -> None:
        """
        This method sets the property of this peer that a special-peer kind changes.
        """
        if kind == "PENDING_AND_KNOWN":
            self.down_pending_max = value
        elif kind in ("FREE_RIDERS", "UP_SLOTS"):
            self.up_slots_max = value
        elif kind == "NEW_COMERS":
            self.start_round = value
        elif kind == "DOWN_SLOTS":
            self.down_slots_max = value
        else:
            raise ValueError(f"No such special peer kind: {kind}")

    def describe(self) -> str:
        """
        This method returns the details of this peer, for debugging: which pieces it has (marked
        with a star), and the serial numbers of the known, free, up-pending and down-pending peers.
        """
        pieces = " ".join(
            f"{piece}{'*' if self.has_piece(piece) else ''}"
            for piece in range(1, self.context.pieces_num + 1)
        )
        return (
            f"   Pieces: {pieces}\n"
            f"   Known: {sorted(self.known_peers)}\n"
            f"   Free peers: {sorted(self.free_peers)}\n"
            f"   Up pending: {sorted(self.up_pending)}\n"
            f"   Down pending: {sorted(self.down_pending)}"
        )
