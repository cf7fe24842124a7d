"""
This module contains all possible realizations of functions in the Engine class.
"""

import math
import random
from typing import Dict, List, Optional, TYPE_CHECKING
from permutation import random_permutation, butterfly_permutation
from context import INITIAL_SOURCE_SERIAL

if TYPE_CHECKING:
    from node import Peer
    from message import UpRequest


# ==================
# Piece weights
# ==================


def shuffle_weights(pieces_num: int, rng: random.Random) -> List[int]:
    """
    This is a candidate design for setting the private piece weights of a peer.
    It is called by method init_piece_weights() in class Engine.
    Every piece gets a uniformly random weight, all weights different.
    :param pieces_num: number of pieces.
    :param rng: random source.
    :return: 1-based list of weights by piece.
    """
    return random_permutation(pieces_num, rng)


def butterfly_weights(pieces_num: int, rng: random.Random) -> List[int]:
    """
    This is a candidate design for setting the private piece weights of a peer.
    The weights follow a butterfly permutation drawn out of a random seed, so that peers with
    different seeds have structurally different orders.
    """
    return butterfly_permutation(pieces_num, rng)


# ==================
# Download requests
# ==================


def send_requests_any_piece(peer: "Peer", before_round: int) -> int:
    """
    This is a candidate design for sending download requests.
    It is called by method send_requests() in class Engine.
    Free peers are used in their order, each one gets a request for any piece, until the pending
    table is full or there are no more free peers.
    :param peer: the peer sending the requests.
    :param before_round: the round when the pieces may be downloaded.
    :return: number of requests sent.
    """
    result = 0
    while peer.free_peers and len(peer.down_pending) < peer.down_pending_max:
        serial = peer.free_peers[0]
        peer.send_request(serial, 0, before_round)
        peer.context.requests_any_piece += 1
        result += 1
    return result


def send_requests_fair_e9(peer: "Peer", before_round: int) -> int:
    """
    This is a candidate design for sending download requests, used by the FairE9 family.
    The initial source, if free, always gets a request for any piece. Then the missing pieces are
    visited from the lightest to the heaviest. Each piece should have a target number of pending
    requests, and the missing requests go to the free peers for which this piece is the lightest.
    If a piece does not reach its target, heavier pieces are not requested in this round.
    :param peer: the peer sending the requests.
    :param before_round: the round when the pieces may be downloaded.
    :return: number of requests for specific pieces sent. The request to the initial source is
    not counted here.
    """

    if INITIAL_SOURCE_SERIAL in peer.free_peers:
        peer.send_request(INITIAL_SOURCE_SERIAL, 0, before_round)
        peer.context.requests_any_piece += 1

    # missing pieces, from the lightest to the heaviest, and the number of pending requests for
    # each of them
    missing: Dict[int, int] = {}
    for weight in range(1, len(peer.piece_by_weight)):
        piece = peer.piece_by_weight[weight]
        if not peer.has_piece(piece):
            missing[piece] = 0

    if not missing:
        return 0

    for request in peer.down_pending.values():
        # requests for any piece are not for a specific missing piece
        if request.piece in missing:
            missing[request.piece] += 1

    target = max(2, math.ceil(peer.down_pending_max / len(missing)))

    result = 0
    for piece, count in missing.items():
        if len(peer.down_pending) >= peer.down_pending_max or not peer.free_peers:
            break

        to_send = target - count
        if to_send <= 0:
            continue

        sent = send_requests_for_piece_fair_e9(peer, piece, to_send, before_round)
        result += sent
        if sent < to_send:
            break

    return result


def send_requests_for_piece_fair_e9(
    peer: "Peer", piece: int, to_send: int, before_round: int
) -> int:
    """
    This function sends several requests for the same piece, each to the free peer with the lowest
    weight for this piece.
    :return: number of requests sent.
    """
    sent = 0
    while sent < to_send:
        if len(peer.down_pending) >= peer.down_pending_max:
            break
        serial = best_free_peer_for_piece(peer, piece)
        if serial is None:
            break
        peer.send_request(serial, piece, before_round)
        peer.context.requests_specific_piece += 1
        sent += 1
    return sent


def best_free_peer_for_piece(peer: "Peer", piece: int) -> Optional[int]:
    """
    Find the free peer that has the lowest weight for a piece. A weight of 1 is the minimum, so
    the first free peer with it wins immediately. Ties keep the order of the free peers.
    """
    best_serial = None
    lowest_weight = None
    for serial in peer.free_peers:
        other = peer.context.get_peer(serial)
        if other is None:
            continue
        weight = other.weight_by_piece[piece]
        if weight == 1:
            return serial
        if lowest_weight is None or weight < lowest_weight:
            best_serial = serial
            lowest_weight = weight
    return best_serial


# ==================
# Upload ranking
# ==================


def pair_weight(uploader: "Peer", requester: "Peer", piece: int) -> int:
    """
    Weight of a request for a specific piece: the sum of the weights both sides give the piece.
    A piece that is light for both is served first.
    """
    return uploader.weight_by_piece[piece] + requester.weight_by_piece[piece]


def rank_shuffle(requests: List["UpRequest"], rng: random.Random) -> None:
    """
    This is a candidate design for ordering the upload requests: a random order.
    It is called by method rank_up_requests() in class Engine.
    """
    if len(requests) > 1:
        rng.shuffle(requests)


def rank_by_weight(requests: List["UpRequest"]) -> None:
    """
    This is a candidate design for ordering the upload requests: ascending weight, where the
    weights were set when the requests were accepted. The sort is stable, so requests of the
    same weight keep the order of arrival.
    """
    requests.sort(key=lambda request: request.weight)


def rank_emule(uploader: "Peer", requests: List["UpRequest"]) -> None:
    """
    This is a candidate design for ordering the upload requests, eMule style.
    A request waits since its round, and every 10 credit units that the requester has earned
    (a piece uploaded to us) are worth 3 rounds of waiting.
    """
    for request in requests:
        credit = uploader.credits_pos.get(request.requester)
        if credit is not None:
            request.weight = request.before_round - 3 * credit // 10
    rank_by_weight(requests)


def rank_bittorrent(uploader: "Peer", requests: List["UpRequest"]) -> None:
    """
    This is a candidate design for ordering the upload requests, BitTorrent style tit-for-tat.
    Requesters that gave us more than they took are served first. A requester that never gave us
    anything has weight 0.
    """
    for request in requests:
        credit_pos = uploader.credits_pos.get(request.requester)
        if credit_pos is None:
            request.weight = 0
            continue
        credit_neg = uploader.credits_neg.get(request.requester)
        if credit_neg is None:
            request.weight = -credit_pos
        else:
            request.weight = -(credit_pos * 10 // credit_neg)
    rank_by_weight(requests)


# ==================
# Piece selection
# ==================


def _candidate_pieces(uploader: "Peer", downloader: "Peer", current_round: int) -> List[int]:
    # pieces that the uploader has from before this round, and the downloader does not have
    return [
        piece
        for piece, download_round in uploader.downloaded_pieces.items()
        if download_round != current_round and not downloader.has_piece(piece)
    ]


def pick_piece_random(
    uploader: "Peer", downloader: "Peer", current_round: int, rng: random.Random
) -> int:
    """
    This is a candidate design for picking a piece to upload: uniformly random among the pieces
    that the uploader has and the downloader needs.
    It is called by method pick_piece() in class Engine.
    :return: the piece, or 0 if there is no such piece.
    """
    candidates = _candidate_pieces(uploader, downloader, current_round)
    if not candidates:
        return 0
    return rng.choice(candidates)


def pick_piece_lightest(uploader: "Peer", downloader: "Peer", current_round: int) -> int:
    """
    This is a candidate design for picking a piece to upload: the lightest piece in the
    downloader's own weights, so that the downloader gets what it wants most.
    :return: the piece, or 0 if there is no such piece.
    """
    best_piece = 0
    best_weight = None
    for piece in _candidate_pieces(uploader, downloader, current_round):
        weight = downloader.weight_by_piece[piece]
        if best_weight is None or weight < best_weight:
            best_piece = piece
            best_weight = weight
    return best_piece


# ==================
# Credit
# ==================


def ledger_credit(giver: "Peer", receiver: "Peer", credit_unit: int) -> None:
    """
    This is a candidate design for credit accounting. The receiver records a positive credit for
    the giver, and the giver records a negative credit for the receiver.
    It is called by method record_credit() in class Engine.
    """
    receiver.credits_pos[giver.serial] = (
        receiver.credits_pos.get(giver.serial, 0) + credit_unit
    )
    giver.credits_neg[receiver.serial] = (
        giver.credits_neg.get(receiver.serial, 0) + credit_unit
    )
