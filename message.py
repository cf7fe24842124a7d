"""
This module defines PendingRequest and UpRequest classes. They are both representatives of a
download request, seen from the two sides of the request.
"""


class PendingRequest:
    """
    PendingRequest class. An instance is a download request sent to another peer, held in the
    pending request table (down_pending) of the sending peer.
    """

    def __init__(self, piece: int, round_sent: int) -> None:

        # serial number of the requested piece, or 0 for "any missing piece".
        self.piece: int = piece
        # 1-based round (piece-time) when the request was sent, before the upload phase.
        self.round: int = round_sent

    def __repr__(self) -> str:
        return f"PendingRequest(piece={self.piece}, round={self.round})"


class UpRequest:
    """
    UpRequest class. An instance is a request to upload from this peer, from the uploader's
    viewpoint. Each request has a requesting peer and optionally a piece. It also has a weight so
    that the uploader can sort the requests, ascending. The weight is set when the request is
    accepted and may be updated again right before an upload phase.
    """

    def __init__(
        self, requester: int, piece: int, weight: int, before_round: int
    ) -> None:

        self.requester: int = requester  # serial number of the requesting peer
        self.piece: int = piece  # 0 if the requester asked for any piece
        self.weight: int = weight
        # first round when the request is considered
        self.before_round: int = before_round

    def __repr__(self) -> str:
        # serial number of peer, serial of piece and weight of request.
        return f"{self.requester}-{self.piece}-{self.weight}"
