"""
This module contains the class Engine and the mapping from a P2P system name to its options.
"""

from typing import List, TYPE_CHECKING, cast
import engine_candidates
from data_types import (
    EngineOptions,
    WeightOption,
    RequestOption,
    RankingOption,
    PieceOption,
    CreditOption,
    FairE9,
    Ledger,
    Strategy,
)

if TYPE_CHECKING:
    import random
    from node import Peer
    from message import UpRequest


class Engine:

    """
    The class Engine describes the design space, i.e., the incentive strategy of the P2P system.
    A strategy is a choice over five functions: how a peer sets its piece weights, how it sends
    download requests, how it weighs and orders upload requests, how it picks a piece to upload,
    and how credit is kept. Peers call methods of this class and the Engine calls a particular
    realization in engine_candidates.
    """

    def __init__(self, options: EngineOptions) -> None:

        # Unpacking options. Each option argument is of type TypedDict. It must contain a key
        # 'method' to specify which function to call. If a particular realization needs more
        # parameters, their values are specified by other keys in an inherited TypedDict.

        self.weight_option: WeightOption = options.weight
        self.request_option: RequestOption = options.request
        self.ranking_option: RankingOption = options.ranking
        self.piece_option: PieceOption = options.piece
        self.credit_option: CreditOption = options.credit

    @property
    def uses_weights(self) -> bool:
        """True if peers have private piece weights (FairE9 family)."""
        return self.weight_option["method"] != "None"

    @property
    def uses_credit(self) -> bool:
        """True if transfers are recorded in credit ledgers (eMule and BT)."""
        return self.credit_option["method"] != "None"

    def init_piece_weights(self, pieces_num: int, rng: "random.Random") -> List[int]:
        """
        This method creates the private piece weights of a peer.
        :param pieces_num: number of pieces.
        :param rng: random source.
        :return: 1-based list, element i is the weight of piece i. Empty if no weights are used.
        """
        if self.weight_option["method"] == "None":
            return []
        if self.weight_option["method"] == "Shuffle":
            return engine_candidates.shuffle_weights(pieces_num, rng)
        if self.weight_option["method"] == "Butterfly":
            return engine_candidates.butterfly_weights(pieces_num, rng)
        raise ValueError(
            f"No such option to set piece weights: {self.weight_option['method']}"
        )

    def send_requests(self, peer: "Peer", before_round: int) -> int:
        """
        This method lets a peer fill its pending request table.
        :param peer: the peer sending requests.
        :param before_round: the round when the pieces may be downloaded.
        :return: number of requests sent.
        """
        if self.request_option["method"] == "AnyPiece":
            return engine_candidates.send_requests_any_piece(peer, before_round)
        if self.request_option["method"] == "FairE9":
            return engine_candidates.send_requests_fair_e9(peer, before_round)
        raise ValueError(
            f"No such option to send requests: {self.request_option['method']}"
        )

    def should_evict_on_timeout(self) -> bool:
        """
        True if a known peer that let a request of ours time out is dropped from known peers.
        """
        if self.request_option["method"] == "FairE9":
            my_request_option: FairE9 = cast(FairE9, self.request_option)
            return my_request_option["evict_on_timeout"]
        return False

    def accept_weight(
        self, uploader: "Peer", requester: "Peer", piece: int, before_round: int
    ) -> int:
        """
        This method returns the weight given to an upload request when it is accepted.
        """
        if self.ranking_option["method"] == "BitTorrent":
            return 0
        if self.ranking_option["method"] == "Weight" and piece != 0:
            return engine_candidates.pair_weight(uploader, requester, piece)
        if self.ranking_option["method"] in ("Shuffle", "Weight", "EMule"):
            return before_round
        raise ValueError(
            f"No such option to rank requests: {self.ranking_option['method']}"
        )

    def rank_up_requests(
        self, uploader: "Peer", requests: List["UpRequest"], rng: "random.Random"
    ) -> None:
        """
        This method updates the weights of the requests and orders them in place, the first one
        to be served first.
        """
        if self.ranking_option["method"] == "Shuffle":
            engine_candidates.rank_shuffle(requests, rng)
        elif self.ranking_option["method"] == "Weight":
            engine_candidates.rank_by_weight(requests)
        elif self.ranking_option["method"] == "EMule":
            engine_candidates.rank_emule(uploader, requests)
        elif self.ranking_option["method"] == "BitTorrent":
            engine_candidates.rank_bittorrent(uploader, requests)
        else:
            raise ValueError(
                f"No such option to rank requests: {self.ranking_option['method']}"
            )

    def pick_piece(
        self, uploader: "Peer", downloader: "Peer", current_round: int, rng: "random.Random"
    ) -> int:
        """
        This method picks a piece that the uploader has (not downloaded in this round) and the
        downloader does not have.
        :return: piece serial number, or 0 if there is no such piece.
        """
        if self.piece_option["method"] == "Random":
            return engine_candidates.pick_piece_random(
                uploader, downloader, current_round, rng
            )
        if self.piece_option["method"] == "Lightest":
            return engine_candidates.pick_piece_lightest(
                uploader, downloader, current_round
            )
        raise ValueError(
            f"No such option to pick pieces: {self.piece_option['method']}"
        )

    def record_credit(self, giver: "Peer", receiver: "Peer") -> None:
        """
        This method records the credit of one transfer on both sides, if credit is used.
        """
        if self.credit_option["method"] == "None":
            return
        if self.credit_option["method"] == "Ledger":
            my_credit_option: Ledger = cast(Ledger, self.credit_option)
            engine_candidates.ledger_credit(
                giver, receiver, my_credit_option["credit_unit"]
            )
            return
        raise ValueError(
            f"No such option to record credit: {self.credit_option['method']}"
        )


def engine_options_for(strategy: Strategy) -> EngineOptions:
    """
    This function maps the name of a P2P system to its engine options.
    :param strategy: name of the P2P system.
    :return: the options.
    """
    if strategy == "RANDOM":
        return EngineOptions(
            weight=WeightOption(method="None"),
            request=RequestOption(method="AnyPiece"),
            ranking=RankingOption(method="Shuffle"),
            piece=PieceOption(method="Random"),
            credit=CreditOption(method="None"),
        )
    if strategy in ("FAIRE9", "FAIRE9PLUS", "FAIRE9BUTTERFLY"):
        return EngineOptions(
            weight=WeightOption(
                method="Butterfly" if strategy == "FAIRE9BUTTERFLY" else "Shuffle"
            ),
            request=FairE9(method="FairE9", evict_on_timeout=strategy == "FAIRE9PLUS"),
            ranking=RankingOption(method="Weight"),
            piece=PieceOption(method="Lightest"),
            credit=CreditOption(method="None"),
        )
    if strategy == "EMULE":
        return EngineOptions(
            weight=WeightOption(method="None"),
            request=RequestOption(method="AnyPiece"),
            ranking=RankingOption(method="EMule"),
            piece=PieceOption(method="Random"),
            credit=Ledger(method="Ledger", credit_unit=10),
        )
    if strategy == "BT":
        return EngineOptions(
            weight=WeightOption(method="None"),
            request=RequestOption(method="AnyPiece"),
            ranking=RankingOption(method="BitTorrent"),
            piece=PieceOption(method="Random"),
            credit=Ledger(method="Ledger", credit_unit=10),
        )
    raise ValueError(f"No such P2P system: {strategy}")
