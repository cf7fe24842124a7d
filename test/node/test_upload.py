"""
This module contains test functions for upload() of a normal peer.
"""

import collections
import pytest
from data_types import Strategy
from ..__init__ import create_a_test_context, create_test_peers, give_pieces, set_weights


def test_upload__passes() -> None:
    """
    Slots left after the first pass are used for more pieces to the same requester.
    """
    # Arrange.
    context = create_a_test_context("RANDOM")
    uploader, requester = create_test_peers(context, 2, first_serial=2)
    give_pieces(uploader, [1, 2])
    requester.send_request(uploader.serial, 0, 1)

    # Act.
    result = uploader.upload(1)

    # Assert.
    assert result == 2
    assert requester.downloaded_pieces == {1: 1, 2: 1}
    assert requester.down_slots_occupied == 2
    assert not requester.down_pending
    assert list(requester.free_peers) == [uploader.serial]
    assert uploader.uploads == 2
    assert uploader.uploads_pieces == collections.Counter({1: 1, 2: 1})
    assert context.bitmap_exchanges == 2


def test_upload__no_pieces() -> None:
    # Arrange.
    context = create_a_test_context("RANDOM")
    uploader, requester = create_test_peers(context, 2, first_serial=2)
    requester.send_request(uploader.serial, 0, 1)

    # Act and Assert.
    assert uploader.upload(1) == 0
    assert uploader.uploads == 0


def test_upload__requester_not_waiting() -> None:
    """
    A request whose requester does not wait for this peer anymore is dropped.
    """
    # Arrange.
    context = create_a_test_context("RANDOM")
    uploader, requester = create_test_peers(context, 2, first_serial=2)
    give_pieces(uploader, [1])
    uploader.accept_request(requester.serial, 0, 1)

    # Act.
    result = uploader.upload(1)

    # Assert.
    assert result == 0
    assert not uploader.up_pending
    assert not requester.is_source


def test_upload__requester_busy() -> None:
    """
    A request whose requester has no free download slot waits for another round.
    """
    # Arrange.
    context = create_a_test_context("RANDOM")
    uploader, requester = create_test_peers(context, 2, first_serial=2)
    give_pieces(uploader, [1])
    requester.send_request(uploader.serial, 0, 1)
    requester.down_slots_occupied = requester.down_slots_max

    # Act.
    result = uploader.upload(1)

    # Assert.
    assert result == 0
    assert requester.serial in uploader.up_pending
    assert not requester.is_source


def test_upload__piece_in_progress() -> None:
    # Arrange.
    context = create_a_test_context("RANDOM")
    uploader, requester = create_test_peers(context, 2, first_serial=2)
    give_pieces(uploader, [1], 3)
    requester.send_request(uploader.serial, 0, 3)

    # Act.
    result = uploader.upload(3)

    # Assert.
    assert result == 0
    assert not requester.is_source


@pytest.mark.parametrize(
    "strategy, bitmap_exchanges", [("RANDOM", 1), ("EMULE", 1), ("FAIRE9", 2)]
)
def test_upload__nothing_to_give(strategy: Strategy, bitmap_exchanges: int) -> None:
    """
    Without weights, a first pass without uploads ends the uploads. With weights, a second pass is
    always tried.
    """
    # Arrange.
    context = create_a_test_context(strategy)
    uploader, requester = create_test_peers(context, 2, first_serial=2)
    give_pieces(uploader, [1])
    give_pieces(requester, [1])
    requester.send_request(uploader.serial, 0, 1)

    # Act.
    result = uploader.upload(1)

    # Assert.
    assert result == 0
    assert context.bitmap_exchanges == bitmap_exchanges


def test_upload__named_piece() -> None:
    # Arrange.
    context = create_a_test_context("FAIRE9")
    uploader, requester = create_test_peers(context, 2, first_serial=2, up_slots=1)
    set_weights(uploader, [3, 1, 2, 4, 5])
    give_pieces(uploader, [1, 2, 3])
    requester.send_request(uploader.serial, 2, 1)

    # Act.
    result = uploader.upload(1)

    # Assert.
    assert result == 1
    assert requester.downloaded_pieces == {2: 1}
    # uploads are counted by the weight of the piece
    assert uploader.uploads_pieces == collections.Counter({1: 1})
    assert context.bitmap_exchanges == 0


def test_upload__named_piece_missing() -> None:
    """
    If the requested piece is not there, the lightest piece for the requester is given instead.
    """
    # Arrange.
    context = create_a_test_context("FAIRE9")
    uploader, requester = create_test_peers(context, 2, first_serial=2, up_slots=1)
    set_weights(requester, [2, 5, 1, 3, 4])
    give_pieces(uploader, [1, 3])
    requester.send_request(uploader.serial, 2, 1)

    # Act.
    result = uploader.upload(1)

    # Assert.
    assert result == 1
    assert requester.downloaded_pieces == {3: 1}
    assert context.bitmap_exchanges == 1


def test_upload__ranking_by_weight() -> None:
    """
    The request for the piece that is light for both sides is served first.
    """
    # Arrange.
    context = create_a_test_context("FAIRE9")
    uploader, heavy, light = create_test_peers(context, 3, first_serial=2, up_slots=1)
    set_weights(uploader, [4, 1, 2, 3, 5])
    set_weights(heavy, [5, 4, 3, 2, 1])
    set_weights(light, [2, 1, 3, 4, 5])
    give_pieces(uploader, [1, 2])
    heavy.send_request(uploader.serial, 1, 1)
    light.send_request(uploader.serial, 2, 1)

    # Act.
    result = uploader.upload(1)

    # Assert.
    assert result == 1
    assert light.downloaded_pieces == {2: 1}
    assert not heavy.is_source


@pytest.mark.parametrize("strategy", ["EMULE", "BT"])
def test_upload__credit(strategy: Strategy) -> None:
    """
    With credit, both sides record the upload, and the requester becomes the first free peer of
    the uploader.
    """
    # Arrange.
    context = create_a_test_context(strategy)
    uploader, requester, other = create_test_peers(context, 3, first_serial=2)
    uploader.activate(1, [other.serial, requester.serial])
    give_pieces(uploader, [1])
    requester.send_request(uploader.serial, 0, 1)

    # Act.
    result = uploader.upload(1)

    # Assert.
    assert result == 1
    assert requester.credits_pos == {uploader.serial: 10}
    assert uploader.credits_neg == {requester.serial: 10}
    assert list(uploader.free_peers) == [requester.serial, other.serial]
