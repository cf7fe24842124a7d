"""
This module contains test functions for accept_request().
"""

from ..__init__ import create_a_test_context, create_test_peers, set_weights


def test_accept_request__new() -> None:
    """
    A new request is added with its weight, and the requester is learnt.
    """
    # Arrange.
    context = create_a_test_context("FAIRE9")
    uploader, requester = create_test_peers(context, 2, first_serial=2)
    set_weights(uploader, [2, 1, 3, 4, 5])
    set_weights(requester, [4, 5, 3, 1, 2])

    # Act.
    uploader.accept_request(requester.serial, 2, 7)

    # Assert.
    request = uploader.up_pending[requester.serial]
    assert (request.requester, request.piece, request.weight, request.before_round) == (
        requester.serial,
        2,
        1 + 5,
        7,
    )
    assert requester.serial in uploader.known_peers
    assert uploader.known_peers[requester.serial] == 7


def test_accept_request__same_piece() -> None:
    """
    A request for the same piece does not replace the former one.
    """
    # Arrange.
    context = create_a_test_context("RANDOM")
    uploader, requester = create_test_peers(context, 2, first_serial=2)
    uploader.accept_request(requester.serial, 0, 3)

    # Act.
    uploader.accept_request(requester.serial, 0, 9)

    # Assert.
    assert uploader.up_pending[requester.serial].before_round == 3
    assert uploader.up_pending[requester.serial].weight == 3


def test_accept_request__other_piece() -> None:
    """
    A request for another piece replaces the former one, and keeps its place in the order.
    """
    # Arrange.
    context = create_a_test_context("FAIRE9")
    uploader, first, second = create_test_peers(context, 3, first_serial=2)
    uploader.accept_request(first.serial, 1, 3)
    uploader.accept_request(second.serial, 1, 3)

    # Act.
    uploader.accept_request(first.serial, 2, 4)

    # Assert.
    assert list(uploader.up_pending) == [first.serial, second.serial]
    assert uploader.up_pending[first.serial].piece == 2
    assert uploader.up_pending[first.serial].before_round == 4


def test_accept_request__bittorrent() -> None:
    # Arrange.
    context = create_a_test_context("BT")
    uploader, requester = create_test_peers(context, 2, first_serial=2)

    # Act.
    uploader.accept_request(requester.serial, 0, 6)

    # Assert.
    assert uploader.up_pending[requester.serial].weight == 0
