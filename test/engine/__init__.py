"""
This __init__.py file contains helpers for the engine tests.
"""

from message import UpRequest


def create_up_requests(*requests) -> list:
    """
    This function creates a list of upload requests out of (requester, piece, weight, round)
    tuples.
    """
    return [
        UpRequest(requester=requester, piece=piece, weight=weight, before_round=before_round)
        for requester, piece, weight, before_round in requests
    ]
