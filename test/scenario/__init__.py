"""
This module contains unit tests of the Scenario class.
"""

from typing import Dict
from node import Peer
from ..__init__ import create_a_test_context, create_initial_source, create_test_peers


def create_swarm_peers(peers_num: int, **kwargs) -> Dict[int, Peer]:
    """
    This function creates the initial source and peers_num - 1 normal peers, and returns the
    mapping of all of them by serial number.
    """
    context = create_a_test_context("RANDOM")
    create_initial_source(context)
    create_test_peers(context, peers_num - 1, **kwargs)
    return context.peers
