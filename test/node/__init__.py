"""
This module contains unit tests of the Peer class, one test module per method.
"""
