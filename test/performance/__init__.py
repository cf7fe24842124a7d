"""
This module contains unit tests of the Performance class.
"""
