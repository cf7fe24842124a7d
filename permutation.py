"""
This module contains functions that generate piece permutations. A permutation gives every peer
a private order of pieces, from the lightest (weight 1) to the heaviest (weight P).

All permutations are 1-based lists: the element at index 0 is a placeholder and should be
skipped, and element i is the weight of piece i.
"""

import random
from typing import List


def generate_permutation(pieces_num: int, seed: int) -> List[int]:
    """
    This function generates a butterfly permutation over pieces 1..pieces_num out of a seed.
    The index range is rearranged recursively. On every range [from, to] the lowest unused bit of
    the seed decides whether the elements at even or at odd offsets are interleaved to the front of
    the range, then the left half and the right half are processed with the remaining bits (the left
    half consumes its bits first). Seeds that differ in their low bits diverge near the root, so
    peers with different seeds get structurally different orders.
    Same pieces_num and seed always give the same permutation.

    >>> generate_permutation(4, 0)[1:]
    [1, 3, 2, 4]
    >>> generate_permutation(4, 1)[1:]
    [2, 4, 1, 3]

    :param pieces_num: number of pieces.
    :param seed: non-negative integer. Only the lowest pieces_num - 1 bits are ever used.
    :return: 1-based permutation list.
    """

    if pieces_num < 0:
        raise ValueError("Number of pieces cannot be negative.")

    # index 0 is occupied so that the list is 1-based
    permutation: List[int] = list(range(pieces_num + 1))
    _rearrange(permutation, 1, pieces_num, seed)
    return permutation


def _rearrange(permutation: List[int], first: int, last: int, seed_remainder: int) -> int:
    """
    Recursive helper of generate_permutation(). Rearranges permutation[first..last] in place.
    :return: the bits of the seed that were not used.
    """

    if last <= first:
        return seed_remainder

    even_left: bool = (seed_remainder & 1) == 0
    next_remainder: int = seed_remainder >> 1

    middle: int = first + (last - first) // 2
    if even_left:
        # the first element is already in place
        for i in range(1, (last - first) // 2 + 1):
            element = permutation.pop(first + i * 2)
            permutation.insert(first + i, element)
    else:
        # here the first element has to move as well
        for i in range(1, (last - first + 1) // 2 + 1):
            element = permutation.pop(first + i * 2 - 1)
            permutation.insert(first + i - 1, element)

    next_remainder = _rearrange(permutation, first, middle, next_remainder)
    next_remainder = _rearrange(permutation, middle + 1, last, next_remainder)

    return next_remainder


def butterfly_permutation(pieces_num: int, rng: random.Random) -> List[int]:
    """
    This function draws a random seed and returns its butterfly permutation.
    """
    return generate_permutation(pieces_num, rng.getrandbits(pieces_num))


def random_permutation(pieces_num: int, rng: random.Random) -> List[int]:
    """
    This function returns a uniformly random permutation, built inside-out: piece i takes a
    random position in 1..i, and the piece that held that position (if any) moves to position i.
    :return: 1-based permutation list.
    """
    permutation: List[int] = [0] * (pieces_num + 1)
    for i in range(1, pieces_num + 1):
        position = rng.randrange(i) + 1
        if position == i:
            permutation[i] = i
        else:
            permutation[i] = permutation[position]
            permutation[position] = i
    return permutation


def invert_permutation(permutation: List[int]) -> List[int]:
    """
    This function inverts a 1-based permutation. If permutation[i] == w then result[w] == i,
    i.e., the result maps a weight to the piece that has that weight.

    >>> invert_permutation([0, 1, 3, 2, 4])
    [0, 1, 3, 2, 4]
    >>> invert_permutation([0, 2, 4, 1, 3])
    [0, 3, 1, 4, 2]
    """
    inverse: List[int] = [0] * len(permutation)
    for piece in range(1, len(permutation)):
        inverse[permutation[piece]] = piece
    return inverse
