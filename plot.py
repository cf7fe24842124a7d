"""
This module contains the functions that plot the performance results.
"""

from typing import Counter, List
import matplotlib.pyplot as plt
from data_types import RoundStatistics, InvalidInputError


def plot_progress(statistics_list: List[RoundStatistics]) -> None:
    """
    This method plots the completion percentage and the share of seeders among active peers, per
    round.
    :param statistics_list: statistics of all rounds of a run.
    :return: None.
    """
    if not statistics_list:
        raise InvalidInputError("No round to plot.")

    rounds = [statistics.round for statistics in statistics_list]
    progress = [statistics.progress for statistics in statistics_list]
    seeders = [
        statistics.seeders * 100 / statistics.peers if statistics.peers else 0.0
        for statistics in statistics_list
    ]

    plt.plot(rounds, progress)
    plt.plot(rounds, seeders)

    plt.legend(["completion", "seeders"], loc="upper left")
    plt.xlabel("round")
    plt.ylabel("percents")
    plt.show()


def plot_uploads_by_position(uploads_by_position: Counter[int]) -> None:
    """
    This method plots how many uploads were done for each piece, or for each weight in FairE9
    systems.
    :param uploads_by_position: number of uploads by piece (or by weight).
    :return: None.
    """
    if not uploads_by_position:
        raise InvalidInputError("No uploads to plot.")

    positions = sorted(uploads_by_position)
    plt.bar(positions, [uploads_by_position[position] for position in positions])
    plt.xlabel("position")
    plt.ylabel("uploads")
    plt.show()
