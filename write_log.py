"""
This module contains functions that write logs.
"""
import csv
from typing import List
from data_types import RoundStatistics, RunSummary

ROUND_HEADER = [
    "Round",
    "Seconds",
    "Progress",
    "Peers",
    "Seeds",
    "Sources",
    "Requests",
    "Uploads",
    "Exchanges",
    "Known",
    "Up-pending",
    "Min-piece",
]

SUMMARY_HEADER = [
    "Rounds",
    "Latency",
    "Latency stdev",
    "Up stdev",
    "Up max",
    "Up uniq",
    "Req spec",
    "Req any",
    "Bitmaps",
]


def round_header(behind_gaps: List[int]) -> List[str]:
    return ROUND_HEADER + [f"Behind-{gap}" for gap in behind_gaps]


def round_row(statistics: RoundStatistics) -> List[str]:
    return [
        str(statistics.round),
        str(statistics.seconds),
        f"{statistics.progress:.2f}",
        str(statistics.peers),
        str(statistics.seeders),
        str(statistics.sources),
        str(statistics.requests),
        str(statistics.uploads),
        str(statistics.exchanges),
        f"{statistics.known_average:.1f}",
        f"{statistics.up_pending_average:.1f}",
        str(statistics.pieces_min),
    ] + [str(behind) for behind in statistics.behind]


def summary_row(summary: RunSummary) -> List[str]:
    return [
        str(summary.rounds),
        f"{summary.latency_average:.2f}",
        f"{summary.latency_stdev:.2f}",
        f"{summary.uploads_stdev:.2f}",
        str(summary.uploads_max),
        f"{summary.uploads_distinct_average:.2f}",
        str(summary.requests_specific_piece),
        str(summary.requests_any_piece),
        str(summary.bitmap_exchanges),
    ]


def round_log(
    file_name: str, statistics_list: List[RoundStatistics], behind_gaps: List[int]
) -> None:
    """
    This function writes the per-round table into a CSV file, one line per round.
    """
    with open(file_name, "w", newline="") as file:
        writer = csv.writer(file)
        writer.writerow(round_header(behind_gaps))
        for statistics in statistics_list:
            writer.writerow(round_row(statistics))


def summary_log(file_name: str, summary: RunSummary) -> None:
    """
    This function appends the summary of a run into a CSV file, so that runs can be compared.
    """
    with open(file_name, "a", newline="") as file:
        writer = csv.writer(file)
        writer.writerow(summary_row(summary))
