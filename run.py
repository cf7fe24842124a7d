"""
This is the single main file that runs the simulator.
"""

import logging
import random
import data_processing
import example
import plot
import write_log
from scenario import REFERENCE_PEER_SERIAL
from single_run import SingleRun

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s"
    )

    for my_scenario in example.SCENARIOS:
        for my_engine in example.ENGINES:
            for my_performance in example.PERFORMANCES:
                single_run = SingleRun(
                    scenario=my_scenario,
                    engine=my_engine,
                    performance=my_performance,
                    rng=random.Random(example.SEED),
                )
                summary = single_run.single_run_execution()

                print("\t".join(write_log.round_header(my_performance.behind_gaps)))
                for statistics in single_run.round_statistics:
                    print("\t".join(write_log.round_row(statistics)))

                print()
                print("\t".join(write_log.SUMMARY_HEADER))
                print("\t".join(write_log.summary_row(summary)))

                print("\nUploads by Position\n===================")
                print(data_processing.format_counter(summary.uploads_by_position))

                if (
                    my_scenario.special_peers is not None
                    and my_scenario.special_peers.count > 0
                ):
                    kind = my_scenario.special_peers.kind
                    factor_summaries = my_performance.special_peers_summary(
                        list(single_run.context.peers.values()),
                        kind,
                        single_run.context.peers[REFERENCE_PEER_SERIAL],
                    )
                    print(f"\nSpecial peers, {kind}")
                    print("================================")
                    print("Factor\tPeers\tLatency sum\tLatency\tUploads sum\tUploads")
                    for item in factor_summaries:
                        print(
                            f"{item.factor:.2f}\t{item.peers}\t{item.latency_sum}\t"
                            f"{item.latency_average:.2f}\t{item.uploads_sum}\t"
                            f"{item.uploads_average:.2f}"
                        )

                write_log.round_log(
                    "round_logs.csv",
                    single_run.round_statistics,
                    my_performance.behind_gaps,
                )
                write_log.summary_log("summary_logs.csv", summary)

                plot.plot_progress(single_run.round_statistics)
                plot.plot_uploads_by_position(summary.uploads_by_position)
