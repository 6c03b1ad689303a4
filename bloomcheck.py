#!/usr/bin/env python3
import argparse
import logging
from pathlib import Path
from typing import Iterator, List, Optional

from bloomlib.bloom_filter import BloomFilter
from bloomlib.config import MAX_EXPECTED_ITEMS, TARGET_FPR
from bloomlib.metrics import Metrics, StatsLogger
from bloomlib.prometheus_exporter import PrometheusExporter
from bloomlib.types import InvalidParameter


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Build a Bloom filter from items and query membership.")
    parser.add_argument("--capacity", type=int, default=MAX_EXPECTED_ITEMS, help="Expected number of items.")
    rate = parser.add_mutually_exclusive_group()
    rate.add_argument("--error-rate", type=float, default=None, help=f"False positive rate in (0, 1]. Default {TARGET_FPR}.")
    rate.add_argument("--one-in", type=int, default=None, help="False positive rate as 1-in-N, e.g. 100.")
    parser.add_argument("--add", nargs="+", default=[], help="Items to insert.")
    parser.add_argument("--add-file", default=None, help="File with one item per line to insert.")
    parser.add_argument("--query", nargs="+", default=[], help="Items to look up.")
    parser.add_argument("--query-file", default=None, help="File with one item per line to look up.")
    parser.add_argument("--no-dup-check", action="store_true", help="Count every add, even for items already present.")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase logging verbosity.")
    parser.add_argument("--metrics-interval", type=float, default=0.0, help="Seconds between stats logs (0 to disable).")
    parser.add_argument("--prometheus-port", type=int, default=0, help="Port for Prometheus metrics endpoint (0 to disable).")
    return parser


def read_items(path: str) -> Iterator[str]:
    with Path(path).open("r", encoding="utf-8") as f:
        for line in f:
            line = line.rstrip("\r\n")
            if line:
                yield line


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    log_level = logging.WARNING
    if args.verbose == 1:
        log_level = logging.INFO
    elif args.verbose >= 2:
        log_level = logging.DEBUG
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(threadName)s %(message)s",
    )

    if args.one_in is not None:
        rate, one_in_n = args.one_in, True
    else:
        rate, one_in_n = (args.error_rate if args.error_rate is not None else TARGET_FPR), False

    metrics = Metrics()
    try:
        bloom = BloomFilter(
            args.capacity,
            rate,
            one_in_n=one_in_n,
            metrics=metrics,
            dup_check=not args.no_dup_check,
        )
    except InvalidParameter as e:
        parser.error(str(e))

    exporter = None
    if args.prometheus_port:
        exporter = PrometheusExporter(bloom, metrics=metrics, port=args.prometheus_port)
        exporter.start()
        logging.info(f"Prometheus metrics available at http://0.0.0.0:{args.prometheus_port}/metrics")

    stats_thread = None
    if args.metrics_interval > 0:
        stats_thread = StatsLogger(bloom, args.metrics_interval, logging.info, metrics=metrics)
        stats_thread.start()

    try:
        bloom.add_batch(args.add)
        if args.add_file:
            bloom.add_batch(read_items(args.add_file))

        queries = list(args.query)
        if args.query_file:
            queries.extend(read_items(args.query_file))
        for item in queries:
            verdict = "maybe" if bloom.contains(item) else "no"
            print(f"{verdict}\t{item}")

        stats = bloom.get_stats()
        logging.info(
            "Finished. m=%d, k=%d, items=%d, fill=%.4f, est_fpr=%.6f",
            stats.size_bits,
            stats.num_hashes,
            stats.items_added,
            stats.fill_ratio,
            stats.estimated_fpr,
        )
    finally:
        if stats_thread:
            stats_thread.stop()
        if exporter:
            exporter.stop()


if __name__ == "__main__":
    main()
