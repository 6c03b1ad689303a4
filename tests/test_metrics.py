from bloomlib.bloom_filter import BloomFilter
from bloomlib.metrics import Metrics, StatsLogger


def test_metrics_records_operations():
    m = Metrics()

    m.record_add(inserted=True)
    m.record_query(found=False)
    totals, elapsed = m.snapshot()

    assert totals.adds == 1
    assert totals.inserted == 1
    assert totals.queries == 1
    assert totals.positives == 0
    assert elapsed > 0

    m.record_add(inserted=False)
    m.record_query(found=True)
    totals, _ = m.snapshot()

    assert totals.adds == 2
    assert totals.inserted == 1
    assert totals.queries == 2
    assert totals.positives == 1


def test_stats_logger_reports_filter_state():
    lines = []

    def log(fmt, *args):
        lines.append(fmt % args)

    m = Metrics()
    bf = BloomFilter(100, 0.01, metrics=m)
    bf.add("a")
    bf.contains("a")

    logger = StatsLogger(bf, 10.0, log, metrics=m)
    logger.log_once()

    assert len(lines) == 1
    assert "items=1" in lines[0]
    assert f"/{bf.bit_count}" in lines[0]
    assert "adds=1" in lines[0]
    assert "queries=1" in lines[0]


def test_stats_logger_stops():
    bf = BloomFilter(100, 0.01)
    logger = StatsLogger(bf, 0.5, lambda *a: None)
    logger.start()
    logger.stop()
    logger.join(timeout=2.0)
    assert not logger.is_alive()


def test_stats_logger_join_after_stop_reports_not_alive():
    bf = BloomFilter(100, 0.01)
    logger = StatsLogger(bf, 0.5, lambda *a: None)
    logger.start()
    assert logger.is_alive()
    logger.stop()
    logger.join(timeout=2.0)
    logger.join()
    assert not logger.is_alive()
