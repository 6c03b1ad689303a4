from prometheus_client import CollectorRegistry

from bloomlib.bloom_filter import BloomFilter
from bloomlib.metrics import Metrics
from bloomlib.prometheus_exporter import PrometheusExporter


def test_exporter_publishes_filter_gauges():
    registry = CollectorRegistry()
    bf = BloomFilter(1000, 0.01)
    exporter = PrometheusExporter(bf, registry=registry)

    bf.add("hello")
    exporter._update_metrics()

    stats = bf.get_stats()
    assert registry.get_sample_value("bloom_size_bits") == bf.bit_count
    assert registry.get_sample_value("bloom_hash_functions") == bf.hash_count
    assert registry.get_sample_value("bloom_set_bits") == stats.set_bits
    assert registry.get_sample_value("bloom_fill_ratio") == stats.fill_ratio
    assert registry.get_sample_value("bloom_items") == 1


def test_exporter_counters_follow_metrics_deltas():
    registry = CollectorRegistry()
    m = Metrics()
    bf = BloomFilter(1000, 0.01, metrics=m)
    exporter = PrometheusExporter(bf, metrics=m, registry=registry)

    bf.add("a")
    bf.add("b")
    bf.contains("a")
    exporter._update_metrics()
    assert registry.get_sample_value("bloom_adds_total") == 2
    assert registry.get_sample_value("bloom_queries_total") == 1
    assert registry.get_sample_value("bloom_query_positives_total") == 1

    bf.contains("a")
    exporter._update_metrics()
    exporter._update_metrics()
    assert registry.get_sample_value("bloom_adds_total") == 2
    assert registry.get_sample_value("bloom_queries_total") == 2
    assert registry.get_sample_value("bloom_query_positives_total") == 2


def test_two_exporters_with_separate_registries():
    bf = BloomFilter(100, 0.01)
    PrometheusExporter(bf, registry=CollectorRegistry())
    PrometheusExporter(bf, registry=CollectorRegistry())
