import logging
import threading
from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, start_http_server

from .metrics import Metrics


logger = logging.getLogger(__name__)


class PrometheusExporter:
    def __init__(
        self,
        bloom,
        metrics: Metrics | None = None,
        port: int = 8000,
        registry: CollectorRegistry | None = None,
    ) -> None:
        self.bloom = bloom
        self.metrics = metrics
        self.port = port
        self.registry = registry if registry is not None else REGISTRY
        self._server_thread: threading.Thread | None = None
        self._stop_event = threading.Event()

        self.size_bits = Gauge('bloom_size_bits', 'Number of bits in the filter', registry=self.registry)
        self.hash_functions = Gauge('bloom_hash_functions', 'Bit probes per item', registry=self.registry)
        self.set_bits = Gauge('bloom_set_bits', 'Number of bits currently set', registry=self.registry)
        self.fill_ratio = Gauge('bloom_fill_ratio', 'Fraction of bits set', registry=self.registry)
        self.estimated_fpr = Gauge(
            'bloom_estimated_false_positive_rate',
            'False positive rate estimated from the fill ratio',
            registry=self.registry,
        )
        self.items = Gauge('bloom_items', 'Items counted as inserted', registry=self.registry)

        self.adds_total = Counter('bloom_adds_total', 'Total add calls', registry=self.registry)
        self.queries_total = Counter('bloom_queries_total', 'Total membership queries', registry=self.registry)
        self.positives_total = Counter(
            'bloom_query_positives_total', 'Queries answered possibly present', registry=self.registry
        )

        self._last_adds = 0
        self._last_queries = 0
        self._last_positives = 0

    def start(self) -> None:
        start_http_server(self.port, registry=self.registry)
        logger.info(f"Prometheus metrics server started on port {self.port}")

        self._server_thread = threading.Thread(
            target=self._update_metrics_loop,
            name="prometheus-updater",
            daemon=True
        )
        self._server_thread.start()

    def _update_metrics_loop(self) -> None:
        while not self._stop_event.is_set():
            self._update_metrics()
            self._stop_event.wait(5.0)

    def _update_metrics(self) -> None:
        stats = self.bloom.get_stats()
        self.size_bits.set(stats.size_bits)
        self.hash_functions.set(stats.num_hashes)
        self.set_bits.set(stats.set_bits)
        self.fill_ratio.set(stats.fill_ratio)
        self.estimated_fpr.set(stats.estimated_fpr)
        self.items.set(stats.items_added)

        if self.metrics is None:
            return
        totals, _ = self.metrics.snapshot()

        adds_delta = totals.adds - self._last_adds
        queries_delta = totals.queries - self._last_queries
        positives_delta = totals.positives - self._last_positives

        if adds_delta > 0:
            self.adds_total.inc(adds_delta)
        if queries_delta > 0:
            self.queries_total.inc(queries_delta)
        if positives_delta > 0:
            self.positives_total.inc(positives_delta)

        self._last_adds = totals.adds
        self._last_queries = totals.queries
        self._last_positives = totals.positives

    def stop(self) -> None:
        self._stop_event.set()
        if self._server_thread:
            self._server_thread.join(timeout=2.0)
