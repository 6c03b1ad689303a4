import threading
import time
from dataclasses import dataclass


@dataclass
class Totals:
    adds: int = 0
    inserted: int = 0
    queries: int = 0
    positives: int = 0


class Metrics:
    def __init__(self):
        self._totals = Totals()
        self._lock = threading.Lock()
        self._start = time.time()

    def record_add(self, inserted: bool) -> None:
        with self._lock:
            self._totals.adds += 1
            if inserted:
                self._totals.inserted += 1

    def record_query(self, found: bool) -> None:
        with self._lock:
            self._totals.queries += 1
            if found:
                self._totals.positives += 1

    def snapshot(self) -> tuple[Totals, float]:
        with self._lock:
            t = Totals(
                adds=self._totals.adds,
                inserted=self._totals.inserted,
                queries=self._totals.queries,
                positives=self._totals.positives,
            )
        elapsed = max(1e-6, time.time() - self._start)
        return t, elapsed


class StatsLogger(threading.Thread):
    daemon = True

    def __init__(self, bloom, interval_s: float, log_fn, metrics: Metrics | None = None):
        super().__init__(name="stats-logger")
        self._bloom = bloom
        self._metrics = metrics
        self._interval = max(0.5, interval_s)
        self._log = log_fn
        self._stop_event = threading.Event()

    def log_once(self) -> None:
        stats = self._bloom.get_stats()
        if self._metrics is None:
            adds = queries = positives = 0
        else:
            totals, _ = self._metrics.snapshot()
            adds, queries, positives = totals.adds, totals.queries, totals.positives
        self._log(
            "Bloom: items=%d, set_bits=%d/%d, fill=%.4f, est_fpr=%.6f, adds=%d, queries=%d, positives=%d",
            stats.items_added,
            stats.set_bits,
            stats.size_bits,
            stats.fill_ratio,
            stats.estimated_fpr,
            adds,
            queries,
            positives,
        )

    def run(self) -> None:
        while not self._stop_event.is_set():
            self._stop_event.wait(self._interval)
            if self._stop_event.is_set():
                break
            self.log_once()

    def stop(self) -> None:
        self._stop_event.set()
