"""Farm shop metrics using only the Python standard library.

Counters, gauges and histograms are registered in a module level
registry and exported in the Prometheus text exposition format by
:func:`generate_metrics_text`.  The farm records stock movements and
checkout outcomes here; nothing in the shop reads them back.
"""

from collections import defaultdict
from threading import Lock
from typing import Dict, Iterable, List, Tuple

LabelValues = Tuple[str, ...]


class Metric:
    """Base class for all metrics."""

    kind = "untyped"

    def __init__(self, name: str, description: str, label_names: Iterable[str]):
        self.name = name
        self.description = description
        self.label_names = list(label_names)
        self._lock = Lock()
        _METRIC_REGISTRY.append(self)

    def _label_tuple(self, labels: Dict[str, str]) -> LabelValues:
        return tuple(str(labels.get(k, "")) for k in self.label_names)

    def _format_labels(self, label_values: LabelValues, extra: str = "") -> str:
        pairs = [f'{name}="{value}"' for name, value in zip(self.label_names, label_values)]
        if extra:
            pairs.append(extra)
        if not pairs:
            return ""
        return "{" + ",".join(pairs) + "}"

    def _header(self) -> List[str]:
        return [f"# HELP {self.name} {self.description}", f"# TYPE {self.name} {self.kind}"]

    def to_prometheus(self) -> List[str]:
        """Return a list of strings in Prometheus exposition format."""
        raise NotImplementedError

    def clear(self) -> None:
        """Drop every recorded sample."""
        raise NotImplementedError


class Counter(Metric):
    """Monotonic counter.

    ``PRODUCTS_SOLD_TOTAL.inc(3, barcode="EGG")``
    """

    kind = "counter"

    def __init__(self, name: str, description: str, label_names: Iterable[str]):
        super().__init__(name, description, label_names)
        self._values: Dict[LabelValues, int] = defaultdict(int)

    def inc(self, amount: int = 1, **labels: str) -> None:
        if amount < 0:
            raise ValueError("Counters can only increase")
        with self._lock:
            self._values[self._label_tuple(labels)] += amount

    def value(self, **labels: str) -> int:
        with self._lock:
            return self._values.get(self._label_tuple(labels), 0)

    def clear(self) -> None:
        with self._lock:
            self._values.clear()

    def to_prometheus(self) -> List[str]:
        lines = self._header()
        with self._lock:
            for label_values, value in self._values.items():
                lines.append(f"{self.name}{self._format_labels(label_values)} {value}")
        return lines


class Gauge(Metric):
    """A value that may go up or down."""

    kind = "gauge"

    def __init__(self, name: str, description: str, label_names: Iterable[str]):
        super().__init__(name, description, label_names)
        self._values: Dict[LabelValues, float] = {}

    def set(self, value: float, **labels: str) -> None:
        with self._lock:
            self._values[self._label_tuple(labels)] = float(value)

    def inc(self, amount: float = 1.0, **labels: str) -> None:
        label_tuple = self._label_tuple(labels)
        with self._lock:
            self._values[label_tuple] = self._values.get(label_tuple, 0.0) + amount

    def dec(self, amount: float = 1.0, **labels: str) -> None:
        self.inc(-amount, **labels)

    def value(self, **labels: str) -> float:
        with self._lock:
            return self._values.get(self._label_tuple(labels), 0.0)

    def clear(self) -> None:
        with self._lock:
            self._values.clear()

    def to_prometheus(self) -> List[str]:
        lines = self._header()
        with self._lock:
            for label_values, value in self._values.items():
                lines.append(f"{self.name}{self._format_labels(label_values)} {value}")
        return lines


class Histogram(Metric):
    """Histogram with fixed, ascending bucket upper bounds.

    Observations above the largest bound only show up in the ``+Inf``
    bucket.
    """

    kind = "histogram"

    def __init__(self, name: str, description: str, label_names: Iterable[str], buckets: Iterable[float]):
        super().__init__(name, description, label_names)
        self.buckets = sorted(float(b) for b in buckets)
        # non-cumulative counts per bucket; made cumulative on export
        self.counts: Dict[LabelValues, List[int]] = defaultdict(lambda: [0] * len(self.buckets))
        self.sums: Dict[LabelValues, float] = defaultdict(float)
        self.total_counts: Dict[LabelValues, int] = defaultdict(int)

    def observe(self, value: float, **labels: str) -> None:
        label_tuple = self._label_tuple(labels)
        with self._lock:
            for idx, upper in enumerate(self.buckets):
                if value <= upper:
                    self.counts[label_tuple][idx] += 1
                    break
            self.total_counts[label_tuple] += 1
            self.sums[label_tuple] += float(value)

    def count(self, **labels: str) -> int:
        with self._lock:
            return self.total_counts.get(self._label_tuple(labels), 0)

    def clear(self) -> None:
        with self._lock:
            self.counts.clear()
            self.sums.clear()
            self.total_counts.clear()

    def to_prometheus(self) -> List[str]:
        lines = self._header()
        with self._lock:
            for label_values, total in self.total_counts.items():
                cumulative = 0
                for idx, upper in enumerate(self.buckets):
                    cumulative += self.counts[label_values][idx]
                    bucket_labels = self._format_labels(label_values, f'le="{upper}"')
                    lines.append(f"{self.name}_bucket{bucket_labels} {cumulative}")
                inf_labels = self._format_labels(label_values, 'le="+Inf"')
                lines.append(f"{self.name}_bucket{inf_labels} {total}")
                label_str = self._format_labels(label_values)
                lines.append(f"{self.name}_sum{label_str} {self.sums[label_values]}")
                lines.append(f"{self.name}_count{label_str} {total}")
        return lines


_METRIC_REGISTRY: List[Metric] = []


def generate_metrics_text() -> bytes:
    """Generate the text representation of all registered metrics."""
    lines: List[str] = []
    for metric in _METRIC_REGISTRY:
        lines.extend(metric.to_prometheus())
    return "\n".join(lines).encode("utf-8")


def reset_metrics() -> None:
    """Clear every registered metric (used between test cases)."""
    for metric in _METRIC_REGISTRY:
        metric.clear()


# -----------------------------------------------------------------------------
# Metrics recorded by the farm.  Label values are barcode names (``EGG``).
# -----------------------------------------------------------------------------

PRODUCTS_STOCKED_TOTAL = Counter(
    name="farm_products_stocked_total",
    description="Units of stock added to the inventory",
    label_names=["barcode"],
)

PRODUCTS_SOLD_TOTAL = Counter(
    name="farm_products_sold_total",
    description="Units sold through recorded transactions",
    label_names=["barcode"],
)

STOCK_LEVEL = Gauge(
    name="farm_stock_level",
    description="Units currently held in the inventory",
    label_names=["barcode"],
)

CHECKOUTS_TOTAL = Counter(
    name="farm_checkouts_total",
    description="Checkouts, labelled by outcome (recorded or empty)",
    label_names=["outcome"],
)

CHECKOUT_TOTAL_CENTS = Histogram(
    name="farm_checkout_total_cents",
    description="Total charged per recorded transaction, in cents",
    label_names=["kind"],
    buckets=[100, 500, 1000, 2500, 5000, 10000, 25000],
)

REJECTED_OPERATIONS_TOTAL = Counter(
    name="farm_rejected_operations_total",
    description="Farm operations rejected with an error, labelled by error type",
    label_names=["type"],
)
