"""Prometheus text-format metrics.

Counter, Gauge and Histogram types plus a labeled counter family, collected in
a ``MetricsRegistry`` that renders the exposition format for ``/metrics``.
"""

from dataclasses import dataclass, field


def _escape_label(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


@dataclass
class Counter:
    """Monotonically increasing counter."""

    name: str
    help: str
    _value: float = field(default=0, init=False, repr=False)

    @property
    def value(self) -> float:
        return self._value

    def inc(self, amount: float = 1) -> None:
        if amount < 0:
            raise ValueError("Counter cannot decrease")
        self._value += amount

    def format(self) -> str:
        return (
            f"# HELP {self.name} {self.help}\n"
            f"# TYPE {self.name} counter\n"
            f"{self.name} {self._value}"
        )


@dataclass
class LabeledCounter:
    """Counter family keyed by one label (e.g. ``intent``)."""

    name: str
    help: str
    label: str
    _values: dict[str, float] = field(default_factory=dict, init=False, repr=False)

    def inc(self, label_value: str, amount: float = 1) -> None:
        if amount < 0:
            raise ValueError("Counter cannot decrease")
        self._values[label_value] = self._values.get(label_value, 0) + amount

    def value(self, label_value: str) -> float:
        return self._values.get(label_value, 0)

    @property
    def values(self) -> dict[str, float]:
        return dict(self._values)

    def format(self) -> str:
        lines = [
            f"# HELP {self.name} {self.help}",
            f"# TYPE {self.name} counter",
        ]
        for key in sorted(self._values):
            lines.append(f'{self.name}{{{self.label}="{_escape_label(key)}"}} {self._values[key]}')
        return "\n".join(lines)


@dataclass
class Gauge:
    """Value that can go up and down."""

    name: str
    help: str
    _value: float = field(default=0, init=False, repr=False)

    @property
    def value(self) -> float:
        return self._value

    def set(self, val: float) -> None:
        self._value = val

    def inc(self, amount: float = 1) -> None:
        self._value += amount

    def dec(self, amount: float = 1) -> None:
        self._value -= amount

    def format(self) -> str:
        return (
            f"# HELP {self.name} {self.help}\n"
            f"# TYPE {self.name} gauge\n"
            f"{self.name} {self._value}"
        )


@dataclass
class Histogram:
    """Observation histogram; bucket counts are cumulative on output."""

    name: str
    help: str
    buckets: list[float] = field(default_factory=lambda: [1, 5, 10, 25, 50, 100, 250, 500, 1000, 5000])
    _counts: dict[float, int] = field(default_factory=dict, init=False, repr=False)
    _count: int = field(default=0, init=False, repr=False)
    _total: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self) -> None:
        self.buckets = sorted(self.buckets)
        self._counts = {b: 0 for b in self.buckets}

    @property
    def count(self) -> int:
        return self._count

    @property
    def total(self) -> float:
        return self._total

    @property
    def mean(self) -> float:
        return self._total / self._count if self._count else 0.0

    def observe(self, value: float) -> None:
        self._count += 1
        self._total += value
        for b in self.buckets:
            if value <= b:
                self._counts[b] += 1
                break

    def format(self) -> str:
        lines = [
            f"# HELP {self.name} {self.help}",
            f"# TYPE {self.name} histogram",
        ]
        cumulative = 0
        for b in self.buckets:
            cumulative += self._counts[b]
            lines.append(f'{self.name}_bucket{{le="{b}"}} {cumulative}')
        lines.append(f'{self.name}_bucket{{le="+Inf"}} {self._count}')
        lines.append(f"{self.name}_sum {self._total}")
        lines.append(f"{self.name}_count {self._count}")
        return "\n".join(lines)


Metric = Counter | LabeledCounter | Gauge | Histogram


class MetricsRegistry:
    """Get-or-create registry; names are unique across metric types."""

    def __init__(self) -> None:
        self._metrics: dict[str, Metric] = {}

    def _get(self, name: str, kind: type) -> Metric | None:
        existing = self._metrics.get(name)
        if existing is not None and not isinstance(existing, kind):
            raise TypeError(f"metric {name!r} already registered as {type(existing).__name__}")
        return existing

    def counter(self, name: str, help_text: str) -> Counter:
        existing = self._get(name, Counter)
        if existing is not None:
            return existing  # type: ignore[return-value]
        c = Counter(name, help_text)
        self._metrics[name] = c
        return c

    def labeled_counter(self, name: str, help_text: str, label: str) -> LabeledCounter:
        existing = self._get(name, LabeledCounter)
        if existing is not None:
            return existing  # type: ignore[return-value]
        c = LabeledCounter(name, help_text, label)
        self._metrics[name] = c
        return c

    def gauge(self, name: str, help_text: str) -> Gauge:
        existing = self._get(name, Gauge)
        if existing is not None:
            return existing  # type: ignore[return-value]
        g = Gauge(name, help_text)
        self._metrics[name] = g
        return g

    def histogram(
        self, name: str, help_text: str, buckets: list[float] | None = None
    ) -> Histogram:
        existing = self._get(name, Histogram)
        if existing is not None:
            return existing  # type: ignore[return-value]
        h = Histogram(name, help_text, buckets=buckets) if buckets else Histogram(name, help_text)
        self._metrics[name] = h
        return h

    def names(self) -> list[str]:
        return list(self._metrics)

    def format_all(self) -> str:
        return "\n\n".join(m.format() for m in self._metrics.values())
