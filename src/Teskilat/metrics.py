"""In-process counters and latency histograms for import and wipe runs.

Everything lives in module state and is flattened to ``name -> int`` for the
/metrics endpoint. Histogram buckets are ``le_<bound>`` plus one ``gt_<last>``
overflow bucket, alongside ``sum`` and ``count``.
"""

from __future__ import annotations

from collections import Counter

DEFAULT_BUCKETS_MS: tuple[int, ...] = (1, 2, 5, 10, 20, 50, 100, 250, 500, 1000, 2000, 5000)

_counters: Counter[str] = Counter()
_histograms: dict[str, Counter[str]] = {}


def inc_counter(name: str, value: int = 1) -> None:
    _counters[name] += int(value)


def get_counter(name: str) -> int:
    return _counters.get(name, 0)


def reset_counters() -> None:
    _counters.clear()
    _histograms.clear()


def _bucket_label(value: int, buckets: tuple[int, ...] | list[int]) -> str:
    for bound in buckets:
        if value <= bound:
            return f"le_{bound}"
    return f"gt_{buckets[-1]}"


def observe_histogram(
    name: str, value: int, *, buckets: tuple[int, ...] | list[int] | None = None
) -> None:
    """Record one observation (milliseconds) in histogram ``name``."""
    h = _histograms.setdefault(name, Counter())
    h[_bucket_label(value, buckets or DEFAULT_BUCKETS_MS)] += 1
    h["sum"] += int(value)
    h["count"] += 1


def get_counters() -> dict[str, int]:
    """Return a flat snapshot of counters and histogram buckets."""
    out = dict(_counters)
    for name, h in _histograms.items():
        for label, n in h.items():
            out[f"histo.{name}.{label}"] = n
    return out
