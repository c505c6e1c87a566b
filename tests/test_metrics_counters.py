import pytest

from Teskilat import metrics
from Teskilat.simulation import ReferenceIntegrityError, import_document


def test_reset_counters_clears_everything():
    metrics.inc_counter("example")
    metrics.observe_histogram("latency", 42)

    metrics.reset_counters()

    assert metrics.get_counter("example") == 0
    assert metrics.get_counters() == {}


def test_observe_histogram_overflow_bucket():
    metrics.observe_histogram("latency", 10_000, buckets=[1, 5, 10])

    counters = metrics.get_counters()
    assert counters["histo.latency.gt_10"] == 1
    assert counters["histo.latency.sum"] == 10_000
    assert counters["histo.latency.count"] == 1


def test_observe_histogram_default_buckets():
    metrics.observe_histogram("latency", 3)
    metrics.observe_histogram("latency", 5)
    counters = metrics.get_counters()
    assert counters["histo.latency.le_5"] == 2
    assert counters["histo.latency.count"] == 2


@pytest.mark.asyncio
async def test_import_counters_track_outcomes(case_document):
    await import_document(case_document)
    with pytest.raises(ReferenceIntegrityError):
        await import_document({"people": [{"_ref": "x"}, {"_ref": "x"}]})

    assert metrics.get_counter("simulation.import.requested") == 2
    assert metrics.get_counter("simulation.import.committed") == 1
    assert metrics.get_counter("simulation.import.rejected.integrity") == 1
    assert metrics.get_counter("simulation.import.rows.people") == 2
    assert metrics.get_counter("simulation.import.rows.events") == 2
