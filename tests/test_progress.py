import threading

import pytest

from arcadedex.data_types import SourceType
from arcadedex.progress import (
    BatchReporter,
    ProgressInfo,
    ProgressKind,
    ProgressMultiplexer,
    error,
    info,
)


@pytest.mark.unit
def test_batch_reporter_reports_every_tenth(events):
    reporter = BatchReporter(events.append, total=100)
    for _ in range(100):
        reporter.advance()
    reporter.finish("done")

    progress = [e for e in events if e.kind is ProgressKind.PROGRESS]
    assert [e.processed for e in progress] == list(range(10, 101, 10))
    assert events[-1] == ProgressInfo(100, 100, "done", ProgressKind.FINISH)


@pytest.mark.unit
def test_batch_reporter_small_total(events):
    reporter = BatchReporter(events.append, total=3)
    reporter.advance(3)
    reporter.finish("done")

    assert [e.processed for e in events if e.kind is ProgressKind.PROGRESS] == [1, 2, 3]


@pytest.mark.unit
def test_batch_reporter_unknown_total(events):
    reporter = BatchReporter(events.append, total=0)
    reporter.advance(5)
    reporter.finish("done")

    assert len(events) == 1
    assert events[0].processed == events[0].total == 5


@pytest.mark.unit
def test_event_builders():
    assert info("hello").kind is ProgressKind.INFO
    failure = error("boom")
    assert failure.kind is ProgressKind.ERROR
    assert (failure.processed, failure.total, failure.source) == (0, 0, None)


@pytest.mark.unit
def test_multiplexer_tags_events_with_source(events):
    with ProgressMultiplexer(events.append) as multiplexer:
        multiplexer.for_source(SourceType.MAME)(info("reading mame"))
        multiplexer.for_source(SourceType.CATVER)(info("reading catver"))

    assert [(e.source, e.message) for e in events] == [
        (SourceType.MAME, "reading mame"),
        (SourceType.CATVER, "reading catver"),
    ]


@pytest.mark.unit
def test_multiplexer_keeps_per_source_order_across_threads(events):
    sources = [SourceType.MAME, SourceType.HISTORY, SourceType.SERIES]

    with ProgressMultiplexer(events.append) as multiplexer:
        def produce(source):
            callback = multiplexer.for_source(source)
            reporter = BatchReporter(callback, total=50)
            for _ in range(50):
                reporter.advance()
            reporter.finish(f"{source.value} done")

        threads = [threading.Thread(target=produce, args=(s,)) for s in sources]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

    for source in sources:
        own = [e for e in events if e.source is source]
        processed = [e.processed for e in own]
        assert processed == sorted(processed)
        assert own[-1].kind is ProgressKind.FINISH
        assert own[-1].processed == own[-1].total == 50


@pytest.mark.unit
def test_multiplexer_survives_sink_errors():
    delivered = []

    def sink(progress_info):
        if progress_info.message == "bad":
            raise RuntimeError("sink failure")
        delivered.append(progress_info.message)

    multiplexer = ProgressMultiplexer(sink)
    multiplexer.start()
    callback = multiplexer.for_source(SourceType.MAME)
    callback(info("first"))
    callback(info("bad"))
    callback(info("last"))
    multiplexer.stop()

    assert delivered == ["first", "last"]
    stats = multiplexer.get_stats()
    assert stats["events_delivered"] == 3
    assert stats["errors"] == 1
