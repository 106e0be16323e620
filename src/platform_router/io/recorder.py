# platform_router/io/recorder.py
import json
import logging
import queue
import sys
import threading
from collections import Counter
from dataclasses import asdict
from typing import Protocol

from platform_router.io.result_events import ResultEvent, RouteComputed, RouteFailed

log = logging.getLogger(__name__)


class Sink(Protocol):
    def write(self, ev: ResultEvent) -> None: ...


class JsonlSink:
    """One JSON object per result, to a stream (stdout by default) or appended to a file."""

    def __init__(self, fp=None, path: str | None = None):
        self.fp, self.path = fp, path

    def write(self, ev: ResultEvent) -> None:
        line = json.dumps(asdict(ev), default=str) + "\n"
        if self.path is None:
            (self.fp or sys.stdout).write(line)
            return
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line)


class MemorySink:
    def __init__(self):
        self.events: list[ResultEvent] = []

    def write(self, ev: ResultEvent) -> None:
        self.events.append(ev)

    @property
    def computed(self) -> list[RouteComputed]:
        return [e for e in self.events if isinstance(e, RouteComputed)]

    @property
    def failed(self) -> list[RouteFailed]:
        return [e for e in self.events if isinstance(e, RouteFailed)]


class FilteredSink:
    """Passes on only results of the given event types, e.g. failures to their own file."""

    def __init__(self, sink: Sink, *event_types: type[ResultEvent]):
        self.sink, self.event_types = sink, event_types

    def write(self, ev: ResultEvent) -> None:
        if isinstance(ev, self.event_types):
            self.sink.write(ev)


# Async sink (non-blocking, drops on overflow)
class AsyncSink:
    def __init__(self, sink: Sink, maxsize: int = 1000):
        self.sink, self.q = sink, queue.Queue(maxsize=maxsize)
        self._stop = threading.Event()
        self._t = threading.Thread(target=self._run, name="result-sink", daemon=True)
        self._t.start()
        self.dropped = 0

    def write(self, ev: ResultEvent) -> None:
        try:
            self.q.put_nowait(ev)
        except queue.Full:
            self.dropped += 1
            log.warning("result sink full, dropped %s for run %s", ev.name, ev.run_id)

    def _run(self):
        while not (self._stop.is_set() and self.q.empty()):
            try:
                ev = self.q.get(timeout=0.1)
            except queue.Empty:
                continue
            try:
                self.sink.write(ev)
            except Exception:
                log.exception("async sink failed to write %s", ev.name)

    def stop(self):
        self._stop.set()
        self._t.join(timeout=1.0)


class Recorder:
    """Fans each routing result out to every sink and counts results by event name."""

    def __init__(self, *sinks: Sink):
        self.sinks = sinks or (JsonlSink(),)
        self.counts: Counter[str] = Counter()

    def emit(self, ev: ResultEvent):
        self.counts[ev.name] += 1
        for s in self.sinks:
            try:
                s.write(ev)
            except Exception:
                # a failing sink must not fail the route
                log.exception("sink %s failed to write %s", type(s).__name__, ev.name)
