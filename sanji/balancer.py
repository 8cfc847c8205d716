"""Least-loaded dispatch of progress-monitoring work to a pool of workers."""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

log = logging.getLogger(__name__)

_STOP = object()


@dataclass(frozen=True)
class Request:
    """Work for a worker: *fn* opens a stream that is consumed until it ends."""

    fn: Callable[[], Optional[Iterable]]


class Worker:
    """Consumes one request at a time and reports back when each ends."""

    def __init__(self, index):
        self.index = index
        self.pending = 0
        self.requests = queue.Queue(maxsize=1)

    def work(self, done):
        """Serve requests until ``None`` arrives, putting self on *done* after each."""
        for request in iter(self.requests.get, None):
            try:
                stream = request.fn()
                if stream is not None:
                    for _ in stream:
                        pass
            except Exception as exc:
                log.debug("worker %d: stream ended: %s", self.index, exc)
            done.put(self)


class LoadBalancer:
    """Sends each request to the worker with the fewest pending requests."""

    def __init__(self, num_workers):
        if num_workers < 1:
            raise ValueError("a load balancer needs at least one worker")
        self._events = queue.Queue()
        self.pool = []
        for index in range(num_workers):
            worker = Worker(index)
            threading.Thread(
                target=worker.work,
                args=(self._events,),
                name=f"worker-{index}",
                daemon=True,
            ).start()
            self.pool.append(worker)
            log.info("spawned worker index=%d", index)

    def balance(self, work):
        """Dispatch requests taken from the queue *work*.

        A ``None`` on *work* ends balancing once all dispatched requests have
        completed; the workers are then stopped.
        """
        threading.Thread(target=self._forward, args=(work,), daemon=True).start()
        stopping = False
        while not (stopping and all(w.pending == 0 for w in self.pool)):
            event = self._events.get()
            if event is _STOP:
                stopping = True
            elif isinstance(event, Worker):
                self._completed(event)
            else:
                self._dispatch(event)
        for worker in self.pool:
            worker.requests.put(None)

    def _forward(self, work):
        for request in iter(work.get, None):
            self._events.put(request)
        self._events.put(_STOP)

    def _dispatch(self, request):
        worker = min(self.pool, key=lambda w: (w.pending, w.index))
        worker.requests.put(request)
        worker.pending += 1
        log.info("dispatched work worker=%d pending=%d", worker.index, worker.pending)

    def _completed(self, worker):
        worker.pending -= 1
        log.info("completed work worker=%d pending=%d", worker.index, worker.pending)