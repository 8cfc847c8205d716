"""Scheduling of conversions with bounded concurrency."""

from __future__ import annotations

import logging
import threading


class RoundRobin:
    """Runs scheduled conversions, at most *concurrency* of them at a time."""

    def __init__(self, concurrency, processor, logger=None):
        if concurrency < 1:
            raise ValueError("concurrency must be greater than zero")
        self.concurrency = concurrency
        self.processor = processor
        self.logger = logger or logging.getLogger(__name__)
        self._slots = threading.BoundedSemaphore(concurrency)
        self._threads = []
        self._lock = threading.Lock()

    def schedule(self, job):
        """Queue *job*; it starts as soon as a slot is free."""
        thread = threading.Thread(target=self._run, args=(job,), daemon=True)
        with self._lock:
            self._threads.append(thread)
        thread.start()

    def _run(self, job):
        with self._slots:
            self.logger.info("starting file=%s", job.input_file)
            try:
                for _ in self.processor.process(job.input_file):
                    pass
            except Exception as exc:
                self.logger.error("error while converting file=%s err=%s", job.input_file, exc)

    def wait(self):
        """Block until every scheduled conversion has finished."""
        with self._lock:
            threads = list(self._threads)
        for thread in threads:
            thread.join()
        with self._lock:
            self._threads = [t for t in self._threads if t.is_alive()]