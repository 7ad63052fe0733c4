"""
scheduler.py - Run a sync job now and then on a fixed interval

Ticks fire on a fixed wall-clock grid (start, start + interval, ...) no
matter how long a cycle takes. Each tick hands the job to a worker
thread; if the previous cycle is still running the tick is skipped and
logged, never queued.

Ctrl+C stops the timer loop and waits for a cycle in progress to finish.
"""

from __future__ import annotations

import threading
import time
from datetime import datetime
from typing import Any, Callable, List, Optional

from rostersync.errors import RosterSyncError
from rostersync.icons import CLOCK, SKIP, STOP, SYNC, log, log_error


class SyncScheduler:
    def __init__(
        self,
        job: Callable[[], Any],
        interval_seconds: float,
        name: str = "sync",
        log_prefix: str = "schedule",
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.job = job
        self.interval = float(interval_seconds)
        self.name = name
        self.log_prefix = log_prefix

        self._lock = threading.Lock()
        self._busy = False
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._workers: List[threading.Thread] = []

        self.runs = 0
        self.skipped = 0
        self.failures = 0

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._busy

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._stop.is_set()

    def run_once(self) -> bool:
        """
        Run the job unless a cycle is already in progress.

        Returns False when the call was skipped. Exceptions from the job
        are logged and swallowed so the schedule keeps going.
        """
        with self._lock:
            if self._busy:
                self.skipped += 1
                print(log(SKIP, f"Previous {self.name} cycle still running, skipping this tick", self.log_prefix))
                return False
            self._busy = True
            self.runs += 1

        try:
            self.job()
        except Exception as e:
            self.failures += 1
            detail = e.short() if isinstance(e, RosterSyncError) else f"{type(e).__name__}: {e}"
            print(log_error(f"{self.name} cycle failed: {detail}", self.log_prefix))
        finally:
            with self._lock:
                self._busy = False
        return True

    def tick(self) -> threading.Thread:
        """Dispatch one cycle to a worker thread."""
        print()
        print(log(CLOCK, f"{self.name} triggered at {datetime.now():%H:%M:%S}", self.log_prefix))
        self._workers = [w for w in self._workers if w.is_alive()]
        worker = threading.Thread(target=self.run_once, name=f"{self.name}-cycle", daemon=True)
        self._workers.append(worker)
        worker.start()
        return worker

    def _loop(self):
        next_at = time.monotonic() + self.interval
        while not self._stop.wait(max(0.0, next_at - time.monotonic())):
            self.tick()
            next_at += self.interval
            # Fell behind (suspended laptop, etc.): skip to the next grid point
            now = time.monotonic()
            if next_at < now:
                next_at += ((now - next_at) // self.interval + 1) * self.interval

    def start(self) -> None:
        """Run one cycle immediately, then one per interval."""
        if self._thread is not None:
            return
        minutes = self.interval / 60
        print(log(SYNC, f"Starting {self.name} every {minutes:g} minutes...", self.log_prefix))
        self._stop.clear()
        self.tick()
        self._thread = threading.Thread(target=self._loop, name=f"{self.name}-timer", daemon=True)
        self._thread.start()

    def stop(self, wait: bool = True, timeout: Optional[float] = None) -> None:
        """Cancel future ticks; optionally wait for an in-flight cycle."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        if wait:
            for worker in self._workers:
                worker.join(timeout)
        self._workers = [w for w in self._workers if w.is_alive()]

    def run_forever(self) -> None:
        """Start and block until interrupted."""
        self.start()
        try:
            while not self._stop.wait(1):
                pass
        except KeyboardInterrupt:
            print()
            print(log(STOP, f"Stopping {self.name}...", self.log_prefix))
            if self.busy:
                print(log(CLOCK, "Waiting for the current cycle to finish (Ctrl+C again to quit now)", self.log_prefix))
        finally:
            try:
                self.stop(wait=True)
            except KeyboardInterrupt:
                print(log(STOP, f"{self.name} stopped without waiting for the current cycle", self.log_prefix))
