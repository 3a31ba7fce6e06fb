# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Periodic triggers for scan snapshots.

ScanController starts its ticker when a scan begins and stops it as soon
as the scan finishes; every tick requests one snapshot.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

logger = logging.getLogger(__name__)

# Default snapshot cadence in seconds
DEFAULT_INTERVAL = 1.0


class Ticker(ABC):
    """Periodic trigger with an explicit start/stop lifecycle."""

    @abstractmethod
    def start(self, on_tick: Callable[[], None]) -> None:
        """Begin calling on_tick periodically."""

    @abstractmethod
    def stop(self) -> None:
        """Stop calling on_tick. Safe to call when not started."""


class IntervalTicker(Ticker):
    """
    Ticker firing from a daemon thread at a fixed interval.

    Example:
        >>> ticker = IntervalTicker(0.5)
        >>> ticker.start(lambda: print("tick"))
        >>> ticker.stop()
    """

    def __init__(self, interval: float = DEFAULT_INTERVAL) -> None:
        """
        Args:
            interval: Seconds between ticks

        Raises:
            ValueError: If interval is not positive
        """
        if interval <= 0:
            raise ValueError(f"Tick interval must be positive, got {interval}")

        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, on_tick: Callable[[], None]) -> None:
        if self.running:
            raise RuntimeError("Ticker is already running")

        stop_event = threading.Event()
        self._stop_event = stop_event
        self._thread = threading.Thread(
            target=self._tick_loop,
            args=(on_tick, stop_event),
            name="buildtime-ticker",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        thread = self._thread
        self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval + 1)
            if thread.is_alive():
                logger.warning("Ticker thread did not exit cleanly")

    def _tick_loop(
        self, on_tick: Callable[[], None], stop_event: threading.Event
    ) -> None:
        while not stop_event.wait(self.interval):
            on_tick()
