# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Scan orchestration for build log timings.

ScanController runs one scan at a time using two threads:
- a worker thread that performs the full-text pass over the log, and
- a coordinator thread that owns the scan state, reacts to ticker events
  and delivers every progress callback.

The worker hands its result to the coordinator through a per-scan queue
and never touches controller state; ticks are posted into the same queue,
so snapshots and completion are serialized on the coordinator.
"""

import logging
import queue
import threading
from datetime import datetime
from typing import Any, Callable, Optional

from buildtime.measure.grouper import build_snapshot
from buildtime.measure.models import RawMeasure, ScanResult, ScanState
from buildtime.measure.reader import collect_raw_measures
from buildtime.scan.config import ScanConfig
from buildtime.scan.supplier import TextSupplier
from buildtime.scan.ticker import IntervalTicker, Ticker

logger = logging.getLogger(__name__)

UpdateHandler = Callable[[ScanResult], None]

# Events posted to the coordinator queue
_TICK = "tick"
_FINISHED = "finished"
_FAILED = "failed"


class ScanInProgressError(RuntimeError):
    """Raised when a scan is requested while another one is running."""


class ScanController:
    """
    Drives one end-to-end scan of a build log.

    Progress callbacks receive a ScanResult whose measures are ranked by
    time. Periodic snapshots carry did_complete=False; exactly one final
    callback per scan carries did_complete=True and is always the last.

    Example:
        >>> controller = ScanController(LogFileSupplier("build.log"))
        >>> result = controller.run("MyApp")
        >>> for measure in result.results[:10]:
        ...     print(measure.time_string, measure.file_and_line)
    """

    def __init__(
        self,
        supplier: TextSupplier,
        ticker: Optional[Ticker] = None,
        config: Optional[ScanConfig] = None,
    ) -> None:
        """
        Args:
            supplier: Source of the log text
            ticker: Periodic snapshot trigger (default: IntervalTicker
                at config.interval)
            config: Scan configuration (default: ScanConfig())
        """
        self.config = config or ScanConfig()
        self._supplier = supplier
        self._ticker = ticker or IntervalTicker(self.config.interval)

        self._lock = threading.Lock()
        self._in_progress = False
        self._scanning = False
        self._cancel_requested = threading.Event()
        self._snapshot_pending = threading.Event()
        self._unprocessed: list[RawMeasure] = []
        self._events: "queue.Queue[tuple[str, Any]]" = queue.Queue()
        self._coordinator: Optional[threading.Thread] = None
        self._last_error: Optional[BaseException] = None

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested.is_set()

    @property
    def last_error(self) -> Optional[BaseException]:
        """Supplier or worker failure of the most recent scan, if any."""
        return self._last_error

    @property
    def state(self) -> ScanState:
        return ScanState(
            unprocessed=tuple(self._unprocessed),
            cancel_requested=self.cancel_requested,
            in_progress=self._in_progress,
        )

    def process(
        self,
        product_name: str,
        build_completion_date: Optional[datetime] = None,
        update_handler: Optional[UpdateHandler] = None,
    ) -> None:
        """
        Start scanning the log for a product without blocking.

        Args:
            product_name: Build artifact identifier passed to the supplier
            build_completion_date: Optional completion time of the build
            update_handler: Called with every ScanResult

        Raises:
            ScanInProgressError: If a scan is already in progress
        """
        with self._lock:
            if self._in_progress:
                raise ScanInProgressError(
                    "A scan is already in progress. "
                    "Cancel it or wait for it to complete first."
                )
            self._in_progress = True
            self._last_error = None

        self._coordinator = threading.Thread(
            target=self._coordinate,
            args=(product_name, build_completion_date, update_handler),
            name="buildtime-coordinator",
            daemon=True,
        )
        self._coordinator.start()

    def cancel(self) -> None:
        """
        Request the running scan to stop.

        The worker stops after the next matched timing line; the final
        callback is still delivered with whatever has accumulated.

        The flag is cleared when a scan starts, so a cancel issued after
        process() returns but before the coordinator has started the
        worker is lost. Callers that must stop such a scan should call
        cancel() again until wait() succeeds, as the scan CLI does.
        """
        logger.debug("Scan cancellation requested")
        self._cancel_requested.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the current scan has delivered its final callback.

        Returns:
            True if no scan is in progress anymore
        """
        coordinator = self._coordinator
        if coordinator is not None:
            coordinator.join(timeout)
            return not coordinator.is_alive()
        return True

    def run(
        self,
        product_name: str,
        build_completion_date: Optional[datetime] = None,
        update_handler: Optional[UpdateHandler] = None,
    ) -> ScanResult:
        """
        Scan the log for a product and block until complete.

        Raises:
            ScanInProgressError: If a scan is already in progress
            Exception: Whatever the supplier or the worker raised, after the
                final callback has been delivered
        """
        final: list[ScanResult] = []

        def on_update(result: ScanResult) -> None:
            if result.did_complete:
                final.append(result)
            if update_handler is not None:
                update_handler(result)

        self.process(product_name, build_completion_date, on_update)
        self.wait()

        if self._last_error is not None:
            raise self._last_error
        return final[-1]

    # Coordinator thread

    def _coordinate(
        self,
        product_name: str,
        build_completion_date: Optional[datetime],
        update_handler: Optional[UpdateHandler],
    ) -> None:
        try:
            try:
                text = self._supplier.log_text(product_name, build_completion_date)
            except Exception as e:
                logger.error("Failed to read log text for %s: %s", product_name, e)
                self._last_error = e
                text = None

            if text is None:
                logger.info("No log text available for %s", product_name)
                self._deliver(update_handler, ScanResult([], did_complete=True))
                return

            self._scan(text, update_handler)
        finally:
            if self._scanning:
                self._ticker.stop()
                self._scanning = False
            with self._lock:
                self._in_progress = False

    def _scan(self, text: str, update_handler: Optional[UpdateHandler]) -> None:
        events: "queue.Queue[tuple[str, Any]]" = queue.Queue()
        self._events = events
        self._processing_did_start()

        worker = threading.Thread(
            target=self._scan_text,
            args=(text, events),
            name="buildtime-scanner",
            daemon=True,
        )
        worker.start()

        while True:
            event, payload = events.get()
            if event == _TICK:
                self._update_results(update_handler, did_complete=False)
                self._snapshot_pending.clear()
            elif event == _FINISHED:
                self._unprocessed = payload
                break
            elif event == _FAILED:
                logger.error("Log scan failed: %s", payload)
                self._last_error = payload
                break

        worker.join()
        self._processing_did_finish(update_handler)

    def _processing_did_start(self) -> None:
        self._unprocessed = []
        self._cancel_requested.clear()
        self._snapshot_pending.clear()
        self._scanning = True
        logger.info("Scan started")
        self._ticker.start(self._request_snapshot)

    def _processing_did_finish(self, update_handler: Optional[UpdateHandler]) -> None:
        self._ticker.stop()
        self._scanning = False
        self._cancel_requested.clear()
        self._update_results(update_handler, did_complete=True)
        logger.info("Scan finished with %d raw measures", len(self._unprocessed))
        self._unprocessed = []

    def _update_results(
        self, update_handler: Optional[UpdateHandler], did_complete: bool
    ) -> None:
        results = build_snapshot(self._unprocessed, self.config.prefixes)
        self._deliver(update_handler, ScanResult(results, did_complete=did_complete))

    def _deliver(
        self, update_handler: Optional[UpdateHandler], result: ScanResult
    ) -> None:
        if update_handler is None:
            return
        # Handler failures are logged and the scan carries on
        try:
            update_handler(result)
        except Exception:
            logger.exception(
                "Update handler raised on %s snapshot",
                "final" if result.did_complete else "periodic",
            )

    # Ticker thread

    def _request_snapshot(self) -> None:
        if not self._scanning:
            return
        if self._snapshot_pending.is_set():
            logger.debug("Skipping tick, previous snapshot not delivered yet")
            return
        self._snapshot_pending.set()
        self._events.put((_TICK, None))

    # Worker thread

    def _scan_text(self, text: str, events: "queue.Queue[tuple[str, Any]]") -> None:
        try:
            measures = collect_raw_measures(
                text,
                threshold=self.config.threshold,
                should_cancel=self._cancel_requested.is_set,
            )
        except Exception as e:
            events.put((_FAILED, e))
            return
        events.put((_FINISHED, measures))
