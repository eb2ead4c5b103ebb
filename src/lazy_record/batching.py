"""
Batch scheduler for lazy records.

Every cache miss of a record lands in the currently open batch. The first
miss of a window schedules one flush with ``loop.call_soon``, so all
accesses made before control returns to the event loop share a single
loader call. The flush opens a fresh batch and clears the scheduled flag
before the loader runs, which lets a second batch accumulate (and flush)
while the first loader call is still in flight.
"""

import asyncio
from collections import Counter
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
import inspect
import logging
from types import MappingProxyType
from typing import Any

from lazy_record.errors import LoaderContractError
from lazy_record.metrics import MetricsCollector, RecordStats, get_metrics_collector
from lazy_record.utils.logging_config import PerformanceMonitor

logger = logging.getLogger(__name__)

Loader = Callable[
    [Mapping[str, Any], tuple[str, ...]], Awaitable[Mapping[str, Any] | None]
]


@dataclass
class Waiter:
    """Completion handle for one deferred access."""

    key: str
    future: asyncio.Future

    def resolve(self, value: Any) -> None:
        # A caller may have cancelled its own future; the rest of the batch
        # still settles.
        if not self.future.done():
            self.future.set_result(value)

    def reject(self, error: BaseException) -> None:
        if not self.future.done():
            self.future.set_exception(error)


@dataclass
class Batch:
    """Keys and waiters accumulated during one scheduling window."""

    keys: dict[str, None] = field(default_factory=dict)
    waiters: list[Waiter] = field(default_factory=list)

    def add(self, waiter: Waiter) -> None:
        self.keys.setdefault(waiter.key, None)
        self.waiters.append(waiter)

    @property
    def ordered_keys(self) -> tuple[str, ...]:
        """Requested keys, de-duplicated, in first-request order."""
        return tuple(self.keys)

    def __len__(self) -> int:
        return len(self.waiters)


class BatchScheduler:
    """
    Accumulate missing keys of one record and flush them through its loader.

    The scheduler is the only writer of the record's backing dict: values
    returned by the loader are merged in :meth:`_merge` before any waiter of
    the batch is resolved.
    """

    def __init__(
        self,
        data: dict[str, Any],
        loader: Loader,
        name: str,
        stats: RecordStats | None = None,
        metrics: MetricsCollector | None = None,
    ):
        """
        Initialize the scheduler.

        Args:
            data: Backing dict of the record, owned by the caller
            loader: Async loader called with (record view, keys)
            name: Label used in logs and metrics
            stats: Per-record counters to update
            metrics: Collector to report flushes to (default: global)
        """
        self._data = data
        self._view = MappingProxyType(data)
        self._loader = loader
        self.name = name
        self.stats = stats if stats is not None else RecordStats()
        self._metrics = metrics if metrics is not None else get_metrics_collector()
        self._batch = Batch()
        self.flush_scheduled = False
        self._in_flight: set[asyncio.Task] = set()
        self._loading: Counter[str] = Counter()

    @property
    def pending_keys(self) -> tuple[str, ...]:
        """Keys in the batch that is currently open for accumulation."""
        return self._batch.ordered_keys

    def is_pending(self, key: str) -> bool:
        """Whether ``key`` is queued in the open batch or awaiting a loader call."""
        return key in self._batch.keys or self._loading[key] > 0

    @property
    def in_flight(self) -> int:
        """Number of loader calls that have started but not settled."""
        return len(self._in_flight)

    def enqueue(self, key: str) -> asyncio.Future:
        """
        Register a deferred access of ``key`` in the open batch.

        Returns:
            Future settled when the batch holding this access is flushed

        Raises:
            RuntimeError: If no event loop is running
        """
        loop = asyncio.get_running_loop()
        waiter = Waiter(key=key, future=loop.create_future())
        self._batch.add(waiter)
        self.request_flush(loop)
        return waiter.future

    def request_flush(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Schedule a flush unless one is already scheduled."""
        if self.flush_scheduled:
            return

        loop = loop or asyncio.get_running_loop()
        self.flush_scheduled = True
        loop.call_soon(self.flush)

    def flush(self) -> None:
        """Snapshot the open batch and hand its keys to the loader."""
        batch, self._batch = self._batch, Batch()
        self.flush_scheduled = False

        if not batch.waiters:
            return

        keys = batch.ordered_keys
        self.stats.loader_calls += 1
        self.stats.keys_requested += len(keys)
        logger.debug(
            f"Flushing {len(keys)} key(s) for {self.name} "
            f"({len(batch)} waiter(s)): {list(keys)}"
        )

        try:
            pending = self._loader(self._view, keys)
        except Exception as e:
            error = LoaderContractError(
                "load function raised instead of returning an awaitable",
                keys=keys,
            )
            error.__cause__ = e
            self._fail(batch, error, duration_ms=0)
            return

        if not inspect.isawaitable(pending):
            self._fail(
                batch,
                LoaderContractError(
                    "load function must return an awaitable, "
                    f"got {type(pending).__name__}",
                    keys=keys,
                ),
                duration_ms=0,
            )
            return

        self._loading.update(keys)
        task = asyncio.ensure_future(self._settle(batch, pending))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _settle(self, batch: Batch, pending: Awaitable[Any]) -> None:
        keys = batch.ordered_keys
        monitor = PerformanceMonitor(logger, f"Loader {self.name}", keys=len(keys))

        try:
            with monitor:
                result = await pending
        except asyncio.CancelledError:
            self._release(keys)
            for waiter in batch.waiters:
                waiter.future.cancel()
            raise
        except Exception as e:
            self._release(keys)
            self._fail(batch, e, duration_ms=monitor.elapsed_ms)
            return

        self._release(keys)
        self._complete(batch, result, duration_ms=monitor.elapsed_ms)

    def _complete(self, batch: Batch, result: Any, duration_ms: float) -> None:
        keys = batch.ordered_keys

        if result is None:
            result = {}

        if not isinstance(result, Mapping):
            self._fail(
                batch,
                LoaderContractError(
                    "load function must resolve to a mapping, "
                    f"got {type(result).__name__}",
                    keys=keys,
                ),
                duration_ms=duration_ms,
            )
            return

        try:
            values = dict(result)
        except Exception as e:
            error = LoaderContractError(
                "load function must resolve to a mapping", keys=keys
            )
            error.__cause__ = e
            self._fail(batch, error, duration_ms=duration_ms)
            return

        self._merge(values)
        self._metrics.record_flush(self.name, len(keys), duration_ms, True)

        missing = [key for key in keys if key not in self._data]
        if missing:
            logger.debug(f"Loader {self.name} did not return {missing}")

        for waiter in batch.waiters:
            waiter.resolve(self._data.get(waiter.key))

    def _merge(self, values: Mapping[str, Any]) -> None:
        self._data.update(values)

    def _release(self, keys: tuple[str, ...]) -> None:
        for key in keys:
            self._loading[key] -= 1
            if self._loading[key] <= 0:
                del self._loading[key]

    def _fail(self, batch: Batch, error: BaseException, duration_ms: float) -> None:
        keys = batch.ordered_keys
        self.stats.failures += 1
        self._metrics.record_flush(self.name, len(keys), duration_ms, False)
        logger.warning(
            f"Loader {self.name} failed for {list(keys)}: "
            f"{type(error).__name__}: {error}"
        )

        for waiter in batch.waiters:
            waiter.reject(error)
