"""
Lazy records: partially populated mappings whose missing keys are fetched
in batches by an async loader.
"""

import asyncio
from collections.abc import Iterable, Iterator, Mapping
from enum import Enum
import inspect
from types import MappingProxyType
from typing import Any

from lazy_record.batching import BatchScheduler, Loader
from lazy_record.metrics import MetricsCollector, RecordStats


class KeyState(str, Enum):
    """Load state of a single key of a record."""

    UNLOADED = "unloaded"
    PENDING = "pending"
    LOADED = "loaded"
    BLOCKED = "blocked"


async def resolve(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


class LazyRecord:
    """
    A record whose missing keys are loaded on first access.

    Reading a key that is already present returns its value synchronously.
    Reading a missing key returns an :class:`asyncio.Future`; every miss
    issued before control returns to the event loop is sent to the loader
    in one call, and all of those futures settle together once the loader
    finishes. Loaded values are merged into the record and never requested
    again.

    Keys can be read with ``record.get(key)``, ``record[key]`` or
    ``record.key``. Attribute access cannot reach keys that collide with
    the record's own attributes (``get``, ``data``, ``stats``, ``label``...);
    use ``record[key]`` for those.

    Warning:
        Without an ``allow_list`` *every* missing key is loadable, including
        names that introspection tools probe with ``getattr`` (for example
        ``__wrapped__`` or ``_repr_html_``). Such probes schedule real loader
        calls and get a future back. Pass an ``allow_list`` when the record
        is handed to code you don't control. ``repr()`` never loads.

    Example:
        >>> async def load_todo(record, keys):
        ...     return await api.todo(record["id"])
        >>> todo = LazyRecord({"id": 1}, load_todo)
        >>> title = await todo.title
    """

    __slots__ = ("_data", "_allowed", "_scheduler", "allow_list", "label")

    def __init__(
        self,
        initial: Mapping[str, Any] | None,
        loader: Loader,
        allow_list: Iterable[str] | None = None,
        *,
        name: str | None = None,
        metrics: MetricsCollector | None = None,
    ):
        """
        Initialize a lazy record.

        Args:
            initial: Values known up front; copied, never mutated
            loader: Async callable receiving (record view, requested keys)
                and resolving to a mapping of loaded values
            allow_list: If given, only these missing keys may ever be loaded;
                any other missing key reads as None
            name: Label for logs and metrics (default: loader's qualname)
            metrics: Collector for flush metrics (default: global)
        """
        if not callable(loader):
            raise TypeError(f"loader must be callable, got {type(loader).__name__}")

        self._data: dict[str, Any] = dict(initial or {})
        self.allow_list: tuple[str, ...] | None = (
            tuple(allow_list) if allow_list is not None else None
        )
        self._allowed = (
            frozenset(self.allow_list) if self.allow_list is not None else None
        )
        self.label = name or getattr(loader, "__qualname__", None) or type(loader).__name__
        self._scheduler = BatchScheduler(
            self._data, loader, self.label, stats=RecordStats(), metrics=metrics
        )

    # -------------------- Access --------------------

    def get(self, key: str) -> Any:
        """
        Read ``key``.

        Returns:
            The stored value if present; None if an allow list excludes the
            key; otherwise a future resolving to the value after the next
            batch is loaded (None if the loader did not return the key)

        Raises:
            RuntimeError: If the key must be loaded and no event loop is running
        """
        try:
            return self._data[key]
        except KeyError:
            pass

        if self._allowed is not None and key not in self._allowed:
            return None

        return self._scheduler.enqueue(key)

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails; unset slots must not loop
        # back into get().
        if name in LazyRecord.__slots__:
            raise AttributeError(name)
        return self.get(name)

    async def aget(self, key: str) -> Any:
        """Read ``key``, awaiting the load if it is not cached yet."""
        return await resolve(self.get(key))

    async def fetch(self, *keys: str) -> dict[str, Any]:
        """
        Read several keys, requesting every missing one in the same batch.

        Returns:
            Mapping of each requested key to its value
        """
        values = [self.get(key) for key in keys]
        results = await asyncio.gather(*(resolve(value) for value in values))
        return dict(zip(keys, results))

    # -------------------- Introspection --------------------

    @property
    def data(self) -> Mapping[str, Any]:
        """Read-only live view of the loaded values."""
        return MappingProxyType(self._data)

    @property
    def stats(self) -> RecordStats:
        """Loader call counters of this record."""
        return self._scheduler.stats

    @property
    def pending_keys(self) -> tuple[str, ...]:
        """Keys waiting for the next flush."""
        return self._scheduler.pending_keys

    def snapshot(self) -> dict[str, Any]:
        """Shallow copy of the loaded values."""
        return dict(self._data)

    def is_loaded(self, key: str) -> bool:
        return key in self._data

    def state(self, key: str) -> KeyState:
        """Current load state of ``key``; never triggers a load."""
        if key in self._data:
            return KeyState.LOADED
        if self._allowed is not None and key not in self._allowed:
            return KeyState.BLOCKED
        if self._scheduler.is_pending(key):
            return KeyState.PENDING
        return KeyState.UNLOADED

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data))

    def __repr__(self) -> str:
        pending = list(self._scheduler.pending_keys)
        return (
            f"<LazyRecord {self.label} loaded={list(self._data)} pending={pending}>"
        )


def create_lazy_record(
    initial: Mapping[str, Any] | None,
    loader: Loader,
    allow_list: Iterable[str] | None = None,
    *,
    name: str | None = None,
) -> LazyRecord:
    """
    Create a lazy record.

    Args:
        initial: Values known up front
        loader: Async callable receiving (record view, requested keys)
        allow_list: Optional keys that are allowed to trigger a load
        name: Label for logs and metrics

    Returns:
        LazyRecord routing reads of missing keys through ``loader``
    """
    return LazyRecord(initial, loader, allow_list, name=name)
