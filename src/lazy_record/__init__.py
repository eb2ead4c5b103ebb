"""
lazy-record.

Transparent, batched, cached lazy-property loading for asyncio: missing
keys of a record read in the same event loop tick are fetched with a
single loader call and cached for good.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("lazy-record")
except PackageNotFoundError:
    __version__ = "unknown"

from .batching import Batch, BatchScheduler, Loader, Waiter
from .errors import ConfigurationError, LazyRecordError, LoaderContractError
from .metrics import RecordStats, get_metrics_report, reset_metrics
from .record import KeyState, LazyRecord, create_lazy_record, resolve

__all__ = [
    "__version__",
    # Core
    "LazyRecord",
    "create_lazy_record",
    "resolve",
    "KeyState",
    "Loader",
    # Batching
    "Batch",
    "BatchScheduler",
    "Waiter",
    # Errors
    "LazyRecordError",
    "LoaderContractError",
    "ConfigurationError",
    # Metrics
    "RecordStats",
    "get_metrics_report",
    "reset_metrics",
]
