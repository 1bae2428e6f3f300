"""Process-lifetime cache for loaded data sources.

Each source is loaded once and reused until the process restarts. Source
files are static per deployment, so there is no invalidation. Loads run
under a lock so concurrent first requests read a file only once.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Hashable, TypeVar


T = TypeVar("T")

logger = logging.getLogger(__name__)


class SourceCache:
    def __init__(self) -> None:
        self._values: Dict[Hashable, object] = {}
        self._lock = threading.Lock()

    def get_or_load(self, key: Hashable, loader: Callable[[], T]) -> T:
        try:
            return self._values[key]  # type: ignore[return-value]
        except KeyError:
            pass
        with self._lock:
            if key not in self._values:
                logger.info("Loading data source %s", key)
                # A failing loader raises here and leaves nothing cached.
                self._values[key] = loader()
            return self._values[key]  # type: ignore[return-value]

    def clear(self) -> None:
        with self._lock:
            self._values.clear()


source_cache = SourceCache()
