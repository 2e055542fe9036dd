"""
Reference-data fetcher with a per-parent cache.

A ReferenceFetcher wraps one lookup (e.g. "customers of a division"). It is
keyed by the parent id(s); the empty key () is used for root lists. Results
are delivered through a callback so the same code path serves cache hits
(synchronous) and network fetches (through a runner).
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Hashable, Optional, Sequence

from ...api.client import ApiError
from ...constants import SEVERITY_ERROR
from ...utils.validators import is_set

_log = logging.getLogger(__name__)

Notify = Callable[[str, str], None]
OptionsCallback = Callable[[list], None]


class ReferenceFetcher:
    def __init__(
        self,
        name: str,
        load: Callable[..., Sequence[Any]],
        runner,
        notify: Optional[Notify] = None,
    ):
        self.name = name
        self._load = load
        self._runner = runner
        self._notify = notify
        self._cache: dict[tuple, list] = {}

    # ---- cache helpers ---------------------------------------------------

    def cached(self, *key: Hashable) -> Optional[list]:
        hit = self._cache.get(tuple(key))
        return list(hit) if hit is not None else None

    def invalidate(self, *key: Hashable) -> None:
        self._cache.pop(tuple(key), None)

    def clear(self) -> None:
        self._cache.clear()

    # ---- fetch -----------------------------------------------------------

    def fetch(self, *key: Hashable, callback: OptionsCallback) -> None:
        """
        Deliver the options for `key` to `callback`, requesting them only on a
        cache miss. A blank key part short-circuits to []. Failures are
        reported through notify and delivered as []; they are not cached.
        """
        key = tuple(key)
        if any(not is_set(k) for k in key):
            callback([])
            return

        hit = self._cache.get(key)
        if hit is not None:
            _log.debug("%s: cache hit for %s", self.name, key)
            callback(list(hit))
            return

        def _loaded(options):
            options = list(options or [])
            self._cache[key] = options
            callback(list(options))

        def _failed(exc: BaseException):
            if isinstance(exc, ApiError):
                _log.warning("%s: fetch failed for %s: %s", self.name, key, exc)
            else:
                _log.error("%s: unexpected error for %s", self.name, key, exc_info=exc)
            if self._notify is not None:
                self._notify(f"Error fetching {self.name}: {exc}", SEVERITY_ERROR)
            callback([])

        _log.debug("%s: fetching %s", self.name, key)
        self._runner.submit(lambda: self._load(*key), _loaded, _failed)
