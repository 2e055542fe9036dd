"""
Cascading selector chain.

Each link holds {value, options, loading}. Changing a link's value clears
every descendant synchronously, then requests options for the direct
children whose parents are all chosen. Responses carry the generation of the
request that produced them and are dropped once the link has moved on.

Example (sibling cascade):

    chain = CascadeChain([
        CascadeLink("division", divisions),
        CascadeLink("so_type", so_types, parents=("division",)),
        CascadeLink("customer", customers, parents=("division",)),
    ])
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional

from .option_cache import ReferenceFetcher
from ...utils.validators import is_set

_log = logging.getLogger(__name__)


@dataclass
class CascadeLink:
    name: str
    fetcher: ReferenceFetcher
    parents: tuple[str, ...] = ()
    value: Any = None
    options: list = field(default_factory=list)
    loading: bool = False
    generation: int = 0

    @property
    def is_root(self) -> bool:
        return not self.parents

    def option_for(self, value=None):
        """The option record whose option_id matches `value` (default: current value)."""
        wanted = self.value if value is None else value
        for opt in self.options:
            if getattr(opt, "option_id", None) == wanted:
                return opt
        return None


class CascadeChain:
    def __init__(
        self,
        links: Iterable[CascadeLink],
        on_change: Optional[Callable[[str], None]] = None,
    ):
        self._links: dict[str, CascadeLink] = {}
        for link in links:
            for p in link.parents:
                if p not in self._links:
                    raise ValueError(f"Link '{link.name}' depends on unknown link '{p}'")
            self._links[link.name] = link
        self.on_change = on_change

    # ---- lookup ----------------------------------------------------------

    def __getitem__(self, name: str) -> CascadeLink:
        return self._links[name]

    def __iter__(self):
        return iter(self._links.values())

    def values(self) -> dict[str, Any]:
        return {name: link.value for name, link in self._links.items()}

    def children(self, name: str) -> list[CascadeLink]:
        return [l for l in self._links.values() if name in l.parents]

    def descendants(self, name: str) -> list[CascadeLink]:
        out: list[CascadeLink] = []
        pending = [name]
        while pending:
            current = pending.pop(0)
            for child in self.children(current):
                if child not in out:
                    out.append(child)
                    pending.append(child.name)
        return out

    def is_enabled(self, name: str) -> bool:
        link = self._links[name]
        if link.loading:
            return False
        return all(is_set(self._links[p].value) for p in link.parents)

    # ---- transitions -----------------------------------------------------

    def load_roots(self) -> None:
        for link in self._links.values():
            if link.is_root:
                self._request(link)

    def select(self, name: str, value: Any) -> None:
        link = self._links[name]
        link.value = value if is_set(value) else None
        for d in self.descendants(name):
            self._clear(d)
        self._changed(name)
        if link.value is None:
            return
        for child in self.children(name):
            if all(is_set(self._links[p].value) for p in child.parents):
                self._request(child)

    def restore(self, values: Mapping[str, Any]) -> None:
        """
        Apply pre-existing selections (edit mode) without clearing, then load
        options for every link whose parents are chosen.
        """
        for name, value in values.items():
            if name in self._links:
                self._links[name].value = value if is_set(value) else None
        for link in self._links.values():
            if link.is_root:
                if not link.options:
                    self._request(link)
                continue
            if all(is_set(self._links[p].value) for p in link.parents):
                self._request(link)
            else:
                self._clear(link)
        self._changed(None)

    def reset(self) -> None:
        for link in self._links.values():
            if link.is_root:
                link.value = None
            else:
                self._clear(link)
        self._changed(None)

    # ---- internals -------------------------------------------------------

    def _clear(self, link: CascadeLink) -> None:
        link.value = None
        link.options = []
        link.loading = False
        link.generation += 1

    def _request(self, link: CascadeLink) -> None:
        key = tuple(self._links[p].value for p in link.parents)
        link.generation += 1
        generation = link.generation
        link.loading = True
        self._changed(link.name)
        link.fetcher.fetch(*key, callback=lambda opts: self._deliver(link.name, generation, opts))

    def _deliver(self, name: str, generation: int, options: list) -> None:
        link = self._links[name]
        if generation != link.generation:
            _log.debug("Dropping stale options for %s (gen %s != %s)", name, generation, link.generation)
            return
        link.options = list(options)
        link.loading = False
        self._changed(name)

    def _changed(self, name: Optional[str]) -> None:
        if self.on_change:
            self.on_change(name)
