"""Ordered collection of scope line items for a bidding package."""
from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Dict, Iterable, Iterator, List, Optional

from .errors import DuplicateIdError
from .models import ScopeLineItem

LOGGER = logging.getLogger(__name__)

_GENERATED_ID = re.compile(r"^scope-(\d+)$")


class ScopeCatalog:
    """Scope items in insertion order; the order drives matrix display and iteration."""

    def __init__(self, items: Iterable[ScopeLineItem] = ()) -> None:
        self._items: Dict[str, ScopeLineItem] = {}
        for item in items:
            self.add_item(item)

    def __iter__(self) -> Iterator[ScopeLineItem]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def ids(self) -> List[str]:
        return list(self._items)

    def get(self, item_id: str) -> Optional[ScopeLineItem]:
        return self._items.get(item_id)

    def _next_id(self) -> str:
        highest = 0
        for existing in self._items:
            match = _GENERATED_ID.match(existing)
            if match:
                highest = max(highest, int(match.group(1)))
        return f"scope-{highest + 1:03d}"

    def add_item(self, item: ScopeLineItem) -> ScopeLineItem:
        """Append ``item``, assigning a fresh id when it has none."""
        if not item.id:
            item = replace(item, id=self._next_id())
        elif item.id in self._items:
            raise DuplicateIdError("scope item", item.id)
        self._items[item.id] = item
        LOGGER.debug("Added scope item %s (%s)", item.id, item.description)
        return item

    def update_item(self, item: ScopeLineItem) -> ScopeLineItem:
        if item.id not in self._items:
            raise KeyError(item.id)
        self._items[item.id] = item
        return item

    def remove_item(self, item_id: str) -> None:
        if self._items.pop(item_id, None) is not None:
            LOGGER.debug("Removed scope item %s", item_id)


def as_catalog(scope: "ScopeCatalog | Iterable[ScopeLineItem]") -> ScopeCatalog:
    if isinstance(scope, ScopeCatalog):
        return scope
    return ScopeCatalog(scope)


__all__ = ["ScopeCatalog", "as_catalog"]
