"""Menu cache: categorized catalog kept in sync with the backend."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from waiter_pos.api import BackendClient
from waiter_pos.constant import (
    CATEGORY_ALL,
    CATEGORY_BY_CODE_PREFIX,
    CATEGORY_OTHERS,
    STORAGE_KEY_MENU_ITEMS,
)
from waiter_pos.errors import MenuRefreshError, TransportError
from waiter_pos.models import MenuItem
from waiter_pos.persistence import KeyValueStore

logger = logging.getLogger(__name__)


def category_of(code: str) -> str:
    """Classify an item by the first character of its code."""
    return CATEGORY_BY_CODE_PREFIX.get(str(code)[:1], CATEGORY_OTHERS)


def item_from_remote(record: dict[str, Any]) -> MenuItem:
    """Map a ``/menu/list/all`` record. Raises ``KeyError``/``ValueError`` on bad records."""
    code = str(record["code"])
    return MenuItem(
        id=int(record["id"]),
        code=code,
        full_name=str(record["fullName"]),
        category_type=str(record.get("quantityType") or ""),
        category=category_of(code),
    )


def item_from_snapshot(record: dict[str, Any]) -> MenuItem:
    code = str(record["code"])
    return MenuItem(
        id=int(record["id"]),
        code=code,
        full_name=str(record["fullName"]),
        category_type=str(record.get("categoryType") or ""),
        # Stored categories are never trusted; always re-derive.
        category=category_of(code),
    )


def item_to_snapshot(item: MenuItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "code": item.code,
        "fullName": item.full_name,
        "category": item.category,
        "categoryType": item.category_type,
    }


def filter_items(items: Iterable[MenuItem], category: str = CATEGORY_ALL, search_text: str = "") -> list[MenuItem]:
    """Return the items matching both the category tab and the search text."""
    needle = (search_text or "").lower()
    return [
        item
        for item in items
        if (category == CATEGORY_ALL or item.category == category) and needle in item.full_name.lower()
    ]


class MenuCache:
    """Owns the canonical item list and its persisted snapshot.

    The snapshot is replaced wholesale on every successful refresh, so items
    removed upstream disappear locally as well.
    """

    def __init__(self, store: KeyValueStore, client_factory=BackendClient) -> None:
        self.store = store
        self.client_factory = client_factory
        self._items: tuple[MenuItem, ...] = ()
        self._loaded = False

    @property
    def items(self) -> tuple[MenuItem, ...]:
        return self._items

    def load_cache(self) -> tuple[MenuItem, ...]:
        """Read the last snapshot. A missing or corrupt snapshot reads as empty."""
        raw = self.store.get(STORAGE_KEY_MENU_ITEMS)
        items: tuple[MenuItem, ...] = ()
        if isinstance(raw, list):
            try:
                items = tuple(item_from_snapshot(record) for record in raw)
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                logger.warning("Discarding corrupt menu snapshot: %r", exc)
                items = ()
        elif raw is not None:
            logger.warning("Discarding menu snapshot of type %s", type(raw).__name__)

        self._items = items
        self._loaded = True
        logger.debug("Loaded %d cached menu items", len(items))
        return items

    def refresh(self, endpoint: str) -> tuple[MenuItem, ...]:
        """Fetch the catalog and replace the cache. Failures leave the cache untouched."""
        client = self.client_factory(endpoint)
        try:
            records = client.fetch_menu()
            items = tuple(item_from_remote(record) for record in records)
        except TransportError as exc:
            logger.warning("Menu refresh failed: %s", exc)
            raise MenuRefreshError(
                f"Failed to fetch menu items: {exc}", status_code=exc.status_code, body=exc.body
            ) from exc
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("Menu refresh returned a malformed record: %r", exc)
            raise MenuRefreshError(f"Failed to fetch menu items: malformed record ({exc})") from exc

        self.store.set(STORAGE_KEY_MENU_ITEMS, [item_to_snapshot(item) for item in items])
        self._items = items
        self._loaded = True
        logger.info("Menu refreshed with %d items", len(items))
        return items

    def ensure_loaded(self, endpoint: str) -> tuple[MenuItem, ...]:
        """Load the cache on first access and fetch only when it is empty."""
        if not self._loaded:
            self.load_cache()
        if not self._items:
            return self.refresh(endpoint)
        return self._items

    def clear(self) -> None:
        """Drop the snapshot so the next access fetches from the current server."""
        self.store.remove(STORAGE_KEY_MENU_ITEMS)
        self._items = ()
        self._loaded = False
        logger.info("Menu cache cleared")

    def find(self, code: str) -> MenuItem | None:
        for item in self._items:
            if item.code == code:
                return item
        return None
