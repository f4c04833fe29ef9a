"""Session store: activation flag, waiter identity, endpoint and device id."""

from __future__ import annotations

import logging
from dataclasses import replace
from uuid import uuid4

from waiter_pos.constant import (
    STORAGE_KEY_DEVICE_ID,
    STORAGE_KEY_ENDPOINT,
    STORAGE_KEY_PERMISSION,
    STORAGE_KEY_WAITER,
)
from waiter_pos.errors import ConfigurationError
from waiter_pos.models import Session
from waiter_pos.persistence import KeyValueStore

logger = logging.getLogger(__name__)


class SessionStore:
    """Load and save ``Session`` fields through the key-value store."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def device_id(self) -> str:
        """Return the install's device id, generating it on first use."""
        device_id = self.store.get(STORAGE_KEY_DEVICE_ID)
        if isinstance(device_id, str) and device_id:
            return device_id
        device_id = str(uuid4())
        self.store.set(STORAGE_KEY_DEVICE_ID, device_id)
        logger.info("Generated device id %s", device_id)
        return device_id

    def load(self) -> Session:
        waiter_id = self.store.get(STORAGE_KEY_WAITER)
        endpoint = self.store.get(STORAGE_KEY_ENDPOINT)
        return Session(
            device_id=self.device_id(),
            activated=self.store.get(STORAGE_KEY_PERMISSION) is True,
            waiter_id=waiter_id if isinstance(waiter_id, str) and waiter_id else None,
            endpoint=endpoint if isinstance(endpoint, str) else "",
        )

    def save_waiter(self, session: Session, waiter_id: str) -> Session:
        waiter_id = (waiter_id or "").strip()
        if not waiter_id:
            raise ConfigurationError("Waiter code is required.")
        self.store.set(STORAGE_KEY_WAITER, waiter_id)
        return replace(session, waiter_id=waiter_id)

    def save_endpoint(self, session: Session, endpoint: str) -> Session:
        endpoint = (endpoint or "").strip()
        if not endpoint:
            raise ConfigurationError("Server IP is required.")
        self.store.set(STORAGE_KEY_ENDPOINT, endpoint)
        return replace(session, endpoint=endpoint)

    def clear_waiter(self, session: Session) -> Session:
        self.store.remove(STORAGE_KEY_WAITER)
        return replace(session, waiter_id=None)

    def clear_endpoint(self, session: Session) -> Session:
        self.store.remove(STORAGE_KEY_ENDPOINT)
        return replace(session, endpoint="")

    def is_activated(self) -> bool:
        return self.store.get(STORAGE_KEY_PERMISSION) is True

    def save_activation(self, activated: bool) -> None:
        self.store.set(STORAGE_KEY_PERMISSION, bool(activated))
