"""Device activation gate."""

from __future__ import annotations

import logging
from typing import Callable

from waiter_pos.api import BackendClient
from waiter_pos.constant import ACTIVATION_SUCCESS_MARKER
from waiter_pos.errors import TransportError
from waiter_pos.models import ActivationResult
from waiter_pos.session import SessionStore

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], BackendClient]


class ActivationGate:
    """Unlock menu access for this device.

    The backend answers with a plain string. Only the exact success marker
    activates the device; anything else is shown to the waiter as the reason.
    """

    def __init__(self, sessions: SessionStore, client_factory: ClientFactory = BackendClient) -> None:
        self.sessions = sessions
        self.client_factory = client_factory

    def activate(self, endpoint: str, device_id: str) -> ActivationResult:
        if self.sessions.is_activated():
            return ActivationResult(activated=True, message="Device already activated.")

        client = self.client_factory(endpoint)
        try:
            body = client.activate(device_id)
        except TransportError as exc:
            logger.error("Activation request for device %s failed: %s", device_id, exc)
            self.sessions.save_activation(False)
            return ActivationResult(activated=False, message=str(exc))

        if body == ACTIVATION_SUCCESS_MARKER:
            self.sessions.save_activation(True)
            logger.info("Device %s activated", device_id)
            return ActivationResult(
                activated=True,
                message="Your device has been activated. You can now access the menu.",
            )

        self.sessions.save_activation(False)
        logger.warning("Activation refused for device %s: %r", device_id, body)
        return ActivationResult(activated=False, message=body)
