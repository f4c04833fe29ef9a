"""HTTP client for the ordering backend."""

from __future__ import annotations

import logging
from typing import Any

import requests

from waiter_pos.config import DEFAULT_URL_SCHEME, HTTP_TIMEOUT_SECONDS
from waiter_pos.constant import ACTIVATION_PATH, MENU_LIST_PATH, ORDER_SAVE_PATH
from waiter_pos.errors import ConfigurationError, TransportError

logger = logging.getLogger(__name__)


def base_url(endpoint: str) -> str:
    """Turn a stored backend host (``10.0.0.5:8080``) into a base URL."""
    host = (endpoint or "").strip().rstrip("/")
    if not host:
        raise ConfigurationError("Server IP is not set. Please configure it.")
    if "://" in host:
        return host
    return f"{DEFAULT_URL_SCHEME}://{host}"


def is_success(response: requests.Response) -> bool:
    # ``Response.ok`` also accepts 3xx
    return 200 <= response.status_code < 300


def response_body(response: requests.Response) -> str:
    """Return the response payload as text, unwrapping a JSON-encoded string."""
    content_type = response.headers.get("Content-Type", "")
    if "json" in content_type:
        try:
            data = response.json()
        except ValueError:
            return response.text
        if isinstance(data, str):
            return data
    return response.text


class BackendClient:
    """Thin wrapper over the three backend routes the waiter client uses."""

    def __init__(
        self,
        endpoint: str,
        http: requests.Session | None = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
    ) -> None:
        self.base_url = base_url(endpoint)
        self.http = http or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            response = self.http.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise TransportError(f"Could not reach {self.base_url}: {exc}") from exc
        logger.debug("%s %s -> %s", method, url, response.status_code)
        return response

    def fetch_menu(self) -> list[dict[str, Any]]:
        """Fetch the full catalog as a list of raw records."""
        response = self._request("GET", MENU_LIST_PATH)
        if not is_success(response):
            raise TransportError(
                f"Menu request failed with status {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        try:
            records = response.json()
        except ValueError as exc:
            raise TransportError("Menu response is not valid JSON", status_code=response.status_code) from exc
        if not isinstance(records, list):
            raise TransportError("Menu response is not a list", status_code=response.status_code)
        return records

    def activate(self, device_id: str) -> str:
        """Send the activation request and return the raw body, whatever the status."""
        path = ACTIVATION_PATH.format(device_id=device_id)
        response = self._request("POST", path)
        return response_body(response)

    def save_order(self, payload: dict[str, Any]) -> requests.Response:
        """Post an order payload. Non-2xx responses raise ``TransportError``."""
        response = self._request("POST", ORDER_SAVE_PATH, json=payload)
        if not is_success(response):
            body = response_body(response)
            message = f"Order rejected with status {response.status_code}"
            if body:
                message = f"{message}: {body}"
            raise TransportError(message, status_code=response.status_code, body=body)
        return response
