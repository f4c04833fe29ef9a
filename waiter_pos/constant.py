"""Fixed protocol values shared with the backend and the on-device store."""

from __future__ import annotations

# Durable storage keys. Values are JSON-serialized.
STORAGE_KEY_ENDPOINT = "serverBEIP"
STORAGE_KEY_WAITER = "waiterCode"
STORAGE_KEY_DEVICE_ID = "deviceId"
STORAGE_KEY_PERMISSION = "permissionMenu"
STORAGE_KEY_MENU_ITEMS = "menuItems"

# Backend routes, relative to the endpoint base URL.
MENU_LIST_PATH = "/menu/list/all"
ACTIVATION_PATH = "/activation/{device_id}"
ORDER_SAVE_PATH = "/order/save"

ACTIVATION_SUCCESS_MARKER = "Activation Success"

CATEGORY_FOOD = "Food"
CATEGORY_BEVERAGE = "Beverage"
CATEGORY_OTHERS = "Others"
CATEGORY_ALL = "All"

# Code prefix -> category. Anything unmatched falls back to CATEGORY_OTHERS.
CATEGORY_BY_CODE_PREFIX: dict[str, str] = {
    "1": CATEGORY_FOOD,
    "2": CATEGORY_BEVERAGE,
}

# Order of the category filter tabs in the menu view.
CATEGORY_FILTERS: tuple[str, ...] = (
    CATEGORY_ALL,
    CATEGORY_FOOD,
    CATEGORY_BEVERAGE,
    CATEGORY_OTHERS,
)
