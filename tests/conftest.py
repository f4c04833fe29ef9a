import json

import pytest
import requests

from waiter_pos.activation import ActivationGate
from waiter_pos.api import BackendClient
from waiter_pos.constant import MENU_LIST_PATH
from waiter_pos.menu import MenuCache, category_of
from waiter_pos.models import MenuItem
from waiter_pos.orders import OrderSubmitter
from waiter_pos.persistence import KeyValueStore
from waiter_pos.session import SessionStore
from waiter_pos.workflow import OrderingWorkflow

ENDPOINT = "10.0.0.5:8080"


class StubResponse:
    def __init__(self, status_code=200, body="", json_body=None):
        self.status_code = status_code
        if json_body is not None:
            self.text = json.dumps(json_body)
            self.headers = {"Content-Type": "application/json"}
        else:
            self.text = body
            self.headers = {"Content-Type": "text/plain"}

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        return json.loads(self.text)


class StubHttp:
    """Stands in for ``requests.Session``; routes by (method, path)."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def on(self, method, path, result):
        self.routes[(method, path)] = result

    def request(self, method, url, timeout=None, **kwargs):
        self.calls.append({"method": method, "url": url, "timeout": timeout, **kwargs})
        for (route_method, path), result in self.routes.items():
            if route_method == method and url.endswith(path):
                if isinstance(result, Exception):
                    raise result
                return result
        raise requests.ConnectionError(f"no route for {method} {url}")


def make_item(code, name=None, item_id=1, unit="portion"):
    return MenuItem(
        id=item_id,
        code=code,
        full_name=name or f"Item {code}",
        category_type=unit,
        category=category_of(code),
    )


def remote_record(code, name=None, item_id=1, unit="portion"):
    return {"id": item_id, "code": code, "fullName": name or f"Item {code}", "quantityType": unit}


@pytest.fixture
def store(tmp_path):
    return KeyValueStore(tmp_path / "waiter_pos.db")


@pytest.fixture
def http():
    return StubHttp()


@pytest.fixture
def client_factory(http):
    def factory(endpoint):
        return BackendClient(endpoint, http=http, timeout=3)

    return factory


@pytest.fixture
def sessions(store):
    return SessionStore(store)


@pytest.fixture
def menu(store, client_factory):
    return MenuCache(store, client_factory=client_factory)


@pytest.fixture
def make_workflow(store, sessions, menu, client_factory):
    def build():
        return OrderingWorkflow(
            sessions=sessions,
            menu=menu,
            gate=ActivationGate(sessions, client_factory=client_factory),
            submitter=OrderSubmitter(client_factory=client_factory),
        )

    return build


@pytest.fixture
def browsing(make_workflow, sessions, http):
    """A workflow on table 5 with the menu loaded."""
    sessions.save_activation(True)
    workflow = make_workflow()
    workflow.configure("W07", ENDPOINT)
    http.on(
        "GET",
        MENU_LIST_PATH,
        StubResponse(
            json_body=[
                remote_record("1001", "Fried Rice", 1),
                remote_record("1002", "Chicken Satay", 2),
                remote_record("2001", "Iced Tea", 3, "glass"),
            ]
        ),
    )
    workflow.select_table("5")
    workflow.load_menu()
    return workflow
