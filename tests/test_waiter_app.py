import pytest
from textual.events import Key

from waiter_pos.waiter_app import WaiterOrderApp
from waiter_pos.workflow import Stage


@pytest.fixture
def app(browsing, monkeypatch):
    """The app on a detached screen: no modal, redraws and deferred calls dropped."""
    waiter_app = WaiterOrderApp(browsing)
    monkeypatch.setattr(waiter_app, "_modal_open", lambda: False)
    monkeypatch.setattr(waiter_app, "_refresh_all", lambda: None)
    monkeypatch.setattr(waiter_app, "call_later", lambda callback, *args: None)
    return waiter_app


@pytest.fixture
def reviewing(app):
    rice = app.workflow.menu.find("1001")
    app.workflow.add_item(rice, "", 2)
    app.workflow.review()
    return app


def test_review_keys_ignored_while_sending(reviewing):
    reviewing.busy = True
    cart_before = reviewing.workflow.cart

    reviewing.on_key(Key("plus", "+"))
    reviewing.action_remove_selected()
    reviewing.action_back()

    assert reviewing.workflow.cart == cart_before
    assert reviewing.workflow.stage is Stage.REVIEWING_ORDER


def test_review_keys_work_when_idle(reviewing):
    reviewing.on_key(Key("plus", "+"))
    assert reviewing.workflow.cart[0].quantity == 3

    reviewing.action_back()
    assert reviewing.workflow.stage is Stage.BROWSING


def test_clear_order_ignored_while_busy(app):
    app.workflow.add_item(app.workflow.menu.find("2001"))
    app.busy = True

    app.action_clear_order()

    assert app.workflow.total_quantity == 1


def test_server_change_reloads_menu_on_next_browse(app):
    app.menu_requested = True

    app._on_change_server_confirmed(True)

    assert app.menu_requested is False
    assert app.workflow.menu.items == ()
    assert app.workflow.stage is Stage.AWAITING_SESSION


def test_cancelled_server_change_keeps_menu(app):
    app.menu_requested = True

    app._on_change_server_confirmed(False)

    assert app.menu_requested is True
    assert len(app.workflow.menu.items) == 3
