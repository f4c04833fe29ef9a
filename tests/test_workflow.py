import pytest
import requests

from tests.conftest import ENDPOINT, StubResponse
from waiter_pos.constant import CATEGORY_BEVERAGE, MENU_LIST_PATH, ORDER_SAVE_PATH
from waiter_pos.errors import ConfigurationError, MenuRefreshError, SubmissionError, ValidationError, WorkflowError
from waiter_pos.models import Ack
from waiter_pos.workflow import Stage


def _item(workflow, code):
    return workflow.menu.find(code)


def test_new_device_waits_for_activation(make_workflow):
    workflow = make_workflow()

    assert workflow.stage is Stage.AWAITING_ACTIVATION


def test_activation_requires_endpoint(make_workflow, http):
    workflow = make_workflow()

    with pytest.raises(ConfigurationError):
        workflow.activate()
    assert http.calls == []


def test_activation_then_configuration_reaches_table(make_workflow, http):
    workflow = make_workflow()
    workflow.configure(endpoint=ENDPOINT)
    http.on("POST", f"/activation/{workflow.session.device_id}", StubResponse(body="Activation Success"))

    result = workflow.activate()

    assert result.activated
    assert workflow.stage is Stage.AWAITING_SESSION

    workflow.configure(waiter_id="W07")
    assert workflow.stage is Stage.AWAITING_TABLE


def test_failed_activation_keeps_gate_closed(make_workflow, http):
    workflow = make_workflow()
    workflow.configure("W07", ENDPOINT)
    http.on("POST", f"/activation/{workflow.session.device_id}", StubResponse(body="Unknown device"))

    result = workflow.activate()

    assert result.message == "Unknown device"
    assert workflow.stage is Stage.AWAITING_ACTIVATION


def test_activated_and_configured_device_starts_at_table(make_workflow, sessions):
    sessions.save_activation(True)
    session = sessions.save_waiter(sessions.load(), "W07")
    sessions.save_endpoint(session, ENDPOINT)

    assert make_workflow().stage is Stage.AWAITING_TABLE


def test_menu_intents_blocked_before_table(make_workflow, sessions):
    sessions.save_activation(True)
    workflow = make_workflow()
    workflow.configure("W07", ENDPOINT)

    with pytest.raises(WorkflowError):
        workflow.load_menu()


def test_select_table_defaults_to_zero(make_workflow, sessions):
    sessions.save_activation(True)
    workflow = make_workflow()
    workflow.configure("W07", ENDPOINT)

    workflow.select_table("")

    assert workflow.session.table_number == "0"
    assert workflow.stage is Stage.BROWSING


def test_select_table_rejects_non_digits(make_workflow, sessions):
    sessions.save_activation(True)
    workflow = make_workflow()
    workflow.configure("W07", ENDPOINT)

    with pytest.raises(ValidationError):
        workflow.select_table("T5")
    assert workflow.stage is Stage.AWAITING_TABLE


def test_clearing_waiter_blocks_menu(browsing):
    browsing.clear_waiter()

    assert browsing.stage is Stage.AWAITING_SESSION
    with pytest.raises(WorkflowError):
        browsing.refresh_menu()

    browsing.configure(waiter_id="W08")
    assert browsing.stage is Stage.AWAITING_TABLE


def test_first_load_fetches_empty_cache(browsing, http):
    assert [item.code for item in browsing.menu.items] == ["1001", "1002", "2001"]
    assert [call["method"] for call in http.calls] == ["GET"]


def test_visible_items_filter(browsing):
    assert [i.code for i in browsing.visible_items(CATEGORY_BEVERAGE, "")] == ["2001"]
    assert [i.code for i in browsing.visible_items(search_text="RICE")] == ["1001"]


def test_cart_scenario_from_menu(browsing):
    rice = _item(browsing, "1001")

    browsing.add_item(rice, "", 2)
    browsing.add_item(rice, "", 3)
    assert len(browsing.cart) == 1
    assert browsing.cart[0].quantity == 5

    browsing.add_item(rice, "no ice", 1)
    assert [(e.note, e.quantity) for e in browsing.cart] == [("", 5), ("no ice", 1)]
    assert browsing.quantity_for("1001") == 6
    assert browsing.total_quantity == 6


def test_refresh_failure_keeps_stale_menu(browsing, http):
    http.routes.clear()
    http.on("GET", MENU_LIST_PATH, requests.ConnectionError("refused"))
    before = browsing.menu.items

    with pytest.raises(MenuRefreshError):
        browsing.refresh_menu()

    assert browsing.menu.items == before


def test_cannot_review_empty_cart(browsing):
    assert not browsing.can_review

    with pytest.raises(ValidationError):
        browsing.review()
    assert browsing.stage is Stage.BROWSING


def test_change_table_clears_cart(browsing):
    browsing.add_item(_item(browsing, "1001"))

    browsing.change_table()

    assert browsing.cart == ()
    assert browsing.stage is Stage.AWAITING_TABLE


def test_review_and_back(browsing):
    browsing.add_item(_item(browsing, "1001"))
    assert browsing.can_review

    browsing.review()
    assert browsing.stage is Stage.REVIEWING_ORDER
    with pytest.raises(WorkflowError):
        browsing.add_item(_item(browsing, "1002"))

    browsing.adjust_line("1001", "", 2)
    assert browsing.cart[0].quantity == 3

    browsing.back_to_menu()
    assert browsing.stage is Stage.BROWSING


def test_blank_customer_name_rejected_before_network(browsing, http):
    browsing.add_item(_item(browsing, "1001"))
    browsing.review()
    calls_before = len(http.calls)

    with pytest.raises(ValidationError):
        browsing.submit("   ")

    assert len(http.calls) == calls_before
    assert browsing.stage is Stage.REVIEWING_ORDER
    assert browsing.total_quantity == 1


def test_failed_submission_preserves_cart_and_name(browsing, http):
    browsing.add_item(_item(browsing, "1001"), "", 2)
    browsing.add_item(_item(browsing, "2001"), "no ice", 1)
    browsing.review()
    cart_before = browsing.cart
    http.on("POST", ORDER_SAVE_PATH, requests.Timeout("timed out"))

    with pytest.raises(SubmissionError):
        browsing.submit("Budi")

    assert browsing.cart == cart_before
    assert browsing.customer_name == "Budi"
    assert browsing.stage is Stage.REVIEWING_ORDER


def test_rejected_name_keeps_previous_name(browsing, http):
    browsing.add_item(_item(browsing, "1001"))
    browsing.review()
    http.on("POST", ORDER_SAVE_PATH, requests.Timeout("timed out"))
    with pytest.raises(SubmissionError):
        browsing.submit("Budi")

    with pytest.raises(ValidationError):
        browsing.submit("   ")

    assert browsing.customer_name == "Budi"


class InterferingSubmitter:
    """Tries to edit the workflow while the order is on the wire."""

    def __init__(self):
        self.workflow = None
        self.sent = None
        self.rejected = []

    def submit(self, order, endpoint):
        self.sent = order
        first = self.workflow.cart[0]
        attempts = [
            lambda: self.workflow.adjust_line(first.item.code, first.note, 1),
            self.workflow.back_to_menu,
            self.workflow.clear_waiter,
        ]
        for attempt in attempts:
            try:
                attempt()
            except WorkflowError as exc:
                self.rejected.append(str(exc))
        return Ack(status_code=200, body="OK")


def test_cart_is_frozen_while_order_is_sent(browsing):
    submitter = InterferingSubmitter()
    submitter.workflow = browsing
    browsing.submitter = submitter
    browsing.add_item(_item(browsing, "1001"), "", 2)
    browsing.review()

    browsing.submit("Budi")

    assert len(submitter.rejected) == 3
    assert submitter.sent.lines[0].quantity == 2
    assert browsing.cart == ()
    assert browsing.stage is Stage.AWAITING_TABLE
    assert browsing.submitting is False
    assert browsing.session.waiter_id == "W07"


def test_intents_allowed_again_after_failed_send(browsing, http):
    browsing.add_item(_item(browsing, "1001"))
    browsing.review()
    http.on("POST", ORDER_SAVE_PATH, requests.ConnectionError("refused"))
    with pytest.raises(SubmissionError):
        browsing.submit("Budi")

    browsing.back_to_menu()

    assert browsing.stage is Stage.BROWSING


def test_server_change_refetches_menu(browsing, http):
    browsing.clear_endpoint()
    assert browsing.menu.items == ()

    browsing.configure(endpoint="10.0.0.9")
    browsing.select_table("5")
    browsing.load_menu()

    gets = [call["url"] for call in http.calls if call["method"] == "GET"]
    assert gets == [f"http://{ENDPOINT}{MENU_LIST_PATH}", f"http://10.0.0.9{MENU_LIST_PATH}"]


def test_successful_submission_clears_cart(browsing, http):
    browsing.add_item(_item(browsing, "1002"), "extra sauce", 2)
    browsing.review()
    http.on("POST", ORDER_SAVE_PATH, StubResponse(body="OK"))

    ack = browsing.submit("Budi")

    assert ack.status_code == 200
    assert browsing.cart == ()
    assert browsing.customer_name == ""
    assert browsing.stage is Stage.AWAITING_TABLE
    payload = http.calls[-1]["json"]
    assert payload["waiterCode"] == "W07"
    assert payload["tableNumber"] == 5
    assert payload["orderDetails"][0]["note"] == "extra sauce"
