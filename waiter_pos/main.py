"""Entry point for the waiter-pos Textual app."""

from __future__ import annotations

import logging

from waiter_pos.activation import ActivationGate
from waiter_pos.config import DB_PATH
from waiter_pos.logging_config import configure_logging
from waiter_pos.menu import MenuCache
from waiter_pos.orders import OrderSubmitter
from waiter_pos.persistence import KeyValueStore
from waiter_pos.session import SessionStore
from waiter_pos.waiter_app import WaiterOrderApp
from waiter_pos.workflow import OrderingWorkflow

logger = logging.getLogger(__name__)


def build_workflow(db_path: str = DB_PATH) -> OrderingWorkflow:
    """Wire the stores and backend collaborators for one app instance."""
    store = KeyValueStore(db_path)
    sessions = SessionStore(store)
    return OrderingWorkflow(
        sessions=sessions,
        menu=MenuCache(store),
        gate=ActivationGate(sessions),
        submitter=OrderSubmitter(),
    )


def main() -> None:
    configure_logging()
    workflow = build_workflow()
    logger.info("starting waiter-pos device=%s stage=%s", workflow.session.device_id, workflow.stage.value)
    WaiterOrderApp(workflow).run()


if __name__ == "__main__":
    main()
