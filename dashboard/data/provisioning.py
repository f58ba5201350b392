from __future__ import annotations

import logging
from dataclasses import dataclass

from dashboard.constants import BOARDS_TABLE, DEFAULT_BOARD_NAME, DEFAULT_HUBS, HUBS_TABLE, LISTS_TABLE
from dashboard.data.kanban import default_list_rows
from dashboard.notifications import LogNotifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProvisioningResult:
    hubs_created: bool = False
    board_created: bool = False

    @property
    def created(self) -> bool:
        return self.hubs_created or self.board_created


def _has_rows(client, table, owner_column, notifier):
    result = client.select(table, [(owner_column, "eq", client.user_id)], limit=1)
    if not result.ok:
        notifier.notify(f"Error checking {table}", str(result.error), variant="destructive")
        return None
    return bool(result.data)


def _ensure_hubs(client, notifier) -> bool:
    has_hubs = _has_rows(client, HUBS_TABLE, "owner", notifier)
    if has_hubs is None or has_hubs:
        return False
    rows = [{**hub, "owner": client.user_id, "is_default": True} for hub in DEFAULT_HUBS]
    result = client.insert(HUBS_TABLE, rows)
    if result.ok:
        logger.info("Provisioned %d default hubs for %s", len(rows), client.user_id)
        return True
    if result.error.code == "conflict":
        logger.info("Default hubs already provisioned for %s", client.user_id)
        return False
    notifier.notify("Error creating default hubs", str(result.error), variant="destructive")
    return False


def _ensure_board(client, notifier) -> bool:
    has_boards = _has_rows(client, BOARDS_TABLE, "user_id", notifier)
    if has_boards is None or has_boards:
        return False
    result = client.insert(BOARDS_TABLE, {"name": DEFAULT_BOARD_NAME, "user_id": client.user_id})
    if not result.ok:
        notifier.notify("Error creating default board", str(result.error), variant="destructive")
        return False
    lists = client.insert(LISTS_TABLE, default_list_rows(result.data["id"], client.user_id))
    if not lists.ok:
        notifier.notify("Error creating default lists", str(lists.error), variant="destructive")
    return True


def ensure_defaults(client, notifier=None, hubs=None, boards=None) -> ProvisioningResult:
    """Create the default hubs and board for an account that has none.

    Safe to call on every sign-in: existing rows are left alone. Mirrors passed
    in are reloaded when anything was created.
    """
    if not client.is_authenticated:
        return ProvisioningResult()
    notifier = notifier or LogNotifier()
    outcome = ProvisioningResult(
        hubs_created=_ensure_hubs(client, notifier),
        board_created=_ensure_board(client, notifier),
    )
    if outcome.hubs_created and hubs is not None:
        hubs.load()
    if outcome.board_created and boards is not None:
        boards.load()
    return outcome
