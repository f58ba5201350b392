from __future__ import annotations

import logging

from dashboard.constants import CREDITS_TABLE, PURCHASES_TABLE, THEMES_TABLE
from dashboard.data.synchronizers import EntitySynchronizer, ValidationError
from dashboard.notifications import LogNotifier

logger = logging.getLogger(__name__)


class CreditsLedger(EntitySynchronizer):
    """Append-only credits ledger; the balance is the sum of all amounts."""

    table = CREDITS_TABLE
    entity = "credits transaction"
    plural = "credits"
    owner_column = "user_id"
    order = "created_at.desc"
    prepend = True

    def record(self, amount, reason="", kind="adjustment"):
        try:
            amount = int(amount)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid credits amount: {amount!r}") from exc
        return self.create({"amount": amount, "reason": reason, "type": kind})

    def update(self, row_id, patch):
        raise ValidationError("Credits transactions cannot be modified")

    def delete(self, row_id):
        raise ValidationError("Credits transactions cannot be deleted")

    @property
    def total(self) -> int:
        return sum(int(row.get("amount") or 0) for row in self.rows)


class PurchaseSynchronizer(EntitySynchronizer):
    table = PURCHASES_TABLE
    entity = "purchase"
    plural = "purchases"
    owner_column = "user_id"
    order = "created_at.asc"

    def owned_item_ids(self, item_type=None):
        return {
            row.get("item_id")
            for row in self.rows
            if item_type is None or row.get("item_type") == item_type
        }


class RewardsStore:
    def __init__(self, client, ledger: CreditsLedger, purchases: PurchaseSynchronizer | None = None, notifier=None):
        self.client = client
        self.ledger = ledger
        self.notifier = notifier or ledger.notifier or LogNotifier()
        self.purchases = purchases or PurchaseSynchronizer(client, notifier=self.notifier)

    def load(self):
        self.ledger.load()
        self.purchases.load()

    def catalog(self):
        result = self.client.select(THEMES_TABLE, order="price.asc")
        if not result.ok:
            self.notifier.notify("Error fetching store", str(result.error), variant="destructive")
            return []
        return list(result.data)

    def owned_item_ids(self, item_type=None):
        return self.purchases.owned_item_ids(item_type)

    def can_afford(self, price) -> bool:
        return self.ledger.total >= int(price)

    def purchase(self, item_type, item_id, price):
        price = int(price)
        if item_id in self.owned_item_ids(item_type):
            self.notifier.notify("Already owned", f"You already own this {item_type}")
            return None
        if not self.can_afford(price):
            self.notifier.notify(
                "Not enough credits",
                f"You need {price - self.ledger.total} more credits",
                variant="destructive",
            )
            return None
        purchase = self.purchases.create(
            {"item_type": item_type, "item_id": item_id, "price": price}
        )
        if purchase is None:
            return None
        spend = self.ledger.record(-price, f"Purchased {item_type}: {item_id}", "purchase")
        if spend is None:
            logger.warning("Rolling back purchase %s after failed spend", purchase.get("id"))
            self.purchases.delete(purchase["id"])
            return None
        self.notifier.notify("Purchase complete", f"{price} credits spent")
        return purchase
