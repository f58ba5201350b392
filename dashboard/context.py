from dataclasses import dataclass
from typing import Any


@dataclass
class DashboardContext:
    settings: Any
    client: Any
    notifier: Any
    hubs: Any
    tasks: Any
    habits: Any
    attendance: Any
    boards: Any
    ledger: Any
    rewards: Any

    @property
    def user_id(self):
        return self.client.user_id
