"""Screen selection and alert refresh for one conversation."""
from datetime import date
from enum import Enum
from typing import Callable

from sheepfold.alerts import Alert, derive_alerts
from sheepfold.records import FarmSnapshot


class Screen(str, Enum):
    HERD = "herd"
    HEALTH = "health"
    FINANCE = "finance"
    ADVISOR = "advisor"


class ViewController:
    """
    Owns the selected screen, the notification panel flag and the current
    alert list. Alerts are recomputed from a fresh snapshot on every screen
    change, data change and panel open; nothing is cached across a mutation.
    """

    def __init__(self, load_snapshot: Callable[[], FarmSnapshot], clock: Callable[[], date] = date.today):
        self._load_snapshot = load_snapshot
        self._clock = clock
        self.screen = Screen.HERD
        self.notifications_open = False
        self.alerts: list[Alert] = []
        self.refresh()

    @property
    def has_alerts(self) -> bool:
        return len(self.alerts) > 0

    def refresh(self) -> list[Alert]:
        snapshot = self._load_snapshot()
        self.alerts = derive_alerts(snapshot.sheep, snapshot.events, snapshot.feed_stock, self._clock())
        return self.alerts

    def select(self, screen: Screen) -> list[Alert]:
        self.screen = Screen(screen)
        return self.refresh()

    def notify_data_changed(self) -> list[Alert]:
        return self.refresh()

    def open_notifications(self) -> list[Alert]:
        self.notifications_open = True
        return self.refresh()

    def close_notifications(self):
        self.notifications_open = False
