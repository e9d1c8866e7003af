"""Derived farm figures and the alert pass.

Everything here is a pure function of its arguments (plus ``today``), so the
same snapshot always gives the same alerts in the same order.
"""
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from sheepfold.models import Sheep, Transaction, CalendarEvent, FeedStockStatus, HealthStatus, Gender

logger = logging.getLogger(__name__)

UPCOMING_WINDOW_DAYS = 3


class Severity(str, Enum):
    DANGER = "danger"
    WARNING = "warning"
    INFO = "info"

class AlertKind(str, Enum):
    FEED_STOCK = "feed_stock"
    UPCOMING_EVENT = "upcoming_event"
    MISSED_EVENT = "missed_event"
    SICK_SHEEP = "sick_sheep"


@dataclass(frozen=True)
class Alert:
    kind: AlertKind
    severity: Severity
    message: str


@dataclass(frozen=True)
class FinanceSummary:
    income: Decimal
    expense: Decimal
    balance: Decimal


@dataclass(frozen=True)
class HerdSummary:
    total: int
    healthy: int
    sick: int
    treatment: int
    male: int
    female: int


def finance_summary(transactions: list[Transaction] | None) -> FinanceSummary:
    """Sales are income, every other transaction type is an expense."""
    transactions = transactions or []
    income = sum((t.amount for t in transactions if t.is_income), Decimal("0"))
    expense = sum((t.amount for t in transactions if not t.is_income), Decimal("0"))
    return FinanceSummary(income=income, expense=expense, balance=income - expense)


def herd_summary(sheep: list[Sheep] | None) -> HerdSummary:
    sheep = sheep or []

    def count(predicate):
        return sum(1 for s in sheep if predicate(s))

    return HerdSummary(
        total=len(sheep),
        healthy=count(lambda s: s.status is HealthStatus.HEALTHY),
        sick=count(lambda s: s.status is HealthStatus.SICK),
        treatment=count(lambda s: s.status is HealthStatus.TREATMENT),
        male=count(lambda s: s.gender is Gender.MALE),
        female=count(lambda s: s.gender is Gender.FEMALE),
    )


def check_feed_stock(feed_stock) -> Alert | None:
    if feed_stock is None:
        return None
    try:
        status = FeedStockStatus(feed_stock)
    except (TypeError, ValueError):
        logger.warning("Ignoring unknown feed stock value %r", feed_stock)
        return None

    if status is FeedStockStatus.CRITICAL:
        return Alert(AlertKind.FEED_STOCK, Severity.DANGER, "تنبيه: مخزون العلف حرج جداً!")
    if status is FeedStockStatus.LOW:
        return Alert(AlertKind.FEED_STOCK, Severity.WARNING, "مخزون العلف منخفض، يرجى الشراء قريباً.")
    return None


def check_events(events: list[CalendarEvent] | None, today: date) -> list[Alert]:
    """Upcoming (within the next 3 days, today included) and missed events.

    Both conditions are tested separately for every incomplete event.
    """
    alerts = []
    for event in events or []:
        if event.is_completed:
            continue
        days_left = (event.date - today).days
        if 0 <= days_left <= UPCOMING_WINDOW_DAYS:
            alerts.append(Alert(
                AlertKind.UPCOMING_EVENT, Severity.INFO,
                f"تذكير: {event.title} يوم {event.date.isoformat()}",
            ))
        if event.date < today:
            alerts.append(Alert(
                AlertKind.MISSED_EVENT, Severity.WARNING,
                f"فائت: {event.title} ({event.date.isoformat()})",
            ))
    return alerts


def check_sick_sheep(sheep: list[Sheep] | None) -> Alert | None:
    # Sheep under treatment are already being handled
    sick_count = sum(1 for s in sheep or [] if s.status is HealthStatus.SICK)
    if sick_count > 0:
        return Alert(AlertKind.SICK_SHEEP, Severity.DANGER, f"يوجد {sick_count} حالات مريضة تحتاج عناية.")
    return None


def derive_alerts(sheep, events, feed_stock, today: date | None = None) -> list[Alert]:
    """Run all checks and return alerts in display order: stock, events, health."""
    today = today or date.today()
    alerts = []

    stock_alert = check_feed_stock(feed_stock)
    if stock_alert:
        alerts.append(stock_alert)

    alerts.extend(check_events(events, today))

    health_alert = check_sick_sheep(sheep)
    if health_alert:
        alerts.append(health_alert)

    return alerts
