"""Entity collections: whole-snapshot load/save against the key-value store.

A key that was never written, or one whose value cannot be read back into
records, yields the seed collection instead of an error.
"""
import logging
from dataclasses import dataclass, replace
from datetime import date, timedelta

from sheepfold.models import (
    Sheep, Transaction, CalendarEvent, FeedStockStatus, HealthStatus, Gender,
    TransactionType, EventType,
)
from sheepfold.store import KeyValueStore, SHEEP_KEY, TRANS_KEY, EVENTS_KEY, STOCK_KEY

logger = logging.getLogger(__name__)

DEFAULT_FEED_STOCK = FeedStockStatus.GOOD


# Seed data shown to a new farmer before anything is saved
def seed_sheep() -> list[Sheep]:
    return [
        Sheep(id="1", tag_id="101", age=12, status=HealthStatus.HEALTHY, gender=Gender.FEMALE),
        Sheep(id="2", tag_id="102", age=24, status=HealthStatus.SICK, gender=Gender.FEMALE, notes="سعال خفيف"),
        Sheep(id="3", tag_id="103", age=6, status=HealthStatus.HEALTHY, gender=Gender.MALE),
        Sheep(id="4", tag_id="104", age=36, status=HealthStatus.TREATMENT, gender=Gender.FEMALE, notes="تحت المضاد الحيوي"),
    ]

def seed_transactions() -> list[Transaction]:
    return [
        Transaction(id="1", type=TransactionType.EXPENSE, amount="500", date="2023-10-01", notes="شراء أعلاف"),
        Transaction(id="2", type=TransactionType.SALE, amount="1200", date="2023-10-15", notes="بيع خروف"),
    ]

def seed_events(today: date | None = None) -> list[CalendarEvent]:
    today = today or date.today()
    return [
        CalendarEvent(id="1", type=EventType.VACCINE, title="تطعيم جدري", date=today, details="القطيع بالكامل"),
        CalendarEvent(id="2", type=EventType.FEED, title="شراء شعير", date=today + timedelta(days=2)),
    ]


def _load_list(store: KeyValueStore, key: str, parse, seed):
    try:
        raw = store.get(key)
    except ValueError:
        logger.warning("Unreadable JSON under %s, using seed data", key)
        return seed()
    if raw is None:
        return seed()
    try:
        return [parse(item) for item in raw]
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Malformed records under %s (%s), using seed data", key, e)
        return seed()


# Sheep
def load_sheep(store: KeyValueStore) -> list[Sheep]:
    return _load_list(store, SHEEP_KEY, Sheep.from_dict, seed_sheep)

def save_sheep(store: KeyValueStore, sheep: list[Sheep]):
    store.set(SHEEP_KEY, [s.to_dict() for s in sheep])

def add_sheep(store: KeyValueStore, new_sheep: Sheep) -> list[Sheep]:
    """Newest first."""
    updated = [new_sheep] + load_sheep(store)
    save_sheep(store, updated)
    return updated

def set_sheep_status(store: KeyValueStore, sheep_id: str, status: HealthStatus) -> list[Sheep]:
    status = HealthStatus(status)
    updated = [replace(s, status=status) if s.id == sheep_id else s for s in load_sheep(store)]
    save_sheep(store, updated)
    return updated

def filter_sheep(sheep: list[Sheep], status: HealthStatus | None = None, search: str = "") -> list[Sheep]:
    """Status filter (None means all) combined with a tag substring search."""
    return [
        s for s in sheep
        if (status is None or s.status == status) and search in s.tag_id
    ]


# Transactions
def load_transactions(store: KeyValueStore) -> list[Transaction]:
    return _load_list(store, TRANS_KEY, Transaction.from_dict, seed_transactions)

def save_transactions(store: KeyValueStore, transactions: list[Transaction]):
    store.set(TRANS_KEY, [t.to_dict() for t in transactions])

def add_transaction(store: KeyValueStore, transaction: Transaction) -> list[Transaction]:
    """Append-only ledger, newest first."""
    updated = [transaction] + load_transactions(store)
    save_transactions(store, updated)
    return updated


# Calendar events
def load_events(store: KeyValueStore, today: date | None = None) -> list[CalendarEvent]:
    return _load_list(store, EVENTS_KEY, CalendarEvent.from_dict, lambda: seed_events(today))

def save_events(store: KeyValueStore, events: list[CalendarEvent]):
    store.set(EVENTS_KEY, [e.to_dict() for e in events])

def add_event(store: KeyValueStore, event: CalendarEvent) -> list[CalendarEvent]:
    """Insert and keep the collection sorted ascending by date."""
    updated = sorted(load_events(store) + [event], key=lambda e: e.date)
    save_events(store, updated)
    return updated

def toggle_event(store: KeyValueStore, event_id: str) -> list[CalendarEvent]:
    updated = [
        replace(e, is_completed=not e.is_completed) if e.id == event_id else e
        for e in load_events(store)
    ]
    save_events(store, updated)
    return updated


# Feed stock
def load_feed_stock(store: KeyValueStore) -> FeedStockStatus:
    try:
        raw = store.get(STOCK_KEY)
    except ValueError:
        logger.warning("Unreadable JSON under %s, using default", STOCK_KEY)
        return DEFAULT_FEED_STOCK
    if raw is None:
        return DEFAULT_FEED_STOCK
    try:
        return FeedStockStatus(raw)
    except (TypeError, ValueError):
        logger.warning("Unknown feed stock value %r, using default", raw)
        return DEFAULT_FEED_STOCK

def save_feed_stock(store: KeyValueStore, status: FeedStockStatus):
    store.set(STOCK_KEY, FeedStockStatus(status).value)


@dataclass
class FarmSnapshot:
    """Everything the alert pass needs, read in one go."""
    sheep: list[Sheep]
    events: list[CalendarEvent]
    feed_stock: FeedStockStatus

def load_snapshot(store: KeyValueStore, today: date | None = None) -> FarmSnapshot:
    return FarmSnapshot(
        sheep=load_sheep(store),
        events=load_events(store, today),
        feed_stock=load_feed_stock(store),
    )
