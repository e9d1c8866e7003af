"""Tests for the alert pass and the derived farm figures."""
import random
from datetime import date, timedelta
from decimal import Decimal

from sheepfold.alerts import (
    AlertKind, Severity, derive_alerts, finance_summary, herd_summary,
)
from sheepfold.models import (
    Sheep, Transaction, CalendarEvent, FeedStockStatus, HealthStatus, Gender,
    TransactionType, EventType,
)

TODAY = date(2024, 5, 10)


def make_sheep(*statuses):
    return [
        Sheep(tag_id=str(100 + i), age=12, gender=Gender.FEMALE, status=status)
        for i, status in enumerate(statuses)
    ]

def make_event(days_from_today, completed=False, title="تطعيم"):
    return CalendarEvent(
        type=EventType.VACCINE,
        title=title,
        date=TODAY + timedelta(days=days_from_today),
        is_completed=completed,
    )


class TestFeedStockAlert:
    """Tests for the feed stock part of the alert pass."""

    def test_good_stock_has_no_alert(self):
        """Test that good stock produces nothing."""
        assert derive_alerts([], [], FeedStockStatus.GOOD, TODAY) == []

    def test_low_stock_is_warning(self):
        """Test that low stock produces exactly one warning."""
        alerts = derive_alerts([], [], FeedStockStatus.LOW, TODAY)
        assert len(alerts) == 1
        assert alerts[0].kind is AlertKind.FEED_STOCK
        assert alerts[0].severity is Severity.WARNING

    def test_critical_stock_is_danger(self):
        """Test that critical stock produces exactly one danger alert."""
        alerts = derive_alerts([], [], FeedStockStatus.CRITICAL, TODAY)
        assert len(alerts) == 1
        assert alerts[0].severity is Severity.DANGER
        assert alerts[0].message == "تنبيه: مخزون العلف حرج جداً!"

    def test_plain_string_value_is_accepted(self):
        """Test that the raw stored string works as well as the enum."""
        alerts = derive_alerts([], [], "low", TODAY)
        assert [a.severity for a in alerts] == [Severity.WARNING]

    def test_unknown_value_is_ignored(self):
        """Test that an unknown stock value never raises."""
        assert derive_alerts([], [], "empty", TODAY) == []


class TestEventAlerts:
    """Tests for upcoming and missed event alerts."""

    def test_upcoming_window_is_inclusive(self):
        """Test that today through today+3 are all upcoming."""
        events = [make_event(d) for d in range(0, 4)]
        alerts = derive_alerts([], events, FeedStockStatus.GOOD, TODAY)

        assert len(alerts) == 4
        assert all(a.kind is AlertKind.UPCOMING_EVENT for a in alerts)
        assert all(a.severity is Severity.INFO for a in alerts)

    def test_beyond_window_is_silent(self):
        """Test that an event 4 days away produces nothing."""
        assert derive_alerts([], [make_event(4)], FeedStockStatus.GOOD, TODAY) == []

    def test_past_event_is_missed(self):
        """Test that an incomplete past event is a warning."""
        alerts = derive_alerts([], [make_event(-1, title="شراء شعير")], FeedStockStatus.GOOD, TODAY)

        assert len(alerts) == 1
        assert alerts[0].kind is AlertKind.MISSED_EVENT
        assert alerts[0].severity is Severity.WARNING
        assert alerts[0].message == "فائت: شراء شعير (2024-05-09)"

    def test_upcoming_message(self):
        """Test the reminder wording."""
        alerts = derive_alerts([], [make_event(2, title="تطعيم جدري")], FeedStockStatus.GOOD, TODAY)
        assert alerts[0].message == "تذكير: تطعيم جدري يوم 2024-05-12"

    def test_completed_events_never_alert(self):
        """Test that completed events are skipped whatever their date."""
        events = [make_event(d, completed=True) for d in (-5, -1, 0, 2)]
        assert derive_alerts([], events, FeedStockStatus.GOOD, TODAY) == []

    def test_every_missed_event_is_listed(self):
        """Test that overdue events are neither merged nor capped."""
        events = [make_event(-d) for d in range(1, 11)]
        alerts = derive_alerts([], events, FeedStockStatus.GOOD, TODAY)
        assert len(alerts) == 10

    def test_follows_collection_order(self):
        """Test that event alerts keep the order of the collection."""
        events = [make_event(-2, title="a"), make_event(1, title="b"), make_event(-1, title="c")]
        alerts = derive_alerts([], events, FeedStockStatus.GOOD, TODAY)
        assert [a.kind for a in alerts] == [
            AlertKind.MISSED_EVENT, AlertKind.UPCOMING_EVENT, AlertKind.MISSED_EVENT,
        ]


class TestSickAlert:
    """Tests for the herd health alert."""

    def test_counts_only_sick(self):
        """Test that treatment does not count toward the sick alert."""
        sheep = make_sheep(HealthStatus.HEALTHY, HealthStatus.SICK, HealthStatus.TREATMENT, HealthStatus.SICK)
        alerts = derive_alerts(sheep, [], FeedStockStatus.GOOD, TODAY)

        assert len(alerts) == 1
        assert alerts[0].kind is AlertKind.SICK_SHEEP
        assert alerts[0].severity is Severity.DANGER
        assert alerts[0].message == "يوجد 2 حالات مريضة تحتاج عناية."

    def test_treatment_only_has_no_alert(self):
        """Test that a herd under treatment but not sick is quiet."""
        sheep = make_sheep(HealthStatus.TREATMENT, HealthStatus.HEALTHY)
        assert derive_alerts(sheep, [], FeedStockStatus.GOOD, TODAY) == []


class TestAlertPass:
    """Tests for ordering, idempotence and missing inputs."""

    def test_display_order(self):
        """Test stock first, then events, then health."""
        sheep = make_sheep(HealthStatus.SICK)
        events = [make_event(1), make_event(-3)]
        alerts = derive_alerts(sheep, events, FeedStockStatus.CRITICAL, TODAY)

        assert [a.kind for a in alerts] == [
            AlertKind.FEED_STOCK,
            AlertKind.UPCOMING_EVENT,
            AlertKind.MISSED_EVENT,
            AlertKind.SICK_SHEEP,
        ]

    def test_idempotent(self):
        """Test that two passes over the same snapshot agree."""
        sheep = make_sheep(HealthStatus.SICK, HealthStatus.HEALTHY)
        events = [make_event(0), make_event(-1), make_event(7)]
        first = derive_alerts(sheep, events, FeedStockStatus.LOW, TODAY)
        second = derive_alerts(sheep, events, FeedStockStatus.LOW, TODAY)
        assert first == second

    def test_missing_inputs(self):
        """Test that None inputs yield an empty list instead of an error."""
        assert derive_alerts(None, None, None, TODAY) == []


class TestFinanceSummary:
    """Tests for income / expense / balance."""

    def test_example_totals(self):
        """Test a sale of 1200 against an expense of 500."""
        transactions = [
            Transaction(type=TransactionType.SALE, amount="1200", date="2023-10-15"),
            Transaction(type=TransactionType.EXPENSE, amount="500", date="2023-10-01"),
        ]
        summary = finance_summary(transactions)

        assert summary.income == Decimal("1200")
        assert summary.expense == Decimal("500")
        assert summary.balance == Decimal("700")

    def test_purchase_counts_as_expense(self):
        """Test that purchases are expenses."""
        transactions = [Transaction(type=TransactionType.PURCHASE, amount="300", date="2024-01-01")]
        summary = finance_summary(transactions)
        assert summary.expense == Decimal("300")
        assert summary.balance == Decimal("-300")

    def test_order_independent(self):
        """Test that any permutation gives the same totals."""
        transactions = [
            Transaction(type=TransactionType.SALE, amount="0.10", date="2024-01-01"),
            Transaction(type=TransactionType.SALE, amount="0.20", date="2024-01-02"),
            Transaction(type=TransactionType.EXPENSE, amount="0.30", date="2024-01-03"),
            Transaction(type=TransactionType.PURCHASE, amount="99.99", date="2024-01-04"),
        ]
        expected = finance_summary(transactions)
        shuffled = transactions[:]
        random.Random(7).shuffle(shuffled)

        assert finance_summary(shuffled) == expected
        assert finance_summary(list(reversed(transactions))) == expected
        # Decimal arithmetic, no float artifacts
        assert expected.income == Decimal("0.30")

    def test_empty(self):
        """Test that no transactions means zero everywhere."""
        summary = finance_summary([])
        assert summary.income == summary.expense == summary.balance == 0


class TestHerdSummary:
    """Tests for herd counts."""

    def test_counts(self):
        """Test counts by status and gender."""
        sheep = make_sheep(HealthStatus.HEALTHY, HealthStatus.SICK, HealthStatus.TREATMENT, HealthStatus.SICK)
        sheep[0].gender = Gender.MALE
        summary = herd_summary(sheep)

        assert summary.total == 4
        assert (summary.healthy, summary.sick, summary.treatment) == (1, 2, 1)
        assert (summary.male, summary.female) == (1, 3)
