"""Tests for the advisory adapter (no network: fake clients only)."""
import asyncio
from decimal import Decimal

from sheepfold import advisor
from sheepfold.advisor import analyze, build_prompt, summarize_farm, FAILURE_MESSAGE, NO_RESULT_MESSAGE
from sheepfold.models import CalendarEvent, EventType, Transaction, TransactionType
from sheepfold.records import seed_sheep, seed_transactions


class FakeClient:
    def __init__(self, reply="", error=None, delay=0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.prompts = []

    async def generate(self, prompt):
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.reply


def farm():
    events = [
        CalendarEvent(type=EventType.VACCINE, title="تطعيم جدري", date="2024-05-10"),
        CalendarEvent(type=EventType.FEED, title="شراء شعير", date="2024-05-12"),
        CalendarEvent(type=EventType.FEED, title="منجز", date="2024-05-01", is_completed=True),
    ]
    transactions = seed_transactions() + [
        Transaction(type=TransactionType.PURCHASE, amount="250", date="2023-11-01"),
    ]
    return seed_sheep(), transactions, events


class TestFarmFigures:
    """Tests for the figures fed into the prompt."""

    def test_summary(self):
        figures = summarize_farm(*farm())

        assert figures.total_sheep == 4
        assert figures.sick_or_treatment == 2
        assert figures.total_income == Decimal("1200")
        assert figures.total_expenses == Decimal("750")
        assert figures.pending_events == "تطعيم جدري (2024-05-10), شراء شعير (2024-05-12)"

    def test_prompt_embeds_figures(self):
        prompt = build_prompt(summarize_farm(*farm()))

        assert "عدد القطيع: 4" in prompt
        assert "عدد الحالات المريضة/تحت العلاج: 2" in prompt
        assert "إجمالي المبيعات: 1200 ريال" in prompt
        assert "إجمالي المصروفات: 750 ريال" in prompt
        assert "تطعيم جدري (2024-05-10)" in prompt
        assert "منجز" not in prompt

    def test_prompt_without_pending_events(self):
        sheep, transactions, _ = farm()
        prompt = build_prompt(summarize_farm(sheep, transactions, []))
        assert advisor.NO_PENDING_EVENTS in prompt


class TestAnalyze:
    """Tests for analyze() results and fallbacks."""

    def test_returns_generated_text(self):
        client = FakeClient(reply="نصيحة مفيدة")
        result = asyncio.run(analyze(*farm(), client=client))

        assert result == "نصيحة مفيدة"
        assert len(client.prompts) == 1

    def test_empty_reply(self):
        result = asyncio.run(analyze(*farm(), client=FakeClient(reply="")))
        assert result == NO_RESULT_MESSAGE

    def test_service_failure(self):
        """Test that a failing service yields the fallback string, not an exception."""
        result = asyncio.run(analyze(*farm(), client=FakeClient(error=ConnectionError("offline"))))
        assert result == FAILURE_MESSAGE

    def test_timeout(self):
        """Test that a slow service is cut off and yields the fallback string."""
        client = FakeClient(reply="متأخر", delay=1.0)
        result = asyncio.run(analyze(*farm(), client=client, timeout=0.05))
        assert result == FAILURE_MESSAGE

    def test_client_construction_failure(self, monkeypatch):
        """Test that a client that cannot be built (e.g. no credential) is a failure too."""
        def broken(*args, **kwargs):
            raise RuntimeError("no api key")

        monkeypatch.setattr(advisor, "AdvisorClient", broken)
        result = asyncio.run(analyze(*farm()))
        assert result == FAILURE_MESSAGE
