"""Advisory summary from an external text-generation service.

The caller only ever gets a string back: failures, timeouts and empty
responses are turned into fixed Arabic messages.
"""
import asyncio
import logging
import textwrap
from dataclasses import dataclass
from decimal import Decimal

from openai import AsyncOpenAI

from sheepfold.config import cfg
from sheepfold.models import HealthStatus, TransactionType

logger = logging.getLogger(__name__)

NO_RESULT_MESSAGE = "عذراً، لم أتمكن من تحليل البيانات حالياً."
FAILURE_MESSAGE = "حدث خطأ أثناء الاتصال بالمستشار الذكي. يرجى التحقق من الاتصال بالإنترنت."
NO_PENDING_EVENTS = "لا يوجد مهام قادمة"

EXPENSE_TYPES = (TransactionType.PURCHASE, TransactionType.EXPENSE)


@dataclass(frozen=True)
class FarmFigures:
    total_sheep: int
    sick_or_treatment: int
    total_income: Decimal
    total_expenses: Decimal
    pending_events: str


def summarize_farm(sheep, transactions, events) -> FarmFigures:
    pending = ", ".join(
        f"{e.title} ({e.date.isoformat()})" for e in events if not e.is_completed
    )
    return FarmFigures(
        total_sheep=len(sheep),
        sick_or_treatment=sum(
            1 for s in sheep if s.status in (HealthStatus.SICK, HealthStatus.TREATMENT)
        ),
        total_income=sum(
            (t.amount for t in transactions if t.type is TransactionType.SALE), Decimal("0")
        ),
        total_expenses=sum(
            (t.amount for t in transactions if t.type in EXPENSE_TYPES), Decimal("0")
        ),
        pending_events=pending,
    )


def build_prompt(figures: FarmFigures) -> str:
    return textwrap.dedent(f"""\
        أنت مستشار زراعي وبيطري خبير متخصص في الأغنام. قم بتحليل بيانات المزرعة التالية وقدم نصيحة مقتضبة وعملية للمزارع (باللغة العربية).

        البيانات:
        - عدد القطيع: {figures.total_sheep}
        - عدد الحالات المريضة/تحت العلاج: {figures.sick_or_treatment}
        - إجمالي المبيعات: {figures.total_income} ريال
        - إجمالي المصروفات: {figures.total_expenses} ريال
        - المهام القادمة: {figures.pending_events or NO_PENDING_EVENTS}

        المطلوب:
        1. تقييم سريع للحالة الصحية للقطيع.
        2. نصيحة مالية بناءً على الدخل والمصروفات.
        3. تذكير بأهمية المهام القادمة (إن وجدت) أو اقتراح إجراء وقائي عام.

        اجعل الرد مشجعاً، بسيطاً، ومقسماً إلى نقاط واضحة. لا تزد عن 150 كلمة.
        """)


class AdvisorClient:
    """
    Thin wrapper over an OpenAI-compatible chat completions endpoint
    (Gemini's by default). One request per call, no retries.
    """

    def __init__(self, api_key: str | None = None, model: str | None = None,
                 base_url: str | None = None, timeout: float | None = None):
        self.model = model or cfg.ADVISOR_MODEL
        self._client = AsyncOpenAI(
            api_key=api_key or cfg.GEMINI_API_KEY,
            base_url=base_url or cfg.ADVISOR_BASE_URL,
            timeout=timeout or cfg.ADVISOR_TIMEOUT,
            max_retries=0,
        )

    async def generate(self, prompt: str) -> str:
        resp = await self._client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
        )
        if not resp.choices:
            return ""
        return (resp.choices[0].message.content or "").strip()


async def analyze(sheep, transactions, events, client=None, timeout: float | None = None) -> str:
    prompt = build_prompt(summarize_farm(sheep, transactions, events))
    timeout = cfg.ADVISOR_TIMEOUT if timeout is None else timeout

    try:
        if client is None:
            client = AdvisorClient()
        text = await asyncio.wait_for(client.generate(prompt), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Advisor request timed out after %.0fs", timeout)
        return FAILURE_MESSAGE
    except Exception:
        logger.exception("Advisor request failed")
        return FAILURE_MESSAGE

    return text or NO_RESULT_MESSAGE
