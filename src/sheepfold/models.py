"""Farm records: sheep, money transactions, calendar events and feed stock level."""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from uuid import uuid4


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    SICK = "sick"
    TREATMENT = "treatment"

class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"

class TransactionType(str, Enum):
    SALE = "sale"
    PURCHASE = "purchase"
    EXPENSE = "expense"

class EventType(str, Enum):
    VACCINE = "vaccine"
    FEED = "feed"

class FeedStockStatus(str, Enum):
    GOOD = "good"
    LOW = "low"
    CRITICAL = "critical"


# Display labels
STATUS_LABELS = {
    HealthStatus.HEALTHY: "سليم",
    HealthStatus.SICK: "مريض",
    HealthStatus.TREATMENT: "تحت العلاج",
}
GENDER_LABELS = {
    Gender.MALE: "ذكر",
    Gender.FEMALE: "أنثى",
}
TRANSACTION_LABELS = {
    TransactionType.SALE: "بيع",
    TransactionType.PURCHASE: "شراء",
    TransactionType.EXPENSE: "مصروف",
}
EVENT_LABELS = {
    EventType.VACCINE: "تطعيم",
    EventType.FEED: "تغذية",
}
STOCK_LABELS = {
    FeedStockStatus.GOOD: "جيد",
    FeedStockStatus.LOW: "منخفض",
    FeedStockStatus.CRITICAL: "حرج",
}


def new_id() -> str:
    """Random 128-bit identifier."""
    return uuid4().hex


def parse_amount(value) -> Decimal:
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Amount must be finite: {value!r}")
    return amount


def _as_date(value) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


@dataclass
class Sheep:
    tag_id: str
    age: int # in months
    gender: Gender
    status: HealthStatus = HealthStatus.HEALTHY
    notes: str | None = None
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        self.gender = Gender(self.gender)
        self.status = HealthStatus(self.status)
        if isinstance(self.age, bool) or not isinstance(self.age, int):
            raise TypeError(f"Age must be a whole number of months: {self.age!r}")
        if self.age < 0:
            raise ValueError("Age cannot be negative.")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tag_id": self.tag_id,
            "age": self.age,
            "status": self.status.value,
            "gender": self.gender.value,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Sheep":
        return cls(
            id=str(data["id"]),
            tag_id=str(data["tag_id"]),
            age=data["age"],
            status=data["status"],
            gender=data["gender"],
            notes=data.get("notes"),
        )


@dataclass
class Transaction:
    type: TransactionType
    amount: Decimal
    date: date
    notes: str | None = None
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        self.type = TransactionType(self.type)
        self.amount = parse_amount(self.amount)
        self.date = _as_date(self.date)
        if self.amount < 0:
            raise ValueError("Amount cannot be negative.")

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.SALE

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "amount": str(self.amount), # Decimal kept exact as text
            "date": self.date.isoformat(),
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        return cls(
            id=str(data["id"]),
            type=data["type"],
            amount=data["amount"],
            date=data["date"],
            notes=data.get("notes"),
        )


@dataclass
class CalendarEvent:
    type: EventType
    title: str
    date: date
    is_completed: bool = False
    details: str | None = None
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        self.type = EventType(self.type)
        self.date = _as_date(self.date)
        if not isinstance(self.is_completed, bool):
            raise TypeError(f"is_completed must be a boolean: {self.is_completed!r}")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "date": self.date.isoformat(),
            "is_completed": self.is_completed,
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CalendarEvent":
        return cls(
            id=str(data["id"]),
            type=data["type"],
            title=str(data["title"]),
            date=data["date"],
            is_completed=data.get("is_completed", False),
            details=data.get("details"),
        )
