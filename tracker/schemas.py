"""Record schemas validated at the store boundary.

Raw rows arrive as loosely shaped dicts (camelCase from the browser export,
snake_case from Python callers). They are checked here once and turned into
the frozen dataclasses of ``tracker.domain``; nothing past this module
re-validates.
"""

from datetime import date, datetime, timezone
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from tracker.domain import Budget, Category, Transaction, UNCATEGORIZED_COLOR


class RecordError(ValueError):
    """A raw record failed validation."""

    def __init__(self, kind: str, raw, details: str):
        self.kind = kind
        self.raw = raw
        self.details = details
        super().__init__(f"invalid {kind} record: {details}")


def _as_naive_utc(value):
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if isinstance(value, datetime) and value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _as_str_id(value):
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return str(value)
    return value


class TransactionRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    type: Literal["income", "expense"]
    amount: float = Field(ge=0)
    description: str = ""
    date: datetime
    category_id: Optional[str] = Field(
        default=None, alias="categoryId", validation_alias=AliasChoices("categoryId", "category_id")
    )
    notes: Optional[str] = None
    created_at: Optional[datetime] = Field(
        default=None, alias="createdAt", validation_alias=AliasChoices("createdAt", "created_at")
    )

    @field_validator("id", "category_id", mode="before")
    @classmethod
    def _coerce_ids(cls, value):
        return _as_str_id(value)

    @field_validator("date", "created_at", mode="before")
    @classmethod
    def _coerce_dates(cls, value):
        return _as_naive_utc(value)

    def to_domain(self) -> Transaction:
        return Transaction(
            id=self.id,
            type=self.type,
            amount=self.amount,
            description=self.description,
            date=self.date,
            category_id=self.category_id,
            notes=self.notes,
            created_at=self.created_at,
        )


class CategoryRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    type: Literal["income", "expense"]
    color: str = UNCATEGORIZED_COLOR

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return _as_str_id(value)

    def to_domain(self) -> Category:
        return Category(id=self.id, name=self.name, type=self.type, color=self.color)


class BudgetRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    # the browser kept "limit", the server model called it "amount"
    limit: float = Field(ge=0, validation_alias=AliasChoices("limit", "amount"))
    category_id: Optional[str] = Field(
        default=None, alias="categoryId", validation_alias=AliasChoices("categoryId", "category_id", "category")
    )
    name: Optional[str] = None
    period: Literal["monthly", "yearly"] = "monthly"
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = None

    @field_validator("id", "category_id", mode="before")
    @classmethod
    def _coerce_ids(cls, value):
        return _as_str_id(value)

    @model_validator(mode="after")
    def _needs_target(self):
        if not self.category_id and not self.name:
            raise ValueError("budget needs a category_id or a name")
        return self

    def to_domain(self) -> Budget:
        return Budget(
            id=self.id,
            limit=self.limit,
            category_id=self.category_id,
            name=self.name,
            period=self.period,
            month=self.month,
            year=self.year,
        )


SCHEMAS = {
    "transaction": TransactionRecord,
    "category": CategoryRecord,
    "budget": BudgetRecord,
}


def parse_record(kind: str, raw: dict):
    """Validate one raw row and return the domain object, or raise RecordError."""
    schema = SCHEMAS[kind]
    try:
        return schema.model_validate(raw).to_domain()
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or kind}: {err['msg']}" for err in e.errors()
        )
        raise RecordError(kind, raw, details) from e


def parse_transaction(raw: dict) -> Transaction:
    return parse_record("transaction", raw)


def parse_category(raw: dict) -> Category:
    return parse_record("category", raw)


def parse_budget(raw: dict) -> Budget:
    return parse_record("budget", raw)


def dump_record(kind: str, obj) -> dict:
    """JSON-ready dict for a domain object, using the camelCase storage keys."""
    schema = SCHEMAS[kind]
    return schema.model_validate(obj, from_attributes=True).model_dump(
        mode="json", by_alias=True, exclude_none=True
    )
