from __future__ import annotations

from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from .records import Record, field_value, format_display, format_price
from .rules import FORM_FIELD, FRUIT_FIELD, RETAIL_PRICE_UNIT_FIELD
from .store import LoadStatus


class RecordItem(BaseModel):
    fruit: str
    form: str
    price: str
    unit: str
    display: str
    fields: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_record(cls, record: Record) -> "RecordItem":
        return cls(
            fruit=field_value(record, FRUIT_FIELD),
            form=field_value(record, FORM_FIELD),
            price=format_price(record),
            unit=field_value(record, RETAIL_PRICE_UNIT_FIELD),
            display=format_display(record),
            fields=dict(record),
        )


class RecordsResponse(BaseModel):
    status: LoadStatus
    query: str = ""
    count: int = 0
    total: int = 0
    error: Optional[str] = Field(default=None, examples=[None])
    items: List[RecordItem] = Field(default_factory=list)


class StatusResponse(BaseModel):
    status: LoadStatus
    generation: int = 0
    total: int = 0
    error: Optional[str] = None


class HealthResponse(BaseModel):
    ok: bool = True
